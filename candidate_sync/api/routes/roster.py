import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from candidate_sync.core.datetimes import format_datetime
from candidate_sync.schemas.roster import (
    RosterEntryIn,
    RosterEntryOut,
    RosterKey,
    RosterStatsOut,
    RosterUpdateRequest,
    RosterWriteOut,
)
from candidate_sync.services.errors import NetworkError, ParseError, RemoteWriteError, SyncError
from candidate_sync.services.roster import RosterRepository, get_roster_repository, summarize_roster

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=list[RosterEntryOut])
async def list_roster(roster=Depends(get_roster_repository)) -> list[RosterEntryOut]:
    try:
        entries = await roster.list()
    except SyncError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    return [RosterEntryOut(**entry.model_dump(), status=entry.status) for entry in entries]


@router.get("/stats", response_model=RosterStatsOut)
async def roster_stats(roster=Depends(get_roster_repository)) -> RosterStatsOut:
    try:
        entries = await roster.list()
    except SyncError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    return RosterStatsOut(**summarize_roster(entries))


@router.post("", response_model=RosterWriteOut, status_code=status.HTTP_201_CREATED)
async def create_roster_entry(
    payload: RosterEntryIn,
    roster=Depends(get_roster_repository),
) -> RosterWriteOut:
    try:
        result = await roster.create_unique(payload.to_entry(format_datetime()))
    except (NetworkError, ParseError) as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except RemoteWriteError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    if not result.success:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=result.message)

    await _refresh_quietly(roster)
    return RosterWriteOut(success=True, message=result.message)


@router.put("", response_model=RosterWriteOut)
async def update_roster_entry(
    payload: RosterUpdateRequest,
    roster=Depends(get_roster_repository),
) -> RosterWriteOut:
    key = RosterKey(name=payload.key.name, email=payload.key.email)
    try:
        result = await roster.update(key, payload.entry.to_entry(format_datetime()))
    except NetworkError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except RemoteWriteError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    await _refresh_quietly(roster)
    return RosterWriteOut(success=True, message=result.message)


@router.delete("", response_model=RosterWriteOut)
async def delete_roster_entry(
    name: str = Query(..., min_length=1),
    email: str = Query(..., min_length=1),
    roster=Depends(get_roster_repository),
) -> RosterWriteOut:
    try:
        result = await roster.delete(RosterKey(name=name, email=email))
    except NetworkError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except RemoteWriteError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    await _refresh_quietly(roster)
    return RosterWriteOut(success=True, message=result.message)


async def _refresh_quietly(roster: RosterRepository) -> None:
    try:
        await roster.refresh()
    except SyncError as exc:
        logger.warning("roster refresh after write failed error=%s", exc)
