from fastapi import APIRouter, Depends, HTTPException, status

from candidate_sync.core.config import get_settings
from candidate_sync.schemas.candidates import CandidateOut
from candidate_sync.schemas.transitions import DecisionRequest, ProcessingOut, RefreshOut, TransitionOut
from candidate_sync.services.errors import SyncError
from candidate_sync.services.normalizer import describe_candidate
from candidate_sync.services.roster import get_roster_repository
from candidate_sync.services.selection import get_selection_queue
from candidate_sync.services.transitions import TransitionRequest, get_orchestrator

router = APIRouter()


@router.get("", response_model=list[CandidateOut])
async def list_selection(
    queue=Depends(get_selection_queue),
    orchestrator=Depends(get_orchestrator),
    settings=Depends(get_settings),
) -> list[CandidateOut]:
    try:
        candidates = await queue.list()
    except SyncError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    return [
        describe_candidate(
            candidate,
            skill_limit=settings.skill_preview_limit,
            preview_chars=settings.summary_preview_chars,
            processing=orchestrator.is_processing(candidate.email),
        )
        for candidate in candidates
    ]


@router.get("/processing", response_model=ProcessingOut)
async def list_processing(orchestrator=Depends(get_orchestrator)) -> ProcessingOut:
    return ProcessingOut(emails=sorted(orchestrator.processing))


@router.post("/decisions", response_model=TransitionOut)
async def decide(
    payload: DecisionRequest,
    queue=Depends(get_selection_queue),
    orchestrator=Depends(get_orchestrator),
) -> TransitionOut:
    if orchestrator.is_processing(payload.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="candidate is already being processed")

    candidate = queue.find(payload.email)
    if candidate is None and queue.snapshot is None:
        try:
            await queue.list()
        except SyncError as exc:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
        candidate = queue.find(payload.email)
    if candidate is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="candidate not found in selection queue")

    # The listing above may have yielded to another request for the same email.
    if orchestrator.is_processing(candidate.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="candidate is already being processed")

    orchestrator.select(candidate)
    outcome = await orchestrator.dispatch(TransitionRequest(candidate=candidate, decision=payload.decision))
    if not outcome.ok:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=outcome.to_out().model_dump(mode="json"),
        )
    return outcome.to_out()


@router.post("/refresh", response_model=RefreshOut)
async def refresh(
    queue=Depends(get_selection_queue),
    roster=Depends(get_roster_repository),
) -> RefreshOut:
    result = RefreshOut()
    try:
        result.selection_count = len(await queue.list())
    except SyncError as exc:
        result.errors.append(f"{queue.source.name}: {exc}")
    try:
        result.roster_count = len(await roster.list())
    except SyncError as exc:
        result.errors.append(f"{roster.source.name}: {exc}")
    return result
