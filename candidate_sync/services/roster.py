from __future__ import annotations

import logging
from collections.abc import Iterable
from functools import lru_cache
from typing import Any

import httpx

from candidate_sync.core.config import get_settings
from candidate_sync.schemas.candidates import natural_key
from candidate_sync.schemas.roster import RosterEntry, RosterKey, RosterWriteResult
from candidate_sync.services.errors import NetworkError, RemoteWriteError
from candidate_sync.services.normalizer import normalize_roster_entry
from candidate_sync.services.repository import TabularRepository
from candidate_sync.services.tabular import TabularSource

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "A candidate with this name and email combination already exists."


class RosterStoreClient:
    """JSON command client for the spreadsheet-backed roster store."""

    def __init__(self, url: str | None, *, client: httpx.AsyncClient | None = None) -> None:
        self.url = url
        self._client = client

    async def create(self, record: dict[str, str]) -> RosterWriteResult:
        return await self._send({"action": "create", **record})

    async def update(self, key: RosterKey, record: dict[str, str]) -> RosterWriteResult:
        return await self._send({"action": "update", **key.to_wire(), "data": record})

    async def delete(self, key: RosterKey) -> RosterWriteResult:
        return await self._send({"action": "delete", **key.to_wire()})

    async def _send(self, payload: dict[str, Any]) -> RosterWriteResult:
        if not self.url:
            raise NetworkError("roster store URL is not configured")

        if self._client is not None:
            response = await self._post(self._client, self.url, payload)
        else:
            async with httpx.AsyncClient() as temp_client:
                response = await self._post(temp_client, self.url, payload)

        try:
            body = response.json()
        except ValueError as exc:
            raise RemoteWriteError("roster store returned a non-JSON response") from exc
        if not isinstance(body, dict):
            raise RemoteWriteError("roster store returned an unexpected response")

        message = body.get("message") if isinstance(body.get("message"), str) else None
        if body.get("success") is False:
            raise RemoteWriteError(message or "Failed")
        return RosterWriteResult(success=True, message=message)

    async def _post(self, client: httpx.AsyncClient, url: str, payload: dict[str, Any]) -> httpx.Response:
        try:
            response = await client.post(url, json=payload, follow_redirects=True)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise NetworkError(f"roster store unreachable: {exc}") from exc
        if not response.is_success:
            raise NetworkError(f"roster store request failed: {response.status_code} {response.reason_phrase}".rstrip())
        return response


class RosterRepository(TabularRepository[RosterEntry]):
    """Roster read model plus create/update/delete keyed by ``(name, email)``."""

    def __init__(self, source: TabularSource, store: RosterStoreClient) -> None:
        super().__init__(source, normalize_roster_entry)
        self.store = store

    async def create(self, entry: RosterEntry) -> RosterWriteResult:
        result = await self.store.create(entry.to_record())
        logger.info("roster entry created email=%s", entry.email)
        return result

    async def update(self, key: RosterKey, entry: RosterEntry) -> RosterWriteResult:
        result = await self.store.update(key, entry.to_record())
        logger.info("roster entry updated key_email=%s email=%s", key.email, entry.email)
        return result

    async def delete(self, key: RosterKey) -> RosterWriteResult:
        result = await self.store.delete(key)
        logger.info("roster entry deleted key_email=%s", key.email)
        return result

    async def contains(self, name: str, email: str, *, fresh: bool = False) -> bool:
        """Whether ``(name, email)`` is on the roster.

        ``fresh`` re-lists the roster first instead of trusting the held snapshot.
        """
        entries = None if fresh else self.snapshot
        if entries is None:
            entries = await self.list()
        wanted = natural_key(name, email)
        return any(entry.key == wanted for entry in entries)

    async def create_unique(self, entry: RosterEntry) -> RosterWriteResult:
        """Create unless ``(name, email)`` is already on the roster.

        The check runs against the local snapshot only, so two operators racing
        on the same key can still both write.
        """
        if await self.contains(entry.name, entry.email):
            logger.info("roster create skipped duplicate email=%s", entry.email)
            return RosterWriteResult(success=False, message=DUPLICATE_MESSAGE)
        return await self.create(entry)


def summarize_roster(entries: Iterable[RosterEntry]) -> dict[str, int]:
    rows = list(entries)
    return {
        "total": len(rows),
        "interviewed": sum(1 for row in rows if row.interview_status == "Completed"),
        "pending": sum(1 for row in rows if row.interview_status == "Scheduled"),
    }


@lru_cache
def get_roster_repository() -> RosterRepository:
    settings = get_settings()
    return RosterRepository(
        TabularSource(settings.roster_csv_url, name="roster"),
        RosterStoreClient(settings.roster_store_url),
    )
