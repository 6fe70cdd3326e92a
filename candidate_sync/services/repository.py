from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

from candidate_sync.services.errors import SyncError
from candidate_sync.services.tabular import RawRecord, TabularSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TabularRepository(Generic[T]):
    """Read side shared by the selection queue and the roster.

    Every ``list()`` re-ingests the source and rebuilds the snapshot wholesale.
    A failed ingestion clears the snapshot so callers never see a partial list.
    """

    def __init__(self, source: TabularSource, project: Callable[[RawRecord], T]) -> None:
        self.source = source
        self._project = project
        self._snapshot: list[T] | None = None
        self.last_error: str | None = None

    @property
    def snapshot(self) -> list[T] | None:
        return None if self._snapshot is None else list(self._snapshot)

    async def list(self) -> list[T]:
        try:
            records = await self.source.fetch()
        except SyncError as exc:
            self._snapshot = None
            self.last_error = str(exc)
            logger.error("listing failed source=%s error=%s", self.source.name, exc)
            raise

        items = [self._project(record) for record in records]
        self._snapshot = items
        self.last_error = None
        return list(items)

    async def refresh(self) -> None:
        await self.list()
