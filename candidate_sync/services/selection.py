from __future__ import annotations

from functools import lru_cache

from candidate_sync.core.config import get_settings
from candidate_sync.schemas.candidates import Candidate
from candidate_sync.services.normalizer import normalize_candidate
from candidate_sync.services.repository import TabularRepository
from candidate_sync.services.tabular import TabularSource


class SelectionQueueRepository(TabularRepository[Candidate]):
    """Read-only view over candidates awaiting an accept/reject decision."""

    def __init__(self, source: TabularSource) -> None:
        super().__init__(source, normalize_candidate)

    def find(self, email: str) -> Candidate | None:
        wanted = email.strip().casefold()
        if not wanted:
            return None
        for candidate in self._snapshot or []:
            if candidate.email.strip().casefold() == wanted:
                return candidate
        return None


@lru_cache
def get_selection_queue() -> SelectionQueueRepository:
    settings = get_settings()
    return SelectionQueueRepository(TabularSource(settings.selection_csv_url, name="selection queue"))
