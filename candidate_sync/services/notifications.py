from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

import httpx

from candidate_sync.core.config import get_settings
from candidate_sync.schemas.candidates import Candidate
from candidate_sync.schemas.transitions import Decision
from candidate_sync.services.errors import NetworkError

logger = logging.getLogger(__name__)


def build_payload(candidate: Candidate, decision: Decision) -> dict[str, Any]:
    payload: dict[str, Any] = candidate.model_dump(by_alias=True)
    payload["Name "] = candidate.display_name
    payload["Type"] = decision.value
    return payload


class WebhookNotifier:
    """Posts accept/reject decisions to the hiring workflow webhook.

    Only the status code is inspected; the response body is ignored.
    """

    def __init__(self, url: str | None, *, client: httpx.AsyncClient | None = None) -> None:
        self.url = url
        self._client = client

    async def send(self, candidate: Candidate, decision: Decision) -> None:
        if not self.url:
            raise NetworkError("notification webhook URL is not configured")

        payload = build_payload(candidate, decision)
        if self._client is not None:
            await self._post(self._client, self.url, payload)
        else:
            async with httpx.AsyncClient() as temp_client:
                await self._post(temp_client, self.url, payload)
        logger.info("decision delivered email=%s type=%s", candidate.email, decision.value)

    async def _post(self, client: httpx.AsyncClient, url: str, payload: dict[str, Any]) -> None:
        try:
            response = await client.post(url, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise NetworkError(f"webhook unreachable: {exc}") from exc
        if not response.is_success:
            raise NetworkError(f"webhook rejected the notification: {response.status_code} {response.reason_phrase}".rstrip())


@lru_cache
def get_notifier() -> WebhookNotifier:
    return WebhookNotifier(get_settings().webhook_url)
