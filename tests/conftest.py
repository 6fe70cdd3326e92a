from __future__ import annotations

import csv
import io
import json
from collections.abc import Callable
from datetime import datetime
from typing import Any

import httpx
import pytest

from candidate_sync.services.notifications import WebhookNotifier
from candidate_sync.services.roster import RosterRepository, RosterStoreClient
from candidate_sync.services.selection import SelectionQueueRepository
from candidate_sync.services.tabular import TabularSource
from candidate_sync.services.transitions import TransitionOrchestrator

BASE_URL = "https://sheets.example.test"
FIXED_NOW = datetime(2025, 3, 5, 14, 7, 9)

SELECTION_COLUMNS = [
    "Name",
    "Mobile no",
    "Email",
    "Designation",
    "Current Organization\n",
    "Education",
    "Technical skill",
    "Years of relevent experience",
    "Years of total experience",
    "Experience Type",
    "Technical Score",
    "Experience Score",
    "Achievements Score",
    "Education Score",
    "Overall Score ",
    "Summry",
    "Quick read",
    "Projects & Achievements",
    "Job Role Candidate",
]
ROSTER_COLUMNS = ["Name", "Email", "Phone Number", "Job Role Admin", "Datetime", "Interview Status"]


def render_csv(rows: list[dict[str, str]], columns: list[str]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=columns, extrasaction="ignore")
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue()


def _same_key(row: dict[str, str], name: str, email: str) -> bool:
    return (row.get("Name", "").casefold(), row.get("Email", "").casefold()) == (name.casefold(), email.casefold())


class FakeSheet:
    """Selection export, roster export, roster store and webhook sink behind one mock transport."""

    def __init__(self) -> None:
        self.selection_rows: list[dict[str, str]] = [
            {
                "Name": "Asha Verma",
                "Mobile no": "919812345678",
                "Email": "asha.verma@example.com",
                "Designation": "Backend Engineer",
                "Current Organization\n": "Acme Analytics",
                "Education": "B.Tech",
                "Technical skill": "Python, FastAPI, PostgreSQL, Docker, AWS",
                "Years of relevent experience": "4",
                "Years of total experience": "5",
                "Experience Type": "Product",
                "Technical Score": "8",
                "Experience Score": "7",
                "Achievements Score": "6",
                "Education Score": "8",
                "Overall Score ": "7.5",
                "Summry": "Built ingestion services for a retail analytics platform.",
                "Quick read": "Strong API engineer.",
                "Projects & Achievements": "Cut report latency.",
                "Job Role Candidate": "Backend Engineer",
            },
            {
                "Name": "Rahul Nair",
                "Mobile no": "919900112233",
                "Email": "rahul.nair@example.com",
                "Technical skill": "SQL",
                "Overall Score ": "6.2",
                "Job Role Candidate": "Data Analyst",
            },
        ]
        self.roster_rows: list[dict[str, str]] = []
        self.deliveries: list[dict[str, Any]] = []
        self.roster_commands: list[dict[str, Any]] = []
        self.roster_reply: dict[str, Any] | None = None
        self.failures: dict[str, int | str] = {}
        self.on_webhook: Callable[[dict[str, Any]], None] | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        failure = self.failures.get(path)
        if failure == "network":
            raise httpx.ConnectError("connection refused", request=request)
        if isinstance(failure, int):
            return httpx.Response(failure, request=request)

        if request.method == "GET" and path == "/selection.csv":
            return httpx.Response(200, text=render_csv(self.selection_rows, SELECTION_COLUMNS), request=request)
        if request.method == "GET" and path == "/roster.csv":
            return httpx.Response(200, text=render_csv(self.roster_rows, ROSTER_COLUMNS), request=request)
        if request.method == "POST" and path == "/webhook":
            payload = json.loads(request.content)
            if self.on_webhook is not None:
                self.on_webhook(payload)
            self.deliveries.append(payload)
            email = payload.get("Email", "").casefold()
            self.selection_rows = [row for row in self.selection_rows if row["Email"].casefold() != email]
            return httpx.Response(200, json={"ok": True}, request=request)
        if request.method == "POST" and path == "/roster":
            command = json.loads(request.content)
            self.roster_commands.append(command)
            if self.roster_reply is not None:
                return httpx.Response(200, json=self.roster_reply, request=request)
            return httpx.Response(200, json=self._apply(command), request=request)
        return httpx.Response(404, request=request)

    def _apply(self, command: dict[str, Any]) -> dict[str, Any]:
        if command["action"] == "create":
            self.roster_rows.append({column: command.get(column, "") for column in ROSTER_COLUMNS})
            return {"success": True, "message": "Created"}
        for index, row in enumerate(self.roster_rows):
            if not _same_key(row, command["keyName"], command["keyEmail"]):
                continue
            if command["action"] == "delete":
                del self.roster_rows[index]
                return {"success": True, "message": "Deleted"}
            row.update(command["data"])
            return {"success": True, "message": "Updated"}
        return {"success": False, "message": "Candidate not found"}

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def sheet() -> FakeSheet:
    return FakeSheet()


@pytest.fixture
def selection_queue(sheet: FakeSheet) -> SelectionQueueRepository:
    source = TabularSource(f"{BASE_URL}/selection.csv", name="selection queue", client=sheet.client())
    return SelectionQueueRepository(source)


@pytest.fixture
def roster_repository(sheet: FakeSheet) -> RosterRepository:
    client = sheet.client()
    return RosterRepository(
        TabularSource(f"{BASE_URL}/roster.csv", name="roster", client=client),
        RosterStoreClient(f"{BASE_URL}/roster", client=client),
    )


@pytest.fixture
def orchestrator(
    sheet: FakeSheet,
    selection_queue: SelectionQueueRepository,
    roster_repository: RosterRepository,
) -> TransitionOrchestrator:
    notifier = WebhookNotifier(f"{BASE_URL}/webhook", client=sheet.client())
    return TransitionOrchestrator(selection_queue, roster_repository, notifier, clock=lambda: FIXED_NOW)
