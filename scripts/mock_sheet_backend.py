#!/usr/bin/env python3
from __future__ import annotations

import argparse
import csv
import io
import json
import threading
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

SELECTION_COLUMNS = (
    "Name",
    "Mobile no",
    "Email",
    "Designation",
    "Current Organization",
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
)
ROSTER_COLUMNS = ("Name", "Email", "Phone Number", "Job Role Admin", "Datetime", "Interview Status")


def _seed_selection() -> list[dict[str, str]]:
    return [
        {
            "Name": "Asha Verma",
            "Mobile no": "919812345678",
            "Email": "asha.verma@example.com",
            "Designation": "Backend Engineer",
            "Current Organization": "Acme Analytics",
            "Education": "B.Tech Computer Science",
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
            "Quick read": "Strong API engineer with data pipeline depth.",
            "Projects & Achievements": "Cut report latency from minutes to seconds.",
            "Job Role Candidate": "Backend Engineer",
        },
        {
            "Name": "Rahul Nair",
            "Mobile no": "919900112233",
            "Email": "rahul.nair@example.com",
            "Designation": "Data Analyst",
            "Current Organization": "Northwind",
            "Education": "M.Sc Statistics",
            "Technical skill": "SQL, Pandas",
            "Years of relevent experience": "2",
            "Years of total experience": "3",
            "Experience Type": "Services",
            "Technical Score": "6",
            "Experience Score": "5",
            "Achievements Score": "5",
            "Education Score": "9",
            "Overall Score ": "6.2",
            "Summry": "Reporting and dashboarding for operations teams.",
            "Quick read": "",
            "Projects & Achievements": "Automated weekly KPI pack.",
            "Job Role Candidate": "Data Analyst",
        },
    ]


def _same_key(row: dict[str, str], name: str, email: str) -> bool:
    return (
        row.get("Name", "").strip().casefold() == name.strip().casefold()
        and row.get("Email", "").strip().casefold() == email.strip().casefold()
    )


class SheetState:
    """In-memory spreadsheet contents shared by all handler threads."""

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.selection: list[dict[str, str]] = _seed_selection()
        self.roster: list[dict[str, str]] = []
        self.deliveries: list[dict[str, object]] = []

    def record_delivery(self, payload: dict[str, object]) -> None:
        email = str(payload.get("Email", "")).strip().casefold()
        with self.lock:
            self.deliveries.append(payload)
            if payload.get("Type") in {"Accept", "Reject"}:
                self.selection = [
                    row for row in self.selection if row.get("Email", "").strip().casefold() != email
                ]

    def apply_roster_command(self, command: dict[str, object]) -> dict[str, object]:
        action = command.get("action")
        with self.lock:
            if action == "create":
                row = {column: str(command.get(column, "")) for column in ROSTER_COLUMNS}
                self.roster.append(row)
                return {"success": True, "message": "Created"}

            name = str(command.get("keyName", ""))
            email = str(command.get("keyEmail", ""))
            index = next((i for i, row in enumerate(self.roster) if _same_key(row, name, email)), None)
            if action not in {"update", "delete"}:
                return {"success": False, "message": f"Unknown action: {action}"}
            if index is None:
                return {"success": False, "message": "Candidate not found"}

            if action == "delete":
                del self.roster[index]
                return {"success": True, "message": "Deleted"}

            data = command.get("data")
            if not isinstance(data, dict):
                return {"success": False, "message": "Missing data"}
            self.roster[index].update({column: str(data[column]) for column in ROSTER_COLUMNS if column in data})
            return {"success": True, "message": "Updated"}

    def render_csv(self, rows: list[dict[str, str]], columns: tuple[str, ...]) -> str:
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=list(columns), extrasaction="ignore")
        writer.writeheader()
        with self.lock:
            writer.writerows(rows)
        return buffer.getvalue()


class MockSheetHandler(BaseHTTPRequestHandler):
    server_version = "MockSheet/1.0"
    state: SheetState

    def do_GET(self) -> None:  # noqa: N802 - stdlib handler signature
        if self.path == "/healthz":
            self._write_json(HTTPStatus.OK, {"status": "ok"})
        elif self.path == "/selection.csv":
            self._write_csv(self.state.render_csv(self.state.selection, SELECTION_COLUMNS))
        elif self.path == "/roster.csv":
            self._write_csv(self.state.render_csv(self.state.roster, ROSTER_COLUMNS))
        elif self.path == "/webhook/deliveries":
            with self.state.lock:
                deliveries = list(self.state.deliveries)
            self._write_json(HTTPStatus.OK, {"deliveries": deliveries})
        else:
            self._write_json(HTTPStatus.NOT_FOUND, {"detail": "not found"})

    def do_POST(self) -> None:  # noqa: N802 - stdlib handler signature
        if self.path not in {"/roster", "/webhook"}:
            self._write_json(HTTPStatus.NOT_FOUND, {"detail": "not found"})
            return

        length = int(self.headers.get("Content-Length", "0") or 0)
        try:
            payload = json.loads(self.rfile.read(length) or b"{}")
        except json.JSONDecodeError:
            self._write_json(HTTPStatus.BAD_REQUEST, {"detail": "invalid json"})
            return
        if not isinstance(payload, dict):
            self._write_json(HTTPStatus.BAD_REQUEST, {"detail": "expected a json object"})
            return

        if self.path == "/webhook":
            self.state.record_delivery(payload)
            self._write_json(HTTPStatus.OK, {"received": True})
            return

        self._write_json(HTTPStatus.OK, self.state.apply_roster_command(payload))

    def log_message(self, _: str, *args: object) -> None:
        # Keep logs terse for test runs.
        if args:
            print("mock-sheet:", *args)

    def _write_csv(self, body: str) -> None:
        raw = body.encode("utf-8")
        self.send_response(HTTPStatus.OK.value)
        self.send_header("Content-Type", "text/csv; charset=utf-8")
        self.send_header("Content-Length", str(len(raw)))
        self.end_headers()
        self.wfile.write(raw)

    def _write_json(self, status: HTTPStatus, payload: dict[str, object]) -> None:
        raw = json.dumps(payload).encode("utf-8")
        self.send_response(status.value)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(raw)))
        self.end_headers()
        self.wfile.write(raw)


def build_server(host: str, port: int, state: SheetState | None = None) -> ThreadingHTTPServer:
    handler = type("BoundMockSheetHandler", (MockSheetHandler,), {"state": state or SheetState()})
    return ThreadingHTTPServer((host, port), handler)


def main() -> None:
    parser = argparse.ArgumentParser(description="Mock spreadsheet exports, roster store and webhook sink.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=54330)
    args = parser.parse_args()

    server = build_server(args.host, args.port)
    base = f"http://{args.host}:{args.port}"
    print(f"mock-sheet listening on {base}", flush=True)
    print(
        f"export CS_SELECTION_CSV_URL={base}/selection.csv CS_ROSTER_CSV_URL={base}/roster.csv "
        f"CS_ROSTER_STORE_URL={base}/roster CS_WEBHOOK_URL={base}/webhook",
        flush=True,
    )
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()


if __name__ == "__main__":
    main()
