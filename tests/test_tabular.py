from __future__ import annotations

import asyncio

import httpx
import pytest

from candidate_sync.services.errors import NetworkError, ParseError
from candidate_sync.services.tabular import TabularSource, parse_tabular


def test_parse_trims_labels_and_values_and_drops_blank_rows() -> None:
    text = "\ufeff Name , Email \n  Ann  , ann@example.com \n , \n\nBob,bob@example.com\n"

    result = parse_tabular(text)

    assert [dict(record) for record in result.records] == [
        {"Name": "Ann", "Email": "ann@example.com"},
        {"Name": "Bob", "Email": "bob@example.com"},
    ]
    assert result.warnings == []


def test_parse_records_are_read_only() -> None:
    record = parse_tabular("Name\nAnn\n").records[0]

    with pytest.raises(TypeError):
        record["Name"] = "Changed"  # type: ignore[index]


def test_parse_reports_ragged_rows_without_aborting() -> None:
    result = parse_tabular("Name,Email,Phone\nAnn,ann@example.com\nBob,bob@example.com,123,extra\n")

    assert [warning.code for warning in result.warnings] == ["TooFewFields", "TooManyFields"]
    assert [warning.row for warning in result.warnings] == [2, 3]
    assert dict(result.records[0]) == {"Name": "Ann", "Email": "ann@example.com", "Phone": ""}
    assert dict(result.records[1]) == {"Name": "Bob", "Email": "bob@example.com", "Phone": "123"}


def test_parse_drops_unlabeled_columns_and_keeps_first_non_empty_duplicate() -> None:
    result = parse_tabular("Name,,Overall Score,Overall Score \nAnn,junk,,7.5\n")

    codes = [warning.code for warning in result.warnings]
    assert codes == ["EmptyHeader", "DuplicateHeader"]
    assert dict(result.records[0]) == {"Name": "Ann", "Overall Score": "7.5"}


def test_parse_flags_unbalanced_quotes() -> None:
    result = parse_tabular('Name,Email\n"Ann,ann@example.com\n')

    assert "MissingQuotes" in [warning.code for warning in result.warnings]


def test_parse_keeps_quoted_commas_and_newlines() -> None:
    result = parse_tabular('Name,Summary\nAnn,"Builds APIs, pipelines\nand dashboards"\n')

    assert result.records[0]["Summary"] == "Builds APIs, pipelines\nand dashboards"


def test_parse_rejects_html_payload() -> None:
    with pytest.raises(ParseError, match="HTML"):
        parse_tabular("<!DOCTYPE html><html><body>Sign in</body></html>")


def test_parse_empty_payload_yields_nothing() -> None:
    result = parse_tabular("")

    assert result.records == []
    assert result.warnings == []


def test_fetch_follows_redirect_and_exposes_warnings() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/export":
            return httpx.Response(302, headers={"location": "/export.csv"}, request=request)
        return httpx.Response(200, text="Name,Email\nAnn\n", request=request)

    async def run() -> tuple[list[dict[str, str]], list[str]]:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            source = TabularSource("https://sheets.example.test/export", name="selection queue", client=client)
            records = await source.fetch()
            return [dict(record) for record in records], [warning.code for warning in source.last_warnings]

    records, codes = asyncio.run(run())
    assert records == [{"Name": "Ann", "Email": ""}]
    assert codes == ["TooFewFields"]


def test_fetch_maps_error_status_to_network_error() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, request=request)

    async def run() -> None:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            await TabularSource("https://sheets.example.test/x.csv", name="roster", client=client).fetch()

    with pytest.raises(NetworkError, match="Failed to fetch roster data: 404 Not Found"):
        asyncio.run(run())


def test_fetch_maps_transport_failure_to_network_error() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async def run() -> None:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            await TabularSource("https://sheets.example.test/x.csv", name="roster", client=client).fetch()

    with pytest.raises(NetworkError, match="connection refused"):
        asyncio.run(run())


def test_fetch_without_url_fails_before_any_request() -> None:
    with pytest.raises(NetworkError, match="not configured"):
        asyncio.run(TabularSource(None, name="roster").fetch())
