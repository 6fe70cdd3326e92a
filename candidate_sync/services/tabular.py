from __future__ import annotations

import csv
import io
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

import httpx

from candidate_sync.services.errors import NetworkError, ParseError

logger = logging.getLogger(__name__)

RawRecord = Mapping[str, str]

_HTML_PREFIXES = ("<!doctype html", "<html")


@dataclass(slots=True)
class ParseWarning:
    row: int
    code: str
    message: str


@dataclass(slots=True)
class TabularParseResult:
    records: list[RawRecord]
    warnings: list[ParseWarning] = field(default_factory=list)


def parse_tabular(text: str, *, delimiter: str = ",") -> TabularParseResult:
    """Parse a header-first CSV payload into trimmed, read-only records.

    Rows whose every value is blank after trimming are dropped. Ragged rows,
    unlabeled columns, labels that collide once trimmed and unbalanced quotes
    are reported as warnings; only a payload the csv reader rejects (or an HTML
    page served in place of the export) raises ``ParseError``.
    """
    payload = text.lstrip("\ufeff")
    if payload.lstrip()[:20].lower().startswith(_HTML_PREFIXES):
        raise ParseError("Failed to parse CSV data: received an HTML document instead of CSV")

    warnings: list[ParseWarning] = []
    if payload.count('"') % 2:
        warnings.append(ParseWarning(row=0, code="MissingQuotes", message="unbalanced quote characters in payload"))

    try:
        rows = list(csv.reader(io.StringIO(payload, newline=""), delimiter=delimiter))
    except csv.Error as exc:
        raise ParseError(f"Failed to parse CSV data: {exc}") from exc

    if not rows:
        return TabularParseResult(records=[], warnings=warnings)

    header = [label.strip() for label in rows[0]]
    columns: list[tuple[int, str]] = []
    seen: set[str] = set()
    for index, label in enumerate(header):
        if not label:
            warnings.append(
                ParseWarning(row=1, code="EmptyHeader", message=f"column {index + 1} has no label and was dropped")
            )
            continue
        if label in seen:
            warnings.append(
                ParseWarning(row=1, code="DuplicateHeader", message=f"label {label!r} appears more than once")
            )
        seen.add(label)
        columns.append((index, label))

    width = len(header)
    records: list[RawRecord] = []
    for row_number, row in enumerate(rows[1:], start=2):
        if len(row) != width and any(cell.strip() for cell in row):
            code = "TooFewFields" if len(row) < width else "TooManyFields"
            warnings.append(
                ParseWarning(row=row_number, code=code, message=f"expected {width} fields but parsed {len(row)}")
            )

        record: dict[str, str] = {}
        for index, label in columns:
            value = row[index].strip() if index < len(row) else ""
            # Colliding labels keep the first non-empty value.
            if not record.get(label):
                record[label] = value

        if not any(record.values()):
            continue
        records.append(MappingProxyType(record))

    return TabularParseResult(records=records, warnings=warnings)


class TabularSource:
    """A read-only CSV export fetched over HTTP GET."""

    def __init__(
        self,
        url: str | None,
        *,
        name: str,
        client: httpx.AsyncClient | None = None,
        delimiter: str = ",",
    ) -> None:
        self.url = url
        self.name = name
        self.delimiter = delimiter
        self.last_warnings: list[ParseWarning] = []
        self._client = client

    async def fetch(self) -> list[RawRecord]:
        if not self.url:
            raise NetworkError(f"{self.name} source URL is not configured")

        if self._client is not None:
            response = await self._get(self._client, self.url)
        else:
            async with httpx.AsyncClient() as temp_client:
                response = await self._get(temp_client, self.url)

        result = parse_tabular(response.text, delimiter=self.delimiter)
        self.last_warnings = result.warnings
        for warning in result.warnings:
            logger.warning(
                "csv parsing warning source=%s row=%s code=%s %s",
                self.name,
                warning.row,
                warning.code,
                warning.message,
            )
        logger.info("ingested source=%s records=%s", self.name, len(result.records))
        return result.records

    async def _get(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        try:
            response = await client.get(url, follow_redirects=True)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise NetworkError(f"Failed to fetch {self.name} data: {exc}") from exc
        if not response.is_success:
            raise NetworkError(
                f"Failed to fetch {self.name} data: {response.status_code} {response.reason_phrase}".rstrip()
            )
        return response
