"""Request handlers for the HTTP API."""

from __future__ import annotations

import re
import sqlite3
from typing import Mapping, Sequence, TypeVar

from vigilant_canine.json_format import (
    JournalEventRecord,
    error_response,
    journal_events_to_json,
    paginated_response,
)

T = TypeVar("T")

DEFAULT_LIMIT = 100
MAX_LIMIT = 1000

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
_LEADING_INT = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")

_JOURNAL_QUERY = """
    SELECT id, rule_name, message, priority, unit_name, created_at
    FROM journal_events
    ORDER BY created_at DESC
    LIMIT ? OFFSET ?
"""


class ApiError(Exception):
    """An error reply: HTTP status, error code and message."""

    def __init__(self, status: int, code: str, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.message = message

    @property
    def body(self) -> str:
        """The JSON body sent with this error."""
        return error_response(self.code, self.message)


def _parse_int(text: str) -> int:
    """Parse a leading integer, ignoring trailing text, within 32-bit range."""
    found = _LEADING_INT.match(text)
    if found is None:
        raise ValueError(f"not an integer: {text!r}")
    number = int(found.group(1))
    if not _INT32_MIN <= number <= _INT32_MAX:
        raise ValueError(f"out of range: {text!r}")
    return number


def parse_pagination(params: Mapping[str, str]) -> tuple[int, int]:
    """Read ``limit`` and ``offset`` from query parameters.

    Raises ApiError with status 400 when either value is invalid.
    """
    limit = DEFAULT_LIMIT
    offset = 0

    if "limit" in params:
        try:
            limit = _parse_int(params["limit"])
        except ValueError:
            raise ApiError(400, "INVALID_PARAMETER", "Invalid limit value") from None
        if not 1 <= limit <= MAX_LIMIT:
            raise ApiError(400, "INVALID_PARAMETER", "limit must be between 1 and 1000")

    if "offset" in params:
        try:
            offset = _parse_int(params["offset"])
        except ValueError:
            raise ApiError(400, "INVALID_PARAMETER", "Invalid offset value") from None
        if offset < 0:
            raise ApiError(400, "INVALID_PARAMETER", "offset must be >= 0")

    return limit, offset


def paginate(items: Sequence[T], limit: int, offset: int) -> list[T]:
    """Return the page of ``items`` that starts at ``offset``."""
    return list(items[offset : offset + limit])


def handle_health() -> str:
    """Body of the health check reply."""
    return '{"status":"ok"}'


class JournalEventHandler:
    """Lists journal events stored in the database."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def get_journal_events(self, limit: int, offset: int) -> list[JournalEventRecord]:
        """Return journal events, newest first."""
        rows = self._connection.execute(_JOURNAL_QUERY, (limit, offset)).fetchall()
        return [
            JournalEventRecord(
                id=row_id,
                rule_name=rule_name or "",
                message=message or "",
                priority=priority or 0,
                unit_name=unit_name or "",
                created_at=str(created_at) if created_at is not None else "",
            )
            for row_id, rule_name, message, priority, unit_name, created_at in rows
        ]

    def handle_list(self, params: Mapping[str, str]) -> str:
        """Answer a list request; raises ApiError on bad input or database failure."""
        limit, offset = parse_pagination(params)
        try:
            all_events = self.get_journal_events(limit + offset, 0)
        except sqlite3.Error as exc:
            raise ApiError(500, "DATABASE_ERROR", str(exc)) from exc
        page = paginate(all_events, limit, offset)
        return paginated_response(
            journal_events_to_json(page), "journal_events", len(all_events), limit, offset
        )