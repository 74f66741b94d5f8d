"""JSON text for API responses, built by hand to keep a fixed key order."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


@dataclass
class JournalEventRecord:
    """A stored journal event as the API reports it."""

    id: int = 0
    rule_name: str = ""
    message: str = ""
    priority: int = 0
    unit_name: str = ""
    created_at: str = ""


def _escape_char(char: str) -> str:
    if char in _ESCAPES:
        return _ESCAPES[char]
    if ord(char) < 0x20:
        return f"\\u00{ord(char):02x}"
    return char


def escape(text: str) -> str:
    """Escape quotes, backslashes and control characters for a JSON string."""
    return "".join(_escape_char(char) for char in text)


def _json_array(items: Iterable[str]) -> str:
    return "[" + ",".join(items) + "]"


def journal_event_to_json(event: JournalEventRecord) -> str:
    """Serialize one journal event as a JSON object."""
    return (
        "{"
        f'"id":{event.id},'
        f'"rule_name":"{escape(event.rule_name)}",'
        f'"message":"{escape(event.message)}",'
        f'"priority":{event.priority},'
        f'"unit_name":"{escape(event.unit_name)}",'
        f'"created_at":"{escape(event.created_at)}"'
        "}"
    )


def journal_events_to_json(events: Iterable[JournalEventRecord]) -> str:
    """Serialize journal events as a JSON array."""
    return _json_array(journal_event_to_json(event) for event in events)


def paginated_response(data_array: str, key: str, total: int, limit: int, offset: int) -> str:
    """Wrap a JSON array under ``key`` together with paging figures."""
    return (
        "{"
        f'"{escape(key)}":{data_array},'
        f'"total":{total},'
        f'"limit":{limit},'
        f'"offset":{offset}'
        "}"
    )


def error_response(code: str, message: str) -> str:
    """Build the JSON body of an error reply."""
    return (
        '{"error":{'
        f'"code":"{escape(code)}",'
        f'"message":"{escape(message)}"'
        "}}"
    )