"""Per-request audit events for the refinement pipeline.

Event details echo user material such as upload names and extraction or OCR
error messages, so contact details are masked before an event is serialized
or written to disk.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from promptrefine.utils.files import timestamped_stem

_EMAIL_RE = re.compile(r"\b([A-Za-z0-9._%+-]+)@([A-Za-z0-9.-]+\.[A-Za-z]{2,})\b")
_PHONE_RE = re.compile(r"\+?\d[\d\s().-]{6,}\d")


def _mask_email(match: re.Match[str]) -> str:
    local, domain = match.groups()
    return f"{local[0]}***@{domain}"


def _mask_phone(match: re.Match[str]) -> str:
    digits = re.sub(r"\D", "", match.group())
    if len(digits) <= 4:
        return "***"
    return f"+***{digits[-4:]}"


def redact_text(value: str) -> str:
    """Mask email addresses and phone numbers found in ``value``."""

    return _PHONE_RE.sub(_mask_phone, _EMAIL_RE.sub(_mask_email, value))


def _redact_value(value: Any) -> Any:
    if isinstance(value, str):
        return redact_text(value)
    if isinstance(value, dict):
        return redact_details(value)
    if isinstance(value, (list, tuple)):
        return [_redact_value(item) for item in value]
    return value


def redact_details(details: dict[str, Any]) -> dict[str, Any]:
    """Redact every string in an event's details, nested ones included."""

    return {key: _redact_value(value) for key, value in details.items()}


@dataclass(slots=True)
class AuditEvent:
    level: str
    event: str
    details: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    def to_dict(self) -> dict[str, Any]:
        payload = {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level,
            "event": self.event,
            "details": redact_details(self.details),
        }
        return payload


class AuditTrail:
    """Collect the events of one refinement request.

    Events are kept in memory; when ``log_dir`` is given they are also
    appended to a JSONL file named after the request.
    """

    def __init__(self, log_dir: Path | None = None) -> None:
        self.path: Path | None = None
        if log_dir is not None:
            log_dir.mkdir(parents=True, exist_ok=True)
            self.path = log_dir / f"{timestamped_stem('refine')}.jsonl"
        self._events: list[AuditEvent] = []

    def record(self, level: str, event: str, **details: Any) -> AuditEvent:
        audit_event = AuditEvent(level=level, event=event, details=details)
        self._events.append(audit_event)
        if self.path is not None:
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(audit_event.to_dict(), ensure_ascii=False) + "\n")
        return audit_event

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    def count(self, level: str | None = None) -> int:
        if level is None:
            return len(self._events)
        return sum(1 for event in self._events if event.level == level)


__all__ = ["AuditEvent", "AuditTrail", "redact_details", "redact_text"]
