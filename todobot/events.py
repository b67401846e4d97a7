from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import json
from pathlib import Path
from typing import Any

RECENT_EVENTS = 20


class EventKind(str, Enum):
    RECORDS = "records"
    COMMAND = "command"
    FORM = "form"
    SYNC = "sync"


def _now() -> str:
    return datetime.now(tz=timezone.utc).replace(microsecond=0).isoformat()


@dataclass(frozen=True)
class Event:
    kind: EventKind
    action: str
    message: str
    ok: bool = True
    detail: dict[str, Any] = field(default_factory=dict)
    at: str = field(default_factory=_now)

    @property
    def name(self) -> str:
        return f"{self.kind.value}.{self.action}"

    def to_json(self) -> str:
        return json.dumps(
            {"at": self.at, "event": self.name, "ok": self.ok, "message": self.message, "detail": self.detail},
            sort_keys=True,
            ensure_ascii=False,
            default=str,
        )


class DebugLog:
    """What this session did to the records.

    The last few events are always kept in memory for the settings page.
    With `debug = true` every event is also appended to logs/events.jsonl.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self.recent: deque[Event] = deque(maxlen=RECENT_EVENTS)

    @property
    def enabled(self) -> bool:
        return self.path is not None

    def record(self, kind: EventKind, action: str, message: str, *, ok: bool = True, **detail: Any) -> Event:
        event = Event(kind=kind, action=action, message=message, ok=ok, detail=detail)
        self.recent.append(event)
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(event.to_json())
                handle.write("\n")
        return event

    def last(self) -> Event | None:
        return self.recent[-1] if self.recent else None
