from __future__ import annotations

import json
import threading
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Iterable, Literal

from platformdirs import user_data_dir
from rich.console import Console
from rich.markup import escape

APP_NAME = "pycats"

EventType = Literal["tool.start", "tool.result", "command.rejected", "command.timeout"]

console = Console(stderr=True)


def events_dir() -> Path:
    return Path(user_data_dir(APP_NAME)) / "events"


@dataclass
class Event:
    ts: float
    type: str
    session_id: str
    data: dict[str, Any]


@dataclass
class EventStore:
    """JSONL audit log of one session's tool invocations and command verdicts.

    Writes go through `emit`, which reports I/O failure instead of raising.
    """

    session_id: str
    path: Path
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)
    _warned: bool = field(default=False, init=False, repr=False, compare=False)

    @staticmethod
    def open(session_id: str, directory: Path | None = None) -> "EventStore":
        d = directory if directory is not None else events_dir()
        d.mkdir(parents=True, exist_ok=True)
        return EventStore(session_id=session_id, path=d / f"{session_id}.jsonl")

    def append(self, event_type: EventType, data: dict[str, Any]) -> None:
        ev = Event(ts=time.time(), type=event_type, session_id=self.session_id, data=data)
        line = json.dumps(asdict(ev), ensure_ascii=False, default=str) + "\n"
        with self._lock, self.path.open("a", encoding="utf-8") as f:
            f.write(line)

    def emit(self, event_type: EventType, data: dict[str, Any]) -> bool:
        """Append, reporting I/O failure as False plus a one-time warning."""
        try:
            self.append(event_type, data)
            return True
        except OSError as e:
            if not self._warned:
                self._warned = True
                console.print(f"[yellow]event log {escape(str(self.path))} is not writable: {escape(str(e))}[/yellow]", highlight=False, soft_wrap=True)
            return False

    def iter_events(self, event_type: str | None = None) -> Iterable[Event]:
        if not self.path.exists():
            return []
        out: list[Event] = []
        for line in self.path.read_text(encoding="utf-8", errors="replace").splitlines():
            if not line.strip():
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError:
                # tolerate a torn trailing line
                continue
            if not isinstance(obj, dict):
                continue
            ev = Event(
                ts=float(obj.get("ts", 0.0)),
                type=str(obj.get("type")),
                session_id=str(obj.get("session_id", self.session_id)),
                data=obj.get("data") or {},
            )
            if event_type is None or ev.type == event_type:
                out.append(ev)
        return out
