from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal
import time

Status = Literal["success", "error"]


@dataclass(frozen=True)
class ViewWindow:
    # 1-based, inclusive
    start: int
    end: int
    size: int

    def contains(self, line: int) -> bool:
        return self.start <= line <= self.end

    def to_dict(self) -> dict[str, int]:
        return {"start": self.start, "end": self.end, "size": self.size}


@dataclass
class HistoryEntry:
    tool: str
    arguments: Any
    status: Status
    summary: str
    error_kind: str | None = None
    ts: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool": self.tool,
            "arguments": self.arguments,
            "status": self.status,
            "summary": self.summary,
            "error_kind": self.error_kind,
            "ts": self.ts,
        }


@dataclass(frozen=True)
class StateSnapshot:
    open_file: Path | None
    total_lines: int
    view_window: ViewWindow | None
