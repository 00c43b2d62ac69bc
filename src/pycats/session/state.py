from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .models import HistoryEntry, StateSnapshot, ViewWindow
from ..tools.errors import NoFileOpen, OutOfRange

DEFAULT_WINDOW_SIZE = 50


@dataclass
class SessionState:
    """Navigation and history context shared by every tool in one session.

    Only the registry hands this object to tool bodies, and only while holding
    its lock, so nothing here synchronizes on its own.

    Line numbers are 1-based and window bounds are inclusive. An empty file
    is treated as one empty line so a window always has start <= end.
    """

    window_size: int = DEFAULT_WINDOW_SIZE
    # None means unbounded; otherwise the oldest entries are evicted.
    history_limit: int | None = None
    open_file: Path | None = None
    total_lines: int = 0
    view_window: ViewWindow | None = None
    history: list[HistoryEntry] = field(default_factory=list)

    def __post_init__(self):
        if self.window_size < 1:
            raise ValueError(f"window_size must be a positive integer, got {self.window_size}")
        if self.history_limit is not None and self.history_limit < 1:
            raise ValueError(f"history_limit must be positive or None, got {self.history_limit}")

    # ---- window arithmetic ----

    def _lines(self) -> int:
        return max(self.total_lines, 1)

    def _place(self, start: int) -> ViewWindow:
        n = self._lines()
        max_start = max(1, n - self.window_size + 1)
        start = min(max(start, 1), max_start)
        end = min(start + self.window_size - 1, n)
        return ViewWindow(start=start, end=end, size=self.window_size)

    def _require_open(self) -> ViewWindow:
        if self.open_file is None or self.view_window is None:
            raise NoFileOpen()
        return self.view_window

    # ---- transitions ----

    def set_open_file(self, path: Path, total_lines: int) -> ViewWindow:
        if total_lines < 0:
            raise ValueError(f"total_lines must be >= 0, got {total_lines}")
        self.open_file = Path(path)
        self.total_lines = total_lines
        self.view_window = self._place(1)
        return self.view_window

    def shift_window(self, delta_lines: int) -> ViewWindow:
        """Move the window; clamps at either end instead of failing."""
        w = self._require_open()
        self.view_window = self._place(w.start + delta_lines)
        return self.view_window

    def goto_line(self, line: int) -> ViewWindow:
        """Center the window on `line`.

        Valid lines are 1..max(total_lines, 1): an empty file is shown as one
        empty line, so `goto_line(1)` succeeds on it and line 2 is OutOfRange.
        """
        self._require_open()
        if line < 1 or line > self._lines():
            raise OutOfRange(
                f"Line {line} is out of range for {self.open_file} (valid lines: 1-{self._lines()})"
            )
        self.view_window = self._place(line - self.window_size // 2)
        return self.view_window

    def refresh(self, total_lines: int) -> ViewWindow:
        """The open file changed length on disk; keep the window start if possible."""
        w = self._require_open()
        self.total_lines = max(total_lines, 0)
        self.view_window = self._place(w.start)
        return self.view_window

    def rename_open_file(self, path: Path) -> None:
        self._require_open()
        self.open_file = Path(path)

    def close_file(self) -> None:
        self.open_file = None
        self.total_lines = 0
        self.view_window = None

    # ---- history ----

    def record(self, entry: HistoryEntry) -> None:
        self.history.append(entry)
        if self.history_limit is not None and len(self.history) > self.history_limit:
            del self.history[: len(self.history) - self.history_limit]

    # ---- rollback ----

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(self.open_file, self.total_lines, self.view_window)

    def restore(self, snap: StateSnapshot) -> None:
        self.open_file = snap.open_file
        self.total_lines = snap.total_lines
        self.view_window = snap.view_window

    def is_open(self, path: Path) -> bool:
        return self.open_file is not None and self.open_file == Path(path)

    def summary(self) -> str:
        lines = []
        if self.open_file is None or self.view_window is None:
            lines.append("No file currently open")
        else:
            w = self.view_window
            lines.append(f"Current File: {self.open_file}")
            lines.append(f"Lines: {self.total_lines} | Window: {w.start}-{w.end} (size: {w.size})")
        lines.append(f"History: {len(self.history)} invocation(s)")
        return "\n".join(lines)
