"""Tests for SessionState window arithmetic and history."""

from pathlib import Path

import pytest

from pycats.session.models import HistoryEntry, ViewWindow
from pycats.session.state import SessionState
from pycats.tools.errors import NoFileOpen, OutOfRange


def _bounds(w: ViewWindow) -> tuple[int, int]:
    return (w.start, w.end)


class TestOpenAndGoto:
    def test_fresh_state_has_no_window(self):
        s = SessionState()
        assert s.open_file is None
        assert s.view_window is None
        assert s.history == []

    def test_open_sets_first_window(self):
        s = SessionState(window_size=50)
        s.set_open_file(Path("a.py"), 200)
        assert _bounds(s.view_window) == (1, 50)
        assert s.view_window.size == 50

    def test_goto_contains_target(self):
        s = SessionState(window_size=50)
        s.set_open_file(Path("a.py"), 200)
        w = s.goto_line(120)
        assert w.contains(120)
        assert 1 <= w.start <= w.end <= 200

    def test_goto_last_line_clamps_to_tail(self):
        s = SessionState(window_size=50)
        s.set_open_file(Path("a.py"), 500)
        assert _bounds(s.goto_line(500)) == (451, 500)

    def test_goto_first_line(self):
        s = SessionState(window_size=50)
        s.set_open_file(Path("a.py"), 500)
        s.goto_line(300)
        assert _bounds(s.goto_line(1)) == (1, 50)

    def test_small_file_window_is_whole_file(self):
        s = SessionState(window_size=50)
        s.set_open_file(Path("a.py"), 10)
        assert _bounds(s.view_window) == (1, 10)

    def test_empty_file_is_one_line(self):
        s = SessionState(window_size=50)
        s.set_open_file(Path("empty.txt"), 0)
        assert _bounds(s.view_window) == (1, 1)
        assert _bounds(s.goto_line(1)) == (1, 1)
        with pytest.raises(OutOfRange):
            s.goto_line(2)

    @pytest.mark.parametrize("line", [0, -3, 201])
    def test_goto_out_of_range(self, line):
        s = SessionState(window_size=50)
        s.set_open_file(Path("a.py"), 200)
        before = s.view_window
        with pytest.raises(OutOfRange) as ei:
            s.goto_line(line)
        assert "1-200" in ei.value.message
        assert s.view_window == before

    def test_navigation_without_file(self):
        s = SessionState()
        with pytest.raises(NoFileOpen):
            s.goto_line(1)
        with pytest.raises(NoFileOpen):
            s.shift_window(10)

    def test_bad_window_size(self):
        with pytest.raises(ValueError):
            SessionState(window_size=0)


class TestShift:
    def test_forward_shifts_converge(self):
        s = SessionState(window_size=50)
        s.set_open_file(Path("a.py"), 120)
        seen = [_bounds(s.shift_window(50)) for _ in range(5)]
        assert seen[0] == (51, 100)
        assert seen[1] == (71, 120)
        assert all(b == (71, 120) for b in seen[1:])

    def test_backward_shift_stops_at_top(self):
        s = SessionState(window_size=50)
        s.set_open_file(Path("a.py"), 120)
        s.goto_line(120)
        s.shift_window(-50)
        assert _bounds(s.shift_window(-50)) == (1, 50)
        assert _bounds(s.shift_window(-50)) == (1, 50)

    def test_window_always_within_file(self):
        s = SessionState(window_size=7)
        s.set_open_file(Path("a.py"), 30)
        for delta in (3, 100, -4, -100, 13, 1, 1, 1):
            w = s.shift_window(delta)
            assert 1 <= w.start <= w.end <= 30


class TestRefreshAndClose:
    def test_refresh_after_shrink_keeps_window_valid(self):
        s = SessionState(window_size=50)
        s.set_open_file(Path("a.py"), 200)
        s.goto_line(200)
        assert _bounds(s.refresh(100)) == (51, 100)
        assert s.total_lines == 100

    def test_refresh_after_growth_keeps_start(self):
        s = SessionState(window_size=50)
        s.set_open_file(Path("a.py"), 60)
        s.goto_line(60)
        start = s.view_window.start
        assert s.refresh(300).start == start

    def test_close_clears_window(self):
        s = SessionState()
        s.set_open_file(Path("a.py"), 10)
        s.close_file()
        assert s.open_file is None
        assert s.view_window is None

    def test_snapshot_restore(self):
        s = SessionState(window_size=10)
        s.set_open_file(Path("a.py"), 100)
        snap = s.snapshot()
        s.set_open_file(Path("b.py"), 5)
        s.restore(snap)
        assert s.open_file == Path("a.py")
        assert _bounds(s.view_window) == (1, 10)


class TestHistory:
    def _entry(self, i: int) -> HistoryEntry:
        return HistoryEntry(tool=f"t{i}", arguments={}, status="success", summary="")

    def test_history_is_ordered(self):
        s = SessionState()
        for i in range(5):
            s.record(self._entry(i))
        assert [e.tool for e in s.history] == ["t0", "t1", "t2", "t3", "t4"]

    def test_history_limit_evicts_oldest(self):
        s = SessionState(history_limit=3)
        for i in range(5):
            s.record(self._entry(i))
        assert [e.tool for e in s.history] == ["t2", "t3", "t4"]

    def test_summary_mentions_open_file(self):
        s = SessionState(window_size=10)
        assert "No file currently open" in s.summary()
        s.set_open_file(Path("a.py"), 25)
        text = s.summary()
        assert "a.py" in text
        assert "Window: 1-10" in text
