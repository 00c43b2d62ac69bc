"""Concurrent dispatch against one registry must serialize state access."""

import threading
import time
from typing import Any

from pycats.config.models import EngineConfig
from pycats.tools.base import ToolContext, ToolResult, ToolSpec
from pycats.tools.builtin import create_tool_registry

from conftest import write_numbered


class StepTool:
    """Read the window, pause, then move it one line on. Racy without the lock."""

    spec = ToolSpec(
        name="step",
        description="advance the window by one line",
        parameters={"type": "object", "properties": {}},
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        start = ctx.state.view_window.start
        time.sleep(0.001)
        ctx.state.goto_line(start + 1)
        return ToolResult.ok(f"at {start + 1}")


class OpenSlowTool:
    """Open a file in two steps with a pause in between."""

    def __init__(self, name: str, path, lines: int, goto: int):
        self.path = path
        self.lines = lines
        self.goto = goto
        self.spec = ToolSpec(name, "", {"type": "object", "properties": {}})

    def execute(self, ctx, args):
        ctx.state.set_open_file(self.path, self.lines)
        time.sleep(0.02)
        ctx.state.goto_line(self.goto)
        return ToolResult.ok("done")


def _run_threads(targets):
    threads = [threading.Thread(target=t) for t in targets]
    for t in threads:
        t.start()
    for t in threads:
        t.join()


class TestSerialization:
    def test_no_lost_updates(self, workdir):
        reg = create_tool_registry(workdir, config=EngineConfig(window_size=1))
        reg.register(StepTool())
        write_numbered(workdir / "a.txt", 1000)
        reg.execute("open", ["a.txt"])

        def worker():
            for _ in range(10):
                reg.execute("step")

        _run_threads([worker] * 8)
        assert reg.state.view_window.start == 81
        assert len(reg.state.history) == 81
        assert all(h.status == "success" for h in reg.state.history)

    def test_two_writers_match_a_serial_order(self, workdir):
        reg = create_tool_registry(workdir)
        a = write_numbered(workdir / "a.txt", 300)
        b = write_numbered(workdir / "b.txt", 40)
        reg.register(OpenSlowTool("open_a", a, 300, 200))
        reg.register(OpenSlowTool("open_b", b, 40, 40))

        _run_threads([lambda: reg.execute("open_a"), lambda: reg.execute("open_b")])

        state = reg.state
        w = (state.view_window.start, state.view_window.end)
        outcomes = {
            (a, 300, (175, 224)),
            (b, 40, (1, 40)),
        }
        assert (state.open_file, state.total_lines, w) in outcomes
        assert [h.status for h in state.history] == ["success", "success"]
