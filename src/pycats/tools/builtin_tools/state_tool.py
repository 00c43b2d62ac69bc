from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..base import ToolSpec, ToolResult, ToolContext
from ...util.fs import display_path
from .navigation import reload_open_file, render_window


@dataclass
class StateTool:
    spec: ToolSpec = ToolSpec(
        name="_state",
        description="Show the session state: the open file, the current window of lines and the invocation count.",
        parameters={"type": "object", "properties": {}, "required": []},
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        state = ctx.state
        data: dict[str, Any] = {
            "open_file": None,
            "window": None,
            "total_lines": 0,
            "history_count": len(state.history),
        }
        if state.open_file is None:
            return ToolResult.ok(state.summary(), data)

        path, lines = reload_open_file(ctx)
        data.update(
            open_file=display_path(Path(ctx.cwd), path),
            window=state.view_window.to_dict(),
            total_lines=state.total_lines,
        )
        return ToolResult.ok(f"{state.summary()}\n\n{render_window(ctx.cwd, path, lines, state.view_window)}", data)
