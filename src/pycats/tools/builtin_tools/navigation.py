from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..base import ToolSpec, ToolResult, ToolContext
from ..errors import NoFileOpen, PathAlreadyExists, PathNotFound
from ...session.models import ViewWindow
from ...util.fs import display_path, read_lines, resolve_path


def render_window(cwd: str, path: Path, lines: list[str], window: ViewWindow) -> str:
    out = [f"[File: {display_path(Path(cwd), path)} ({len(lines)} lines total)]"]
    above = window.start - 1
    below = max(len(lines) - window.end, 0)
    if above:
        out.append(f"({above} more lines above)")
    for n in range(window.start, window.end + 1):
        text = lines[n - 1] if n <= len(lines) else ""
        out.append(f"{n:4} | {text}")
    if below:
        out.append(f"({below} more lines below)")
    return "\n".join(out)


def window_data(cwd: str, path: Path, lines: list[str], window: ViewWindow) -> dict[str, Any]:
    return {
        "path": display_path(Path(cwd), path),
        "total_lines": len(lines),
        "window": window.to_dict(),
    }


def reload_open_file(ctx: ToolContext) -> tuple[Path, list[str]]:
    """Re-read the open file so the window tracks its current length."""
    state = ctx.state
    if state.open_file is None:
        raise NoFileOpen()
    path = state.open_file
    if not path.is_file():
        raise PathNotFound(display_path(Path(ctx.cwd), path), "Open file")
    lines, _ = read_lines(path)
    if len(lines) != state.total_lines:
        state.refresh(len(lines))
    return path, lines


@dataclass
class OpenTool:
    spec: ToolSpec = ToolSpec(
        name="open",
        description=(
            "Opens the file at the given path in the viewer and shows a window of its lines. "
            "If line_number is provided, the window is moved to include that line."
        ),
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "File path relative to the working directory."},
                "line_number": {"type": "integer", "minimum": 1, "description": "Optional line to move the window to."},
            },
            "required": ["path"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path = args["path"]
        p = resolve_path(Path(ctx.cwd), path)
        if not p.is_file():
            raise PathNotFound(path, "File")

        lines, _ = read_lines(p)
        state = ctx.state
        already_open = state.is_open(p)
        if already_open:
            state.refresh(len(lines))
        else:
            state.set_open_file(p, len(lines))

        note = ""
        line = args.get("line_number")
        if line is not None:
            target = min(line, max(len(lines), 1))
            if target != line:
                note = f"\nWarning: line {line} is past the end of the file ({len(lines)} lines); showing the last line instead."
            state.goto_line(target)

        window = state.view_window
        head = f"File {path} is already open." if already_open else f"Opened {path}."
        data = window_data(ctx.cwd, p, lines, window)
        data["already_open"] = already_open
        return ToolResult.ok(f"{head}{note}\n{render_window(ctx.cwd, p, lines, window)}", data)


@dataclass
class GotoTool:
    spec: ToolSpec = ToolSpec(
        name="goto",
        description="Moves the window of the open file to show <line_number>.",
        parameters={
            "type": "object",
            "properties": {
                "line_number": {"type": "integer", "minimum": 1, "description": "1-based line to show."},
            },
            "required": ["line_number"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path, lines = reload_open_file(ctx)
        window = ctx.state.goto_line(args["line_number"])
        return ToolResult.ok(
            f"Moved to line {args['line_number']}.\n{render_window(ctx.cwd, path, lines, window)}",
            window_data(ctx.cwd, path, lines, window),
        )


class ScrollTool:
    def __init__(self, up: bool):
        self.up = up
        direction = "up" if up else "down"
        self.spec = ToolSpec(
            name=f"scroll_{direction}",
            description=f"Moves the window of the open file {direction} by one window size.",
            parameters={"type": "object", "properties": {}, "required": []},
        )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path, lines = reload_open_file(ctx)
        state = ctx.state
        before = state.view_window
        delta = -state.window_size if self.up else state.window_size
        window = state.shift_window(delta)

        data = window_data(ctx.cwd, path, lines, window)
        if window == before:
            where = "beginning" if self.up else "end"
            return ToolResult.ok(
                f"Already at the {where} of the file.\n{render_window(ctx.cwd, path, lines, window)}", data
            )
        return ToolResult.ok(
            f"Scrolled {'up' if self.up else 'down'} from line {before.start} to line {window.start}.\n"
            f"{render_window(ctx.cwd, path, lines, window)}",
            data,
        )


@dataclass
class CreateTool:
    spec: ToolSpec = ToolSpec(
        name="create",
        description="Creates a new empty file with the given name and opens it.",
        parameters={
            "type": "object",
            "properties": {
                "filename": {"type": "string", "description": "Path of the file to create, relative to the working directory."},
            },
            "required": ["filename"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        filename = args["filename"]
        p = resolve_path(Path(ctx.cwd), filename, parameter="filename")
        if p.exists():
            raise PathAlreadyExists(filename, "File")
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text("", encoding="utf-8")
        window = ctx.state.set_open_file(p, 0)
        return ToolResult.ok(
            f"Created and opened {filename}.\n{render_window(ctx.cwd, p, [], window)}",
            window_data(ctx.cwd, p, [], window),
        )
