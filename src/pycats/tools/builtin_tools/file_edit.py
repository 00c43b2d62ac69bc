from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..base import ToolSpec, ToolResult, ToolContext
from ..errors import InvalidArguments, OutOfRange, PathNotFound
from ...util.fs import join_lines, read_for_edit, resolve_path, split_lines, write_edited
from .navigation import render_window

MAX_PREVIEWS = 5


def _existing_file(ctx: ToolContext, path: str) -> Path:
    p = resolve_path(Path(ctx.cwd), path)
    if not p.is_file():
        raise PathNotFound(path, "File")
    return p


def sync_open_file(ctx: ToolContext, p: Path, total_lines: int) -> None:
    """Keep the view window valid after an edit to the open file."""
    if ctx.state.is_open(p):
        ctx.state.refresh(total_lines)


def _find_all(text: str, needle: str) -> list[int]:
    out = []
    start = 0
    while True:
        i = text.find(needle, start)
        if i < 0:
            return out
        out.append(i)
        start = i + len(needle)


def _pick_occurrence(text: str, needle: str, occurrence: int | None, param: str) -> int:
    """Return the offset of the chosen occurrence of `needle`."""
    hits = _find_all(text, needle)
    if not hits:
        raise InvalidArguments(param, f"text not found: {needle!r}")
    if occurrence is None:
        if len(hits) > 1:
            lines = text.split("\n")
            previews = []
            for off in hits[:MAX_PREVIEWS]:
                line_no = text.count("\n", 0, off) + 1
                previews.append(f"{line_no}: {lines[line_no - 1].strip()}")
            raise InvalidArguments(
                "occurrence",
                f"found {len(hits)} occurrences of {needle!r}; pass occurrence (1-{len(hits)}) to pick one.\n"
                "Matches (line: snippet):\n" + "\n".join(previews),
            )
        return hits[0]
    if occurrence > len(hits):
        raise InvalidArguments("occurrence", f"{occurrence} is out of range; found {len(hits)} occurrence(s)")
    return hits[occurrence - 1]


@dataclass
class ReplaceTextTool:
    spec: ToolSpec = ToolSpec(
        name="replace_text",
        description=(
            "Replace exact text in a file. If old_text occurs more than once, occurrence (1-based) "
            "selects which one to replace."
        ),
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "File path relative to the working directory."},
                "old_text": {"type": "string", "description": "Exact text to replace."},
                "new_text": {"type": "string", "description": "Replacement text."},
                "occurrence": {"type": "integer", "minimum": 1, "description": "Which occurrence to replace (1-based)."},
            },
            "required": ["path", "old_text", "new_text"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path = args["path"]
        old, new = args["old_text"], args["new_text"]
        if old == "":
            raise InvalidArguments("old_text", "must not be empty")
        p = _existing_file(ctx, path)
        doc = read_for_edit(p, path)
        if doc.newline == "\r\n":
            old, new = old.replace("\r\n", "\n"), new.replace("\r\n", "\n")
        text = doc.text
        off = _pick_occurrence(text, old, args.get("occurrence"), "old_text")
        updated = text[:off] + new + text[off + len(old):]
        write_edited(p, updated, doc.newline)
        sync_open_file(ctx, p, len(split_lines(updated)[0]))

        line_no = text.count("\n", 0, off) + 1
        return ToolResult.ok(
            f"Replaced text at line {line_no} in {path}.",
            {"path": path, "line_number": line_no, "occurrence": args.get("occurrence", 1)},
        )


@dataclass
class InsertTextTool:
    spec: ToolSpec = ToolSpec(
        name="insert_text",
        description="Insert text before or after a given line of a file, or at its end.",
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "File path relative to the working directory."},
                "line_number": {"type": "integer", "minimum": 1, "description": "1-based line the position refers to."},
                "text": {"type": "string", "description": "Text to insert (may span several lines)."},
                "position": {
                    "type": "string",
                    "enum": ["before_line", "after_line", "at_end"],
                    "default": "after_line",
                    "description": "Where to insert relative to line_number.",
                },
            },
            "required": ["path", "line_number", "text"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path = args["path"]
        line = args["line_number"]
        position = args.get("position", "after_line")
        p = _existing_file(ctx, path)
        doc = read_for_edit(p, path)
        lines, trailing = split_lines(doc.text)

        if line > len(lines) + 1:
            raise OutOfRange(f"Line {line} is out of range for {path} (file has {len(lines)} lines; valid: 1-{len(lines) + 1})")
        if position == "before_line":
            idx = line - 1
        elif position == "after_line":
            idx = min(line, len(lines))
        else:
            idx = len(lines)

        new_lines = split_lines(args["text"].replace("\r\n", "\n"))[0] or [""]
        # an empty file gains a final newline; otherwise keep what the file had
        trailing = trailing or not lines
        lines[idx:idx] = new_lines
        write_edited(p, join_lines(lines, trailing), doc.newline)
        sync_open_file(ctx, p, len(lines))
        return ToolResult.ok(
            f"Inserted {len(new_lines)} line(s) at line {idx + 1} in {path}.",
            {"path": path, "line_number": idx + 1, "position": position, "lines_added": len(new_lines)},
        )


@dataclass
class DeleteTextTool:
    spec: ToolSpec = ToolSpec(
        name="delete_text",
        description="Delete exact text from a file. If it occurs more than once, occurrence (1-based) selects which one.",
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "File path relative to the working directory."},
                "text_to_delete": {"type": "string", "description": "Exact text to delete."},
                "occurrence": {"type": "integer", "minimum": 1, "description": "Which occurrence to delete (1-based)."},
            },
            "required": ["path", "text_to_delete"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path = args["path"]
        needle = args["text_to_delete"]
        if needle == "":
            raise InvalidArguments("text_to_delete", "must not be empty")
        p = _existing_file(ctx, path)
        doc = read_for_edit(p, path)
        if doc.newline == "\r\n":
            needle = needle.replace("\r\n", "\n")
        text = doc.text
        off = _pick_occurrence(text, needle, args.get("occurrence"), "text_to_delete")
        updated = text[:off] + text[off + len(needle):]
        write_edited(p, updated, doc.newline)
        sync_open_file(ctx, p, len(split_lines(updated)[0]))
        line_no = text.count("\n", 0, off) + 1
        return ToolResult.ok(
            f"Deleted {len(needle)} character(s) at line {line_no} in {path}.",
            {"path": path, "line_number": line_no, "chars_deleted": len(needle)},
        )


def _line_range(path: str, start: int, end: int, total: int) -> int:
    """Check `start` against the file; return `end` clamped to it."""
    if start > total:
        raise OutOfRange(f"start_line {start} is out of range for {path} (file has {total} lines)")
    return min(end, total)


@dataclass
class DeleteLineTool:
    spec: ToolSpec = ToolSpec(
        name="delete_line",
        description="Delete a range of lines from a file. Lines are 1-based and inclusive; end_line past the end is clamped.",
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "File path relative to the working directory."},
                "start_line": {"type": "integer", "minimum": 1, "description": "1-based start line (inclusive)."},
                "end_line": {"type": "integer", "minimum": 1, "description": "1-based end line (inclusive)."},
            },
            "required": ["path", "start_line", "end_line"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path = args["path"]
        start, end = args["start_line"], args["end_line"]
        if end < start:
            raise InvalidArguments("end_line", f"must be >= start_line ({start}), got {end}")
        p = _existing_file(ctx, path)
        doc = read_for_edit(p, path)
        lines, trailing = split_lines(doc.text)
        end = _line_range(path, start, end, len(lines))

        del lines[start - 1:end]
        write_edited(p, join_lines(lines, trailing), doc.newline)
        sync_open_file(ctx, p, len(lines))
        return ToolResult.ok(
            f"Deleted lines {start}-{end} in {path} ({end - start + 1} line(s)).",
            {"path": path, "start_line": start, "end_line": end, "lines_deleted": end - start + 1},
        )


@dataclass
class EditTool:
    spec: ToolSpec = ToolSpec(
        name="edit",
        description=(
            "Replace lines start_line..end_line (1-based, inclusive) of a file with new_text. "
            "An empty new_text deletes the lines. If the file is open, the window moves to start_line."
        ),
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "File path relative to the working directory."},
                "start_line": {"type": "integer", "minimum": 1, "description": "First line to replace."},
                "end_line": {"type": "integer", "minimum": 1, "description": "Last line to replace; clamped to the end of the file."},
                "new_text": {"type": "string", "description": "Replacement text (may span several lines)."},
            },
            "required": ["path", "start_line", "end_line", "new_text"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path = args["path"]
        start, end = args["start_line"], args["end_line"]
        if end < start:
            raise InvalidArguments("end_line", f"must be >= start_line ({start}), got {end}")
        p = _existing_file(ctx, path)
        doc = read_for_edit(p, path)
        lines, trailing = split_lines(doc.text)
        # line 1 of an empty file may be written
        end = _line_range(path, start, end, max(len(lines), 1))
        end = min(end, len(lines))

        new_lines = split_lines(args["new_text"].replace("\r\n", "\n"))[0]
        removed = end - start + 1 if end >= start else 0
        trailing = trailing or not lines
        lines[start - 1:max(end, start - 1)] = new_lines
        write_edited(p, join_lines(lines, trailing), doc.newline)

        data: dict[str, Any] = {
            "path": path,
            "start_line": start,
            "end_line": end,
            "lines_removed": removed,
            "lines_added": len(new_lines),
            "total_lines": len(lines),
        }
        if removed:
            msg = f"Replaced lines {start}-{end} of {path} with {len(new_lines)} line(s)."
        else:
            msg = f"Wrote {len(new_lines)} line(s) at line {start} of {path}."
        if ctx.state.is_open(p):
            ctx.state.refresh(len(lines))
            window = ctx.state.goto_line(min(start, max(len(lines), 1)))
            data["window"] = window.to_dict()
            msg += "\n" + render_window(ctx.cwd, p, lines, window)
        return ToolResult.ok(msg, data)
