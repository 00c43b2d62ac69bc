"""Abbreviated file view: every line numbered, long bodies folded away.

Python files are folded per function using the syntax tree. Other files (and
Python that does not parse) are folded by indentation.
"""
from __future__ import annotations

import ast
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..base import ToolSpec, ToolResult, ToolContext
from ..errors import InvalidArguments, PathNotFound
from ...util.fs import display_path, read_text, resolve_path, split_lines

MIN_ELIDED_LINES = 6
MAX_CHARS = 50_000


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())


def python_spans(text: str) -> list[tuple[int, int]] | None:
    """1-based inclusive body ranges of functions long enough to fold, or None if `text` won't parse."""
    try:
        tree = ast.parse(text)
    except (SyntaxError, ValueError, RecursionError):
        return None
    spans = []
    for node in ast.walk(tree):
        if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            continue
        start = node.body[0].lineno
        end = node.end_lineno or start
        if start > node.lineno and end - start + 1 >= MIN_ELIDED_LINES:
            spans.append((start, end))
    return spans


def indent_spans(lines: list[str]) -> list[tuple[int, int]]:
    """Fold the lines indented under a header line when there are enough of them."""
    spans = []
    i = 0
    while i < len(lines):
        if not lines[i].strip():
            i += 1
            continue
        level = _indent(lines[i])
        last = i
        j = i + 1
        while j < len(lines):
            if lines[j].strip():
                if _indent(lines[j]) <= level:
                    break
                last = j
            j += 1
        if last - i >= MIN_ELIDED_LINES:
            spans.append((i + 2, last + 1))
            i = last + 1
        else:
            i += 1
    return spans


def _outermost(spans: list[tuple[int, int]]) -> dict[int, int]:
    out: dict[int, int] = {}
    covered = 0
    for start, end in sorted(spans):
        if start > covered:
            out[start] = end
            covered = end
    return out


def render_filemap(name: str, lines: list[str], spans: list[tuple[int, int]]) -> tuple[str, list[list[int]], bool]:
    folds = _outermost(spans)
    out = [f"[File: {name} ({len(lines)} lines total)]"]
    size = len(out[0])
    elided: list[list[int]] = []
    truncated = False
    n = 1
    while n <= len(lines):
        end = folds.get(n)
        if end is not None:
            row = f"     | ... eliding lines {n}-{end} ..."
            elided.append([n, end])
            n = end + 1
        else:
            row = f"{n:4} | {lines[n - 1]}"
            n += 1
        out.append(row)
        size += len(row) + 1
        if size > MAX_CHARS:
            truncated = True
            out.append("... (output truncated) ...")
            break
    return "\n".join(out), elided, truncated


@dataclass
class FilemapTool:
    spec: ToolSpec = ToolSpec(
        name="filemap",
        description=(
            "Show an abbreviated view of a file: long function bodies (Python) or long indented "
            "blocks (other files) are replaced by an 'eliding lines a-b' marker. Does not open the file."
        ),
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "File path relative to the working directory."},
            },
            "required": ["path"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path = args["path"]
        p = resolve_path(Path(ctx.cwd), path)
        if not p.exists():
            raise PathNotFound(path, "File")
        if not p.is_file():
            raise InvalidArguments("path", f"not a regular file: {path}")

        text = read_text(p)
        lines, _ = split_lines(text)
        spans = python_spans(text) if p.suffix == ".py" else None
        if spans is None:
            spans = indent_spans(lines)
        name = display_path(Path(ctx.cwd), p)
        view, elided, truncated = render_filemap(name, lines, spans)
        return ToolResult.ok(
            view,
            {"path": name, "total_lines": len(lines), "elided": elided, "truncated": truncated},
        )
