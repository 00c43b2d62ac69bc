from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..base import ToolSpec, ToolResult, ToolContext
from ..errors import InvalidArguments, PathAlreadyExists, PathNotFound
from ...util.fs import detect_newline, resolve_path, split_lines, write_edited
from .file_edit import sync_open_file


@dataclass
class CreateFileTool:
    spec: ToolSpec = ToolSpec(
        name="create_file",
        description="Create a new file with the given content. Fails if the file already exists.",
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "File path relative to the working directory."},
                "content": {"type": "string", "default": "", "description": "Initial file content."},
            },
            "required": ["path"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path = args["path"]
        content = args.get("content", "")
        p = resolve_path(Path(ctx.cwd), path)
        if p.exists():
            raise PathAlreadyExists(path, "File")
        p.parent.mkdir(parents=True, exist_ok=True)
        write_edited(p, content)
        n = len(split_lines(content)[0])
        return ToolResult.ok(f"Created {path} ({n} lines).", {"path": path, "lines": n})


@dataclass
class OverwriteFileTool:
    spec: ToolSpec = ToolSpec(
        name="overwrite_file",
        description="Replace the entire content of an existing file.",
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "File path relative to the working directory."},
                "content": {"type": "string", "description": "New full file content."},
            },
            "required": ["path", "content"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path = args["path"]
        content = args["content"]
        p = resolve_path(Path(ctx.cwd), path)
        if not p.exists():
            raise PathNotFound(path, "File")
        if not p.is_file():
            raise InvalidArguments("path", f"not a regular file: {path}")
        # keep a CRLF file CRLF
        newline = detect_newline(p.read_bytes().decode("utf-8", errors="replace"))
        if newline != "\n":
            content = content.replace(newline, "\n")
        write_edited(p, content, newline)
        n = len(split_lines(content)[0])
        sync_open_file(ctx, p, n)
        return ToolResult.ok(f"Overwrote {path} ({n} lines).", {"path": path, "lines": n})
