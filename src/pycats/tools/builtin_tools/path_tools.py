from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any
import shutil

from ..base import ToolSpec, ToolResult, ToolContext
from ..errors import InvalidArguments, PathAlreadyExists, PathNotFound
from ...util.fs import resolve_path


def _within(child: Path, parent: Path) -> bool:
    try:
        child.relative_to(parent)
    except ValueError:
        return False
    return True


def _refuse_root(ctx: ToolContext, p: Path, parameter: str) -> None:
    if p == Path(ctx.cwd).resolve():
        raise InvalidArguments(parameter, "refusing to operate on the working directory itself")


@dataclass
class DeletePathTool:
    spec: ToolSpec = ToolSpec(
        name="delete_path",
        description="Delete a file or directory. Non-empty directories need recursive=true.",
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "Path relative to the working directory."},
                "recursive": {"type": "boolean", "default": False, "description": "Delete directories with their contents."},
            },
            "required": ["path"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path = args["path"]
        recursive = bool(args.get("recursive", False))
        p = resolve_path(Path(ctx.cwd), path)
        if not p.exists():
            raise PathNotFound(path)
        _refuse_root(ctx, p, "path")

        if p.is_dir():
            if any(p.iterdir()) and not recursive:
                raise InvalidArguments("recursive", f"directory {path} is not empty; pass recursive=true to delete it")
            shutil.rmtree(p)
            kind = "directory"
        else:
            p.unlink()
            kind = "file"

        state = ctx.state
        closed = state.open_file is not None and _within(state.open_file, p)
        if closed:
            state.close_file()
        msg = f"Deleted {kind} {path}."
        if closed:
            msg += " The open file was removed and has been closed."
        return ToolResult.ok(msg, {"path": path, "kind": kind, "closed_open_file": closed})


@dataclass
class MovePathTool:
    spec: ToolSpec = ToolSpec(
        name="move_path",
        description="Move or rename a file or directory. Fails if the destination exists.",
        parameters={
            "type": "object",
            "properties": {
                "source": {"type": "string", "description": "Existing path relative to the working directory."},
                "destination": {"type": "string", "description": "New path relative to the working directory."},
            },
            "required": ["source", "destination"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        cwd = Path(ctx.cwd)
        src_s, dst_s = args["source"], args["destination"]
        src = resolve_path(cwd, src_s, parameter="source")
        dst = resolve_path(cwd, dst_s, parameter="destination")
        if not src.exists():
            raise PathNotFound(src_s)
        if dst.exists():
            raise PathAlreadyExists(dst_s, "Destination")
        _refuse_root(ctx, src, "source")
        if src.is_dir() and _within(dst, src):
            raise InvalidArguments("destination", "cannot move a directory inside itself")

        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(src), str(dst))

        state = ctx.state
        if state.open_file is not None and _within(state.open_file, src):
            state.rename_open_file(dst / state.open_file.relative_to(src))
        return ToolResult.ok(f"Moved {src_s} to {dst_s}.", {"source": src_s, "destination": dst_s})


@dataclass
class CopyPathTool:
    spec: ToolSpec = ToolSpec(
        name="copy_path",
        description="Copy a file or directory. Directories need recursive=true. Fails if the destination exists.",
        parameters={
            "type": "object",
            "properties": {
                "source": {"type": "string", "description": "Existing path relative to the working directory."},
                "destination": {"type": "string", "description": "Copy target relative to the working directory."},
                "recursive": {"type": "boolean", "default": False, "description": "Copy directories with their contents."},
            },
            "required": ["source", "destination"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        cwd = Path(ctx.cwd)
        src_s, dst_s = args["source"], args["destination"]
        src = resolve_path(cwd, src_s, parameter="source")
        dst = resolve_path(cwd, dst_s, parameter="destination")
        if not src.exists():
            raise PathNotFound(src_s)
        if dst.exists():
            raise PathAlreadyExists(dst_s, "Destination")

        dst.parent.mkdir(parents=True, exist_ok=True)
        if src.is_dir():
            if not args.get("recursive", False):
                raise InvalidArguments("recursive", f"{src_s} is a directory; pass recursive=true to copy it")
            if _within(dst, src):
                raise InvalidArguments("destination", "cannot copy a directory inside itself")
            shutil.copytree(src, dst)
        else:
            shutil.copy2(src, dst)
        return ToolResult.ok(f"Copied {src_s} to {dst_s}.", {"source": src_s, "destination": dst_s})


@dataclass
class CreateDirectoryTool:
    spec: ToolSpec = ToolSpec(
        name="create_directory",
        description="Create a directory, including missing parents.",
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "Directory path relative to the working directory."},
            },
            "required": ["path"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path = args["path"]
        p = resolve_path(Path(ctx.cwd), path)
        if p.exists():
            raise PathAlreadyExists(path, "Directory" if p.is_dir() else "File")
        p.mkdir(parents=True)
        return ToolResult.ok(f"Created directory {path}.", {"path": path})
