from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any
import re

from ..base import ToolSpec, ToolResult, ToolContext
from ..errors import InvalidArguments, NoFileOpen, PathNotFound
from ...util.filtering import SearchFilter
from ...util.fs import display_path, read_lines, read_text, resolve_path


def _compile(term: str) -> re.Pattern:
    try:
        return re.compile(term)
    except re.error as e:
        raise InvalidArguments("search_term", f"invalid regular expression: {e}")


def _looks_binary(p: Path) -> bool:
    try:
        with p.open("rb") as f:
            return b"\0" in f.read(1024)
    except OSError:
        return True


@dataclass
class SearchFileTool:
    spec: ToolSpec = ToolSpec(
        name="search_file",
        description="Searches for search_term (a regular expression) in file. If file is not provided, searches the currently open file.",
        parameters={
            "type": "object",
            "properties": {
                "search_term": {"type": "string", "description": "Regular expression to search for."},
                "file": {"type": "string", "description": "File to search, relative to the working directory."},
            },
            "required": ["search_term"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        cwd = Path(ctx.cwd)
        term = args["search_term"]
        rx = _compile(term)

        if args.get("file") is not None:
            p = resolve_path(cwd, args["file"], parameter="file")
            if not p.is_file():
                raise PathNotFound(args["file"], "File")
        elif ctx.state.open_file is not None:
            p = ctx.state.open_file
            if not p.is_file():
                raise PathNotFound(display_path(cwd, p), "Open file")
        else:
            raise NoFileOpen("No file given and no file is currently open. Pass file or use 'open' first.")

        limit = ctx.config.max_search_results
        hits: list[dict[str, Any]] = []
        truncated = False
        for i, line in enumerate(read_lines(p)[0], start=1):
            if rx.search(line):
                if len(hits) >= limit:
                    truncated = True
                    break
                hits.append({"line": i, "text": line})

        name = display_path(cwd, p)
        if not hits:
            return ToolResult.ok(f'No matches found for "{term}" in {name}', {"file": name, "matches": []})
        out = [f'Found {len(hits)} matches for "{term}" in {name}:']
        out.extend(f"Line {h['line']}: {h['text']}" for h in hits)
        if truncated:
            out.append(f"(stopped after {limit} matches; narrow the search term)")
        return ToolResult.ok("\n".join(out), {"file": name, "matches": hits, "truncated": truncated})


@dataclass
class SearchDirTool:
    spec: ToolSpec = ToolSpec(
        name="search_dir",
        description="Searches for search_term (a regular expression) in all files in dir. If dir is not provided, searches the working directory.",
        parameters={
            "type": "object",
            "properties": {
                "search_term": {"type": "string", "description": "Regular expression to search for."},
                "dir": {"type": "string", "default": ".", "description": "Directory to search, relative to the working directory."},
            },
            "required": ["search_term"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        cwd = Path(ctx.cwd)
        term = args["search_term"]
        d = args.get("dir", ".")
        rx = _compile(term)
        root = resolve_path(cwd, d, parameter="dir")
        if not root.exists():
            raise PathNotFound(d, "Directory")
        if not root.is_dir():
            raise InvalidArguments("dir", f"not a directory: {d}")

        flt = SearchFilter.from_config(ctx.config)
        limit = ctx.config.max_search_results
        counts: dict[str, int] = {}
        truncated = False
        for f in flt.walk_files(root):
            if _looks_binary(f):
                continue
            try:
                text = read_text(f)
            except OSError:
                continue
            n = sum(1 for line in text.splitlines() if rx.search(line))
            if n:
                if len(counts) >= limit:
                    truncated = True
                    break
                counts[display_path(cwd, f)] = n

        if not counts:
            return ToolResult.ok(f'No matches found for "{term}" in {d}', {"dir": d, "files": {}})
        total = sum(counts.values())
        out = [f'Found {total} matches for "{term}" in {d}:']
        out.extend(f"{name} ({n} matches)" for name, n in counts.items())
        if truncated:
            out.append(f"(stopped after {limit} files; narrow the search)")
        out.append(f'End of matches for "{term}" in {d}')
        return ToolResult.ok("\n".join(out), {"dir": d, "files": counts, "total": total, "truncated": truncated})
