from __future__ import annotations
from dataclasses import dataclass
from fnmatch import fnmatch
from pathlib import Path
from typing import Any

from ..base import ToolSpec, ToolResult, ToolContext
from ..errors import InvalidArguments, PathNotFound
from ...util.filtering import SearchFilter
from ...util.fs import display_path, resolve_path


@dataclass
class FindFileTool:
    spec: ToolSpec = ToolSpec(
        name="find_file",
        description=(
            "Finds all files whose name or relative path matches file_name (shell wildcards such as "
            "*.py or src/**/test_*.py). Searches dir, or the working directory if dir is not provided."
        ),
        parameters={
            "type": "object",
            "properties": {
                "file_name": {"type": "string", "description": "File name or wildcard pattern."},
                "dir": {"type": "string", "default": ".", "description": "Directory to search, relative to the working directory."},
            },
            "required": ["file_name"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        cwd = Path(ctx.cwd)
        pattern = args["file_name"]
        d = args.get("dir", ".")
        root = resolve_path(cwd, d, parameter="dir")
        if not root.exists():
            raise PathNotFound(d, "Directory")
        if not root.is_dir():
            raise InvalidArguments("dir", f"not a directory: {d}")

        flt = SearchFilter.from_config(ctx.config)
        limit = ctx.config.max_search_results
        matches: list[str] = []
        truncated = False
        for f in flt.walk_files(root):
            rel = f.relative_to(root).as_posix()
            if fnmatch(f.name, pattern) or fnmatch(rel, pattern):
                if len(matches) >= limit:
                    truncated = True
                    break
                matches.append(display_path(cwd, f))

        if not matches:
            return ToolResult.ok(f'No matches found for "{pattern}" in {d}', {"pattern": pattern, "matches": []})
        out = [f'Found {len(matches)} matches for "{pattern}" in {d}:']
        out.extend(matches)
        if truncated:
            out.append(f"(stopped after {limit} results; narrow the pattern)")
        return ToolResult.ok("\n".join(out), {"pattern": pattern, "matches": matches, "truncated": truncated})
