from __future__ import annotations
from pathlib import Path

from .registry import ToolRegistry
from ..config.models import EngineConfig
from ..events.store import EventStore

from .builtin_tools.navigation import OpenTool, GotoTool, ScrollTool, CreateTool
from .builtin_tools.run_command import RunCommandTool
from .builtin_tools.find_file import FindFileTool
from .builtin_tools.search_tools import SearchFileTool, SearchDirTool
from .builtin_tools.file_write import CreateFileTool, OverwriteFileTool
from .builtin_tools.file_edit import ReplaceTextTool, InsertTextTool, DeleteTextTool, DeleteLineTool, EditTool
from .builtin_tools.filemap import FilemapTool
from .builtin_tools.path_tools import DeletePathTool, MovePathTool, CopyPathTool, CreateDirectoryTool
from .builtin_tools.state_tool import StateTool


def builtin_tools() -> list:
    return [
        OpenTool(),
        GotoTool(),
        ScrollTool(up=True),
        ScrollTool(up=False),
        CreateTool(),
        FilemapTool(),
        RunCommandTool(),
        FindFileTool(),
        SearchFileTool(),
        SearchDirTool(),
        CreateFileTool(),
        ReplaceTextTool(),
        InsertTextTool(),
        DeleteTextTool(),
        DeleteLineTool(),
        EditTool(),
        OverwriteFileTool(),
        DeletePathTool(),
        MovePathTool(),
        CopyPathTool(),
        CreateDirectoryTool(),
        StateTool(),
    ]


def register_builtin_tools(registry: ToolRegistry) -> None:
    disabled = set(registry.config.disabled_tools)
    for tool in builtin_tools():
        if tool.spec.name in disabled:
            continue
        registry.register(tool)


def create_tool_registry(
    cwd: Path,
    config: EngineConfig | None = None,
    events: EventStore | None = None,
    trace: bool = False,
    session_id: str | None = None,
) -> ToolRegistry:
    """A registry over `cwd` with every builtin tool the config leaves enabled."""
    registry = ToolRegistry(
        cwd=cwd,
        config=config or EngineConfig(),
        events=events,
        trace=trace,
        session_id=session_id or (events.session_id if events else None),
    )
    register_builtin_tools(registry)
    return registry
