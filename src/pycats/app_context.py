from __future__ import annotations

import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config.loader import load_engine_config
from .config.models import EngineConfig
from .events.store import EventStore
from .tools.builtin import create_tool_registry
from .tools.registry import ToolRegistry


@dataclass
class AppContext:
    cwd: Path
    config: EngineConfig
    tools: ToolRegistry
    session_id: str
    events: EventStore | None = None
    trace: bool = False

    @staticmethod
    def from_env(
        cwd: Path,
        config_path: Optional[Path] = None,
        trace: bool = False,
        events: bool = False,
        session_id: str | None = None,
    ) -> "AppContext":
        config = load_engine_config(cwd=cwd, explicit_path=config_path)
        sid = session_id or uuid.uuid4().hex[:12]
        store = EventStore.open(sid) if events else None
        tools = create_tool_registry(cwd, config=config, events=store, trace=trace, session_id=sid)
        return AppContext(
            cwd=cwd,
            config=config,
            tools=tools,
            session_id=sid,
            events=store,
            trace=trace,
        )
