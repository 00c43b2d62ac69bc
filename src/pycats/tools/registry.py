from __future__ import annotations

import json
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .args import ToolArgs, bind_arguments
from .base import Tool, ToolContext, ToolResult
from .errors import DuplicateToolName, ToolError, UnknownTool
from .gateway import CommandGateway, build_deny_rules
from ..config.models import EngineConfig
from ..events.store import EventStore
from ..session.models import HistoryEntry
from ..session.state import SessionState

console = Console(stderr=True)

SUMMARY_CHARS = 200


def _jsonable_args(arguments: Any) -> Any:
    if isinstance(arguments, ToolArgs):
        return {"positional": list(arguments.positional), "named": dict(arguments.named)}
    if isinstance(arguments, dict):
        return dict(arguments)
    if isinstance(arguments, (list, tuple)):
        return list(arguments)
    return arguments


def _args_preview(args: Any) -> str:
    try:
        s = json.dumps(args, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        s = str(args)
    if len(s) > 400:
        s = s[:400] + "... (truncated)"
    return s


def _summarize(message: str) -> str:
    first = (message or "").strip().splitlines()[0] if (message or "").strip() else ""
    if len(first) > SUMMARY_CHARS:
        first = first[:SUMMARY_CHARS] + "..."
    return first


@dataclass
class ToolRegistry:
    """Owns the tools and the one SessionState they share.

    `execute` is the only dispatch path. It binds arguments against the tool's
    schema, runs the tool body while holding the session lock, records history
    and always returns a ToolResult.
    """

    cwd: Path = field(default_factory=Path.cwd)
    config: EngineConfig = field(default_factory=EngineConfig)
    state: SessionState | None = None
    gateway: CommandGateway | None = None
    events: EventStore | None = None
    session_id: str | None = None
    trace: bool = False
    _tools: Dict[str, Tool] = None  # type: ignore
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self):
        if self._tools is None:
            self._tools = {}
        self.cwd = Path(self.cwd).expanduser().resolve()
        if self.state is None:
            self.state = SessionState(
                window_size=self.config.window_size,
                history_limit=self.config.history_limit,
            )
        if self.gateway is None:
            self.gateway = CommandGateway(
                cwd=str(self.cwd),
                deny_rules=build_deny_rules(
                    self.config.deny_patterns,
                    include_defaults=self.config.use_default_deny_list,
                ),
                default_timeout=self.config.command_timeout,
                max_timeout=self.config.max_command_timeout,
                max_output_bytes=self.config.max_output_bytes,
                events=self.events,
            )

    # ---- setup ----

    def register(self, tool: Tool) -> None:
        tool.spec.check()
        name = tool.spec.name
        if name in self._tools:
            raise DuplicateToolName(f"Tool already registered: {name}")
        self._tools[name] = tool

    # ---- lookup / introspection ----

    def get(self, name: str) -> Tool:
        tool = self._tools.get(name) if isinstance(name, str) else None
        if tool is None:
            raise UnknownTool(name, list(self._tools))
        return tool

    def names(self) -> list[str]:
        return list(self._tools)

    def list_tools(self) -> list[tuple[str, str]]:
        return [(t.spec.name, t.spec.description) for t in self._tools.values()]

    def list_specs(self):
        return [t.spec for t in self._tools.values()]

    def get_schema(self, name: str) -> dict[str, Any]:
        spec = self.get(name).spec
        return {
            "name": spec.name,
            "description": spec.description,
            "parameters": [p.to_dict() for p in spec.params()],
        }

    def to_openai_tools(self) -> list[dict[str, Any]]:
        out = []
        for spec in self.list_specs():
            out.append({
                "type": "function",
                "function": {
                    "name": spec.name,
                    "description": spec.description,
                    "parameters": spec.parameters,
                },
            })
        return out

    # ---- dispatch ----

    def execute(self, name: str, arguments: Any = None) -> ToolResult:
        t0 = time.perf_counter()
        try:
            tool = self.get(name)
            args = bind_arguments(tool.spec, arguments)
        except ToolError as e:
            res = ToolResult.fail(e.kind, e.message)
        except Exception as e:
            res = ToolResult.fail("ToolExecutionError", f"Could not bind arguments: {type(e).__name__}: {e}")
        else:
            with self._lock:
                res = self._invoke(tool, args)
                self._finish(name, args, res, t0)
            return res

        label = name if isinstance(name, str) else repr(name)
        with self._lock:
            self._finish(label, _jsonable_args(arguments), res, t0)
        return res

    def _invoke(self, tool: Tool, args: dict[str, Any]) -> ToolResult:
        name = tool.spec.name
        snap = self.state.snapshot()
        ctx = ToolContext(
            cwd=str(self.cwd),
            state=self.state,
            gateway=self.gateway,
            config=self.config,
            session_id=self.session_id,
        )
        if self.events:
            self.events.emit("tool.start", {"tool": name, "args": args})
        self._trace(f"[bold cyan]→ {name}[/bold cyan] {_args_preview(args)}")

        try:
            res = tool.execute(ctx, args)
        except ToolError as e:
            res = ToolResult.fail(e.kind, e.message)
        except MemoryError:
            raise
        except Exception as e:
            res = ToolResult.fail("ToolExecutionError", f"Tool {name} failed: {type(e).__name__}: {e}")

        if not isinstance(res, ToolResult):
            res = ToolResult.fail("ToolExecutionError", f"Tool {name} returned no result.")
        if res.is_error:
            if res.error_kind is None:
                res.error_kind = "ToolExecutionError"
            res.data = None
            # a failed call leaves navigation state as it found it
            self.state.restore(snap)
        return res

    def _finish(self, name: str, arguments: Any, res: ToolResult, t0: float) -> None:
        self.state.record(HistoryEntry(
            tool=name,
            arguments=arguments,
            status=res.status,
            summary=_summarize(res.message),
            error_kind=res.error_kind,
        ))
        elapsed_ms = int((time.perf_counter() - t0) * 1000)
        if self.events:
            self.events.emit(
                "tool.result",
                {
                    "tool": name,
                    "status": res.status,
                    "error_kind": res.error_kind,
                    "elapsed_ms": elapsed_ms,
                    "message_len": len(res.message or ""),
                    "message_preview": (res.message or "")[:4000],
                },
            )
        self._trace(
            Panel.fit(
                Text(res.message[:1200] + ("..." if len(res.message) > 1200 else "")),
                title=f"tool:{name} ({'error: ' + str(res.error_kind) if res.is_error else 'ok'}, {elapsed_ms} ms)",
                border_style="red" if res.is_error else "green",
            )
        )

    def _trace(self, renderable: Any) -> None:
        if not self.trace:
            return
        try:
            console.print(renderable, highlight=False)
        except OSError:
            # stderr is gone; stop tracing
            self.trace = False
