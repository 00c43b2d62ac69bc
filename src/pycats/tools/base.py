from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal, Protocol

from .errors import ErrorKind, SchemaError

if TYPE_CHECKING:
    from ..config.models import EngineConfig
    from ..session.state import SessionState
    from .gateway import CommandGateway

TYPE_TAGS = ("string", "integer", "number", "boolean", "array", "object")


@dataclass(frozen=True)
class ParamSpec:
    name: str
    type: str
    required: bool = False
    description: str = ""
    default: Any = None
    enum: tuple[Any, ...] | None = None
    minimum: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "required": self.required,
            "description": self.description,
        }


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    parameters: dict[str, Any]   # JSONSchema; property order is the positional order

    def params(self) -> list[ParamSpec]:
        props = self.parameters.get("properties") or {}
        required = set(self.parameters.get("required") or [])
        out = []
        for pname, p in props.items():
            enum = p.get("enum")
            out.append(ParamSpec(
                name=pname,
                type=p.get("type", "string"),
                required=pname in required,
                description=p.get("description", ""),
                default=p.get("default"),
                enum=tuple(enum) if enum else None,
                minimum=p.get("minimum"),
            ))
        return out

    def check(self) -> None:
        """Raise SchemaError if this spec can't be dispatched against."""
        if not self.name or not isinstance(self.name, str):
            raise SchemaError(f"Tool name must be a non-empty string, got {self.name!r}")
        if self.parameters.get("type") != "object":
            raise SchemaError(f"{self.name}: parameters schema must have type 'object'")
        props = self.parameters.get("properties")
        if not isinstance(props, dict):
            raise SchemaError(f"{self.name}: parameters schema must declare 'properties'")
        for pname, p in props.items():
            if not isinstance(p, dict) or p.get("type") not in TYPE_TAGS:
                raise SchemaError(f"{self.name}: parameter '{pname}' has no valid type tag")
        for r in self.parameters.get("required") or []:
            if r not in props:
                raise SchemaError(f"{self.name}: required parameter '{r}' is not declared")


class Tool(Protocol):
    spec: ToolSpec
    def execute(self, ctx: "ToolContext", args: dict[str, Any]) -> "ToolResult": ...


@dataclass
class ToolResult:
    message: str
    is_error: bool = False
    data: Any = None
    error_kind: ErrorKind | None = None

    @staticmethod
    def ok(message: str, data: Any = None) -> "ToolResult":
        return ToolResult(message=message, data=data)

    @staticmethod
    def fail(kind: ErrorKind, message: str) -> "ToolResult":
        return ToolResult(message=message, is_error=True, error_kind=kind)

    @property
    def status(self) -> Literal["success", "error"]:
        return "error" if self.is_error else "success"

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"status": self.status, "message": self.message}
        if self.is_error:
            d["error_kind"] = self.error_kind or "ToolExecutionError"
        elif self.data is not None:
            d["data"] = self.data
        return d


@dataclass
class ToolContext:
    cwd: str
    state: "SessionState"
    gateway: "CommandGateway"
    config: "EngineConfig"
    session_id: str | None = None
