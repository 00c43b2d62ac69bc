from __future__ import annotations

import json
import threading
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Annotated, Any, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, FiniteFloat, ValidationError, create_model
from pydantic_core import PydanticCustomError

from .base import ParamSpec, ToolSpec
from .errors import InvalidArguments


@dataclass
class ToolArgs:
    """Positional and named arguments as they arrive from a front end."""

    positional: list[Any] = field(default_factory=list)
    named: dict[str, Any] = field(default_factory=dict)


def parse_cli_args(tokens: Sequence[str]) -> ToolArgs:
    """Split CLI-style tokens.

    `--key=value` is named, a bare `--flag` is named with value "true",
    everything else is positional.
    """
    out = ToolArgs()
    for tok in tokens:
        if tok.startswith("--") and len(tok) > 2:
            key, sep, value = tok[2:].partition("=")
            out.named[key] = value if sep else "true"
        else:
            out.positional.append(tok)
    return out


def _no_bool(what: str):
    def check(value: Any) -> Any:
        if isinstance(value, bool):
            raise PydanticCustomError("bool_not_allowed", f"expected {what}")
        return value
    return check


def _from_json(value: Any) -> Any:
    # arrays and objects may arrive as JSON text from a CLI
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value


_BASE_TYPES: dict[str, Any] = {
    "string": str,
    "integer": Annotated[int, BeforeValidator(_no_bool("an integer"))],
    "number": Annotated[FiniteFloat, BeforeValidator(_no_bool("a number"))],
    "boolean": bool,
    "array": Annotated[list[Any], BeforeValidator(_from_json)],
    "object": Annotated[dict[str, Any], BeforeValidator(_from_json)],
}

_ARGS_CONFIG = ConfigDict(coerce_numbers_to_str=True, extra="forbid")


def _field(index: int, p: ParamSpec) -> tuple[str, tuple[Any, Any]]:
    if p.enum is not None:
        annotation: Any = Literal[p.enum]
    else:
        annotation = _BASE_TYPES[p.type]
    constraints: dict[str, Any] = {"alias": p.name}
    if p.minimum is not None and p.enum is None:
        constraints["ge"] = p.minimum
    if p.required:
        info = Field(..., **constraints)
    else:
        annotation = Optional[annotation]
        info = Field(p.default, **constraints)
    # aliased so that parameter names never collide with BaseModel attributes
    return f"p{index}", (annotation, info)


_models: dict[int, tuple[ToolSpec, type[BaseModel]]] = {}
_models_lock = threading.Lock()


def args_model(spec: ToolSpec) -> type[BaseModel]:
    """The pydantic model validating arguments for `spec` (built once per spec)."""
    with _models_lock:
        hit = _models.get(id(spec))
        if hit is not None and hit[0] is spec:
            return hit[1]
        fields = dict(_field(i, p) for i, p in enumerate(spec.params()))
        model = create_model(f"{spec.name}_args", __config__=_ARGS_CONFIG, **fields)
        _models[id(spec)] = (spec, model)
        return model


def _as_invalid(spec: ToolSpec, exc: ValidationError) -> InvalidArguments:
    err = exc.errors(include_url=False)[0]
    loc = err.get("loc") or ()
    parameter = str(loc[0]) if loc else None
    if err["type"] == "missing":
        return InvalidArguments(parameter, "missing required parameter")
    msg = err["msg"]
    if err["type"] == "extra_forbidden":
        known = ", ".join(p.name for p in spec.params()) or "(none)"
        msg = f"unknown parameter for {spec.name}; accepted parameters: {known}"
    return InvalidArguments(parameter, f"{msg}, got {err.get('input')!r}")


def bind_arguments(spec: ToolSpec, arguments: Any) -> dict[str, Any]:
    """Resolve raw arguments against `spec` into a validated, typed dict.

    `arguments` may be None, a mapping (by name), a sequence (positional, in
    schema order) or a ToolArgs mixing both. Schema defaults are filled in;
    optional parameters without a default are left out.
    """
    if arguments is None:
        ta = ToolArgs()
    elif isinstance(arguments, ToolArgs):
        ta = arguments
    elif isinstance(arguments, Mapping):
        ta = ToolArgs(named=dict(arguments))
    elif isinstance(arguments, Sequence) and not isinstance(arguments, (str, bytes)):
        ta = ToolArgs(positional=list(arguments))
    else:
        raise InvalidArguments(None, f"arguments must be a mapping or a list, got {type(arguments).__name__}")

    params = spec.params()
    by_name = {p.name: p for p in params}

    if len(ta.positional) > len(params):
        raise InvalidArguments(
            None,
            f"{spec.name} takes at most {len(params)} positional argument(s), got {len(ta.positional)}",
        )

    raw: dict[str, Any] = {}
    for p, value in zip(params, ta.positional):
        raw[p.name] = value
    for key, value in ta.named.items():
        if not isinstance(key, str) or key not in by_name:
            known = ", ".join(by_name) or "(none)"
            raise InvalidArguments(str(key), f"unknown parameter for {spec.name}; accepted parameters: {known}")
        if key in raw:
            raise InvalidArguments(key, "given both positionally and by name")
        raw[key] = value

    # None means "not given"
    raw = {k: v for k, v in raw.items() if v is not None}
    try:
        model = args_model(spec).model_validate(raw)
    except ValidationError as e:
        raise _as_invalid(spec, e) from None

    out: dict[str, Any] = {}
    for i, p in enumerate(params):
        value = getattr(model, f"p{i}")
        if value is not None:
            out[p.name] = value
    return out
