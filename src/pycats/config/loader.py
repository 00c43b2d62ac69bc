from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

import yaml
from platformdirs import user_config_dir

from .models import ConfigError, EngineConfig

APP_NAME = "pycats"


def _candidate_paths(cwd: Path) -> list[Path]:
    # project-level (higher priority)
    return [
        cwd / ".pycats.json",
        cwd / "pycats.json",
        cwd / ".pycats.yaml",
        cwd / "pycats.yaml",
    ]


def _global_candidate_paths() -> list[Path]:
    cfg_dir = Path(user_config_dir(APP_NAME))
    return [
        cfg_dir / "pycats.json",
        cfg_dir / "pycats.yaml",
    ]


def _load_file(p: Path) -> dict[str, Any] | None:
    try:
        text = p.read_text(encoding="utf-8")
        if p.suffix in (".yaml", ".yml"):
            obj = yaml.safe_load(text)
        else:
            obj = json.loads(text)
    except (OSError, json.JSONDecodeError, yaml.YAMLError):
        return None
    if isinstance(obj, dict):
        return obj
    return None


def _merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge_dicts(out[k], v)  # type: ignore
        else:
            out[k] = v
    return out


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _str_list(v: Any) -> list[str] | None:
    if isinstance(v, list) and all(isinstance(x, str) for x in v):
        return list(v)
    return None


def config_from_dict(merged: dict[str, Any]) -> EngineConfig:
    """Build an EngineConfig; ill-typed keys are ignored, bad values raise ConfigError."""
    cfg = EngineConfig()

    for key in ("window_size", "max_output_bytes", "max_search_results"):
        v = merged.get(key)
        if isinstance(v, int) and not isinstance(v, bool):
            setattr(cfg, key, v)

    for key in ("command_timeout", "max_command_timeout"):
        v = merged.get(key)
        if _is_number(v):
            setattr(cfg, key, float(v))

    hl = merged.get("history_limit")
    if isinstance(hl, int) and not isinstance(hl, bool):
        cfg.history_limit = hl

    for key in ("use_default_deny_list", "search_exclude_hidden"):
        v = merged.get(key)
        if isinstance(v, bool):
            setattr(cfg, key, v)

    for key in ("deny_patterns", "search_exclude_dirs", "search_exclude_extensions", "disabled_tools"):
        v = _str_list(merged.get(key))
        if v is not None:
            setattr(cfg, key, v)

    for pat in cfg.deny_patterns:
        try:
            re.compile(pat)
        except re.error as e:
            raise ConfigError(f"Invalid deny pattern {pat!r}: {e}") from e

    cfg.validate()
    return cfg


def load_engine_config(*, cwd: Path, explicit_path: Path | None = None) -> EngineConfig:
    """Load engine config.

    Merge order: global < project < explicit_path.
    """
    merged: dict[str, Any] = {}
    loaded_from: Path | None = None

    for p in _global_candidate_paths():
        if p.exists() and p.is_file():
            obj = _load_file(p)
            if obj is not None:
                merged = _merge_dicts(merged, obj)
                loaded_from = p

    for p in _candidate_paths(cwd):
        if p.exists() and p.is_file():
            obj = _load_file(p)
            if obj is not None:
                merged = _merge_dicts(merged, obj)
                loaded_from = p
                break  # first match wins for project-level

    if explicit_path is not None:
        p = explicit_path.expanduser().resolve()
        if not p.is_file():
            raise ConfigError(f"Config file not found: {explicit_path}")
        obj = _load_file(p)
        if obj is None:
            raise ConfigError(f"Config file is not a JSON/YAML mapping: {explicit_path}")
        merged = _merge_dicts(merged, obj)
        loaded_from = p

    cfg = config_from_dict(merged)
    cfg.loaded_from = loaded_from
    return cfg
