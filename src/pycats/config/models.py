from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_EXCLUDE_DIRS = [
    "target", "node_modules", "__pycache__", "dist", "build",
    ".git", ".svn", ".hg", "venv", "env", ".venv",
]

DEFAULT_EXCLUDE_EXTENSIONS = [
    "exe", "dll", "so", "dylib", "a", "o", "pyc",
    "png", "jpg", "jpeg", "gif", "bmp", "ico",
    "mp3", "mp4", "avi", "mov", "wav",
    "pdf", "zip", "tar", "gz", "rar", "7z",
]


class ConfigError(ValueError):
    pass


@dataclass
class EngineConfig:
    """Engine settings loaded from JSON or YAML.

    Everything is fixed once the registry is built.
    """

    window_size: int = 50
    command_timeout: float = 30
    max_command_timeout: float = 600
    max_output_bytes: int = 65536
    deny_patterns: list[str] = field(default_factory=list)
    use_default_deny_list: bool = True
    history_limit: int | None = None

    search_exclude_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))
    search_exclude_extensions: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_EXTENSIONS))
    search_exclude_hidden: bool = True
    max_search_results: int = 100

    disabled_tools: list[str] = field(default_factory=list)

    loaded_from: Path | None = None

    def validate(self) -> None:
        if self.window_size < 1:
            raise ConfigError(f"window_size must be a positive integer, got {self.window_size}")
        if self.command_timeout <= 0 or self.max_command_timeout <= 0:
            raise ConfigError("command_timeout and max_command_timeout must be positive")
        if self.command_timeout > self.max_command_timeout:
            raise ConfigError(
                f"command_timeout ({self.command_timeout}) exceeds max_command_timeout ({self.max_command_timeout})"
            )
        if self.max_output_bytes < 1:
            raise ConfigError(f"max_output_bytes must be positive, got {self.max_output_bytes}")
        if self.history_limit is not None and self.history_limit < 1:
            raise ConfigError(f"history_limit must be positive or null, got {self.history_limit}")
        if self.max_search_results < 1:
            raise ConfigError(f"max_search_results must be positive, got {self.max_search_results}")
