from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from ..config.models import EngineConfig


@dataclass
class SearchFilter:
    exclude_dirs: frozenset[str]
    exclude_extensions: frozenset[str]
    exclude_hidden: bool = True

    @staticmethod
    def from_config(cfg: EngineConfig) -> "SearchFilter":
        return SearchFilter(
            exclude_dirs=frozenset(cfg.search_exclude_dirs),
            exclude_extensions=frozenset(e.lower().lstrip(".") for e in cfg.search_exclude_extensions),
            exclude_hidden=cfg.search_exclude_hidden,
        )

    def include_dir(self, name: str) -> bool:
        if name in self.exclude_dirs:
            return False
        if self.exclude_hidden and name.startswith("."):
            return False
        return True

    def include_file(self, name: str) -> bool:
        if self.exclude_hidden and name.startswith("."):
            return False
        ext = name.rsplit(".", 1)[-1].lower() if "." in name else ""
        return ext not in self.exclude_extensions

    def walk_files(self, root: Path) -> Iterator[Path]:
        """Yield files under root in sorted order, pruning excluded dirs.

        The root itself is never pruned, even when it would match a rule.
        """
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if self.include_dir(d))
            for f in sorted(filenames):
                if self.include_file(f):
                    yield Path(dirpath) / f
