"""Shell command execution on behalf of the agent.

The deny-list here is a pattern match over the command text. It catches the
obvious destructive commands an agent tends to produce by accident; it cannot
be made sound against quoting, aliases, variables or encoded payloads, and
must not be treated as a security boundary.
"""
from __future__ import annotations

import math
import os
import re
import shutil
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Sequence

from ..util.subprocess import run_cmd
from .errors import CommandRejected, CommandTimeout, InvalidArguments, ToolExecutionError

if TYPE_CHECKING:
    from ..events.store import EventStore

# command position: start of string, after a separator, or inside $( / backticks
_CMD_POS = r"(?:^|[;&|(`]|\$\()\s*(?:sudo\s+)?"
_ROOT_TARGET = r"""["']?(?:/\*?|~/?\*?|\$\{?HOME\}?/?\*?)["']?(?=\s|$|[;&|)])"""


@dataclass(frozen=True)
class DenyRule:
    pattern: str
    reason: str
    regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "regex", re.compile(self.pattern, re.IGNORECASE))

    def matches(self, command: str) -> bool:
        return self.regex.search(command) is not None


DEFAULT_DENY_RULES: tuple[DenyRule, ...] = (
    DenyRule(
        r"\brm\s+(?:-[\w-]+\s+)*(?:-[a-z]*r[a-z]*|--recursive)\s+(?:[^;&|\s]+\s+)*?" + _ROOT_TARGET,
        "recursive delete of the root or home directory",
    ),
    DenyRule(r":\(\)\s*\{\s*:\s*\|\s*:\s*&\s*\}\s*;\s*:", "fork bomb"),
    DenyRule(_CMD_POS + r"(?:shutdown|reboot|halt|poweroff)\b", "system shutdown/reboot"),
    DenyRule(r"\bsystemctl\s+(?:poweroff|reboot|halt|kexec)\b", "system shutdown/reboot"),
    DenyRule(_CMD_POS + r"init\s+[06]\b", "system shutdown/reboot"),
    DenyRule(_CMD_POS + r"mkfs(?:\.\w+)?\b", "filesystem formatting"),
    DenyRule(r"\bdd\b[^;&|]*\bof=/dev/(?!null\b|zero\b|stdout\b|stderr\b)", "raw write to a device"),
    DenyRule(r">\s*/dev/(?:sd|hd|nvme|xvd|vd|disk|mmcblk)", "raw write to a block device"),
    DenyRule(r"\bsudo\s+rm\b", "privileged delete"),
    DenyRule(r"\bkill\s+-(?:9|kill|sigkill)\s+-1\b", "killing every process"),
    DenyRule(
        r"\bch(?:mod|own)\s+(?:-[\w-]+\s+)*-[a-z]*r[a-z]*\s+(?:\S+\s+)?/(?=\s|$)",
        "recursive permission change on the root directory",
    ),
)


def build_deny_rules(extra_patterns: Iterable[str] = (), *, include_defaults: bool = True) -> tuple[DenyRule, ...]:
    rules = list(DEFAULT_DENY_RULES) if include_defaults else []
    for pat in extra_patterns:
        rules.append(DenyRule(pat, f"matches configured deny pattern '{pat}'"))
    return tuple(rules)


def _shell_argv(command: str) -> list[str]:
    if os.name == "nt":
        return ["cmd.exe", "/c", command]
    shell = "bash" if shutil.which("bash") else "sh"
    return [shell, "-c", command]


@dataclass(frozen=True)
class CommandOutcome:
    exit_code: int
    stdout: str
    stderr: str
    truncated: bool = False
    elapsed: float = 0.0


@dataclass(frozen=True)
class CommandGateway:
    cwd: str
    deny_rules: Sequence[DenyRule] = DEFAULT_DENY_RULES
    default_timeout: float = 30
    max_timeout: float = 600
    max_output_bytes: int = 65536
    events: "EventStore | None" = field(default=None, compare=False)

    def __post_init__(self):
        if self.default_timeout <= 0 or self.max_timeout <= 0:
            raise ValueError("command timeouts must be positive")
        if self.max_output_bytes <= 0:
            raise ValueError("max_output_bytes must be positive")
        object.__setattr__(self, "deny_rules", tuple(self.deny_rules))

    def check(self, command: str) -> None:
        """Raise CommandRejected if `command` must not be run."""
        if not command or not command.strip():
            raise CommandRejected("empty command")
        for rule in self.deny_rules:
            if rule.matches(command):
                if self.events:
                    self.events.emit("command.rejected", {"command": command, "reason": rule.reason})
                raise CommandRejected(f"{rule.reason} is not allowed ({command.strip()!r})")

    def effective_timeout(self, timeout: float | None) -> float:
        if timeout is None:
            return min(self.default_timeout, self.max_timeout)
        if not math.isfinite(timeout) or timeout <= 0:
            raise InvalidArguments("timeout", f"must be a positive, finite number of seconds, got {timeout}")
        return min(float(timeout), self.max_timeout)

    def run(self, command: str, timeout: float | None = None) -> CommandOutcome:
        self.check(command)
        limit = self.effective_timeout(timeout)
        try:
            res = run_cmd(
                _shell_argv(command),
                cwd=self.cwd,
                timeout=limit,
                max_output_bytes=self.max_output_bytes,
            )
        except OSError as e:
            raise ToolExecutionError(f"Failed to start command {command!r}: {e}") from e

        if res.timed_out:
            if self.events:
                self.events.emit("command.timeout", {"command": command, "timeout": limit})
            raise CommandTimeout(command, limit)

        return CommandOutcome(
            exit_code=res.returncode,
            stdout=res.stdout,
            stderr=res.stderr,
            truncated=res.truncated,
            elapsed=res.elapsed,
        )
