from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from ..base import ToolSpec, ToolResult, ToolContext


@dataclass
class RunCommandTool:
    spec: ToolSpec = ToolSpec(
        name="run_command",
        description=(
            "Run a shell command in the working directory with a timeout. Returns stdout, stderr and "
            "the exit code. Destructive commands (e.g. rm -rf /, shutdown) are rejected."
        ),
        parameters={
            "type": "object",
            "properties": {
                "command": {"type": "string", "description": "Shell command to run."},
                "timeout": {"type": "number", "description": "Timeout in seconds (capped by configuration)."},
            },
            "required": ["command"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        cmd = args["command"].strip()
        res = ctx.gateway.run(cmd, timeout=args.get("timeout"))

        out = ""
        if res.stdout:
            out += f"STDOUT:\n{res.stdout}\n"
        if res.stderr:
            out += f"STDERR:\n{res.stderr}\n"
        if not out:
            out = "(no output)\n"
        if res.truncated:
            out += f"(output truncated to {ctx.gateway.max_output_bytes} bytes per stream)\n"
        out += f"EXIT_CODE: {res.exit_code}"
        # A nonzero exit is reported as data; the invocation itself succeeded.
        return ToolResult.ok(out, {
            "command": cmd,
            "exit_code": res.exit_code,
            "stdout": res.stdout,
            "stderr": res.stderr,
            "truncated": res.truncated,
        })
