from __future__ import annotations

from typing import ClassVar, Literal

ErrorKind = Literal[
    "UnknownTool",
    "InvalidArguments",
    "OutOfRange",
    "PathNotFound",
    "PathAlreadyExists",
    "CommandRejected",
    "Timeout",
    "ToolExecutionError",
]


class ToolError(RuntimeError):
    """Base for every recoverable failure a tool invocation can report.

    The registry turns these into error results; they never escape `execute`.
    """

    kind: ClassVar[ErrorKind] = "ToolExecutionError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnknownTool(ToolError):
    kind = "UnknownTool"

    def __init__(self, name: str, known: list[str] | None = None):
        msg = f"Unknown tool: {name}"
        if known:
            msg += f". Available tools: {', '.join(known)}"
        super().__init__(msg)
        self.name = name


class InvalidArguments(ToolError):
    kind = "InvalidArguments"

    def __init__(self, parameter: str | None, reason: str):
        if parameter:
            msg = f"Invalid argument '{parameter}': {reason}"
        else:
            msg = f"Invalid arguments: {reason}"
        super().__init__(msg)
        self.parameter = parameter
        self.reason = reason


class OutOfRange(ToolError):
    kind = "OutOfRange"


class NoFileOpen(OutOfRange):
    def __init__(self, message: str = "No file is currently open. Use 'open' first."):
        super().__init__(message)


class PathNotFound(ToolError):
    kind = "PathNotFound"

    def __init__(self, path: str, what: str = "Path"):
        super().__init__(f"{what} not found: {path}")
        self.path = path


class PathAlreadyExists(ToolError):
    kind = "PathAlreadyExists"

    def __init__(self, path: str, what: str = "Path"):
        super().__init__(f"{what} already exists: {path}")
        self.path = path


class CommandRejected(ToolError):
    kind = "CommandRejected"

    def __init__(self, reason: str):
        super().__init__(f"Command rejected: {reason}")
        self.reason = reason


class CommandTimeout(ToolError):
    kind = "Timeout"

    def __init__(self, command: str, timeout: float):
        super().__init__(f"Command timed out after {timeout:g} seconds and was killed: {command}")
        self.command = command
        self.timeout = timeout


class ToolExecutionError(ToolError):
    kind = "ToolExecutionError"


# Construction-time bugs. These are raised to the caller, not reported as results.

class DuplicateToolName(ValueError):
    pass


class SchemaError(ValueError):
    pass
