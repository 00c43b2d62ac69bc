from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

from ..tools.errors import InvalidArguments, ToolExecutionError


def resolve_path(cwd: Path, path_str: str, parameter: str = "path") -> Path:
    cwd = Path(cwd).resolve()
    p = Path(path_str).expanduser()
    if not p.is_absolute():
        p = (cwd / p).resolve()
    else:
        p = p.resolve()
    # Keep the agent inside its working tree.
    try:
        p.relative_to(cwd)
    except ValueError:
        raise InvalidArguments(parameter, f"path escapes working directory: {path_str}")
    return p


def display_path(cwd: Path, p: Path) -> str:
    try:
        rel = p.resolve().relative_to(Path(cwd).resolve())
    except ValueError:
        return str(p)
    return str(rel) if str(rel) != "." else "."


def split_lines(text: str) -> tuple[list[str], bool]:
    """Split on "\\n" only. Return (lines, ends_with_newline)."""
    if not text:
        return [], False
    lines = text.split("\n")
    trailing = text.endswith("\n")
    if trailing:
        lines.pop()
    return lines, trailing


def join_lines(lines: list[str], trailing_newline: bool = True) -> str:
    text = "\n".join(lines)
    if lines and trailing_newline:
        text += "\n"
    return text


def read_text(path: Path) -> str:
    """Lenient read for viewing and searching; never used to write back."""
    with path.open(encoding="utf-8", errors="replace", newline="") as f:
        return f.read().replace("\r\n", "\n")


def read_lines(path: Path) -> tuple[list[str], bool]:
    """Return (lines, ends_with_newline), numbered the same way edits number them."""
    return split_lines(read_text(path))


def detect_newline(text: str) -> str:
    """Return "\\r\\n" when every line break in `text` is CRLF, otherwise "\\n"."""
    n = text.count("\n")
    if n and text.count("\r\n") == n:
        return "\r\n"
    return "\n"


@dataclass
class EditableText:
    """A file's content as edit tools see it: "\\n" separated, plus its newline style."""

    text: str
    newline: str = "\n"


def read_for_edit(path: Path, shown: str | None = None) -> EditableText:
    """Strict read for tools that rewrite the file.

    A uniformly CRLF file is handed out with "\\n" line breaks and written back
    as CRLF by `write_edited`. Mixed line endings are left as they are.
    """
    try:
        text = path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as e:
        raise ToolExecutionError(
            f"{shown or path} is not valid UTF-8 text (byte {e.start}); refusing to rewrite it"
        ) from None
    newline = detect_newline(text)
    if newline != "\n":
        text = text.replace(newline, "\n")
    return EditableText(text, newline)


def write_edited(path: Path, text: str, newline: str = "\n") -> None:
    if newline != "\n":
        text = text.replace("\n", newline)
    path.write_text(text, encoding="utf-8", newline="")
