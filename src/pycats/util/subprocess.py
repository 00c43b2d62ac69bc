from __future__ import annotations
import os
import signal
import subprocess
import threading
import time
from dataclasses import dataclass
from typing import IO, Sequence, Optional

_CHUNK = 8192


@dataclass
class CmdResult:
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False
    truncated: bool = False
    elapsed: float = 0.0


class _BoundedReader(threading.Thread):
    """Drain a pipe to EOF, keeping at most `limit` bytes."""

    def __init__(self, stream: IO[bytes], limit: int):
        super().__init__(daemon=True)
        self.stream = stream
        self.limit = limit
        self.buf = bytearray()
        self.truncated = False

    def run(self) -> None:
        try:
            while True:
                chunk = self.stream.read1(_CHUNK) if hasattr(self.stream, "read1") else self.stream.read(_CHUNK)
                if not chunk:
                    break
                room = self.limit - len(self.buf)
                if room > 0:
                    self.buf += chunk[:room]
                if len(chunk) > room:
                    self.truncated = True
        except (OSError, ValueError):
            # pipe closed underneath us after a kill
            pass

    def text(self) -> str:
        return self.buf.decode("utf-8", errors="replace")


def _kill_tree(p: subprocess.Popen) -> None:
    if os.name == "nt":
        p.kill()
        return
    try:
        os.killpg(p.pid, signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        p.kill()


def run_cmd(
    cmd: Sequence[str],
    cwd: str,
    timeout: Optional[float] = 120,
    max_output_bytes: int = 65536,
) -> CmdResult:
    """Run `cmd` without a shell of our own, bounding time and captured output.

    On timeout the whole process group is killed and `timed_out` is set.
    Spawn errors (missing executable, bad cwd) propagate as OSError.
    """
    t0 = time.monotonic()
    p = subprocess.Popen(
        list(cmd),
        cwd=cwd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        shell=False,
        start_new_session=(os.name != "nt"),
    )
    out = _BoundedReader(p.stdout, max_output_bytes)
    err = _BoundedReader(p.stderr, max_output_bytes)
    out.start()
    err.start()

    timed_out = False
    try:
        p.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        timed_out = True
        _kill_tree(p)
        p.wait()

    # Readers end once every holder of the pipes is gone; a grace period
    # covers detached grandchildren that escaped the process group.
    out.join(timeout=1.0)
    err.join(timeout=1.0)
    for s in (p.stdout, p.stderr):
        try:
            s.close()
        except OSError:
            pass

    return CmdResult(
        returncode=p.returncode,
        stdout=out.text(),
        stderr=err.text(),
        timed_out=timed_out,
        truncated=out.truncated or err.truncated,
        elapsed=time.monotonic() - t0,
    )
