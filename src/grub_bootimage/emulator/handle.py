from __future__ import annotations

import subprocess
from collections.abc import Sequence
from typing import Any

from ..errors import HandleConsumedError


class ChildHandle:
    """
    Owning handle to exactly one running emulator process.

    The handle is consumed by the first wait on it (supervise or wait_unbounded);
    the process is reaped by that wait, and any further take() raises.
    """

    def __init__(self, proc: subprocess.Popen[Any], args: Sequence[str]) -> None:
        self._proc: subprocess.Popen[Any] | None = proc
        self.args = tuple(args)
        self.pid: int = proc.pid

    @property
    def consumed(self) -> bool:
        return self._proc is None

    def take(self) -> subprocess.Popen[Any]:
        """Transfer ownership of the process to the caller."""
        if self._proc is None:
            raise HandleConsumedError(f"process {self.pid} has already been waited on")
        proc, self._proc = self._proc, None
        return proc

    def __repr__(self) -> str:
        state = "consumed" if self.consumed else "live"
        return f"ChildHandle(pid={self.pid}, {state})"
