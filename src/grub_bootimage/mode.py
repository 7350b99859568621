from __future__ import annotations

from enum import Enum
from pathlib import Path


class RunMode(str, Enum):
    """
    How the kernel is launched.

    RUN starts the emulator and waits for it unconditionally.
    TEST supervises it with a timeout and checks its exit code.
    """

    RUN = "run"
    TEST = "test"

    @classmethod
    def for_kernel(cls, kernel: Path) -> RunMode:
        """Cargo places test executables in target/<triple>/<profile>/deps."""
        return cls.TEST if kernel.parent.name == "deps" else cls.RUN
