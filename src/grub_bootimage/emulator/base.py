from __future__ import annotations

import shlex
from abc import ABC, abstractmethod

from ..config.models import LaunchSettings
from ..utils.cli import spawn
from ..utils.logging import get_logger
from .handle import ChildHandle


class Launcher(ABC):
    """
    Abstract base class for emulator launchers.

    Subclasses only decide the command line; starting the process with
    inherited console streams is shared.
    """

    @abstractmethod
    def command(self, settings: LaunchSettings) -> list[str]:
        """
        Build the full emulator command line.

        Args:
            settings (LaunchSettings): Launch description; its extra_args go last.
        """
        ...

    def launch(self, settings: LaunchSettings) -> ChildHandle:
        """
        Start the emulator with stdin/stdout/stderr connected to this console.

        Raises:
            LaunchError: If the emulator executable cannot be found or started.
        """
        log = get_logger(__name__)
        args = self.command(settings)
        log.info(
            "Starting emulator",
            action="emulator_start",
            cmd=" ".join(map(shlex.quote, args)),
        )
        proc = spawn(args)
        log.debug("Emulator process started", action="emulator_started", pid=proc.pid)
        return ChildHandle(proc, args)
