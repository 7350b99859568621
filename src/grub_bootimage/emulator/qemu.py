from __future__ import annotations

from pathlib import Path

from ..config.models import LaunchSettings
from .base import Launcher

DEFAULT_QEMU = "qemu-system-x86_64"


class QemuLauncher(Launcher):
    """Boots an ISO image from the virtual CD-ROM drive of QEMU."""

    def __init__(self, iso: str | Path, qemu: str = DEFAULT_QEMU) -> None:
        """
        Args:
            iso (str | Path): Bootable image produced by the package step.
            qemu (str): QEMU system emulator executable.
        """
        self.iso, self.qemu = Path(iso), qemu

    def command(self, settings: LaunchSettings) -> list[str]:
        return [self.qemu, "-cdrom", str(self.iso), *settings.extra_args]
