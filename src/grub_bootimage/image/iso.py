from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

from ..errors import PackageError
from ..utils.cli import run_cmd
from ..utils.logging import get_logger

KERNEL_NAME = "kernel.bin"
ISO_NAME = "os.iso"

GRUB_CFG = f"""\
set timeout=0
set default=0

menuentry "My OS" {{
\tmultiboot2 /boot/{KERNEL_NAME}
\tboot
}}
"""

_log = get_logger(__name__)


def package_iso(kernel: Path, target_dir: Path, grub_mkrescue: str = "grub-mkrescue") -> Path:
    """
    Lay out a GRUB sysroot around the kernel and turn it into a bootable ISO.

    Layout:
        <target>/sysroot/boot/kernel.bin
        <target>/sysroot/boot/grub/grub.cfg
        <target>/os.iso

    Raises:
        PackageError: If the sysroot cannot be written or grub-mkrescue fails.
    """
    sysroot = target_dir / "sysroot"
    grub_dir = sysroot / "boot" / "grub"
    iso = target_dir / ISO_NAME

    try:
        grub_dir.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(kernel, sysroot / "boot" / KERNEL_NAME)
        (grub_dir / "grub.cfg").write_text(GRUB_CFG, encoding="utf-8")
    except OSError as e:
        raise PackageError(f"failed to prepare sysroot {sysroot}: {e}") from e

    args = [grub_mkrescue, "-o", str(iso), str(sysroot)]
    _log.info("Creating ISO image", action="package", cmd=" ".join(args))
    try:
        run_cmd(args, check=True)
    except OSError as e:
        raise PackageError(f"failed to execute {grub_mkrescue}: {e}") from e
    except subprocess.CalledProcessError as e:
        stderr = e.stderr.decode(errors="ignore") if isinstance(e.stderr, bytes) else e.stderr
        raise PackageError(f"{grub_mkrescue} failed (exit={e.returncode}): {stderr}") from e

    return iso
