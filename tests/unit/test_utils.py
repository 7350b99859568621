from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import Any

import pytest

from grub_bootimage.errors import LaunchError
from grub_bootimage.utils.cli import run_cmd, spawn


def test_run_cmd_success() -> None:
    """run_cmd should succeed and capture stdout on a successful command."""
    out = run_cmd([sys.executable, "-c", "print('hello')"], check=True)
    assert out.returncode == 0
    assert "hello" in out.stdout


def test_run_cmd_error_check_true_raises() -> None:
    """When check=True and the command fails, run_cmd must raise CalledProcessError."""
    with pytest.raises(subprocess.CalledProcessError):
        run_cmd([sys.executable, "-c", "import sys; sys.exit(1)"], check=True)


def test_run_cmd_error_check_false_returns() -> None:
    out = run_cmd([sys.executable, "-c", "import sys; sys.exit(3)"], check=False)
    assert out.returncode == 3


def test_spawn_inherits_console(monkeypatch: pytest.MonkeyPatch) -> None:
    """spawn should start the process without redirecting any standard stream."""
    spawned: dict[str, Any] = {}

    class DummyP:
        def __init__(self, args: list[str], **kwargs: Any) -> None:
            spawned["args"] = args
            spawned["kwargs"] = kwargs

    monkeypatch.setattr("grub_bootimage.utils.cli.subprocess.Popen", DummyP)
    p = spawn(["qemu-system-x86_64", "-cdrom", "os.iso"])
    assert isinstance(p, DummyP)
    assert spawned["args"] == ["qemu-system-x86_64", "-cdrom", "os.iso"]
    assert spawned["kwargs"] == {}


def test_spawn_missing_executable_raises_launch_error() -> None:
    with pytest.raises(LaunchError, match="executable not found"):
        spawn(["no-such-emulator-for-grub-bootimage"])


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
def test_spawn_not_executable_raises_launch_error(tmp_path: Path) -> None:
    script = tmp_path / "qemu"
    script.write_text("#!/bin/sh\nexit 0\n")
    script.chmod(0o644)

    with pytest.raises(LaunchError):
        spawn([str(script)])
