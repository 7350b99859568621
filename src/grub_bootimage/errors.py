from __future__ import annotations


class BootimageError(Exception):
    """
    Base class for failures of a grub-bootimage invocation.

    Each subclass names the stage that failed and the exit status the
    runner terminates with.
    """

    stage: str = "runner"
    exit_status: int = 1


class ConfigError(BootimageError):
    """The [package.metadata.grub-bootimage] table could not be read or validated."""

    stage = "config"
    exit_status = 2


class BuildError(BootimageError):
    """cargo build or cargo metadata failed."""

    stage = "build"
    exit_status = 3


class PackageError(BootimageError):
    """The sysroot or the ISO image could not be assembled."""

    stage = "package"
    exit_status = 4


class LaunchError(BootimageError):
    """The emulator executable is missing or could not be started."""

    stage = "launch"
    exit_status = 127


class TestTimeout(BootimageError, TimeoutError):
    """The supervised process did not exit before the deadline."""

    stage = "timeout"
    exit_status = 124

    def __init__(self, timeout: int) -> None:
        super().__init__(f"test did not finish within {timeout} seconds; emulator was killed")
        self.timeout = timeout


class CleanupError(BootimageError):
    """A timed-out process could not be killed."""

    stage = "cleanup"
    exit_status = 125


class HandleConsumedError(RuntimeError):
    """A ChildHandle was waited on after it had already been consumed."""
