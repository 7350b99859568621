from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from grub_bootimage.mode import RunMode

DEFAULT_TEST_TIMEOUT = 300  # seconds


class LaunchSettings(BaseModel):
    """
    Immutable description of one emulator launch.

    Fields:
    - extra_args: arguments appended to the emulator command line, in order
    - test_timeout: seconds to wait for a test run before killing the emulator
    - expected_exit_code: exit code that marks a passing test (None means 0)
    """

    model_config = ConfigDict(frozen=True)

    extra_args: tuple[str, ...] = ()
    test_timeout: int = Field(default=DEFAULT_TEST_TIMEOUT, ge=0)
    expected_exit_code: int | None = None

    @property
    def success_exit_code(self) -> int:
        return 0 if self.expected_exit_code is None else self.expected_exit_code


class BootimageConfig(BaseModel):
    """
    The `[package.metadata.grub-bootimage]` table of the kernel's Cargo.toml.

    Keys are kebab-case in the file; unknown keys are rejected.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    run_args: list[StrictStr] | None = Field(default=None, alias="run-args")  # QEMU args, run mode
    test_args: list[StrictStr] | None = Field(default=None, alias="test-args")  # QEMU args, tests
    test_success_exit_code: StrictInt | None = Field(default=None, alias="test-success-exit-code")
    test_timeout: StrictInt = Field(default=DEFAULT_TEST_TIMEOUT, alias="test-timeout", ge=0)

    def launch_settings(self, mode: RunMode) -> LaunchSettings:
        """Build the LaunchSettings for the given mode."""
        args = self.test_args if mode is RunMode.TEST else self.run_args
        return LaunchSettings(
            extra_args=tuple(args or ()),
            test_timeout=self.test_timeout,
            expected_exit_code=self.test_success_exit_code,
        )


class ToolEnvironment(BaseSettings):
    """
    Process environment the runner depends on.

    Read once at startup and handed to the build, package and launch steps
    explicitly, so none of them reads os.environ on its own.

    Loads values from:
    - CARGO and CARGO_MANIFEST_DIR, as set by cargo for runners
    - GRUB_BOOTIMAGE_* variables for tool names and logging
    """

    model_config = SettingsConfigDict(env_prefix="GRUB_BOOTIMAGE_", populate_by_name=True)

    cargo: str = Field(default="cargo", validation_alias="CARGO")
    manifest_dir: Path | None = Field(default=None, validation_alias="CARGO_MANIFEST_DIR")
    qemu: str = "qemu-system-x86_64"  # Emulator executable
    grub_mkrescue: str = "grub-mkrescue"  # ISO creation tool
    log_level: str = "INFO"  # TRACE|DEBUG|INFO|WARNING|ERROR
    log_file: Path | None = None  # Optional JSON-lines copy of the log
