from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError

from ..config.loader import load_config
from ..config.models import ToolEnvironment
from ..emulator.qemu import QemuLauncher
from ..emulator.supervisor import run_emulator
from ..errors import BootimageError, BuildError, ConfigError
from ..image.build import cargo_build, target_directory
from ..image.iso import package_iso
from ..mode import RunMode
from ..utils.logging import bind_context, get_logger, setup_logging

# Create a CLI application using Typer
app = typer.Typer(add_completion=False)


@app.callback()
def main() -> None:
    """Package a kernel into a GRUB ISO image and boot it in QEMU."""


@app.command(context_settings={"allow_extra_args": True, "ignore_unknown_options": True})
def runner(
    ctx: typer.Context,
    kernel: Path = typer.Argument(None, help="Kernel executable, as passed by cargo"),
    log_level: str = typer.Option(None, help="TRACE|DEBUG|INFO|WARNING|ERROR"),
) -> None:
    """
    Cargo runner: package KERNEL and launch it.

    Test executables (in a `deps` directory) run under a timeout and their exit
    code is checked against test-success-exit-code; other kernels just run.

    Failure statuses (124 timeout, 125 cleanup, 127 launch) can also be real
    emulator exit codes, e.g. from isa-debug-exit; only the
    `grub-bootimage: <stage>:` line on stderr marks a runner failure.

    Example .cargo/config.toml:
        [target.'cfg(target_os = "none")']
        runner = "grub-bootimage runner"
    """
    try:
        env = ToolEnvironment()
    except ValidationError as e:
        typer.echo(f"grub-bootimage: config: {e}", err=True)
        raise typer.Exit(code=ConfigError.exit_status) from e

    setup_logging(log_level or env.log_level, env.log_file)
    log = get_logger(__name__)
    if ctx.args:
        log.debug("Ignoring extra runner arguments", args=ctx.args)

    try:
        status = _run(env, kernel)
    except BootimageError as e:
        log.error("grub-bootimage failed", action="failed", stage=e.stage, error=str(e))
        typer.echo(f"grub-bootimage: {e.stage}: {e}", err=True)
        raise typer.Exit(code=e.exit_status) from e

    # Exit with the emulator's code on a mismatch, 0 otherwise
    raise typer.Exit(code=status)


def _run(env: ToolEnvironment, kernel: Path | None) -> int:
    if kernel is None:
        executables = cargo_build(env.cargo)
        if not executables:
            raise BuildError("cargo did not report a kernel executable")
        kernel = executables[0]

    mode = RunMode.for_kernel(kernel)
    bind_context(mode=mode.value, kernel=kernel)

    settings = load_config(env.manifest_dir).launch_settings(mode)
    iso = package_iso(kernel, target_directory(env.cargo), env.grub_mkrescue)
    return run_emulator(QemuLauncher(iso, env.qemu), settings, mode)


if __name__ == "__main__":
    app()
