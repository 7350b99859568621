from __future__ import annotations

import json
import subprocess
from pathlib import Path

from ..errors import BuildError
from ..utils.cli import run_cmd
from ..utils.logging import get_logger

_log = get_logger(__name__)


def cargo_build(cargo: str = "cargo") -> list[Path]:
    """
    Build the kernel crate and return the executables cargo produced.

    Args:
        cargo (str): Cargo executable (the CARGO variable cargo exports to runners).

    Returns:
        list[Path]: Paths from the "executable" field of compiler-artifact messages,
            in the order cargo reported them.

    Raises:
        BuildError: If cargo cannot be started, the build fails, or its output is not JSON.
    """
    args = [cargo, "build", "--message-format", "json"]
    _log.info("Building kernel", action="build", cmd=" ".join(args))
    try:
        out = run_cmd(args, check=True, capture_stderr=False)
    except OSError as e:
        raise BuildError(f"failed to execute kernel build: {e}") from e
    except subprocess.CalledProcessError as e:
        raise BuildError(f"kernel build failed (exit={e.returncode})") from e

    executables: list[Path] = []
    for line in out.stdout.splitlines():
        if not line.strip():
            continue
        try:
            message = json.loads(line)
        except json.JSONDecodeError as e:
            raise BuildError(f"invalid JSON in cargo output: {line!r}") from e
        executable = message.get("executable") if isinstance(message, dict) else None
        if executable:
            executables.append(Path(executable))

    _log.debug("Build finished", action="build_done", executables=[str(p) for p in executables])
    return executables


def target_directory(cargo: str = "cargo") -> Path:
    """Ask cargo metadata for the workspace target directory."""
    args = [cargo, "metadata", "--format-version", "1", "--no-deps"]
    try:
        out = run_cmd(args, check=True)
        return Path(json.loads(out.stdout)["target_directory"])
    except OSError as e:
        raise BuildError(f"failed to execute cargo metadata: {e}") from e
    except subprocess.CalledProcessError as e:
        stderr = e.stderr.decode(errors="ignore") if isinstance(e.stderr, bytes) else e.stderr
        raise BuildError(f"cargo metadata failed (exit={e.returncode}): {stderr}") from e
    except (json.JSONDecodeError, KeyError, TypeError) as e:
        raise BuildError(f"unexpected cargo metadata output: {e}") from e
