from __future__ import annotations

import subprocess
from collections.abc import Sequence
from typing import Any

from ..errors import LaunchError


class Completed:
    """
    Wrapper around subprocess.CompletedProcess that decodes stdout and stderr into strings.
    """

    def __init__(self, proc: subprocess.CompletedProcess):
        """
        Initialize a Completed object based on subprocess.CompletedProcess.

        Args:
            proc (subprocess.CompletedProcess): The completed process instance.
        """
        self.returncode = proc.returncode
        self.stdout = (
            proc.stdout.decode()
            if isinstance(proc.stdout, bytes | bytearray)
            else (proc.stdout or "")
        )
        self.stderr = (
            proc.stderr.decode()
            if isinstance(proc.stderr, bytes | bytearray)
            else (proc.stderr or "")
        )


def run_cmd(
    args: Sequence[str],
    *,
    check: bool = True,
    capture_stderr: bool = True,
) -> Completed:
    """
    Execute a command to completion and capture its output.

    Args:
        args (Sequence[str]): Command and arguments to execute.
        check (bool): If True, raise CalledProcessError on failure.
        capture_stderr (bool): If False, stderr is passed through to the console
            (useful for cargo, whose diagnostics go to stderr).

    Returns:
        Completed: Result with stdout/stderr as strings.

    Raises:
        subprocess.CalledProcessError: If `check=True` and process exits with a nonzero code.
        OSError: If the executable cannot be started.
    """
    proc = subprocess.run(
        list(args),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE if capture_stderr else None,
        check=False,
    )

    if check and proc.returncode != 0:
        raise subprocess.CalledProcessError(proc.returncode, args, proc.stdout, proc.stderr)

    return Completed(proc)


def spawn(args: Sequence[str]) -> subprocess.Popen[Any]:
    """
    Start a command without waiting for it.

    Standard input, output and error are inherited from the current process,
    so the child's console output is visible live.

    Raises:
        LaunchError: If the executable is missing or cannot be started.
    """
    try:
        return subprocess.Popen(list(args))
    except FileNotFoundError as e:
        raise LaunchError(f"executable not found: {args[0]}") from e
    except PermissionError as e:
        raise LaunchError(f"permission denied: {args[0]}") from e
    except OSError as e:
        raise LaunchError(f"failed to start {args[0]}: {e}") from e
