from __future__ import annotations

import subprocess
from typing import Any

from ..config.models import LaunchSettings
from ..errors import CleanupError, TestTimeout
from ..mode import RunMode
from ..utils.logging import get_logger
from .base import Launcher
from .handle import ChildHandle
from .outcome import Completed, Outcome, TimedOut

_log = get_logger(__name__)


def supervise(handle: ChildHandle, timeout: int) -> Outcome:
    """
    Race the emulator against a deadline and reap it on every path.

    A single bounded wait decides the outcome: an exit observed by the wait is
    Completed, an expired wait is TimedOut. With timeout=0 the child's status is
    checked once without blocking, so a child that is still running times out
    immediately.

    Args:
        handle (ChildHandle): Live handle; it is consumed by this call.
        timeout (int): Deadline in seconds (>= 0).

    Returns:
        Outcome: Completed(exit_code) or TimedOut(timeout).

    Raises:
        HandleConsumedError: If the handle was already waited on.
        CleanupError: If a timed-out emulator cannot be killed.
    """
    proc = handle.take()
    _log.info("Supervising emulator", action="supervise", pid=proc.pid, timeout=timeout)

    try:
        proc.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        _log.error(
            "Emulator did not exit before the deadline",
            action="supervise_timeout",
            pid=proc.pid,
            timeout=timeout,
        )
        _kill_and_reap(proc)
        return TimedOut(timeout=timeout)
    except KeyboardInterrupt:
        _log.warning("Interrupted, stopping emulator", action="supervise_interrupt", pid=proc.pid)
        _kill_and_reap(proc)
        raise

    outcome = _completed(proc)
    _log.info(
        "Emulator exited",
        action="supervise_exit",
        pid=proc.pid,
        exit_code=outcome.exit_code,
        signal=outcome.signal,
    )
    return outcome


def wait_unbounded(handle: ChildHandle) -> int:
    """Wait for the emulator to exit on its own, with no deadline (run mode)."""
    proc = handle.take()
    try:
        proc.wait()
    except KeyboardInterrupt:
        _kill_and_reap(proc)
        raise
    return _completed(proc).exit_code


def report_outcome(outcome: Outcome, expected_exit_code: int) -> int:
    """
    Translate a test outcome into the runner's own exit status.

    Returns:
        int: 0 when the emulator exited with the expected code, otherwise the
            emulator's exit code, to be propagated as the runner's status.

    Raises:
        TestTimeout: If the emulator timed out.
    """
    if isinstance(outcome, TimedOut):
        raise TestTimeout(outcome.timeout)

    if outcome.exit_code == expected_exit_code:
        _log.info("Test passed", action="test_passed", exit_code=outcome.exit_code)
        return 0

    _log.error(
        "Test failed: unexpected emulator exit code",
        action="test_failed",
        exit_code=outcome.exit_code,
        expected_exit_code=expected_exit_code,
    )
    return outcome.exit_code


def run_emulator(launcher: Launcher, settings: LaunchSettings, mode: RunMode) -> int:
    """
    Launch the emulator and return the exit status of this invocation.

    In run mode the emulator's exit code is not checked and the status is always 0.
    """
    handle = launcher.launch(settings)

    if mode is RunMode.RUN:
        code = wait_unbounded(handle)
        _log.info("Emulator exited", action="run_exit", exit_code=code)
        return 0

    outcome = supervise(handle, settings.test_timeout)
    return report_outcome(outcome, settings.success_exit_code)


def _completed(proc: subprocess.Popen[Any]) -> Completed:
    """Build a Completed outcome; a signal-terminated process reports exit code 0."""
    code = proc.returncode
    if code is None or code < 0:
        signum = -code if code is not None else None
        _log.warning(
            "Emulator exit code unavailable, treating it as 0",
            action="exit_code_unavailable",
            pid=proc.pid,
            signal=signum,
        )
        return Completed(exit_code=0, signal=signum)
    return Completed(exit_code=code)


def _kill_and_reap(proc: subprocess.Popen[Any]) -> None:
    """
    Kill the process, then wait for it so no zombie is left behind.

    Only the kill is fatal when it fails; once the kill was delivered a failing
    reap is logged and ignored.
    """
    try:
        proc.kill()
    except OSError as e:
        raise CleanupError(f"failed to kill emulator process {proc.pid}: {e}") from e

    try:
        proc.wait()
    except (OSError, subprocess.SubprocessError) as e:
        _log.warning(
            "Failed to reap killed emulator", action="reap_failed", pid=proc.pid, error=str(e)
        )
