"""Terminal results of a supervised emulator run."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Completed:
    """
    The emulator exited on its own before the deadline.

    When it was terminated by a signal, exit_code is 0 and signal holds the signal number.
    """

    exit_code: int
    signal: int | None = None


@dataclass(frozen=True, slots=True)
class TimedOut:
    """The deadline elapsed while the emulator was still running; it has been killed."""

    timeout: int


Outcome = Completed | TimedOut
