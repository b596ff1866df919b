"""Decoding of the status word reported by ``os.waitpid``."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum

SIGNAL_EXIT_CODE = 1


class TerminationKind(str, Enum):
    """State change a child process can report through ``waitpid``."""

    EXITED = "exited"
    SIGNALED = "signaled"
    STOPPED = "stopped"
    CONTINUED = "continued"


@dataclass(slots=True, frozen=True)
class WaitStatus:
    """Decoded wait status.

    ``exit_code`` is the value the program passed to ``exit`` when the process
    exited normally. A signal carries no program-chosen value, so a killed
    process gets the fixed failure code the status was decoded with.
    Non-terminal state changes have neither.
    """

    raw: int
    kind: TerminationKind
    exit_code: int | None
    signal_number: int | None

    @property
    def is_terminal(self) -> bool:
        return self.kind in (TerminationKind.EXITED, TerminationKind.SIGNALED)

    def describe(self) -> str:
        """Human-readable one-liner used in reports and log lines."""

        if self.kind == TerminationKind.EXITED:
            return f"exited with code {self.exit_code}"
        if self.kind == TerminationKind.SIGNALED:
            return f"killed by signal {self.signal_number}"
        if self.kind == TerminationKind.STOPPED:
            return f"stopped by signal {self.signal_number}"
        return "continued"


def decode_wait_status(raw: int, *, signal_exit_code: int = SIGNAL_EXIT_CODE) -> WaitStatus:
    """Classify a raw ``waitpid`` status word."""

    if os.WIFCONTINUED(raw):
        return WaitStatus(
            raw=raw,
            kind=TerminationKind.CONTINUED,
            exit_code=None,
            signal_number=None,
        )

    if os.WIFSTOPPED(raw):
        return WaitStatus(
            raw=raw,
            kind=TerminationKind.STOPPED,
            exit_code=None,
            signal_number=os.WSTOPSIG(raw),
        )

    if os.WIFEXITED(raw):
        return WaitStatus(
            raw=raw,
            kind=TerminationKind.EXITED,
            exit_code=os.WEXITSTATUS(raw),
            signal_number=None,
        )

    if os.WIFSIGNALED(raw):
        # WEXITSTATUS is only defined for a normal exit.
        return WaitStatus(
            raw=raw,
            kind=TerminationKind.SIGNALED,
            exit_code=signal_exit_code,
            signal_number=os.WTERMSIG(raw),
        )

    raise ValueError(f"Unrecognized wait status: {raw:#06x}")
