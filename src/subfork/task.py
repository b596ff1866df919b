"""A callable run in a forked child process and its outcome.

A task is created in the dispatcher, forked by ``execute()`` and collected by
``collect()`` from the same process that forked it. The child runs the callable
with the task arguments and turns its return value into the process exit
status; the only data that travels back is that exit status and the raw wait
status word. Variables changed by the callable stay in the child.
"""

from __future__ import annotations

import contextlib
import logging
import os
import sys
from collections.abc import Callable
from typing import Any

from subfork.config import DEFAULT_ERROR_EXIT_CODE, DEFAULT_SIGNAL_EXIT_CODE
from subfork.errors import (
    AlreadyExecuted,
    InvalidArgument,
    NotOwner,
    ProcessNotFound,
    SpawnFailure,
    TaskNotStarted,
)
from subfork.status import WaitStatus, decode_wait_status

logger = logging.getLogger(__name__)

_EXIT_STATUS_MASK = 0xFF


class Task:
    """One unit of work bound to its arguments and its runtime outcome."""

    __slots__ = (
        "_arguments",
        "_callable",
        "_error_exit_code",
        "_exit_code",
        "_owner_process_id",
        "_process_id",
        "_signal_exit_code",
        "_status",
    )

    def __init__(
        self,
        target: Callable[..., Any],
        *arguments: Any,
        error_exit_code: int = DEFAULT_ERROR_EXIT_CODE,
        signal_exit_code: int = DEFAULT_SIGNAL_EXIT_CODE,
    ) -> None:
        if target is None or not callable(target):
            raise InvalidArgument(f"Task code must be callable, got {target!r}")
        _check_exit_code("error_exit_code", error_exit_code)
        _check_exit_code("signal_exit_code", signal_exit_code)

        self._callable = target
        self._arguments = tuple(arguments)
        self._error_exit_code = error_exit_code
        self._signal_exit_code = signal_exit_code
        self._process_id: int | None = None
        self._owner_process_id: int | None = None
        self._status: int | None = None
        self._exit_code: int | None = None

    @classmethod
    def start(
        cls,
        target: Callable[..., Any],
        *arguments: Any,
        error_exit_code: int = DEFAULT_ERROR_EXIT_CODE,
        signal_exit_code: int = DEFAULT_SIGNAL_EXIT_CODE,
    ) -> Task:
        """Create a task and fork it right away."""

        task = cls(
            target,
            *arguments,
            error_exit_code=error_exit_code,
            signal_exit_code=signal_exit_code,
        )
        task.execute()
        return task

    @property
    def callable(self) -> Callable[..., Any]:
        return self._callable

    @property
    def arguments(self) -> tuple[Any, ...]:
        return self._arguments

    @property
    def process_id(self) -> int | None:
        return self._process_id

    @property
    def owner_process_id(self) -> int | None:
        return self._owner_process_id

    @property
    def exit_code(self) -> int | None:
        return self._exit_code

    @property
    def status(self) -> int | None:
        """Raw status word as reported by ``os.waitpid``."""

        return self._status

    @property
    def wait_status(self) -> WaitStatus | None:
        if self._status is None:
            return None
        return decode_wait_status(self._status, signal_exit_code=self._signal_exit_code)

    @property
    def is_executed(self) -> bool:
        return self._process_id is not None

    @property
    def is_collected(self) -> bool:
        return self._exit_code is not None

    def execute(self) -> int:
        """Fork a child that runs the callable; return the child pid without blocking.

        The child never returns from this method: it leaves through
        ``os._exit`` so that atexit callbacks and other shutdown hooks copied
        from the parent do not run a second time.
        """

        if self._process_id is not None:
            raise AlreadyExecuted(self._process_id)

        # Pending output would otherwise be written by both processes.
        _flush_std_streams()
        try:
            pid = os.fork()
        except OSError as error:
            raise SpawnFailure(f"Can't fork because: {error}") from error

        if pid == 0:
            exit_code = self._error_exit_code
            try:
                exit_code = self._run_in_child()
            finally:
                _flush_std_streams()
                os._exit(exit_code)

        self._process_id = pid
        self._owner_process_id = os.getpid()
        logger.debug(
            "Process %s forked task %s with %d argument(s)",
            self._owner_process_id,
            pid,
            len(self._arguments),
        )
        return pid

    def collect(self) -> int:
        """Block until the child terminates and return its exit code.

        Only the process that forked the child may wait for it. Once the
        outcome is known it is cached and further calls return immediately.
        """

        if self._process_id is None:
            raise TaskNotStarted("Task was never executed; there is no process to wait for")

        current_pid = os.getpid()
        if current_pid != self._owner_process_id:
            raise NotOwner(process_id=current_pid, owner_process_id=self._owner_process_id)

        if self._exit_code is not None:
            return self._exit_code

        while True:
            try:
                pid, raw = os.waitpid(self._process_id, 0)
            except ChildProcessError as error:
                raise ProcessNotFound(self._process_id) from error

            if pid != self._process_id:
                continue

            # A state change is not necessarily a termination; the child may
            # only have been stopped or resumed.
            decoded = decode_wait_status(raw, signal_exit_code=self._signal_exit_code)
            if not decoded.is_terminal:
                logger.debug("Task %s %s, waiting for termination", pid, decoded.describe())
                continue

            self._status = raw
            self._exit_code = decoded.exit_code
            logger.debug("Task %s %s", pid, decoded.describe())
            return self._exit_code

    wait_for = collect

    def _run_in_child(self) -> int:
        try:
            result = self._callable(*self._arguments)
        except SystemExit as error:
            return self._exit_code_from_system_exit(error.code)
        except BaseException:
            logger.exception("Task in process %s executed with errors", os.getpid())
            return self._error_exit_code
        return self._exit_code_from_result(result)

    def _exit_code_from_result(self, result: Any) -> int:
        if result is None:
            return 0
        if isinstance(result, int):
            return result & _EXIT_STATUS_MASK
        logger.error(
            "Task in process %s returned %r instead of an exit code",
            os.getpid(),
            result,
        )
        return self._error_exit_code

    def _exit_code_from_system_exit(self, code: Any) -> int:
        # Same conventions as the interpreter applies to an uncaught SystemExit.
        if code is None:
            return 0
        if isinstance(code, int):
            return code & _EXIT_STATUS_MASK
        print(code, file=sys.stderr)
        return self._error_exit_code

    def __repr__(self) -> str:
        name = getattr(self._callable, "__qualname__", repr(self._callable))
        return (
            f"Task(callable={name}, arguments={self._arguments!r}, "
            f"process_id={self._process_id}, exit_code={self._exit_code})"
        )


def _check_exit_code(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= _EXIT_STATUS_MASK:
        raise InvalidArgument(f"{name} must be an integer within 1..255, got {value!r}")


def _flush_std_streams() -> None:
    for stream in (sys.stdout, sys.stderr):
        if stream is None:
            continue
        with contextlib.suppress(AttributeError, ValueError):
            stream.flush()
