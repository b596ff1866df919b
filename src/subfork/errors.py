"""Errors raised by tasks and the task manager."""

from __future__ import annotations


class SubForkError(RuntimeError):
    """Base class for every error raised by subfork."""


class InvalidArgument(SubForkError, ValueError):  # noqa: N818
    """A task was built with something that cannot be run."""


class AlreadyExecuted(SubForkError):  # noqa: N818
    """``execute()`` was called on a task that already has a process."""

    def __init__(self, process_id: int) -> None:
        super().__init__(f"Task was already executed as process {process_id}")
        self.process_id = process_id


class TaskNotStarted(SubForkError):  # noqa: N818
    """Collection was requested for a task that was never executed."""


class NotOwner(SubForkError):  # noqa: N818
    """Collection was requested from a process that did not fork the task."""

    def __init__(self, *, process_id: int, owner_process_id: int) -> None:
        super().__init__(
            f"Process {process_id} cannot wait for a task owned by process {owner_process_id}",
        )
        self.process_id = process_id
        self.owner_process_id = owner_process_id


class NotDispatcher(SubForkError):  # noqa: N818
    """A manager operation was called from outside the dispatcher process."""

    def __init__(self, *, process_id: int, dispatcher_process_id: int) -> None:
        super().__init__(
            f"Process {process_id} is not the main dispatcher ({dispatcher_process_id})",
        )
        self.process_id = process_id
        self.dispatcher_process_id = dispatcher_process_id


class ProcessNotFound(SubForkError):  # noqa: N818
    """The wait facility reports no such child process."""

    def __init__(self, process_id: int) -> None:
        super().__init__(f"No child process {process_id} to wait for")
        self.process_id = process_id


class SpawnFailure(SubForkError):  # noqa: N818
    """The OS refused to fork a new process."""
