"""Run Python callables in forked processes and collect their exit codes."""

from subfork.config import Settings
from subfork.errors import (
    AlreadyExecuted,
    InvalidArgument,
    NotDispatcher,
    NotOwner,
    ProcessNotFound,
    SpawnFailure,
    SubForkError,
    TaskNotStarted,
)
from subfork.manager import TaskManager
from subfork.status import TerminationKind, WaitStatus, decode_wait_status
from subfork.task import Task

__version__ = "0.1.0"

__all__ = [
    "AlreadyExecuted",
    "InvalidArgument",
    "NotDispatcher",
    "NotOwner",
    "ProcessNotFound",
    "Settings",
    "SpawnFailure",
    "SubForkError",
    "Task",
    "TaskManager",
    "TaskNotStarted",
    "TerminationKind",
    "WaitStatus",
    "__version__",
    "decode_wait_status",
]
