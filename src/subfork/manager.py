"""Dispatcher that forks tasks and waits for them in launch order."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from typing import Any

from subfork.config import Settings
from subfork.errors import NotDispatcher
from subfork.task import Task

logger = logging.getLogger(__name__)


class TaskManager:
    """Start tasks in forked processes and collect them from the dispatcher.

    The dispatcher is the process that built the manager. Only that process
    may start or wait for tasks; a task that gets hold of the manager in its
    child process cannot spawn further tasks through it, so the process tree
    stays one level deep.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings.from_env()
        self._settings.validate()
        self._dispatcher_process_id = os.getpid()
        self._tasks: list[Task] = []

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def dispatcher_process_id(self) -> int:
        return self._dispatcher_process_id

    @property
    def is_dispatcher(self) -> bool:
        return os.getpid() == self._dispatcher_process_id

    @property
    def tasks(self) -> tuple[Task, ...]:
        """Tasks started so far, in launch order."""

        return tuple(self._tasks)

    def start(self, target: Callable[..., Any], *arguments: Any) -> Task:
        """Fork a new task running ``target(*arguments)``; return without waiting."""

        self._assert_is_dispatcher()
        task = Task(
            target,
            *arguments,
            error_exit_code=self._settings.error_exit_code,
            signal_exit_code=self._settings.signal_exit_code,
        )
        task.execute()
        self._tasks.append(task)
        logger.info("Started task #%d as process %s", len(self._tasks), task.process_id)
        return task

    def wait_for_all(self) -> list[int]:
        """Collect every task in launch order and return their exit codes.

        A slow task started early delays reporting of faster ones started
        after it; the order of results never depends on OS completion order.
        """

        self._assert_is_dispatcher()
        exit_codes = [task.collect() for task in self._tasks]
        failed = sum(1 for code in exit_codes if code != 0)
        logger.info("Collected %d task(s), %d failed", len(exit_codes), failed)
        return exit_codes

    def _assert_is_dispatcher(self) -> None:
        current_pid = os.getpid()
        if current_pid == self._dispatcher_process_id:
            return
        raise NotDispatcher(
            process_id=current_pid,
            dispatcher_process_id=self._dispatcher_process_id,
        )
