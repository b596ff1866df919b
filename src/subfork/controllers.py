"""Controllers for subfork CLI commands."""

from __future__ import annotations

import os
from dataclasses import dataclass

from subfork.config import Settings
from subfork.manager import TaskManager
from subfork.task import Task

DEFAULT_DEMO_ARGUMENTS: tuple[str, ...] = tuple(str(value) for value in range(1, 11))


@dataclass(slots=True)
class DemoCommand:
    """CLI input for the demo job."""

    arguments: tuple[str, ...]
    tasks: int


@dataclass(slots=True)
class ExitCodesCommand:
    """CLI input for tasks that exit with fixed codes."""

    exit_codes: tuple[int, ...]


@dataclass(slots=True)
class DispatchReport:
    """Per-task report to render in CLI."""

    lines: list[str]
    success: bool


class SubForkCliController:
    """Runs CLI jobs through a task manager and renders their outcome."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings

    def run_demo(self, command: DemoCommand) -> DispatchReport:
        arguments = command.arguments or DEFAULT_DEMO_ARGUMENTS
        manager = self._manager()
        for _ in range(command.tasks):
            manager.start(demo_job, *arguments)
        manager.wait_for_all()
        return DispatchReport(lines=render_task_lines(manager.tasks), success=True)

    def run_exit_codes(self, command: ExitCodesCommand) -> DispatchReport:
        invalid = [code for code in command.exit_codes if not 0 <= code <= 255]  # noqa: PLR2004
        if invalid:
            return DispatchReport(
                lines=[f"Exit codes must be within 0..255: {', '.join(map(str, invalid))}"],
                success=False,
            )

        manager = self._manager()
        for code in command.exit_codes:
            manager.start(exit_with, code)
        manager.wait_for_all()
        return DispatchReport(lines=render_task_lines(manager.tasks), success=True)

    def _manager(self) -> TaskManager:
        return TaskManager(settings=self._settings)


def demo_job(*arguments: str) -> int:
    """Print every argument from the child and exit with their sum modulo 256."""

    pid = os.getpid()
    total = 0
    for argument in arguments:
        print(f"PID: {pid} > {argument}")
        try:
            total += int(argument)
        except ValueError:
            continue
    return total % 256


def exit_with(code: int) -> None:
    raise SystemExit(code)


def render_task_lines(tasks: tuple[Task, ...]) -> list[str]:
    lines: list[str] = []
    for task in tasks:
        decoded = task.wait_status
        lines.extend(
            [
                f"Task with PID {task.process_id} resumed",
                f"Exit status: {task.status}, exit code: {task.exit_code}"
                + (f" ({decoded.describe()})" if decoded is not None else ""),
                f"Args of task were: {', '.join(str(arg) for arg in task.arguments)}",
                "",
            ],
        )
    return lines
