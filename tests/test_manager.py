from __future__ import annotations

import os
import time

import allure
import pytest

from subfork import NotDispatcher, Settings, Task, TaskManager

pytestmark = [
    allure.epic("Dispatcher"),
    allure.feature("Task Manager"),
]


def _sum_mod_256(*args: int) -> int:
    return sum(args) % 256


def _sleep_then_exit(seconds: float, code: int) -> int:
    time.sleep(seconds)
    return code


def _raise_error() -> int:
    raise ValueError("boom")


def test_new_manager_has_no_tasks(manager: TaskManager) -> None:
    assert manager.tasks == ()
    assert manager.dispatcher_process_id == os.getpid()
    assert manager.is_dispatcher
    assert manager.wait_for_all() == []


def test_start_and_wait_for_sum_task(manager: TaskManager) -> None:
    task = manager.start(_sum_mod_256, *range(1, 11))

    assert isinstance(task, Task)
    assert task.is_executed
    assert manager.wait_for_all() == [55]
    assert task.exit_code == 55  # noqa: PLR2004
    assert task.arguments == (1, 2, 3, 4, 5, 6, 7, 8, 9, 10)
    assert os.WIFEXITED(task.status)


def test_tasks_are_kept_in_launch_order(manager: TaskManager) -> None:
    slow = manager.start(_sleep_then_exit, 0.3, 1)
    fast = manager.start(_sleep_then_exit, 0.0, 2)

    assert manager.tasks == (slow, fast)
    assert manager.wait_for_all() == [1, 2]
    assert [task.exit_code for task in manager.tasks] == [1, 2]
    assert all(task.is_collected for task in manager.tasks)


def test_tasks_view_is_a_snapshot(manager: TaskManager) -> None:
    manager.start(_sleep_then_exit, 0.0, 0)
    snapshot = manager.tasks
    manager.start(_sleep_then_exit, 0.0, 0)
    manager.wait_for_all()

    assert isinstance(snapshot, tuple)
    assert len(snapshot) == 1
    assert len(manager.tasks) == 2  # noqa: PLR2004


def test_wait_for_all_is_idempotent(manager: TaskManager) -> None:
    manager.start(_sleep_then_exit, 0.0, 3)

    assert manager.wait_for_all() == [3]
    assert manager.wait_for_all() == [3]


def test_manager_settings_apply_to_tasks() -> None:
    manager = TaskManager(settings=Settings(error_exit_code=9))
    task = manager.start(_raise_error)

    manager.wait_for_all()
    assert task.exit_code == 9  # noqa: PLR2004


def test_manager_reads_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("SUBFORK_ERROR_EXIT_CODE", "4")

    manager = TaskManager()

    assert manager.settings.error_exit_code == 4  # noqa: PLR2004


def test_manager_rejects_invalid_settings() -> None:
    with pytest.raises(ValueError, match="SUBFORK_SIGNAL_EXIT_CODE"):
        TaskManager(settings=Settings(signal_exit_code=300))


def test_start_from_task_process_is_rejected(manager: TaskManager) -> None:
    def _nested_start() -> int:
        try:
            manager.start(_sleep_then_exit, 0.0, 0)
        except NotDispatcher:
            return 0
        return 2

    task = manager.start(_nested_start)

    manager.wait_for_all()
    assert task.exit_code == 0
    assert len(manager.tasks) == 1


def test_wait_for_all_from_task_process_is_rejected(manager: TaskManager) -> None:
    def _nested_wait() -> int:
        if manager.is_dispatcher:
            return 3
        try:
            manager.wait_for_all()
        except NotDispatcher:
            return 0
        return 2

    task = manager.start(_nested_wait)

    manager.wait_for_all()
    assert task.exit_code == 0


def test_not_dispatcher_reports_both_process_ids(manager: TaskManager, monkeypatch) -> None:
    dispatcher_pid = manager.dispatcher_process_id
    monkeypatch.setattr(os, "getpid", lambda: dispatcher_pid + 1)

    with pytest.raises(NotDispatcher) as error:
        manager.start(_sleep_then_exit, 0.0, 0)

    monkeypatch.undo()
    assert error.value.process_id == dispatcher_pid + 1
    assert error.value.dispatcher_process_id == dispatcher_pid
    assert "is not the main dispatcher" in str(error.value)
    assert manager.tasks == ()
