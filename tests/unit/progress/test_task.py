"""Unit tests for the logging task listener."""

from __future__ import annotations

import threading

import pytest

from core.constants import INDETERMINATE_PROGRESS
from progress.progress_tree import ProgressTree
from progress.task import LoggingTask


class _FakeLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, object]]] = []

    def debug(self, event: str, **fields: object) -> None:
        self.events.append((event, fields))

    def info(self, event: str, **fields: object) -> None:
        self.events.append((event, fields))


def test_logging_task_records_and_logs_progress(monkeypatch) -> None:
    """Posted values and messages should be recorded and logged."""
    fake_logger = _FakeLogger()
    monkeypatch.setattr("progress.task._LOGGER", fake_logger)
    task = LoggingTask(name="demo")

    task.post_progress(INDETERMINATE_PROGRESS)
    task.post_progress(0.5)
    task.post_message("halfway")

    assert task.progress_values == [INDETERMINATE_PROGRESS, 0.5]
    assert task.messages == ["halfway"]
    assert [event for event, _ in fake_logger.events] == [
        "task_progress",
        "task_progress",
        "task_message",
    ]
    assert fake_logger.events[0][1]["progress"] == "indeterminate"


def test_logging_task_cancel_from_other_thread() -> None:
    """Cancellation requested on another thread should be visible to the worker."""
    task = LoggingTask(name="demo")
    worker = threading.Thread(target=task.cancel)

    worker.start()
    worker.join()

    assert task.is_canceled()


def test_logging_task_drives_progress_tree_range() -> None:
    """A tree built for the task should end exactly at the declared end."""
    task = LoggingTask(name="demo", begin=0.2, end=0.4)
    tree = ProgressTree.for_task(task, steps=4)

    tree.post_step()
    tree.post_end()

    assert task.progress_values[0] == pytest.approx(0.25)
    assert task.last_progress == 0.4
