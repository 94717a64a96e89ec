"""Task listener contract and a logging implementation.

A task owns a declared progress range, receives progress values and
text messages, and can be polled for a cancellation request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import threading
from typing import Protocol

from core.constants import DEFAULT_PROGRESS_BEGIN, DEFAULT_PROGRESS_END, INDETERMINATE_PROGRESS
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class ProgressTask(Protocol):
    """Listener that receives progress from long-running operations."""

    def declared_begin_progress(self) -> float: ...

    def declared_end_progress(self) -> float: ...

    def post_progress(self, value: float) -> None: ...

    def post_message(self, text: str) -> None: ...

    def is_canceled(self) -> bool: ...


@dataclass
class LoggingTask:
    """Task that records and logs every progress value and message.

    Attributes:
        name: Task name attached to every log event.
        begin: Declared start of the progress range.
        end: Declared end of the progress range.
        progress_values: Progress values in the order they were posted.
        messages: Text messages in the order they were posted.
    """

    name: str
    begin: float = DEFAULT_PROGRESS_BEGIN
    end: float = DEFAULT_PROGRESS_END
    progress_values: list[float] = field(default_factory=list)
    messages: list[str] = field(default_factory=list)
    _cancel_event: threading.Event = field(default_factory=threading.Event, repr=False)

    def declared_begin_progress(self) -> float:
        return self.begin

    def declared_end_progress(self) -> float:
        return self.end

    def post_progress(self, value: float) -> None:
        """Record a progress value; negative values mean unknown progress."""
        self.progress_values.append(value)
        if value == INDETERMINATE_PROGRESS:
            _LOGGER.debug("task_progress", task=self.name, progress="indeterminate")
            return
        _LOGGER.debug("task_progress", task=self.name, progress=round(value, 6))

    def post_message(self, text: str) -> None:
        self.messages.append(text)
        _LOGGER.info("task_message", task=self.name, message=text)

    def cancel(self) -> None:
        """Request cooperative cancellation; safe to call from any thread."""
        self._cancel_event.set()

    def is_canceled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def last_progress(self) -> float | None:
        """Most recently posted progress value, if any."""
        if not self.progress_values:
            return None
        return self.progress_values[-1]
