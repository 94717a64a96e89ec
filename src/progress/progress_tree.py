"""Nested, throttled progress reporting.

A progress tree maps step counts and fractions of nested intervals onto
one absolute progress range owned by a task. Intervals live in an arena
indexed by handle; each record keeps its parent's handle, and the tree
owner tracks the handle of the interval currently receiving posts.

Example:
    tree = ProgressTree.for_task(task)
    tree.subsection(0.5, steps=10)   # first half of the root range
    for _ in range(10):
        tree.post_step()
    tree.post_end()
    tree.subsection(1.0)             # everything that remains
    tree.post_fraction(0.5)
    tree.post_end()
    tree.post_end()                  # root end is always emitted

Subsection fractions are taken from the parent's remaining range, so the
last subsection of a sequence is usually ``subsection(1.0)``.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
import math
import time
from typing import Callable, Iterator

from core.config import TabloadConfig
from core.constants import (
    DEFAULT_MIN_PROGRESS_DELTA,
    DEFAULT_MIN_PROGRESS_INTERVAL_MS,
    DEFAULT_PROGRESS_BEGIN,
    DEFAULT_PROGRESS_END,
    INDETERMINATE_PROGRESS,
)
from core.errors import ProgressTreeError
from progress.task import ProgressTask

ClockMs = Callable[[], float]


def monotonic_ms() -> float:
    """Return a monotonic timestamp in milliseconds."""
    return time.monotonic() * 1000.0


@dataclass
class ProgressInterval:
    """One interval of the progress tree.

    Attributes:
        begin: Absolute progress value at 0% of this interval.
        end: Absolute progress value at 100% of this interval.
        current: Absolute position inside ``[begin, end]``.
        step_increment: Progress added per step; zero in fraction mode.
        parent: Handle of the parent interval, None for the root.
    """

    begin: float
    end: float
    current: float
    step_increment: float
    parent: int | None

    @property
    def width(self) -> float:
        return self.end - self.begin

    @property
    def remaining_width(self) -> float:
        return self.end - self.current


@dataclass
class ThrottleState:
    """Emission policy shared by every interval of a tree.

    Attributes:
        min_value_delta: Increase over the last emission that always emits.
        min_time_delta_ms: Elapsed time since the last emission that always emits.
        last_value: Last emitted determinate value.
        last_time_ms: Clock reading of the last emission.
        indeterminate: Whether the last emission was the indeterminate marker.
    """

    min_value_delta: float
    min_time_delta_ms: float
    last_value: float = -math.inf
    last_time_ms: float = -math.inf
    indeterminate: bool = False

    def should_emit(self, value: float, now_ms: float) -> bool:
        """Return whether a determinate value passes the throttle."""
        if self.indeterminate:
            return True
        if value - self.last_value >= self.min_value_delta:
            return True
        return now_ms - self.last_time_ms >= self.min_time_delta_ms

    def record(self, value: float, now_ms: float) -> None:
        self.last_value = value
        self.last_time_ms = now_ms
        self.indeterminate = False

    def record_indeterminate(self, now_ms: float) -> None:
        self.last_time_ms = now_ms
        self.indeterminate = True


def _build_interval(begin: float, end: float, steps: int, parent: int | None) -> ProgressInterval:
    """Create an interval in step mode when ``steps`` is positive."""
    if steps < 0:
        raise ProgressTreeError(
            f"Invalid progress step count {steps}: expected zero (fraction mode) or more."
        )
    step_increment = (end - begin) / steps if steps > 0 else 0.0
    return ProgressInterval(
        begin=begin,
        end=end,
        current=begin,
        step_increment=step_increment,
        parent=parent,
    )


def _clamp_fraction(fraction: float) -> float:
    return min(1.0, max(0.0, fraction))


class ProgressTree:
    """Stack of nested progress intervals bound to one task.

    The tree is single-writer: callers sharing it across threads must
    serialize ``subsection``, ``post_*`` and ``post_end`` themselves.
    """

    def __init__(
        self,
        task: ProgressTask | None,
        begin: float = DEFAULT_PROGRESS_BEGIN,
        end: float = DEFAULT_PROGRESS_END,
        steps: int = 0,
        *,
        min_value_delta: float = DEFAULT_MIN_PROGRESS_DELTA,
        min_time_delta_ms: float = DEFAULT_MIN_PROGRESS_INTERVAL_MS,
        clock: ClockMs | None = None,
    ) -> None:
        if end < begin:
            raise ProgressTreeError(
                f"Invalid progress range [{begin}, {end}]: end must not precede begin."
            )
        self._task = task
        self._clock = clock or monotonic_ms
        self._throttle = ThrottleState(
            min_value_delta=min_value_delta,
            min_time_delta_ms=min_time_delta_ms,
        )
        self._intervals: list[ProgressInterval] = [_build_interval(begin, end, steps, None)]
        self._current: int | None = 0

    @classmethod
    def for_task(
        cls,
        task: ProgressTask,
        steps: int = 0,
        config: TabloadConfig | None = None,
        clock: ClockMs | None = None,
    ) -> "ProgressTree":
        """Build a tree whose root spans the task's declared range.

        Args:
            task: Task receiving progress values.
            steps: Root step count, zero for fraction mode.
            config: Optional config supplying throttle settings.
            clock: Optional millisecond clock, monotonic by default.

        Returns:
            A new progress tree.
        """
        throttle_kwargs: dict[str, float] = {}
        if config is not None:
            throttle_kwargs = {
                "min_value_delta": config.progress_min_delta,
                "min_time_delta_ms": config.progress_min_interval_ms,
            }
        return cls(
            task,
            task.declared_begin_progress(),
            task.declared_end_progress(),
            steps,
            clock=clock,
            **throttle_kwargs,
        )

    @property
    def current_progress(self) -> float:
        """Absolute position of the current interval, or the root end once finished."""
        if self._current is None:
            return self._intervals[0].end
        return self._intervals[self._current].current

    @property
    def is_finished(self) -> bool:
        return self._current is None

    @property
    def depth(self) -> int:
        """Number of open intervals, zero once the root has ended."""
        if self._current is None:
            return 0
        return self._current + 1

    def interval(self) -> ProgressInterval:
        """Return the interval currently receiving posts."""
        return self._intervals[self._require_current()]

    def post_begin(self) -> None:
        """Post the start of the root interval if nothing has moved it yet."""
        handle = self._require_current()
        root = self._intervals[0]
        if handle == 0 and root.current == root.begin:
            self.post_fraction(0.0)

    def post_fraction(self, fraction: float) -> None:
        """Move the current interval to ``fraction`` of its range and post it."""
        if math.isnan(fraction):
            return
        interval = self._intervals[self._require_current()]
        interval.current = interval.begin + _clamp_fraction(fraction) * interval.width
        self._post_value(interval.current)

    def post_step(self) -> None:
        self.post_steps(1)

    def post_steps(self, steps: int) -> None:
        """Advance the current interval by ``steps`` steps and post it.

        Fraction-mode intervals and negative counts leave progress unchanged.
        """
        interval = self._intervals[self._require_current()]
        if steps < 0 or interval.step_increment == 0.0:
            return
        interval.current = min(interval.end, interval.current + steps * interval.step_increment)
        self._post_value(interval.current)

    def post_indeterminate(self) -> None:
        """Emit the unknown-progress marker, bypassing the throttle."""
        self._require_current()
        self._throttle.record_indeterminate(self._clock())
        if self._task is not None:
            self._task.post_progress(INDETERMINATE_PROGRESS)

    def post_message(self, text: str) -> None:
        if self._task is not None:
            self._task.post_message(text)

    def subsection(self, fraction: float | None = None, steps: int = 0) -> None:
        """Push a child interval over part of the current interval's remaining range.

        The parent's position jumps to the child's end immediately, so
        posts made inside the child never move the parent backwards.

        Args:
            fraction: Share of the parent's remaining range, clamped to
                ``[0, 1]``. None turns the current interval into a
                fraction-mode copy of itself: same range and position,
                steps discarded.
            steps: Step count for the child, zero for fraction mode.
        """
        parent_handle = self._require_current()
        parent = self._intervals[parent_handle]
        if fraction is None:
            child = _build_interval(parent.begin, parent.end, 0, parent_handle)
            child.current = parent.current
            self._push(child)
            return
        begin = parent.current
        end = min(parent.end, begin + _clamp_fraction(fraction) * parent.remaining_width)
        self._push(_build_interval(begin, end, steps, parent_handle))

    def step_subsection(self, steps: int = 0) -> None:
        """Push a child interval covering the parent's next step."""
        parent_handle = self._require_current()
        parent = self._intervals[parent_handle]
        end = min(parent.end, parent.current + parent.step_increment)
        self._push(_build_interval(parent.current, end, steps, parent_handle))

    def post_end(self) -> None:
        """Complete the current interval and return to its parent.

        Ending the root always emits the root's end value and retires
        the tree; further posts raise ProgressTreeError.
        """
        handle = self._require_current()
        interval = self._intervals[handle]
        if interval.parent is None:
            interval.current = interval.end
            self._post_value(interval.end, force=True)
            self._current = None
            return
        self.post_fraction(1.0)
        del self._intervals[handle:]
        self._current = interval.parent

    @contextmanager
    def section(self, fraction: float | None = None, steps: int = 0) -> Iterator["ProgressTree"]:
        """Run a block inside a subsection that is always ended.

        Subsections the block left open are ended first.
        """
        self.subsection(fraction, steps)
        handle = self._require_current()
        try:
            yield self
        finally:
            while self._current is not None and self._current > handle:
                self.post_end()
            if self._current == handle:
                self.post_end()

    def _push(self, interval: ProgressInterval) -> None:
        parent = self._intervals[self._require_current()]
        parent.current = interval.end
        self._intervals.append(interval)
        self._current = len(self._intervals) - 1

    def _post_value(self, value: float, force: bool = False) -> None:
        now_ms = self._clock()
        if not force and not self._throttle.should_emit(value, now_ms):
            return
        self._throttle.record(value, now_ms)
        if self._task is not None:
            self._task.post_progress(value)

    def _require_current(self) -> int:
        if self._current is None:
            raise ProgressTreeError(
                "Progress tree has already ended its root interval. "
                "Create a new ProgressTree for the next operation."
            )
        return self._current
