#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/progress.py
"""Progress reporting for conversions and operations.

A conversion reports progress as integer percentages through an optional
callback. Within a single call the values a callback observes never decrease:
the dispatcher emits the 10 and 100 bookends and transforms fill in the
intermediate values.

Examples
--------
    >>> from convertflow import SourceFile, convert
    >>>
    >>> def show(percent: int) -> None:
    ...     print(f"{percent}%")
    >>>
    >>> result = convert(SourceFile("notes.txt", b"hello"), "pdf", on_progress=show)
    10%
    40%
    90%
    100%

"""

from __future__ import annotations

import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]
"""Type alias for progress callback functions.

A progress callback accepts an integer percentage between 0 and 100 and
returns None. Callbacks should not raise; an exception raised by a callback
aborts the conversion it reports on.
"""


class ProgressReporter:
    """Monotonic wrapper around an optional progress callback.

    Values are clamped to ``[0, 100]`` and never reported below the highest
    value already delivered, so a transform that reports out of order cannot
    make the caller's progress bar move backwards. Repeated values are
    suppressed.

    Parameters
    ----------
    callback : ProgressCallback or None
        Receiver of progress values. ``None`` turns reporting into a no-op.

    """

    def __init__(self, callback: Optional[ProgressCallback] = None):
        """Initialize the reporter."""
        self._callback = callback
        self._current = -1

    @property
    def current(self) -> int:
        """Highest value reported so far, or 0 if nothing was reported."""
        return max(self._current, 0)

    def __call__(self, value: float) -> None:
        """Report a progress value.

        Parameters
        ----------
        value : float
            Percentage to report; rounded to the nearest integer

        """
        percent = min(100, max(0, int(round(value))))
        if percent <= self._current:
            if percent < self._current:
                logger.debug("Ignoring regressive progress value %s (at %s)", percent, self._current)
            return
        self._current = percent
        if self._callback is not None:
            self._callback(percent)

    def fraction(self, done: int, total: int, ceiling: int = 90) -> None:
        """Report ``done / total`` of the work scaled to ``ceiling`` percent."""
        if total <= 0:
            self(ceiling)
            return
        self(done / total * ceiling)


def as_reporter(progress: ProgressReporter | ProgressCallback | None) -> ProgressReporter:
    """Return ``progress`` as a ProgressReporter, wrapping plain callables."""
    if isinstance(progress, ProgressReporter):
        return progress
    return ProgressReporter(progress)
