# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Time-based progress estimation for a corpus scan."""

from __future__ import annotations

import time
from collections.abc import Callable

from riskscope.core.constants import PROGRESS_CAP_PERCENTAGE
from riskscope.models.similarity import ScanProgress


class ProgressEstimator:
    """Estimates scan progress from elapsed time and a per-item cost.

    ``processed = min(total, elapsed / item_cost)``. The reported percentage
    has one decimal place, so long scans show movement from the first item,
    and is capped at ``cap`` until :meth:`finish` is called. Reported
    values never decrease.

    Args:
        total: Corpus size fetched at scan start.
        item_cost: Estimated seconds per corpus item.
        cap: Highest percentage reported before the scan really finishes.
        clock: Monotonic clock, injectable for tests.
    """

    def __init__(
        self,
        total: int,
        item_cost: float = 0.1,
        cap: int = PROGRESS_CAP_PERCENTAGE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if item_cost <= 0:
            raise ValueError("item_cost must be positive")
        self.total = max(0, total)
        self.item_cost = item_cost
        self.cap = max(0, min(99, cap))
        self._clock = clock
        self._started_at = clock()
        self._last = ScanProgress(processed=0, total=self.total, percentage=0.0)
        self._finished = False

    @property
    def current(self) -> ScanProgress:
        return self._last

    def tick(self) -> ScanProgress:
        """Recompute the estimate; returns the (non-decreasing) current value."""
        if self._finished:
            return self._last
        if self.total == 0:
            return self._last

        elapsed = self._clock() - self._started_at
        processed = min(self.total, int(elapsed / self.item_cost))
        percentage = min(float(self.cap), round(processed / self.total * 100, 1))

        processed = max(processed, self._last.processed)
        percentage = max(percentage, self._last.percentage)
        self._last = ScanProgress(processed=processed, total=self.total, percentage=percentage)
        return self._last

    def finish(self) -> ScanProgress:
        """Snap to 100% once the real computation has completed."""
        self._finished = True
        self._last = ScanProgress(processed=self.total, total=self.total, percentage=100.0)
        return self._last
