"""Thread-safe progress counter shared by concurrent translation tasks."""

from __future__ import annotations

import threading


class ProgressTracker:
    """Counts completed tasks and derives a percentage.

    ``increment`` serialises updates with a lock so every caller observes a
    distinct post-increment count.
    """

    REPORT_STEP = 10

    def __init__(self, total: int) -> None:
        self.total = max(total, 0)
        self.count = 0
        self._last_reported = 0
        self._lock = threading.Lock()

    def increment(self) -> tuple[int, int]:
        """Record one completed task and return ``(count, percentage)``."""

        with self._lock:
            self.count += 1
            return self.count, self._percentage(self.count)

    def should_report(self, percentage: int) -> bool:
        """Return True the first time a new 10% step is reached."""

        step = percentage - percentage % self.REPORT_STEP
        with self._lock:
            if step <= self._last_reported:
                return False
            self._last_reported = step
            return True

    @property
    def percentage(self) -> int:
        with self._lock:
            return self._percentage(self.count)

    def _percentage(self, count: int) -> int:
        if self.total == 0:
            return 100
        return min(100, count * 100 // self.total)
