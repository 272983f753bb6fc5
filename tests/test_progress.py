"""Tests for the shared progress counter."""

import threading

from aitranslate.progress import ProgressTracker


def test_percentage_is_monotonic():
    tracker = ProgressTracker(3)

    results = [tracker.increment() for _ in range(3)]

    assert results == [(1, 33), (2, 66), (3, 100)]


def test_empty_total_reports_complete():
    assert ProgressTracker(0).percentage == 100


def test_concurrent_increments_are_not_lost():
    tracker = ProgressTracker(2000)
    seen = []
    seen_lock = threading.Lock()

    def worker():
        for _ in range(200):
            count, _ = tracker.increment()
            with seen_lock:
                seen.append(count)

    threads = [threading.Thread(target=worker) for _ in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert tracker.count == 2000
    assert sorted(seen) == list(range(1, 2001))


def test_reports_once_per_ten_percent_step():
    tracker = ProgressTracker(40)
    reported = []
    for _ in range(40):
        _, percentage = tracker.increment()
        if tracker.should_report(percentage):
            reported.append(percentage)

    assert reported == [10, 20, 30, 40, 50, 60, 70, 80, 90, 100]
