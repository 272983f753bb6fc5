"""Error handling policy implementation."""

from __future__ import annotations

from typing import List, Optional

from .errors import ErrorCategory, ErrorRecord

_MARKERS = {
    ErrorCategory.UNSUPPORTED_FORMAT: "[⚠️]",
    ErrorCategory.BACKUP: "[⚠️]",
    ErrorCategory.PROVIDER: "[❌]",
    ErrorCategory.TIMEOUT: "[❌]",
}


class ErrorPolicy:
    """Collects per-unit failures without interrupting the run.

    Unsupported formats, provider failures and timeouts are contained in the
    task that met them. They are printed once and kept for the final summary.
    """

    def __init__(self, *, verbose: bool = False) -> None:
        self.verbose = verbose
        self.records: List[ErrorRecord] = []

    def handle_error(
        self,
        category: ErrorCategory,
        message: str,
        details: Optional[str] = None,
    ) -> ErrorRecord:
        """Record a contained error and print it."""

        record = ErrorRecord(category=category, message=message, details=details)
        self.records.append(record)

        print(f"{_MARKERS[category]} {message}")
        if self.verbose and details:
            print(f"[💥] {details}")
        return record

    def count(self, *categories: ErrorCategory) -> int:
        """Number of recorded errors, optionally restricted to categories."""

        if not categories:
            return len(self.records)
        return sum(1 for record in self.records if record.category in categories)
