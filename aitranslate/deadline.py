"""Deadline guard for individual provider requests."""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

from .errors import TranslationTimeout

T = TypeVar("T")

DEFAULT_REQUEST_TIMEOUT = 30.0


async def run_with_deadline(seconds: float, operation: Awaitable[T]) -> T:
    """Await ``operation`` but give up after ``seconds``.

    The operation is cancelled when the deadline elapses first and a
    :class:`TranslationTimeout` is raised in its place.
    """

    try:
        return await asyncio.wait_for(operation, timeout=seconds)
    except asyncio.TimeoutError as exc:
        raise TranslationTimeout(seconds) from exc
