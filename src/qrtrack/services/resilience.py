"""Retry helpers for optimistic-concurrency conflicts."""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random,
)

from qrtrack.errors import ConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_on_conflict(
    func: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
) -> T:
    """Run a read-modify-write callable, re-running it when the write loses a race.

    ``func`` must re-read the record on every call. After ``max_attempts`` the
    last ConflictError propagates.
    """
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_random(min=0.01, max=0.05),
        retry=retry_if_exception_type(ConflictError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    ):
        with attempt:
            return await func()
    raise RuntimeError("Unreachable")  # For type checker
