# dex_api/services/retry.py

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt, wait_exponential

from dex_api.config import RETRY_BASE_DELAY_SECONDS, RETRY_MAX_ATTEMPTS

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _attempt_logger(max_attempts: int) -> Callable[[RetryCallState], None]:
    def _log(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        wait = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            "Operation failed (attempt %s/%s): %s; waiting %.1fs before next attempt",
            retry_state.attempt_number, max_attempts, exc, wait,
        )
    return _log


async def retry_operation(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = RETRY_MAX_ATTEMPTS,
    base_delay: Optional[float] = None,
) -> T:
    """
    Await operation() up to max_attempts times.

    Waits base_delay * 2^attempt between attempts (1s, 2s, 4s... with the default
    base) and re-raises the last error once attempts are exhausted. Every
    exception is retried the same way.
    """
    attempts = max(1, max_attempts)
    delay = RETRY_BASE_DELAY_SECONDS if base_delay is None else base_delay
    retrying = AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=delay, min=0, max=delay * 2 ** max(0, attempts - 2)),
        before_sleep=_attempt_logger(attempts),
        reraise=True,
    )
    async for attempt in retrying:
        with attempt:
            return await operation()
    raise RuntimeError("retry loop exited without a result")  # unreachable with reraise=True
