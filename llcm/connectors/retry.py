"""
Retry policy for throttled CloudWatch Logs requests.

Only throttling is retried. The delay is jittered between 1 and
delay_time_sec seconds so that concurrent workers spread out instead of
hammering the regional rate limit in lockstep.
"""

import asyncio
import random
from typing import Any, Awaitable, Callable, Optional, TypeVar

import structlog
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt

from llcm.errors import BadConfigError, ThrottledError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

THROTTLING_MARKER = "ThrottlingException"

DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_DELAY_TIME_SEC = 3


def is_throttling_error(err: BaseException) -> bool:
    """
    Check whether an error is a rate limit response.

    Matches the error code both as formatted by botocore
    ("An error occurred (ThrottlingException) ...") and by other SDKs
    ("api error ThrottlingException: ...").
    """
    if isinstance(err, ThrottledError):
        return True
    return THROTTLING_MARKER in str(err)


class RetryPolicy:
    """
    Decides whether, how often and how long to retry a provider request.

    Args:
        max_attempts: Total attempts including the first one.
        delay_time_sec: Upper bound of the jittered delay in seconds.
        is_retryable: Error classifier. Defaults to is_throttling_error.
        sleep: Awaitable sleep, replaceable in tests.
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        delay_time_sec: int = DEFAULT_DELAY_TIME_SEC,
        is_retryable: Callable[[BaseException], bool] = is_throttling_error,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ):
        self.max_attempts = max_attempts
        self.delay_time_sec = delay_time_sec
        self._is_retryable = is_retryable
        self._sleep = sleep
        self._rng = rng or random.Random()

    def is_retryable(self, err: BaseException) -> bool:
        return self._is_retryable(err)

    def delay(self, attempt: int, err: Optional[BaseException] = None) -> float:
        """
        Seconds to wait before the next attempt.

        Returns 1 plus a random whole number of seconds in [0, delay_time_sec).

        Raises:
            BadConfigError: If delay_time_sec is not positive.
        """
        if self.delay_time_sec <= 0:
            raise BadConfigError(f"invalid delay time: {self.delay_time_sec}")
        wait = 1
        if self.delay_time_sec > 1:
            wait += self._rng.randrange(self.delay_time_sec)
        return float(wait)

    def _wait(self, retry_state: RetryCallState) -> float:
        err = retry_state.outcome.exception() if retry_state.outcome else None
        return self.delay(retry_state.attempt_number, err)

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        err = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "retrying throttled request",
            attempt=retry_state.attempt_number,
            max_attempts=self.max_attempts,
            delay_sec=retry_state.next_action.sleep if retry_state.next_action else None,
            error=str(err),
        )

    def retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self._wait,
            retry=retry_if_exception(self.is_retryable),
            before_sleep=self._before_sleep,
            sleep=self._sleep,
            reraise=True,
        )

    async def call(self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Run a provider coroutine function under this policy."""
        return await self.retrying()(fn, *args, **kwargs)
