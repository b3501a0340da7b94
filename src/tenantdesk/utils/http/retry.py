"""Retry handling for throttled (429) responses.

Only throttling is retried. The server signals how long to wait with a
``Retry-After`` header holding an integer number of seconds; the wait is
honoured when it is positive and within the configured ceiling, and the
number of attempts is bounded by the retry budget.

The dispatch loop is an explicit state machine::

    ATTEMPTING --429 + valid Retry-After + budget left--> THROTTLED_RETRY
    THROTTLED_RETRY --sleep elapsed--> ATTEMPTING
    ATTEMPTING --anything else--> DONE

The backoff sleep is ``asyncio.sleep``, so cancelling the calling task
aborts the wait and no further attempt is sent.
"""

import asyncio
import logging
import re
from enum import Enum
from typing import Awaitable, Callable, Optional, Tuple

import httpx

from .metrics import RetryMetrics

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRY = 3
DEFAULT_MAX_SLEEP = 5.0

# Delta-seconds in ASCII digits, optionally signed
RETRY_AFTER_PATTERN = re.compile(r"[+-]?[0-9]+")


class RetryState(Enum):
    """Dispatcher states."""

    ATTEMPTING = "attempting"
    THROTTLED_RETRY = "throttled_retry"
    DONE = "done"


def parse_retry_after_value(value: Optional[str]) -> Optional[int]:
    """Parse a raw ``Retry-After`` value as integer seconds.

    Only ASCII digits with an optional sign are accepted; HTTP-date,
    fractional and other forms yield None.

    :param value: Header value, or None when absent
    :type value: Optional[str]
    :return: Seconds to wait, or None when absent or not an integer
    :rtype: Optional[int]
    """
    value = (value or "").strip()
    if not value:
        return None
    if not RETRY_AFTER_PATTERN.fullmatch(value):
        logger.debug(f"Ignoring non-numeric Retry-After header {value!r}")
        return None
    return int(value)


def parse_retry_after(response: httpx.Response) -> Optional[int]:
    """Parse the ``Retry-After`` header of a response as integer seconds.

    :param response: Response to inspect
    :type response: httpx.Response
    :return: Seconds to wait, or None when absent or not an integer
    :rtype: Optional[int]
    """
    return parse_retry_after_value(response.headers.get("retry-after"))


class ThrottleRetry:
    """Send attempts until the outcome is not a retryable throttle.

    :param max_retry: Maximum number of attempts in total
    :type max_retry: int
    :param max_sleep: Longest ``Retry-After`` delay honoured, in seconds
    :type max_sleep: float
    :param metrics: Optional metrics collector
    :type metrics: Optional[RetryMetrics]
    """

    def __init__(
        self,
        max_retry: int = DEFAULT_MAX_RETRY,
        max_sleep: float = DEFAULT_MAX_SLEEP,
        metrics: Optional[RetryMetrics] = None,
    ):
        self.max_retry = max_retry
        self.max_sleep = max_sleep
        self.metrics = metrics

    def next_state(
        self, response: httpx.Response, attempt: int
    ) -> Tuple[RetryState, Optional[int]]:
        """Decide what follows an attempt.

        :param response: Outcome of the attempt
        :type response: httpx.Response
        :param attempt: 1-based number of the attempt just made
        :type attempt: int
        :return: Next state and, for a retry, the delay in seconds
        :rtype: Tuple[RetryState, Optional[int]]
        """
        if response.status_code != httpx.codes.TOO_MANY_REQUESTS:
            return RetryState.DONE, None
        if attempt >= self.max_retry:
            logger.warning(f"Throttled and retry budget exhausted after {attempt} attempt(s)")
            return RetryState.DONE, None

        delay = parse_retry_after(response)
        if delay is None or delay <= 0:
            logger.warning("Throttled without a usable Retry-After header, giving up")
            return RetryState.DONE, None
        if delay > self.max_sleep:
            logger.warning(
                f"Throttled with Retry-After {delay}s above the {self.max_sleep}s ceiling, giving up"
            )
            return RetryState.DONE, None
        return RetryState.THROTTLED_RETRY, delay

    async def run(
        self, send: Callable[[], Awaitable[httpx.Response]], method: str = "GET"
    ) -> Tuple[httpx.Response, int]:
        """Drive the state machine until it reaches DONE.

        :param send: Coroutine factory performing one full attempt
        :type send: Callable[[], Awaitable[httpx.Response]]
        :param method: HTTP verb, used for logging and metrics
        :type method: str
        :return: The last response and the number of attempts made
        :rtype: Tuple[httpx.Response, int]
        """
        attempt = 0
        state = RetryState.ATTEMPTING
        response: Optional[httpx.Response] = None
        delay: Optional[int] = None

        while state is not RetryState.DONE:
            if state is RetryState.ATTEMPTING:
                attempt += 1
                if self.metrics:
                    self.metrics.record_attempt(method)
                response = await send()
                if response.status_code == httpx.codes.TOO_MANY_REQUESTS and self.metrics:
                    self.metrics.record_throttle(method)
                state, delay = self.next_state(response, attempt)
            else:
                if self.metrics:
                    self.metrics.record_retry(method, attempt, delay)
                logger.info(f"Retry {attempt}/{self.max_retry} after {delay}s for {method}")
                await asyncio.sleep(delay)
                state = RetryState.ATTEMPTING

        return response, attempt
