"""Counters for throttling and retry behaviour."""

import logging
from collections import defaultdict
from typing import Any, Dict

logger = logging.getLogger(__name__)


class RetryMetrics:
    """Collects per-client throttle and retry counters."""

    def __init__(self):
        self._metrics: Dict[str, Dict[str, Any]] = defaultdict(lambda: defaultdict(int))

    def record_attempt(self, method: str) -> None:
        """Record a request attempt sent to the transport."""
        self._metrics["counters"][f"attempts_total.{method}"] += 1

    def record_throttle(self, method: str) -> None:
        """Record a 429 throttle response."""
        self._metrics["counters"][f"throttles_total.{method}"] += 1

    def record_retry(self, method: str, attempt: int, delay: float) -> None:
        """Record a retry scheduled after a throttle."""
        self._metrics["counters"][f"retry_attempts_total.{method}"] += 1
        self._metrics["gauges"][f"retry_delay_seconds.{method}"] = delay
        logger.debug("Retry %d for %s after %ss", attempt, method, delay)

    def record_success_after_retry(self, method: str, attempts: int) -> None:
        """Record a request that succeeded after at least one retry."""
        self._metrics["counters"][f"success_after_retry.{method}"] += 1
        logger.info("Success after %d attempts for %s", attempts, method)

    def get_metrics(self) -> Dict[str, Dict[str, Any]]:
        """Get all collected metrics."""
        return {name: dict(values) for name, values in self._metrics.items()}

    def reset(self) -> None:
        """Clear all collected metrics."""
        self._metrics.clear()
