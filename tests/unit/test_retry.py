"""Unit tests for the throttle-aware retry state machine."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from tenantdesk.utils.http import RetryMetrics, RetryState, ThrottleRetry, parse_retry_after


def throttled(retry_after=None):
    headers = {"Retry-After": retry_after} if retry_after is not None else {}
    return httpx.Response(429, headers=headers)


class TestParseRetryAfter:
    """Retry-After header parsing."""

    def test_integer_seconds(self):
        assert parse_retry_after(throttled("2")) == 2

    def test_whitespace_tolerated(self):
        assert parse_retry_after(throttled(" 3 ")) == 3

    def test_missing_header(self):
        assert parse_retry_after(throttled()) is None

    def test_negative_value_parsed(self):
        assert parse_retry_after(throttled("-1")) == -1

    @pytest.mark.parametrize(
        "value",
        ["soon", "1.5", "Wed, 21 Oct 2015 07:28:00 GMT", "", "1_0", "١".encode("utf-8")],
    )
    def test_non_integer_values_ignored(self, value):
        assert parse_retry_after(throttled(value)) is None

    def test_underscored_digits_not_retried(self):
        retry = ThrottleRetry(max_retry=3, max_sleep=20)
        assert retry.next_state(throttled("1_0"), 1) == (RetryState.DONE, None)


class TestNextState:
    """Transition decisions after an attempt."""

    def test_success_is_done(self):
        retry = ThrottleRetry(max_retry=3, max_sleep=5)
        assert retry.next_state(httpx.Response(200), 1) == (RetryState.DONE, None)

    def test_server_error_is_done(self):
        retry = ThrottleRetry(max_retry=3, max_sleep=5)
        assert retry.next_state(httpx.Response(503, headers={"Retry-After": "1"}), 1) == (
            RetryState.DONE,
            None,
        )

    def test_throttle_with_valid_delay_retries(self):
        retry = ThrottleRetry(max_retry=3, max_sleep=5)
        assert retry.next_state(throttled("2"), 1) == (RetryState.THROTTLED_RETRY, 2)

    def test_delay_equal_to_ceiling_retries(self):
        retry = ThrottleRetry(max_retry=3, max_sleep=5)
        assert retry.next_state(throttled("5"), 1) == (RetryState.THROTTLED_RETRY, 5)

    def test_delay_above_ceiling_is_done(self):
        retry = ThrottleRetry(max_retry=3, max_sleep=5)
        assert retry.next_state(throttled("10"), 1) == (RetryState.DONE, None)

    @pytest.mark.parametrize("value", [None, "0", "-3", "later"])
    def test_unusable_delay_is_done(self, value):
        retry = ThrottleRetry(max_retry=3, max_sleep=5)
        assert retry.next_state(throttled(value), 1) == (RetryState.DONE, None)

    def test_last_attempt_is_done(self):
        retry = ThrottleRetry(max_retry=3, max_sleep=5)
        assert retry.next_state(throttled("1"), 2)[0] is RetryState.THROTTLED_RETRY
        assert retry.next_state(throttled("1"), 3) == (RetryState.DONE, None)


class TestRun:
    """Driving the loop."""

    @pytest.mark.asyncio
    async def test_single_attempt_on_success(self):
        send = AsyncMock(return_value=httpx.Response(200, content=b"ok"))
        with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
            response, attempts = await ThrottleRetry().run(send)
        assert response.content == b"ok"
        assert attempts == 1
        sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_retry_then_success(self):
        send = AsyncMock(side_effect=[throttled("2"), httpx.Response(200, content=b"second")])
        metrics = RetryMetrics()
        with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
            response, attempts = await ThrottleRetry(3, 5, metrics).run(send, method="PUT")
        assert response.content == b"second"
        assert attempts == 2
        sleep.assert_awaited_once_with(2)
        counters = metrics.get_metrics()["counters"]
        assert counters["attempts_total.PUT"] == 2
        assert counters["throttles_total.PUT"] == 1
        assert counters["retry_attempts_total.PUT"] == 1
        # Success is judged by the caller against the verb's success set
        assert "success_after_retry.PUT" not in counters

    @pytest.mark.asyncio
    async def test_attempts_bounded_by_max_retry(self):
        send = AsyncMock(return_value=throttled("1"))
        with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
            response, attempts = await ThrottleRetry(max_retry=3, max_sleep=5).run(send)
        assert response.status_code == 429
        assert attempts == 3
        assert send.await_count == 3
        # No sleep after the final attempt
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_max_retry_one_means_single_attempt(self):
        send = AsyncMock(return_value=throttled("1"))
        with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
            _, attempts = await ThrottleRetry(max_retry=1, max_sleep=5).run(send)
        assert attempts == 1
        sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_fractional_ceiling_compares_in_seconds(self):
        send = AsyncMock(side_effect=[throttled("1"), httpx.Response(200)])
        with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
            _, attempts = await ThrottleRetry(max_retry=3, max_sleep=0.5).run(send)
        assert attempts == 1
        sleep.assert_not_called()
