import asyncio

import pytest

from flashai.domain.errors import (
    ConfigurationError, FatalError, MalformedResponseError, RateLimitError, TransientNetworkError
)
from flashai.domain.events.api_events import RetryScheduled
from flashai.infrastructure.resilience.api_retry import (
    ApiRetryService, RetryConfig, is_retriable_error, run_with_retry
)

class FlakyOperation:
    """Raises the scripted errors in turn, then returns `result`."""

    def __init__(self, *errors, result="ok"):
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result

class AlwaysFails:
    def __init__(self, error_factory):
        self.error_factory = error_factory
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        raise self.error_factory()

@pytest.fixture
def retry_service(fake_clock):
    return ApiRetryService(config=RetryConfig(), sleep=fake_clock.sleep)

def test_success_on_first_attempt(retry_service, fake_clock):
    operation = FlakyOperation()

    assert asyncio.run(retry_service.execute_with_retry(operation)) == "ok"
    assert operation.calls == 1
    assert fake_clock.sleeps == []

def test_recovers_after_transient_failures(retry_service, fake_clock):
    operation = FlakyOperation(RateLimitError(), TransientNetworkError(status_code=503))

    assert asyncio.run(retry_service.execute_with_retry(operation)) == "ok"
    assert operation.calls == 3
    assert fake_clock.sleeps == [1.0, 2.0]

def test_persistent_rate_limit_exhausts_retries(retry_service, fake_clock):
    operation = AlwaysFails(RateLimitError)

    with pytest.raises(RateLimitError) as exc_info:
        asyncio.run(retry_service.execute_with_retry(operation))

    assert operation.calls == 4
    assert fake_clock.sleeps == [1.0, 2.0, 4.0]
    # No server hint, so the caller is told to wait the longest backoff
    assert exc_info.value.retry_after == 10.0

def test_exhaustion_keeps_server_retry_after(retry_service):
    operation = AlwaysFails(lambda: RateLimitError(retry_after=30.0))

    with pytest.raises(RateLimitError) as exc_info:
        asyncio.run(retry_service.execute_with_retry(operation))
    assert exc_info.value.retry_after == 30.0

@pytest.mark.parametrize("error", [
    FatalError("bad request"),
    MalformedResponseError("not json"),
    ConfigurationError("no key"),
    ValueError("programming error"),
])
def test_non_retriable_errors_fail_immediately(retry_service, fake_clock, error):
    operation = AlwaysFails(lambda: error)

    with pytest.raises(type(error)):
        asyncio.run(retry_service.execute_with_retry(operation))

    assert operation.calls == 1
    assert fake_clock.sleeps == []

def test_zero_retries_means_single_attempt(fake_clock):
    service = ApiRetryService(config=RetryConfig(max_retries=0), sleep=fake_clock.sleep)
    operation = AlwaysFails(TransientNetworkError)

    with pytest.raises(TransientNetworkError):
        asyncio.run(service.execute_with_retry(operation))
    assert operation.calls == 1

def test_delay_is_capped_at_max_delay():
    config = RetryConfig(initial_delay=1.0, max_delay=3.0)
    assert [config.calculate_delay(attempt) for attempt in range(4)] == [1.0, 2.0, 3.0, 3.0]

def test_observer_and_events_receive_each_retry(fake_clock):
    seen = []
    events = []
    config = RetryConfig(max_retries=2, on_retry=lambda n, e: seen.append((n, type(e).__name__)))
    service = ApiRetryService(config=config, sleep=fake_clock.sleep, event_sink=events.append)

    with pytest.raises(TransientNetworkError):
        asyncio.run(service.execute_with_retry(AlwaysFails(TransientNetworkError)))

    assert seen == [(1, "TransientNetworkError"), (2, "TransientNetworkError")]
    assert [(e.attempt_number, e.delay_seconds) for e in events if isinstance(e, RetryScheduled)] == [
        (1, 1.0), (2, 2.0)
    ]

def test_raising_observer_does_not_change_outcome(fake_clock):
    def observer(attempt, error):
        raise RuntimeError("observer broke")

    service = ApiRetryService(config=RetryConfig(on_retry=observer), sleep=fake_clock.sleep)
    operation = FlakyOperation(RateLimitError())

    assert asyncio.run(service.execute_with_retry(operation)) == "ok"
    assert operation.calls == 2

def test_arguments_are_forwarded(retry_service):
    async def add(a, b, scale=1):
        return (a + b) * scale

    assert asyncio.run(retry_service.execute_with_retry(add, 2, 3, scale=10)) == 50

@pytest.mark.parametrize("error, expected", [
    (RateLimitError(), True),
    (TransientNetworkError(), True),
    (ConnectionResetError(), True),
    (asyncio.TimeoutError(), True),
    (FatalError(), False),
    (MalformedResponseError(), False),
    (KeyError("x"), False),
])
def test_is_retriable_error(error, expected):
    assert is_retriable_error(error) is expected

def test_run_with_retry_helper(fake_clock):
    operation = FlakyOperation(TransientNetworkError(), result={"meaning": "x"})

    result = asyncio.run(run_with_retry(operation, RetryConfig(initial_delay=0.5), sleep=fake_clock.sleep))
    assert result == {"meaning": "x"}
    assert fake_clock.sleeps == [0.5]

def test_invalid_retry_config_rejected():
    with pytest.raises(ValueError):
        RetryConfig(max_retries=-1)
    with pytest.raises(ValueError):
        RetryConfig(initial_delay=-1.0)
