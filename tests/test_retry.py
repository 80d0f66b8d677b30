import asyncio
import pytest

from config.settings import get_config
from database.exceptions import (
    DatabaseError,
    DuplicateError,
    IntegrityError,
    NotFoundError,
    RateLimitedError,
    RequestTimeoutError,
    ServiceUnavailableError,
    is_retryable,
    translate_error,
)
from database.retry import NO_RETRY, RetryPolicy, backoff_delay, with_retry


def test_backoff_is_exponential_and_capped():
    policy = RetryPolicy(base_delay=1.0, max_delay=5.0)
    assert [backoff_delay(n, policy) for n in range(1, 6)] == [1.0, 2.0, 4.0, 5.0, 5.0]
    assert backoff_delay(0, policy) == 1.0


def test_policy_from_testing_config():
    policy = RetryPolicy.from_config(get_config("testing"))
    assert policy.max_retries == 3
    assert policy.base_delay == 0
    assert policy.max_delay == 0


def test_only_transient_errors_are_retryable():
    assert is_retryable(ServiceUnavailableError("down"))
    assert is_retryable(RequestTimeoutError("slow"))
    assert is_retryable(RateLimitedError("busy"))
    assert not is_retryable(NotFoundError("gone"))
    assert not is_retryable(DuplicateError("dup"))
    assert not is_retryable(ConnectionError("raw driver error"))


def test_translate_error():
    assert isinstance(translate_error(ConnectionRefusedError()), ServiceUnavailableError)
    assert isinstance(translate_error(asyncio.TimeoutError()), RequestTimeoutError)
    assert isinstance(translate_error(KeyError("x")), DatabaseError)
    original = IntegrityError("fk")
    assert translate_error(original) is original


class _Flaky:
    def __init__(self, failures):
        self.failures = list(failures)
        self.attempts = 0

    async def __call__(self):
        self.attempts += 1
        if self.failures:
            raise self.failures.pop(0)
        return "saved"


@pytest.mark.asyncio
async def test_with_retry_sleeps_between_attempts():
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)

    op = _Flaky([ServiceUnavailableError("a"), RequestTimeoutError("b")])
    result = await with_retry(op, RetryPolicy(base_delay=1.0, max_delay=5.0), sleep=fake_sleep)

    assert result == "saved"
    assert op.attempts == 3
    assert delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_with_retry_gives_up_after_max_retries():
    async def fake_sleep(delay):
        pass

    op = _Flaky([ServiceUnavailableError(str(n)) for n in range(5)])
    with pytest.raises(ServiceUnavailableError) as exc_info:
        await with_retry(op, RetryPolicy(max_retries=2), sleep=fake_sleep)

    assert op.attempts == 3
    assert str(exc_info.value) == "2"


@pytest.mark.asyncio
async def test_with_retry_does_not_retry_permanent_errors():
    op = _Flaky([NotFoundError("gone")])
    with pytest.raises(NotFoundError):
        await with_retry(op, RetryPolicy(base_delay=0, max_delay=0))
    assert op.attempts == 1


@pytest.mark.asyncio
async def test_no_retry_policy():
    op = _Flaky([ServiceUnavailableError("down")])
    with pytest.raises(ServiceUnavailableError):
        await with_retry(op, NO_RETRY)
    assert op.attempts == 1
