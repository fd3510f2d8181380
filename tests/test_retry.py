import asyncio

import pytest

from videosync.core.config import RetryPolicy
from videosync.features.processing.retry import RetryingExecutor

from conftest import RecordingSleep


class Flaky:
    """Échoue `failures` fois puis renvoie "done"."""

    def __init__(self, failures: int, exc: BaseException = None):
        self.failures = failures
        self.exc = exc or RuntimeError("boom")
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc
        return "done"


@pytest.mark.asyncio
async def test_always_failing_work_is_attempted_max_retries_plus_one(executor, sleep):
    work = Flaky(failures=100)

    with pytest.raises(RuntimeError, match="boom"):
        await executor.run(work, name="always failing")

    assert work.calls == 4
    assert sleep.delays == [1, 2, 4]
    assert 1 <= sum(sleep.delays) <= 30


@pytest.mark.asyncio
async def test_succeeds_after_transient_failures(executor, sleep):
    work = Flaky(failures=2)

    assert await executor.run(work) == "done"
    assert work.calls == 3
    assert sleep.delays == [1, 2]


@pytest.mark.asyncio
async def test_first_success_does_not_sleep(executor, sleep):
    work = Flaky(failures=0)

    assert await executor.run(work) == "done"
    assert work.calls == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_max_delay_caps_backoff():
    sleep = RecordingSleep()
    executor = RetryingExecutor(RetryPolicy(max_retries=5), sleep=sleep)

    with pytest.raises(RuntimeError):
        await executor.run(Flaky(failures=100))

    assert sleep.delays == [1, 2, 4, 8, 10]


@pytest.mark.asyncio
async def test_zero_retries_means_single_attempt():
    sleep = RecordingSleep()
    executor = RetryingExecutor(RetryPolicy(max_retries=0), sleep=sleep)
    work = Flaky(failures=100)

    with pytest.raises(RuntimeError):
        await executor.run(work)

    assert work.calls == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_last_error_is_reraised_as_is(executor):
    errors = iter([ValueError("first"), KeyError("second"), OSError("third"), LookupError("last")])

    async def work():
        raise next(errors)

    with pytest.raises(LookupError, match="last"):
        await executor.run(work)


@pytest.mark.asyncio
async def test_cancellation_is_not_retried(executor, sleep):
    work = Flaky(failures=100, exc=asyncio.CancelledError())

    with pytest.raises(asyncio.CancelledError):
        await executor.run(work)

    assert work.calls == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_policy_drives_the_actual_delays():
    sleep = RecordingSleep()
    policy = RetryPolicy(max_retries=4, initial_delay=0.5, multiplier=3.0, max_delay=5.0)
    executor = RetryingExecutor(policy, sleep=sleep)

    with pytest.raises(RuntimeError):
        await executor.run(Flaky(failures=100))

    assert sleep.delays == [0.5, 1.5, 4.5, 5.0]
