"""
➡️ But : Exécuter une unité de travail avec un backoff exponentiel borné.

RetryingExecutor(policy).run(work, name=...) :

jusqu'à policy.max_retries + 1 tentatives,

délai avant la tentative k : min(initial_delay * multiplier**(k-1), max_delay),

à l'épuisement, la dernière erreur est relancée telle quelle à l'appelant.

Le sleep est asynchrone : seule la requête appelante attend, les autres continuent.
Une annulation (asyncio.CancelledError, client déconnecté) n'est pas retentée.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt, wait_exponential

from videosync.core.config import RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")
SleepFn = Callable[[float], Awaitable[None]]


class RetryingExecutor:
    def __init__(self, policy: RetryPolicy, *, sleep: SleepFn = asyncio.sleep):
        self.policy = policy
        self._sleep = sleep

    def _retrying(self, name: str) -> AsyncRetrying:
        max_attempts = self.policy.max_retries + 1

        def _log_retry(state: RetryCallState) -> None:
            logger.warning(
                "%s failed, retrying in %.2fs (attempt %d/%d): %s",
                name,
                state.next_action.sleep if state.next_action else 0.0,
                state.attempt_number,
                max_attempts,
                state.outcome.exception() if state.outcome else None,
            )

        return AsyncRetrying(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(
                multiplier=self.policy.initial_delay,
                exp_base=self.policy.multiplier,
                max=self.policy.max_delay,
            ),
            retry=retry_if_exception_type(Exception),
            sleep=self._sleep,
            before_sleep=_log_retry,
            reraise=True,
        )

    async def run(self, work: Callable[[], Awaitable[T]], *, name: str = "operation") -> T:
        try:
            async for attempt in self._retrying(name):
                with attempt:
                    return await work()
        except Exception as e:
            logger.error("%s failed after %d attempts: %s", name, self.policy.max_retries + 1, e)
            raise
        raise RuntimeError(f"{name}: retry loop exited unexpectedly")
