"""
Retry policies for requests to the alerts backend.

Reads go through an exponential backoff policy; mutations use
NoRetryStrategy and are sent exactly once.
"""

import asyncio
import logging
import random
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, FrozenSet, Iterable, Optional

from ...shared.exceptions import NetworkFailure, ServerFailure
from ..config import Settings

logger = logging.getLogger(__name__)


class RetryCondition(Enum):
    """Failure kinds a policy may retry"""
    RETRYABLE_STATUS = "retryable_status"    # 500/502/503/504
    TRANSPORT_ERROR = "transport_error"      # no response at all


@dataclass(frozen=True)
class Attempt:
    """Outcome of one failed try"""
    number: int
    error: Exception
    elapsed: float


class RetryStrategy(ABC):

    def __init__(self, max_attempts: int, base_delay: float, max_delay: float, jitter: bool):
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.jitter = jitter

    @abstractmethod
    def should_retry(self, attempt: Attempt) -> bool:
        pass

    @abstractmethod
    def backoff(self, attempt: Attempt) -> float:
        """Seconds to wait before the next try"""
        pass

    def _spread(self, delay: float) -> float:
        # +/-20% so clients sharing a backend do not retry in lockstep
        if not self.jitter or delay <= 0:
            return delay
        return max(0.0, delay * random.uniform(0.8, 1.2))


class ExponentialBackoffStrategy(RetryStrategy):
    """Doubling delay capped at max_delay, for the configured failure kinds"""

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 0.5,
        max_delay: float = 8.0,
        multiplier: float = 2.0,
        jitter: bool = True,
        retry_on: Optional[Iterable[RetryCondition]] = None
    ):
        super().__init__(max_attempts, base_delay, max_delay, jitter)
        self.multiplier = multiplier
        self.retry_on: FrozenSet[RetryCondition] = frozenset(
            retry_on if retry_on is not None else RetryCondition
        )

    def should_retry(self, attempt: Attempt) -> bool:
        if attempt.number >= self.max_attempts:
            return False
        return any(self._matches(condition, attempt.error) for condition in self.retry_on)

    @staticmethod
    def _matches(condition: RetryCondition, error: Exception) -> bool:
        if condition == RetryCondition.RETRYABLE_STATUS:
            return isinstance(error, ServerFailure) and error.is_retryable
        if condition == RetryCondition.TRANSPORT_ERROR:
            return isinstance(error, NetworkFailure)
        return False

    def backoff(self, attempt: Attempt) -> float:
        delay = min(self.base_delay * self.multiplier ** (attempt.number - 1), self.max_delay)
        return self._spread(delay)


class NoRetryStrategy(RetryStrategy):
    """Single attempt"""

    def __init__(self):
        super().__init__(max_attempts=1, base_delay=0.0, max_delay=0.0, jitter=False)

    def should_retry(self, attempt: Attempt) -> bool:
        return False

    def backoff(self, attempt: Attempt) -> float:
        return 0.0


class RetryExecutor:
    """Runs an async operation under a RetryStrategy"""

    def __init__(self, strategy: RetryStrategy):
        self.strategy = strategy

    async def run(self, operation: Callable[[], Awaitable[Any]], description: str) -> Any:
        """
        Await ``operation`` until it succeeds or the strategy gives up.

        The error of the final attempt propagates unchanged.
        """
        started = time.monotonic()
        number = 0
        while True:
            number += 1
            try:
                result = await operation()
            except Exception as e:
                attempt = Attempt(number=number, error=e, elapsed=time.monotonic() - started)
                if not self.strategy.should_retry(attempt):
                    raise
                delay = self.strategy.backoff(attempt)
                logger.warning(
                    f"{description} failed ({type(e).__name__}), attempt {number} of "
                    f"{self.strategy.max_attempts}; retrying in {delay:.2f}s",
                    extra={'component': 'retry', 'operation': description}
                )
                await asyncio.sleep(delay)
                continue

            if number > 1:
                logger.info(f"{description} succeeded on attempt {number}")
            return result


def backoff_from_settings(config: Settings) -> ExponentialBackoffStrategy:
    """Read policy built from the retry_* settings"""
    return ExponentialBackoffStrategy(
        max_attempts=config.retry_max_attempts,
        base_delay=config.retry_base_delay,
        max_delay=config.retry_max_delay
    )
