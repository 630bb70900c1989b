"""
Bounded exponential backoff for rate-limited RPC reads.

Only idempotent reads go through the controller. Whether a failure is worth
retrying is decided in one place, ``classify_failure``.
"""

import asyncio
import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar

import httpx

from spl_token_manager.config import RetryConfig, get_retry_config
from spl_token_manager.logging_config import get_logger
from spl_token_manager.utils.errors import RetryExhaustedError, RpcTimeoutError

T = TypeVar("T")

logger = get_logger(__name__)

TOO_MANY_REQUESTS_STATUS = 429


class FailureKind(str, Enum):
    """Retry eligibility of a failed call."""
    
    RATE_LIMITED = "rate_limited"
    FATAL = "fatal"


def _has_status_429(error: BaseException) -> bool:
    if getattr(error, "http_status", None) == TOO_MANY_REQUESTS_STATUS:
        return True
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code == TOO_MANY_REQUESTS_STATUS
    return False


def _is_timeout_kind(error: BaseException) -> bool:
    return isinstance(error, (RpcTimeoutError, asyncio.TimeoutError, httpx.TimeoutException))


def _contains_too_many_requests_text(error: BaseException) -> bool:
    return "too many requests" in str(error).lower()


def classify_failure(error: BaseException) -> FailureKind:
    """Decide whether a failed read may be retried.
    
    A failure is rate limiting when any of three signals is present: a 429
    status, a timeout, or "too many requests" in the error text.
    
    Args:
        error: The exception raised by the call
        
    Returns:
        FailureKind.RATE_LIMITED or FailureKind.FATAL
    """
    is_rate_limited = (
        _has_status_429(error)
        or _is_timeout_kind(error)
        or _contains_too_many_requests_text(error)
    )
    return FailureKind.RATE_LIMITED if is_rate_limited else FailureKind.FATAL


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff parameters. Delays are in seconds."""
    
    max_retries: int = 5
    initial_delay: float = 1.5
    multiplier: float = 1.5
    max_jitter: float = 0.5
    max_delay: float = 30.0
    
    @classmethod
    def from_config(cls, config: RetryConfig) -> "RetryPolicy":
        return cls(
            max_retries=config.max_retries,
            initial_delay=config.initial_delay,
            multiplier=config.multiplier,
            max_jitter=config.max_jitter,
            max_delay=config.max_delay,
        )


class BackoffController:
    """Runs a read, retrying rate-limited failures with growing, jittered delays."""
    
    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        jitter: Callable[[float, float], float] = random.uniform
    ):
        """
        Args:
            policy: Backoff parameters. Defaults to environment-based config.
            sleep: Awaitable used to wait between attempts
            jitter: Source of random jitter, called as ``jitter(0, max_jitter)``
        """
        self.policy = policy or RetryPolicy.from_config(get_retry_config())
        self._sleep = sleep
        self._jitter = jitter
    
    def next_delay(self, previous: float) -> float:
        """Delay to use after ``previous``, capped at the policy maximum."""
        grown = previous * self.policy.multiplier + self._jitter(0, self.policy.max_jitter)
        return min(grown, self.policy.max_delay)
    
    async def call(self, operation: Callable[[], Awaitable[T]],
                   operation_name: str = "complete the request") -> T:
        """Execute ``operation`` with retries.
        
        Args:
            operation: Zero-argument coroutine factory for an idempotent read
            operation_name: Description used in logs and the exhaustion error
            
        Returns:
            Result of the operation
            
        Raises:
            RetryExhaustedError: If every attempt was rate limited
            Exception: Any non-rate-limit failure, unchanged and without retry
        """
        max_attempts = self.policy.max_retries + 1
        retries = 0
        delay = self.policy.initial_delay
        
        while True:
            try:
                return await operation()
            except Exception as e:
                attempt = retries + 1
                if classify_failure(e) is FailureKind.FATAL:
                    raise
                
                if retries >= self.policy.max_retries:
                    logger.error(
                        f"Rate limited on {operation_name} "
                        f"(attempt {attempt}/{max_attempts}), giving up"
                    )
                    raise RetryExhaustedError(operation_name, attempt) from e
                
                logger.warning(
                    f"Rate limited on {operation_name} (attempt {attempt}/{max_attempts}), "
                    f"retrying in {delay:.2f}s: {str(e)}"
                )
                await self._sleep(delay)
                delay = self.next_delay(delay)
                retries += 1
