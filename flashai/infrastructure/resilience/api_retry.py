"""Service for executing API calls with automatic retries.

Implements exponential backoff for transient errors like rate limits (429),
network failures, timeouts or temporary server issues (5xx). Errors are
classified by type; anything not known to be transient is raised at once.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

# Domain Layer Imports
from flashai.domain.errors import RateLimitError, WordInfoError
from flashai.domain.events.api_events import EventSink, RetryScheduled, dispatch_event

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3
DEFAULT_INITIAL_DELAY_SECONDS = 1.0
DEFAULT_MAX_DELAY_SECONDS = 10.0

# Network-layer failures raised by asyncio or the socket layer directly
NETWORK_EXCEPTIONS = (ConnectionError, TimeoutError, asyncio.TimeoutError)

RetryObserver = Callable[[int, Exception], None]
Sleeper = Callable[[float], Awaitable[Any]]

@dataclass
class RetryConfig:
    """Retry backoff configuration.

    Attributes:
        max_retries: Retries after the initial attempt (total attempts = max_retries + 1).
        initial_delay: Delay in seconds before the first retry.
        max_delay: Upper bound in seconds for any single delay.
        on_retry: Optional observer called with (retry_number, error) before each
            backoff sleep. Used for logging only; it cannot change the outcome.
    """
    max_retries: int = DEFAULT_MAX_RETRIES
    initial_delay: float = DEFAULT_INITIAL_DELAY_SECONDS
    max_delay: float = DEFAULT_MAX_DELAY_SECONDS
    on_retry: Optional[RetryObserver] = None

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.initial_delay < 0 or self.max_delay < 0:
            raise ValueError("Retry delays must be non-negative")

    def calculate_delay(self, attempt: int) -> float:
        """Delay before re-attempting after the 0-based `attempt` failed."""
        return min(self.initial_delay * (2 ** attempt), self.max_delay)

def is_retriable_error(error: BaseException) -> bool:
    """Returns True if `error` is transient and worth another attempt."""
    if isinstance(error, WordInfoError):
        return error.retriable
    return isinstance(error, NETWORK_EXCEPTIONS)

# --- Retry Service ---

class ApiRetryService:
    """Runs async operations with exponential backoff on retriable errors."""

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        sleep: Sleeper = asyncio.sleep,
        event_sink: Optional[EventSink] = None,
    ):
        """Initializes the ApiRetryService.

        Args:
            config: Backoff configuration. Defaults to RetryConfig().
            sleep: Coroutine function used to wait between attempts.
            event_sink: Receives RetryScheduled events. Defaults to debug logging.
        """
        self.config = config or RetryConfig()
        self._sleep = sleep
        self._event_sink = event_sink
        logger.info(
            f"ApiRetryService initialized: max_retries={self.config.max_retries}, "
            f"initial_delay={self.config.initial_delay}s, max_delay={self.config.max_delay}s"
        )

    def _notify_retry(self, retry_number: int, error: Exception) -> None:
        if self.config.on_retry is None:
            return
        try:
            self.config.on_retry(retry_number, error)
        except Exception as observer_error:
            logger.warning(f"on_retry observer raised {type(observer_error).__name__}: {observer_error}")

    async def execute_with_retry(
        self,
        operation: Callable[..., Awaitable[Any]],
        *args: Any,
        **kwargs: Any
    ) -> Any:
        """Executes an async operation, retrying it on transient failures.

        Args:
            operation: The async function (API call) to execute.
            *args: Positional arguments for the operation.
            **kwargs: Keyword arguments for the operation.

        Returns:
            The result of the first successful attempt.

        Raises:
            Exception: The last error once retries are exhausted, or the first
                non-retriable error unchanged.
        """
        config = self.config
        name = getattr(operation, '__name__', repr(operation))
        last_error: Optional[Exception] = None

        for attempt in range(config.max_retries + 1):
            try:
                return await operation(*args, **kwargs)
            except Exception as e:
                last_error = e
                if not is_retriable_error(e):
                    logger.debug(f"Non-retryable error from {name} on attempt {attempt + 1}: {type(e).__name__}: {e}")
                    raise

                if attempt >= config.max_retries:
                    logger.error(f"Max retries ({config.max_retries}) reached for {name}. Last error: {e}")
                    break

                delay = config.calculate_delay(attempt)
                logger.warning(
                    f"Retryable error from {name} on attempt {attempt + 1}/{config.max_retries + 1}: "
                    f"{type(e).__name__}. Waiting {delay:.2f}s..."
                )
                self._notify_retry(attempt + 1, e)
                dispatch_event(self._event_sink, RetryScheduled(
                    attempt_number=attempt + 1, delay_seconds=delay, error_type=type(e).__name__
                ))
                await self._sleep(delay)

        if isinstance(last_error, RateLimitError) and last_error.retry_after is None:
            last_error.retry_after = config.max_delay
        raise last_error

async def run_with_retry(
    operation: Callable[[], Awaitable[Any]],
    config: Optional[RetryConfig] = None,
    sleep: Sleeper = asyncio.sleep,
) -> Any:
    """Runs `operation` once with retries; see ApiRetryService.execute_with_retry."""
    return await ApiRetryService(config=config, sleep=sleep).execute_with_retry(operation)
