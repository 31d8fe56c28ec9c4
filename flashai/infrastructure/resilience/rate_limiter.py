"""Implementation of a rate-limited request queue.

Controls the frequency of outgoing requests to prevent hitting API rate limits.
Submitted tasks wait in a FIFO queue that a single drain loop dispatches one
at a time, allowing at most `max_requests` dispatches per `time_window` and
keeping consecutive dispatches at least `min_interval` apart.

One instance represents one quota: create it once in the composition root
and inject it into every service that shares that quota.
"""

import asyncio
import itertools
import logging
import math
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Deque, Optional

from flashai.domain.events.api_events import (
    EventSink, RequestDeferred, RequestDispatched, RequestDropped, RequestQueued, dispatch_event
)
from flashai.domain.models.common import RateLimitStatus

logger = logging.getLogger(__name__)

# Defaults match the free tier this app was tuned for: 20 requests per
# minute, spaced at least 2 seconds apart.
DEFAULT_MAX_REQUESTS = 20
DEFAULT_TIME_WINDOW_SECONDS = 60.0
DEFAULT_MIN_INTERVAL_SECONDS = 2.0

@dataclass
class QueuedTask:
    """A deferred operation waiting for its turn."""
    task_id: int
    operation: Callable[[], Awaitable[Any]]
    future: "asyncio.Future[Any]"
    enqueued_at: float

@dataclass
class RateWindowState:
    """Quota bookkeeping for the current window."""
    window_start: float
    request_count: int = 0
    last_dispatch_time: float = field(default=-math.inf)

class RateLimiter:
    """FIFO request queue paced by a window quota and a minimum interval."""

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        time_window: float = DEFAULT_TIME_WINDOW_SECONDS,
        min_interval: float = DEFAULT_MIN_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        event_sink: Optional[EventSink] = None,
    ):
        """Initializes the rate limiter.

        Args:
            max_requests: Maximum number of dispatches allowed in the time window.
            time_window: The window length in seconds.
            min_interval: Minimum seconds between two consecutive dispatches.
            clock: Monotonic clock returning seconds.
            sleep: Coroutine function used for pacing waits.
            event_sink: Receives queue events. Defaults to debug logging.
        """
        if max_requests < 1:
            raise ValueError(f"max_requests must be at least 1, got {max_requests}")
        if time_window <= 0:
            raise ValueError(f"time_window must be positive, got {time_window}")
        if min_interval < 0:
            raise ValueError(f"min_interval must be non-negative, got {min_interval}")

        self.max_requests = max_requests
        self.time_window = time_window
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._event_sink = event_sink
        self._queue: Deque[QueuedTask] = deque()
        self._state = RateWindowState(window_start=clock())
        self._draining = False
        self._drain_task: Optional["asyncio.Task[None]"] = None
        self._ids = itertools.count(1)
        logger.info(
            f"RateLimiter initialized: {max_requests} requests / {time_window} seconds, "
            f"min interval {min_interval}s"
        )

    async def execute(self, operation: Callable[[], Awaitable[Any]]) -> Any:
        """Queues `operation` and waits for its outcome.

        The returned value (or raised error) is the operation's own. Cancelling
        the caller while the task is still queued removes it without dispatch.
        """
        loop = asyncio.get_running_loop()
        task = QueuedTask(
            task_id=next(self._ids),
            operation=operation,
            future=loop.create_future(),
            enqueued_at=self._clock(),
        )
        self._queue.append(task)
        dispatch_event(self._event_sink, RequestQueued(task_id=task.task_id, queue_length=len(self._queue)))

        if not self._draining:
            self._draining = True
            self._drain_task = loop.create_task(self._drain())

        return await task.future

    def _drop_cancelled(self) -> None:
        while self._queue and self._queue[0].future.done():
            task = self._queue.popleft()
            logger.debug(f"Dropping cancelled request #{task.task_id} before dispatch")
            dispatch_event(self._event_sink, RequestDropped(task_id=task.task_id))

    async def _drain(self) -> None:
        """Dispatches queued tasks in order until the queue is empty."""
        state = self._state
        try:
            while True:
                self._drop_cancelled()
                if not self._queue:
                    break

                now = self._clock()
                if now - state.window_start >= self.time_window:
                    state.request_count = 0
                    state.window_start = now

                if state.request_count >= self.max_requests:
                    wait_time = self.time_window - (now - state.window_start)
                    logger.info(f"Rate limit reached. Waiting {math.ceil(wait_time)} seconds...")
                    dispatch_event(self._event_sink, RequestDeferred(
                        wait_time_seconds=wait_time, queue_length=len(self._queue)
                    ))
                    await self._sleep(wait_time)
                    continue

                since_last = now - state.last_dispatch_time
                if since_last < self.min_interval:
                    await self._sleep(self.min_interval - since_last)
                    self._drop_cancelled()
                    if not self._queue:
                        break

                task = self._queue.popleft()
                state.last_dispatch_time = self._clock()
                state.request_count += 1
                logger.debug(f"Dispatching request #{task.task_id} ({state.request_count}/{self.max_requests})")
                dispatch_event(self._event_sink, RequestDispatched(
                    task_id=task.task_id,
                    request_count=state.request_count,
                    max_requests=self.max_requests,
                    queued_seconds=state.last_dispatch_time - task.enqueued_at,
                ))
                await self._run(task)
        finally:
            self._draining = False
            self._drain_task = None

    async def _run(self, task: QueuedTask) -> None:
        """Runs one task, forwarding its outcome to the waiting caller."""
        try:
            result = await task.operation()
        except asyncio.CancelledError:
            if not task.future.done():
                task.future.cancel()
            current = asyncio.current_task()
            # Only stop draining when the drain task itself is being cancelled
            if current is not None and current.cancelling():
                raise
            logger.debug(f"Request #{task.task_id} was cancelled by its operation")
        except (KeyboardInterrupt, SystemExit) as e:
            if not task.future.done():
                task.future.set_exception(e)
            raise
        except BaseException as e:
            logger.debug(f"Request #{task.task_id} failed: {type(e).__name__}: {e}")
            if not task.future.done():
                task.future.set_exception(e)
        else:
            if not task.future.done():
                task.future.set_result(result)

    def get_status(self) -> RateLimitStatus:
        """Returns a non-blocking snapshot of the quota and queue."""
        state = self._state
        elapsed = self._clock() - state.window_start
        return RateLimitStatus(
            remaining_requests=max(0, self.max_requests - state.request_count),
            reset_in_seconds=math.ceil(max(0.0, self.time_window - elapsed)),
            queue_length=len(self._queue),
            is_draining=self._draining,
        )
