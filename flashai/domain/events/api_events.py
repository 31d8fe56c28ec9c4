"""Domain Events related to outbound AI calls and their resilience layer.

Examples include events for when calls are queued, paced by the rate
limiter, dispatched, retried, answered from cache, succeed or fail.
"""

from dataclasses import dataclass, field
import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass

EventSink = Callable[[DomainEvent], None]

# --- Rate limiter events ---

@dataclass
class RequestQueued(DomainEvent):
    """A task was submitted to the rate limiter."""
    task_id: int
    queue_length: int
    timestamp: float = field(default_factory=time.time)

@dataclass
class RequestDeferred(DomainEvent):
    """The window quota is used up; the queue waits before dispatching."""
    wait_time_seconds: float
    queue_length: int
    timestamp: float = field(default_factory=time.time)

@dataclass
class RequestDispatched(DomainEvent):
    """The rate limiter invoked a queued task."""
    task_id: int
    request_count: int
    max_requests: int
    queued_seconds: float
    timestamp: float = field(default_factory=time.time)

@dataclass
class RequestDropped(DomainEvent):
    """A queued task was cancelled before it could be dispatched."""
    task_id: int
    timestamp: float = field(default_factory=time.time)

# --- Retry events ---

@dataclass
class RetryScheduled(DomainEvent):
    """A retriable failure occurred and a backoff delay was scheduled."""
    attempt_number: int
    delay_seconds: float
    error_type: str
    timestamp: float = field(default_factory=time.time)

# --- Lookup events ---

@dataclass
class CacheHit(DomainEvent):
    """A lookup was answered from the response cache."""
    key: str
    timestamp: float = field(default_factory=time.time)

@dataclass
class ApiCallSucceeded(DomainEvent):
    """A word information lookup completed through the provider."""
    provider: str
    word: str
    latency_ms: float
    timestamp: float = field(default_factory=time.time)

@dataclass
class ApiCallFailed(DomainEvent):
    """A word information lookup failed definitively."""
    provider: str
    word: str
    error_type: str
    error_message: str
    timestamp: float = field(default_factory=time.time)


def log_event(event: DomainEvent) -> None:
    """Default event sink: records the event in the debug log."""
    logger.debug(f"EVENT: {event}")


def dispatch_event(sink: Optional[EventSink], event: DomainEvent) -> None:
    """Hands an event to `sink`. A failing sink never affects the caller."""
    try:
        (sink or log_event)(event)
    except Exception as e:
        logger.warning(f"Event sink failed for {type(event).__name__}: {e}", exc_info=True)
