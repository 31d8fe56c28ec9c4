"""Translation of provider SDK exceptions into the domain error taxonomy.

The `groq` and `openai` SDKs share the same exception hierarchy (both are
generated from the same client template), so one mapping serves both: pass
the SDK module whose exception classes should be matched.
"""

import logging
from types import ModuleType
from typing import Optional

from flashai.domain.errors import (
    ConfigurationError, FatalError, RateLimitError, TransientNetworkError, WordInfoError
)

logger = logging.getLogger(__name__)

def _retry_after(error: Exception) -> Optional[float]:
    response = getattr(error, 'response', None)
    headers = getattr(response, 'headers', None)
    if not headers:
        return None
    value = headers.get('retry-after')
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        # HTTP-date form is not worth parsing for a hint
        return None

def translate_sdk_error(error: Exception, sdk: ModuleType, provider: str) -> WordInfoError:
    """Maps an exception raised by `sdk` to a WordInfoError.

    Args:
        error: The exception raised by the SDK call.
        sdk: The SDK module (`groq` or `openai`).
        provider: Provider name used in messages.

    Returns:
        The domain error to raise (chained by the caller).
    """
    if isinstance(error, sdk.RateLimitError):
        return RateLimitError(f"{provider} rate limit exceeded: {error}", retry_after=_retry_after(error))
    if isinstance(error, sdk.APIConnectionError):
        # Includes APITimeoutError
        return TransientNetworkError(f"{provider} connection failed: {error}")
    if isinstance(error, (sdk.AuthenticationError, sdk.PermissionDeniedError)):
        return ConfigurationError(f"{provider} rejected the API key: {error}")
    if isinstance(error, sdk.APIStatusError):
        status = error.status_code
        if status >= 500:
            return TransientNetworkError(f"{provider} server error ({status}): {error}", status_code=status)
        return FatalError(f"{provider} request failed ({status}): {error}")
    logger.error(f"Unexpected error calling {provider}: {type(error).__name__} - {error}", exc_info=error)
    return FatalError(f"Unexpected error calling {provider}: {error}")
