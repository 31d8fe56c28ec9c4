"""Defines common Value Objects used across different domain contexts.

These objects represent simple values like cache keys and language codes,
and the rate limiter's status snapshot.
"""

from dataclasses import dataclass, asdict
from typing import NewType, Dict, Any

# === Core Value Objects ===

# Using NewType for semantic clarity, although they are strings at runtime.
CacheKey = NewType("CacheKey", str)          # Normalized lookup word
LanguageCode = NewType("LanguageCode", str)  # e.g. 'en', 'ja', 'es'
ProviderName = NewType("ProviderName", str)  # 'groq', 'deepseek'

# Languages the prompts know a display name for. Other codes are passed through.
LANGUAGE_NAMES: Dict[str, str] = {
    'en': 'English',
    'ja': 'Japanese',
    'es': 'Spanish',
    'fr': 'French',
    'de': 'German',
    'zh': 'Chinese',
    'ko': 'Korean',
    'it': 'Italian',
}

def language_name(code: str) -> str:
    """Returns the English name for a language code, or the code itself."""
    return LANGUAGE_NAMES.get(code, code)

# --- Structured Data ---

@dataclass(frozen=True)
class RateLimitStatus:
    """Point-in-time snapshot of a rate limiter, for polling UIs."""
    remaining_requests: int
    reset_in_seconds: int
    queue_length: int
    is_draining: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
