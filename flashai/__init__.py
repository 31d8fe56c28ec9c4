"""flashai: AI word information for flashcard learning.

Fetches translations, pronunciation and example sentences for vocabulary
from a language-model API, pacing requests through a shared rate limiter,
retrying transient failures and caching results.
"""

__version__ = "0.3.0"
