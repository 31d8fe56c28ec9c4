"""Concrete implementation of the WordInfoProvider interface using the Groq API.

Hides the specifics of the Groq client library; requests and error
translation are shared with the other chat-completions providers.
"""

import groq
from groq import Groq as GroqSDKClient

from flashai.infrastructure.ai.chat_completion import ChatCompletionWordInfoProvider

class GroqWordInfoProvider(ChatCompletionWordInfoProvider):
    """Groq implementation of the WordInfoProvider interface."""

    name = "groq"
    sdk = groq
    api_key_env = "GROQ_API_KEY"
    DEFAULT_MODEL = "llama-3.1-8b-instant"

    def _create_client(self, api_key: str) -> GroqSDKClient:
        return GroqSDKClient(api_key=api_key)
