"""Concrete implementation of the WordInfoProvider interface using DeepSeek.

DeepSeek serves an OpenAI-compatible API, so the official OpenAI client is
used with DeepSeek's base URL.
"""

import openai
from openai import OpenAI

from flashai.infrastructure.ai.chat_completion import ChatCompletionWordInfoProvider

DEEPSEEK_BASE_URL = "https://api.deepseek.com"

class DeepSeekWordInfoProvider(ChatCompletionWordInfoProvider):
    """DeepSeek implementation of the WordInfoProvider interface."""

    name = "deepseek"
    sdk = openai
    api_key_env = "DEEPSEEK_API_KEY"
    DEFAULT_MODEL = "deepseek-chat"
    DEFAULT_MAX_TOKENS = 1000

    def __init__(self, api_key=None, model=None, temperature=0.7, max_tokens=DEFAULT_MAX_TOKENS):
        super().__init__(api_key=api_key, model=model, temperature=temperature, max_tokens=max_tokens)

    def _create_client(self, api_key: str) -> OpenAI:
        return OpenAI(api_key=api_key, base_url=DEEPSEEK_BASE_URL)
