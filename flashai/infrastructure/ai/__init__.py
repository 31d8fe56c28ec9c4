"""AI Provider Implementations.

Contains adapters for the language-model providers (Groq, DeepSeek), each
implementing the `WordInfoProvider` interface from the domain layer.
"""
