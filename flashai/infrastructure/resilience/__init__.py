"""API Resilience Implementations.

Contains the FIFO rate-limited request queue and the retry policy with
exponential backoff used around every outbound AI call.
Bounded Context: API Resilience
"""
