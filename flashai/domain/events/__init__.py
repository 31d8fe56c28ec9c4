"""Domain Event definitions.

Represents significant occurrences around outbound AI calls (queueing,
dispatch, retries, cache hits) for logging and telemetry sinks.
"""
