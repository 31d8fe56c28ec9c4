"""Response Cache Implementation.

Provides concrete implementations of the ResponseCache interface: a
session-scoped in-memory store with optional LRU bound and TTL, and a
variant that snapshots its entries to disk.
Bounded Context: Cache Management
"""
