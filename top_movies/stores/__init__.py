"""Data stores for persistence and caching.

Stores handle:
- Database: engine, sessions, the movies repository (source of truth)
- Redis: fast cache snapshot of the last merged list

No sync/merge policy in stores - that belongs in services.
"""
