"""Data stores for persistence and caching.

Stores handle:
- PostgreSQL: DB session, table repository, ORM operations
- Redis: table snapshots, sessions
- Memory: in-process fallbacks when Redis is unavailable

No business/ranking logic in stores - that belongs in services.
"""
