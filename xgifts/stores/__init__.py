"""Data stores for persistence and locking.

Stores handle:
- PostgreSQL: engine/session factory, search cache repository
- Redis: per-key locks

No business logic in stores - that belongs in services.
"""
