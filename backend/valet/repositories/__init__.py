"""
Repositories package: data-access layer.

Each repository file handles all DB operations for one domain entity.
Repositories do NOT handle HTTP concerns or business logic beyond
basic data integrity.

Convention:
    - One file per aggregate root (e.g., users.py, agents.py)
    - All functions accept `AsyncSession` as the first argument
    - Ownership is always part of the query: every lookup takes the
      owning `user_id`, so another user's row reads as "not found"
    - Use `flush()` internally; the session commit/rollback is handled
      by the `get_db` dependency in the API layer
"""
