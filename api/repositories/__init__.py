"""Repository layer for database operations.

Repositories encapsulate all database queries, keeping routes and services
free of SQL. They flush but never commit; the request (or CLI command)
owns the transaction.
"""

from repositories.api_key_repository import APIKeyRepository
from repositories.badge_repository import BadgeRepository

__all__ = [
    "APIKeyRepository",
    "BadgeRepository",
]
