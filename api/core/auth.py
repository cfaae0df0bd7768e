"""API key authentication.

Provides:
- Key generation and hashing (only sha256 digests are stored)
- Principal resolution from the ``X-API-Key`` header
- FastAPI dependencies enforcing read/write/delete/admin permissions

The bootstrap key from ``settings.admin_api_key`` has every permission,
including key administration. Stored keys never grant admin.
"""

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Annotated

from fastapi import Depends, HTTPException
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import get_settings
from core.database import DbSession
from core.logger import bind_contextvars
from models import APIKey, APIKeyStatus
from repositories.api_key_repository import APIKeyRepository

logger = logging.getLogger(__name__)

API_KEY_PREFIX = "bsvc_"
API_KEY_HEADER = "X-API-Key"
DISPLAY_PREFIX_LENGTH = 12

api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


class Permission(str, Enum):
    READ = "read"
    WRITE = "write"
    DELETE = "delete"
    ADMIN = "admin"


@dataclass(frozen=True, slots=True)
class Principal:
    """The caller behind an API key."""

    key_id: str | None
    name: str
    can_read: bool = False
    can_write: bool = False
    can_delete: bool = False
    is_admin: bool = False

    def allows(self, permission: Permission) -> bool:
        if self.is_admin:
            return True
        return {
            Permission.READ: self.can_read,
            Permission.WRITE: self.can_write,
            Permission.DELETE: self.can_delete,
            Permission.ADMIN: False,
        }[permission]


ADMIN_PRINCIPAL = Principal(
    key_id=None,
    name="admin",
    can_read=True,
    can_write=True,
    can_delete=True,
    is_admin=True,
)


def generate_api_key() -> str:
    """Return a new raw key: ``bsvc_`` followed by 64 hex characters."""
    return API_KEY_PREFIX + secrets.token_hex(32)


def hash_api_key(raw_key: str) -> str:
    return hashlib.sha256(raw_key.encode("utf-8")).hexdigest()


def display_prefix(raw_key: str) -> str:
    return raw_key[:DISPLAY_PREFIX_LENGTH]


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def is_key_usable(api_key: APIKey, now: datetime | None = None) -> bool:
    """Active and not past ``expires_at``."""
    if api_key.status != APIKeyStatus.ACTIVE:
        return False
    if api_key.expires_at is None:
        return True
    now = now or datetime.now(UTC)
    return _as_utc(api_key.expires_at) > now


async def authenticate_api_key(db: AsyncSession, raw_key: str) -> Principal | None:
    """Resolve a raw key to a principal, or None if it is not valid.

    Records ``last_used_at`` for stored keys.
    """
    settings = get_settings()
    if settings.admin_api_key and secrets.compare_digest(
        raw_key.encode("utf-8"), settings.admin_api_key.encode("utf-8")
    ):
        return ADMIN_PRINCIPAL

    repo = APIKeyRepository(db)
    api_key = await repo.get_by_hash(hash_api_key(raw_key))
    if api_key is None or not is_key_usable(api_key):
        return None

    await repo.touch_last_used(api_key.id, datetime.now(UTC))
    return Principal(
        key_id=api_key.id,
        name=api_key.name,
        can_read=api_key.can_read,
        can_write=api_key.can_write,
        can_delete=api_key.can_delete,
    )


def require_permission(permission: Permission):
    """Build a dependency that demands ``permission``.

    Missing or unknown key -> 401. Known key without the permission -> 403.
    """

    async def _dependency(
        db: DbSession,
        raw_key: Annotated[str | None, Depends(api_key_header)],
    ) -> Principal:
        if not raw_key:
            raise HTTPException(
                status_code=401,
                detail="Missing API key",
                headers={"WWW-Authenticate": API_KEY_HEADER},
            )

        principal = await authenticate_api_key(db, raw_key)
        if principal is None:
            logger.info(
                "auth.api_key.rejected",
                extra={"key_prefix": display_prefix(raw_key)},
            )
            raise HTTPException(
                status_code=401,
                detail="Invalid API key",
                headers={"WWW-Authenticate": API_KEY_HEADER},
            )

        if not principal.allows(permission):
            logger.info(
                "auth.permission.denied",
                extra={"key_id": principal.key_id, "permission": permission.value},
            )
            raise HTTPException(status_code=403, detail="Insufficient permissions")

        bind_contextvars(api_key_name=principal.name)
        return principal

    return _dependency


ReadAccess = Annotated[Principal, Depends(require_permission(Permission.READ))]
WriteAccess = Annotated[Principal, Depends(require_permission(Permission.WRITE))]
DeleteAccess = Annotated[Principal, Depends(require_permission(Permission.DELETE))]
AdminAccess = Annotated[Principal, Depends(require_permission(Permission.ADMIN))]
