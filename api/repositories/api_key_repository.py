"""Repository for API key operations."""

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models import APIKey, APIKeyStatus


class APIKeyRepository:
    """Repository for API key CRUD operations."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, key_id: str) -> APIKey | None:
        return await self.db.get(APIKey, key_id)

    async def get_by_hash(self, key_hash: str) -> APIKey | None:
        """Look up a key by the sha256 hex digest of its raw value."""
        result = await self.db.execute(
            select(APIKey).where(APIKey.key_hash == key_hash)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> Sequence[APIKey]:
        """All keys, most recent first."""
        result = await self.db.execute(
            select(APIKey).order_by(APIKey.created_at.desc())
        )
        return result.scalars().all()

    async def create(
        self,
        key_id: str,
        name: str,
        key_hash: str,
        key_prefix: str,
        *,
        can_read: bool = True,
        can_write: bool = False,
        can_delete: bool = False,
        expires_at: datetime | None = None,
    ) -> APIKey:
        """Create a new key. Calls flush() but does NOT commit."""
        api_key = APIKey(
            id=key_id,
            name=name,
            key_hash=key_hash,
            key_prefix=key_prefix,
            can_read=can_read,
            can_write=can_write,
            can_delete=can_delete,
            status=APIKeyStatus.ACTIVE,
            expires_at=expires_at,
        )
        self.db.add(api_key)
        await self.db.flush()
        return api_key

    async def revoke(self, api_key: APIKey) -> APIKey:
        api_key.status = APIKeyStatus.REVOKED
        await self.db.flush()
        return api_key

    async def touch_last_used(self, key_id: str, when: datetime) -> None:
        await self.db.execute(
            update(APIKey)
            .where(APIKey.id == key_id)
            .values(last_used_at=when)
            .execution_options(synchronize_session=False)
        )
