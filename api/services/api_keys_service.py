"""API key administration.

Issues, lists and revokes keys. The raw key is returned exactly once, from
``create_api_key``; afterwards only its display prefix is available.
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import display_prefix, generate_api_key, hash_api_key
from repositories.api_key_repository import APIKeyRepository
from schemas import APIKeyCreate, APIKeyCreatedResponse, APIKeyResponse

logger = logging.getLogger(__name__)


class APIKeyNotFoundError(Exception):
    """Raised when no API key has the requested ID."""

    def __init__(self, key_id: str):
        self.key_id = key_id
        super().__init__(f"API key not found: {key_id}")


async def create_api_key(db: AsyncSession, data: APIKeyCreate) -> APIKeyCreatedResponse:
    """Issue a new key and return it together with its raw value."""
    raw_key = generate_api_key()
    api_key = await APIKeyRepository(db).create(
        key_id=str(uuid.uuid4()),
        name=data.name,
        key_hash=hash_api_key(raw_key),
        key_prefix=display_prefix(raw_key),
        can_read=data.can_read,
        can_write=data.can_write,
        can_delete=data.can_delete,
        expires_at=data.expires_at,
    )

    logger.info(
        "api_key.created",
        extra={
            "key_id": api_key.id,
            "key_name": api_key.name,
            "key_prefix": api_key.key_prefix,
        },
    )
    return APIKeyCreatedResponse(
        **APIKeyResponse.model_validate(api_key).model_dump(),
        key=raw_key,
    )


async def list_api_keys(db: AsyncSession) -> list[APIKeyResponse]:
    keys = await APIKeyRepository(db).list_all()
    return [APIKeyResponse.model_validate(k) for k in keys]


async def revoke_api_key(db: AsyncSession, key_id: str) -> APIKeyResponse:
    """Mark a key revoked. Revoked keys fail authentication immediately.

    Raises:
        APIKeyNotFoundError: If the key does not exist
    """
    repo = APIKeyRepository(db)
    api_key = await repo.get(key_id)
    if api_key is None:
        raise APIKeyNotFoundError(key_id)

    api_key = await repo.revoke(api_key)
    logger.info("api_key.revoked", extra={"key_id": key_id})
    return APIKeyResponse.model_validate(api_key)
