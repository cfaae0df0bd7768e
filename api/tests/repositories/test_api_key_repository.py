"""Tests for APIKeyRepository."""

from datetime import UTC, datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from models import APIKeyStatus
from repositories.api_key_repository import APIKeyRepository

pytestmark = pytest.mark.integration


async def _create(repo: APIKeyRepository, key_id: str, **kwargs):
    return await repo.create(
        key_id=key_id,
        name=f"key {key_id}",
        key_hash=key_id.ljust(64, "0"),
        key_prefix="bsvc_" + key_id[:7],
        **kwargs,
    )


class TestAPIKeyRepository:
    async def test_create_defaults(self, db_session: AsyncSession):
        api_key = await _create(APIKeyRepository(db_session), "k1")

        assert api_key.status == APIKeyStatus.ACTIVE
        assert api_key.can_read
        assert not api_key.can_write
        assert not api_key.can_delete
        assert api_key.created_at is not None

    async def test_get_by_hash(self, db_session: AsyncSession):
        repo = APIKeyRepository(db_session)
        api_key = await _create(repo, "k1")

        assert await repo.get_by_hash("k1".ljust(64, "0")) is api_key
        assert await repo.get_by_hash("f" * 64) is None

    async def test_list_all(self, db_session: AsyncSession):
        repo = APIKeyRepository(db_session)
        await _create(repo, "k1")
        await _create(repo, "k2")

        keys = await repo.list_all()

        assert {k.id for k in keys} == {"k1", "k2"}

    async def test_revoke(self, db_session: AsyncSession):
        repo = APIKeyRepository(db_session)
        api_key = await _create(repo, "k1")

        await repo.revoke(api_key)

        assert (await repo.get("k1")).status == APIKeyStatus.REVOKED

    async def test_touch_last_used(self, db_session: AsyncSession):
        repo = APIKeyRepository(db_session)
        api_key = await _create(repo, "k1")
        await db_session.commit()
        when = datetime(2026, 3, 1, 9, 30, tzinfo=UTC)

        await repo.touch_last_used("k1", when)
        await db_session.commit()
        await db_session.refresh(api_key)

        # SQLite drops the offset
        assert api_key.last_used_at.replace(tzinfo=UTC) == when
