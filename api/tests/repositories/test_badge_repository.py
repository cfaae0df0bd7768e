"""Tests for BadgeRepository."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from models import DERIVED_IMAGE_COLUMNS, Outlook
from repositories.badge_repository import BadgeRepository
from tests.factories import BadgeFactory, create_async

pytestmark = pytest.mark.integration


class TestBadgeRepository:
    async def test_create_and_get(self, db_session: AsyncSession):
        repo = BadgeRepository(db_session)
        badge = await repo.create(
            "softcat",
            issuer="Issuer",
            issue_date="2026-01-01",
            software_name="Catalogue",
            software_version="v1",
        )

        assert badge.created_at is not None
        assert await repo.get("softcat") is badge
        assert await repo.exists("softcat")
        assert not await repo.exists("missing_id")

    async def test_list_all_is_sorted(self, db_session: AsyncSession):
        for commit_id in ("bravo_1", "charlie_1", "alpha_1"):
            await create_async(BadgeFactory, db_session, commit_id=commit_id)

        badges = await BadgeRepository(db_session).list_all()

        assert [b.commit_id for b in badges] == ["alpha_1", "bravo_1", "charlie_1"]

    async def test_update_clears_derived_images(self, db_session: AsyncSession):
        badge = await create_async(
            BadgeFactory,
            db_session,
            badge_png_content=b"png",
            certificate_jpg_content=b"jpg",
        )

        await BadgeRepository(db_session).update(badge, notes="edited")

        assert badge.notes == "edited"
        for column in DERIVED_IMAGE_COLUMNS:
            assert getattr(badge, column) is None

    async def test_delete(self, db_session: AsyncSession):
        badge = await create_async(BadgeFactory, db_session, commit_id="gone_1")
        repo = BadgeRepository(db_session)

        await repo.delete(badge)

        assert await repo.get("gone_1") is None


class TestUpdateDerivedImage:
    async def test_writes_only_the_matching_column(
        self,
        db_session: AsyncSession,
        session_maker: async_sessionmaker[AsyncSession],
    ):
        await create_async(BadgeFactory, db_session, commit_id="softcat")
        await db_session.commit()

        written = await BadgeRepository(db_session).update_derived_image(
            "softcat", "jpg", b"jpeg-bytes", Outlook.CERTIFICATE
        )
        await db_session.commit()

        async with session_maker() as session:
            badge = await BadgeRepository(session).get("softcat")

        assert written
        assert badge.certificate_jpg_content == b"jpeg-bytes"
        assert badge.badge_jpg_content is None
        assert badge.certificate_png_content is None

    async def test_missing_record(self, db_session: AsyncSession):
        written = await BadgeRepository(db_session).update_derived_image(
            "missing_id", "png", b"png"
        )
        assert not written

    async def test_svg_is_never_persisted(self, db_session: AsyncSession):
        with pytest.raises(ValueError):
            await BadgeRepository(db_session).update_derived_image(
                "softcat", "svg", b"<svg/>"
            )
