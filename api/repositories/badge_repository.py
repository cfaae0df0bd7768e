"""Repository for certificate record operations."""

from collections.abc import Sequence
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import defer

from models import DERIVED_IMAGE_COLUMNS, Badge, Outlook, derived_image_column


class BadgeRepository:
    """Repository for certificate record CRUD and derived-image caching.

    Calls flush() but never commit(); the caller owns the transaction.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, commit_id: str) -> Badge | None:
        """Get a record by ID, including its derived image bytes."""
        return await self.db.get(Badge, commit_id)

    async def exists(self, commit_id: str) -> bool:
        result = await self.db.execute(
            select(Badge.commit_id).where(Badge.commit_id == commit_id)
        )
        return result.scalar_one_or_none() is not None

    async def list_all(self) -> Sequence[Badge]:
        """All records ordered by ID, without loading image bytes."""
        result = await self.db.execute(
            select(Badge)
            .options(*(defer(getattr(Badge, c)) for c in DERIVED_IMAGE_COLUMNS))
            .order_by(Badge.commit_id)
        )
        return result.scalars().all()

    async def create(self, commit_id: str, **fields: Any) -> Badge:
        badge = Badge(commit_id=commit_id, **fields)
        self.db.add(badge)
        await self.db.flush()
        return badge

    async def update(self, badge: Badge, **fields: Any) -> Badge:
        """Apply field changes and drop every derived image.

        Derived images always reflect the current record, so any edit
        invalidates them in the same transaction.
        """
        for name, value in fields.items():
            setattr(badge, name, value)
        for column in DERIVED_IMAGE_COLUMNS:
            setattr(badge, column, None)
        await self.db.flush()
        return badge

    async def delete(self, badge: Badge) -> None:
        await self.db.delete(badge)
        await self.db.flush()

    async def update_derived_image(
        self,
        commit_id: str,
        fmt: str,
        content: bytes,
        outlook: Outlook | str = Outlook.BADGE,
    ) -> bool:
        """Persist the default rendering of ``outlook`` in ``fmt``.

        Returns False when the record no longer exists.
        """
        column = getattr(Badge, derived_image_column(outlook, fmt))
        result = await self.db.execute(
            update(Badge)
            .where(Badge.commit_id == commit_id)
            # Caching an image is not an edit of the record
            .values({column: content, Badge.updated_at: Badge.updated_at})
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0
