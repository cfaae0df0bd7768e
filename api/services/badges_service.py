"""Certificate record administration.

This module handles record business logic:
- Create, replace, edit and delete records
- Public detail views (never exposing ``internal_note``)
- Idempotent seeding of sample records

Every edit clears the record's derived PNG/JPEG images in the same
transaction (see ``BadgeRepository.update``).

Routes should delegate all record business logic to this module.
"""

import logging
from collections.abc import Mapping
from datetime import timedelta
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models import Badge, BadgeStatus, today
from rendering.errors import RenderError
from repositories.badge_repository import BadgeRepository
from schemas import (
    BadgeBase,
    BadgeCreate,
    BadgeDetailResponse,
    BadgePatch,
    BadgeResponse,
    BadgeUpdate,
    EmbedURLs,
    RenderConfig,
)
from services.render_config_service import parse_stored_config, serialize_config

logger = logging.getLogger(__name__)

SAMPLE_BADGE_ID = "softcat"

_REQUIRED_FIELDS = frozenset(
    {"status", "issuer", "issue_date", "software_name", "software_version"}
)
_SEED_FIELDS = frozenset(BadgeBase.model_fields)


class BadgeNotFoundError(Exception):
    """Raised when no record has the requested ID."""

    def __init__(self, commit_id: str):
        self.commit_id = commit_id
        super().__init__(f"Badge not found: {commit_id}")


class BadgeAlreadyExistsError(Exception):
    """Raised when creating a record whose ID is taken."""

    def __init__(self, commit_id: str):
        self.commit_id = commit_id
        super().__init__(f"Badge already exists: {commit_id}")


class CommitIdMismatchError(Exception):
    """Raised when an update body names a different record than the path."""


def _record_fields(data: BadgeBase) -> dict[str, Any]:
    fields = data.model_dump(exclude={"commit_id", "custom_config"})
    fields["custom_config"] = serialize_config(data.custom_config)
    return fields


def _stored_config(badge: Badge) -> RenderConfig | None:
    try:
        return parse_stored_config(badge.custom_config)
    except RenderError:
        logger.warning(
            "badge.custom_config.invalid", extra={"commit_id": badge.commit_id}
        )
        return None


def to_badge_response(badge: Badge) -> BadgeResponse:
    return BadgeResponse(
        commit_id=badge.commit_id,
        status=badge.status,
        issuer=badge.issuer,
        issue_date=badge.issue_date,
        software_name=badge.software_name,
        software_version=badge.software_version,
        software_url=badge.software_url,
        notes=badge.notes,
        expiry_date=badge.expiry_date,
        issuer_url=badge.issuer_url,
        custom_config=_stored_config(badge),
        last_review=badge.last_review,
        covered_version=badge.covered_version,
        repository_link=badge.repository_link,
        public_note=badge.public_note,
        contact_details=badge.contact_details,
        certificate_name=badge.certificate_name,
        specialty_domain=badge.specialty_domain,
        software_sc_id=badge.software_sc_id,
        software_sc_url=badge.software_sc_url,
        is_expired=badge.is_expired,
        is_valid=badge.is_valid,
        created_at=badge.created_at,
        updated_at=badge.updated_at,
    )


def build_embed_urls(commit_id: str, base_url: str) -> EmbedURLs:
    base = base_url.rstrip("/")
    return EmbedURLs(
        badge_svg=f"{base}/badge/{commit_id}",
        badge_png=f"{base}/badge/{commit_id}?format=png",
        certificate_svg=f"{base}/certificate/{commit_id}",
        certificate_png=f"{base}/certificate/{commit_id}?format=png",
    )


async def _get_or_raise(repo: BadgeRepository, commit_id: str) -> Badge:
    badge = await repo.get(commit_id)
    if badge is None:
        raise BadgeNotFoundError(commit_id)
    return badge


async def list_badges(db: AsyncSession) -> list[BadgeResponse]:
    repo = BadgeRepository(db)
    return [to_badge_response(badge) for badge in await repo.list_all()]


async def get_badge_detail(
    db: AsyncSession, commit_id: str, base_url: str
) -> BadgeDetailResponse:
    """Public detail view of a record.

    Raises:
        BadgeNotFoundError: If the record does not exist
    """
    badge = await _get_or_raise(BadgeRepository(db), commit_id)
    response = to_badge_response(badge)
    return BadgeDetailResponse(
        **response.model_dump(),
        embed_urls=build_embed_urls(commit_id, base_url),
    )


async def create_badge(db: AsyncSession, data: BadgeCreate) -> BadgeResponse:
    """Create a record.

    Raises:
        BadgeAlreadyExistsError: If the ID is already taken
    """
    repo = BadgeRepository(db)
    if await repo.exists(data.commit_id):
        raise BadgeAlreadyExistsError(data.commit_id)

    try:
        badge = await repo.create(data.commit_id, **_record_fields(data))
    except IntegrityError as e:
        # Lost a race with a concurrent create of the same ID
        raise BadgeAlreadyExistsError(data.commit_id) from e

    logger.info("badge.created", extra={"commit_id": badge.commit_id})
    return to_badge_response(badge)


async def update_badge(
    db: AsyncSession, commit_id: str, data: BadgeUpdate
) -> BadgeResponse:
    """Replace every editable field of a record.

    Raises:
        CommitIdMismatchError: If ``data.commit_id`` differs from ``commit_id``
        BadgeNotFoundError: If the record does not exist
    """
    if data.commit_id != commit_id:
        raise CommitIdMismatchError(
            "Commit ID in the body does not match the URL"
        )
    repo = BadgeRepository(db)
    badge = await _get_or_raise(repo, commit_id)
    badge = await repo.update(badge, **_record_fields(data))

    logger.info("badge.updated", extra={"commit_id": commit_id})
    return to_badge_response(badge)


async def patch_badge(
    db: AsyncSession, commit_id: str, data: BadgePatch
) -> BadgeResponse:
    """Change only the fields present in ``data``.

    Raises:
        BadgeNotFoundError: If the record does not exist
    """
    repo = BadgeRepository(db)
    badge = await _get_or_raise(repo, commit_id)

    fields = data.model_dump(exclude_unset=True, exclude={"custom_config"})
    # Required columns cannot be cleared
    fields = {
        name: value
        for name, value in fields.items()
        if value is not None or name not in _REQUIRED_FIELDS
    }
    if "custom_config" in data.model_fields_set:
        fields["custom_config"] = serialize_config(data.custom_config)

    badge = await repo.update(badge, **fields)

    logger.info(
        "badge.patched",
        extra={"commit_id": commit_id, "fields": sorted(fields)},
    )
    return to_badge_response(badge)


async def delete_badge(db: AsyncSession, commit_id: str) -> None:
    """Delete a record.

    Raises:
        BadgeNotFoundError: If the record does not exist
    """
    repo = BadgeRepository(db)
    badge = await _get_or_raise(repo, commit_id)
    await repo.delete(badge)
    logger.info("badge.deleted", extra={"commit_id": commit_id})


def sample_badge_fields() -> dict[str, Any]:
    """The built-in sample record used when no seed file is given."""
    issued = today()
    return {
        "status": BadgeStatus.VALID,
        "issuer": "GEANT WP9T2 Software Licencing",
        "issue_date": issued.isoformat(),
        "software_name": "GÉANT Software Catalogue",
        "software_version": "v1.12.0",
        "software_url": "https://sc.geant.org/ui/project/SOFTCAT",
        "notes": "",
        "expiry_date": (issued + timedelta(days=365)).isoformat(),
        "issuer_url": "https://certificates.software.geant.org",
        "custom_config": (
            '{"color_left":"#003f5f","color_right":"#FFFFFF","style":"3d",'
            '"text_color_right":"#333","border_color":"#ffffff",'
            '"horizontal_bars_color":"#bbb","top_label_color":"#bbb"}'
        ),
        "last_review": issued.isoformat(),
        "covered_version": "1.12.0",
        "repository_link": (
            "https://bitbucket.software.geant.org/scm/sc/softwarecataloguegit.git"
        ),
        "public_note": (
            "This certificate certifies compliance with Software Licence standards"
        ),
        "internal_note": "Internal review comments and notes",
        "contact_details": "certificates.software.geant.org",
        "certificate_name": "Self-Assessed Dependencies",
        "specialty_domain": "Software Licencing",
        "software_sc_id": "SOFTCAT",
        "software_sc_url": "https://sc.geant.org/ui/project/SOFTCAT",
    }


_SEED_DEFAULTS: dict[str, Any] = {
    "status": BadgeStatus.VALID.value,
    "issuer": "GEANT WP9T2 Software Licencing",
    "software_name": "GÉANT Software Catalogue",
    "software_version": "v1.0.0",
}


async def seed_badges(
    db: AsyncSession, entries: Mapping[str, Mapping[str, Any]] | None = None
) -> list[str]:
    """Insert sample records that do not exist yet.

    Args:
        db: Database session
        entries: Mapping of commit_id to record fields. Missing required
            fields get defaults. None seeds the built-in sample record.

    Returns:
        IDs of the records that were created
    """
    repo = BadgeRepository(db)
    created: list[str] = []

    if entries is None:
        entries = {SAMPLE_BADGE_ID: sample_badge_fields()}

    for commit_id, raw in entries.items():
        if await repo.exists(commit_id):
            continue

        fields = {
            name: value
            for name, value in raw.items()
            if name in _SEED_FIELDS and value not in ("", None)
        }
        for name, default in _SEED_DEFAULTS.items():
            fields.setdefault(name, default)
        fields.setdefault("issue_date", today().isoformat())
        fields["status"] = BadgeStatus(fields["status"])
        if isinstance(fields.get("custom_config"), dict):
            fields["custom_config"] = serialize_config(
                RenderConfig.model_validate(fields["custom_config"])
            )

        await repo.create(commit_id, **fields)
        created.append(commit_id)

    if created:
        logger.info("badge.seeded", extra={"commit_ids": created})
    return created
