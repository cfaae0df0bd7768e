"""Badge and certificate image resolution.

Resolves one image request end to end:

1. Validate format/outlook/ID
2. Response cache lookup (skipped with ``no_cache=true``)
3. Record lookup
4. Merge query overrides into the stored render config
5. Pick the renderer for the outlook
6. SVG: render. PNG/JPG: reuse the persisted default rendering when there
   are no overrides; otherwise render + convert, persisting the result
   only when there are no overrides
7. Response cache store (skipped with ``no_cache=true``)

Write-back of derived images is best-effort: failures are logged and the
already-rendered bytes are still returned. Concurrent requests may both
render and write back the same bytes; rendering is deterministic, so the
last write wins harmlessly.
"""

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.cache import DEFAULT_TTL_SECONDS, ResponseCache, build_cache_key
from models import Badge, ImageFormat, Outlook, derived_image_column
from rendering.badges import render_badge
from rendering.certificates import render_certificate
from rendering.converter import convert
from repositories.badge_repository import BadgeRepository
from schemas import COMMIT_ID_PATTERN, RenderConfig
from services.badges_service import BadgeNotFoundError
from services.render_config_service import (
    has_overrides,
    merge_overrides,
    parse_stored_config,
)

logger = logging.getLogger(__name__)

MEDIA_TYPES: dict[ImageFormat, str] = {
    ImageFormat.SVG: "image/svg+xml",
    ImageFormat.PNG: "image/png",
    ImageFormat.JPG: "image/jpeg",
}

_RENDERERS: dict[Outlook, Callable[[Badge, RenderConfig], bytes]] = {
    Outlook.BADGE: render_badge,
    Outlook.CERTIFICATE: render_certificate,
}

# Called with ("render" | "convert", commit_id) each time that stage runs
RenderHook = Callable[[str, str], None]


class ValidationError(Exception):
    """Bad request input. The message is safe to show to callers."""


class StoreError(Exception):
    """Reading the record store failed."""


@dataclass(frozen=True, slots=True)
class RenderedImage:
    content: bytes
    media_type: str


def _parse_choice(enum_cls, value: str, name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(
            f"Invalid {name} '{value}'. Use one of: {allowed}"
        ) from None


def is_no_cache(query_params: Mapping[str, str]) -> bool:
    return query_params.get("no_cache", "").lower() == "true"


async def _load_record(db: AsyncSession, commit_id: str) -> Badge:
    try:
        badge = await BadgeRepository(db).get(commit_id)
    except SQLAlchemyError as e:
        raise StoreError(f"Failed to load badge {commit_id}") from e
    if badge is None:
        raise BadgeNotFoundError(commit_id)
    return badge


async def _write_back(
    db: AsyncSession,
    commit_id: str,
    fmt: ImageFormat,
    content: bytes,
    outlook: Outlook,
) -> None:
    """Persist a default rendering. Failures are logged, never raised."""
    try:
        await BadgeRepository(db).update_derived_image(
            commit_id, fmt.value, content, outlook=outlook
        )
        # Committed on its own, before the request transaction ends
        await db.commit()
    except SQLAlchemyError:
        logger.warning(
            "image.write_back.failed",
            extra={
                "commit_id": commit_id,
                "format": fmt.value,
                "outlook": outlook.value,
            },
            exc_info=True,
        )
        try:
            await db.rollback()
        except SQLAlchemyError as rollback_err:
            logger.warning("db.rollback.failed", extra={"error": str(rollback_err)})


async def get_image(
    db: AsyncSession,
    cache: ResponseCache,
    commit_id: str,
    *,
    fmt: str = "svg",
    outlook: str = "badge",
    query_params: Mapping[str, str] | None = None,
    raw_query: str = "",
    cache_ttl: float | None = DEFAULT_TTL_SECONDS,
    render_hook: RenderHook | None = None,
) -> RenderedImage:
    """Resolve the image for one request.

    Args:
        db: Database session
        cache: Shared response cache
        commit_id: Record ID from the path
        fmt: "svg", "png" or "jpg"
        outlook: "badge" or "certificate"
        query_params: All query parameters (overrides and ``no_cache``)
        raw_query: Raw query string, part of the cache key
        cache_ttl: TTL for the cached response
        render_hook: Observer for render/convert stages

    Returns:
        RenderedImage with bytes and media type

    Raises:
        ValidationError: Unknown format/outlook, or malformed ID
        BadgeNotFoundError: No record with that ID
        StoreError: Record store read failed
        RenderError: Template failure or malformed stored config
        ConversionError: Rasterization failed
    """
    image_format = _parse_choice(ImageFormat, fmt, "format")
    image_outlook = _parse_choice(Outlook, outlook, "outlook")
    if not COMMIT_ID_PATTERN.match(commit_id):
        raise ValidationError("Invalid commit ID format")

    params = query_params or {}
    no_cache = is_no_cache(params)
    media_type = MEDIA_TYPES[image_format]
    cache_key = build_cache_key(
        commit_id, image_format.value, raw_query, image_outlook.value
    )

    if not no_cache:
        cached = cache.get(cache_key)
        if cached is not None:
            return RenderedImage(cached, media_type)

    badge = await _load_record(db, commit_id)

    overrides = has_overrides(params)
    config = merge_overrides(parse_stored_config(badge.custom_config), params)
    renderer = _RENDERERS[image_outlook]

    def _notify(stage: str) -> None:
        if render_hook is not None:
            render_hook(stage, commit_id)

    if image_format == ImageFormat.SVG:
        content = renderer(badge, config)
        _notify("render")
    else:
        column = derived_image_column(image_outlook, image_format)
        persisted = None if overrides else getattr(badge, column)
        if persisted:
            content = persisted
        else:
            svg = renderer(badge, config)
            _notify("render")
            content = await asyncio.to_thread(convert, svg, image_format.value)
            _notify("convert")
            if not overrides:
                await _write_back(
                    db, commit_id, image_format, content, image_outlook
                )

    if not no_cache:
        cache.set(cache_key, content, cache_ttl)

    return RenderedImage(content, media_type)
