"""Badge and certificate image endpoints.

Both paths serve either outlook; the path only picks the default. Visual
overrides come from the query string (see ``schemas.RenderConfig``).
"""

import logging

from fastapi import APIRouter, HTTPException, Query, Request, Response

from core.config import get_settings
from core.database import DbSession
from rendering.errors import ConversionError, RenderError
from services.badges_service import BadgeNotFoundError
from services.images_service import (
    StoreError,
    ValidationError,
    get_image,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["images"])

_IMAGE_RESPONSES = {
    200: {
        "content": {"image/svg+xml": {}, "image/png": {}, "image/jpeg": {}},
        "description": "Rendered image",
    },
    400: {"description": "Invalid format, outlook or commit ID"},
    404: {"description": "Badge not found"},
    500: {"description": "Rendering or conversion failed"},
}


async def _serve_image(
    request: Request,
    db: DbSession,
    commit_id: str,
    fmt: str,
    outlook: str,
) -> Response:
    settings = get_settings()
    try:
        image = await get_image(
            db,
            request.app.state.image_cache,
            commit_id,
            fmt=fmt,
            outlook=outlook,
            query_params=dict(request.query_params),
            raw_query=request.url.query,
            cache_ttl=settings.image_cache_ttl_seconds,
            render_hook=getattr(request.app.state, "render_hook", None),
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except BadgeNotFoundError as e:
        raise HTTPException(status_code=404, detail="Badge not found") from e
    except (RenderError, ConversionError, StoreError) as e:
        logger.exception(
            "image.render.failed",
            extra={
                "commit_id": commit_id,
                "format": fmt,
                "outlook": outlook,
                "error": str(e),
            },
        )
        raise HTTPException(status_code=500, detail="Failed to render image") from e

    return Response(
        content=image.content,
        media_type=image.media_type,
        headers={
            "Cache-Control": f"public, max-age={settings.image_cache_control_max_age}"
        },
    )


@router.get("/badge/{commit_id}", responses=_IMAGE_RESPONSES)
async def get_badge_image(
    request: Request,
    commit_id: str,
    db: DbSession,
    format: str = Query("svg", description="svg, png or jpg"),
    outlook: str = Query("badge", description="badge or certificate"),
) -> Response:
    """Render a record as a badge (or as a certificate with ``outlook``)."""
    return await _serve_image(
        request, db, commit_id, format or "svg", outlook or "badge"
    )


@router.get("/certificate/{commit_id}", responses=_IMAGE_RESPONSES)
async def get_certificate_image(
    request: Request,
    commit_id: str,
    db: DbSession,
    format: str = Query("svg", description="svg, png or jpg"),
    outlook: str = Query("certificate", description="badge or certificate"),
) -> Response:
    """Render a record as a certificate (or as a badge with ``outlook``)."""
    return await _serve_image(
        request, db, commit_id, format or "svg", outlook or "certificate"
    )
