"""Certificate record administration endpoints.

The detail view is public; every other endpoint needs an API key with the
matching permission.
"""

from fastapi import APIRouter, HTTPException, Response

from core.auth import DeleteAccess, ReadAccess, WriteAccess
from core.config import get_settings
from core.database import DbSession
from schemas import (
    BadgeCreate,
    BadgeDetailResponse,
    BadgeListResponse,
    BadgePatch,
    BadgeResponse,
    BadgeUpdate,
)
from services.badges_service import (
    BadgeAlreadyExistsError,
    BadgeNotFoundError,
    CommitIdMismatchError,
    create_badge,
    delete_badge,
    get_badge_detail,
    list_badges,
    patch_badge,
    update_badge,
)

router = APIRouter(prefix="/api/badges", tags=["badges"])

_AUTH_RESPONSES = {
    401: {"description": "Missing or invalid API key"},
    403: {"description": "Insufficient permissions"},
}


@router.get("", response_model=BadgeListResponse, responses=_AUTH_RESPONSES)
async def list_badges_endpoint(
    db: DbSession,
    principal: ReadAccess,
) -> BadgeListResponse:
    """List every record (without internal notes)."""
    badges = await list_badges(db)
    return BadgeListResponse(badges=badges, total=len(badges))


@router.post(
    "",
    response_model=BadgeResponse,
    status_code=201,
    responses={**_AUTH_RESPONSES, 409: {"description": "Badge already exists"}},
)
async def create_badge_endpoint(
    body: BadgeCreate,
    db: DbSession,
    principal: WriteAccess,
) -> BadgeResponse:
    """Create a record."""
    try:
        return await create_badge(db, body)
    except BadgeAlreadyExistsError as e:
        raise HTTPException(status_code=409, detail="Badge already exists") from e


@router.get(
    "/{commit_id}",
    response_model=BadgeDetailResponse,
    responses={404: {"description": "Badge not found"}},
)
async def get_badge_endpoint(commit_id: str, db: DbSession) -> BadgeDetailResponse:
    """Public detail view of a record, with embed URLs."""
    try:
        return await get_badge_detail(db, commit_id, get_settings().public_base_url)
    except BadgeNotFoundError as e:
        raise HTTPException(status_code=404, detail="Badge not found") from e


@router.put(
    "/{commit_id}",
    response_model=BadgeResponse,
    responses={
        **_AUTH_RESPONSES,
        400: {"description": "Commit ID mismatch"},
        404: {"description": "Badge not found"},
    },
)
async def update_badge_endpoint(
    commit_id: str,
    body: BadgeUpdate,
    db: DbSession,
    principal: WriteAccess,
) -> BadgeResponse:
    """Replace a record. Derived images are cleared."""
    try:
        return await update_badge(db, commit_id, body)
    except CommitIdMismatchError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except BadgeNotFoundError as e:
        raise HTTPException(status_code=404, detail="Badge not found") from e


@router.patch(
    "/{commit_id}",
    response_model=BadgeResponse,
    responses={**_AUTH_RESPONSES, 404: {"description": "Badge not found"}},
)
async def patch_badge_endpoint(
    commit_id: str,
    body: BadgePatch,
    db: DbSession,
    principal: WriteAccess,
) -> BadgeResponse:
    """Edit some fields of a record. Derived images are cleared."""
    try:
        return await patch_badge(db, commit_id, body)
    except BadgeNotFoundError as e:
        raise HTTPException(status_code=404, detail="Badge not found") from e


@router.delete(
    "/{commit_id}",
    status_code=204,
    responses={**_AUTH_RESPONSES, 404: {"description": "Badge not found"}},
)
async def delete_badge_endpoint(
    commit_id: str,
    db: DbSession,
    principal: DeleteAccess,
) -> Response:
    """Delete a record."""
    try:
        await delete_badge(db, commit_id)
    except BadgeNotFoundError as e:
        raise HTTPException(status_code=404, detail="Badge not found") from e
    return Response(status_code=204)
