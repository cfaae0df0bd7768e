"""API key administration endpoints (bootstrap admin key only)."""

from fastapi import APIRouter, HTTPException

from core.auth import AdminAccess
from core.database import DbSession
from schemas import APIKeyCreate, APIKeyCreatedResponse, APIKeyResponse
from services.api_keys_service import (
    APIKeyNotFoundError,
    create_api_key,
    list_api_keys,
    revoke_api_key,
)

router = APIRouter(
    prefix="/api/keys",
    tags=["api-keys"],
    responses={
        401: {"description": "Missing or invalid API key"},
        403: {"description": "Admin key required"},
    },
)


@router.get("", response_model=list[APIKeyResponse])
async def list_api_keys_endpoint(
    db: DbSession,
    principal: AdminAccess,
) -> list[APIKeyResponse]:
    return await list_api_keys(db)


@router.post("", response_model=APIKeyCreatedResponse, status_code=201)
async def create_api_key_endpoint(
    body: APIKeyCreate,
    db: DbSession,
    principal: AdminAccess,
) -> APIKeyCreatedResponse:
    """Issue a key. The raw ``key`` is only ever returned here."""
    return await create_api_key(db, body)


@router.delete(
    "/{key_id}",
    response_model=APIKeyResponse,
    responses={404: {"description": "API key not found"}},
)
async def revoke_api_key_endpoint(
    key_id: str,
    db: DbSession,
    principal: AdminAccess,
) -> APIKeyResponse:
    """Revoke a key."""
    try:
        return await revoke_api_key(db, key_id)
    except APIKeyNotFoundError as e:
        raise HTTPException(status_code=404, detail="API key not found") from e
