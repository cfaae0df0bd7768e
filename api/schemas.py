"""Pydantic schemas for API request/response validation."""

import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models import APIKeyStatus, BadgeStatus

COMMIT_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_]{6,40}$")

MIN_FONT_SIZE = 8
MAX_FONT_SIZE = 16
BADGE_STYLES = ("flat", "3d")


def parse_font_size(value: object) -> int | None:
    """Return ``value`` as a font size, or None when it is not an int in 8-16."""
    if value is None or isinstance(value, bool):
        return None
    try:
        size = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return None
    if isinstance(value, float) and value != size:
        return None
    if not MIN_FONT_SIZE <= size <= MAX_FONT_SIZE:
        return None
    return size


def parse_style(value: object) -> str | None:
    if isinstance(value, str) and value in BADGE_STYLES:
        return value
    return None


class RenderConfig(BaseModel):
    """Optional visual overrides attached to a record.

    Every field is optional; None or "" means "use the renderer default".
    Out-of-range ``font_size`` and unknown ``style`` values are dropped
    rather than rejected, and unknown keys are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    # Badge outlook
    color_left: str | None = None
    color_right: str | None = None
    text_color: str | None = None
    text_color_left: str | None = None
    text_color_right: str | None = None
    logo: str | None = None
    font_size: int | None = None
    style: str | None = None

    # Certificate outlook
    logo_color: str | None = None
    background_color: str | None = None
    horizontal_bars_color: str | None = None
    top_label_color: str | None = None
    gradient_start_color: str | None = None
    gradient_end_color: str | None = None
    border_color: str | None = None
    cert_name_color: str | None = None

    @field_validator("font_size", mode="before")
    @classmethod
    def drop_invalid_font_size(cls, v: object) -> int | None:
        return parse_font_size(v)

    @field_validator("style", mode="before")
    @classmethod
    def drop_unknown_style(cls, v: object) -> str | None:
        return parse_style(v)


RENDER_CONFIG_FIELDS: tuple[str, ...] = tuple(RenderConfig.model_fields)


class BadgeBase(BaseModel):
    """Editable fields of a certificate record."""

    status: BadgeStatus = BadgeStatus.VALID
    issuer: str = Field(min_length=1, max_length=255)
    issue_date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    software_name: str = Field(min_length=1, max_length=255)
    software_version: str = Field(min_length=1, max_length=100)
    software_url: str | None = None
    notes: str | None = None
    expiry_date: str | None = None
    issuer_url: str | None = None
    custom_config: RenderConfig | None = None
    last_review: str | None = None
    covered_version: str | None = None
    repository_link: str | None = None
    public_note: str | None = None
    internal_note: str | None = None
    contact_details: str | None = None
    certificate_name: str | None = Field(default=None, max_length=255)
    specialty_domain: str | None = Field(default=None, max_length=255)
    software_sc_id: str | None = None
    software_sc_url: str | None = None


class BadgeCreate(BadgeBase):
    """Request to create a record."""

    commit_id: str

    @field_validator("commit_id")
    @classmethod
    def validate_commit_id(cls, v: str) -> str:
        if not COMMIT_ID_PATTERN.match(v):
            raise ValueError(
                "commit_id must be 6-40 characters of letters, digits or underscore"
            )
        return v


class BadgeUpdate(BadgeBase):
    """Full replacement of a record. ``commit_id`` must match the path."""

    commit_id: str


class BadgePatch(BaseModel):
    """Partial edit. Only fields present in the body are changed."""

    status: BadgeStatus | None = None
    issuer: str | None = Field(default=None, min_length=1, max_length=255)
    issue_date: str | None = Field(default=None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    software_name: str | None = Field(default=None, min_length=1, max_length=255)
    software_version: str | None = Field(default=None, min_length=1, max_length=100)
    software_url: str | None = None
    notes: str | None = None
    expiry_date: str | None = None
    issuer_url: str | None = None
    custom_config: RenderConfig | None = None
    last_review: str | None = None
    covered_version: str | None = None
    repository_link: str | None = None
    public_note: str | None = None
    internal_note: str | None = None
    contact_details: str | None = None
    certificate_name: str | None = Field(default=None, max_length=255)
    specialty_domain: str | None = Field(default=None, max_length=255)
    software_sc_id: str | None = None
    software_sc_url: str | None = None


class EmbedURLs(BaseModel):
    """Ready-to-use image URLs for a record."""

    badge_svg: str
    badge_png: str
    certificate_svg: str
    certificate_png: str


class BadgeResponse(BaseModel):
    """Public view of a record. Never carries ``internal_note`` or image bytes."""

    commit_id: str
    status: BadgeStatus
    issuer: str
    issue_date: str
    software_name: str
    software_version: str
    software_url: str | None = None
    notes: str | None = None
    expiry_date: str | None = None
    issuer_url: str | None = None
    custom_config: RenderConfig | None = None
    last_review: str | None = None
    covered_version: str | None = None
    repository_link: str | None = None
    public_note: str | None = None
    contact_details: str | None = None
    certificate_name: str | None = None
    specialty_domain: str | None = None
    software_sc_id: str | None = None
    software_sc_url: str | None = None
    is_expired: bool
    is_valid: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BadgeDetailResponse(BadgeResponse):
    embed_urls: EmbedURLs


class BadgeListResponse(BaseModel):
    badges: list[BadgeResponse]
    total: int


class APIKeyCreate(BaseModel):
    """Request to issue a new API key."""

    name: str = Field(min_length=1, max_length=255)
    can_read: bool = True
    can_write: bool = False
    can_delete: bool = False
    expires_at: datetime | None = None


class APIKeyResponse(BaseModel):
    """Stored API key metadata. The raw key is never included."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    key_prefix: str
    can_read: bool
    can_write: bool
    can_delete: bool
    status: APIKeyStatus
    expires_at: datetime | None = None
    last_used_at: datetime | None = None
    created_at: datetime


class APIKeyCreatedResponse(APIKeyResponse):
    """Returned once, at creation. ``key`` cannot be retrieved again."""

    key: str


class HealthResponse(BaseModel):
    status: Literal["healthy", "ready", "not_ready"]
    service: str = "badges-api"
    detail: str | None = None
