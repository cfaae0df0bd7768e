"""SQLAlchemy models for software certificate badges."""

from datetime import UTC, date, datetime
from enum import Enum as PyEnum

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    LargeBinary,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from core.database import Base


def utcnow() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(UTC)


def today() -> date:
    """Return current UTC date."""
    return datetime.now(UTC).date()


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamp columns.

    Use this for any model that needs audit timestamps.
    """

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), default=utcnow)

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class BadgeStatus(str, PyEnum):
    """Lifecycle status of a certificate record.

    Informational only: renderers never enforce it. Expiry is computed
    separately from ``expiry_date``.
    """

    VALID = "valid"
    EXPIRED = "expired"
    REVOKED = "revoked"


class ImageFormat(str, PyEnum):
    SVG = "svg"
    PNG = "png"
    JPG = "jpg"


class Outlook(str, PyEnum):
    """Which renderer draws a record."""

    BADGE = "badge"
    CERTIFICATE = "certificate"


class Badge(TimestampMixin, Base):
    """A certificate record with its optional pre-rendered raster images.

    The ``*_png_content``/``*_jpg_content`` columns hold the default
    (no-override) rendering of the record for each outlook. They are
    cleared whenever the record is edited.
    """

    __tablename__ = "badges"

    commit_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    status: Mapped[BadgeStatus] = mapped_column(
        Enum(
            BadgeStatus,
            name="badge_status",
            native_enum=False,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        default=BadgeStatus.VALID,
    )
    issuer: Mapped[str] = mapped_column(String(255), nullable=False)
    issue_date: Mapped[str] = mapped_column(String(10), nullable=False)
    software_name: Mapped[str] = mapped_column(String(255), nullable=False)
    software_version: Mapped[str] = mapped_column(String(100), nullable=False)
    software_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    expiry_date: Mapped[str | None] = mapped_column(String(10), nullable=True)
    issuer_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    custom_config: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_review: Mapped[str | None] = mapped_column(String(10), nullable=True)
    covered_version: Mapped[str | None] = mapped_column(String(100), nullable=True)
    repository_link: Mapped[str | None] = mapped_column(Text, nullable=True)
    public_note: Mapped[str | None] = mapped_column(Text, nullable=True)
    internal_note: Mapped[str | None] = mapped_column(Text, nullable=True)
    contact_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    certificate_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    specialty_domain: Mapped[str | None] = mapped_column(String(255), nullable=True)
    software_sc_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    software_sc_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    badge_png_content: Mapped[bytes | None] = mapped_column(
        LargeBinary, nullable=True
    )
    badge_jpg_content: Mapped[bytes | None] = mapped_column(
        LargeBinary, nullable=True
    )
    certificate_png_content: Mapped[bytes | None] = mapped_column(
        LargeBinary, nullable=True
    )
    certificate_jpg_content: Mapped[bytes | None] = mapped_column(
        LargeBinary, nullable=True
    )

    @property
    def is_expired(self) -> bool:
        """True when today is after ``expiry_date``. Unparseable dates never expire."""
        if not self.expiry_date:
            return False
        try:
            expiry = date.fromisoformat(self.expiry_date)
        except ValueError:
            return False
        return today() > expiry

    @property
    def is_valid(self) -> bool:
        return self.status == BadgeStatus.VALID and not self.is_expired


def derived_image_column(outlook: Outlook | str, fmt: ImageFormat | str) -> str:
    """Name of the column caching the raster ``fmt`` rendering of ``outlook``."""
    outlook = Outlook(outlook)
    fmt = ImageFormat(fmt)
    if fmt == ImageFormat.SVG:
        raise ValueError("SVG output is never persisted")
    return f"{outlook.value}_{fmt.value}_content"


DERIVED_IMAGE_COLUMNS = tuple(
    derived_image_column(outlook, fmt)
    for outlook in Outlook
    for fmt in (ImageFormat.PNG, ImageFormat.JPG)
)


class APIKeyStatus(str, PyEnum):
    ACTIVE = "active"
    REVOKED = "revoked"


class APIKey(Base):
    """Hashed API key with per-key permissions.

    Only the sha256 of the raw key is stored. The raw value is shown once,
    at creation.
    """

    __tablename__ = "api_keys"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    key_hash: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True, index=True
    )
    key_prefix: Mapped[str] = mapped_column(String(16), nullable=False)
    can_read: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    can_write: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    can_delete: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    status: Mapped[APIKeyStatus] = mapped_column(
        Enum(
            APIKeyStatus,
            name="api_key_status",
            native_enum=False,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        default=APIKeyStatus.ACTIVE,
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
