"""Badge rendering - the compact "logo + value" SVG.

The left block carries the two-tone GÉANT logo (or an external logo image
when ``RenderConfig.logo`` is set), the right block the certificate name,
falling back to the software version. Output is a pure function of
(record, config): no timestamps, no generated ids.
"""

import html
from dataclasses import dataclass
from typing import Protocol

from rendering.errors import RenderError
from rendering.layout import segment_widths
from rendering.logo import LOGO_HEIGHT, LOGO_WIDTH, logo_group
from schemas import RenderConfig

DEFAULT_COLOR_LEFT = "#333"
DEFAULT_COLOR_RIGHT = "#4CAF50"
DEFAULT_TEXT_COLOR = "#FFFFFF"
DEFAULT_FONT_SIZE = 12
DEFAULT_STYLE = "3d"

BADGE_HEIGHT = 20
LOGO_SCALE = 0.27

FONT_FAMILY = "DejaVu Sans,Verdana,Geneva,sans-serif"


class BadgeRecord(Protocol):
    software_name: str
    software_version: str
    certificate_name: str | None


@dataclass(frozen=True, slots=True)
class BadgeStyle:
    """Resolved visual properties for one badge render."""

    color_left: str = DEFAULT_COLOR_LEFT
    color_right: str = DEFAULT_COLOR_RIGHT
    text_color: str = DEFAULT_TEXT_COLOR
    text_color_left: str = DEFAULT_TEXT_COLOR
    text_color_right: str = DEFAULT_TEXT_COLOR
    font_size: int = DEFAULT_FONT_SIZE
    style: str = DEFAULT_STYLE
    logo_url: str = ""

    @property
    def has_shadow(self) -> bool:
        return self.style == "3d"

    @classmethod
    def from_config(cls, config: RenderConfig) -> "BadgeStyle":
        # Left/right text colors inherit the resolved base text color
        text_color = config.text_color or DEFAULT_TEXT_COLOR
        return cls(
            color_left=config.color_left or DEFAULT_COLOR_LEFT,
            color_right=config.color_right or DEFAULT_COLOR_RIGHT,
            text_color=text_color,
            text_color_left=config.text_color_left or text_color,
            text_color_right=config.text_color_right or text_color,
            font_size=config.font_size or DEFAULT_FONT_SIZE,
            style=config.style or DEFAULT_STYLE,
            logo_url=config.logo or "",
        )


def badge_value(record: BadgeRecord) -> str:
    """Text shown in the right block."""
    return record.certificate_name or record.software_version


def _esc(value: object) -> str:
    return html.escape(str(value), quote=True)


def _logo_block(style: BadgeStyle, left_width: int) -> str:
    if style.logo_url:
        return (
            f'<image x="5" y="3" width="{left_width - 10}" height="14" '
            f'preserveAspectRatio="xMidYMid meet" xlink:href="{_esc(style.logo_url)}"/>'
        )
    scale = LOGO_SCALE
    x = (left_width - LOGO_WIDTH * scale) / 2
    y = (BADGE_HEIGHT - LOGO_HEIGHT * scale) / 2
    return logo_group(
        _esc(style.text_color_left), x=round(x, 2), y=round(y, 2), scale=scale
    )


def _shadow_block(width: int) -> str:
    return f"""<filter id="shadow">
    <feDropShadow dx="0" dy="1" stdDeviation="0.5" flood-color="#000" flood-opacity="0.3"/>
  </filter>
  <rect width="{width}" height="{BADGE_HEIGHT}" rx="3" fill="transparent" filter="url(#shadow)"/>"""


def generate_badge_svg(record: BadgeRecord, style: BadgeStyle) -> str:
    """Generate the badge SVG document for an already-resolved style.

    Args:
        record: Certificate record (only display fields are read)
        style: Resolved colors, font size and style

    Returns:
        SVG content as a string
    """
    value = badge_value(record)
    width, left_width, right_width = segment_widths(value, style.font_size)
    text_x = left_width + right_width // 2
    text_y = round(BADGE_HEIGHT / 2 + style.font_size * 0.35)

    safe_value = _esc(value)
    title = _esc(f"{record.software_name}: {value}")
    shadow = _shadow_block(width) if style.has_shadow else ""

    return f"""<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" width="{width}" height="{BADGE_HEIGHT}" viewBox="0 0 {width} {BADGE_HEIGHT}" role="img" aria-label="{title}">
  <title>{title}</title>
  <linearGradient id="b" x2="0" y2="100%">
    <stop offset="0" stop-color="#bbb" stop-opacity=".1"/>
    <stop offset="1" stop-opacity=".1"/>
  </linearGradient>
  <clipPath id="a">
    <rect width="{width}" height="{BADGE_HEIGHT}" rx="3" fill="#fff"/>
  </clipPath>
  <g clip-path="url(#a)">
    <rect width="{left_width}" height="{BADGE_HEIGHT}" fill="{_esc(style.color_left)}"/>
    <rect x="{left_width}" width="{right_width}" height="{BADGE_HEIGHT}" fill="{_esc(style.color_right)}"/>
    <rect width="{width}" height="{BADGE_HEIGHT}" fill="url(#b)"/>
  </g>
  {_logo_block(style, left_width)}
  <g text-anchor="middle" font-family="{FONT_FAMILY}" font-size="{style.font_size}">
    <text x="{text_x}" y="{text_y}" fill="{_esc(style.text_color_right)}">{safe_value}</text>
  </g>
  {shadow}
</svg>"""


def render_badge(record: BadgeRecord, config: RenderConfig) -> bytes:
    """Render the badge outlook of ``record`` as UTF-8 SVG bytes.

    Raises:
        RenderError: If the record lacks the fields the layout needs
    """
    try:
        svg = generate_badge_svg(record, BadgeStyle.from_config(config))
    except (AttributeError, TypeError, ValueError) as e:
        raise RenderError(f"Failed to render badge: {e}") from e
    return svg.encode("utf-8")
