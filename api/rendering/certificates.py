"""Certificate rendering - the larger decorative SVG card.

The base document is a Jinja2 template read from disk on every render
(``settings.certificate_template_file``), so it can be restyled without a
restart. If that file cannot be read or rendered, the embedded default
template below is used instead; only a failure of the embedded template
fails the request.
"""

import html
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Protocol

from jinja2 import Environment, StrictUndefined, TemplateError
from markupsafe import Markup

from core.config import get_settings
from rendering.errors import RenderError
from rendering.logo import LOGO_WIDTH, logo_group
from schemas import RenderConfig

logger = logging.getLogger(__name__)

CERTIFICATE_WIDTH = 170
CERTIFICATE_HEIGHT = 200
DEFAULT_CERTIFICATE_NAME = "Verified Dependencies"
SLOGAN = "Networks • Services • People"
MAX_NAME_WORDS = 3

LOGO_SCALE = 0.45
LOGO_Y = 150

_env = Environment(
    autoescape=True,
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)


class CertificateRecord(Protocol):
    commit_id: str
    software_name: str
    software_version: str
    issuer: str
    issue_date: str
    certificate_name: str | None
    specialty_domain: str | None


@dataclass(frozen=True, slots=True)
class CertificateStyle:
    """The eight brand colours of a certificate."""

    logo_color: str = "#ffffff"
    background_color: str = "#0e3f5f"
    horizontal_bars_color: str = "#e78a2d"
    top_label_color: str = "#e78a2d"
    gradient_start_color: str = "#ff1463"
    gradient_end_color: str = "#013a40"
    border_color: str = "#e78a2d"
    cert_name_color: str = "#ffffff"

    @classmethod
    def from_config(cls, config: RenderConfig) -> "CertificateStyle":
        defaults = cls()
        return cls(
            **{
                name: getattr(config, name) or default
                for name, default in asdict(defaults).items()
            }
        )


def split_certificate_name(name: str) -> list[str]:
    """Split on spaces into exactly three slots, dropping extra words.

    >>> split_certificate_name("Self Assessed Software Dependencies")
    ['Self', 'Assessed', 'Software']
    >>> split_certificate_name("Verified")
    ['Verified', '', '']
    """
    words = [part for part in name.split(" ") if part][:MAX_NAME_WORDS]
    return words + [""] * (MAX_NAME_WORDS - len(words))


def _name_lines(words: list[str]) -> list[tuple[int, str]]:
    """Vertically centred (y, word) pairs for the non-empty name slots."""
    present = [w for w in words if w]
    first_y = 76 - (len(present) - 1) * 9
    return [(first_y + i * 18, word) for i, word in enumerate(present)]


def _strip_xml_declaration(text: str) -> str:
    if text.startswith("<?xml"):
        end = text.find("?>")
        if end != -1:
            return text[end + 2 :].lstrip()
    return text


def _template_context(record: CertificateRecord, style: CertificateStyle) -> dict:
    certificate_name = record.certificate_name or DEFAULT_CERTIFICATE_NAME
    words = split_certificate_name(certificate_name)
    specialty_domain = record.specialty_domain or ""
    logo_x = (CERTIFICATE_WIDTH - LOGO_WIDTH * LOGO_SCALE) / 2
    return {
        "width": CERTIFICATE_WIDTH,
        "height": CERTIFICATE_HEIGHT,
        "style": style,
        "record": record,
        "certificate_name": certificate_name,
        "name_words": words,
        "name_lines": _name_lines(words),
        "specialty_domain": specialty_domain,
        "top_label": specialty_domain.upper(),
        "slogan": SLOGAN,
        # Pre-built markup: colour is escaped before it is embedded
        "logo": Markup(
            logo_group(
                html.escape(style.logo_color, quote=True),
                x=round(logo_x, 2),
                y=LOGO_Y,
                scale=LOGO_SCALE,
            )
        ),
    }


def _render_file_template(path: Path, context: dict) -> str:
    source = path.read_text(encoding="utf-8")
    return _env.from_string(_strip_xml_declaration(source)).render(context)


def generate_certificate_svg(
    record: CertificateRecord,
    style: CertificateStyle,
    template_path: Path | None = None,
) -> str:
    """Generate the certificate SVG document.

    Args:
        record: Certificate record (only display fields are read)
        style: Resolved brand colours
        template_path: Base template; defaults to the configured asset

    Returns:
        SVG content as a string

    Raises:
        RenderError: If the embedded fallback template fails too
    """
    if template_path is None:
        template_path = get_settings().certificate_template_file

    try:
        context = _template_context(record, style)
    except (AttributeError, TypeError) as e:
        raise RenderError(f"Invalid certificate record: {e}") from e

    try:
        return _render_file_template(template_path, context)
    except (OSError, TemplateError) as e:
        logger.warning(
            "certificate.template.fallback",
            extra={"template_path": str(template_path), "error": str(e)},
        )

    try:
        return _env.from_string(EMBEDDED_CERTIFICATE_TEMPLATE).render(context)
    except TemplateError as e:
        raise RenderError(f"Failed to render certificate: {e}") from e


def render_certificate(record: CertificateRecord, config: RenderConfig) -> bytes:
    """Render the certificate outlook of ``record`` as UTF-8 SVG bytes."""
    svg = generate_certificate_svg(record, CertificateStyle.from_config(config))
    return svg.encode("utf-8")


EMBEDDED_CERTIFICATE_TEMPLATE = """\
<svg xmlns="http://www.w3.org/2000/svg" width="{{ width }}" height="{{ height }}" viewBox="0 0 {{ width }} {{ height }}">
  <defs>
    <linearGradient id="certGradient" x1="0%" y1="0%" x2="100%" y2="0%">
      <stop offset="0" stop-color="{{ style.gradient_start_color }}"/>
      <stop offset="1" stop-color="{{ style.gradient_end_color }}"/>
    </linearGradient>
  </defs>
  <rect x="4" y="4" width="{{ width - 8 }}" height="{{ height - 8 }}" rx="16" fill="{{ style.background_color }}" stroke="{{ style.border_color }}" stroke-width="4"/>
  <rect x="16" y="34" width="{{ width - 32 }}" height="2" fill="{{ style.horizontal_bars_color }}"/>
  <rect x="16" y="112" width="{{ width - 32 }}" height="2" fill="{{ style.horizontal_bars_color }}"/>
  <rect x="6" y="120" width="{{ width - 12 }}" height="24" fill="url(#certGradient)"/>
{% if top_label %}
  <text x="{{ width // 2 }}" y="26" text-anchor="middle" font-family="Arial, Helvetica, sans-serif" font-size="10" font-weight="bold" fill="{{ style.top_label_color }}">{{ top_label }}</text>
{% endif %}
  <text text-anchor="middle" font-family="Arial, Helvetica, sans-serif" font-size="18" font-weight="bold" fill="{{ style.cert_name_color }}">
{% for y, word in name_lines %}
    <tspan x="{{ width // 2 }}" y="{{ y }}">{{ word }}</tspan>
{% endfor %}
  </text>
{% if specialty_domain %}
  <text id="specialty-domain" x="{{ width // 2 }}" y="136" text-anchor="middle" font-family="Arial, Helvetica, sans-serif" font-size="9" fill="{{ style.cert_name_color }}">{{ specialty_domain }}</text>
{% endif %}
  {{ logo }}
  <text x="{{ width // 2 }}" y="188" text-anchor="middle" font-family="Arial, Helvetica, sans-serif" font-size="7" fill="{{ style.logo_color }}">{{ slogan }}</text>
</svg>
"""
