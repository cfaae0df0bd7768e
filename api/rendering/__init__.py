"""Rendering module for badge and certificate images.

This module handles all presentation/rendering logic:
- Width/layout calculation
- Badge and certificate SVG generation
- PNG/JPEG conversion

Record lookup, override merging and caching live in services.
"""

from rendering.badges import BadgeStyle, render_badge
from rendering.certificates import (
    CertificateStyle,
    render_certificate,
    split_certificate_name,
)
from rendering.converter import convert
from rendering.errors import ConversionError, RenderError
from rendering.layout import compute_width, segment_widths

__all__ = [
    "BadgeStyle",
    "CertificateStyle",
    "ConversionError",
    "RenderError",
    "compute_width",
    "convert",
    "render_badge",
    "render_certificate",
    "segment_widths",
    "split_certificate_name",
]
