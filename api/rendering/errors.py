"""Rendering exceptions.

Both map to HTTP 500 at the route layer. Their messages may carry internal
detail and are logged, never shown to callers.
"""


class RenderError(Exception):
    """SVG template execution failed, or the stored config is malformed."""


class ConversionError(Exception):
    """Rasterizing an SVG to PNG/JPEG failed."""
