"""SVG to raster conversion using CairoSVG and Pillow.

CairoSVG rasterizes to PNG; Pillow handles JPEG encoding (alpha flattened
onto white) and LANCZOS resizing. Both are CPU-bound: async callers should
run ``convert`` in an executor.
"""

import io

from PIL import Image, UnidentifiedImageError

from rendering.errors import ConversionError

JPEG_QUALITY = 90
SUPPORTED_FORMATS = ("png", "jpg")


def _import_cairosvg():
    try:
        import cairosvg
    except OSError as e:
        if "cairo" in str(e).lower():
            raise ConversionError(
                "Raster output requires the Cairo library. "
                "On macOS: brew install cairo. "
                "On Ubuntu/Debian: apt-get install libcairo2-dev. "
                "On Alpine: apk add cairo-dev."
            ) from e
        raise ConversionError(f"Failed to load CairoSVG: {e}") from e
    return cairosvg


def svg_to_png(svg_content: bytes, width: int = 0, height: int = 0) -> bytes:
    """Rasterize SVG bytes to PNG.

    Renders at the SVG's intrinsic size unless both ``width`` and ``height``
    are positive.
    """
    cairosvg = _import_cairosvg()
    kwargs: dict[str, int] = {}
    if width > 0 and height > 0:
        kwargs = {"output_width": width, "output_height": height}
    try:
        return cairosvg.svg2png(bytestring=svg_content, **kwargs)
    except Exception as e:
        raise ConversionError(f"SVG rasterization failed: {e}") from e


def png_to_jpeg(png_content: bytes, width: int = 0, height: int = 0) -> bytes:
    """Re-encode PNG bytes as JPEG, flattening transparency onto white."""
    try:
        with Image.open(io.BytesIO(png_content)) as img:
            img = img.convert("RGBA")
            background = Image.new("RGB", img.size, (255, 255, 255))
            background.paste(img, mask=img.getchannel("A"))
            if width > 0 and height > 0 and background.size != (width, height):
                background = background.resize(
                    (width, height), Image.Resampling.LANCZOS
                )

            out = io.BytesIO()
            background.save(out, format="JPEG", quality=JPEG_QUALITY)
            return out.getvalue()
    except (OSError, UnidentifiedImageError, ValueError) as e:
        raise ConversionError(f"JPEG encoding failed: {e}") from e


def convert(svg_content: bytes, fmt: str, width: int = 0, height: int = 0) -> bytes:
    """Convert SVG bytes to ``fmt`` ("png" or "jpg").

    Width/height of 0 mean "use the SVG's intrinsic dimensions".

    Raises:
        ConversionError: Unknown format, or rasterization failed
    """
    if fmt not in SUPPORTED_FORMATS:
        raise ConversionError(f"Unsupported output format: {fmt}")

    png = svg_to_png(svg_content, width, height)
    if fmt == "png":
        return png
    return png_to_jpeg(png, width, height)
