"""Unit tests for rendering.converter.

JPEG re-encoding only needs Pillow. Tests that rasterize SVG are skipped
when the cairo native library cannot be loaded.
"""

import io

import pytest
from PIL import Image

from rendering.converter import convert, png_to_jpeg
from rendering.errors import ConversionError

pytestmark = pytest.mark.unit

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"
JPEG_MAGIC = b"\xff\xd8\xff"

SIMPLE_SVG = (
    b'<svg xmlns="http://www.w3.org/2000/svg" width="40" height="20">'
    b'<rect width="40" height="20" fill="#4CAF50"/></svg>'
)


def _cairo_available() -> bool:
    try:
        import cairosvg  # noqa: F401
    except (ImportError, OSError):
        return False
    return True


requires_cairo = pytest.mark.skipif(
    not _cairo_available(), reason="cairo native library not available"
)


def _png(size: tuple[int, int], color: tuple[int, int, int, int]) -> bytes:
    out = io.BytesIO()
    Image.new("RGBA", size, color).save(out, format="PNG")
    return out.getvalue()


class TestPngToJpeg:
    def test_encodes_jpeg(self):
        jpeg = png_to_jpeg(_png((10, 10), (255, 0, 0, 255)))
        assert jpeg.startswith(JPEG_MAGIC)

    def test_transparency_is_flattened_onto_white(self):
        jpeg = png_to_jpeg(_png((10, 10), (0, 0, 0, 0)))
        with Image.open(io.BytesIO(jpeg)) as img:
            r, g, b = img.convert("RGB").getpixel((5, 5))
        assert min(r, g, b) > 245

    def test_resizes_when_both_dimensions_given(self):
        jpeg = png_to_jpeg(_png((10, 10), (0, 0, 255, 255)), width=20, height=30)
        with Image.open(io.BytesIO(jpeg)) as img:
            assert img.size == (20, 30)

    def test_invalid_input_raises_conversion_error(self):
        with pytest.raises(ConversionError):
            png_to_jpeg(b"not an image")


class TestConvert:
    def test_unknown_format_raises(self):
        with pytest.raises(ConversionError, match="Unsupported"):
            convert(SIMPLE_SVG, "gif")

    @requires_cairo
    def test_png(self):
        assert convert(SIMPLE_SVG, "png").startswith(PNG_MAGIC)

    @requires_cairo
    def test_png_keeps_intrinsic_size(self):
        png = convert(SIMPLE_SVG, "png")
        with Image.open(io.BytesIO(png)) as img:
            assert img.size == (40, 20)

    @requires_cairo
    def test_png_with_explicit_size(self):
        png = convert(SIMPLE_SVG, "png", width=80, height=40)
        with Image.open(io.BytesIO(png)) as img:
            assert img.size == (80, 40)

    @requires_cairo
    def test_jpg(self):
        assert convert(SIMPLE_SVG, "jpg").startswith(JPEG_MAGIC)

    @requires_cairo
    def test_malformed_svg_raises_conversion_error(self):
        with pytest.raises(ConversionError):
            convert(b"<svg", "png")
