"""Badge width calculation.

Approximates proportional-font advance width from character counts, without
font metrics. The multipliers and padding are tuned to avoid text clipping;
SVG anchor positions derive from these widths, so changing them moves text.

Python's ``round`` (round-half-to-even) is used for every term.
"""

MIN_WIDTH = 80
LOGO_BLOCK_WIDTH = 46

# A label this short is drawn as the logo block instead of text
LOGO_LABEL_MAX_LENGTH = 2

_LOGO_CHAR_FACTOR = 0.55
_TEXT_CHAR_FACTOR = 0.75


def compute_width(label: str, value: str, font_size: int) -> int:
    """Return the total badge width in pixels for ``label`` and ``value``.

    >>> compute_width("", "", 12)
    80
    >>> compute_width("", "v1.0", 12)
    85
    """
    if not label and not value:
        return MIN_WIDTH

    if len(label) <= LOGO_LABEL_MAX_LENGTH:
        char_width = font_size * _LOGO_CHAR_FACTOR
        return (
            LOGO_BLOCK_WIDTH
            + round(len(value) * char_width)
            + round(2 * char_width)
        )

    char_width = font_size * _TEXT_CHAR_FACTOR
    if label and value:
        return round((len(label) + len(value)) * char_width) + round(4 * char_width)
    text = label or value
    return round(len(text) * char_width) + round(2 * char_width)


def segment_widths(value: str, font_size: int) -> tuple[int, int, int]:
    """Return ``(total, left, right)`` for a logo + value badge."""
    total = compute_width("", value, font_size)
    return total, LOGO_BLOCK_WIDTH, total - LOGO_BLOCK_WIDTH
