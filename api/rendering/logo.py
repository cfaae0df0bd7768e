"""GÉANT logo vector data shared by the badge and certificate renderers.

Paths live in a 140x62 coordinate box. The wordmark and the upper swoosh
take the primary colour, the lower swoosh the accent colour.
"""

LOGO_WIDTH = 140
LOGO_HEIGHT = 62
LOGO_ACCENT_COLOR = "#E5004B"

PRIMARY_PATHS: tuple[str, ...] = (
    # Accent on the "E"
    "M28.9,31.6c1-0.8,1.9-1.2,2.7-1.2c1.7,0.1,2.2,1.2,2.3,1.9c-0.4,0.1-7.8,2.6-8.2,2.7"
    "c-0.1-0.1-0.2-0.3-0.4-0.4C25.8,34.4,28.9,31.6,28.9,31.6z",
    # G
    "M1.5,47.5c0,8.4,3.7,12.7,11,12.7c4.8,0,7.7-2.1,7.8-2.2l0.2-0.2V46.2H10.5v3.2"
    "c0,0,5,0,6,0c0,0.9,0,6,0,6.5c-0.6,0.3-2.1,1-4.2,1c-4.3,0-6.4-3.1-6.4-9.4"
    "c0-3.6,1-8,6-8c3.3,0,4.4,1.9,4.4,3.7v0.6h4.5v-0.6c0-4.1-3.6-6.9-8.9-6.9"
    "C5.2,36.3,1.5,40.4,1.5,47.5z",
    # E
    "M36.4,36.7H23.2v23.1h14.1v-3.2c0,0-9,0-10,0c0-0.9,0-6.3,0-7.3c1,0,9.2,0,9.2,0"
    "v-3.2c0,0-8.2,0-9.2,0c0-0.9,0-5.3,0-6.2c1,0,9.7,0,9.7,0v-3.2H36.4z",
    # NT
    "M95.8,36.7h-20c0,0,0,13.9,0,17.1c-1.6-2.8-9.9-17.1-9.9-17.1h-4.7v23.1h3.9"
    "c0,0,0-13.9,0-17.1c1.6,2.8,9.9,17.1,9.9,17.1h4.7c0,0,0-18.8,0-19.9c0.9,0,5.5,0,6.4,0"
    "c0,1.1,0,19.9,0,19.9h4.1c0,0,0-18.8,0-19.9c0.9,0,6.2,0,6.2,0v-3.2H95.8z",
    # A
    "M51.5,36.7h-0.4h-4l-8.7,23.1h4.2c0,0,2.3-6.1,2.5-6.8c0.7,0,7.8,0,8.5,0"
    "c0.3,0.7,2.6,6.8,2.6,6.8h4.2L51.5,36.7z M46.3,49.8c0.4-1.1,2.3-6.7,3-8.7"
    "c0.7,2,2.6,7.5,3,8.7C51.2,49.8,47.4,49.8,46.3,49.8z",
    # Upper swoosh
    "M134.7,14.7c-15.2-18.8-76.9,7.8-93.4,14.8c-1.2,0.5-2.7,0.4-3.6-1.3c0.7,1.7,2,2.3,3.7,1.7"
    "c22-8.8,75.2-27.9,88.5-10.5c6,7.9,4.3,17.6-2.3,31.3c-0.3,0.6-0.5,1-0.6,1.1"
    "c0,0,0,0.1-0.1,0.1c0,0,0,0.1-0.1,0.1c-0.5,0.8-1.2,1.3-1.8,1.5c0.8,0,1.6-0.4,2.2-1.4"
    "c0.2-0.3,0.4-0.6,0.6-1l0,0C137.7,34.7,141.1,22.5,134.7,14.7z",
)

ACCENT_PATH = (
    "M123.2,52.6c-0.2-0.2-3-2.6-5.7-5.2C103,33.8,59.4-8.4,40.3,2.7c-5.4,3.1-6.3,12.2-3,24.3"
    "c0,0,0,0,0,0.1v0c0,0.2,0.1,0.3,0.1,0.5c0.4,1.3,1.3,2.1,2.4,2.1c-0.8-0.2-1.5-0.8-1.9-1.8"
    "c-0.1-0.1-0.1-0.3-0.1-0.4c-0.1-0.2-0.1-0.4-0.2-0.7l0,0c0-0.1-0.1-0.3-0.1-0.4"
    "c-1.8-10.3,0.4-17,4.5-19.8c15.3-10,52,21.6,70.4,37.5c4.2,3.7,9,7.7,10.5,8.8"
    "c2.1,1.6,3.8-0.2,4.3-1C126.6,53,124.8,54,123.2,52.6z"
)


def logo_group(
    primary_color: str,
    *,
    x: float,
    y: float,
    scale: float,
    accent_color: str = LOGO_ACCENT_COLOR,
) -> str:
    """Return a ``<g>`` drawing the logo at (x, y) scaled by ``scale``.

    Colours must already be XML-escaped.
    """
    paths = "\n".join(
        f'    <path fill="{primary_color}" d="{d}"/>' for d in PRIMARY_PATHS
    )
    return (
        f'<g transform="translate({x:g},{y:g}) scale({scale:g})">\n'
        f"{paths}\n"
        f'    <path fill="{accent_color}" d="{ACCENT_PATH}"/>\n'
        f"  </g>"
    )
