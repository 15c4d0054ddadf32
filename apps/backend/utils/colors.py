"""
Color helpers for template styling and rasterization.
"""

import logging
import math
import re
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

FALLBACK_RGB = (128, 128, 128)

_RGBA_RE = re.compile(r"rgba?\(([^)]*)\)", re.IGNORECASE)
_GRADIENT_RE = re.compile(r"linear-gradient\((.*)\)", re.IGNORECASE)


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Convert #RRGGBB to an RGB tuple, degrading to mid-gray on bad input."""
    value = (hex_color or "").strip().lstrip('#')
    try:
        if len(value) < 6:
            raise ValueError(f"expected 6 hex digits, got {len(value)}")
        return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError as e:
        logger.warning(f"Malformed hex color {hex_color!r}: {e}")
        return FALLBACK_RGB


def rgb_to_hex(rgb: Tuple[int, int, int]) -> str:
    r, g, b = (max(0, min(255, int(c))) for c in rgb)
    return f"#{r:02X}{g:02X}{b:02X}"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def adjust_color_lightness(hex_color: str, amount: float) -> str:
    """
    Shift a color toward white or black.

    amount >= 0.5 interpolates every channel toward 255 by (amount - 0.5) * 2,
    so 1.0 gives pure white. Below 0.5 every channel is scaled by amount * 2,
    so 0.0 gives pure black. Exactly 0.5 returns the input color.

    Args:
        hex_color: Color in #RRGGBB form
        amount: Lightness target in [0, 1]

    Returns:
        Uppercase #RRGGBB string
    """
    r, g, b = hex_to_rgb(hex_color)

    def adjust(value: int) -> int:
        if amount >= 0.5:
            adjusted = value + (255 - value) * ((amount - 0.5) * 2)
        else:
            adjusted = value * (amount * 2)
        return max(0, min(255, _round_half_up(adjusted)))

    return rgb_to_hex((adjust(r), adjust(g), adjust(b)))


def parse_css_color(value: Optional[str]) -> Optional[Tuple[int, int, int, int]]:
    """Parse #RRGGBB, #RRGGBBAA or rgb()/rgba() into RGBA; None for transparent."""
    if not value or not isinstance(value, str):
        return None
    v = value.strip()
    if v.lower() in ("transparent", "none"):
        return None
    if v.startswith('#'):
        r, g, b = hex_to_rgb(v)
        alpha = 255
        if len(v) == 9:
            try:
                alpha = int(v[7:9], 16)
            except ValueError:
                alpha = 255
        return (r, g, b, alpha)
    match = _RGBA_RE.fullmatch(v)
    if match:
        parts = [p.strip() for p in match.group(1).split(',')]
        try:
            r, g, b = (int(float(p)) for p in parts[:3])
            a = float(parts[3]) if len(parts) > 3 else 1.0
        except (ValueError, IndexError):
            logger.warning(f"Unparseable color {value!r}")
            return None
        if a <= 0:
            return None
        return (r, g, b, _round_half_up(max(0.0, min(1.0, a)) * 255))
    if v.lower() == "white":
        return (255, 255, 255, 255)
    if v.lower() == "black":
        return (0, 0, 0, 255)
    logger.warning(f"Unsupported color value {value!r}")
    return None


def parse_linear_gradient(value: Optional[str]) -> Optional[Tuple[float, List[str]]]:
    """
    Parse ``linear-gradient(135deg, #A 0%, #B 100%)`` into (angle, colors).

    Only evenly spaced hex stops are supported; stop positions are ignored.
    """
    if not value or not isinstance(value, str):
        return None
    match = _GRADIENT_RE.search(value.strip())
    if not match:
        return None
    angle = 180.0
    colors = []
    for part in match.group(1).split(','):
        token = part.strip()
        if token.endswith('deg'):
            try:
                angle = float(token[:-3])
            except ValueError:
                pass
            continue
        color = token.split()[0] if token else ''
        if color.startswith('#'):
            colors.append(color)
    if not colors:
        return None
    return angle, colors


def interpolate_color(colors: List[str], position: float) -> Tuple[int, int, int]:
    """Interpolate between evenly spaced colors at a position in [0, 1]."""
    if not colors:
        return (255, 255, 255)
    if len(colors) == 1:
        return hex_to_rgb(colors[0])

    position = max(0.0, min(1.0, position))
    segment_size = 1.0 / (len(colors) - 1)
    segment_index = int(position / segment_size)
    if segment_index >= len(colors) - 1:
        return hex_to_rgb(colors[-1])

    local_position = (position - segment_index * segment_size) / segment_size
    r1, g1, b1 = hex_to_rgb(colors[segment_index])
    r2, g2, b2 = hex_to_rgb(colors[segment_index + 1])
    return (
        int(r1 + (r2 - r1) * local_position),
        int(g1 + (g2 - g1) * local_position),
        int(b1 + (b2 - b1) * local_position),
    )
