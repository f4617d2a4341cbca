"""Unit conversions used by WordprocessingML.

* half-points: font sizes (1pt = 2 half-points)
* twips: spacing, indents, widths (1pt = 20 twips)
* EMU: drawing extents (914400 per inch, 9525 per pixel at 96 dpi)
"""

from __future__ import annotations

EMU_PER_INCH = 914400
EMU_PER_PIXEL = 9525


def pt_to_half_points(pt: float) -> int:
    """Convert a point size to half-points, truncating (10.5 -> 21, 9 -> 18)."""
    return int(pt * 2)


def px_to_emu(px: int) -> int:
    return int(px) * EMU_PER_PIXEL


def scale_to_width(width: int, height: int, max_width: int) -> tuple[int, int]:
    """Shrink *width* x *height* to fit *max_width*, keeping the aspect ratio."""
    if max_width <= 0 or width <= max_width:
        return width, height
    ratio = max_width / width
    return max_width, int(height * ratio)
