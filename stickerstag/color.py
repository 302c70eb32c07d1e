"""Color parsing helpers."""

from __future__ import annotations

from typing import Any, Tuple

RGBColor = Tuple[int, int, int]


def hex_to_rgb(hex_str: str) -> RGBColor:
    """Convert hex color string (#RRGGBB or RRGGBB) to RGB tuple (0-255)."""
    hex_str = hex_str.strip().lstrip('#')
    if len(hex_str) != 6:
        raise ValueError(f"Invalid hex color: {hex_str}")
    return (
        int(hex_str[0:2], 16),
        int(hex_str[2:4], 16),
        int(hex_str[4:6], 16),
    )


def rgb_to_hex(color: RGBColor) -> str:
    """Convert RGB tuple (0-255) to hex color string (#RRGGBB)."""
    r, g, b = (max(0, min(255, int(c))) for c in color[:3])
    return f"#{r:02X}{g:02X}{b:02X}"


def parse_color(color: Any) -> RGBColor:
    """
    Parse color from various formats to RGB tuple.

    Accepts:
    - RGB tuple/list: (255, 0, 0) or [255, 0, 0]
    - Hex string: '#FF0000' or 'FF0000'
    """
    if isinstance(color, str):
        return hex_to_rgb(color)
    elif isinstance(color, (list, tuple)) and len(color) >= 3:
        return tuple(max(0, min(255, int(c))) for c in color[:3])
    else:
        raise ValueError(f"Invalid color format: {color}")
