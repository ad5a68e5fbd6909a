from __future__ import annotations

import colorsys


RGBA = tuple[int, int, int, int]

SATURATION = 1.0
LIGHTNESS = 0.5


def color_for(index: int, total: int) -> RGBA:
    """Evenly spaced hue for series ``index`` out of ``total``.

    At full saturation and half lightness 8-bit RGB holds only 1530 distinct
    hues, so colors stop being pairwise distinct beyond 1530 series.
    """
    if total <= 0:
        raise ValueError("total must be > 0")
    if not 0 <= index < total:
        raise ValueError(f"index must be in [0, {total}), got {index}")
    r, g, b = colorsys.hls_to_rgb(index / total, LIGHTNESS, SATURATION)
    return (int(round(r * 255)), int(round(g * 255)), int(round(b * 255)), 255)
