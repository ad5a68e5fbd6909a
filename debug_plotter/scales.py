from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import math
import sys

import numpy as np


FLOAT_MAX = sys.float_info.max


@dataclass(frozen=True)
class DataLimits:
    xmin: float
    xmax: float
    ymin: float
    ymax: float

    @classmethod
    def from_ranges(cls, x_range: tuple[float, float], y_range: tuple[float, float]) -> "DataLimits":
        xmin, xmax = _widen_degenerate(*x_range)
        ymin, ymax = _widen_degenerate(*y_range)
        return cls(xmin=xmin, xmax=xmax, ymin=ymin, ymax=ymax)


@dataclass(frozen=True)
class PlotTransform:
    sx: float
    tx: float
    sy: float
    ty: float


def _widen_degenerate(lo: float, hi: float) -> tuple[float, float]:
    # A zero-width axis still needs a usable pixel scale.
    if lo == hi:
        delta = max(1.0, abs(lo) * 0.05)
        return max(lo - delta, -FLOAT_MAX), min(hi + delta, FLOAT_MAX)
    return lo, hi


def _scale(pixels: int, lo: float, hi: float) -> float:
    span = hi - lo
    if math.isfinite(span):
        return (pixels - 1) / span
    # Halving both sides keeps spans wider than the float range finite.
    return ((pixels - 1) / 2.0) / (hi / 2.0 - lo / 2.0)


def build_transform(limits: DataLimits, width: int, height: int) -> PlotTransform:
    if width <= 1 or height <= 1:
        raise ValueError("plot viewport width/height must be > 1")
    sx = _scale(width, limits.xmin, limits.xmax)
    sy = _scale(height, limits.ymin, limits.ymax)
    return PlotTransform(sx=sx, tx=-limits.xmin * sx, sy=sy, ty=-limits.ymin * sy)


def map_to_pixels(x: np.ndarray, y: np.ndarray, transform: PlotTransform, width: int, height: int) -> tuple[np.ndarray, np.ndarray]:
    """Map finite data coordinates to pixel coordinates with y pointing down."""
    px = np.rint(x * transform.sx + transform.tx)
    py = (height - 1) - np.rint(y * transform.sy + transform.ty)
    np.clip(px, 0, width - 1, out=px)
    np.clip(py, 0, height - 1, out=py)
    return px.astype(np.int32), py.astype(np.int32)


def nice_ticks(vmin: float, vmax: float, target: int) -> np.ndarray:
    """Round-valued tick positions inside [vmin, vmax]."""
    if target <= 0:
        raise ValueError("target must be > 0")
    if vmin == vmax:
        return np.asarray([vmin], dtype=np.float64)
    ends = np.asarray([vmin, vmax], dtype=np.float64)
    if not math.isfinite(vmax - vmin):
        return ends
    with np.errstate(over="ignore", invalid="ignore"):
        span = _nice_number(vmax - vmin, round_result=False)
        step = _nice_number(span / max(target - 1, 1), round_result=True)
        stop = vmax + 0.5 * step
    # Near the float limit the rounded step overflows; keep only the ends.
    if not (math.isfinite(step) and math.isfinite(stop)):
        return ends
    first = np.ceil(vmin / step) * step
    ticks = np.arange(first, stop, step, dtype=np.float64)
    # Snap floating-point drift so -4.4e-16 prints as 0.
    ticks = np.rint(ticks / step) * step
    ticks[np.isclose(ticks, 0.0, rtol=0.0, atol=step * 1e-9)] = 0.0
    eps = step * 1e-9
    return ticks[(ticks >= vmin - eps) & (ticks <= vmax + eps)]


def tick_labels(ticks: np.ndarray) -> list[str]:
    if ticks.size == 0:
        return []
    if ticks.size == 1:
        return [format_tick(float(ticks[0]))]
    step = abs(float(ticks[1]) - float(ticks[0]))
    return [format_tick(float(value), step=step) for value in ticks]


def format_tick(value: float, *, step: float | None = None) -> str:
    if not np.isfinite(value):
        return str(value)
    abs_v = abs(value)
    if abs_v != 0 and (abs_v >= 1e6 or abs_v < 1e-6 or (step is not None and step < 1e-4)):
        return f"{value:.3e}"
    decimals = _decimals_from_step(step) if step is not None else 6
    try:
        quantized = Decimal(str(value)).quantize(Decimal("1").scaleb(-decimals))
    except InvalidOperation:
        quantized = Decimal(str(value))
    out = format(quantized, "f")
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    return "0" if out == "-0" else out


def _nice_number(value: float, *, round_result: bool) -> float:
    exp = np.floor(np.log10(value))
    frac = value / (10**exp)
    bounds = ((1.5, 1.0), (3.0, 2.0), (7.0, 5.0)) if round_result else ((1.0, 1.0), (2.0, 2.0), (5.0, 5.0))
    nice_frac = 10.0
    for limit, candidate in bounds:
        if (frac < limit) if round_result else (frac <= limit):
            nice_frac = candidate
            break
    return float(nice_frac * (10**exp))


def _decimals_from_step(step: float) -> int:
    if step <= 0 or not np.isfinite(step):
        return 6
    exponent = Decimal(str(step)).normalize().as_tuple().exponent
    return min(12, max(0, -int(exponent)))
