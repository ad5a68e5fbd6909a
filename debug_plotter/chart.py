from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

from debug_plotter.colors import RGBA, color_for
from debug_plotter.errors import RenderError
from debug_plotter.options import resolve_size
from debug_plotter.record import CallSiteRecord
from debug_plotter.renderer import DEFAULT_STYLE, ChartStyle, RasterRenderer, Renderer, draw_chart

if TYPE_CHECKING:
    from debug_plotter.live import LiveSurface

LOGGER = logging.getLogger(__name__)

Range = tuple[float, float]
Snapshot = list[tuple[str, np.ndarray, np.ndarray]]


@dataclass(frozen=True)
class ChartSeries:
    name: str
    color: RGBA
    x: np.ndarray
    y: np.ndarray


@dataclass(frozen=True)
class ChartDescription:
    caption: str
    width: int
    height: int
    x_range: Range
    y_range: Range
    series: tuple[ChartSeries, ...]
    x_desc: str | None = None
    y_desc: str | None = None


def axis_ranges(record: CallSiteRecord, snapshot: Snapshot | None = None) -> tuple[Range, Range]:
    """Explicit ranges win; otherwise the extent of every buffered sample.

    Infinite and NaN samples are left out of the extent, and a record without
    any finite samples gets the degenerate ``(0.0, 0.0)``. Pass ``snapshot`` to
    derive the ranges from data already copied out under the record lock.
    """
    if snapshot is None:
        snapshot = record.snapshot()
    x_range = record.options.x_range
    y_range = record.options.y_range
    if x_range is None:
        x_range = _derived_range([x for _, x, _ in snapshot])
    if y_range is None:
        y_range = _derived_range([y for _, _, y in snapshot])
    return x_range, y_range


def _derived_range(columns: list[np.ndarray]) -> Range:
    if not columns:
        return (0.0, 0.0)
    values = np.concatenate(columns)
    finite = values[np.isfinite(values)]
    if finite.size == 0:
        return (0.0, 0.0)
    return (float(finite.min()), float(finite.max()))


class ChartComposer:
    """Turns call-site records into charts on files or live surfaces."""

    def __init__(self, renderer: Renderer | None = None, style: ChartStyle = DEFAULT_STYLE) -> None:
        self.style = style
        self.renderer = renderer or RasterRenderer(style=style)

    def axis_ranges(self, record: CallSiteRecord, snapshot: Snapshot | None = None) -> tuple[Range, Range]:
        return axis_ranges(record, snapshot)

    def color_for(self, index: int, total: int) -> RGBA:
        return color_for(index, total)

    def describe(self, record: CallSiteRecord, size: tuple[int, int] | None = None) -> ChartDescription:
        width, height = size if size is not None else resolve_size(record.options)
        # One snapshot so the ranges and the drawn series agree.
        snapshot = record.snapshot()
        x_range, y_range = self.axis_ranges(record, snapshot)
        total = len(snapshot)
        series = tuple(
            ChartSeries(name=name, color=self.color_for(i, total), x=x, y=y)
            for i, (name, x, y) in enumerate(snapshot)
        )
        return ChartDescription(
            caption=record.caption,
            width=width,
            height=height,
            x_range=x_range,
            y_range=y_range,
            series=series,
            x_desc=record.options.x_desc,
            y_desc=record.options.y_desc,
        )

    def render_to_surface(self, record: CallSiteRecord, surface: "LiveSurface") -> bool:
        """Redraw ``record`` on ``surface``; False once the surface is closed."""
        if surface.is_closed():
            return False
        description = self.describe(record)
        canvas = surface.begin_frame(description.width, description.height)
        draw_chart(canvas, description, style=self.style)
        surface.end_frame(canvas)
        return not surface.is_closed()

    def render_to_file(self, record: CallSiteRecord) -> Path:
        path = record.path
        LOGGER.info('Saving plot "%s" to %s', record.caption, path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self.renderer.write(self.describe(record), path)
        except (OSError, ValueError, KeyError) as exc:
            raise RenderError(record.caption, path, str(exc)) from exc
        return path
