from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image

from debug_plotter.raster import (
    draw_hline,
    draw_point,
    draw_polyline,
    draw_text,
    draw_vline,
    fill_rect,
    new_canvas,
    text_size,
)
from debug_plotter.scales import DataLimits, PlotTransform, build_transform, map_to_pixels, nice_ticks, tick_labels

if TYPE_CHECKING:
    from debug_plotter.chart import ChartDescription


ALPHA_FORMATS = {".png", ".tif", ".tiff", ".webp", ".gif"}


@dataclass(frozen=True)
class ChartStyle:
    background: tuple[int, int, int, int] = (12, 16, 23, 255)
    plot_bg_color: tuple[int, int, int, int] = (20, 26, 36, 255)
    frame_color: tuple[int, int, int, int] = (60, 67, 78, 255)
    grid_color: tuple[int, int, int, int] = (44, 53, 66, 255)
    axis_color: tuple[int, int, int, int] = (124, 138, 156, 255)
    text_color: tuple[int, int, int, int] = (208, 218, 232, 255)
    legend_bg_color: tuple[int, int, int, int] = (10, 14, 20, 200)
    line_width: int = 1
    marker_size: int = 3


DEFAULT_STYLE = ChartStyle()


class Renderer(ABC):
    """Writes a chart description to an image file."""

    @abstractmethod
    def write(self, description: "ChartDescription", path: Path) -> None:
        raise NotImplementedError


class RasterRenderer(Renderer):
    def __init__(self, style: ChartStyle = DEFAULT_STYLE) -> None:
        self.style = style

    def write(self, description: "ChartDescription", path: Path) -> None:
        canvas = new_canvas(description.width, description.height, color=self.style.background)
        draw_chart(canvas, description, style=self.style)
        path.parent.mkdir(parents=True, exist_ok=True)
        image = Image.fromarray(canvas)
        if path.suffix.lower() not in ALPHA_FORMATS:
            image = image.convert("RGB")
        image.save(path)


@dataclass(frozen=True)
class _Layout:
    plot_x0: int
    plot_y0: int
    plot_w: int
    plot_h: int
    tick_font_px: float
    label_font_px: float
    caption_font_px: float


def draw_chart(canvas: np.ndarray, description: "ChartDescription", *, style: ChartStyle = DEFAULT_STYLE) -> None:
    """Draw caption, axes, grid, every series and the legend onto ``canvas``.

    The canvas must be ``(height, width, 4)`` uint8 matching the description.
    """
    height, width = canvas.shape[0], canvas.shape[1]
    limits = DataLimits.from_ranges(description.x_range, description.y_range)
    fill_rect(canvas, 0, 0, width - 1, height - 1, style.background)

    layout = _compute_layout(description, limits, width, height)
    x0, y0, pw, ph = layout.plot_x0, layout.plot_y0, layout.plot_w, layout.plot_h
    fill_rect(canvas, x0, y0, x0 + pw - 1, y0 + ph - 1, style.plot_bg_color)
    transform = build_transform(limits, pw, ph)

    tick_x = nice_ticks(limits.xmin, limits.xmax, max(2, pw // 100))
    tick_y = nice_ticks(limits.ymin, limits.ymax, max(2, ph // 60))
    px_ticks, _ = map_to_pixels(tick_x, np.full(tick_x.shape, limits.ymin), transform, pw, ph)
    _, py_ticks = map_to_pixels(np.full(tick_y.shape, limits.xmin), tick_y, transform, pw, ph)
    for px, label in zip(px_ticks.tolist(), tick_labels(tick_x)):
        draw_vline(canvas, x0 + px, y0, y0 + ph - 1, style.grid_color)
        draw_vline(canvas, x0 + px, y0 + ph, y0 + ph + 3, style.axis_color)
        lw, _ = text_size(label, font_size_px=layout.tick_font_px)
        draw_text(canvas, x0 + px - lw // 2, y0 + ph + 6, label, style.text_color, font_size_px=layout.tick_font_px)
    for py, label in zip(py_ticks.tolist(), tick_labels(tick_y)):
        draw_hline(canvas, x0, x0 + pw - 1, y0 + py, style.grid_color)
        draw_hline(canvas, x0 - 4, x0 - 1, y0 + py, style.axis_color)
        lw, lh = text_size(label, font_size_px=layout.tick_font_px)
        draw_text(canvas, x0 - 7 - lw, y0 + py - lh // 2, label, style.text_color, font_size_px=layout.tick_font_px)

    for series in description.series:
        _draw_series(canvas, series.x, series.y, series.color, limits, transform, layout, style)

    draw_hline(canvas, x0, x0 + pw - 1, y0 + ph - 1, style.axis_color)
    draw_vline(canvas, x0, y0, y0 + ph - 1, style.axis_color)
    draw_hline(canvas, x0, x0 + pw - 1, y0, style.frame_color)
    draw_vline(canvas, x0 + pw - 1, y0, y0 + ph - 1, style.frame_color)

    if description.caption:
        cw, _ = text_size(description.caption, font_size_px=layout.caption_font_px)
        draw_text(canvas, (width - cw) // 2, 6, description.caption, style.text_color, font_size_px=layout.caption_font_px)
    if description.x_desc:
        dw, dh = text_size(description.x_desc, font_size_px=layout.label_font_px)
        draw_text(canvas, x0 + (pw - dw) // 2, height - dh - 6, description.x_desc, style.text_color, font_size_px=layout.label_font_px)
    if description.y_desc:
        dw, dh = text_size(description.y_desc, font_size_px=layout.label_font_px, rotate_deg=90)
        draw_text(
            canvas,
            6,
            y0 + (ph - dh) // 2,
            description.y_desc,
            style.text_color,
            font_size_px=layout.label_font_px,
            rotate_deg=90,
        )
    _draw_legend(canvas, description, layout, style)


def _compute_layout(description: "ChartDescription", limits: DataLimits, width: int, height: int) -> _Layout:
    scale = min(width, height)
    tick_font_px = max(9.0, min(20.0, scale * 0.025))
    label_font_px = max(10.0, min(24.0, scale * 0.03))
    caption_font_px = max(12.0, min(40.0, scale * 0.05))

    y_labels = tick_labels(nice_ticks(limits.ymin, limits.ymax, 5))
    max_y_tick_w = max((text_size(lbl, font_size_px=tick_font_px)[0] for lbl in y_labels), default=0)
    tick_h = text_size("0", font_size_px=tick_font_px)[1]
    caption_h = text_size(description.caption, font_size_px=caption_font_px)[1] if description.caption else 0
    x_desc_h = text_size(description.x_desc, font_size_px=label_font_px)[1] if description.x_desc else 0
    y_desc_w = text_size(description.y_desc, font_size_px=label_font_px, rotate_deg=90)[0] if description.y_desc else 0

    left = max_y_tick_w + 12 + (y_desc_w + 10 if y_desc_w else 0)
    right = 16
    top = caption_h + 14
    bottom = tick_h + 14 + (x_desc_h + 8 if x_desc_h else 0)

    # Small images keep a drawable plot area at the cost of clipped labels.
    left = min(left, max(2, width // 3))
    right = min(right, max(1, width // 8))
    top = min(top, max(2, height // 4))
    bottom = min(bottom, max(2, height // 3))
    plot_w = width - left - right
    plot_h = height - top - bottom
    if plot_w <= 1 or plot_h <= 1:
        raise ValueError(f"image size {width}x{height} is too small for a chart")
    return _Layout(
        plot_x0=left,
        plot_y0=top,
        plot_w=plot_w,
        plot_h=plot_h,
        tick_font_px=tick_font_px,
        label_font_px=label_font_px,
        caption_font_px=caption_font_px,
    )


def _draw_series(
    canvas: np.ndarray,
    x: np.ndarray,
    y: np.ndarray,
    color: tuple[int, int, int, int],
    limits: DataLimits,
    transform: PlotTransform,
    layout: _Layout,
    style: ChartStyle,
) -> None:
    if x.size == 0:
        return
    visible = (
        np.isfinite(x)
        & np.isfinite(y)
        & (x >= limits.xmin)
        & (x <= limits.xmax)
        & (y >= limits.ymin)
        & (y <= limits.ymax)
    )
    for start, end in _contiguous_runs(visible):
        px, py = map_to_pixels(x[start:end], y[start:end], transform, layout.plot_w, layout.plot_h)
        px = px + layout.plot_x0
        py = py + layout.plot_y0
        if px.size == 1:
            draw_point(canvas, int(px[0]), int(py[0]), color, size=style.marker_size)
        else:
            draw_polyline(canvas, px, py, color, width=style.line_width)


def _contiguous_runs(mask: np.ndarray) -> list[tuple[int, int]]:
    idx = np.flatnonzero(mask)
    if idx.size == 0:
        return []
    breaks = np.flatnonzero(np.diff(idx) > 1)
    starts = np.concatenate(([idx[0]], idx[breaks + 1]))
    ends = np.concatenate((idx[breaks] + 1, [idx[-1] + 1]))
    return [(int(s), int(e)) for s, e in zip(starts, ends)]


def _draw_legend(canvas: np.ndarray, description: "ChartDescription", layout: _Layout, style: ChartStyle) -> None:
    if not description.series:
        return
    font_px = max(9.0, layout.tick_font_px * 0.95)
    pad = int(max(4, font_px * 0.5))
    swatch_w = int(max(12, font_px * 1.6))
    row_h = max(text_size("Ag", font_size_px=font_px)[1], 6) + 4
    text_w = max(text_size(series.name, font_size_px=font_px)[0] for series in description.series)
    box_w = pad * 3 + swatch_w + text_w
    box_h = pad * 2 + row_h * len(description.series)
    bx = max(layout.plot_x0 + 2, layout.plot_x0 + layout.plot_w - box_w - 6)
    by = layout.plot_y0 + 6
    fill_rect(canvas, bx, by, bx + box_w - 1, by + box_h - 1, style.legend_bg_color)
    draw_hline(canvas, bx, bx + box_w - 1, by, style.frame_color)
    draw_hline(canvas, bx, bx + box_w - 1, by + box_h - 1, style.frame_color)
    draw_vline(canvas, bx, by, by + box_h - 1, style.frame_color)
    draw_vline(canvas, bx + box_w - 1, by, by + box_h - 1, style.frame_color)
    for i, series in enumerate(description.series):
        row_y = by + pad + i * row_h
        mid = row_y + row_h // 2
        fill_rect(canvas, bx + pad, mid - 1, bx + pad + swatch_w - 1, mid, series.color)
        draw_text(canvas, bx + pad * 2 + swatch_w, row_y + 1, series.name, style.text_color, font_size_px=font_px)
