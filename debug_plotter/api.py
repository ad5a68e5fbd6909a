from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Iterable

from debug_plotter.errors import DebugPlotterError
from debug_plotter.options import Location, Options
from debug_plotter.record import CallSiteRecord
from debug_plotter.registry import Registry, default_registry, flush_all

__all__ = ["flush_all", "plot"]


def plot(
    series: Mapping[str, Any] | Iterable[tuple[str, Any]],
    *,
    caption: str | None = None,
    size: tuple[int, int] | None = None,
    x_desc: str | None = None,
    y_desc: str | None = None,
    path: str | Path | None = None,
    x_range: tuple[float, float] | None = None,
    y_range: tuple[float, float] | None = None,
    values: int | None = None,
    live: bool | None = None,
    location: Location | None = None,
    registry: Registry | None = None,
) -> None:
    """Record one sample per named series at the calling line.

    ``series`` maps names to values. A plain number is plotted against the
    call count of this call site; an ``(x, y)`` tuple supplies its own x.
    Names and options are taken from the first call at a location and ignored
    afterwards. ``values`` keeps only that many recent samples per series and
    ``live`` redraws a window while recording instead of saving at exit.

        for i in range(100):
            plot({"loss": loss, "lr": lr}, caption="training")
    """
    if registry is None:
        registry = default_registry()
    if not registry.settings.enabled:
        return
    if location is None:
        location = Location.of_caller()
    names, samples = _split_series(series)

    def build() -> CallSiteRecord:
        options = Options(
            caption=caption,
            size=size,
            x_desc=x_desc,
            y_desc=y_desc,
            path=path,
            x_range=x_range,
            y_range=y_range,
            window=values,
            live=live,
        )
        return CallSiteRecord.create(names, location, options, output_dir=registry.settings.output_dir)

    registry.observe(location, build, samples)


def _split_series(series: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> tuple[list[str], list[Any]]:
    items = list(series.items()) if isinstance(series, Mapping) else list(series)
    if not items:
        raise DebugPlotterError("plot() needs at least one series")
    names: list[str] = []
    samples: list[Any] = []
    for item in items:
        try:
            name, value = item
        except (TypeError, ValueError) as exc:
            raise DebugPlotterError(f"series entries must be (name, value) pairs, got {item!r}") from exc
        names.append(str(name))
        # Lists are accepted as (x, y) pairs too.
        samples.append(tuple(value) if isinstance(value, list) else value)
    return names, samples
