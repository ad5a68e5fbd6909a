from __future__ import annotations

from dataclasses import dataclass, field
import enum
from pathlib import Path
import threading
from typing import Any, Sequence

import numpy as np

from debug_plotter.coercion import to_sample
from debug_plotter.errors import DebugPlotterError
from debug_plotter.options import Location, Options, resolve_caption, resolve_path
from debug_plotter.series import SeriesBuffer
from debug_plotter.settings import DEFAULT_OUTPUT_DIR


class RecordState(enum.Enum):
    ACTIVE = "active"
    FLUSHED = "flushed"


@dataclass
class CallSiteRecord:
    """Aggregated series for one call site.

    Names, options, caption and output path are fixed at creation. Every
    ``insert`` appends one sample per series and advances the iteration counter
    by exactly one.
    """

    names: tuple[str, ...]
    location: Location
    options: Options
    caption: str
    path: Path
    buffers: tuple[SeriesBuffer, ...]
    state: RecordState = RecordState.ACTIVE
    _iteration: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @classmethod
    def create(
        cls,
        names: Sequence[str],
        location: Location,
        options: Options | None = None,
        *,
        output_dir: Path = DEFAULT_OUTPUT_DIR,
    ) -> "CallSiteRecord":
        names = tuple(str(name) for name in names)
        if not names:
            raise DebugPlotterError(f"call site {location.label()} declares no series")
        options = options or Options()
        caption = resolve_caption(options, location)
        return cls(
            names=names,
            location=location,
            options=options,
            caption=caption,
            path=resolve_path(options, caption, output_dir),
            buffers=tuple(SeriesBuffer(options.window) for _ in names),
        )

    @property
    def is_live(self) -> bool:
        return self.options.is_live

    def current_iteration(self) -> int:
        return self._iteration

    def insert(self, values: Sequence[tuple[float, float]]) -> None:
        with self._lock:
            self._append(values)

    def observe(self, samples: Sequence[Any]) -> None:
        """Insert raw per-series values; scalars take the iteration index as x."""
        with self._lock:
            x_default = float(self._iteration)
            values: list[tuple[float, float]] = []
            for name, sample in zip(self.names, samples):
                if isinstance(sample, tuple):
                    if len(sample) != 2:
                        raise DebugPlotterError(f"series {name!r} expects an (x, y) pair, got {len(sample)} items")
                    values.append((to_sample(sample[0], label=f"{name}.x"), to_sample(sample[1], label=f"{name}.y")))
                else:
                    values.append((x_default, to_sample(sample, label=name)))
            self._append(values)

    def _append(self, values: Sequence[tuple[float, float]]) -> None:
        for buffer, (x, y) in zip(self.buffers, values):
            buffer.append(x, y)
        self._iteration += 1

    def snapshot(self) -> list[tuple[str, np.ndarray, np.ndarray]]:
        with self._lock:
            return [(name, *buffer.as_arrays()) for name, buffer in zip(self.names, self.buffers)]

    def mark_flushed(self) -> None:
        if self.state is RecordState.FLUSHED:
            raise DebugPlotterError(f"call site {self.location.label()} was already flushed")
        self.state = RecordState.FLUSHED
