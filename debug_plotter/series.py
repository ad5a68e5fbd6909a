from __future__ import annotations

from collections import deque
import math

import numpy as np


Sample = tuple[float, float]


class SeriesBuffer:
    """Chronological (x, y) samples for one named series.

    With a window the oldest sample is evicted once ``window`` samples are
    resident. Empty-buffer extents are +inf for minima and -inf for maxima.
    """

    def __init__(self, window: int | None = None) -> None:
        if window is not None and window <= 0:
            raise ValueError("window must be > 0")
        self._samples: deque[Sample] = deque(maxlen=window)

    def __len__(self) -> int:
        return len(self._samples)

    @property
    def window(self) -> int | None:
        return self._samples.maxlen

    def append(self, x: float, y: float) -> None:
        self._samples.append((float(x), float(y)))

    def pairs(self) -> list[Sample]:
        return list(self._samples)

    def as_arrays(self) -> tuple[np.ndarray, np.ndarray]:
        if not self._samples:
            empty = np.zeros(0, dtype=np.float64)
            return empty, empty.copy()
        data = np.asarray(self._samples, dtype=np.float64)
        return data[:, 0].copy(), data[:, 1].copy()

    def min_x(self) -> float:
        return _fold_min(x for x, _ in self._samples)

    def max_x(self) -> float:
        return _fold_max(x for x, _ in self._samples)

    def min_y(self) -> float:
        return _fold_min(y for _, y in self._samples)

    def max_y(self) -> float:
        return _fold_max(y for _, y in self._samples)


# NaN never compares smaller or larger, so both folds skip it.
def _fold_min(values) -> float:
    acc = math.inf
    for value in values:
        if value < acc:
            acc = value
    return acc


def _fold_max(values) -> float:
    acc = -math.inf
    for value in values:
        if value > acc:
            acc = value
    return acc
