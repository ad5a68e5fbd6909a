from __future__ import annotations

from dataclasses import dataclass
from itertools import islice
import math
import numbers
from pathlib import Path
import sys
from types import FrameType

from debug_plotter.errors import ConfigurationError


DEFAULT_SIZE = (640, 480)
DEFAULT_EXTENSION = ".png"

Range = tuple[float, float]


@dataclass(frozen=True)
class Location:
    """Identity of one call site."""

    file: str
    line: int
    column: int = 0

    def label(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"

    @classmethod
    def of_caller(cls, depth: int = 1) -> "Location":
        """Location of the frame ``depth`` levels above the caller of this method."""
        frame = sys._getframe(depth + 1)
        return cls(file=frame.f_code.co_filename, line=frame.f_lineno, column=_frame_column(frame))


def _frame_column(frame: FrameType) -> int:
    # Instruction positions exist on 3.11+; older interpreters only know the line.
    positions = getattr(frame.f_code, "co_positions", None)
    if positions is None or frame.f_lasti < 0:
        return 0
    entry = next(islice(positions(), frame.f_lasti // 2, None), None)
    if entry is None or entry[2] is None:
        return 0
    return int(entry[2])


@dataclass(frozen=True)
class Options:
    caption: str | None = None
    size: tuple[int, int] | None = None
    x_desc: str | None = None
    y_desc: str | None = None
    path: str | Path | None = None
    x_range: Range | None = None
    y_range: Range | None = None
    window: int | None = None
    live: bool | None = None

    def __post_init__(self) -> None:
        if self.size is not None:
            try:
                width, height = (_positive_int(value) for value in self.size)
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"size must be a pair of positive integers, got {self.size!r}") from exc
            object.__setattr__(self, "size", (width, height))
        if self.window is not None:
            try:
                window = _positive_int(self.window)
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"window must be a positive integer, got {self.window!r}") from exc
            object.__setattr__(self, "window", window)
        object.__setattr__(self, "x_range", _validate_range(self.x_range, axis="x"))
        object.__setattr__(self, "y_range", _validate_range(self.y_range, axis="y"))

    @property
    def is_live(self) -> bool:
        return bool(self.live)


def _positive_int(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise TypeError(f"expected an integer, got {value!r}")
    if value <= 0:
        raise ValueError(f"expected a positive integer, got {value!r}")
    return int(value)


def _validate_range(value: Range | None, *, axis: str) -> Range | None:
    if value is None:
        return None
    try:
        lo, hi = value
        lo_f = float(lo)
        hi_f = float(hi)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{axis}_range must be a (min, max) pair, got {value!r}") from exc
    if not (math.isfinite(lo_f) and math.isfinite(hi_f)):
        raise ConfigurationError(f"{axis}_range bounds must be finite, got {value!r}")
    if lo_f > hi_f:
        raise ConfigurationError(f"{axis}_range min must not exceed max, got {value!r}")
    return (lo_f, hi_f)


def sanitize_caption(caption: str) -> str:
    return caption.replace("/", "-").replace("\\", "-").replace(" ", "_")


def resolve_caption(options: Options, location: Location) -> str:
    if options.caption is not None:
        return str(options.caption)
    return location.label()


def resolve_path(options: Options, caption: str, output_dir: Path) -> Path:
    if options.path is not None:
        return Path(options.path)
    return output_dir / f"{sanitize_caption(caption)}{DEFAULT_EXTENSION}"


def resolve_size(options: Options) -> tuple[int, int]:
    if options.size is not None:
        return options.size
    return DEFAULT_SIZE
