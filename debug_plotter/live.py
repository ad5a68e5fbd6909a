from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
import logging

import numpy as np
import torch

from debug_plotter.raster import new_canvas
from debug_plotter.record import CallSiteRecord

LOGGER = logging.getLogger(__name__)


@dataclass
class FrameRateController:
    """Caps how often a live chart is redrawn."""

    max_fps: int
    _next_present_at: float | None = None

    def __post_init__(self) -> None:
        if self.max_fps <= 0:
            raise ValueError("max_fps must be > 0")

    @property
    def present_dt(self) -> float:
        return 1.0 / float(self.max_fps)

    def should_present(self, now: float) -> bool:
        if self._next_present_at is None:
            self._next_present_at = now
        if now < self._next_present_at:
            return False
        # Skip the missed slots after a stall instead of bursting.
        while self._next_present_at <= now:
            self._next_present_at += self.present_dt
        return True


@dataclass(frozen=True)
class DisplayFrame:
    revision: int
    width: int
    height: int
    rgba: torch.Tensor


class RenderTarget(ABC):
    @abstractmethod
    def start(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def present_frame(self, frame: DisplayFrame) -> None:
        raise NotImplementedError

    @abstractmethod
    def stop(self) -> None:
        raise NotImplementedError

    def pump_events(self) -> None:
        """Optional hook for targets that need explicit event pumping."""
        return

    def should_close(self) -> bool:
        """Optional hook for targets that expose window-close state."""
        return False


class LiveSurface(ABC):
    """Refreshable display a live chart is redrawn onto, one frame at a time."""

    @abstractmethod
    def begin_frame(self, width: int, height: int) -> np.ndarray:
        raise NotImplementedError

    @abstractmethod
    def end_frame(self, canvas: np.ndarray) -> None:
        raise NotImplementedError

    @abstractmethod
    def is_closed(self) -> bool:
        raise NotImplementedError

    def close(self) -> None:
        return


class TargetSurface(LiveSurface):
    """Presents finished canvases on a ``RenderTarget``, starting it lazily."""

    def __init__(self, target: RenderTarget) -> None:
        self._target = target
        self._started = False
        self._closed = False
        self._revision = 0

    @property
    def revision(self) -> int:
        return self._revision

    def begin_frame(self, width: int, height: int) -> np.ndarray:
        if not self._started:
            self._target.start()
            self._started = True
        return new_canvas(width, height, color=(0, 0, 0, 255))

    def end_frame(self, canvas: np.ndarray) -> None:
        if canvas.dtype != np.uint8 or canvas.ndim != 3 or canvas.shape[2] != 4:
            raise ValueError("canvas must be uint8 with shape (H, W, 4)")
        self._target.pump_events()
        if self.is_closed():
            return
        self._revision += 1
        height, width, _ = canvas.shape
        frame = DisplayFrame(
            revision=self._revision,
            width=int(width),
            height=int(height),
            rgba=torch.from_numpy(np.ascontiguousarray(canvas)),
        )
        self._target.present_frame(frame)

    def is_closed(self) -> bool:
        if not self._closed and self._started and self._target.should_close():
            self._closed = True
        return self._closed

    def close(self) -> None:
        if self._started:
            self._target.stop()
            self._started = False
        self._closed = True


class TkTarget(RenderTarget):
    """Top-level Tk window showing the latest frame."""

    _root = None

    def __init__(self, title: str) -> None:
        self.title = title
        self._window = None
        self._label = None
        self._photo = None
        self._closed = False

    @classmethod
    def _shared_root(cls):
        import tkinter as tk

        if cls._root is None:
            cls._root = tk.Tk()
            cls._root.withdraw()
        return cls._root

    def start(self) -> None:
        import tkinter as tk

        self._window = tk.Toplevel(self._shared_root())
        self._window.title(self.title)
        self._window.protocol("WM_DELETE_WINDOW", self._on_close)
        self._label = tk.Label(self._window, borderwidth=0)
        self._label.pack()

    def present_frame(self, frame: DisplayFrame) -> None:
        from PIL import Image, ImageTk

        if self._closed or self._label is None:
            return
        image = Image.fromarray(frame.rgba.cpu().numpy())
        self._photo = ImageTk.PhotoImage(image)
        self._label.configure(image=self._photo)
        self.pump_events()

    def pump_events(self) -> None:
        import tkinter as tk

        if self._closed or self._window is None:
            return
        try:
            self._window.update()
        except tk.TclError:
            self._closed = True

    def should_close(self) -> bool:
        return self._closed

    def stop(self) -> None:
        if self._window is not None and not self._closed:
            self._window.destroy()
        self._window = None
        self._label = None
        self._closed = True

    def _on_close(self) -> None:
        LOGGER.debug("live window %r closed by user", self.title)
        self.stop()


@dataclass
class LiveChannel:
    """Surface and redraw throttle owned by one live call site."""

    surface: LiveSurface | None
    rate: FrameRateController
    closed: bool = False


def tk_surface_factory(record: CallSiteRecord) -> LiveSurface:
    return TargetSurface(TkTarget(title=record.caption))
