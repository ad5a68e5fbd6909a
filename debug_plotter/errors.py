from __future__ import annotations

from pathlib import Path


class DebugPlotterError(Exception):
    """Base error for the debug plotter."""


class ConfigurationError(DebugPlotterError, ValueError):
    """Malformed call-site options or process settings."""


class CoercionError(DebugPlotterError, TypeError):
    """A recorded value has no float representation."""


class RenderError(DebugPlotterError):
    def __init__(self, caption: str, path: Path | None, reason: str) -> None:
        self.caption = caption
        self.path = path
        self.reason = reason
        target = str(path) if path is not None else "<live surface>"
        super().__init__(f"failed to render plot {caption!r} to {target}: {reason}")
