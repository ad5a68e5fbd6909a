from debug_plotter.api import plot
from debug_plotter.chart import ChartComposer, ChartDescription, ChartSeries, axis_ranges
from debug_plotter.colors import color_for
from debug_plotter.errors import CoercionError, ConfigurationError, DebugPlotterError, RenderError
from debug_plotter.live import FrameRateController, LiveSurface, RenderTarget, TargetSurface
from debug_plotter.options import Location, Options
from debug_plotter.record import CallSiteRecord, RecordState
from debug_plotter.registry import FlushReport, Registry, default_registry, flush_all
from debug_plotter.renderer import RasterRenderer, Renderer
from debug_plotter.series import SeriesBuffer
from debug_plotter.settings import Settings, load_settings

__all__ = [
    "CallSiteRecord",
    "ChartComposer",
    "ChartDescription",
    "ChartSeries",
    "CoercionError",
    "ConfigurationError",
    "DebugPlotterError",
    "FlushReport",
    "FrameRateController",
    "LiveSurface",
    "Location",
    "Options",
    "RasterRenderer",
    "RecordState",
    "Registry",
    "RenderError",
    "RenderTarget",
    "Renderer",
    "SeriesBuffer",
    "Settings",
    "TargetSurface",
    "axis_ranges",
    "color_for",
    "default_registry",
    "flush_all",
    "load_settings",
    "plot",
]
