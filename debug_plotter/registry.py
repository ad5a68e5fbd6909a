from __future__ import annotations

import atexit
from dataclasses import dataclass, field
import logging
from pathlib import Path
import threading
import time
from typing import Any, Callable, Sequence

from debug_plotter.chart import ChartComposer
from debug_plotter.errors import DebugPlotterError
from debug_plotter.live import FrameRateController, LiveChannel, LiveSurface, tk_surface_factory
from debug_plotter.options import Location
from debug_plotter.record import CallSiteRecord
from debug_plotter.settings import Settings, load_settings

LOGGER = logging.getLogger(__name__)

RecordBuilder = Callable[[], CallSiteRecord]
SurfaceFactory = Callable[[CallSiteRecord], LiveSurface]


@dataclass
class FlushReport:
    rendered: list[Path] = field(default_factory=list)
    skipped_live: list[Location] = field(default_factory=list)
    failed: list[tuple[Location, Exception]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class Registry:
    """Owns every call-site record of one execution context.

    Records are created on first observation of a location and flushed once
    by ``teardown``. Call sites reached after teardown are ignored.
    """

    def __init__(
        self,
        composer: ChartComposer | None = None,
        surface_factory: SurfaceFactory | None = None,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.composer = composer or ChartComposer()
        self.settings = settings or load_settings()
        self._surface_factory = surface_factory or tk_surface_factory
        self._clock = clock
        self._records: dict[Location, CallSiteRecord] = {}
        self._live: dict[Location, LiveChannel] = {}
        self._lock = threading.Lock()
        self._live_lock = threading.Lock()
        self._torn_down = False

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, location: object) -> bool:
        with self._lock:
            return location in self._records

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    def records(self) -> list[CallSiteRecord]:
        with self._lock:
            return list(self._records.values())

    def get_or_create(self, location: Location, builder: RecordBuilder) -> CallSiteRecord | None:
        with self._lock:
            if self._torn_down:
                LOGGER.debug("ignoring %s: registry already torn down", location.label())
                return None
            record = self._records.get(location)
            if record is None:
                record = builder()
                self._records[location] = record
            return record

    def observe(self, location: Location, builder: RecordBuilder, samples: Sequence[Any]) -> None:
        record = self.get_or_create(location, builder)
        if record is None:
            return
        if len(samples) != len(record.names):
            raise DebugPlotterError(
                f"call site {location.label()} records {len(record.names)} series, got {len(samples)} values"
            )
        record.observe(samples)
        if record.is_live:
            self._present_live(record)

    def _present_live(self, record: CallSiteRecord) -> None:
        with self._live_lock:
            self._present_live_locked(record)

    def _present_live_locked(self, record: CallSiteRecord) -> None:
        channel = self._live.get(record.location)
        if channel is None:
            try:
                surface = self._surface_factory(record)
            except Exception as exc:  # noqa: BLE001
                LOGGER.warning("cannot open live plot %r: %s", record.caption, exc)
                channel = LiveChannel(surface=None, rate=FrameRateController(self.settings.live_fps), closed=True)
                self._live[record.location] = channel
                return
            channel = LiveChannel(surface=surface, rate=FrameRateController(self.settings.live_fps))
            self._live[record.location] = channel
        if channel.closed or not channel.rate.should_present(self._clock()):
            return
        try:
            still_open = self.composer.render_to_surface(record, channel.surface)
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("live plot %r disabled after render failure: %s", record.caption, exc)
            channel.closed = True
            return
        if not still_open:
            LOGGER.warning("live plot %r was closed; dropping further updates", record.caption)
            channel.closed = True

    def teardown(self) -> FlushReport:
        """Render every non-live record to its file, exactly once."""
        with self._lock:
            if self._torn_down:
                return FlushReport()
            self._torn_down = True
            records = list(self._records.values())
            channels = list(self._live.values())

        report = FlushReport()
        for record in records:
            if record.is_live:
                report.skipped_live.append(record.location)
                record.mark_flushed()
                continue
            try:
                report.rendered.append(self.composer.render_to_file(record))
            except Exception as exc:  # noqa: BLE001
                LOGGER.exception("failed to flush plot %r", record.caption)
                report.failed.append((record.location, exc))
            finally:
                record.mark_flushed()
        for channel in channels:
            if channel.surface is None:
                continue
            try:
                channel.surface.close()
            except Exception as exc:  # noqa: BLE001
                LOGGER.warning("failed to close live surface: %s", exc)
        return report


_default_registry: Registry | None = None
_default_lock = threading.Lock()


def default_registry() -> Registry:
    """Process-wide registry, created on first use and flushed at exit."""
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = Registry()
            atexit.register(_default_registry.teardown)
        return _default_registry


def flush_all() -> FlushReport:
    """Flush the process-wide registry now instead of at interpreter exit."""
    with _default_lock:
        registry = _default_registry
    if registry is None:
        return FlushReport()
    return registry.teardown()
