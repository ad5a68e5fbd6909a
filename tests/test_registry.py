from __future__ import annotations

from pathlib import Path
import tempfile
import unittest
from unittest import mock

import numpy as np

from debug_plotter.chart import ChartComposer
from debug_plotter.errors import DebugPlotterError, RenderError
from debug_plotter.live import LiveSurface
from debug_plotter.options import Location, Options
from debug_plotter.raster import new_canvas
from debug_plotter.record import CallSiteRecord, RecordState
from debug_plotter.registry import Registry
from debug_plotter.settings import Settings


class _FakeSurface(LiveSurface):
    def __init__(self) -> None:
        self.frames = 0
        self.closed = False
        self.close_calls = 0

    def begin_frame(self, width: int, height: int) -> np.ndarray:
        return new_canvas(width, height)

    def end_frame(self, canvas: np.ndarray) -> None:
        self.frames += 1

    def is_closed(self) -> bool:
        return self.closed

    def close(self) -> None:
        self.close_calls += 1
        self.closed = True


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class RegistryTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.out = Path(self._tmp.name)
        self.settings = Settings(output_dir=self.out, live_fps=10)
        self.surfaces: list[_FakeSurface] = []
        self.clock = _Clock()
        self.registry = Registry(settings=self.settings, surface_factory=self._make_surface, clock=self.clock)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _make_surface(self, record: CallSiteRecord) -> _FakeSurface:
        surface = _FakeSurface()
        self.surfaces.append(surface)
        return surface

    def _builder(self, location: Location, names=("v",), **options):
        def build() -> CallSiteRecord:
            return CallSiteRecord.create(list(names), location, Options(**options), output_dir=self.out)

        return build

    def test_get_or_create_builds_once_per_location(self) -> None:
        location = Location("a.py", 1, 0)
        builder = mock.Mock(side_effect=self._builder(location))
        first = self.registry.get_or_create(location, builder)
        second = self.registry.get_or_create(location, builder)
        self.assertIs(first, second)
        self.assertEqual(builder.call_count, 1)
        self.assertIn(location, self.registry)

    def test_first_options_win(self) -> None:
        location = Location("a.py", 1, 0)
        self.registry.observe(location, self._builder(location, caption="first", window=2), [1])
        self.registry.observe(location, self._builder(location, caption="second"), [2])
        self.registry.observe(location, self._builder(location, caption="second"), [3])
        record = self.registry.records()[0]
        self.assertEqual(record.caption, "first")
        self.assertEqual(record.buffers[0].pairs(), [(1.0, 2.0), (2.0, 3.0)])

    def test_same_names_at_different_locations_never_share_records(self) -> None:
        a = Location("a.py", 1, 0)
        b = Location("a.py", 2, 0)
        self.registry.observe(a, self._builder(a, names=("x",)), [1])
        self.registry.observe(b, self._builder(b, names=("x",)), [2])
        self.assertEqual(len(self.registry), 2)
        first, second = self.registry.records()
        self.assertIsNot(first, second)
        self.assertEqual(first.buffers[0].pairs(), [(0.0, 1.0)])
        self.assertEqual(second.buffers[0].pairs(), [(0.0, 2.0)])

    def test_observe_rejects_changed_series_count(self) -> None:
        location = Location("a.py", 1, 0)
        self.registry.observe(location, self._builder(location, names=("a", "b")), [1, 2])
        with self.assertRaises(DebugPlotterError):
            self.registry.observe(location, self._builder(location, names=("a",)), [1])

    def test_teardown_renders_each_non_live_record_once(self) -> None:
        location = Location("a.py", 1, 0)
        self.registry.observe(location, self._builder(location, caption="Loss"), [1.0])
        with mock.patch.object(ChartComposer, "render_to_file", autospec=True, side_effect=lambda self, record: record.path) as render:
            report = self.registry.teardown()
            again = self.registry.teardown()
        self.assertEqual(render.call_count, 1)
        self.assertEqual(report.rendered, [self.out / "Loss.png"])
        self.assertEqual(again.rendered, [])
        self.assertIs(self.registry.records()[0].state, RecordState.FLUSHED)

    def test_teardown_writes_default_path(self) -> None:
        location = Location("a.py", 1, 0)
        for y in [1, 2, 3, 4, 5]:
            self.registry.observe(location, self._builder(location, caption="Window test", window=3), [y])
        report = self.registry.teardown()
        self.assertTrue(report.ok)
        self.assertEqual(report.rendered, [self.out / "Window_test.png"])
        self.assertTrue((self.out / "Window_test.png").exists())

    def test_teardown_renders_record_without_samples(self) -> None:
        location = Location("a.py", 1, 0)
        self.registry.get_or_create(location, self._builder(location, names=("a", "b"), caption="empty"))
        report = self.registry.teardown()
        self.assertTrue(report.ok)
        self.assertTrue((self.out / "empty.png").exists())

    def test_teardown_skips_live_records(self) -> None:
        location = Location("live.py", 1, 0)
        self.registry.observe(location, self._builder(location, live=True), [1.0])
        with mock.patch.object(ChartComposer, "render_to_file", autospec=True) as render:
            report = self.registry.teardown()
        render.assert_not_called()
        self.assertEqual(report.skipped_live, [location])
        self.assertEqual(self.surfaces[0].close_calls, 1)

    def test_failures_are_isolated_per_record(self) -> None:
        bad = Location("bad.py", 1, 0)
        good = Location("good.py", 1, 0)
        blocker = self.out / "blocker"
        blocker.write_text("file")
        self.registry.observe(bad, self._builder(bad, path=blocker / "x.png"), [1.0])
        self.registry.observe(good, self._builder(good, caption="good"), [1.0])
        with self.assertLogs("debug_plotter.registry", level="ERROR"):
            report = self.registry.teardown()
        self.assertEqual(report.rendered, [self.out / "good.png"])
        self.assertEqual(len(report.failed), 1)
        self.assertEqual(report.failed[0][0], bad)
        self.assertIsInstance(report.failed[0][1], RenderError)
        self.assertFalse(report.ok)

    def test_call_sites_after_teardown_are_ignored(self) -> None:
        self.registry.teardown()
        location = Location("late.py", 1, 0)
        builder = mock.Mock(side_effect=self._builder(location))
        self.assertIsNone(self.registry.get_or_create(location, builder))
        self.registry.observe(location, builder, [1.0])
        builder.assert_not_called()
        self.assertEqual(len(self.registry), 0)
        self.assertTrue(self.registry.torn_down)

    def test_live_updates_are_throttled(self) -> None:
        location = Location("live.py", 1, 0)
        builder = self._builder(location, live=True, size=(120, 90))
        for i in range(10):
            self.registry.observe(location, builder, [float(i)])
        self.assertEqual(self.surfaces[0].frames, 1)
        self.clock.now = 0.1
        self.registry.observe(location, builder, [10.0])
        self.assertEqual(self.surfaces[0].frames, 2)
        self.assertEqual(self.registry.records()[0].current_iteration(), 11)

    def test_closed_live_surface_drops_updates(self) -> None:
        location = Location("live.py", 1, 0)
        builder = self._builder(location, live=True, size=(120, 90))
        self.registry.observe(location, builder, [1.0])
        self.surfaces[0].closed = True
        self.clock.now = 1.0
        with self.assertLogs("debug_plotter.registry", level="WARNING"):
            self.registry.observe(location, builder, [2.0])
        self.clock.now = 2.0
        self.registry.observe(location, builder, [3.0])
        self.assertEqual(self.surfaces[0].frames, 1)
        self.assertEqual(self.registry.records()[0].current_iteration(), 3)

    def test_unavailable_live_surface_is_not_fatal(self) -> None:
        def broken_factory(record: CallSiteRecord) -> LiveSurface:
            raise RuntimeError("no display")

        registry = Registry(settings=self.settings, surface_factory=broken_factory, clock=self.clock)
        location = Location("live.py", 1, 0)
        with self.assertLogs("debug_plotter.registry", level="WARNING"):
            registry.observe(location, self._builder(location, live=True), [1.0])
        registry.observe(location, self._builder(location, live=True), [2.0])
        self.assertEqual(registry.records()[0].current_iteration(), 2)
        self.assertEqual(registry.teardown().skipped_live, [location])


if __name__ == "__main__":
    unittest.main()
