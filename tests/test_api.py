from __future__ import annotations

from pathlib import Path
import tempfile
import unittest
from unittest import mock

from debug_plotter import api
from debug_plotter.api import plot
from debug_plotter.errors import ConfigurationError, DebugPlotterError
from debug_plotter.options import Location
from debug_plotter.registry import FlushReport, Registry, flush_all
from debug_plotter.settings import Settings


class PlotApiTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.out = Path(self._tmp.name)
        self.registry = Registry(settings=Settings(output_dir=self.out))

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_loop_call_site_aggregates_into_one_record(self) -> None:
        for i in range(5):
            plot({"i": i, "square": i * i}, registry=self.registry)
        self.assertEqual(len(self.registry), 1)
        record = self.registry.records()[0]
        self.assertEqual(record.names, ("i", "square"))
        self.assertEqual(record.current_iteration(), 5)
        self.assertEqual(record.buffers[1].pairs()[-1], (4.0, 16.0))
        self.assertEqual(record.location.file, __file__)

    def test_distinct_lines_are_distinct_call_sites(self) -> None:
        plot({"v": 1}, registry=self.registry)
        plot({"v": 2}, registry=self.registry)
        self.assertEqual(len(self.registry), 2)

    def test_accepts_pairs_sequence_and_explicit_x(self) -> None:
        location = Location("trig.py", 3, 0)
        for x in (0.0, 0.5, 1.0):
            plot([("sin(x)", (x, x * 2)), ("cos(x)", [x, -x])], location=location, registry=self.registry)
        record = self.registry.records()[0]
        self.assertEqual(record.buffers[0].pairs(), [(0.0, 0.0), (0.5, 1.0), (1.0, 2.0)])
        self.assertEqual(record.buffers[1].pairs()[-1], (1.0, -1.0))

    def test_options_are_captured_from_first_call(self) -> None:
        location = Location("opts.py", 1, 0)
        plot({"y": 1}, caption="Options", values=2, size=(400, 300), location=location, registry=self.registry)
        plot({"y": 2}, caption="Changed", values=50, location=location, registry=self.registry)
        plot({"y": 3}, location=location, registry=self.registry)
        record = self.registry.records()[0]
        self.assertEqual(record.caption, "Options")
        self.assertEqual(record.options.window, 2)
        self.assertEqual(record.options.size, (400, 300))
        self.assertEqual(record.buffers[0].pairs(), [(1.0, 2.0), (2.0, 3.0)])

    def test_end_to_end_flush_writes_image(self) -> None:
        location = Location("renaming.py", 1, 0)
        for a in range(10):
            plot({"Alice": a, "Bob": a / 2, "Charlie": 5 - a}, caption="Renaming", location=location, registry=self.registry)
        report = self.registry.teardown()
        self.assertEqual(report.rendered, [self.out / "Renaming.png"])
        self.assertTrue((self.out / "Renaming.png").exists())

    def test_disabled_settings_skip_recording(self) -> None:
        registry = Registry(settings=Settings(enabled=False, output_dir=self.out))
        plot({"v": 1}, registry=registry)
        self.assertEqual(len(registry), 0)

    def test_invalid_options_are_rejected_on_first_call(self) -> None:
        with self.assertRaises(ConfigurationError):
            plot({"v": 1}, x_range=(1, 0), registry=self.registry)
        self.assertEqual(len(self.registry), 0)

    def test_empty_or_malformed_series_are_rejected(self) -> None:
        with self.assertRaises(DebugPlotterError):
            plot({}, registry=self.registry)
        with self.assertRaises(DebugPlotterError):
            plot([("only-name",)], registry=self.registry)

    def test_default_registry_is_used_when_none_given(self) -> None:
        with mock.patch.object(api, "default_registry", return_value=self.registry):
            plot({"v": 1})
        self.assertEqual(len(self.registry), 1)

    def test_flush_all_without_default_registry_is_empty(self) -> None:
        with mock.patch("debug_plotter.registry._default_registry", None):
            report = flush_all()
        self.assertIsInstance(report, FlushReport)
        self.assertEqual(report.rendered, [])


if __name__ == "__main__":
    unittest.main()
