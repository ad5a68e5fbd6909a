from __future__ import annotations

import math
import unittest

from debug_plotter.series import SeriesBuffer


class SeriesBufferTests(unittest.TestCase):
    def test_unbounded_buffer_keeps_every_sample(self) -> None:
        buffer = SeriesBuffer()
        for i in range(50):
            buffer.append(i, i * 2)
        self.assertEqual(len(buffer), 50)
        self.assertIsNone(buffer.window)
        self.assertEqual(buffer.pairs()[0], (0.0, 0.0))
        self.assertEqual(buffer.pairs()[-1], (49.0, 98.0))

    def test_window_keeps_last_samples_in_order(self) -> None:
        for window in (1, 3, 7):
            for count in (0, 2, 7, 20):
                buffer = SeriesBuffer(window)
                inserted = [(float(i), float(i * i)) for i in range(count)]
                for x, y in inserted:
                    buffer.append(x, y)
                keep = min(count, window)
                self.assertEqual(len(buffer), keep)
                self.assertEqual(buffer.pairs(), inserted[count - keep :])

    def test_rejects_non_positive_window(self) -> None:
        with self.assertRaises(ValueError):
            SeriesBuffer(0)

    def test_extents_fold_over_resident_samples(self) -> None:
        buffer = SeriesBuffer(3)
        for x, y in [(0, 10), (1, -4), (2, 3), (3, 8), (4, 1)]:
            buffer.append(x, y)
        self.assertEqual((buffer.min_x(), buffer.max_x()), (2.0, 4.0))
        self.assertEqual((buffer.min_y(), buffer.max_y()), (1.0, 8.0))

    def test_empty_buffer_extents_are_infinite_sentinels(self) -> None:
        buffer = SeriesBuffer()
        self.assertEqual(buffer.min_x(), math.inf)
        self.assertEqual(buffer.max_x(), -math.inf)
        self.assertEqual(buffer.min_y(), math.inf)
        self.assertEqual(buffer.max_y(), -math.inf)

    def test_extents_skip_nan_but_keep_infinity(self) -> None:
        buffer = SeriesBuffer()
        buffer.append(0, math.nan)
        buffer.append(1, 2.0)
        buffer.append(2, math.inf)
        self.assertEqual(buffer.min_y(), 2.0)
        self.assertEqual(buffer.max_y(), math.inf)

    def test_as_arrays_matches_pairs(self) -> None:
        buffer = SeriesBuffer(2)
        for i in range(4):
            buffer.append(i, i + 0.5)
        x, y = buffer.as_arrays()
        self.assertEqual(x.tolist(), [2.0, 3.0])
        self.assertEqual(y.tolist(), [2.5, 3.5])
        empty_x, empty_y = SeriesBuffer().as_arrays()
        self.assertEqual(empty_x.size, 0)
        self.assertEqual(empty_y.size, 0)


if __name__ == "__main__":
    unittest.main()
