#!/usr/bin/env python3
"""Unit tests for value normalization, log scales and the color gradient."""

import os
import sys
import unittest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.color_scale import (  # noqa: E402
    ColorScale, GREEN, RED, ScaleMode, YELLOW, color_for_scaled, format_readable, next_scale,
)
from core.metrics import HeatmapMetric  # noqa: E402


class TestColorGradient(unittest.TestCase):
    """Three point green-yellow-red gradient"""

    def test_endpoints(self):
        self.assertEqual(color_for_scaled(0.0), GREEN)
        self.assertEqual(color_for_scaled(0.5), YELLOW)
        self.assertEqual(color_for_scaled(1.0), RED)

    def test_midpoints(self):
        self.assertEqual(color_for_scaled(0.25), (127, 255, 0))
        self.assertEqual(color_for_scaled(0.75), (255, 127, 0))

    def test_out_of_range_is_clamped(self):
        self.assertEqual(color_for_scaled(-3), GREEN)
        self.assertEqual(color_for_scaled(7), RED)


class TestColorScale(unittest.TestCase):
    """Normalization and scale transforms"""

    def test_normalize_extrema(self):
        scale = ColorScale(10, 30)
        self.assertEqual(scale.normalize(10), 0.0)
        self.assertEqual(scale.normalize(30), 1.0)
        self.assertAlmostEqual(scale.normalize(20), 0.5)

    def test_linear_is_identity(self):
        scale = ColorScale(0, 100, ScaleMode.LINEAR)
        self.assertAlmostEqual(scale.scaled(25), 0.25)

    def test_log_scales_are_bounded_and_monotonic(self):
        for mode in (ScaleMode.LOG2, ScaleMode.LOG10):
            scale = ColorScale(0, 1000, mode)
            previous = -1.0
            for value in (0, 1, 10, 100, 500, 1000):
                t = scale.scaled(value)
                self.assertGreaterEqual(t, 0.0)
                self.assertLessEqual(t, 1.0)
                self.assertGreater(t, previous)
                previous = t
            self.assertEqual(scale.scaled(0), 0.0)
            self.assertAlmostEqual(scale.scaled(1000), 1.0)

    def test_log_scale_compresses_high_end(self):
        linear = ColorScale(0, 1000, ScaleMode.LINEAR)
        log10 = ColorScale(0, 1000, ScaleMode.LOG10)
        self.assertGreater(log10.scaled(10), linear.scaled(10))

    def test_custom_compression(self):
        gentle = ColorScale(0, 1, ScaleMode.LOG2, compression=1)
        strong = ColorScale(0, 1, ScaleMode.LOG2, compression=1000)
        self.assertLess(gentle.scaled(0.1), strong.scaled(0.1))

    def test_invalid_ranges(self):
        with self.assertRaises(ValueError):
            ColorScale(5, 1)
        with self.assertRaises(ValueError):
            ColorScale(0, 1, ScaleMode.LOG10, compression=0)
        with self.assertRaises(ValueError):
            ColorScale(0, float("inf"))

    def test_equal_extrema_do_not_divide_by_zero(self):
        scale = ColorScale(4, 4)
        self.assertEqual(scale.normalize(4), 0.0)

    def test_legend_steps(self):
        scale = ColorScale(0, 4000)
        entries = scale.legend(5)
        self.assertEqual([e.value for e in entries], [0, 1000, 2000, 3000, 4000])
        self.assertEqual(entries[0].color, GREEN)
        self.assertEqual(entries[-1].color, RED)
        self.assertEqual(entries[1].label, "1.0K")

    def test_legend_count_labels_are_integers(self):
        entries = ColorScale(0, 10).legend(3, HeatmapMetric.COUNT)
        self.assertEqual([e.label for e in entries], ["0", "5", "10"])

    def test_next_scale_cycles(self):
        self.assertEqual(next_scale(ScaleMode.LINEAR), ScaleMode.LOG2)
        self.assertEqual(next_scale(ScaleMode.LOG2), ScaleMode.LOG10)
        self.assertEqual(next_scale(ScaleMode.LOG10), ScaleMode.LINEAR)


class TestFormatReadable(unittest.TestCase):

    def test_suffixes(self):
        self.assertEqual(format_readable(12.34), "12.3")
        self.assertEqual(format_readable(1500), "1.5K")
        self.assertEqual(format_readable(2_500_000), "2.5M")
        self.assertEqual(format_readable(3_000_000_000), "3.0G")
        self.assertEqual(format_readable(1234.4, HeatmapMetric.COUNT), "1234")


if __name__ == '__main__':
    unittest.main()
