#!/usr/bin/env python3
"""
Tests for time_utils module.
"""

import sys
import os
import unittest
from datetime import datetime, timedelta

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.time_utils import (
    INTERVAL_10_MINUTES, INTERVAL_1_DAY, INTERVAL_1_HOUR, INTERVAL_1_MINUTE, INTERVAL_1_WEEK,
    format_bucket_label, parse_time_spec, resolve_time_range, select_interval,
)

NOW = datetime(2025, 3, 10, 15, 30, 0)


class TestSelectInterval(unittest.TestCase):
    """Bucket width ladder"""

    def _select(self, duration):
        return select_interval(NOW - duration, NOW)

    def test_ladder_brackets(self):
        self.assertIs(self._select(timedelta(minutes=5)), INTERVAL_1_MINUTE)
        self.assertIs(self._select(timedelta(hours=2)), INTERVAL_1_MINUTE)
        self.assertIs(self._select(timedelta(hours=2, seconds=1)), INTERVAL_10_MINUTES)
        self.assertIs(self._select(timedelta(hours=24)), INTERVAL_10_MINUTES)
        self.assertIs(self._select(timedelta(days=7)), INTERVAL_1_HOUR)
        self.assertIs(self._select(timedelta(days=30)), INTERVAL_1_DAY)
        self.assertIs(self._select(timedelta(days=31)), INTERVAL_1_WEEK)
        self.assertIs(self._select(timedelta(days=3650)), INTERVAL_1_WEEK)

    def test_zero_duration(self):
        self.assertIs(select_interval(NOW, NOW), INTERVAL_1_MINUTE)

    def test_header_windows(self):
        self.assertEqual(INTERVAL_1_MINUTE.header_window, timedelta(minutes=5))
        self.assertEqual(INTERVAL_10_MINUTES.header_window, timedelta(minutes=30))
        self.assertEqual(INTERVAL_1_HOUR.header_window, timedelta(hours=2))
        self.assertEqual(INTERVAL_1_DAY.header_window, timedelta(hours=24))
        self.assertEqual(INTERVAL_1_WEEK.header_window, timedelta(hours=24))

    def test_bucket_labels(self):
        self.assertEqual(format_bucket_label(NOW, INTERVAL_1_MINUTE), "15:30")
        self.assertEqual(format_bucket_label(NOW, INTERVAL_1_HOUR), "15:00")
        self.assertEqual(format_bucket_label(NOW, INTERVAL_1_DAY), "03-10")
        self.assertEqual(INTERVAL_1_HOUR.bucket_end(NOW), NOW + timedelta(hours=1))


class TestParseTimeSpec(unittest.TestCase):
    """Time spec parsing"""

    def test_keywords(self):
        self.assertEqual(parse_time_spec('now', now=NOW).timestamp, NOW)
        self.assertEqual(parse_time_spec('today', now=NOW).timestamp, datetime(2025, 3, 10))
        self.assertEqual(parse_time_spec('yesterday', now=NOW).timestamp, datetime(2025, 3, 9))

    def test_relative_offsets(self):
        result = parse_time_spec('-2h30m', now=NOW)
        self.assertEqual(result.timestamp, NOW - timedelta(hours=2, minutes=30))
        self.assertTrue(result.is_relative)
        self.assertTrue(result.has_explicit_sign)

        self.assertEqual(parse_time_spec('90min', now=NOW).timestamp, NOW - timedelta(minutes=90))
        self.assertEqual(parse_time_spec('1h ago', now=NOW).timestamp, NOW - timedelta(hours=1))
        self.assertEqual(parse_time_spec('+1d', now=NOW).timestamp, NOW + timedelta(days=1))
        self.assertEqual(parse_time_spec('2w', now=NOW).timestamp, NOW - timedelta(weeks=2))

    def test_absolute(self):
        self.assertEqual(parse_time_spec('2025-01-01T10:00:00Z').timestamp, datetime(2025, 1, 1, 10))
        self.assertEqual(parse_time_spec('2025-01-01 10:05').timestamp, datetime(2025, 1, 1, 10, 5))
        self.assertFalse(parse_time_spec('2025-01-01').is_relative)

    def test_invalid(self):
        with self.assertRaises(ValueError):
            parse_time_spec('')
        with self.assertRaises(ValueError):
            parse_time_spec('next tuesday')
        with self.assertRaises(ValueError):
            parse_time_spec('5 parsecs')


class TestResolveTimeRange(unittest.TestCase):

    def test_defaults_to_last_day(self):
        low, high, meta = resolve_time_range(None, None, now=NOW)
        self.assertEqual(high, NOW)
        self.assertEqual(low, NOW - timedelta(hours=24))
        self.assertIsNone(meta['from'])

    def test_relative_from(self):
        low, high, _ = resolve_time_range('-2h', 'now', now=NOW)
        self.assertEqual((low, high), (NOW - timedelta(hours=2), NOW))

    def test_inverted_range(self):
        with self.assertRaises(ValueError):
            resolve_time_range('2025-03-10 16:00', '2025-03-10 15:00', now=NOW)


if __name__ == '__main__':
    unittest.main()
