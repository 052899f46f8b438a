#!/usr/bin/env python3
"""
Time handling utilities for chtimeline.
Centralizes bucket interval selection, label formatting and time spec parsing.
"""

from typing import Dict, List, Optional, Any, Tuple
from dataclasses import dataclass
from datetime import datetime, timedelta
import logging
import re

logger = logging.getLogger('chtimeline')


@dataclass(frozen=True)
class IntervalSpec:
    """One rung of the bucket width ladder"""
    name: str
    width: timedelta
    bucket_seconds: int
    sql_interval: str
    header_window: timedelta  # window used when a time header is selected
    label_format: str

    def bucket_end(self, bucket_start: datetime) -> datetime:
        return bucket_start + self.width


INTERVAL_1_MINUTE = IntervalSpec(
    name='1 MINUTE',
    width=timedelta(minutes=1),
    bucket_seconds=60,
    sql_interval='60 seconds',
    header_window=timedelta(minutes=5),
    label_format='%H:%M',
)
INTERVAL_10_MINUTES = IntervalSpec(
    name='10 MINUTE',
    width=timedelta(minutes=10),
    bucket_seconds=600,
    sql_interval='600 seconds',
    header_window=timedelta(minutes=30),
    label_format='%H:%M',
)
INTERVAL_1_HOUR = IntervalSpec(
    name='1 HOUR',
    width=timedelta(hours=1),
    bucket_seconds=3600,
    sql_interval='3600 seconds',
    header_window=timedelta(hours=2),
    label_format='%H:00',
)
INTERVAL_1_DAY = IntervalSpec(
    name='1 DAY',
    width=timedelta(days=1),
    bucket_seconds=86400,
    sql_interval='86400 seconds',
    header_window=timedelta(hours=24),
    label_format='%m-%d',
)
INTERVAL_1_WEEK = IntervalSpec(
    name='1 WEEK',
    width=timedelta(weeks=1),
    bucket_seconds=604800,
    sql_interval='604800 seconds',
    header_window=timedelta(hours=24),
    label_format='%m-%d',
)

# (upper bound of the window duration, interval); the last rung is open ended
INTERVAL_LADDER: List[Tuple[Optional[timedelta], IntervalSpec]] = [
    (timedelta(hours=2), INTERVAL_1_MINUTE),
    (timedelta(hours=24), INTERVAL_10_MINUTES),
    (timedelta(days=7), INTERVAL_1_HOUR),
    (timedelta(days=30), INTERVAL_1_DAY),
    (None, INTERVAL_1_WEEK),
]


def select_interval(from_time: datetime, to_time: datetime) -> IntervalSpec:
    """Pick the bucket width for a [from, to) window so the bucket count stays readable."""
    duration = to_time - from_time
    for upper, interval in INTERVAL_LADDER:
        if upper is None or duration <= upper:
            return interval
    return INTERVAL_LADDER[-1][1]


def format_bucket_label(timestamp: datetime, interval: IntervalSpec) -> str:
    """Format a bucket start for the grid header"""
    return timestamp.strftime(interval.label_format)


def format_time_range(low_time: datetime, high_time: datetime) -> str:
    """Format a time window for titles and log lines"""
    return f"{low_time:%Y-%m-%d %H:%M:%S} to {high_time:%Y-%m-%d %H:%M:%S}"


@dataclass(frozen=True)
class TimeParseResult:
    """Result of parsing a time specification."""
    timestamp: datetime
    is_relative: bool
    has_explicit_sign: bool


_RELATIVE_COMPONENT_RE = re.compile(r'([+\-]?\d+(?:\.\d*)?)([a-z]+)')
_RELATIVE_UNITS_IN_SECONDS = {
    's': 1.0,
    'sec': 1.0,
    'second': 1.0,
    'seconds': 1.0,
    'm': 60.0,
    'min': 60.0,
    'mins': 60.0,
    'minute': 60.0,
    'minutes': 60.0,
    'h': 3600.0,
    'hr': 3600.0,
    'hour': 3600.0,
    'hours': 3600.0,
    'd': 86400.0,
    'day': 86400.0,
    'days': 86400.0,
    'w': 604800.0,
    'week': 604800.0,
    'weeks': 604800.0,
}


def _parse_relative_offset(time_str: str) -> Optional[Tuple[timedelta, bool]]:
    """Parse relative time strings like '90min' or '-2h30m'."""
    cleaned = time_str.strip().lower()
    has_ago = cleaned.endswith('ago')
    if has_ago:
        cleaned = cleaned[:-3]

    compact = cleaned.replace(' ', '')
    if not compact:
        return None

    total_seconds = 0.0
    explicit_sign = False
    sign = 1.0
    cursor = 0

    for match in _RELATIVE_COMPONENT_RE.finditer(compact):
        if match.start() != cursor:
            return None
        cursor = match.end()

        raw_value, unit_key = match.groups()
        unit_seconds = _RELATIVE_UNITS_IN_SECONDS.get(unit_key)
        if unit_seconds is None:
            return None

        # A leading sign applies to the unsigned components after it: -2h30m
        if raw_value[0] in '+-':
            explicit_sign = True
            sign = -1.0 if raw_value[0] == '-' else 1.0
        total_seconds += sign * abs(float(raw_value)) * unit_seconds

    if cursor == 0 or cursor != len(compact):
        return None

    delta = timedelta(seconds=total_seconds)
    if has_ago:
        delta = -abs(delta)
        explicit_sign = True

    return delta, explicit_sign


def parse_time_spec(time_str: str, now: Optional[datetime] = None) -> TimeParseResult:
    """Parse a time specification into an absolute timestamp."""
    if time_str is None or not time_str.strip():
        raise ValueError("Time string cannot be empty")

    spec = time_str.strip()
    reference = now or datetime.now()
    lower_spec = spec.lower()

    if lower_spec == 'now':
        return TimeParseResult(reference, True, True)

    if lower_spec == 'today':
        return TimeParseResult(
            reference.replace(hour=0, minute=0, second=0, microsecond=0), True, True
        )

    if lower_spec == 'yesterday':
        start_of_yesterday = (reference - timedelta(days=1)).replace(
            hour=0, minute=0, second=0, microsecond=0
        )
        return TimeParseResult(start_of_yesterday, True, True)

    relative = _parse_relative_offset(spec)
    if relative:
        delta, explicit = relative
        # A bare "2h" means two hours back, like "-2h"
        timestamp = reference + delta if explicit else reference - delta
        return TimeParseResult(timestamp, True, explicit)

    trimmed_spec = spec.rstrip('zZ')
    try:
        return TimeParseResult(datetime.fromisoformat(trimmed_spec), False, False)
    except ValueError:
        pass

    for fmt in ('%Y-%m-%d %H:%M:%S', '%Y-%m-%d %H:%M', '%Y-%m-%d'):
        try:
            return TimeParseResult(datetime.strptime(trimmed_spec, fmt), False, False)
        except ValueError:
            continue

    raise ValueError(f"Cannot parse time: {time_str}")


def resolve_time_range(
    from_spec: Optional[str],
    to_spec: Optional[str],
    now: Optional[datetime] = None,
) -> Tuple[datetime, datetime, Dict[str, Any]]:
    """Resolve --from/--to into concrete bounds.

    Missing bounds default to the last 24 hours ending now. Raises ValueError
    when the window is inverted.
    """
    reference = (now or datetime.now()).replace(microsecond=0)
    meta: Dict[str, Any] = {'from': None, 'to': None}

    high_time = reference
    if to_spec:
        meta['to'] = parse_time_spec(to_spec, now=reference)
        high_time = meta['to'].timestamp

    low_time = high_time - timedelta(hours=24)
    if from_spec:
        meta['from'] = parse_time_spec(from_spec, now=reference)
        low_time = meta['from'].timestamp

    if low_time > high_time:
        raise ValueError(f"Start time {low_time} is after end time {high_time}")

    logger.debug("Resolved time range %s", format_time_range(low_time, high_time))
    return low_time, high_time, meta
