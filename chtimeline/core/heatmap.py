#!/usr/bin/env python3
"""
Heatmap matrix construction for query_log aggregations.
Turns (timestamp, category, value) rows into a sparse, sorted matrix.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
from dataclasses import dataclass, field
from datetime import datetime
import logging
import math

from .errors import NoDataError
from .time_utils import IntervalSpec

logger = logging.getLogger('chtimeline.heatmap')


@dataclass(frozen=True)
class DataPoint:
    """One aggregated observation"""
    timestamp: datetime
    category: str
    value: float

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "DataPoint":
        """Convert a (t, category, value) result row, raising ValueError when malformed"""
        if row is None or len(row) != 3:
            raise ValueError(f"expected 3 columns, got {row!r}")

        timestamp, category, value = row
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        if not isinstance(timestamp, datetime):
            raise ValueError(f"invalid timestamp {timestamp!r}")
        if category is None:
            raise ValueError("category is NULL")
        if value is None or isinstance(value, bool):
            raise ValueError(f"invalid value {value!r}")

        number = float(value)
        if not math.isfinite(number):
            raise ValueError(f"value is not finite: {number}")
        return cls(timestamp, str(category), number)


@dataclass(frozen=True)
class HeatmapMatrix:
    """Sparse category x time matrix with sorted axes and global extrema"""
    timestamps: Tuple[datetime, ...]
    categories: Tuple[str, ...]
    values: Mapping[Tuple[str, datetime], float]
    min_value: float
    max_value: float
    interval: Optional[IntervalSpec] = None
    skipped_rows: int = 0
    _row_index: Dict[str, int] = field(default_factory=dict, repr=False, compare=False)

    @property
    def row_count(self) -> int:
        return len(self.categories)

    @property
    def column_count(self) -> int:
        return len(self.timestamps)

    def get(self, category: str, timestamp: datetime) -> Optional[float]:
        return self.values.get((category, timestamp))

    def has_value(self, category: str, timestamp: datetime) -> bool:
        return (category, timestamp) in self.values

    def value_at(self, row: int, col: int) -> Optional[float]:
        """Value at 1-based grid coordinates (row 0 / col 0 are headers)"""
        if row <= 0 or col <= 0:
            return None
        return self.get(self.categories[row - 1], self.timestamps[col - 1])

    def row_of(self, category: str) -> Optional[int]:
        """1-based grid row of a category"""
        if not self._row_index:
            self._row_index.update({c: i + 1 for i, c in enumerate(self.categories)})
        return self._row_index.get(category)


def build_matrix(points: Iterable[DataPoint],
                 interval: Optional[IntervalSpec] = None,
                 skipped_rows: int = 0) -> HeatmapMatrix:
    """
    Build a HeatmapMatrix in a single pass over the points.

    Raises:
        NoDataError: when there are no points at all
    """
    seen_timestamps = set()
    seen_categories = set()
    values: Dict[Tuple[str, datetime], float] = {}
    for point in points:
        seen_timestamps.add(point.timestamp)
        seen_categories.add(point.category)
        values[(point.category, point.timestamp)] = point.value

    if not values:
        raise NoDataError()

    # Extrema over surviving cells only, a later duplicate replaces the earlier value
    min_value = min(values.values())
    max_value = max(values.values())

    # Keep normalization well-defined when every value is the same
    if min_value == max_value:
        max_value = min_value + 1

    matrix = HeatmapMatrix(
        timestamps=tuple(sorted(seen_timestamps)),
        categories=tuple(sorted(seen_categories)),
        values=values,
        min_value=min_value,
        max_value=max_value,
        interval=interval,
        skipped_rows=skipped_rows,
    )
    logger.debug(
        "Built heatmap matrix: %d categories x %d buckets, %d cells, min=%s max=%s",
        matrix.row_count, matrix.column_count, len(values), min_value, max_value,
    )
    return matrix


def scan_rows(rows: Iterable[Sequence[Any]]) -> Tuple[List[DataPoint], int]:
    """Convert raw result rows into DataPoints, skipping malformed ones"""
    points: List[DataPoint] = []
    skipped = 0

    for row in rows:
        try:
            points.append(DataPoint.from_row(row))
        except (ValueError, TypeError) as e:
            skipped += 1
            logger.warning(f"Skipping malformed heatmap row {row!r}: {e}")

    if skipped:
        logger.info(f"Skipped {skipped} malformed rows out of {skipped + len(points)}")
    return points, skipped
