#!/usr/bin/env python3
"""
Value normalization and green-yellow-red color mapping for heatmap cells.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple
import math

from .metrics import HeatmapMetric

RGB = Tuple[int, int, int]

GREEN: RGB = (0, 255, 0)
YELLOW: RGB = (255, 255, 0)
RED: RGB = (255, 0, 0)


class ScaleMode(str, Enum):
    LINEAR = "linear"
    LOG2 = "log2"
    LOG10 = "log10"


SCALE_NAMES = {
    ScaleMode.LINEAR: "Linear",
    ScaleMode.LOG2: "Logarithmic (base 2)",
    ScaleMode.LOG10: "Logarithmic (base 10)",
}

# log(1 + k*t) / log(1 + k) spans ten binary or three decimal orders of magnitude
DEFAULT_COMPRESSION = {
    ScaleMode.LOG2: 2 ** 10 - 1,
    ScaleMode.LOG10: 10 ** 3 - 1,
}


def next_scale(mode: ScaleMode) -> ScaleMode:
    modes = list(ScaleMode)
    return modes[(modes.index(ScaleMode(mode)) + 1) % len(modes)]


def _clamp(value: float) -> float:
    if value < 0.0:
        return 0.0
    if value > 1.0:
        return 1.0
    return value


def color_for_scaled(t: float) -> RGB:
    """Three point gradient: green -> yellow below 0.5, yellow -> red above"""
    t = _clamp(t)
    if t < 0.5:
        return (int(255 * t * 2), 255, 0)
    return (255, int(255 * (1 - (t - 0.5) * 2)), 0)


def format_readable(value: float, metric: Optional[HeatmapMetric] = None) -> str:
    """Short legend/cell label with K/M/G suffixes; counts print as integers"""
    if metric is not None and HeatmapMetric(metric) == HeatmapMetric.COUNT:
        return f"{value:.0f}"
    magnitude = abs(value)
    if magnitude >= 1_000_000_000:
        return f"{value / 1_000_000_000:.1f}G"
    if magnitude >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if magnitude >= 1000:
        return f"{value / 1000:.1f}K"
    return f"{value:.1f}"


@dataclass(frozen=True)
class LegendEntry:
    value: float
    label: str
    color: RGB


class ColorScale:
    """Maps raw matrix values to colors for one scale mode"""

    def __init__(self, min_value: float, max_value: float,
                 mode: ScaleMode = ScaleMode.LINEAR,
                 compression: Optional[float] = None):
        if not (math.isfinite(min_value) and math.isfinite(max_value)):
            raise ValueError(f"color scale range must be finite, got {min_value}..{max_value}")
        if max_value < min_value:
            raise ValueError(f"max_value {max_value} is below min_value {min_value}")
        if max_value == min_value:
            max_value = min_value + 1
        self.min_value = min_value
        self.max_value = max_value
        self.mode = ScaleMode(mode)
        if compression is None:
            compression = DEFAULT_COMPRESSION.get(self.mode, 0)
        if self.mode != ScaleMode.LINEAR and compression <= 0:
            raise ValueError("log compression constant must be positive")
        self.compression = compression

    @classmethod
    def for_matrix(cls, matrix, mode: ScaleMode = ScaleMode.LINEAR,
                   compression: Optional[float] = None) -> "ColorScale":
        return cls(matrix.min_value, matrix.max_value, mode, compression)

    def normalize(self, value: float) -> float:
        return _clamp((value - self.min_value) / (self.max_value - self.min_value))

    def scale(self, normalized: float) -> float:
        normalized = _clamp(normalized)
        if self.mode == ScaleMode.LINEAR:
            return normalized
        k = self.compression
        return _clamp(math.log1p(k * normalized) / math.log1p(k))

    def scaled(self, value: float) -> float:
        return self.scale(self.normalize(value))

    def color_for(self, value: float) -> RGB:
        return color_for_scaled(self.scaled(value))

    def legend(self, steps: int = 5,
               metric: Optional[HeatmapMetric] = None) -> List[LegendEntry]:
        """Evenly spaced sample values across [min, max] with their colors"""
        if steps < 2:
            raise ValueError("legend needs at least two steps")
        entries = []
        for i in range(steps):
            value = self.min_value + (self.max_value - self.min_value) * i / (steps - 1)
            entries.append(LegendEntry(value, format_readable(value, metric), self.color_for(value)))
        return entries
