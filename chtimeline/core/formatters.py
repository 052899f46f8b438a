#!/usr/bin/env python3
"""
Plaintext formatting of heatmaps for the test harness.
"""

from typing import List, Optional

from tabulate import tabulate

from .actions import ActionRequest
from .color_scale import ColorScale, format_readable
from .heatmap import HeatmapMatrix
from .metrics import HeatmapMetric
from .time_utils import format_bucket_label

MISSING_CELL = '-'


class HeatmapTableFormatter:
    """Format a heatmap matrix as an aligned table, one row per category"""

    def __init__(self, metric: Optional[HeatmapMetric] = None):
        self.metric = metric

    def headers(self, matrix: HeatmapMatrix, corner: str = 'category') -> List[str]:
        if matrix.interval is None:
            labels = [f"{t:%Y-%m-%d %H:%M}" for t in matrix.timestamps]
        else:
            labels = [format_bucket_label(t, matrix.interval) for t in matrix.timestamps]
        return [corner] + labels

    def rows(self, matrix: HeatmapMatrix) -> List[List[str]]:
        rows = []
        for category in matrix.categories:
            row = [category]
            for timestamp in matrix.timestamps:
                value = matrix.get(category, timestamp)
                row.append(MISSING_CELL if value is None else format_readable(value, self.metric))
            rows.append(row)
        return rows

    def format_matrix(self, matrix: HeatmapMatrix, corner: str = 'category',
                      tablefmt: str = 'simple') -> str:
        return tabulate(self.rows(matrix), headers=self.headers(matrix, corner),
                        tablefmt=tablefmt, disable_numparse=True)

    def format_legend(self, scale: ColorScale, steps: int = 5) -> str:
        rows = [[entry.label, '#%02x%02x%02x' % entry.color] for entry in scale.legend(steps, self.metric)]
        return tabulate(rows, headers=[f'value ({scale.mode.value})', 'color'], tablefmt='simple')

    @staticmethod
    def format_request(request: ActionRequest) -> str:
        rows = [
            ['action', request.action.value],
            ['category_type', request.category_type.value if request.category_type else ''],
            ['category_value', request.category_value or '(all)'],
            ['from_time', f"{request.from_time:%Y-%m-%d %H:%M:%S}"],
            ['to_time', f"{request.to_time:%Y-%m-%d %H:%M:%S}"],
            ['cluster', request.cluster],
            ['trace_type', request.trace_type.value],
        ]
        return tabulate(rows, tablefmt='plain')
