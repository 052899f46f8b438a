#!/usr/bin/env python3
"""
Cursor and selection state for the heatmap grid.
Tracks the selected cell, its selection context and scroll bar positions.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple
import logging

from .heatmap import HeatmapMatrix
from .color_scale import format_readable
from .metrics import HeatmapMetric

logger = logging.getLogger('chtimeline.navigation')


class SelectionContext(str, Enum):
    """Which grid region is selected, determines the drill-down scope"""
    CELL = "cell"                # one category in one bucket
    CATEGORY = "category"        # one category over the whole window
    TIME_BUCKET = "time_bucket"  # all categories around one bucket
    CORNER = "corner"            # all categories over the whole window


@dataclass(frozen=True)
class SelectionState:
    """Grid coordinates; row 0 and col 0 are the header row/column"""
    row: int = 0
    col: int = 0

    @property
    def context(self) -> SelectionContext:
        return context_of(self)


def context_of(selection: SelectionState) -> SelectionContext:
    if selection.row > 0 and selection.col > 0:
        return SelectionContext.CELL
    if selection.row > 0:
        return SelectionContext.CATEGORY
    if selection.col > 0:
        return SelectionContext.TIME_BUCKET
    return SelectionContext.CORNER


@dataclass(frozen=True)
class ScrollPositions:
    """Thumb offsets along the horizontal and vertical scroll indicators"""
    horizontal: int
    vertical: int
    width: int
    height: int


@dataclass(frozen=True)
class CursorMove:
    """Result of a cursor move: the cells that need repainting"""
    previous: SelectionState
    current: SelectionState
    repaint: Tuple[SelectionState, ...] = field(default_factory=tuple)

    @property
    def moved(self) -> bool:
        return self.previous != self.current


def _thumb(position: int, count: int, length: int) -> int:
    if count <= 1 or length <= 0:
        return 0
    return int(position / (count - 1) * length)


class GridNavigator:
    """Owns the selection on a (categories + 1) x (timestamps + 1) grid"""

    def __init__(self, category_count: int, timestamp_count: int,
                 selection: Optional[SelectionState] = None):
        """
        Args:
            category_count: number of data rows (excluding the header row)
            timestamp_count: number of data columns (excluding the header column)
            selection: initial selection, clamped to the grid
        """
        self.category_count = max(0, category_count)
        self.timestamp_count = max(0, timestamp_count)
        self.selection = self._clamp(selection or SelectionState(
            1 if self.category_count else 0,
            1 if self.timestamp_count else 0,
        ))

    @classmethod
    def for_matrix(cls, matrix: HeatmapMatrix,
                   selection: Optional[SelectionState] = None) -> "GridNavigator":
        return cls(matrix.row_count, matrix.column_count, selection)

    @property
    def row_count(self) -> int:
        """Total grid rows including the header row"""
        return self.category_count + 1

    @property
    def column_count(self) -> int:
        """Total grid columns including the header column"""
        return self.timestamp_count + 1

    @property
    def context(self) -> SelectionContext:
        return context_of(self.selection)

    def _clamp(self, selection: SelectionState) -> SelectionState:
        row = min(max(selection.row, 0), self.category_count)
        col = min(max(selection.col, 0), self.timestamp_count)
        return SelectionState(row, col)

    def move_to(self, row: int, col: int) -> CursorMove:
        """Select a cell, clamped to the grid bounds"""
        previous = self.selection
        current = self._clamp(SelectionState(row, col))
        self.selection = current
        if current == previous:
            return CursorMove(previous, current)
        logger.debug("Selection moved %s -> %s (%s)", previous, current, context_of(current).value)
        return CursorMove(previous, current, (previous, current))

    def move(self, d_row: int, d_col: int) -> CursorMove:
        return self.move_to(self.selection.row + d_row, self.selection.col + d_col)

    def page(self, d_rows: int) -> CursorMove:
        return self.move(d_rows, 0)

    def home(self) -> CursorMove:
        return self.move_to(self.selection.row, 0)

    def end(self) -> CursorMove:
        return self.move_to(self.selection.row, self.timestamp_count)

    def resize(self, category_count: int, timestamp_count: int) -> CursorMove:
        """
        Adopt new grid dimensions after a rebuild, keeping the cursor in bounds.
        An axis that was empty before gets its cursor on the first data row or column.
        """
        row, col = self.selection.row, self.selection.col
        if self.category_count == 0:
            row = 1
        if self.timestamp_count == 0:
            col = 1
        self.category_count = max(0, category_count)
        self.timestamp_count = max(0, timestamp_count)
        return self.move_to(row, col)

    def scroll_positions(self, width: int, height: int) -> ScrollPositions:
        """
        Proportional thumb positions for the scroll indicators.

        Args:
            width: usable length of the horizontal indicator
            height: usable length of the vertical indicator
        """
        return ScrollPositions(
            horizontal=_thumb(self.selection.col, self.column_count, width),
            vertical=_thumb(self.selection.row, self.row_count, height),
            width=width,
            height=height,
        )

    def selected_category(self, matrix: HeatmapMatrix) -> Optional[str]:
        if self.selection.row <= 0:
            return None
        return matrix.categories[self.selection.row - 1]

    def selected_timestamp(self, matrix: HeatmapMatrix) -> Optional[datetime]:
        if self.selection.col <= 0:
            return None
        return matrix.timestamps[self.selection.col - 1]

    def describe(self, matrix: HeatmapMatrix, metric_name: str,
                 metric: Optional[HeatmapMetric] = None) -> str:
        """Status line for the current selection"""
        category = self.selected_category(matrix)
        timestamp = self.selected_timestamp(matrix)
        context = self.context

        if context == SelectionContext.CELL:
            value = matrix.get(category, timestamp)
            shown = "no data" if value is None else format_readable(value, metric)
            return (f"Category: {category} | Time: {timestamp:%Y-%m-%d %H:%M:%S} | "
                    f"{metric_name}: {shown} | Enter: actions, +: zoom in")
        if context == SelectionContext.CATEGORY:
            return f"Selected Category: {category} | Enter: actions for the whole time range"
        if context == SelectionContext.TIME_BUCKET:
            return f"Selected Time: {timestamp:%Y-%m-%d %H:%M:%S} | Enter: actions for all categories"
        return "All categories, whole time range | Enter: actions"


def scroll_bar_text(positions: ScrollPositions) -> Tuple[str, List[str]]:
    """Render the horizontal bar and the vertical bar lines for the scroll indicators"""
    width = positions.width
    horizontal = ("◄" + "─" * positions.horizontal + "●"
                  + "─" * max(0, width - positions.horizontal) + "►")
    vertical = ["▲"]
    thumb = min(positions.vertical, positions.height - 1)
    for i in range(positions.height):
        vertical.append("●" if i == thumb else "│")
    vertical.append("▼")
    return horizontal, vertical
