#!/usr/bin/env python3
"""
Heatmap grid widget for the chtimeline TUI.
Row 0 holds the bucket labels and column 0 the categories; both stay pinned while scrolling.
"""

from typing import Iterable, Optional
import logging

from textual.binding import Binding
from textual.coordinate import Coordinate
from textual.message import Message
from textual.widgets import DataTable

from core.heatmap_visualizer import GridModel, HeatmapRenderer
from core.navigation import SelectionState

MAX_CATEGORY_WIDTH = 40


class HeatmapTable(DataTable):
    """DataTable that draws its own header row/column and selection highlight"""

    BINDINGS = [
        Binding("up", "navigate(-1, 0)", "Up", show=False),
        Binding("down", "navigate(1, 0)", "Down", show=False),
        Binding("left", "navigate(0, -1)", "Left", show=False),
        Binding("right", "navigate(0, 1)", "Right", show=False),
        Binding("pageup", "page(-1)", "Page up", show=False),
        Binding("pagedown", "page(1)", "Page down", show=False),
        Binding("home", "jump('home')", "First column", show=False),
        Binding("end", "jump('end')", "Last column", show=False),
        Binding("enter", "open_actions", "Actions"),
    ]

    class Navigate(Message):
        """Cursor movement requested by a key press"""

        def __init__(self, d_row: int = 0, d_col: int = 0, jump: Optional[str] = None) -> None:
            super().__init__()
            self.d_row = d_row
            self.d_col = d_col
            self.jump = jump

    class ActionsRequested(Message):
        """Enter pressed on the current selection"""

    def __init__(self, logger: Optional[logging.Logger] = None, **kwargs):
        super().__init__(
            show_header=False,
            fixed_rows=1,
            fixed_columns=1,
            cursor_type="cell",
            show_cursor=False,
            zebra_stripes=False,
            **kwargs,
        )
        self.logger = logger or logging.getLogger('chtimeline.tui.heatmap_view')
        self.renderer: Optional[HeatmapRenderer] = None

    @property
    def page_rows(self) -> int:
        """Data rows visible below the pinned header row"""
        return max(1, self.size.height - 2)

    def action_navigate(self, d_row: int, d_col: int) -> None:
        self.post_message(self.Navigate(d_row, d_col))

    def action_page(self, direction: int) -> None:
        self.post_message(self.Navigate(direction * self.page_rows, 0))

    def action_jump(self, where: str) -> None:
        self.post_message(self.Navigate(jump=where))

    def action_open_actions(self) -> None:
        self.post_message(self.ActionsRequested())

    def load_grid(self, grid: GridModel, renderer: HeatmapRenderer,
                  selection: Optional[SelectionState] = None) -> None:
        """Replace all rows and columns with the rendered grid"""
        self.renderer = renderer
        self.clear(columns=True)

        first_width = min(MAX_CATEGORY_WIDTH, max(
            [len(row[0].plain) for row in grid.cells] + [1]
        ))
        for c in range(grid.column_count):
            self.add_column("", width=first_width if c == 0 else grid.column_width, key=str(c))
        for r, row in enumerate(grid.cells):
            self.add_row(*row, key=str(r))

        self.logger.debug(f"Loaded grid {grid.row_count}x{grid.column_count}")
        if selection is not None:
            self.scroll_to_selection(selection)

    def show_empty(self, message: str) -> None:
        self.renderer = None
        self.clear(columns=True)
        self.add_column("", key="0")
        self.add_row(message, key="0")

    def repaint(self, cells: Iterable[SelectionState], selection: SelectionState) -> None:
        """Redraw only the given cells, e.g. the old and new cursor position"""
        if self.renderer is None:
            return
        for state in cells:
            if state.row >= self.row_count or state.col >= len(self.columns):
                continue
            self.update_cell_at(
                Coordinate(state.row, state.col),
                self.renderer.render_cell(state.row, state.col, selected=state == selection),
            )

    def scroll_to_selection(self, selection: SelectionState) -> None:
        if self.row_count == 0:
            return
        row = min(selection.row, self.row_count - 1)
        col = min(selection.col, len(self.columns) - 1)
        self.move_cursor(row=row, column=col)
