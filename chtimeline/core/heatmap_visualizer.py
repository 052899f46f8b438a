#!/usr/bin/env python3
"""
Heatmap render model.
Turns a HeatmapMatrix into styled grid cells for the table widget and the legend.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from rich.color import Color
from rich.style import Style
from rich.text import Text

from .color_scale import ColorScale, LegendEntry, ScaleMode, SCALE_NAMES
from .heatmap import HeatmapMatrix
from .metrics import HeatmapMetric
from .navigation import SelectionState
from .time_utils import format_bucket_label

HEADER_STYLE = Style(color="yellow", bold=True)
CATEGORY_STYLE = Style(color="white")
MISSING_STYLE = Style(color="grey37")
MISSING_MARK = "·"
SELECTED_STYLE = Style(reverse=True, bold=True)


def rgb_style(rgb) -> Style:
    return Style(bgcolor=Color.from_rgb(*rgb))


@dataclass
class GridModel:
    """Styled cells for a (categories + 1) x (timestamps + 1) grid"""
    cells: List[List[Text]]
    row_count: int
    column_count: int
    column_width: int
    title: str


class HeatmapRenderer:
    """Creates styled cells for heatmap grids"""

    def __init__(self,
                 matrix: HeatmapMatrix,
                 scale: ColorScale,
                 corner_label: str = "",
                 cell_width: int = 5,
                 logger: Optional[logging.Logger] = None):
        """Initialize the renderer

        Args:
            matrix: heatmap to render
            scale: color scale built for the matrix extrema
            corner_label: text of the top-left cell (category mode name)
            cell_width: character width of a data cell
            logger: Optional logger for debugging
        """
        self.matrix = matrix
        self.scale = scale
        self.corner_label = corner_label
        self.cell_width = cell_width
        self.logger = logger or logging.getLogger('chtimeline.heatmap_visualizer')

    def render_cell(self, row: int, col: int, selected: bool = False) -> Text:
        """Style one cell; repainting two cells is how the cursor moves"""
        if row == 0 and col == 0:
            text = Text(self.corner_label, style=HEADER_STYLE)
        elif row == 0:
            label = ""
            if self.matrix.interval is not None:
                label = format_bucket_label(self.matrix.timestamps[col - 1], self.matrix.interval)
            text = Text(label.center(self.cell_width), style=HEADER_STYLE)
        elif col == 0:
            text = Text(self.matrix.categories[row - 1], style=CATEGORY_STYLE)
        else:
            value = self.matrix.value_at(row, col)
            if value is None:
                text = Text(MISSING_MARK.center(self.cell_width), style=MISSING_STYLE)
            else:
                text = Text(" " * self.cell_width, style=rgb_style(self.scale.color_for(value)))

        if selected:
            if not text.plain.strip():
                text = Text("▒" * len(text.plain), style=text.style)
            text.stylize(SELECTED_STYLE)
        return text

    def build(self, title: str = "", selection: Optional[SelectionState] = None) -> GridModel:
        """Render every cell of the grid"""
        rows = self.matrix.row_count + 1
        cols = self.matrix.column_count + 1
        cells = []
        for r in range(rows):
            cells.append([
                self.render_cell(r, c, selected=selection is not None
                                 and (selection.row, selection.col) == (r, c))
                for c in range(cols)
            ])
        self.logger.debug(f"Rendered heatmap grid {rows}x{cols} with {self.scale.mode.value} scale")
        return GridModel(cells=cells, row_count=rows, column_count=cols,
                         column_width=self.cell_width, title=title)


def render_legend(entries: List[LegendEntry], mode: ScaleMode) -> Text:
    """Legend panel: one color swatch and value label per line, scale name on top"""
    legend = Text(f" {ScaleMode(mode).value} \n", style="bold")
    for entry in entries:
        legend.append("  ", style=rgb_style(entry.color))
        legend.append(f" {entry.label}\n")
    return legend


def heatmap_title(metric_name: str, category_name: str, matrix: HeatmapMatrix,
                  from_time, to_time) -> str:
    title = (f"Heatmap: {metric_name} by {category_name} "
             f"({from_time:%Y-%m-%d %H:%M:%S} to {to_time:%Y-%m-%d %H:%M:%S})")
    if matrix.interval is not None:
        title += f" every {matrix.interval.name.lower()}"
    if matrix.skipped_rows:
        title += f" [{matrix.skipped_rows} malformed rows skipped]"
    return title


def scale_label(mode: ScaleMode) -> str:
    return SCALE_NAMES[ScaleMode(mode)]


def legend_for(scale: ColorScale, metric: HeatmapMetric, steps: int = 5) -> Text:
    return render_legend(scale.legend(steps, metric), scale.mode)
