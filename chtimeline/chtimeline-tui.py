#!/usr/bin/env python3
"""
Interactive query_log heatmap for chtimeline.
Categories run down the rows, time buckets across the columns; Enter opens
drill-down actions for the selected cell, row, column or corner.
"""

import sys
import logging
from functools import partial
from pathlib import Path
from typing import Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.message import Message
from textual.widgets import Footer, Static

from core.actions import ActionDispatcher, ActionRequest, HeatmapAction
from core.color_scale import ColorScale, ScaleMode, next_scale
from core.config import HeatmapSettings, build_arg_parser, configure_logging, settings_from_args
from core.data_source import QueryLogDataSource
from core.errors import ActionError, ConfigurationError, QueryError, ZoomError
from core.fetcher import FetchCoordinator, FetchResult, FetchStatus
from core.heatmap import HeatmapMatrix
from core.heatmap_visualizer import HeatmapRenderer, heatmap_title, legend_for, scale_label
from core.metrics import (
    CategoryType, HeatmapMetric, category_definition, metric_definition,
    next_category, next_metric,
)
from core.navigation import GridNavigator, scroll_bar_text
from core.query_engine import HeatmapQueryEngine, HeatmapQueryParams
from core.zoom import ZoomController
from tui.action_menu_modal import ActionMenuModal, ActionRequestModal
from tui.error_modal import ErrorModal
from tui.heatmap_view import HeatmapTable


class HeatmapFetched(Message):
    """A fetch worker finished; posted from the worker thread"""

    def __init__(self, result: FetchResult) -> None:
        super().__init__()
        self.result = result


class HeatmapApp(App):
    """Heatmap of query_log activity"""

    CSS = """
    #title {
        height: 1;
        background: $primary;
        color: $text;
        text-style: bold;
        padding: 0 1;
    }

    #grid-row {
        height: 1fr;
    }

    HeatmapTable {
        width: 1fr;
        height: 1fr;
        scrollbar-size: 0 0;
    }

    #vscroll {
        width: 1;
        height: 1fr;
        color: $text-muted;
    }

    #legend {
        width: 16;
        height: 1fr;
        padding: 0 1;
        border-left: solid $primary;
    }

    #hscroll {
        height: 1;
        color: $text-muted;
    }

    #status {
        height: 1;
        background: $panel;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("plus,equals_sign", "zoom_in", "Zoom in"),
        Binding("minus", "zoom_out", "Zoom out"),
        Binding("0", "zoom_reset", "Reset zoom"),
        Binding("s", "cycle_scale", "Scale"),
        Binding("m", "cycle_metric", "Metric"),
        Binding("c", "cycle_category", "Category"),
        Binding("r", "refresh", "Refresh"),
    ]

    def __init__(self,
                 query_engine,
                 from_time,
                 to_time,
                 metric: HeatmapMetric = HeatmapMetric.COUNT,
                 category: CategoryType = CategoryType.QUERY_HASH,
                 scale: ScaleMode = ScaleMode.LINEAR,
                 cluster: str = "default",
                 log_compression: Optional[float] = None,
                 category_filter: str = "1=1"):
        """
        Args:
            query_engine: object with fetch_heatmap(params), called from worker threads
            from_time: start of the initial window, also the zoom-out limit
            to_time: end of the initial window
            metric: initial metric
            category: initial category axis
            scale: initial color scale
            cluster: cluster name passed through to drill-down requests
            log_compression: k for log scales, None for the per-mode default
            category_filter: extra SQL filter on query_log rows
        """
        super().__init__()
        self.logger = logging.getLogger('chtimeline.tui')
        self.coordinator = FetchCoordinator(query_engine)
        self.zoom = ZoomController(from_time, to_time)
        self.metric = HeatmapMetric(metric)
        self.category = CategoryType(category)
        self.scale_mode = ScaleMode(scale)
        self.cluster = cluster
        self.log_compression = log_compression
        self.category_filter = category_filter

        self.matrix: Optional[HeatmapMatrix] = None
        self.color_scale: Optional[ColorScale] = None
        self.navigator = GridNavigator(0, 0)
        self.dispatcher = self._make_dispatcher()
        self.last_request: Optional[ActionRequest] = None
        self.loading = False

    @classmethod
    def from_settings(cls, settings: HeatmapSettings, query_engine) -> "HeatmapApp":
        return cls(
            query_engine,
            settings.from_time,
            settings.to_time,
            metric=settings.metric,
            category=settings.category,
            scale=settings.scale,
            cluster=settings.cluster,
            log_compression=settings.log_compression,
            category_filter=settings.category_filter,
        )

    def compose(self) -> ComposeResult:
        yield Static("", id="title")
        with Horizontal(id="grid-row"):
            yield HeatmapTable(logger=self.logger, id="heatmap")
            yield Static("", id="vscroll")
            yield Static("", id="legend")
        yield Static("", id="hscroll")
        yield Static("", id="status")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one(HeatmapTable).focus()
        self.start_fetch()

    def _make_dispatcher(self) -> ActionDispatcher:
        dispatcher = ActionDispatcher(self.category, self.metric, self.cluster)
        for action in HeatmapAction:
            dispatcher.register(action, self.show_request)
        return dispatcher

    # Fetch cycle

    def start_fetch(self) -> None:
        """Start a fetch for the current window; results of earlier fetches are ignored"""
        from_time, to_time = self.zoom.window
        params = HeatmapQueryParams(
            metric=self.metric,
            category=self.category,
            cluster=self.cluster,
            from_time=from_time,
            to_time=to_time,
            category_filter=self.category_filter,
        )
        ticket = self.coordinator.begin(params)
        self.loading = True
        self.set_status(f"Loading {metric_definition(self.metric).name} by "
                        f"{category_definition(self.category).name}...")
        self.run_worker(partial(self._fetch_worker, ticket), thread=True,
                        group="fetch", description=f"fetch {ticket.generation}")

    def _fetch_worker(self, ticket) -> None:
        self.post_message(HeatmapFetched(self.coordinator.run(ticket)))

    def on_heatmap_fetched(self, message: HeatmapFetched) -> None:
        result = message.result
        if not self.coordinator.is_current(result):
            return
        self.loading = False
        table = self.query_one(HeatmapTable)

        if result.status == FetchStatus.ERROR:
            self.logger.error(f"Fetch failed: {result.message}")
            self.set_status("Query failed, press r to retry")
            self.push_screen(ErrorModal("Query Error", result.message,
                                        "Press r to retry or q to quit"))
            return

        if result.status == FetchStatus.EMPTY:
            self.matrix = None
            self.color_scale = None
            self.navigator.resize(0, 0)
            table.show_empty(result.message)
            self.update_title()
            self.query_one("#legend", Static).update("")
            self.set_status(result.message)
            return

        self.matrix = result.matrix
        self.navigator.resize(self.matrix.row_count, self.matrix.column_count)
        self.logger.info(
            f"Heatmap generation {result.generation}: {self.matrix.row_count} categories x "
            f"{self.matrix.column_count} buckets in {result.elapsed:.3f}s"
        )
        self.render_heatmap()

    # Rendering

    def render_heatmap(self) -> None:
        """Rebuild the grid, legend and title from the current matrix and scale"""
        if self.matrix is None:
            return
        self.color_scale = ColorScale.for_matrix(self.matrix, self.scale_mode, self.log_compression)
        renderer = HeatmapRenderer(
            self.matrix,
            self.color_scale,
            corner_label=category_definition(self.category).name,
            logger=self.logger,
        )
        grid = renderer.build(selection=self.navigator.selection)
        self.query_one(HeatmapTable).load_grid(grid, renderer, self.navigator.selection)
        self.query_one("#legend", Static).update(legend_for(self.color_scale, self.metric))
        self.update_title()
        self.update_selection_info()

    def update_title(self) -> None:
        from_time, to_time = self.zoom.window
        metric_name = metric_definition(self.metric).name
        category_name = category_definition(self.category).name
        if self.matrix is None:
            title = f"Heatmap: {metric_name} by {category_name}"
        else:
            title = heatmap_title(metric_name, category_name, self.matrix, from_time, to_time)
        if not self.zoom.state.is_initial:
            title += " [zoomed]"
        self.query_one("#title", Static).update(f"{title} | scale: {scale_label(self.scale_mode)}")

    def set_status(self, text: str) -> None:
        self.query_one("#status", Static).update(text)

    def update_selection_info(self) -> None:
        if self.matrix is None:
            return
        self.set_status(self.navigator.describe(self.matrix, metric_definition(self.metric).name, self.metric))
        self.update_scroll_bars()

    def update_scroll_bars(self) -> None:
        hscroll = self.query_one("#hscroll", Static)
        vscroll = self.query_one("#vscroll", Static)
        positions = self.navigator.scroll_positions(
            max(1, hscroll.size.width - 3),
            max(1, vscroll.size.height - 2),
        )
        horizontal, vertical = scroll_bar_text(positions)
        hscroll.update(horizontal)
        vscroll.update("\n".join(vertical))

    def on_resize(self) -> None:
        if self.matrix is not None:
            self.call_after_refresh(self.update_scroll_bars)

    # Navigation

    def on_heatmap_table_navigate(self, message: HeatmapTable.Navigate) -> None:
        message.stop()
        if self.matrix is None:
            return
        if message.jump == "home":
            move = self.navigator.home()
        elif message.jump == "end":
            move = self.navigator.end()
        else:
            move = self.navigator.move(message.d_row, message.d_col)
        if not move.moved:
            return
        table = self.query_one(HeatmapTable)
        table.repaint(move.repaint, move.current)
        table.scroll_to_selection(move.current)
        self.update_selection_info()

    # Actions

    def on_heatmap_table_actions_requested(self, message: HeatmapTable.ActionsRequested) -> None:
        message.stop()
        if self.matrix is None:
            return
        scope = self.navigator.describe(self.matrix, metric_definition(self.metric).name, self.metric)
        self.push_screen(ActionMenuModal(self.dispatcher.menu_options(), scope.split(" | Enter")[0]),
                         callback=self.on_action_chosen)

    def on_action_chosen(self, action: Optional[HeatmapAction]) -> None:
        if action is None or self.matrix is None:
            return
        from_time, to_time = self.zoom.window
        try:
            request = self.dispatcher.resolve(self.matrix, self.navigator.selection,
                                              from_time, to_time, action)
            self.dispatcher.dispatch(request)
        except ActionError as e:
            self.push_screen(ErrorModal("Action Error", str(e)))

    def show_request(self, request: ActionRequest) -> None:
        """Default view for every action: show what would be opened"""
        self.last_request = request
        self.push_screen(ActionRequestModal(request))

    def action_zoom_in(self) -> None:
        if self.matrix is None:
            return
        try:
            self.zoom.zoom_in(self.matrix, self.navigator.selection)
        except ZoomError as e:
            self.set_status(str(e))
            return
        self.start_fetch()

    def action_zoom_out(self) -> None:
        if not self.zoom.can_zoom_out:
            self.set_status("Already showing the full time range")
            return
        self.zoom.zoom_out()
        self.start_fetch()

    def action_zoom_reset(self) -> None:
        if not self.zoom.can_zoom_out:
            return
        self.zoom.reset()
        self.start_fetch()

    def action_cycle_scale(self) -> None:
        self.scale_mode = next_scale(self.scale_mode)
        self.logger.debug(f"Scale set to {self.scale_mode.value}")
        if self.matrix is None:
            self.update_title()
            return
        self.render_heatmap()

    def action_cycle_metric(self) -> None:
        self.metric = next_metric(self.metric)
        self.dispatcher = self._make_dispatcher()
        self.start_fetch()

    def action_cycle_category(self) -> None:
        self.category = next_category(self.category)
        self.dispatcher = self._make_dispatcher()
        self.start_fetch()

    def action_refresh(self) -> None:
        self.start_fetch()


def main():
    """Main entry point for the TUI"""
    parser = build_arg_parser('chtimeline - query_log heatmap')
    args = parser.parse_args()

    try:
        settings = settings_from_args(args)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(settings, to_console=False)

    try:
        data_source = QueryLogDataSource(str(settings.datadir), duckdb_threads=settings.duckdb_threads)
        data_source.connect()
    except (ValueError, QueryError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    with data_source:
        app = HeatmapApp.from_settings(settings, HeatmapQueryEngine(data_source))
        app.run()


if __name__ == '__main__':
    main()
