#!/usr/bin/env python3
"""
Text-based testing interface for chtimeline.
Prints the heatmap matrix, legend and resolved drill-down requests as plaintext
for automated testing without the TUI.
"""

import sys
import logging
from pathlib import Path
from typing import Optional, Tuple

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from core.actions import ActionDispatcher, HeatmapAction
from core.color_scale import ColorScale
from core.config import HeatmapSettings, build_arg_parser, configure_logging, settings_from_args
from core.data_source import QueryLogDataSource
from core.errors import ActionError, ConfigurationError, QueryError, ZoomError
from core.fetcher import FetchCoordinator, FetchResult, FetchStatus
from core.formatters import HeatmapTableFormatter
from core.metrics import category_definition
from core.navigation import GridNavigator, SelectionState
from core.query_engine import HeatmapQueryEngine, HeatmapQueryParams
from core.zoom import ZoomController


class HeatmapTester:
    """Test harness for heatmap fetches without TUI"""

    def __init__(self, settings: HeatmapSettings, query_engine):
        """Initialize test harness around a query engine, usually HeatmapQueryEngine"""
        self.settings = settings
        self.coordinator = FetchCoordinator(query_engine)
        self.zoom = ZoomController(settings.from_time, settings.to_time)
        self.dispatcher = ActionDispatcher(settings.category, settings.metric, settings.cluster)
        self.formatter = HeatmapTableFormatter(settings.metric)
        self.logger = logging.getLogger('chtimeline.test')

    def fetch(self) -> FetchResult:
        """Run one fetch cycle over the current zoom window"""
        from_time, to_time = self.zoom.window
        params = HeatmapQueryParams(
            metric=self.settings.metric,
            category=self.settings.category,
            cluster=self.settings.cluster,
            from_time=from_time,
            to_time=to_time,
            category_filter=self.settings.category_filter,
        )
        result = self.coordinator.run(self.coordinator.begin(params))
        self.logger.info(f"Fetch {result.status.value} in {result.elapsed:.3f}s")
        return result

    @staticmethod
    def _selection(result: FetchResult, cell: Tuple[int, int]) -> SelectionState:
        """Grid cell clamped to the fetched matrix"""
        return GridNavigator.for_matrix(result.matrix, SelectionState(*cell)).selection

    def zoom_into(self, result: FetchResult, cell: Tuple[int, int]) -> FetchResult:
        """Zoom into a grid cell of a fetched heatmap and fetch again"""
        self.zoom.zoom_in(result.matrix, self._selection(result, cell))
        return self.fetch()

    def print_results(self, result: FetchResult, format: str = 'simple') -> None:
        if result.status == FetchStatus.ERROR:
            print(f"ERROR: {result.message}", file=sys.stderr)
            return
        if result.status == FetchStatus.EMPTY:
            print(result.message)
            return

        matrix = result.matrix
        from_time, to_time = self.zoom.window
        print(f"\n=== HEATMAP {self.settings.metric.value} by {self.settings.category.value} ===")
        print(f"Window: {from_time:%Y-%m-%d %H:%M:%S} - {to_time:%Y-%m-%d %H:%M:%S}, "
              f"interval {matrix.interval.name if matrix.interval else '?'}, "
              f"{matrix.row_count} categories x {matrix.column_count} buckets, "
              f"{result.elapsed:.3f}s")
        if matrix.skipped_rows:
            print(f"Skipped {matrix.skipped_rows} malformed rows")
        print()
        corner = category_definition(self.settings.category).name
        print(self.formatter.format_matrix(matrix, corner=corner, tablefmt=format))

        scale = ColorScale.for_matrix(matrix, self.settings.scale, self.settings.log_compression)
        print("\n=== LEGEND ===")
        print(self.formatter.format_legend(scale))

    def print_request(self, result: FetchResult, cell: Tuple[int, int], action: HeatmapAction) -> None:
        from_time, to_time = self.zoom.window
        request = self.dispatcher.resolve(result.matrix, self._selection(result, cell),
                                           from_time, to_time, action)
        print(f"\n=== ACTION {request.action.value} ===")
        print(HeatmapTableFormatter.format_request(request))


def _parse_cell(value: Optional[str]) -> Optional[Tuple[int, int]]:
    if not value:
        return None
    try:
        row, col = (int(v) for v in value.split(','))
    except ValueError:
        raise ConfigurationError(f"Expected ROW,COL but got '{value}'")
    return row, col


def main():
    """Main entry point for test interface"""
    parser = build_arg_parser('chtimeline Test Interface')
    parser.add_argument('--format', type=str, default='simple',
                        help='Table format (grid, simple, plain, html, etc.)')
    parser.add_argument('--zoom', type=str,
                        help='Zoom into grid cell ROW,COL and print the zoomed heatmap')
    parser.add_argument('--resolve', type=str,
                        help='Resolve the drill-down request for grid cell ROW,COL (0 is the header)')
    parser.add_argument('--action', type=str, default=HeatmapAction.FLAMEGRAPH.name,
                        choices=[a.name for a in HeatmapAction],
                        help='Action to resolve with --resolve')

    args = parser.parse_args()

    try:
        settings = settings_from_args(args)
        zoom_cell = _parse_cell(args.zoom)
        resolve_cell = _parse_cell(args.resolve)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(settings)

    try:
        data_source = QueryLogDataSource(str(settings.datadir), duckdb_threads=settings.duckdb_threads)
        data_source.connect()
    except (ValueError, QueryError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    with data_source:
        exit_code = run(HeatmapTester(settings, HeatmapQueryEngine(data_source)),
                        args.format, zoom_cell, resolve_cell, HeatmapAction[args.action])
    sys.exit(exit_code)


def run(tester: HeatmapTester,
        format: str,
        zoom_cell: Optional[Tuple[int, int]],
        resolve_cell: Optional[Tuple[int, int]],
        action: HeatmapAction) -> int:
    """Fetch, optionally zoom, print; returns the process exit code"""
    result = tester.fetch()
    if zoom_cell and result.status == FetchStatus.OK:
        try:
            result = tester.zoom_into(result, zoom_cell)
        except ZoomError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    tester.print_results(result, format=format)

    if resolve_cell and result.status == FetchStatus.OK:
        try:
            tester.print_request(result, resolve_cell, action)
        except ActionError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    return 1 if result.status == FetchStatus.ERROR else 0


if __name__ == '__main__':
    main()
