#!/usr/bin/env python3
"""
Command line and environment settings shared by the chtimeline scripts.
"""

import argparse
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .color_scale import ScaleMode
from .errors import ConfigurationError
from .metrics import CategoryType, HeatmapMetric
from .time_utils import resolve_time_range


@dataclass(frozen=True)
class HeatmapSettings:
    datadir: Path
    cluster: str
    category: CategoryType
    metric: HeatmapMetric
    scale: ScaleMode
    from_time: datetime
    to_time: datetime
    log_compression: Optional[float] = None
    category_filter: str = "1=1"
    duckdb_threads: Optional[int] = None
    debug: bool = False
    debuglog: Optional[str] = None


def _choices(enum_cls) -> List[str]:
    return [member.value for member in enum_cls]


def build_arg_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)

    parser.add_argument('-d', '--datadir', type=str,
                        default=os.environ.get('CHTIMELINE_DATADIR'),
                        help='Directory with query_log*.parquet/csv exports '
                             '(default: $CHTIMELINE_DATADIR)')
    parser.add_argument('-c', '--cluster', type=str,
                        default=os.environ.get('CHTIMELINE_CLUSTER', 'default'),
                        help='Cluster name passed to drill-down views (default: $CHTIMELINE_CLUSTER or default)')

    # Heatmap choices
    parser.add_argument('--category', type=str,
                        default=os.environ.get('CHTIMELINE_CATEGORY', CategoryType.QUERY_HASH.value),
                        help=f"Category axis: {', '.join(_choices(CategoryType))}")
    parser.add_argument('--metric', type=str,
                        default=os.environ.get('CHTIMELINE_METRIC', HeatmapMetric.COUNT.value),
                        help=f"Metric: {', '.join(_choices(HeatmapMetric))}")
    parser.add_argument('--scale', type=str,
                        default=os.environ.get('CHTIMELINE_SCALE', ScaleMode.LINEAR.value),
                        help=f"Color scale: {', '.join(_choices(ScaleMode))}")
    parser.add_argument('--log-compression', type=float, default=None,
                        help='Compression constant k for log scales, log(1+k*x)/log(1+k)')
    parser.add_argument('-w', '--where', type=str, default='1=1',
                        help='Extra SQL filter on query_log rows')

    # Time range
    parser.add_argument('--from', dest='from_time', type=str, default='-24h',
                        help='Start time (ISO format or relative like --from=-2h, default -24h)')
    parser.add_argument('--to', dest='to_time', type=str, default='now',
                        help='End time (ISO format or relative, default now)')

    # Performance
    parser.add_argument('--duckdb-threads', type=int, default=None,
                        help='Number of DuckDB threads (1 for deterministic results, default: auto)')

    # Logging
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')
    parser.add_argument('--debuglog', type=str,
                        help='Debug log file')
    return parser


def settings_from_args(args: argparse.Namespace, now: Optional[datetime] = None) -> HeatmapSettings:
    """
    Validate parsed arguments into HeatmapSettings.

    Raises:
        ConfigurationError: on a missing datadir or an invalid choice or time spec
    """
    if not args.datadir:
        raise ConfigurationError(
            "Data directory not specified. Set $CHTIMELINE_DATADIR or use -d/--datadir"
        )
    datadir = Path(args.datadir)
    if not datadir.is_dir():
        raise ConfigurationError(f"Data directory not found: {datadir}")

    try:
        category = CategoryType(args.category)
        metric = HeatmapMetric(args.metric)
        scale = ScaleMode(args.scale)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    if args.log_compression is not None and args.log_compression <= 0:
        raise ConfigurationError("--log-compression must be positive")

    try:
        from_time, to_time, _ = resolve_time_range(args.from_time, args.to_time, now=now)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    return HeatmapSettings(
        datadir=datadir,
        cluster=args.cluster,
        category=category,
        metric=metric,
        scale=scale,
        from_time=from_time,
        to_time=to_time,
        log_compression=args.log_compression,
        category_filter=args.where,
        duckdb_threads=args.duckdb_threads,
        debug=args.debug,
        debuglog=args.debuglog,
    )


def configure_logging(settings: HeatmapSettings, to_console: bool = True) -> None:
    """Set up logging; the TUI passes to_console=False so log lines never hit the screen"""
    log_level = logging.DEBUG if settings.debug else logging.INFO
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    if settings.debuglog:
        logging.basicConfig(level=log_level, format=log_format,
                            filename=settings.debuglog, filemode='w')
    elif to_console:
        logging.basicConfig(level=log_level, format=log_format)
    else:
        logging.getLogger('chtimeline').addHandler(logging.NullHandler())
        logging.getLogger('chtimeline').propagate = False
