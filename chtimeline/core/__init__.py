#!/usr/bin/env python3
"""
Core module for chtimeline - query_log heatmap data access, matrix building,
color scaling, navigation, zoom and drill-down actions.
"""

from .errors import (
    HeatmapError, NoDataError, QueryError, ZoomError, ActionError, ConfigurationError,
)
from .data_source import QueryLogDataSource
from .query_engine import HeatmapQueryEngine, HeatmapQueryParams, QueryResult
from .heatmap import DataPoint, HeatmapMatrix, build_matrix, scan_rows
from .color_scale import ColorScale, ScaleMode
from .metrics import CategoryType, HeatmapMetric, TraceType
from .navigation import GridNavigator, SelectionState, SelectionContext
from .zoom import ZoomController, ZoomState
from .actions import ActionDispatcher, ActionRequest, HeatmapAction
from .fetcher import FetchCoordinator, FetchResult, FetchStatus
from .formatters import HeatmapTableFormatter

__all__ = [
    'HeatmapError',
    'NoDataError',
    'QueryError',
    'ZoomError',
    'ActionError',
    'ConfigurationError',
    'QueryLogDataSource',
    'HeatmapQueryEngine',
    'HeatmapQueryParams',
    'QueryResult',
    'DataPoint',
    'HeatmapMatrix',
    'build_matrix',
    'scan_rows',
    'ColorScale',
    'ScaleMode',
    'CategoryType',
    'HeatmapMetric',
    'TraceType',
    'GridNavigator',
    'SelectionState',
    'SelectionContext',
    'ZoomController',
    'ZoomState',
    'ActionDispatcher',
    'ActionRequest',
    'HeatmapAction',
    'FetchCoordinator',
    'FetchResult',
    'FetchStatus',
    'HeatmapTableFormatter',
]

__version__ = '1.0'
