#!/usr/bin/env python3
"""Unit tests for action menu options and selection resolution."""

import os
import sys
from datetime import datetime, timedelta

import pytest

# Ensure project root is on the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.actions import ActionDispatcher, HeatmapAction  # noqa: E402
from core.errors import ActionError  # noqa: E402
from core.heatmap import DataPoint, build_matrix  # noqa: E402
from core.metrics import CategoryType, HeatmapMetric, TraceType  # noqa: E402
from core.navigation import SelectionState  # noqa: E402
from core.time_utils import INTERVAL_1_MINUTE  # noqa: E402

T0 = datetime(2025, 1, 1, 12, 0)
WINDOW_FROM = T0 - timedelta(minutes=30)
WINDOW_TO = T0 + timedelta(minutes=30)


def _matrix():
    """3 categories x 4 timestamps"""
    points = [DataPoint(T0 + timedelta(minutes=c), cat, 1.0)
              for cat in ("h1", "h2", "h3") for c in range(4)]
    return build_matrix(points, INTERVAL_1_MINUTE)


def _dispatcher(category=CategoryType.QUERY_HASH, metric=HeatmapMetric.COUNT):
    return ActionDispatcher(category, metric, "prod")


def test_explain_only_for_query_hash():
    assert _dispatcher().menu_options() == [
        HeatmapAction.FLAMEGRAPH, HeatmapAction.PROFILE_EVENTS, HeatmapAction.EXPLAIN,
    ]
    for category in (CategoryType.TABLES, CategoryType.HOSTS, CategoryType.ERRORS):
        options = _dispatcher(category).menu_options()
        assert HeatmapAction.EXPLAIN not in options
        assert options == [HeatmapAction.FLAMEGRAPH, HeatmapAction.PROFILE_EVENTS]


def test_resolve_cell():
    matrix = _matrix()
    request = _dispatcher().resolve(matrix, SelectionState(2, 3), WINDOW_FROM, WINDOW_TO,
                                    HeatmapAction.FLAMEGRAPH)

    assert request.category_value == matrix.categories[1]
    assert request.from_time == matrix.timestamps[2]
    assert request.to_time == matrix.timestamps[2] + timedelta(minutes=1)
    assert request.category_type == CategoryType.QUERY_HASH
    assert request.cluster == "prod"


def test_resolve_corner():
    request = _dispatcher().resolve(_matrix(), SelectionState(0, 0), WINDOW_FROM, WINDOW_TO,
                                    HeatmapAction.PROFILE_EVENTS)

    assert request.category_value == ""
    assert (request.from_time, request.to_time) == (WINDOW_FROM, WINDOW_TO)


def test_resolve_category_row_uses_whole_window():
    request = _dispatcher().resolve(_matrix(), SelectionState(3, 0), WINDOW_FROM, WINDOW_TO,
                                    HeatmapAction.EXPLAIN)

    assert request.category_value == "h3"
    assert (request.from_time, request.to_time) == (WINDOW_FROM, WINDOW_TO)


def test_resolve_time_header_centers_window_on_bucket():
    matrix = _matrix()
    request = _dispatcher().resolve(matrix, SelectionState(0, 2), WINDOW_FROM, WINDOW_TO,
                                    HeatmapAction.FLAMEGRAPH)

    bucket = matrix.timestamps[1]
    assert request.category_value == ""
    assert request.category_type is None
    assert request.from_time == bucket - timedelta(minutes=2, seconds=30)
    assert request.to_time == bucket + timedelta(minutes=2, seconds=30)


def test_trace_type_follows_metric():
    matrix = _matrix()
    memory = _dispatcher(metric=HeatmapMetric.MEMORY_USAGE).resolve(
        matrix, SelectionState(1, 1), WINDOW_FROM, WINDOW_TO, HeatmapAction.FLAMEGRAPH)
    cpu = _dispatcher(metric=HeatmapMetric.CPU_USAGE).resolve(
        matrix, SelectionState(1, 1), WINDOW_FROM, WINDOW_TO, HeatmapAction.FLAMEGRAPH)

    assert memory.trace_type == TraceType.MEMORY
    assert cpu.trace_type == TraceType.REAL


def test_explain_rejected_for_other_categories_and_aggregates():
    matrix = _matrix()
    with pytest.raises(ActionError):
        _dispatcher(CategoryType.TABLES).resolve(matrix, SelectionState(1, 1), WINDOW_FROM, WINDOW_TO,
                                                 HeatmapAction.EXPLAIN)
    with pytest.raises(ActionError):
        _dispatcher().resolve(matrix, SelectionState(0, 0), WINDOW_FROM, WINDOW_TO,
                              HeatmapAction.EXPLAIN)


def test_dispatch_hands_request_to_registered_view():
    dispatcher = _dispatcher()
    received = []
    dispatcher.register(HeatmapAction.FLAMEGRAPH, received.append)
    request = dispatcher.resolve(_matrix(), SelectionState(1, 1), WINDOW_FROM, WINDOW_TO,
                                 HeatmapAction.FLAMEGRAPH)

    dispatcher.dispatch(request)
    assert received == [request]
    assert "Flamegraph" in request.describe()


def test_dispatch_without_view_fails():
    dispatcher = _dispatcher()
    request = dispatcher.resolve(_matrix(), SelectionState(1, 1), WINDOW_FROM, WINDOW_TO,
                                 HeatmapAction.PROFILE_EVENTS)
    with pytest.raises(ActionError):
        dispatcher.dispatch(request)
