#!/usr/bin/env python3
"""
Tests for the DuckDB query_log data source and heatmap query engine.
Builds a small query_log CSV export in a temporary directory.
"""

import os
import sys
from datetime import datetime, timedelta

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.data_source import QueryLogDataSource  # noqa: E402
from core.errors import QueryError  # noqa: E402
from core.fetcher import FetchCoordinator, FetchStatus  # noqa: E402
from core.metrics import CategoryType, HeatmapMetric  # noqa: E402
from core.query_engine import HeatmapQueryEngine, HeatmapQueryParams  # noqa: E402

T0 = datetime(2025, 1, 1, 12, 0)

QUERY_LOG_CSV = """\
type,event_time,query_start_time,normalized_query_hash,memory_usage,hostname,exception_code
QueryFinish,2025-01-01 12:00:40,2025-01-01 12:00:10,111,100,ch-1,0
QueryFinish,2025-01-01 12:02:10,2025-01-01 12:00:50,111,300,ch-1,0
QueryStart,2025-01-01 12:01:05,2025-01-01 12:01:05,222,0,ch-2,0
QueryFinish,2025-01-01 12:01:30,2025-01-01 12:01:05,222,50,ch-2,0
ExceptionWhileProcessing,2025-01-01 12:03:15,2025-01-01 12:03:00,333,10,ch-2,60
QueryFinish,2025-01-01 13:00:00,2025-01-01 13:00:00,444,10,ch-1,0
"""


@pytest.fixture
def data_source(tmp_path):
    (tmp_path / "query_log_2025-01-01.csv").write_text(QUERY_LOG_CSV)
    source = QueryLogDataSource(str(tmp_path), duckdb_threads=1)
    yield source
    source.close()


@pytest.fixture
def engine(data_source):
    return HeatmapQueryEngine(data_source)


def _params(**kwargs):
    kwargs.setdefault('from_time', T0)
    kwargs.setdefault('to_time', T0 + timedelta(minutes=30))
    return HeatmapQueryParams(**kwargs)


def _cells(result):
    return {(t, category): value for t, category, value in result.rows}


def test_schema_discovery(data_source):
    data_source.connect()
    assert data_source.file_format == 'csv'
    assert data_source.has_column('EVENT_TIME')
    assert data_source.missing_columns(['memory_usage', 'read_rows']) == ['read_rows']


def test_missing_directory():
    with pytest.raises(ValueError):
        QueryLogDataSource("/nonexistent/chtimeline/data")


def test_directory_without_exports(tmp_path):
    source = QueryLogDataSource(str(tmp_path))
    with pytest.raises(QueryError):
        source.connect()


def test_count_spreads_long_queries_over_buckets(engine):
    cells = _cells(engine.fetch_heatmap(_params()))

    minute = timedelta(minutes=1)
    assert cells[(T0, "111")] == pytest.approx(1 + 1 / 3)
    assert cells[(T0 + minute, "111")] == pytest.approx(1 / 3)
    assert cells[(T0 + 2 * minute, "111")] == pytest.approx(1 / 3)
    assert cells[(T0 + minute, "222")] == pytest.approx(1)
    assert cells[(T0 + 3 * minute, "333")] == pytest.approx(1)
    # QueryStart rows and rows outside the window are ignored
    assert len(cells) == 5


def test_memory_metric(engine):
    cells = _cells(engine.fetch_heatmap(_params(metric=HeatmapMetric.MEMORY_USAGE)))

    assert cells[(T0, "111")] == pytest.approx(200)
    assert cells[(T0 + timedelta(minutes=1), "222")] == pytest.approx(50)


def test_errors_category_filters_failed_queries(engine):
    result = engine.fetch_heatmap(_params(category=CategoryType.ERRORS))

    assert [(t, category) for t, category, _ in result.rows] == [
        (T0 + timedelta(minutes=3), "60:333"),
    ]


def test_hosts_category_and_custom_filter(engine):
    result = engine.fetch_heatmap(_params(category=CategoryType.HOSTS,
                                          category_filter="hostname = 'ch-2'"))

    assert {category for _, category, _ in result.rows} == {"ch-2"}


def test_missing_metric_column(engine):
    with pytest.raises(QueryError, match="os_cpu_virtual_time_microseconds"):
        engine.fetch_heatmap(_params(metric=HeatmapMetric.CPU_USAGE))


def test_bad_filter_is_a_query_error(engine):
    with pytest.raises(QueryError):
        engine.fetch_heatmap(_params(category_filter="no_such_column = 1"))


def test_inverted_window_rejected():
    with pytest.raises(ValueError):
        HeatmapQueryParams(from_time=T0, to_time=T0 - timedelta(minutes=1))


def test_end_to_end_fetch(engine):
    coordinator = FetchCoordinator(engine)
    result = coordinator.run(coordinator.begin(_params()))

    assert result.status == FetchStatus.OK
    assert result.matrix.categories == ("111", "222", "333")
    assert result.matrix.timestamps[0] == T0


def test_empty_window(engine):
    coordinator = FetchCoordinator(engine)
    result = coordinator.run(coordinator.begin(_params(from_time=T0 + timedelta(hours=2),
                                                       to_time=T0 + timedelta(hours=3))))

    assert result.status == FetchStatus.EMPTY
