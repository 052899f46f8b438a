#!/usr/bin/env python3
"""
Query processing engine for query_log heatmaps.
Builds the bucketed aggregation SQL and executes it against the DuckDB data source.
"""

from dataclasses import dataclass, field
from typing import List, Any, Optional, Tuple
from datetime import datetime
import time
import logging

import duckdb

from .data_source import QueryLogDataSource
from .errors import QueryError
from .metrics import (
    CategoryType, HeatmapMetric, category_definition, metric_definition,
)
from .time_utils import IntervalSpec, select_interval


# Spreads each finished query's metric evenly over every bucket it was running in
HEATMAP_QUERY_TEMPLATE = """
WITH spans AS (
    SELECT
        {category_sql} AS category,
        CAST({metric_sql} AS DOUBLE) AS metric_value,
        time_bucket(INTERVAL '{interval}', CAST({start_col} AS TIMESTAMP)) AS first_bucket,
        time_bucket(INTERVAL '{interval}', CAST(event_time AS TIMESTAMP)) AS last_bucket
    FROM {view}
    WHERE event_time >= ? AND event_time <= ?
      {filters}
),
buckets AS (
    SELECT
        unnest(range(first_bucket, last_bucket + INTERVAL '{interval}', INTERVAL '{interval}')) AS t,
        category,
        metric_value / (1 + date_diff('second', first_bucket, last_bucket) // {bucket_seconds}) AS metric_value
    FROM spans
    WHERE first_bucket <= last_bucket
)
SELECT t, category, SUM(metric_value) AS value
FROM buckets
WHERE t >= time_bucket(INTERVAL '{interval}', CAST(? AS TIMESTAMP)) AND t <= ?
GROUP BY t, category
ORDER BY t, category
"""


@dataclass
class HeatmapQueryParams:
    """Parameters for one heatmap fetch"""
    metric: HeatmapMetric = HeatmapMetric.COUNT
    category: CategoryType = CategoryType.QUERY_HASH
    cluster: str = "default"
    from_time: Optional[datetime] = None
    to_time: Optional[datetime] = None
    interval: Optional[IntervalSpec] = None
    category_filter: str = "1=1"

    def __post_init__(self):
        self.metric = HeatmapMetric(self.metric)
        self.category = CategoryType(self.category)
        if self.from_time is None or self.to_time is None:
            raise ValueError("from_time and to_time are required")
        if self.from_time > self.to_time:
            raise ValueError(f"from_time {self.from_time} is after to_time {self.to_time}")
        if self.interval is None:
            self.interval = select_interval(self.from_time, self.to_time)

    @property
    def metric_sql(self) -> str:
        return metric_definition(self.metric).value_sql

    @property
    def category_sql(self) -> str:
        return category_definition(self.category).category_sql

    @property
    def required_columns(self) -> List[str]:
        return (['event_time']
                + list(metric_definition(self.metric).columns)
                + list(category_definition(self.category).columns))


@dataclass
class QueryResult:
    """Query execution results"""
    rows: List[Tuple[Any, ...]]
    columns: List[str]
    row_count: int
    execution_time: float
    query: str = ""
    params: List[Any] = field(default_factory=list)


class HeatmapQueryEngine:
    """Runs heatmap aggregation queries against exported query_log data"""

    def __init__(self, data_source: QueryLogDataSource):
        """Initialize with data source"""
        self.data_source = data_source
        self.logger = logging.getLogger('chtimeline.query_engine')

    def build_query(self, params: HeatmapQueryParams) -> Tuple[str, List[Any]]:
        """
        Build the aggregation SQL for the given parameters.

        Returns:
            Tuple of (sql, bind parameters)

        Raises:
            QueryError: if the exports lack a column the metric or category needs
        """
        missing = self.data_source.missing_columns(params.required_columns)
        if missing:
            raise QueryError(
                f"query_log export has no column(s) {', '.join(missing)} "
                f"needed for {params.metric.value} by {params.category.value}"
            )

        filters = []
        bind_values: List[Any] = [params.from_time, params.to_time]

        if self.data_source.has_column('type'):
            filters.append("\"type\" != 'QueryStart'")
        extra_filter = category_definition(params.category).extra_filter
        if extra_filter:
            filters.append(extra_filter)
        if params.category_filter and params.category_filter.strip() not in ('', '1=1'):
            filters.append(f"({params.category_filter})")
        if self.data_source.has_column('cluster'):
            filters.append("cluster = ?")
            bind_values.append(params.cluster)

        start_col = 'COALESCE(query_start_time, event_time)' \
            if self.data_source.has_column('query_start_time') else 'event_time'

        query = HEATMAP_QUERY_TEMPLATE.format(
            category_sql=params.category_sql,
            metric_sql=params.metric_sql,
            start_col=start_col,
            interval=params.interval.sql_interval,
            bucket_seconds=params.interval.bucket_seconds,
            view=QueryLogDataSource.VIEW_NAME,
            filters="".join(f"AND {f}\n      " for f in filters).rstrip(),
        )
        bind_values.extend([params.from_time, params.to_time])
        return query, bind_values

    def execute(self, query: str, bind_values: Optional[List[Any]] = None) -> QueryResult:
        """Execute query on a per-call cursor and return all rows"""
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug("Heatmap query:\n%s\nparams=%s", query, bind_values)

        start_time = time.time()
        cursor = self.data_source.cursor()
        try:
            result = cursor.execute(query, bind_values or [])
            columns = [desc[0] for desc in result.description]
            rows = result.fetchall()
        except duckdb.Error as e:
            self.logger.error(f"Error executing heatmap query: {e}")
            raise QueryError(f"Error executing query: {e}") from e
        finally:
            cursor.close()

        execution_time = time.time() - start_time
        self.logger.debug(f"Query returned {len(rows)} rows in {execution_time:.3f}s")
        return QueryResult(
            rows=rows,
            columns=columns,
            row_count=len(rows),
            execution_time=execution_time,
            query=query,
            params=list(bind_values or []),
        )

    def fetch_heatmap(self, params: HeatmapQueryParams) -> QueryResult:
        """Prepare and execute the heatmap query"""
        query, bind_values = self.build_query(params)
        self.logger.info(
            "Fetching %s by %s, %s - %s, interval %s",
            params.metric.value, params.category.value,
            params.from_time, params.to_time, params.interval.name,
        )
        return self.execute(query, bind_values)
