#!/usr/bin/env python3
"""
Metric and category catalog for query_log heatmaps.
Maps the user-facing choices to display names and DuckDB SQL expressions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional


class HeatmapMetric(str, Enum):
    COUNT = "count"
    MEMORY_USAGE = "memoryUsage"
    CPU_USAGE = "cpuUsage"
    NETWORK_SENT = "networkSent"
    NETWORK_RECEIVE = "networkReceive"
    READ_ROWS = "readRows"
    WRITTEN_ROWS = "writtenRows"
    READ_BYTES = "readBytes"
    WRITTEN_BYTES = "writtenBytes"


class CategoryType(str, Enum):
    QUERY_HASH = "normalized_query_hash"
    TABLES = "tables"
    HOSTS = "hosts"
    ERRORS = "errors"


class TraceType(str, Enum):
    MEMORY = "Memory"
    CPU = "CPU"
    REAL = "Real"
    MEMORY_SAMPLE = "MemorySample"


@dataclass(frozen=True)
class MetricDefinition:
    """How a metric is displayed and computed per query_log row"""
    metric: HeatmapMetric
    name: str
    value_sql: str
    columns: tuple = ()


@dataclass(frozen=True)
class CategoryDefinition:
    """How a category axis is displayed and computed"""
    category: CategoryType
    name: str
    category_sql: str
    columns: tuple = ()
    extra_filter: Optional[str] = None


METRICS: Dict[HeatmapMetric, MetricDefinition] = {
    HeatmapMetric.COUNT: MetricDefinition(
        HeatmapMetric.COUNT, "Query Count", "1"),
    HeatmapMetric.MEMORY_USAGE: MetricDefinition(
        HeatmapMetric.MEMORY_USAGE, "Memory Usage",
        "COALESCE(memory_usage, 0)", ("memory_usage",)),
    HeatmapMetric.CPU_USAGE: MetricDefinition(
        HeatmapMetric.CPU_USAGE, "CPU Usage",
        "COALESCE(os_cpu_virtual_time_microseconds, 0)", ("os_cpu_virtual_time_microseconds",)),
    HeatmapMetric.NETWORK_SENT: MetricDefinition(
        HeatmapMetric.NETWORK_SENT, "Network Sent",
        "COALESCE(network_send_bytes, 0)", ("network_send_bytes",)),
    HeatmapMetric.NETWORK_RECEIVE: MetricDefinition(
        HeatmapMetric.NETWORK_RECEIVE, "Network Received",
        "COALESCE(network_receive_bytes, 0)", ("network_receive_bytes",)),
    HeatmapMetric.READ_ROWS: MetricDefinition(
        HeatmapMetric.READ_ROWS, "Read Rows",
        "COALESCE(read_rows, 0)", ("read_rows",)),
    HeatmapMetric.WRITTEN_ROWS: MetricDefinition(
        HeatmapMetric.WRITTEN_ROWS, "Written Rows",
        "COALESCE(written_rows, 0)", ("written_rows",)),
    HeatmapMetric.READ_BYTES: MetricDefinition(
        HeatmapMetric.READ_BYTES, "Read Bytes",
        "COALESCE(read_bytes, 0)", ("read_bytes",)),
    HeatmapMetric.WRITTEN_BYTES: MetricDefinition(
        HeatmapMetric.WRITTEN_BYTES, "Written Bytes",
        "COALESCE(written_bytes, 0)", ("written_bytes",)),
}

CATEGORIES: Dict[CategoryType, CategoryDefinition] = {
    CategoryType.QUERY_HASH: CategoryDefinition(
        CategoryType.QUERY_HASH, "Query Hash",
        "CAST(normalized_query_hash AS VARCHAR)", ("normalized_query_hash",)),
    CategoryType.TABLES: CategoryDefinition(
        CategoryType.TABLES, "Tables",
        "CAST(tables AS VARCHAR)", ("tables",)),
    CategoryType.HOSTS: CategoryDefinition(
        CategoryType.HOSTS, "Hosts",
        "CAST(hostname AS VARCHAR)", ("hostname",)),
    CategoryType.ERRORS: CategoryDefinition(
        CategoryType.ERRORS, "Errors",
        "CAST(exception_code AS VARCHAR) || ':' || CAST(normalized_query_hash AS VARCHAR)",
        ("exception_code", "normalized_query_hash"),
        extra_filter="exception_code != 0"),
}


def metric_definition(metric: HeatmapMetric) -> MetricDefinition:
    return METRICS[HeatmapMetric(metric)]


def category_definition(category: CategoryType) -> CategoryDefinition:
    return CATEGORIES[CategoryType(category)]


def trace_type_for(metric: HeatmapMetric) -> TraceType:
    """Memory metrics drill down into memory traces, everything else into real time"""
    if HeatmapMetric(metric) == HeatmapMetric.MEMORY_USAGE:
        return TraceType.MEMORY
    return TraceType.REAL


def _cycle(members: List, current):
    index = members.index(current)
    return members[(index + 1) % len(members)]


def next_metric(metric: HeatmapMetric) -> HeatmapMetric:
    return _cycle(list(HeatmapMetric), HeatmapMetric(metric))


def next_category(category: CategoryType) -> CategoryType:
    return _cycle(list(CategoryType), CategoryType(category))
