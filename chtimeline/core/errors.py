#!/usr/bin/env python3
"""
Exception types raised by the heatmap engine.
"""


class HeatmapError(Exception):
    """Base class for heatmap engine errors"""


class NoDataError(HeatmapError):
    """Raised when a fetch cycle produced no rows at all"""

    def __init__(self, message: str = "No data found for the selected time range and category"):
        super().__init__(message)


class QueryError(HeatmapError):
    """Raised when the query collaborator fails (SQL error, missing columns, no files)"""


class ZoomError(HeatmapError):
    """Raised when a zoom operation is not possible for the current selection"""


class ActionError(HeatmapError):
    """Raised when an action cannot be resolved or has no handler"""


class ConfigurationError(HeatmapError):
    """Raised for invalid command line or environment settings"""
