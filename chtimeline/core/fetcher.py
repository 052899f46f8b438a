#!/usr/bin/env python3
"""
Generation-tagged fetch cycles.
A fetch runs off the UI thread and returns an immutable result; the UI
applies it only when its generation is still the current one.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
import itertools
import logging
import threading
import time

from .errors import NoDataError, QueryError
from .heatmap import HeatmapMatrix, build_matrix, scan_rows
from .query_engine import HeatmapQueryParams


class FetchStatus(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    ERROR = "error"


@dataclass(frozen=True)
class FetchTicket:
    generation: int
    params: HeatmapQueryParams


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one fetch cycle, handed to the UI thread once"""
    generation: int
    params: HeatmapQueryParams
    status: FetchStatus
    matrix: Optional[HeatmapMatrix] = None
    message: str = ""
    elapsed: float = 0.0


class FetchCoordinator:
    """Issues fetch tickets and decides whether a finished fetch is still wanted"""

    def __init__(self, query_engine):
        """
        Args:
            query_engine: object with fetch_heatmap(params) returning rows in .rows
        """
        self.query_engine = query_engine
        self._counter = itertools.count(1)
        self._lock = threading.Lock()
        self._current = 0
        self.logger = logging.getLogger('chtimeline.fetcher')

    @property
    def current_generation(self) -> int:
        return self._current

    def begin(self, params: HeatmapQueryParams) -> FetchTicket:
        """Start a new cycle; any cycle still in flight becomes stale"""
        with self._lock:
            self._current = next(self._counter)
            ticket = FetchTicket(self._current, params)
        self.logger.debug(f"Fetch generation {ticket.generation} started")
        return ticket

    def run(self, ticket: FetchTicket) -> FetchResult:
        """Query, scan and build. Safe to call from a worker thread."""
        start = time.time()
        params = ticket.params
        try:
            result = self.query_engine.fetch_heatmap(params)
            points, skipped = scan_rows(result.rows)
            matrix = build_matrix(points, params.interval, skipped_rows=skipped)
        except NoDataError as e:
            return FetchResult(ticket.generation, params, FetchStatus.EMPTY,
                               message=str(e), elapsed=time.time() - start)
        except QueryError as e:
            self.logger.error(f"Fetch generation {ticket.generation} failed: {e}")
            return FetchResult(ticket.generation, params, FetchStatus.ERROR,
                               message=str(e), elapsed=time.time() - start)
        except Exception as e:
            self.logger.exception(f"Fetch generation {ticket.generation} crashed")
            return FetchResult(ticket.generation, params, FetchStatus.ERROR,
                               message=f"Unexpected error: {e}", elapsed=time.time() - start)

        return FetchResult(ticket.generation, params, FetchStatus.OK, matrix=matrix,
                           elapsed=time.time() - start)

    def is_current(self, result: FetchResult) -> bool:
        """True if the result belongs to the latest cycle; stale results are to be dropped"""
        current = result.generation == self._current
        if not current:
            self.logger.debug(
                f"Discarding stale fetch generation {result.generation} (current {self._current})"
            )
        return current
