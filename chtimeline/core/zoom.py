#!/usr/bin/env python3
"""
Zoom state for the heatmap time window.
Zooming is bounded by the window the session started with.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Tuple
import logging

from .errors import ZoomError
from .heatmap import HeatmapMatrix
from .navigation import SelectionContext, SelectionState, context_of

logger = logging.getLogger('chtimeline.zoom')

ZOOM_IN_FACTOR = 0.5
ZOOM_OUT_FACTOR = 2.0


@dataclass(frozen=True)
class ZoomState:
    current_from: datetime
    current_to: datetime
    initial_from: datetime
    initial_to: datetime

    @property
    def width(self) -> timedelta:
        return self.current_to - self.current_from

    @property
    def is_initial(self) -> bool:
        return (self.current_from, self.current_to) == (self.initial_from, self.initial_to)


def scale_range(from_time: datetime, to_time: datetime, factor: float) -> Tuple[datetime, datetime]:
    """Scale [from, to) by factor around its center"""
    center = from_time + (to_time - from_time) / 2
    half = (to_time - from_time) * factor / 2
    return center - half, center + half


class ZoomController:
    """Derives new time windows from the selection; owns the ZoomState"""

    def __init__(self, initial_from: datetime, initial_to: datetime):
        if initial_from > initial_to:
            raise ValueError(f"initial window is inverted: {initial_from} > {initial_to}")
        self.state = ZoomState(initial_from, initial_to, initial_from, initial_to)

    @property
    def window(self) -> Tuple[datetime, datetime]:
        return self.state.current_from, self.state.current_to

    @property
    def can_zoom_out(self) -> bool:
        return not self.state.is_initial

    def _apply(self, from_time: datetime, to_time: datetime) -> ZoomState:
        from_time = max(from_time, self.state.initial_from)
        to_time = min(to_time, self.state.initial_to)
        if from_time > to_time:
            # Range lies entirely outside the initial window
            from_time = to_time = min(max(from_time, self.state.initial_from), self.state.initial_to)
        self.state = replace(self.state, current_from=from_time, current_to=to_time)
        logger.info("Zoomed to %s - %s", from_time, to_time)
        return self.state

    def zoom_in(self, matrix: HeatmapMatrix, selection: SelectionState) -> ZoomState:
        """
        Zoom into the selected bucket: [t, t + width) halved around its center.

        Raises:
            ZoomError: if the selection is not a single cell
        """
        if context_of(selection) != SelectionContext.CELL:
            raise ZoomError("Select a heatmap cell to zoom in")
        if matrix.interval is None:
            raise ZoomError("Bucket width is unknown for this heatmap")

        bucket_start = matrix.timestamps[selection.col - 1]
        return self._apply(*scale_range(bucket_start, matrix.interval.bucket_end(bucket_start), ZOOM_IN_FACTOR))

    def zoom_out(self) -> ZoomState:
        return self._apply(*scale_range(self.state.current_from, self.state.current_to, ZOOM_OUT_FACTOR))

    def reset(self) -> ZoomState:
        return self._apply(self.state.initial_from, self.state.initial_to)
