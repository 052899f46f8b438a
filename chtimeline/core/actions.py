#!/usr/bin/env python3
"""
Drill-down actions for heatmap selections.
Resolves the selection into a category/time scope and hands it to a downstream view.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional
import logging

from .errors import ActionError
from .heatmap import HeatmapMatrix
from .metrics import CategoryType, HeatmapMetric, TraceType, trace_type_for
from .navigation import SelectionContext, SelectionState, context_of

logger = logging.getLogger('chtimeline.actions')


class HeatmapAction(str, Enum):
    FLAMEGRAPH = "Flamegraph"
    PROFILE_EVENTS = "Profile Events"
    EXPLAIN = "Explain query"


ACTION_KEYS = {
    HeatmapAction.FLAMEGRAPH: "f",
    HeatmapAction.PROFILE_EVENTS: "p",
    HeatmapAction.EXPLAIN: "e",
}


@dataclass(frozen=True)
class ActionRequest:
    """Everything a downstream view needs to render its drill-down"""
    action: HeatmapAction
    category_type: Optional[CategoryType]
    category_value: str  # empty means all categories
    from_time: datetime
    to_time: datetime
    cluster: str
    trace_type: TraceType

    def describe(self) -> str:
        scope = self.category_value or "all categories"
        mode = self.category_type.value if self.category_type else "-"
        return (f"{self.action.value}: {mode}={scope} "
                f"[{self.from_time:%Y-%m-%d %H:%M:%S} - {self.to_time:%Y-%m-%d %H:%M:%S}] "
                f"cluster={self.cluster} trace={self.trace_type.value}")


ActionHandler = Callable[[ActionRequest], None]


class ActionDispatcher:
    """Builds the action menu and turns selections into ActionRequests"""

    BASE_ACTIONS = [HeatmapAction.FLAMEGRAPH, HeatmapAction.PROFILE_EVENTS]

    def __init__(self, category_type: CategoryType, metric: HeatmapMetric, cluster: str):
        self.category_type = CategoryType(category_type)
        self.metric = HeatmapMetric(metric)
        self.cluster = cluster
        self._handlers: Dict[HeatmapAction, ActionHandler] = {}

    def menu_options(self) -> List[HeatmapAction]:
        options = list(self.BASE_ACTIONS)
        # Explain needs a single normalized query identity
        if self.category_type == CategoryType.QUERY_HASH:
            options.append(HeatmapAction.EXPLAIN)
        return options

    def register(self, action: HeatmapAction, handler: ActionHandler) -> None:
        self._handlers[HeatmapAction(action)] = handler

    def resolve(self,
                matrix: HeatmapMatrix,
                selection: SelectionState,
                window_from: datetime,
                window_to: datetime,
                action: HeatmapAction) -> ActionRequest:
        """
        Resolve the selection into an ActionRequest.

        Args:
            matrix: heatmap currently displayed
            selection: current grid selection
            window_from: start of the current time window
            window_to: end of the current time window
            action: chosen menu action

        Raises:
            ActionError: when the action is not offered or cannot apply to this selection
        """
        action = HeatmapAction(action)
        if action not in self.menu_options():
            raise ActionError(f"{action.value} is not available for {self.category_type.value}")

        context = context_of(selection)
        category_type: Optional[CategoryType] = self.category_type
        category_value = ""

        if context == SelectionContext.CELL:
            category_value = matrix.categories[selection.row - 1]
            from_time = matrix.timestamps[selection.col - 1]
            to_time = self._interval(matrix).bucket_end(from_time)
        elif context == SelectionContext.CATEGORY:
            category_value = matrix.categories[selection.row - 1]
            from_time, to_time = window_from, window_to
        elif context == SelectionContext.TIME_BUCKET:
            timestamp = matrix.timestamps[selection.col - 1]
            window = self._interval(matrix).header_window
            from_time = timestamp - window / 2
            to_time = timestamp + window / 2
            category_type = None
        else:
            from_time, to_time = window_from, window_to

        if action == HeatmapAction.EXPLAIN and not category_value:
            raise ActionError("Explain needs a single query hash, select a cell or a category row")

        return ActionRequest(
            action=action,
            category_type=category_type,
            category_value=category_value,
            from_time=from_time,
            to_time=to_time,
            cluster=self.cluster,
            trace_type=trace_type_for(self.metric),
        )

    def dispatch(self, request: ActionRequest) -> None:
        """Hand the request to the view registered for its action, without waiting on it"""
        handler = self._handlers.get(request.action)
        if handler is None:
            raise ActionError(f"No view registered for {request.action.value}")
        logger.info("Dispatching %s", request.describe())
        handler(request)

    @staticmethod
    def _interval(matrix: HeatmapMatrix):
        if matrix.interval is None:
            raise ActionError("Bucket width is unknown for this heatmap")
        return matrix.interval
