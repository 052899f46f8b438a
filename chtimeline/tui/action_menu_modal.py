#!/usr/bin/env python3
"""Action menu and drill-down request modals for the chtimeline TUI."""

from typing import List, Optional

from textual import events, on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Label, OptionList, Static
from textual.widgets.option_list import Option

from core.actions import ACTION_KEYS, ActionRequest, HeatmapAction
from core.formatters import HeatmapTableFormatter

CANCEL_ID = "cancel"


class ActionMenuModal(ModalScreen[Optional[HeatmapAction]]):
    """Lists the drill-down actions for the selection; dismisses with the chosen action or None"""

    CSS = """
    ActionMenuModal {
        align: center middle;
    }

    #action-menu-container {
        background: $panel;
        border: thick $primary;
        padding: 1;
        width: 60;
        height: auto;
        max-height: 90%;
    }

    #action-menu-title {
        text-align: center;
        text-style: bold;
        margin: 0 0 1 0;
    }

    #action-menu-scope {
        text-align: center;
        color: $text-muted;
        margin-bottom: 1;
    }

    OptionList {
        height: auto;
        max-height: 12;
        scrollbar-size: 1 1;
    }
    """

    def __init__(self, actions: List[HeatmapAction], scope: str = "", **kwargs) -> None:
        super().__init__(**kwargs)
        self.actions = list(actions)
        self.scope = scope
        self.option_list: Optional[OptionList] = None

    def compose(self) -> ComposeResult:
        with Container(id="action-menu-container"):
            yield Label("Select action", id="action-menu-title")
            if self.scope:
                yield Label(self.scope, id="action-menu-scope")
            option_list = OptionList()
            self.option_list = option_list
            yield option_list

    def on_mount(self) -> None:
        for action in self.actions:
            key = ACTION_KEYS.get(action, "")
            self.option_list.add_option(Option(f"[{key}] {action.value}", id=action.name))
        self.option_list.add_option(Option("[esc] Cancel", id=CANCEL_ID))
        self.option_list.highlighted = 0
        self.option_list.focus()

    def _choose(self, option_id: Optional[str]) -> None:
        if option_id is None or option_id == CANCEL_ID:
            self.dismiss(None)
        else:
            self.dismiss(HeatmapAction[option_id])

    @on(OptionList.OptionSelected)
    def on_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        self._choose(event.option.id)

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            event.stop()
            self.dismiss(None)
            return

        for action in self.actions:
            if event.character and event.character == ACTION_KEYS.get(action):
                event.stop()
                self.dismiss(action)
                return

        # Arrow keys and enter go to the OptionList


class ActionRequestModal(ModalScreen[None]):
    """Shows the request handed to a drill-down view"""

    BINDINGS = [
        Binding("escape", "close", "Close", priority=True),
        Binding("enter", "close", "Close"),
    ]

    CSS = """
    ActionRequestModal {
        align: center middle;
    }

    #request-container {
        background: $panel;
        border: thick $primary;
        padding: 1;
        width: 80;
        height: auto;
    }

    #request-title {
        text-align: center;
        text-style: bold;
        background: $primary;
        color: $text;
        padding: 0 1;
        margin-bottom: 1;
    }

    #request-footer {
        text-align: center;
        color: $text-muted;
        margin-top: 1;
    }
    """

    def __init__(self, request: ActionRequest, **kwargs) -> None:
        super().__init__(**kwargs)
        self.request = request

    def compose(self) -> ComposeResult:
        with Container(id="request-container"):
            yield Label(self.request.action.value, id="request-title")
            yield Static(HeatmapTableFormatter.format_request(self.request), id="request-body")
            yield Label("ENTER/ESC to close", id="request-footer")

    def action_close(self) -> None:
        self.dismiss(None)
