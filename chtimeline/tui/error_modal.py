#!/usr/bin/env python3
"""
Modal dialog for query failures and invalid drill-downs.
"""

from textual.app import ComposeResult
from textual.containers import Container, Vertical
from textual.widgets import Label, Static, Button
from textual.screen import ModalScreen
from textual.binding import Binding
from typing import Optional


class ErrorModal(ModalScreen[None]):
    """Modal screen for heatmap errors"""

    BINDINGS = [
        Binding("escape", "close", "Close", priority=True),
        Binding("enter", "close", "Close"),
    ]

    CSS = """
    ErrorModal {
        align: center middle;
    }

    #error-container {
        width: 70%;
        max-width: 90;
        height: auto;
        max-height: 30;
        background: $error;
        border: thick $error;
        padding: 1;
    }

    #error-title {
        text-align: center;
        color: $text;
        padding: 0 1;
        margin-bottom: 1;
        text-style: bold;
    }

    #error-message {
        padding: 1;
        background: $surface;
        border: solid $error;
    }

    #error-details {
        padding: 1;
        color: $text-muted;
        text-style: italic;
    }

    .error-footer {
        height: 3;
        align: center middle;
        margin-top: 1;
    }
    """

    def __init__(self,
                 title: str = "Error",
                 error_message: str = "An error occurred",
                 details: Optional[str] = None):
        """
        Args:
            title: Title for the error modal
            error_message: Main error message to display
            details: Optional hint, e.g. which key retries the fetch
        """
        super().__init__()
        self.error_title = title
        self.error_message = error_message
        self.details = details

    def compose(self) -> ComposeResult:
        with Container(id="error-container"):
            yield Label(self.error_title, id="error-title")
            with Vertical():
                yield Static(self.error_message, id="error-message", markup=False)
                if self.details:
                    yield Label(self.details, id="error-details")
                with Container(classes="error-footer"):
                    yield Button("OK [Enter/ESC]", id="ok-button", variant="error")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "ok-button":
            self.dismiss(None)

    def action_close(self) -> None:
        self.dismiss(None)
