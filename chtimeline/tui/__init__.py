#!/usr/bin/env python3
"""
TUI module for chtimeline - heatmap grid widget and modal dialogs
"""

from .heatmap_view import HeatmapTable
from .action_menu_modal import ActionMenuModal, ActionRequestModal
from .error_modal import ErrorModal

__all__ = [
    'HeatmapTable',
    'ActionMenuModal',
    'ActionRequestModal',
    'ErrorModal',
]

__version__ = '1.0'
