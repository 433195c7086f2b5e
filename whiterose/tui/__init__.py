"""Interactive review and fix screens."""

from .app import FixApp, run_app
from .confirm import FixConfirmation
from .navigator import ListNavigator, NavigationEvent
from .terminal import run_interactive

__all__ = [
    "FixApp",
    "FixConfirmation",
    "ListNavigator",
    "NavigationEvent",
    "run_app",
    "run_interactive",
]
