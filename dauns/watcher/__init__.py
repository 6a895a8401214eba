"""Change tracking: per-key debouncing and watchdog event handling."""

from .debounce import WORKSPACE_KEY, DebounceManager

__all__ = ["DebounceManager", "WORKSPACE_KEY"]
