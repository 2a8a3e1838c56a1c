"""Hunt (case) management."""

from .manager import HuntManager, HuntSummary, get_hunt_manager

__all__ = [
    "HuntManager",
    "HuntSummary",
    "get_hunt_manager",
]
