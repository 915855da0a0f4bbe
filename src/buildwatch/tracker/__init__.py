"""Build lifecycle tracking."""

from buildwatch.tracker.build import BuildStatusTracker
from buildwatch.tracker.waiter import Waiter

__all__ = ["BuildStatusTracker", "Waiter"]
