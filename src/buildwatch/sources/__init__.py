"""Status and console source implementations."""

from buildwatch.sources.base import ConsoleSource, StatusSource
from buildwatch.sources.console import PageConsoleSource
from buildwatch.sources.http import HttpStatusSource

__all__ = [
    "ConsoleSource",
    "HttpStatusSource",
    "PageConsoleSource",
    "StatusSource",
]
