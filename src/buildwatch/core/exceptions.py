"""buildwatch custom exception hierarchy.

All exceptions inherit from BuildWatchError.
Only NotFoundError is recovered locally (as "build not started yet");
everything else surfaces to the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from buildwatch.core.models import BuildStatusSnapshot


class BuildWatchError(Exception):
    """Base exception for all buildwatch errors."""


class ConfigError(BuildWatchError):
    """Configuration file load/validation error."""


class SourceError(BuildWatchError):
    """Status or console source failure."""


class NotFoundError(SourceError):
    """The build does not exist (yet)."""


class TransportError(SourceError):
    """Any other failure to reach or parse a status/console source."""


class WaitTimeoutError(BuildWatchError):
    """A wait exceeded its deadline. Carries the last observed snapshot."""

    def __init__(
        self,
        message: str,
        elapsed_s: float,
        last_snapshot: BuildStatusSnapshot | None = None,
    ) -> None:
        self.elapsed_s = elapsed_s
        self.last_snapshot = last_snapshot
        seen = "no snapshot" if last_snapshot is None else _describe(last_snapshot)
        super().__init__(f"{message} after {elapsed_s:.1f}s (last seen: {seen})")


class InvariantViolationError(BuildWatchError):
    """The status source broke its contract (e.g. finished without a result)."""


class BuildExpectationError(BuildWatchError, AssertionError):
    """A build did not meet an expectation (result, console content)."""


def _describe(snapshot: BuildStatusSnapshot) -> str:
    result = snapshot.result.value if snapshot.result else None
    return f"building={snapshot.building}, result={result}"
