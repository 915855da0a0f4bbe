"""Build expectations — assertion helpers over a BuildStatusTracker.

Each helper returns the tracker so checks can be chained:

    await should_succeed(tracker)
    await should_contain_console_output(tracker, r"^BUILD SUCCESSFUL")
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from buildwatch.core.exceptions import BuildExpectationError
from buildwatch.core.models import ResultKind

if TYPE_CHECKING:
    from buildwatch.tracker.build import BuildStatusTracker


async def should_succeed(tracker: BuildStatusTracker) -> BuildStatusTracker:
    """Require SUCCESS. The failure message carries the console output."""
    result = await tracker.get_result()
    if result != ResultKind.SUCCESS:
        console = await tracker.get_console()
        msg = f"Expected successful build but it was {result}. Console output: {console}"
        raise BuildExpectationError(msg)
    return tracker


async def should_fail(tracker: BuildStatusTracker) -> BuildStatusTracker:
    return await _expect_result(tracker, ResultKind.FAILURE)


async def should_abort(tracker: BuildStatusTracker) -> BuildStatusTracker:
    return await _expect_result(tracker, ResultKind.ABORTED)


async def should_contain_console_output(
    tracker: BuildStatusTracker, pattern: str
) -> BuildStatusTracker:
    """Require a multiline regex match somewhere in the console text."""
    console = await tracker.get_console()
    if not re.search(pattern, console, re.MULTILINE):
        msg = f"Console output of {tracker.ref.build_url} does not match {pattern!r}"
        raise BuildExpectationError(msg)
    return tracker


async def should_not_contain_console_output(
    tracker: BuildStatusTracker, pattern: str
) -> BuildStatusTracker:
    """Require that a multiline regex matches nowhere in the console text."""
    console = await tracker.get_console()
    match = re.search(pattern, console, re.MULTILINE)
    if match:
        msg = (
            f"Console output of {tracker.ref.build_url} unexpectedly matches "
            f"{pattern!r}: {match.group(0)!r}"
        )
        raise BuildExpectationError(msg)
    return tracker


async def _expect_result(tracker: BuildStatusTracker, expected: ResultKind) -> BuildStatusTracker:
    result = await tracker.get_result()
    if result != expected:
        msg = f"Expected build result {expected} but it was {result}"
        raise BuildExpectationError(msg)
    return tracker
