"""Scripted sources for tracker tests."""

from __future__ import annotations

from buildwatch.core.exceptions import NotFoundError
from buildwatch.core.models import BuildRef, BuildStatusSnapshot, ResultKind
from buildwatch.sources.base import ConsoleSource, StatusSource

REF = BuildRef.of("https://ci.example.com/job/app", 7)

RUNNING = BuildStatusSnapshot(building=True, result=None, built_on="agent-1")
SETTLING = BuildStatusSnapshot(building=False, result=None, built_on="agent-1")
SUCCESS = BuildStatusSnapshot(building=False, result=ResultKind.SUCCESS, built_on="")
FAILURE = BuildStatusSnapshot(building=False, result=ResultKind.FAILURE, built_on="")
ABORTED = BuildStatusSnapshot(building=False, result=ResultKind.ABORTED, built_on="")
UNSTABLE = BuildStatusSnapshot(building=False, result=ResultKind.UNSTABLE, built_on="")


class ScriptedStatusSource(StatusSource):
    """Plays back snapshots (or raises exceptions) in order, repeating the last one."""

    def __init__(self, script: list[BuildStatusSnapshot | Exception]) -> None:
        self.script = list(script)
        self.calls = 0
        self.closed = False

    async def fetch(self, ref: BuildRef) -> BuildStatusSnapshot:
        index = min(self.calls, len(self.script) - 1)
        self.calls += 1
        item = self.script[index]
        if isinstance(item, Exception):
            raise item
        return item

    async def aclose(self) -> None:
        self.closed = True


class NeverStartedSource(StatusSource):
    def __init__(self) -> None:
        self.calls = 0

    async def fetch(self, ref: BuildRef) -> BuildStatusSnapshot:
        self.calls += 1
        raise NotFoundError(f"Build not found: {ref.build_url}")


class FakeConsoleSource(ConsoleSource):
    def __init__(
        self,
        text: str = "Started\nFinished: SUCCESS\n",
        visit_error: Exception | None = None,
    ) -> None:
        self.text = text
        self.visit_error = visit_error
        self.reads = 0
        self.visits = 0

    async def read_full(self, ref: BuildRef) -> str:
        self.reads += 1
        return self.text

    async def visit(self, ref: BuildRef) -> None:
        self.visits += 1
        if self.visit_error is not None:
            raise self.visit_error
