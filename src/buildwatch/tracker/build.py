"""BuildStatusTracker — lifecycle wait/poll engine for one build.

Lifecycle: NOT_STARTED -> IN_PROGRESS -> FINISHED. FINISHED is absorbing;
the cached result is its witness and short-circuits all further polling.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from buildwatch.core.config import load_config
from buildwatch.core.exceptions import (
    InvariantViolationError,
    NotFoundError,
    TransportError,
    WaitTimeoutError,
)
from buildwatch.core.models import BuildRef, BuildStatusSnapshot, ResultKind, WaitConfig
from buildwatch.sources.http import HttpStatusSource
from buildwatch.tracker.waiter import Condition, Waiter

if TYPE_CHECKING:
    from types import TracebackType

    from buildwatch.core.models import Config
    from buildwatch.sources.base import ConsoleSource, StatusSource

logger = logging.getLogger(__name__)


class BuildStatusTracker:
    """Observes one build through a status source and a console source.

    Single-owner object: the caches are write-once and not synchronized.

    Args:
        ref: The build being tracked.
        status: Source of structured status snapshots.
        console: Source of console text.
        wait: Poll interval, default timeouts and settle tolerance.
    """

    def __init__(
        self,
        ref: BuildRef,
        status: StatusSource,
        console: ConsoleSource,
        wait: WaitConfig | None = None,
    ) -> None:
        self.ref = ref
        self._status = status
        self._console = console
        self._wait = wait or WaitConfig()
        self._result: ResultKind | None = None
        self._console_text: str | None = None
        self._started = False
        self._last_snapshot: BuildStatusSnapshot | None = None
        self._last_error: TransportError | None = None

    @classmethod
    def from_config(
        cls,
        ref: BuildRef,
        console: ConsoleSource,
        config: Config | None = None,
    ) -> BuildStatusTracker:
        """Tracker reading status over HTTP with settings from ``config``.

        Without ``config`` the nearest config file, env vars and defaults are
        loaded. The tracker owns the HTTP client; close it with ``aclose()``
        or ``async with``.
        """
        config = config or load_config()
        return cls(ref, HttpStatusSource.from_config(config.jenkins), console, config.wait)

    async def aclose(self) -> None:
        """Release the status source (closes the HTTP client it created, if any)."""
        await self._status.aclose()

    async def __aenter__(self) -> BuildStatusTracker:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    @property
    def cached_result(self) -> ResultKind | None:
        """Terminal result if already observed. Never does I/O."""
        return self._result

    @property
    def last_snapshot(self) -> BuildStatusSnapshot | None:
        """Latest snapshot fetched, kept for diagnostics."""
        return self._last_snapshot

    # -- State queries ---------------------------------------------------------

    async def has_started(self) -> bool:
        """True once the status source knows about the build."""
        if self._result is not None or self._started:
            return True
        try:
            await self._fetch()
        except NotFoundError:
            logger.debug("Build %s not found yet", self.ref.build_url)
            return False
        self._started = True
        logger.info("Build %s has started", self.ref.build_url)
        return True

    async def is_in_progress(self) -> bool:
        """True while the build is flagged building or has no result yet."""
        if self._result is not None:
            return False
        if not await self.has_started():
            return False
        snapshot = await self._fetch()
        return snapshot.building or snapshot.result is None

    # -- Waits -----------------------------------------------------------------

    async def wait_until_started(self, timeout_s: float | None = None) -> BuildStatusTracker:
        """Block until the build has started.

        Args:
            timeout_s: Deadline in seconds. Defaults to ``WaitConfig.start_timeout_s``;
                when that is None too, waits without a deadline.

        Raises:
            WaitTimeoutError: A deadline was set and elapsed.
        """
        timeout = timeout_s if timeout_s is not None else self._wait.start_timeout_s
        start = time.monotonic()
        if not await self._poll(self.has_started, timeout):
            msg = f"Build {self.ref.build_url} did not start"
            raise WaitTimeoutError(
                msg, time.monotonic() - start, self._last_snapshot
            ) from self._last_error
        return self

    async def wait_until_finished(self, timeout_s: float | None = None) -> BuildStatusTracker:
        """Block until the build is no longer in progress.

        Args:
            timeout_s: Deadline in seconds for the in-progress phase.
                Defaults to ``WaitConfig.finish_timeout_s`` (120s).

        Raises:
            WaitTimeoutError: Still in progress when the deadline elapsed.
            InvariantViolationError: The build stayed "not building, no result"
                for more than ``WaitConfig.result_settle_polls`` polls.
        """
        timeout = timeout_s if timeout_s is not None else self._wait.finish_timeout_s
        await self.wait_until_started()
        await self._visit_console()

        settling = 0

        async def finished() -> bool:
            nonlocal settling
            in_progress = await self.is_in_progress()
            snapshot = self._last_snapshot
            if in_progress and snapshot is not None and snapshot.settling:
                settling += 1
                if settling > self._wait.result_settle_polls:
                    msg = (
                        f"Build {self.ref.build_url} is not building but reported no "
                        f"result for {settling} consecutive polls"
                    )
                    raise InvariantViolationError(msg)
            else:
                settling = 0
            return not in_progress

        start = time.monotonic()
        if not await self._poll(finished, timeout):
            msg = f"Build {self.ref.build_url} still in progress"
            raise WaitTimeoutError(
                msg, time.monotonic() - start, self._last_snapshot
            ) from self._last_error
        logger.info("Build %s finished", self.ref.build_url)
        return self

    # -- Result ----------------------------------------------------------------

    async def get_result(self) -> ResultKind:
        """Terminal result. Forces the full wait on first call, cached afterwards."""
        if self._result is not None:
            return self._result

        await self.wait_until_finished()
        snapshot = await self._fetch()
        if snapshot.result is None:
            msg = f"Build {self.ref.build_url} finished without a result"
            raise InvariantViolationError(msg)
        self._result = snapshot.result
        logger.info("Build %s result: %s", self.ref.build_url, self._result)
        return self._result

    async def is_success(self) -> bool:
        return await self.get_result() == ResultKind.SUCCESS

    async def is_failure(self) -> bool:
        return await self.get_result() == ResultKind.FAILURE

    async def is_aborted(self) -> bool:
        return await self.get_result() == ResultKind.ABORTED

    async def is_unstable(self) -> bool:
        return await self.get_result() == ResultKind.UNSTABLE

    # -- Details ---------------------------------------------------------------

    async def get_console(self) -> str:
        """Console text, read once and cached.

        A read taken while the build is still running is never refreshed.
        """
        if self._console_text is not None:
            return self._console_text
        self._console_text = await self._console.read_full(self.ref)
        logger.debug("Cached console output of %s", self.ref.build_url)
        return self._console_text

    async def get_node(self) -> str:
        """Name of the node the build ran on (``master`` for the controller)."""
        snapshot = await self._fetch()
        return snapshot.node

    # -- Internals -------------------------------------------------------------

    async def _fetch(self) -> BuildStatusSnapshot:
        snapshot = await self._status.fetch(self.ref)
        self._last_snapshot = snapshot
        return snapshot

    async def _poll(self, condition: Condition, timeout_s: float | None) -> bool:
        """Run ``condition`` in a Waiter; transport errors count as "not yet"."""
        self._last_error = None

        async def tick() -> bool:
            try:
                met = await condition()
            except TransportError as e:
                self._last_error = e
                logger.warning("Polling %s failed, retrying: %s", self.ref.build_url, e)
                return False
            self._last_error = None
            return met

        waiter = Waiter(poll_interval_ms=self._wait.poll_interval_ms, max_wait_s=timeout_s)
        met = await waiter.wait_for(tick)
        logger.debug("Poll on %s ended after %d tick(s): %s", self.ref.build_url, waiter.polls, met)
        return met

    async def _visit_console(self) -> None:
        # Purely observational; a failure must not abort the wait.
        try:
            await self._console.visit(self.ref)
        except Exception as e:
            logger.warning("Could not open console of %s: %s", self.ref.build_url, e)
