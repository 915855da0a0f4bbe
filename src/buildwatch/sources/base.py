"""Source ABCs — collaborator interfaces consumed by the tracker.

HttpStatusSource(httpx), PageConsoleSource(Playwright) etc. implement these.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from buildwatch.core.models import BuildRef, BuildStatusSnapshot


class StatusSource(ABC):
    """Structured build status provider."""

    @abstractmethod
    async def fetch(self, ref: BuildRef) -> BuildStatusSnapshot:
        """Fetch one status snapshot for the build.

        Raises:
            NotFoundError: The build does not exist yet.
            TransportError: Any other failure to reach or parse the status.
        """
        ...

    async def aclose(self) -> None:  # noqa: B027
        """Release held resources. Sources that own nothing keep this no-op."""


class ConsoleSource(ABC):
    """Build console text provider."""

    @abstractmethod
    async def read_full(self, ref: BuildRef) -> str:
        """Return the complete current console text.

        Raises:
            TransportError: The console could not be read.
        """
        ...

    @abstractmethod
    async def visit(self, ref: BuildRef) -> None:
        """Show the console (navigation side effect, nothing is returned)."""
        ...
