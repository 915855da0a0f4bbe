"""PageConsoleSource — Playwright-based console text source.

Reads the console ``<pre>`` of a build page in an already-open Playwright page.
The browser itself is launched and owned by the caller.
"""

from __future__ import annotations

import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from buildwatch.core.exceptions import TransportError
from buildwatch.core.models import BuildRef
from buildwatch.sources.base import ConsoleSource

logger = logging.getLogger(__name__)

# Jenkins renders the log in <pre id="out"> when the page carries other <pre> blocks
CONSOLE_SELECTOR = "pre"
CONSOLE_OUT_SELECTOR = "pre#out"


class PageConsoleSource(ConsoleSource):
    """Console source driving a Playwright page."""

    def __init__(self, page: Page) -> None:
        self._page = page

    @property
    def page(self) -> Page:
        return self._page

    async def visit(self, ref: BuildRef) -> None:
        """Navigate to the console so a watching human sees live progress."""
        await self._goto(ref.console_url)

    async def read_full(self, ref: BuildRef) -> str:
        """Navigate to the console page and return its text."""
        url = ref.console_url
        await self._goto(url)
        try:
            blocks = self._page.locator(CONSOLE_SELECTOR)
            count = await blocks.count()
            if count == 0:
                msg = f"No console output found at {url}"
                raise TransportError(msg)
            if count > 1:
                text = await self._page.locator(CONSOLE_OUT_SELECTOR).first.inner_text()
            else:
                text = await blocks.first.inner_text()
        except PlaywrightError as e:
            msg = f"Reading console at {url} failed: {e}"
            raise TransportError(msg) from e

        logger.debug("Read %d chars of console output from %s", len(text), url)
        return text

    async def _goto(self, url: str) -> None:
        try:
            await self._page.goto(url, wait_until="domcontentloaded")
        except PlaywrightError as e:
            msg = f"Navigation to {url} failed: {e}"
            raise TransportError(msg) from e
