"""Tests for PageConsoleSource — Playwright-based console source.

Uses a mock Playwright page to avoid requiring an actual browser.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError

from buildwatch.core.exceptions import TransportError
from buildwatch.core.models import BuildRef
from buildwatch.sources.base import ConsoleSource
from buildwatch.sources.console import PageConsoleSource

REF = BuildRef.of("https://ci.example.com/job/app", 3)
CONSOLE_URL = "https://ci.example.com/job/app/3/console"


def _locator(count: int, text: str = "") -> MagicMock:
    locator = MagicMock()
    locator.count = AsyncMock(return_value=count)
    locator.first.inner_text = AsyncMock(return_value=text)
    return locator


def _page(locators: dict[str, MagicMock]) -> MagicMock:
    page = MagicMock()
    page.goto = AsyncMock()
    page.locator = MagicMock(side_effect=lambda selector: locators[selector])
    return page


class TestPageConsoleSource:
    def test_is_console_source(self) -> None:
        assert issubclass(PageConsoleSource, ConsoleSource)

    async def test_visit_navigates_to_console(self) -> None:
        page = _page({})
        source = PageConsoleSource(page)
        await source.visit(REF)
        page.goto.assert_awaited_once_with(CONSOLE_URL, wait_until="domcontentloaded")

    async def test_single_pre(self) -> None:
        page = _page({"pre": _locator(1, "Started\nFinished: SUCCESS")})
        source = PageConsoleSource(page)
        assert await source.read_full(REF) == "Started\nFinished: SUCCESS"
        page.goto.assert_awaited_once_with(CONSOLE_URL, wait_until="domcontentloaded")

    async def test_multiple_pre_uses_out(self) -> None:
        out = _locator(1, "real console")
        page = _page({"pre": _locator(2, "banner"), "pre#out": out})
        source = PageConsoleSource(page)
        assert await source.read_full(REF) == "real console"
        out.first.inner_text.assert_awaited_once()

    async def test_no_pre(self) -> None:
        source = PageConsoleSource(_page({"pre": _locator(0)}))
        with pytest.raises(TransportError, match="No console output"):
            await source.read_full(REF)

    async def test_navigation_failure(self) -> None:
        page = _page({})
        page.goto = AsyncMock(side_effect=PlaywrightError("net::ERR_CONNECTION_REFUSED"))
        source = PageConsoleSource(page)
        with pytest.raises(TransportError, match="Navigation to .* failed"):
            await source.visit(REF)

    async def test_read_failure(self) -> None:
        locator = _locator(1)
        locator.first.inner_text = AsyncMock(side_effect=PlaywrightError("detached"))
        source = PageConsoleSource(_page({"pre": locator}))
        with pytest.raises(TransportError, match="Reading console"):
            await source.read_full(REF)
