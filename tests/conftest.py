"""Shared fakes for Playwright pages and browser sessions."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from docs_harvester.crawler.models import SessionConfig


def make_page(url: str = "https://example.com/learn/a", html: str = "<html></html>") -> MagicMock:
    """A stand-in for a Playwright page with awaitable methods."""
    page = MagicMock()
    page.url = url
    page.goto = AsyncMock()
    page.wait_for_selector = AsyncMock()
    page.wait_for_function = AsyncMock()
    page.wait_for_load_state = AsyncMock()
    page.query_selector = AsyncMock(return_value=None)
    page.query_selector_all = AsyncMock(return_value=[])
    page.content = AsyncMock(return_value=html)
    page.evaluate = AsyncMock()
    page.pdf = AsyncMock()
    page.set_content = AsyncMock()
    page.close = AsyncMock()
    return page


@pytest.fixture()
def page() -> MagicMock:
    return make_page()


@pytest.fixture()
def session(page) -> MagicMock:
    fake = MagicMock()
    fake.config = SessionConfig(retries=3, timeout=1000)
    fake.page = page
    fake.log_cookies_for = AsyncMock()
    fake.new_page = AsyncMock(return_value=make_page(url="about:blank"))
    return fake


@pytest.fixture()
def page_factory():
    return make_page
