"""Tests for cookie loading, credential handling and the browser session."""

from __future__ import annotations

import json
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError

from docs_harvester.crawler.models import Credential, SessionConfig
from docs_harvester.crawler.session import BrowserSession, load_credentials
from docs_harvester.utils.errors import AuthenticationError, ConfigurationError
from docs_harvester.utils.log import redact


SECRET = "eyJhbGciOiJIUzI1NiJ9.super-secret-session-token"


def write_cookies(tmp_path, records) -> str:
    path = tmp_path / "cookies.json"
    path.write_text(json.dumps(records), encoding="utf-8")
    return str(path)


def cookie_record(**overrides) -> dict:
    record = {
        "name": "session",
        "value": SECRET,
        "domain": ".example.com",
        "path": "/",
    }
    record.update(overrides)
    return record


# ---------------------------------------------------------------------------
# Cookie files
# ---------------------------------------------------------------------------

class TestLoadCredentials:
    def test_valid_file(self, tmp_path):
        path = write_cookies(tmp_path, [
            cookie_record(httpOnly=True, secure=True, sameSite="Lax"),
            cookie_record(name="csrf", value="abc123"),
        ])

        credentials = load_credentials(path)

        assert [c.name for c in credentials] == ["session", "csrf"]
        assert credentials[0].http_only is True
        assert credentials[0].same_site == "Lax"
        assert credentials[1].secure is None

    @pytest.mark.parametrize("raw,expected", [("lax", "Lax"), ("STRICT", "Strict"), ("none", "None")])
    def test_same_site_is_normalized(self, tmp_path, raw, expected):
        path = write_cookies(tmp_path, [cookie_record(sameSite=raw)])

        assert load_credentials(path)[0].same_site == expected

    def test_invalid_same_site(self, tmp_path):
        path = write_cookies(tmp_path, [cookie_record(sameSite="sometimes")])

        with pytest.raises(ConfigurationError, match="sameSite"):
            load_credentials(path)

    @pytest.mark.parametrize("field", ["name", "value", "domain", "path"])
    def test_missing_required_field(self, tmp_path, field):
        record = cookie_record()
        del record[field]
        path = write_cookies(tmp_path, [record])

        with pytest.raises(ConfigurationError, match=field):
            load_credentials(path)

    def test_not_an_array(self, tmp_path):
        path = write_cookies(tmp_path, cookie_record())

        with pytest.raises(ConfigurationError, match="array"):
            load_credentials(path)

    def test_record_not_an_object(self, tmp_path):
        path = write_cookies(tmp_path, ["session=abc"])

        with pytest.raises(ConfigurationError):
            load_credentials(path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "cookies.json"
        path.write_text("[{not json", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="not valid JSON"):
            load_credentials(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_credentials(str(tmp_path / "absent.json"))

    def test_empty_array(self, tmp_path):
        assert load_credentials(write_cookies(tmp_path, [])) == []

    def test_value_is_not_logged(self, tmp_path, caplog):
        path = write_cookies(tmp_path, [cookie_record()])

        with caplog.at_level(logging.DEBUG, logger="docs_harvester"):
            load_credentials(path)

        assert SECRET not in caplog.text


class TestCredential:
    def test_minimal_cookie(self):
        cookie = Credential("a", "b", ".example.com", "/").to_cookie()

        assert cookie == {"name": "a", "value": "b", "domain": ".example.com", "path": "/"}

    def test_optional_attributes(self):
        cookie = Credential(
            "a", "b", ".example.com", "/", http_only=True, secure=False, same_site="Strict"
        ).to_cookie()

        assert cookie["httpOnly"] is True
        assert cookie["secure"] is False
        assert cookie["sameSite"] == "Strict"


class TestRedact:
    def test_keeps_prefix_and_length(self):
        assert redact(SECRET) == f"eyJh…({len(SECRET)} chars)"

    def test_short_value_fully_hidden(self):
        assert redact("abc") == "…(3 chars)"

    def test_empty(self):
        assert redact("") == "<empty>"
        assert redact(None) == "<empty>"


# ---------------------------------------------------------------------------
# Browser session
# ---------------------------------------------------------------------------

def make_context(cookies=None, add_error: Exception | None = None) -> MagicMock:
    context = MagicMock()
    context.add_cookies = AsyncMock(side_effect=add_error)
    context.cookies = AsyncMock(return_value=cookies or [])
    context.close = AsyncMock()
    return context


class TestBrowserSession:
    def test_page_requires_open_session(self):
        with pytest.raises(RuntimeError):
            BrowserSession().page

    async def test_close_unopened_session(self):
        await BrowserSession().close()

    async def test_credentials_applied(self, caplog):
        credential = Credential("session", SECRET, ".example.com", "/")
        session = BrowserSession(SessionConfig(credentials=[credential]))
        session._context = make_context()

        with caplog.at_level(logging.DEBUG, logger="docs_harvester"):
            await session._apply_credentials()

        session._context.add_cookies.assert_awaited_once_with([credential.to_cookie()])
        assert SECRET not in caplog.text
        assert "eyJh" in caplog.text

    async def test_rejected_cookie_is_authentication_error(self):
        session = BrowserSession(SessionConfig(
            credentials=[Credential("session", SECRET, "example.com", "/")]
        ))
        session._context = make_context(add_error=PlaywrightError("Cookie should have a url or a domain/path pair"))

        with pytest.raises(AuthenticationError, match="domain/path"):
            await session._apply_credentials()

    async def test_no_credentials_is_anonymous(self):
        session = BrowserSession()
        session._context = make_context()

        await session._apply_credentials()

        session._context.add_cookies.assert_not_awaited()
        assert not session.has_credentials

    async def test_warns_when_no_cookie_applies(self, caplog):
        session = BrowserSession(SessionConfig(
            credentials=[Credential("session", SECRET, ".other.com", "/")]
        ))
        session._context = make_context(cookies=[])

        with caplog.at_level(logging.DEBUG, logger="docs_harvester"):
            await session.log_cookies_for("https://example.com/learn/a")

        assert "No cookies apply" in caplog.text

    async def test_applicable_cookies_are_redacted(self, caplog):
        session = BrowserSession(SessionConfig(
            credentials=[Credential("session", SECRET, ".example.com", "/")]
        ))
        session._context = make_context(
            cookies=[{"name": "session", "value": SECRET, "domain": ".example.com"}]
        )

        with caplog.at_level(logging.DEBUG, logger="docs_harvester"):
            await session.log_cookies_for("https://example.com/learn/a")

        session._context.cookies.assert_awaited_once_with("https://example.com/learn/a")
        assert "1 found" in caplog.text
        assert SECRET not in caplog.text

    async def test_close_releases_context(self):
        session = BrowserSession()
        context = make_context()
        session._context = context
        session._page = MagicMock()

        await session.close()

        context.close.assert_awaited_once()
        with pytest.raises(RuntimeError):
            session.page

    async def test_close_releases_everything_when_context_fails(self):
        session = BrowserSession()
        session._context = make_context()
        session._context.close = AsyncMock(side_effect=PlaywrightError("Target closed"))
        browser = MagicMock()
        browser.close = AsyncMock()
        driver = MagicMock()
        driver.stop = AsyncMock()
        session._browser = browser
        session._playwright = driver

        with pytest.raises(PlaywrightError, match="Target closed"):
            await session.close()

        browser.close.assert_awaited_once()
        driver.stop.assert_awaited_once()
        assert session._browser is None
        assert session._playwright is None

        await session.close()
        browser.close.assert_awaited_once()
