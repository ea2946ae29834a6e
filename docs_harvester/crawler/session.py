"""
Browser session management using Playwright.

Owns the single browser, context and page a harvest run works through, and
applies the configured identity (user agent, headers, cookies) before any
page is fetched.
"""

import json
from typing import List, Optional

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Error as PlaywrightError,
)

from .models import Credential, SessionConfig
from ..utils.errors import AuthenticationError, ConfigurationError
from ..utils.log import get_logger, redact


REQUIRED_COOKIE_FIELDS = ("name", "value", "domain", "path")

SAME_SITE_VALUES = {"strict": "Strict", "lax": "Lax", "none": "None"}

logger = get_logger("session")


def load_credentials(path: str) -> List[Credential]:
    """
    Load authentication cookies from a JSON file.

    The file holds an array of records with ``name``, ``value``, ``domain``
    and ``path`` plus optional ``httpOnly``, ``secure`` and ``sameSite``.

    Args:
        path: Path to the cookies file

    Returns:
        List of credentials in file order

    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            records = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read cookies file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Cookies file {path} is not valid JSON: {e}") from e

    if not isinstance(records, list):
        raise ConfigurationError(f"Cookies file {path} must contain a JSON array")

    credentials = []
    for position, record in enumerate(records, 1):
        if not isinstance(record, dict):
            raise ConfigurationError(f"Cookie #{position} is not an object")

        missing = [key for key in REQUIRED_COOKIE_FIELDS if not record.get(key)]
        if missing:
            raise ConfigurationError(
                f"Cookie #{position} is missing required field(s): {', '.join(missing)}"
            )

        same_site = record.get("sameSite")
        if same_site is not None:
            normalized = SAME_SITE_VALUES.get(str(same_site).lower())
            if normalized is None:
                raise ConfigurationError(
                    f"Cookie #{position} has invalid sameSite value {same_site!r}"
                )
            same_site = normalized

        credentials.append(Credential(
            name=str(record["name"]),
            value=str(record["value"]),
            domain=str(record["domain"]),
            path=str(record["path"]),
            http_only=record.get("httpOnly"),
            secure=record.get("secure"),
            same_site=same_site,
        ))

    logger.info(f"Loaded {len(credentials)} cookies from {path}")
    return credentials


class BrowserSession:
    """
    One authenticated browsing identity shared by a whole harvest run.

    Pages are visited one at a time through :attr:`page`; the session is
    never used for concurrent navigations.
    """

    def __init__(self, config: Optional[SessionConfig] = None):
        """
        Initialize the session.

        Args:
            config: Identity, timeout and retry settings
        """
        self.config = config or SessionConfig()

        self._playwright = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    @property
    def page(self) -> Page:
        """The page every navigation goes through."""
        if self._page is None:
            raise RuntimeError("Browser session is not open")
        return self._page

    @property
    def context(self) -> BrowserContext:
        if self._context is None:
            raise RuntimeError("Browser session is not open")
        return self._context

    @property
    def has_credentials(self) -> bool:
        return bool(self.config.credentials)

    async def open(self) -> "BrowserSession":
        """
        Launch the browser and establish the session identity.

        Raises:
            AuthenticationError: If the browser rejects a credential
        """
        logger.info("Starting Playwright browser...")
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self.config.headless,
            args=[
                '--no-sandbox',
                '--disable-setuid-sandbox',
                '--disable-dev-shm-usage',
                '--disable-gpu',
            ]
        )
        self._context = await self._browser.new_context(
            user_agent=self.config.user_agent,
            viewport=self.config.viewport,
            extra_http_headers=self.config.headers,
        )
        self._context.set_default_timeout(self.config.timeout)

        await self._apply_credentials()

        self._page = await self._context.new_page()
        logger.info("Browser session ready")
        return self

    async def _apply_credentials(self) -> None:
        """Add the configured cookies to the context's cookie jar."""
        credentials = self.config.credentials
        if not credentials:
            logger.debug("No credentials configured, browsing anonymously")
            return

        logger.info(f"Applying {len(credentials)} authentication cookies")
        for position, credential in enumerate(credentials, 1):
            logger.debug(
                f"  {position}. {credential.name} for {credential.domain} "
                f"({redact(credential.value)})"
            )

        try:
            await self._context.add_cookies([c.to_cookie() for c in credentials])
        except PlaywrightError as e:
            raise AuthenticationError(f"Browser rejected cookies: {e.message}") from e

        jar = await self._context.cookies()
        logger.debug(f"Total cookies in context: {len(jar)}")

    async def log_cookies_for(self, url: str) -> None:
        """Report which credentials apply to a URL, values redacted."""
        if not self.has_credentials:
            return

        cookies = await self.context.cookies(url)
        if not cookies:
            logger.warning(
                f"No cookies apply to {url}; check that cookie domains match the site"
            )
            return

        logger.debug(f"Cookies for {url}: {len(cookies)} found")
        for cookie in cookies:
            logger.debug(
                f"  - {cookie['name']}: {redact(cookie['value'])} (domain: {cookie['domain']})"
            )

    async def new_page(self) -> Page:
        """
        Create a page in a fresh context, isolated from :attr:`page`.

        Caller is responsible for closing it.
        """
        if self._browser is None:
            raise RuntimeError("Browser session is not open")
        return await self._browser.new_page(viewport=self.config.viewport)

    async def close(self) -> None:
        """
        Release the page, context, browser and Playwright driver.

        Safe to call after a partially failed :meth:`open`. Every resource
        is released even if an earlier one fails to close.
        """
        context, self._context, self._page = self._context, None, None
        browser, self._browser = self._browser, None
        playwright, self._playwright = self._playwright, None

        try:
            if context:
                await context.close()
        finally:
            try:
                if browser:
                    await browser.close()
            finally:
                if playwright:
                    await playwright.stop()
        logger.info("Browser stopped")

    async def __aenter__(self):
        """Async context manager entry."""
        try:
            return await self.open()
        except BaseException:
            await self.close()
            raise

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
