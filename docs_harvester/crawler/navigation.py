"""
Navigation discoverer for the documentation sidebar.

Loads a base page with Playwright, waits for the sidebar drawer, and parses
its anchors with BeautifulSoup into an ordered, de-duplicated link list.
"""

from typing import List, Optional

from bs4 import BeautifulSoup
from playwright.async_api import Page, TimeoutError as PlaywrightTimeout

from .models import NavigationLink, SiteProfile
from ..utils import constants
from ..utils.errors import NavigationNotFoundError
from ..utils.log import get_logger
from ..utils.paths import resolve_url


logger = get_logger("navigation")


def is_content_link(href: str, text: str, profile: SiteProfile) -> bool:
    """
    Decide whether a sidebar anchor points at a documentation page.

    Args:
        href: Raw href attribute
        text: Trimmed anchor text
        profile: Site navigation conventions

    Returns:
        True if the anchor should be crawled
    """
    if not href or not text:
        return False
    if not href.startswith(profile.root_prefix):
        return False
    if any(fragment in href for fragment in profile.excluded_fragments):
        return False
    if text == profile.back_link_text:
        return False
    if profile.brand_name and profile.brand_name in text:
        return False
    return True


def dedupe_links(links: List[NavigationLink]) -> List[NavigationLink]:
    """Keep the first link for every href, preserving order."""
    seen = set()
    unique = []
    for link in links:
        if link.href in seen:
            continue
        seen.add(link.href)
        unique.append(link)
    return unique


def parse_navigation_links(
    html: str,
    base_url: str,
    profile: Optional[SiteProfile] = None
) -> List[NavigationLink]:
    """
    Extract documentation links from the sidebar in a page's HTML.

    Args:
        html: Rendered HTML of the base page
        base_url: URL of the base page, used to resolve hrefs
        profile: Site navigation conventions

    Returns:
        Links in top-to-bottom order, unique by href

    Raises:
        NavigationNotFoundError: If the page has no navigation container
    """
    profile = profile or SiteProfile()
    soup = BeautifulSoup(html, 'lxml')

    container = soup.select_one(profile.container_selector)
    if container is None:
        raise NavigationNotFoundError(
            f"Navigation container {profile.container_selector!r} not found on {base_url}"
        )

    links = []
    for anchor in container.find_all('a', href=True):
        href = anchor.get('href', '').strip()
        text = anchor.get_text().strip()
        if not is_content_link(href, text, profile):
            continue
        links.append(NavigationLink(href=href, text=text, url=resolve_url(href, base_url)))

    return dedupe_links(links)


class NavigationDiscoverer:
    """
    Discovers the documentation pages listed in the site's sidebar.
    """

    def __init__(
        self,
        timeout: int = constants.DEFAULT_PAGE_TIMEOUT,
        profile: Optional[SiteProfile] = None,
        container_timeout: int = constants.NAVIGATION_WAIT_TIMEOUT
    ):
        """
        Initialize the discoverer.

        Args:
            timeout: Page load timeout in milliseconds
            profile: Site navigation conventions
            container_timeout: Milliseconds to wait for the sidebar
        """
        self.timeout = timeout
        self.profile = profile or SiteProfile()
        self.container_timeout = container_timeout

    async def discover_links(self, page: Page, base_url: str) -> List[NavigationLink]:
        """
        Load the base page and list its sidebar links.

        Args:
            page: Session page to navigate with
            base_url: Any documentation page showing the sidebar

        Returns:
            Ordered, de-duplicated navigation links

        Raises:
            NavigationNotFoundError: If the sidebar does not appear in time
        """
        logger.info(f"Extracting navigation links from: {base_url}")

        await page.goto(base_url, wait_until="domcontentloaded", timeout=self.timeout)
        try:
            await page.wait_for_load_state("networkidle", timeout=self.timeout)
        except PlaywrightTimeout:
            logger.debug("Network never went idle, continuing with the loaded DOM")

        try:
            await page.wait_for_selector(
                self.profile.container_selector,
                timeout=self.container_timeout
            )
        except PlaywrightTimeout as e:
            raise NavigationNotFoundError(
                f"Navigation container did not appear on {base_url} "
                f"within {self.container_timeout} ms"
            ) from e

        links = parse_navigation_links(await page.content(), page.url, self.profile)

        logger.info(f"Found {len(links)} unique navigation links")
        for position, link in enumerate(links, 1):
            logger.debug(f"  {position}. {link.text} → {link.href}")

        return links
