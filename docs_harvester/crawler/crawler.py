"""
Main harvest orchestrator.

Drives navigation discovery, content extraction and artifact rendering over
one browser session, one page at a time, with per-page retries.
"""

import asyncio
import json
import os
import re
from typing import List, Optional, Sequence, Tuple

from .extractor import ContentExtractor
from .models import (
    CrawlFailure,
    CrawlRequest,
    CrawlResult,
    CrawlSuccess,
    ExtractionRules,
    NavigationLink,
    SiteProfile,
)
from .navigation import NavigationDiscoverer
from .renderer import ArtifactRenderer
from .session import BrowserSession
from ..utils import constants
from ..utils.errors import ConfigurationError
from ..utils.log import get_logger, print_info, print_warning
from ..utils.retry import RetryPolicy


ERROR_LOG_NAME = "errors.json"


def select_links(
    links: Sequence[NavigationLink],
    request: CrawlRequest
) -> List[Tuple[int, NavigationLink]]:
    """
    Apply a batch request's filter, start index and page cap.

    The filter is a case-insensitive regex matched against the link text or
    its URL. Indexes are 1-based positions in the filtered list, so a batch
    resumed with ``start_index`` keeps numbering where the last one stopped.

    Args:
        links: Discovered navigation links
        request: Batch selection

    Returns:
        List of (index, link) pairs to crawl

    Raises:
        ConfigurationError: On an invalid pattern or out-of-range bounds
    """
    selected = list(links)

    if request.filter_pattern:
        try:
            regex = re.compile(request.filter_pattern, re.IGNORECASE)
        except re.error as e:
            raise ConfigurationError(
                f"Invalid filter pattern {request.filter_pattern!r}: {e}"
            ) from e
        selected = [
            link for link in selected
            if regex.search(link.text) or regex.search(link.url)
        ]

    start_index = 1 if request.start_index is None else request.start_index
    if start_index < 1:
        raise ConfigurationError(f"Start index must be 1 or greater, got {start_index}")
    if start_index > 1:
        if start_index > len(selected):
            raise ConfigurationError(
                f"Start index {start_index} is greater than available links ({len(selected)})"
            )
        selected = selected[start_index - 1:]

    if request.max_pages is not None:
        if request.max_pages < 1:
            raise ConfigurationError(f"Max pages must be 1 or greater, got {request.max_pages}")
        selected = selected[:request.max_pages]

    return [(start_index + offset, link) for offset, link in enumerate(selected)]


class DocsCrawler:
    """
    Harvests documentation pages into PDF and text artifacts.

    Pages are processed strictly one after another through the session's
    single page. A failing page is retried with growing backoff and, once
    its attempts are spent, reported as a :class:`CrawlFailure` without
    stopping the batch.
    """

    def __init__(
        self,
        session: BrowserSession,
        output_dir: str = constants.DEFAULT_OUTPUT_DIR,
        strategy: str = constants.DEFAULT_STRATEGY,
        delay: float = constants.DEFAULT_CRAWL_DELAY,
        retry_delay: float = constants.DEFAULT_RETRY_DELAY,
        rules: Optional[ExtractionRules] = None,
        profile: Optional[SiteProfile] = None,
        extractor: Optional[ContentExtractor] = None,
        navigator: Optional[NavigationDiscoverer] = None,
        renderer: Optional[ArtifactRenderer] = None
    ):
        """
        Initialize the crawler.

        Args:
            session: Open browser session shared by every page
            output_dir: Directory receiving the artifacts
            strategy: PDF strategy ('basic', 'enhanced', 'clean')
            delay: Seconds to wait between successfully crawled pages
            retry_delay: Backoff base in seconds
            rules: Content extraction rules
            profile: Sidebar navigation conventions
            extractor: Replacement content extractor
            navigator: Replacement navigation discoverer
            renderer: Replacement artifact renderer
        """
        self.session = session
        self.output_dir = os.path.abspath(output_dir)
        self.delay = delay
        self.timeout = session.config.timeout
        self.retry_policy = RetryPolicy(
            attempts=session.config.retries,
            base_delay=retry_delay
        )
        self.logger = get_logger("crawler")

        rules = rules or ExtractionRules()
        self.extractor = extractor or ContentExtractor(rules)
        self.navigator = navigator or NavigationDiscoverer(self.timeout, profile)
        self.renderer = renderer or ArtifactRenderer(session, self.output_dir, strategy, rules)

    async def discover(self, base_url: str) -> List[NavigationLink]:
        """List the sidebar links shown on a base page."""
        return await self.navigator.discover_links(self.session.page, base_url)

    async def crawl_page(self, url: str, index: Optional[int] = None) -> CrawlResult:
        """
        Harvest one page, retrying on failure.

        Args:
            url: Page URL
            index: Optional 1-based batch index for file names

        Returns:
            CrawlSuccess, or CrawlFailure carrying the last error message
        """
        policy = self.retry_policy
        last_error: Optional[Exception] = None

        for attempt in range(1, policy.attempts + 1):
            try:
                return await self._crawl_once(url, index, attempt)
            except Exception as e:
                last_error = e
                self.logger.warning(
                    f"Error crawling {url} (attempt {attempt}/{policy.attempts}): {e}"
                )
                if policy.should_retry(attempt):
                    wait = policy.delay_for(attempt)
                    self.logger.info(f"Retrying in {wait:.1f}s ({attempt + 1}/{policy.attempts})")
                    await asyncio.sleep(wait)

        self.logger.error(f"Giving up on {url} after {policy.attempts} attempts")
        return CrawlFailure(url=url, error=str(last_error), index=index)

    async def _crawl_once(self, url: str, index: Optional[int], attempt: int) -> CrawlSuccess:
        page = self.session.page
        self.logger.info(f"Crawling: {url} (attempt {attempt})")

        await page.goto(url, wait_until="networkidle", timeout=self.timeout)
        await self.session.log_cookies_for(url)

        region = await self.extractor.wait_for_content(page)
        content = await self.extractor.extract(page)

        self.logger.debug(
            f"Waited for {region}, extracted with {content.selector_used or 'body'}: "
            f"{len(content.text)} characters, primary found: {content.primary_found} "
            f"({content.primary_length} characters)"
        )
        self.logger.debug(f"Content preview: {content.text[:200]}...")

        artifacts = await self.renderer.render(page, content, url=url, index=index)

        self.logger.info(f"Successfully processed: {url}")
        return CrawlSuccess(
            url=url,
            title=content.title,
            artifacts=artifacts,
            content=content,
            index=index,
        )

    async def crawl_pages(self, urls: Sequence[str], start_index: int = 1) -> List[CrawlResult]:
        """
        Harvest a list of pages in order.

        Args:
            urls: Page URLs
            start_index: Batch index of the first URL

        Returns:
            One result per URL, in input order
        """
        results: List[CrawlResult] = []

        for offset, url in enumerate(urls):
            index = start_index + offset
            self.logger.info(f"Processing page {offset + 1}/{len(urls)} (index: {index})")

            result = await self.crawl_page(url, index)
            results.append(result)

            # Rate limiting
            if result.ok and offset < len(urls) - 1:
                self.logger.debug(f"Waiting {self.delay}s before next request...")
                await asyncio.sleep(self.delay)

        self._write_error_log(results)
        return results

    async def crawl_from_navigation(
        self,
        base_url: str,
        request: Optional[CrawlRequest] = None
    ) -> List[CrawlResult]:
        """
        Discover the sidebar links of a base page and harvest them.

        Args:
            base_url: Documentation page showing the sidebar
            request: Filter, start index and page cap

        Returns:
            One result per selected link, in navigation order

        Raises:
            NavigationNotFoundError: If the sidebar cannot be found
            ConfigurationError: On an invalid filter or bounds
        """
        request = request or CrawlRequest()
        links = await self.discover(base_url)

        if not links:
            print_warning("No navigation links found")
            return []

        selected = select_links(links, request)
        if not selected:
            print_warning("No navigation links left to crawl")
            return []

        first_index = selected[0][0]
        print_info(
            f"Crawling {len(selected)} pages from navigation "
            f"(indexes {first_index}-{selected[-1][0]} of {len(links)} links)"
        )
        return await self.crawl_pages([link.url for _, link in selected], first_index)

    def _write_error_log(self, results: Sequence[CrawlResult]) -> None:
        """Write errors.json listing failed pages, if there are any."""
        failures = [r for r in results if not r.ok]
        if not failures:
            return

        os.makedirs(self.output_dir, exist_ok=True)
        errors_path = os.path.join(self.output_dir, ERROR_LOG_NAME)
        with open(errors_path, 'w', encoding='utf-8') as f:
            json.dump(
                [{"index": r.index, "url": r.url, "error": r.error} for r in failures],
                f,
                indent=2,
                ensure_ascii=False
            )

        self.logger.info(f"Generated error log: {errors_path}")
