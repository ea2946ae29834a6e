"""
Content extractor for locating a page's primary text.

Uses BeautifulSoup over the rendered HTML snapshot to pick the content
region by selector priority, and Playwright to wait for the page and expand
collapsed sections before the snapshot is taken.
"""

import asyncio
import dataclasses
import math
import re
from typing import Iterable, List, Optional

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from playwright.async_api import Page, Error as PlaywrightError, TimeoutError as PlaywrightTimeout

from .models import Block, ExtractionRules, PageContent
from ..utils import constants
from ..utils.errors import ExtractionError
from ..utils.log import get_logger


WHITESPACE_PATTERN = re.compile(r'\s+')

HEADING_TAGS = ('h1', 'h2', 'h3', 'h4', 'h5', 'h6')
LIST_TAGS = ('ul', 'ol')
BLOCK_TAGS = HEADING_TAGS + LIST_TAGS + ('p', 'pre')

# Tags whose text runs on inside the surrounding paragraph
INLINE_TAGS = (
    'a', 'abbr', 'b', 'br', 'code', 'em', 'i', 'img', 'kbd', 'mark',
    's', 'small', 'span', 'strong', 'sub', 'sup', 'u',
)

logger = get_logger("extractor")


def collapse_whitespace(text: str) -> str:
    """Collapse every whitespace run to a single space and trim."""
    return WHITESPACE_PATTERN.sub(' ', text or '').strip()


def strip_boilerplate(text: str, markers: Iterable[str] = constants.BOILERPLATE_MARKERS) -> str:
    """
    Cut the text at the first occurrence of each boilerplate marker.

    Everything from the marker to the end of the string is dropped, one
    marker after another. Applying it twice changes nothing.

    Args:
        text: Whitespace-collapsed page text
        markers: Literal marker strings

    Returns:
        Text with trailing boilerplate removed
    """
    text = collapse_whitespace(text)
    for marker in markers:
        position = text.find(marker)
        if position != -1:
            text = text[:position]
    return collapse_whitespace(text)


def reading_time(text: str) -> int:
    """Minutes needed to read the text at 200 words per minute, rounded up."""
    return math.ceil(len(text.split()) / constants.WORDS_PER_MINUTE)


def _element_text(element: Tag) -> str:
    return collapse_whitespace(element.get_text(' '))


def _meta_content(soup: BeautifulSoup, name: str) -> str:
    meta = soup.find('meta', attrs={'name': name})
    if meta is None:
        return ""
    return collapse_whitespace(meta.get('content', ''))


def _cut_at_marker(text: str, markers: Iterable[str]):
    """Return the text up to its earliest marker and whether one was found."""
    positions = [text.find(marker) for marker in markers if marker and marker in text]
    if not positions:
        return text, False
    return text[:min(positions)].rstrip(), True


def _element_block(element: Tag) -> Optional[Block]:
    if element.name in HEADING_TAGS:
        text = _element_text(element)
        return Block(kind="heading", text=text, level=int(element.name[1])) if text else None

    if element.name in LIST_TAGS:
        items = [_element_text(item) for item in element.find_all('li', recursive=False)]
        items = [item for item in items if item]
        if not items:
            return None
        return Block(kind="list", items=items, ordered=element.name == 'ol')

    if element.name == 'pre':
        text = element.get_text().strip('\n')
        return Block(kind="code", text=text) if text.strip() else None

    text = _element_text(element)
    return Block(kind="paragraph", text=text) if text else None


def _collect_blocks(element: Tag, blocks: List[Block], pending: List[str]) -> None:
    def flush():
        text = collapse_whitespace(' '.join(pending))
        pending.clear()
        if text:
            blocks.append(Block(kind="paragraph", text=text))

    for child in element.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString):
            pending.append(str(child))
        elif child.name in BLOCK_TAGS:
            flush()
            block = _element_block(child)
            if block is not None:
                blocks.append(block)
        elif child.find(list(BLOCK_TAGS)) is not None:
            flush()
            _collect_blocks(child, blocks, pending)
            flush()
        elif child.name in INLINE_TAGS:
            pending.append(child.get_text(' '))
        else:
            flush()
            pending.append(child.get_text(' '))
            flush()

    flush()


def extract_blocks(region: Tag, markers: Iterable[str] = ()) -> List[Block]:
    """
    Split a content region into heading, paragraph, list and code blocks.

    ``h1``-``h6``, ``p``, ``ul``/``ol`` and ``pre`` map to their block
    kinds; loose text between them becomes paragraphs. Blocks end where the
    first boilerplate marker appears, like the collapsed text does.

    Args:
        region: Element chosen by :func:`select_content_region`
        markers: Literal boilerplate marker strings

    Returns:
        Blocks in document order
    """
    blocks: List[Block] = []
    _collect_blocks(region, blocks, [])

    markers = list(markers)
    kept: List[Block] = []
    for block in blocks:
        found = False
        if block.kind == "list":
            items = []
            for item in block.items:
                item, found = _cut_at_marker(item, markers)
                if item:
                    items.append(item)
                if found:
                    break
            if items:
                kept.append(dataclasses.replace(block, items=items))
        else:
            text, found = _cut_at_marker(block.text, markers)
            if text.strip():
                kept.append(dataclasses.replace(block, text=text))
        if found:
            break
    return kept


def select_content_region(soup: BeautifulSoup, rules: ExtractionRules):
    """
    Choose the element holding the page's article text.

    Returns:
        Tuple of (element, selector used). The selector is None when the
        chrome-stripped body was used.
    """
    primary = soup.select_one(rules.primary_selector)
    if primary is not None and len(_element_text(primary)) > rules.min_length:
        return primary, rules.primary_selector

    for selector in rules.fallback_selectors:
        element = soup.select_one(selector)
        if element is not None and len(_element_text(element)) > rules.min_length:
            return element, selector

    body = soup.body or soup
    for element in body.select(', '.join(rules.chrome_selectors)):
        element.extract()
    return body, None


def extract_content(
    html: str,
    url: str,
    rules: Optional[ExtractionRules] = None
) -> PageContent:
    """
    Extract title, body text and metadata from a rendered HTML document.

    Thin pages are returned as they are; this never fails for lack of text.

    Args:
        html: Rendered page HTML
        url: URL the HTML was loaded from
        rules: Selector and boilerplate tables

    Returns:
        PageContent for the page
    """
    rules = rules or ExtractionRules()
    soup = BeautifulSoup(html, 'lxml')

    for element in soup.find_all(list(constants.INVISIBLE_TAGS)):
        element.decompose()

    title = collapse_whitespace(soup.title.get_text()) if soup.title else ""
    description = _meta_content(soup, 'description')
    keywords = _meta_content(soup, 'keywords')
    author = _meta_content(soup, 'author')

    primary = soup.select_one(rules.primary_selector)
    primary_length = len(_element_text(primary)) if primary is not None else 0

    region, selector_used = select_content_region(soup, rules)
    text = strip_boilerplate(_element_text(region), rules.boilerplate_markers)
    blocks = extract_blocks(region, rules.boilerplate_markers)

    logger.debug(
        f"Extracted {len(text)} characters from {url} "
        f"using {selector_used or 'body'} in {len(blocks)} blocks (primary length: {primary_length})"
    )

    return PageContent(
        url=url,
        title=title,
        text=text,
        description=description,
        keywords=keywords,
        author=author,
        reading_time=reading_time(text),
        selector_used=selector_used,
        primary_found=primary is not None,
        primary_length=primary_length,
        blocks=blocks,
    )


class ContentExtractor:
    """
    Prepares a loaded page and extracts its primary content.

    Waits for a content region to appear, force-expands collapsed sections
    inside it, then snapshots the DOM for :func:`extract_content`.
    """

    def __init__(
        self,
        rules: Optional[ExtractionRules] = None,
        expand_settle: float = constants.EXPAND_SETTLE,
        final_settle: float = constants.EXPAND_FINAL_SETTLE
    ):
        """
        Initialize the content extractor.

        Args:
            rules: Selector and boilerplate tables
            expand_settle: Seconds to wait after expanding one section
            final_settle: Seconds to wait after all sections are expanded
        """
        self.rules = rules or ExtractionRules()
        self.expand_settle = expand_settle
        self.final_settle = final_settle

    async def wait_for_content(self, page: Page) -> str:
        """
        Wait until the page shows a content region, then expand it.

        Args:
            page: Page that has been navigated to

        Returns:
            CSS selector of the region that appeared ('body' if none did)

        Raises:
            ExtractionError: If the page never renders meaningful text
        """
        try:
            await page.wait_for_selector(
                self.rules.primary_selector,
                timeout=constants.PRIMARY_WAIT_TIMEOUT
            )
            logger.debug(f"Found {self.rules.primary_selector}, using it for content")
            region = self.rules.primary_selector
        except PlaywrightTimeout:
            logger.debug(f"{self.rules.primary_selector} not found, trying other selectors")
            region = await self._wait_for_fallback(page)

        await self.expand_sections(page, region)
        return region

    async def _wait_for_fallback(self, page: Page) -> str:
        try:
            await page.wait_for_selector(
                ', '.join(self.rules.fallback_selectors),
                timeout=constants.FALLBACK_WAIT_TIMEOUT
            )
        except PlaywrightTimeout:
            return await self._wait_for_body_text(page)

        for selector in self.rules.fallback_selectors:
            if await page.query_selector(selector) is not None:
                logger.debug(f"Found content with selector: {selector}")
                return selector
        return "body"

    async def _wait_for_body_text(self, page: Page) -> str:
        try:
            await page.wait_for_function(
                "(minLength) => !!document.body && document.body.innerText.length > minLength",
                arg=self.rules.min_length,
                timeout=constants.BODY_TEXT_WAIT_TIMEOUT
            )
        except PlaywrightTimeout as e:
            raise ExtractionError(f"Page never rendered any content: {page.url}") from e
        return "body"

    async def expand_sections(self, page: Page, region: str = "body") -> int:
        """
        Click every collapsed accordion/collapse control inside a region.

        Controls already reporting ``aria-expanded="true"`` are left alone.
        A control that cannot be clicked is logged and skipped.

        Args:
            page: Loaded page
            region: CSS selector of the region to search in

        Returns:
            Number of controls that were clicked
        """
        if not self.rules.expandable_selectors:
            return 0

        # A selector list returns each matching element once
        selector_list = ", ".join(
            f"{region} {selector}" for selector in self.rules.expandable_selectors
        )
        try:
            controls = await page.query_selector_all(selector_list)
        except PlaywrightError as e:
            logger.warning(f"Error looking for collapsed sections: {e.message}")
            return 0

        if not controls:
            logger.debug("No collapsible sections found on this page")
            return 0

        expanded = 0
        for position, control in enumerate(controls, 1):
            try:
                if await control.get_attribute("aria-expanded") == "true":
                    continue

                await control.scroll_into_view_if_needed()
                await control.click()
                expanded += 1
                await asyncio.sleep(self.expand_settle)
            except PlaywrightError as e:
                logger.warning(f"Could not expand section {position}/{len(controls)}: {e.message}")

        await asyncio.sleep(self.final_settle)
        logger.debug(f"Expanded {expanded} of {len(controls)} sections")
        return expanded

    async def extract(self, page: Page) -> PageContent:
        """
        Snapshot the page and extract its content.

        Args:
            page: Prepared page

        Returns:
            PageContent for the page
        """
        html = await page.content()
        return extract_content(html, page.url, self.rules)
