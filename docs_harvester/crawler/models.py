"""
Data containers shared by the harvester components.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from ..utils import constants


@dataclass(frozen=True)
class Credential:
    """One authentication cookie applied to the browser context."""

    name: str
    value: str
    domain: str
    path: str
    http_only: Optional[bool] = None
    secure: Optional[bool] = None
    same_site: Optional[str] = None

    def to_cookie(self) -> Dict[str, Any]:
        """Convert to the mapping Playwright's ``add_cookies`` expects."""
        cookie: Dict[str, Any] = {
            "name": self.name,
            "value": self.value,
            "domain": self.domain,
            "path": self.path,
        }
        if self.http_only is not None:
            cookie["httpOnly"] = self.http_only
        if self.secure is not None:
            cookie["secure"] = self.secure
        if self.same_site is not None:
            cookie["sameSite"] = self.same_site
        return cookie


@dataclass
class SessionConfig:
    """Identity and limits for one browsing session."""

    user_agent: str = constants.DEFAULT_USER_AGENT
    headers: Dict[str, str] = field(default_factory=lambda: dict(constants.DEFAULT_HEADERS))
    credentials: List[Credential] = field(default_factory=list)
    timeout: int = constants.DEFAULT_PAGE_TIMEOUT
    retries: int = constants.DEFAULT_RETRIES
    headless: bool = True
    viewport: Dict[str, int] = field(default_factory=lambda: dict(constants.DEFAULT_VIEWPORT))


@dataclass
class ExtractionRules:
    """Selector priority and boilerplate tables for content extraction."""

    primary_selector: str = constants.PRIMARY_CONTENT_SELECTOR
    fallback_selectors: Tuple[str, ...] = constants.FALLBACK_CONTENT_SELECTORS
    chrome_selectors: Tuple[str, ...] = constants.CHROME_SELECTORS
    boilerplate_markers: Tuple[str, ...] = constants.BOILERPLATE_MARKERS
    expandable_selectors: Tuple[str, ...] = constants.EXPANDABLE_SELECTORS
    min_length: int = constants.MIN_CONTENT_LENGTH


@dataclass
class SiteProfile:
    """Markup conventions of the site's sidebar navigation."""

    container_selector: str = constants.NAVIGATION_CONTAINER_SELECTOR
    root_prefix: str = constants.DOCS_ROOT_PREFIX
    excluded_fragments: Tuple[str, ...] = constants.EXCLUDED_PATH_FRAGMENTS
    back_link_text: str = constants.BACK_LINK_TEXT
    brand_name: str = constants.BRAND_NAME


@dataclass
class Block:
    """One unit of document content."""

    kind: str  # 'heading', 'paragraph', 'list' or 'code'
    text: str = ""
    level: int = 1
    items: List[str] = field(default_factory=list)
    ordered: bool = False


@dataclass
class PageContent:
    """
    Text and metadata extracted from one page.

    ``text`` is the whitespace-collapsed body; ``blocks`` keeps the same
    content split into headings, paragraphs, lists and code.
    """

    url: str
    title: str
    text: str
    description: str = ""
    keywords: str = ""
    author: str = ""
    reading_time: int = 0
    selector_used: Optional[str] = None
    primary_found: bool = False
    primary_length: int = 0
    blocks: List[Block] = field(default_factory=list)


@dataclass
class NavigationLink:
    """A documentation page listed in the sidebar."""

    href: str
    text: str
    url: str


@dataclass
class CrawlRequest:
    """Selection of navigation links for a batch run."""

    max_pages: Optional[int] = None
    filter_pattern: Optional[str] = None
    start_index: int = 1


@dataclass
class ArtifactPaths:
    """Files written for one page."""

    pdf_path: str
    text_path: str


@dataclass
class CrawlSuccess:
    """A page that was harvested."""

    url: str
    title: str
    artifacts: ArtifactPaths
    content: PageContent
    index: Optional[int] = None

    ok = True


@dataclass
class CrawlFailure:
    """A page that failed after all retries."""

    url: str
    error: str
    index: Optional[int] = None

    ok = False


CrawlResult = Union[CrawlSuccess, CrawlFailure]
