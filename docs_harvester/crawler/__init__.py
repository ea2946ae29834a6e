"""
Crawler module for documentation harvesting.

Contains components for browser sessions, navigation discovery, content
extraction, artifact rendering and crawl orchestration.
"""

from .crawler import DocsCrawler, select_links
from .session import BrowserSession, load_credentials
from .navigation import NavigationDiscoverer, parse_navigation_links
from .extractor import ContentExtractor, extract_content
from .renderer import ArtifactRenderer
from .models import (
    ArtifactPaths,
    Credential,
    CrawlFailure,
    CrawlRequest,
    CrawlResult,
    CrawlSuccess,
    ExtractionRules,
    NavigationLink,
    PageContent,
    SessionConfig,
    SiteProfile,
)

__all__ = [
    "DocsCrawler",
    "select_links",
    "BrowserSession",
    "load_credentials",
    "NavigationDiscoverer",
    "parse_navigation_links",
    "ContentExtractor",
    "extract_content",
    "ArtifactRenderer",
    "ArtifactPaths",
    "Credential",
    "CrawlFailure",
    "CrawlRequest",
    "CrawlResult",
    "CrawlSuccess",
    "ExtractionRules",
    "NavigationLink",
    "PageContent",
    "SessionConfig",
    "SiteProfile",
]
