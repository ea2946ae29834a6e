"""
Utility modules for the harvester.

Contains logging, errors, path handling utilities, and constants.
"""

from .log import setup_logger, get_logger, redact
from .paths import validate_url, resolve_url, artifact_stem, ensure_dir
from .errors import (
    HarvesterError,
    ConfigurationError,
    AuthenticationError,
    NavigationNotFoundError,
    ExtractionError,
    RenderError,
)
from .constants import (
    DEFAULT_USER_AGENT,
    DEFAULT_PAGE_TIMEOUT,
    DEFAULT_RETRIES,
    DEFAULT_CRAWL_DELAY,
    DEFAULT_STRATEGY,
    PDF_STRATEGIES,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "redact",
    "validate_url",
    "resolve_url",
    "artifact_stem",
    "ensure_dir",
    "HarvesterError",
    "ConfigurationError",
    "AuthenticationError",
    "NavigationNotFoundError",
    "ExtractionError",
    "RenderError",
    "DEFAULT_USER_AGENT",
    "DEFAULT_PAGE_TIMEOUT",
    "DEFAULT_RETRIES",
    "DEFAULT_CRAWL_DELAY",
    "DEFAULT_STRATEGY",
    "PDF_STRATEGIES",
]
