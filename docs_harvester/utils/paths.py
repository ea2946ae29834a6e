"""
Path and URL utilities for the harvester.

Provides URL validation, artifact file naming, and directory management.
"""

import os
import re
from datetime import date
from typing import Optional
from urllib.parse import urlparse, urljoin


def validate_url(url: str) -> str:
    """
    Validate and normalize an input URL.

    Args:
        url: URL string to validate

    Returns:
        Normalized URL string

    Raises:
        ValueError: If URL is invalid
    """
    url = url.strip()

    # Add protocol if missing
    if not url.startswith(('http://', 'https://')):
        url = 'https://' + url

    parsed = urlparse(url)
    if not parsed.netloc:
        raise ValueError(f"Invalid URL: {url}")

    return url


def resolve_url(href: str, base_url: str) -> str:
    """
    Resolve a link target against the page it was found on.

    Args:
        href: Raw href attribute value
        base_url: URL of the page containing the link

    Returns:
        Absolute URL string
    """
    return urljoin(base_url, href.strip())


def slugify_path(url: str, default_name: str = "page") -> str:
    """
    Turn the path of a URL into a flat, filesystem-safe name.

    Path segments are joined with '-' and every character outside
    ``[A-Za-z0-9-]`` becomes '-'.

    Args:
        url: URL to convert
        default_name: Name used when the URL has no path

    Returns:
        Slug string
    """
    segments = [segment for segment in urlparse(url).path.split('/') if segment]
    if not segments:
        return default_name
    return re.sub(r'[^a-zA-Z0-9-]', '-', '-'.join(segments))


def artifact_stem(
    url: str,
    index: Optional[int] = None,
    on: Optional[date] = None
) -> str:
    """
    Build the extension-less file name shared by a page's artifacts.

    The stem is ``[<index>-]<slug>-<YYYY-MM-DD>`` so re-running on the same
    day overwrites files and batch output sorts by index.

    Args:
        url: Page URL
        index: Optional 1-based batch index
        on: Generation date (default: today)

    Returns:
        File name stem
    """
    on = on or date.today()
    prefix = f"{index}-" if index is not None else ""
    return f"{prefix}{slugify_path(url)}-{on.isoformat()}"


def ensure_dir(path: str) -> None:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists
    """
    os.makedirs(path, exist_ok=True)
