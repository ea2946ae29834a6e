"""
Docs Harvester - capture a documentation site into offline PDF and text files.

This package discovers the pages listed in a documentation site's sidebar,
renders each one with Playwright, extracts its primary text content and
saves a PDF document plus a plain-text transcript per page.
"""

__version__ = "1.0.0"
__author__ = "Docs Harvester Team"
