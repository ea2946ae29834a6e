"""
Exception types raised by the harvester.

Session and discovery errors are fatal to a run; extraction and render
errors only fail the current page attempt and feed the retry loop.
"""


class HarvesterError(Exception):
    """Base class for all harvester errors."""


class ConfigurationError(HarvesterError):
    """Invalid credentials file, filter pattern or batch bounds."""


class AuthenticationError(HarvesterError):
    """The browser rejected one of the supplied credentials."""


class NavigationNotFoundError(HarvesterError):
    """The sidebar navigation container never appeared on the base page."""


class ExtractionError(HarvesterError):
    """The page never reached a minimally loaded state."""


class RenderError(HarvesterError):
    """A PDF or transcript artifact could not be written."""
