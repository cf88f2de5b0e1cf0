"""Static site probe exceptions."""


class SiteError(Exception):
    """Base exception for static site operations."""

    pass


class SiteConnectionError(SiteError):
    """Raised when the site cannot be reached."""

    pass


class SiteTimeoutError(SiteError):
    """Raised when a request to the site times out."""

    pass


class SiteConfigError(SiteError):
    """Raised when no usable site URL is configured."""

    pass
