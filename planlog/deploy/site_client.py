"""HTTP probe for a published static site."""

import hashlib
import logging
import time
from dataclasses import dataclass
from typing import Optional

import requests

from .. import __version__
from .exceptions import SiteConfigError, SiteConnectionError, SiteTimeoutError

logger = logging.getLogger(__name__)


@dataclass
class SiteCheck:
    """Outcome of one request to the site."""

    url: str
    status_code: int
    elapsed: float
    digest: str
    content_type: str = ""
    contains_expected: bool = True

    @property
    def is_live(self) -> bool:
        """The page is served and contains the expected text."""
        return self.status_code == 200 and self.contains_expected

    def describe(self) -> str:
        if self.is_live:
            return f"HTTP {self.status_code}, page live ({self.elapsed:.2f}s)"
        if self.status_code != 200:
            return f"HTTP {self.status_code}"
        return f"HTTP {self.status_code}, expected text not found"


class StaticSiteClient:
    """Client for checking that a static site serves the expected page."""

    def __init__(self, timeout: float = 10, user_agent: Optional[str] = None):
        """Initialize the site client.

        Args:
            timeout: Per-request timeout in seconds
            user_agent: User-Agent header, defaults to ``planlog/<version>``
        """
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers["User-Agent"] = user_agent or f"planlog/{__version__}"
        # Static hosts and CDNs cache aggressively; ask for a fresh copy
        self.session.headers["Cache-Control"] = "no-cache"

    def fetch(self, url: str, expected_text: Optional[str] = None) -> SiteCheck:
        """Request the page once.

        HTTP error statuses are reported in the result, not raised.

        Raises:
            SiteConfigError: If the URL is not http(s)
            SiteTimeoutError: If the request times out
            SiteConnectionError: If the site cannot be reached
        """
        if not url or not url.startswith(("http://", "https://")):
            raise SiteConfigError(f"Site URL must be an http(s) URL: {url!r}")

        start = time.monotonic()
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise SiteTimeoutError(f"Request to {url} timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            raise SiteConnectionError(f"Connection to {url} failed: {e}") from e
        elapsed = time.monotonic() - start

        body = response.content or b""
        contains_expected = True
        if expected_text:
            contains_expected = expected_text in response.text

        check = SiteCheck(
            url=url,
            status_code=response.status_code,
            elapsed=elapsed,
            digest=hashlib.sha256(body).hexdigest(),
            content_type=response.headers.get("Content-Type", ""),
            contains_expected=contains_expected,
        )
        logger.debug(f"GET {url}: {check.describe()}")
        return check

    def check(self, url: str, expected_text: Optional[str] = None) -> SiteCheck:
        """Request the page and check for the expected text."""
        return self.fetch(url, expected_text)

    def is_reachable(self, url: str) -> bool:
        """True when the site answers with HTTP 200; never raises."""
        try:
            return self.fetch(url).status_code == 200
        except (SiteConnectionError, SiteTimeoutError, SiteConfigError):
            return False
