"""Wait for a CI workflow to publish the site."""

import logging
import time
from typing import Any, Callable, Dict, Optional

from ..core.error_handling import DeployTimeoutError
from .exceptions import SiteConnectionError, SiteTimeoutError
from .site_client import SiteCheck, StaticSiteClient

logger = logging.getLogger(__name__)


class DeployMonitor:
    """Polls the site until the published page is live."""

    def __init__(
        self,
        client: Optional[StaticSiteClient] = None,
        interval: float = 15,
        timeout: float = 600,
        status_callback: Optional[Callable[[Dict[str, Any]], None]] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize deploy monitor.

        Args:
            client: Site client used for each poll
            interval: Seconds between polls
            timeout: Seconds to wait before giving up
            status_callback: Optional callback for status updates
            clock: Monotonic clock, replaceable in tests
            sleep: Sleep function, replaceable in tests
        """
        self.client = client or StaticSiteClient()
        self.interval = interval
        self.timeout = timeout
        self.status_callback = status_callback
        self._clock = clock
        self._sleep = sleep

    def _is_published(self, check: SiteCheck, baseline_digest: Optional[str]) -> bool:
        if not check.is_live:
            return False
        return baseline_digest is None or check.digest != baseline_digest

    def _describe(self, check: SiteCheck, baseline_digest: Optional[str]) -> str:
        if check.is_live and baseline_digest and check.digest == baseline_digest:
            return "previous build still served"
        return check.describe()

    def _notify(self, status: Dict[str, Any]) -> None:
        if self.status_callback:
            self.status_callback(status)

    def wait_until_live(
        self,
        url: str,
        expected_text: Optional[str] = None,
        baseline_digest: Optional[str] = None,
    ) -> SiteCheck:
        """Poll until the page is live.

        Args:
            url: Published site URL
            expected_text: Text the page must contain
            baseline_digest: Digest of the page before the push; when given the
                page must differ from it

        Returns:
            The first check that found the page published

        Raises:
            DeployTimeoutError: If the page is not published within the timeout
        """
        start = self._clock()
        attempt = 0
        last_check: Optional[SiteCheck] = None
        last_state: Optional[str] = None

        while True:
            attempt += 1
            elapsed = self._clock() - start

            try:
                check = self.client.check(url, expected_text)
                state = self._describe(check, baseline_digest)
                last_check = check
            except (SiteConnectionError, SiteTimeoutError) as e:
                check = None
                state = f"unreachable: {e}"
                logger.warning(f"Site not reachable yet: {e}")

            if state != last_state:
                logger.info(f"[{elapsed:5.0f}s] {url}: {state}")
                last_state = state
            self._notify(
                {
                    "attempt": attempt,
                    "elapsed": elapsed,
                    "state": state,
                    "check": check,
                }
            )

            if check is not None and self._is_published(check, baseline_digest):
                return check

            if elapsed >= self.timeout:
                raise DeployTimeoutError(
                    f"{url} not published after {elapsed:.0f}s "
                    f"({attempt} attempts, last state: {state})",
                    last_check=last_check,
                    details={"url": url, "attempts": attempt},
                )

            self._sleep(min(self.interval, self.timeout - elapsed))
