# goldwatch/scrapers/fetcher.py

"""Single-shot page fetcher for the GTA homepage."""

import logging

from bs4 import BeautifulSoup
from curl_cffi import requests as curl_requests

from goldwatch.config.settings import Settings
from goldwatch.scrapers.errors import FetchError


class PageFetcher:
    """Issue one bounded GET per call and parse the body with lxml.

    No retries: a failed fetch raises :class:`FetchError` and the
    poller tries again on its next tick.
    """

    def __init__(self, timeout: int | None = None) -> None:
        self.logger = logging.getLogger("goldwatch.fetcher")
        self.settings = Settings()
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._request_timeout: int = (
            timeout
            if timeout is not None
            else self.settings.REQUEST_TIMEOUT
        )

    def _headers(self) -> dict[str, str]:
        return {
            **self.settings.DEFAULT_HEADERS,
            "User-Agent": self.settings.USER_AGENT,
        }

    def fetch(self, url: str) -> BeautifulSoup:
        """GET *url* and return the parsed document.

        Raises:
            FetchError: on a non-200 status or any transport failure.
        """
        try:
            resp = self.session.get(
                url,
                headers=self._headers(),
                timeout=self._request_timeout,
            )
        except Exception as exc:
            self.logger.warning(
                "Request to %s failed: %s", url, exc,
            )
            raise FetchError(url, cause=exc) from exc

        if resp.status_code != 200:
            self.logger.warning(
                "HTTP %d from %s", resp.status_code, url,
            )
            raise FetchError(url, status=resp.status_code)

        self.logger.debug(
            "Fetched %s (%d bytes)", url, len(resp.text),
        )
        return BeautifulSoup(resp.text, "lxml")

    def close(self) -> None:
        """Release the underlying HTTP session."""
        self.session.close()
