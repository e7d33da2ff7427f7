from __future__ import annotations

import logging
from typing import Dict, Optional

import httpx
from selectolax.parser import HTMLParser
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .settings import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """Non-2xx response or network failure for a single URL."""

    def __init__(self, url: str, status: Optional[int] = None, detail: Optional[str] = None) -> None:
        self.url = url
        self.status = status
        msg = f"Failed to fetch {url}: {status if status is not None else detail or 'network error'}"
        super().__init__(msg)


class TransientFetchError(FetchError):
    """Timeouts, connection errors, 429 and 5xx: worth another attempt."""


class Fetcher:
    """Polite HTTP client for pages, sitemaps and PDFs.

    One httpx.Client is shared for the whole run. Pass `client` to inject a
    preconfigured one (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        *,
        timeout: float = 20.0,
        retries: int = 2,
        backoff: float = 0.5,
        user_agent: str = DEFAULT_USER_AGENT,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.timeout = float(timeout)
        self.retries = max(0, int(retries))
        self.backoff = float(backoff)
        self.headers: Dict[str, str] = {"User-Agent": user_agent}
        self._owns_client = client is None
        # Built up front: worker threads share this one client.
        self.client: httpx.Client = (
            client
            if client is not None
            else httpx.Client(timeout=self.timeout, headers=self.headers, follow_redirects=True)
        )

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # --- Public API ---
    def fetch_page(self, url: str) -> HTMLParser:
        return HTMLParser(self.fetch_text(url))

    def fetch_text(self, url: str) -> str:
        return self._get(url).text

    def fetch_pdf_buffer(self, url: str) -> bytes:
        return self._get(url).content

    # --- Internals ---
    def _get(self, url: str) -> httpx.Response:
        retrying = Retrying(
            stop=stop_after_attempt(self.retries + 1),
            wait=wait_exponential(multiplier=self.backoff, max=10),
            retry=retry_if_exception_type(TransientFetchError),
            reraise=True,
        )
        return retrying(self._get_once, url)

    def _get_once(self, url: str) -> httpx.Response:
        try:
            resp = self.client.get(url, headers=self.headers, timeout=self.timeout)
        except httpx.TransportError as exc:
            logger.debug("Transport error for %s: %s", url, exc)
            raise TransientFetchError(url, None, str(exc) or type(exc).__name__) from exc
        status = resp.status_code
        if status == 429 or status >= 500:
            logger.debug("Transient HTTP %s for %s", status, url)
            raise TransientFetchError(url, status)
        if not (200 <= status < 300):
            raise FetchError(url, status)
        return resp
