"""httpx-based fetcher: the only network I/O primitive of the pipeline.

Content sites reject requests that do not look like a browser navigating
their own pages, so every request carries browser headers and a
``Referer`` pointing at the target's own origin.
"""

from __future__ import annotations

from typing import Mapping
from urllib.parse import urlparse

import httpx
import structlog

from cinestream.domain.exceptions import NetworkError
from cinestream.infrastructure.config.defaults import DEFAULT_USER_AGENT

log = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 15.0
DEFAULT_MAX_REDIRECTS = 5

_BROWSER_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
}


def origin_of(url: str) -> str:
    """``https://site.tld/a/b?c`` -> ``https://site.tld``."""
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"not an absolute URL: {url!r}")
    return f"{parsed.scheme}://{parsed.netloc}"


def build_headers(
    url: str,
    user_agent: str = DEFAULT_USER_AGENT,
    overrides: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Browser-like request headers for *url*, *overrides* applied last."""
    headers = {"User-Agent": user_agent, **_BROWSER_HEADERS}
    headers["Referer"] = origin_of(url)
    if overrides:
        headers.update(overrides)
    return headers


def create_http_client(
    *,
    timeout: float = DEFAULT_TIMEOUT,
    max_redirects: int = DEFAULT_MAX_REDIRECTS,
) -> httpx.AsyncClient:
    """AsyncClient bounded by *timeout* and *max_redirects*."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        max_redirects=max_redirects,
    )


class HttpxFetcher:
    """Fetch HTML documents, raising ``NetworkError`` on any failure.

    An injected client is shared and never closed here; when none is given
    the fetcher creates (and owns) one.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._owns_client = client is None
        self._client = client or create_http_client(
            timeout=timeout, max_redirects=max_redirects
        )
        self._timeout = timeout
        self._user_agent = user_agent

    async def fetch(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> str:
        try:
            request_headers = build_headers(url, self._user_agent, headers)
        except ValueError as exc:
            log.warning("fetch_invalid_url", url=url)
            raise NetworkError(url, "invalid URL") from exc

        try:
            resp = await self._client.get(
                url,
                headers=request_headers,
                timeout=self._timeout,
                follow_redirects=True,
            )
        except httpx.TimeoutException as exc:
            log.warning("fetch_timeout", url=url, timeout=self._timeout)
            raise NetworkError(url, "timeout") from exc
        except httpx.TooManyRedirects as exc:
            log.warning("fetch_redirect_limit", url=url)
            raise NetworkError(url, "too many redirects") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            log.warning("fetch_failed", url=url, error=str(exc))
            raise NetworkError(url, f"request failed ({type(exc).__name__})") from exc

        if not resp.is_success:
            log.warning("fetch_http_error", url=url, status=resp.status_code)
            raise NetworkError(
                url, f"HTTP {resp.status_code}", status_code=resp.status_code
            )

        return resp.text

    async def aclose(self) -> None:
        """Close the client if this fetcher created it."""
        if self._owns_client:
            await self._client.aclose()
