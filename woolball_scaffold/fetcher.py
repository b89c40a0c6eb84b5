"""Async downloader for remote template files.

Wraps ``httpx.AsyncClient`` so that every failure mode of a single download
(DNS, refused connection, timeout, dropped stream, non-success status) comes
back as one :class:`~woolball_scaffold.errors.NetworkError`. No retries are
attempted; the caller decides what a failed download means.

Typical usage::

    async with TemplateFetcher() as fetcher:
        body = await fetcher.fetch("https://raw.githubusercontent.com/...")
"""

from __future__ import annotations

import logging

import httpx

from woolball_scaffold.errors import NetworkError

logger = logging.getLogger(__name__)

USER_AGENT = "woolball-scaffold"


class TemplateFetcher:
    """Download template bodies over HTTP(S).

    A single ``httpx.AsyncClient`` is shared by every fetch issued while the
    fetcher is open, so concurrent downloads reuse the connection pool.
    Redirects are followed.
    """

    def __init__(
        self,
        timeout: httpx.Timeout | float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        """Return a fresh ``AsyncClient`` configured for template downloads."""
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self._transport,
            headers={"User-Agent": USER_AGENT},
        )

    async def __aenter__(self) -> "TemplateFetcher":
        self._http = self._client()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client, if open."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def fetch(self, url: str) -> bytes:
        """Download *url* and return its full body.

        Works both inside ``async with`` (shared client) and standalone (a
        short-lived client is opened for the single request).

        Raises:
            NetworkError: On any transport error or a non-success status.
        """
        if self._http is not None:
            return await self._fetch_with(self._http, url)
        async with self._client() as client:
            return await self._fetch_with(client, url)

    @staticmethod
    async def _fetch_with(client: httpx.AsyncClient, url: str) -> bytes:
        logger.debug("GET %s", url)
        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise NetworkError(url, exc) from exc

        body = response.content
        logger.debug("GET %s -> %d bytes", url, len(body))
        return body
