"""
Httpx Fetcher - Static-Fetch einer einzelnen Seite

Pro Fetch wird ein eigener AsyncClient erstellt und danach geschlossen,
damit keine Cookies/Sessions zwischen Items geteilt werden.
"""

import logging
from datetime import datetime
from typing import Optional

import httpx

from ... import config
from ...errors import FetchError
from ...utils.url_utils import append_cache_buster, strip_cache_buster
from ..request_config import RequestConfig
from .types import FetchResult

logger = logging.getLogger(__name__)

# Default User-Agent, wird von einem User-Agent Header des Items überschrieben
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"


class HttpxFetcher:
    """
    Fetcht genau eine URL mit httpx.

    Implementiert Context Manager für garantierte Ressourcen-Freigabe.
    Kein Retry - ein fehlgeschlagener Fetch ist ein Fehler für das Item.
    """

    def __init__(
        self,
        proxy_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.proxy_url = proxy_url
        self.timeout = timeout if timeout is not None else config.STATIC_FETCH_TIMEOUT
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        """Context Manager Entry - stellt Client bereit"""
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context Manager Exit - schließt Client garantiert"""
        await self.close()

    async def _ensure_client(self):
        """Stellt sicher, dass ein Client verfügbar ist"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=config.CONNECT_TIMEOUT),
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT},
                proxy=self.proxy_url,
                transport=self._transport,
            )
            logger.debug("Httpx client created")

    async def close(self):
        """Schließt den Client"""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.debug("Httpx client closed")

    async def fetch(self, request_config: RequestConfig) -> FetchResult:
        """
        Fetcht die URL der RequestConfig (mit Cache-Buster).

        Args:
            request_config: Fertige Request-Konfiguration des Items

        Returns:
            FetchResult

        Raises:
            FetchError: Netzwerkfehler, Timeout oder Non-2xx Status
        """
        await self._ensure_client()

        url = request_config.url
        headers = dict(request_config.headers)
        cookie_header = request_config.cookie_header()
        if cookie_header:
            headers["Cookie"] = cookie_header

        target = append_cache_buster(url)
        logger.debug(f"GET {target} (proxy: {'yes' if self.proxy_url else 'no'})")

        try:
            response = await self._client.get(target, headers=headers)
        except httpx.TimeoutException as e:
            logger.error(f"httpx fetch timed out for {url}: {e}")
            raise FetchError(url, f"Request to {url} timed out", code="TIMEOUT") from e
        except httpx.HTTPError as e:
            logger.error(f"httpx fetch failed for {url}: {e}")
            raise FetchError(url, f"Request to {url} failed: {e}") from e

        if not response.is_success:
            logger.error(f"httpx fetch for {url} returned status {response.status_code}")
            raise FetchError(url, f"Request to {url} failed with status code {response.status_code}")

        return FetchResult(
            url=url,
            final_url=strip_cache_buster(str(response.url)),
            status=response.status_code,
            headers=dict(response.headers),
            html=response.text,
            fetched_at=datetime.now().isoformat(),
            via='httpx',
            content_type=response.headers.get('content-type', 'text/html'),
        )
