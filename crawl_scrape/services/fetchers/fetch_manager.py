"""
Fetch Manager - Dispatcht zwischen Static-Fetch (httpx) und Browser (Playwright)

Pro Item genau ein Fetch-Versuch:
    Idle -> Fetching -> Succeeded | Failed

Jeder Fetch bekommt seine eigene Session (httpx Client bzw. Browser),
die danach garantiert geschlossen wird. Kein Retry.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from ... import config
from ...errors import FetchError
from ..extractors import ExtractionKind, get_extraction_kind
from ..request_config import RequestConfig
from .httpx_fetcher import HttpxFetcher
from .playwright_fetcher import PlaywrightFetcher
from .types import ExtractionResult

logger = logging.getLogger(__name__)


class FetchManager:
    """
    Ein parametrisierter Fetch-and-Extract statt drei Code-Pfaden pro Operation.

    Timeouts (Wall-Clock pro Fetch):
    - httpx: STATIC_FETCH_TIMEOUT (kürzer)
    - playwright: BROWSER_FETCH_TIMEOUT (Rendering + networkidle dauern länger)
    """

    def __init__(
        self,
        static_timeout: Optional[float] = None,
        browser_timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.static_timeout = static_timeout if static_timeout is not None else config.STATIC_FETCH_TIMEOUT
        self.browser_timeout = browser_timeout if browser_timeout is not None else config.BROWSER_FETCH_TIMEOUT
        self._transport = transport

    async def fetch_and_extract(
        self,
        request_config: RequestConfig,
        operation: str,
        proxy_url: Optional[str] = None,
    ) -> ExtractionResult:
        """
        Fetcht die Seite und extrahiert die angeforderten Daten.

        Args:
            request_config: Fertige Request-Konfiguration
            operation: "extractLinks" | "extractText" | "extractHtml"
            proxy_url: Ausgewählter Proxy (oder None)

        Returns:
            ExtractionResult

        Raises:
            InvalidParameterError: Unbekannte Operation
            FetchError: Fetch/Navigation fehlgeschlagen oder Timeout
        """
        kind = get_extraction_kind(operation)
        url = request_config.url

        if request_config.use_browser:
            via = "playwright"
            timeout = self.browser_timeout
            fetch = self._fetch_with_browser(request_config, kind, proxy_url)
        else:
            via = "httpx"
            timeout = self.static_timeout
            fetch = self._fetch_static(request_config, kind, proxy_url)

        logger.info(f"Fetching {url} via {via} ({kind.operation.value})")

        try:
            payload = await asyncio.wait_for(fetch, timeout=timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"{via} fetch exceeded {timeout:.0f}s for {url}")
            raise FetchError(url, f"Fetching {url} exceeded timeout of {timeout:.0f} seconds", code="TIMEOUT") from e

        return ExtractionResult(
            operation=kind.operation.value,
            url=url,
            message=kind.message,
            payload=payload,
            via=via,
        )

    async def _fetch_static(
        self, request_config: RequestConfig, kind: ExtractionKind, proxy_url: Optional[str]
    ) -> Dict[str, Any]:
        async with HttpxFetcher(
            proxy_url=proxy_url, timeout=self.static_timeout, transport=self._transport
        ) as fetcher:
            fetch_result = await fetcher.fetch(request_config)

        return kind.extract_static(fetch_result)

    async def _fetch_with_browser(
        self, request_config: RequestConfig, kind: ExtractionKind, proxy_url: Optional[str]
    ) -> Dict[str, Any]:
        async with PlaywrightFetcher(proxy_url=proxy_url, timeout=self.browser_timeout) as fetcher:
            return await fetcher.fetch_and_extract(request_config, kind)
