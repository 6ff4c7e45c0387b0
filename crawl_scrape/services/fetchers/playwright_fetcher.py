"""
Playwright Fetcher - Browser-Rendering einer einzelnen Seite

Browser Lifecycle:
- Pro Fetch eigener Playwright-Driver + Browser + Context
- Nach dem Fetch wird alles geschlossen (kein Pool, keine geteilten Sessions)

Wichtig: Playwright darf nur in diesem Modul gestartet werden.
"""

import json
import logging
from typing import Any, Dict, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from ... import config
from ...errors import FetchError
from ...utils.url_utils import append_cache_buster
from ..extractors import ExtractionKind
from ..proxy_rotation import to_playwright_proxy
from ..request_config import RequestConfig

logger = logging.getLogger(__name__)

USER_AGENT_INIT_SCRIPT = "Object.defineProperty(navigator, 'userAgent', { get: () => %s });"


class PlaywrightFetcher:
    """
    Fetcht genau eine URL mit einem Headless-Browser und extrahiert
    direkt aus dem gerenderten DOM.
    """

    def __init__(
        self,
        proxy_url: Optional[str] = None,
        timeout: Optional[float] = None,
        headless: Optional[bool] = None,
    ):
        self.proxy_url = proxy_url
        self.timeout = timeout if timeout is not None else config.BROWSER_FETCH_TIMEOUT
        self.headless = headless if headless is not None else config.BROWSER_HEADLESS
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    async def __aenter__(self):
        await self.open_browser()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close_browser()

    def is_browser_open(self) -> bool:
        """Prüft, ob der Browser geöffnet ist"""
        return self._browser is not None

    async def open_browser(self) -> None:
        """Startet Playwright, Browser und Context mit realistischem Viewport"""
        if self._browser is not None:
            return  # Bereits geöffnet

        logger.debug("Starting Playwright and opening browser...")

        launch_options: Dict[str, Any] = {"headless": self.headless}
        if self.proxy_url:
            launch_options["proxy"] = to_playwright_proxy(self.proxy_url)

        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(**launch_options)
            self._context = await self._browser.new_context(
                viewport={"width": config.VIEWPORT_WIDTH, "height": config.VIEWPORT_HEIGHT}
            )
        except PlaywrightError as e:
            logger.error(f"Failed to start browser: {e}")
            await self.close_browser()
            raise FetchError("", f"Failed to start browser: {e}", code="BROWSER_UNAVAILABLE") from e

        logger.debug("Playwright browser opened")

    async def close_browser(self) -> None:
        """Schließt Context, Browser und Driver"""
        if self._context:
            await self._context.close()
            self._context = None

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        logger.debug("Playwright browser closed")

    async def _prepare_page(self, page, request_config: RequestConfig) -> None:
        """Extra-Header, User-Agent-Patch und Cookies für die Page"""
        if request_config.headers:
            await page.set_extra_http_headers(request_config.headers)

        # navigator.userAgent an den User-Agent Header angleichen
        user_agent = request_config.user_agent()
        if user_agent:
            await page.add_init_script(USER_AGENT_INIT_SCRIPT % json.dumps(user_agent))

        if request_config.cookies:
            await self._context.add_cookies([
                {"name": name, "value": value, "url": request_config.url}
                for name, value in request_config.cookies.items()
            ])

    async def fetch_and_extract(self, request_config: RequestConfig, kind: ExtractionKind) -> Dict[str, Any]:
        """
        Navigiert zur URL, wartet auf den Load-State der Operation und
        extrahiert die Payload.

        Raises:
            RuntimeError: Wenn Browser nicht geöffnet ist
            FetchError: Page-Setup oder Navigation fehlgeschlagen, Timeout, Status >= 400
        """
        if not self._context:
            raise RuntimeError("Browser not opened. Call open_browser() first.")

        url = request_config.url
        timeout_ms = int(self.timeout * 1000)

        try:
            page = await self._context.new_page()
        except PlaywrightError as e:
            logger.error(f"Failed to open page for {url}: {e}")
            raise FetchError(url, f"Failed to open page for {url}: {e}") from e

        try:
            await self._prepare_page(page, request_config)

            response = await page.goto(
                append_cache_buster(url), wait_until="domcontentloaded", timeout=timeout_ms
            )
            if response is not None and response.status >= 400:
                raise FetchError(url, f"Navigation to {url} failed with status code {response.status}")

            await page.wait_for_load_state(kind.load_state, timeout=timeout_ms)
            return await kind.extract_browser(page)

        except PlaywrightTimeoutError as e:
            logger.error(f"Playwright fetch timed out for {url}: {e}")
            raise FetchError(url, f"Navigation to {url} timed out", code="TIMEOUT") from e
        except PlaywrightError as e:
            logger.error(f"Playwright fetch failed for {url}: {e}")
            raise FetchError(url, f"Navigation to {url} failed: {e}") from e
        finally:
            await page.close()
