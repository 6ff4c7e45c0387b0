"""
Shared pytest fixtures for the crawl_scrape tests.

No test here touches the network or launches a real browser: static fetches
go through httpx.MockTransport, Playwright is replaced by mocks.
"""

from typing import List, Optional, Tuple

import httpx
import pytest

from crawl_scrape.errors import FetchError
from crawl_scrape.services.extractors import get_extraction_kind
from crawl_scrape.services.fetchers.types import ExtractionResult
from crawl_scrape.services.request_config import RequestConfig

FIXTURE_HTML = """
<html>
  <head>
    <title>T</title>
    <meta name="description" content="D">
  </head>
  <body> Hello </body>
</html>
"""

LINKS_HTML = """
<html>
  <head><title>Links</title></head>
  <body>
    <a href="/x">first</a>
    <a href="http://y.com">second</a>
    <a href="/x">duplicate</a>
    <a href="">empty</a>
    <a>no href</a>
  </body>
</html>
"""


class StubFetchManager:
    """Records every dispatch; URLs containing 'unreachable' fail"""

    def __init__(self):
        self.calls: List[Tuple[RequestConfig, str, Optional[str]]] = []

    async def fetch_and_extract(self, request_config, operation, proxy_url=None):
        self.calls.append((request_config, operation, proxy_url))
        kind = get_extraction_kind(operation)

        if "unreachable" in request_config.url:
            raise FetchError(request_config.url, f"Request to {request_config.url} failed: connection refused")

        return ExtractionResult(
            operation=kind.operation.value,
            url=request_config.url,
            message=kind.message,
            payload={"links": [request_config.url + "about"]},
        )


@pytest.fixture
def stub_fetch_manager() -> StubFetchManager:
    return StubFetchManager()


@pytest.fixture
def site_transport() -> httpx.MockTransport:
    """Small fake site: /links, /text, /missing (404); host unreachable.invalid refuses"""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "unreachable.invalid":
            raise httpx.ConnectError("connection refused", request=request)
        if request.url.path == "/links":
            return httpx.Response(200, html=LINKS_HTML)
        if request.url.path == "/text":
            return httpx.Response(200, html=FIXTURE_HTML)
        return httpx.Response(404, text="not found")

    return httpx.MockTransport(handler)
