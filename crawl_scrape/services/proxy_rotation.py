"""
Proxy-Rotation - Round-Robin über die Proxy-Liste eines Items
"""

import itertools
import logging
from typing import Dict, Optional, Sequence
from urllib.parse import unquote, urlsplit

logger = logging.getLogger(__name__)


class ProxyRotator:
    """
    Liefert Proxies reihum aus einer festen Liste.

    Leere Liste -> None (direkte Verbindung).
    """

    def __init__(self, proxy_urls: Sequence[str]):
        self.proxy_urls = tuple(proxy_urls)
        self._cycle = itertools.cycle(self.proxy_urls) if self.proxy_urls else None

    def next_proxy(self) -> Optional[str]:
        if self._cycle is None:
            return None
        return next(self._cycle)


def to_playwright_proxy(proxy_url: str) -> Dict[str, str]:
    """
    Playwright erwartet Server und Credentials getrennt.

    Beispiel:
        >>> to_playwright_proxy("http://user:pw@proxy.example.com:8080")
        {'server': 'http://proxy.example.com:8080', 'username': 'user', 'password': 'pw'}
    """
    parts = urlsplit(proxy_url)
    host = parts.hostname or ""
    server = f"{parts.scheme or 'http'}://{host}"
    if parts.port:
        server = f"{server}:{parts.port}"

    proxy = {"server": server}
    if parts.username:
        proxy["username"] = unquote(parts.username)
    if parts.password:
        proxy["password"] = unquote(parts.password)
    return proxy
