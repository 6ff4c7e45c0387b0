"""
URL Utilities - Cache-Busting und Link-Auflösung

Wird vom Static- und Browser-Pfad gleichermaßen genutzt, damit beide
Pfade identische Link-Listen liefern.
"""

from urllib.parse import urljoin, urlsplit, urlunsplit
from typing import Optional
import logging
import time

logger = logging.getLogger(__name__)

# Query-Parameter zum Umgehen von Caches in Zwischen-Layern
CACHE_BUSTER_PARAM = "_"


def append_cache_buster(url: str, now_ms: Optional[int] = None) -> str:
    """
    Hängt einen eindeutigen Query-Parameter an die URL an.

    Beispiel:
        >>> append_cache_buster("https://example.com/page", 1700000000000)
        'https://example.com/page?_=1700000000000'

        >>> append_cache_buster("https://example.com/?q=1", 1700000000000)
        'https://example.com/?q=1&_=1700000000000'
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{CACHE_BUSTER_PARAM}={now_ms}"


def strip_cache_buster(url: str) -> str:
    """
    Entfernt den Cache-Buster wieder (z.B. aus der finalen Response-URL).

    Nur das "_=..." Segment fliegt raus, der Rest der Query bleibt byte-gleich.

    Beispiel:
        >>> strip_cache_buster("https://example.com/page?q=1&_=1700000000000")
        'https://example.com/page?q=1'

        >>> strip_cache_buster("https://example.com/s?q=a%20b&flag&_=1")
        'https://example.com/s?q=a%20b&flag'
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return url

    if not parts.query:
        return url

    segments = parts.query.split("&")
    # Das zuletzt angehängte Segment entfernen
    for i in range(len(segments) - 1, -1, -1):
        if segments[i].partition("=")[0] == CACHE_BUSTER_PARAM:
            del segments[i]
            return urlunsplit(parts._replace(query="&".join(segments)))

    return url


def resolve_link(href: str, base_url: str) -> Optional[str]:
    """
    Löst einen (evtl. relativen) href gegen base_url auf.

    Returns:
        Absolute URL oder None, wenn der href nicht auflösbar ist

    Beispiel:
        >>> resolve_link("/about", "https://example.com/page")
        'https://example.com/about'

        >>> resolve_link("http://[broken", "https://example.com") is None
        True
    """
    href = (href or "").strip()
    if not href:
        return None

    try:
        absolute = urljoin(base_url, href)
        parts = urlsplit(absolute)
        # .port wirft ValueError bei ungültigen Ports
        parts.port
    except ValueError as e:
        logger.debug(f"Skipping unresolvable link {href!r}: {e}")
        return None

    if not parts.scheme:
        return None

    scheme = parts.scheme.lower()
    if scheme in ("http", "https"):
        if not parts.netloc:
            return None
        # Wie der Browser: Host lowercase, leerer Pfad wird zu "/"
        netloc = parts.netloc if "@" in parts.netloc else parts.netloc.lower()
        parts = parts._replace(scheme=scheme, netloc=netloc, path=parts.path or "/")

    return urlunsplit(parts)
