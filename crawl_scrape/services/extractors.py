"""
Extraktoren - eine Tabelle statt drei fast identischer Code-Pfade

Pro Operation:
- load_state: worauf der Browser-Pfad nach der Navigation wartet
- extract_static: arbeitet auf dem geparsten Response-Body (BeautifulSoup)
- extract_browser: fragt das gerenderte DOM ab (Playwright Page)

Text/HTML brauchen "networkidle", sonst landet noch nicht gerenderter
Script-Content im Ergebnis. Für Links reicht das leichtere "load".
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from bs4 import BeautifulSoup

from ..errors import InvalidParameterError
from ..utils.url_utils import resolve_link, strip_cache_buster
from .fetchers.types import FetchResult

logger = logging.getLogger(__name__)

# Tags ohne sichtbaren Text
INVISIBLE_TAGS = ['script', 'style', 'noscript', 'template']


class Operation(str, Enum):
    EXTRACT_LINKS = "extractLinks"
    EXTRACT_TEXT = "extractText"
    EXTRACT_HTML = "extractHtml"


def unique_links(hrefs: Iterable[Optional[str]], base_url: str) -> List[str]:
    """
    Löst hrefs gegen base_url auf und dedupliziert (Reihenfolge des ersten Auftretens).

    Leere und nicht auflösbare hrefs werden übersprungen.
    """
    seen = set()
    links = []
    for href in hrefs:
        if not href:
            continue
        absolute = resolve_link(href, base_url)
        if absolute is None or absolute in seen:
            continue
        seen.add(absolute)
        links.append(absolute)
    return links


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", 'lxml')


def extract_title(soup: BeautifulSoup) -> Optional[str]:
    title = soup.find('title')
    if title is None:
        return None
    return title.get_text(strip=True) or None


def extract_description(soup: BeautifulSoup) -> Optional[str]:
    meta_desc = soup.find('meta', attrs={'name': 'description'})
    if meta_desc is None:
        return None
    return meta_desc.get('content') or None


def extract_visible_text(soup: BeautifulSoup) -> str:
    body = soup.body or soup
    for tag in body(INVISIBLE_TAGS):
        tag.decompose()
    return body.get_text().strip()


# --- Static-Pfad -----------------------------------------------------------

def static_links(fetch_result: FetchResult) -> Dict[str, Any]:
    soup = parse_html(fetch_result.html)
    hrefs = [a_tag.get('href') for a_tag in soup.find_all('a', href=True)]
    return {"links": unique_links(hrefs, fetch_result.final_url)}


def static_text(fetch_result: FetchResult) -> Dict[str, Any]:
    soup = parse_html(fetch_result.html)
    # Titel und Description vor dem Entfernen der unsichtbaren Tags lesen
    title = extract_title(soup)
    description = extract_description(soup)
    return {
        "text": extract_visible_text(soup),
        "title": title,
        "description": description,
    }


def static_html(fetch_result: FetchResult) -> Dict[str, Any]:
    soup = parse_html(fetch_result.html)
    return {
        "html": fetch_result.html,
        "title": extract_title(soup),
        "description": extract_description(soup),
    }


# --- Browser-Pfad ----------------------------------------------------------

DESCRIPTION_JS = (
    "els => els.length ? els[0].getAttribute('content') : null"
)


async def _page_title(page) -> Optional[str]:
    return (await page.title()) or None


async def _page_description(page) -> Optional[str]:
    content = await page.eval_on_selector_all('meta[name="description"]', DESCRIPTION_JS)
    return content or None


async def browser_links(page) -> Dict[str, Any]:
    hrefs = await page.eval_on_selector_all(
        'a[href]', "els => els.map(el => el.getAttribute('href'))"
    )
    return {"links": unique_links(hrefs, strip_cache_buster(page.url))}


async def browser_text(page) -> Dict[str, Any]:
    text = await page.evaluate("() => document.body ? document.body.innerText.trim() : ''")
    return {
        "text": text,
        "title": await _page_title(page),
        "description": await _page_description(page),
    }


async def browser_html(page) -> Dict[str, Any]:
    return {
        "html": await page.content(),
        "title": await _page_title(page),
        "description": await _page_description(page),
    }


@dataclass(frozen=True)
class ExtractionKind:
    operation: Operation
    load_state: str
    message: str
    extract_static: Callable[[FetchResult], Dict[str, Any]]
    extract_browser: Callable[[Any], Awaitable[Dict[str, Any]]]


EXTRACTION_KINDS: Dict[Operation, ExtractionKind] = {
    Operation.EXTRACT_LINKS: ExtractionKind(
        operation=Operation.EXTRACT_LINKS,
        load_state="load",
        message="Crawling finished",
        extract_static=static_links,
        extract_browser=browser_links,
    ),
    Operation.EXTRACT_TEXT: ExtractionKind(
        operation=Operation.EXTRACT_TEXT,
        load_state="networkidle",
        message="Text extraction finished",
        extract_static=static_text,
        extract_browser=browser_text,
    ),
    Operation.EXTRACT_HTML: ExtractionKind(
        operation=Operation.EXTRACT_HTML,
        load_state="networkidle",
        message="HTML extraction finished",
        extract_static=static_html,
        extract_browser=browser_html,
    ),
}


def get_extraction_kind(operation: str) -> ExtractionKind:
    """
    Raises:
        InvalidParameterError: Bei unbekannter Operation
    """
    try:
        return EXTRACTION_KINDS[Operation(operation)]
    except ValueError as e:
        valid = ", ".join(op.value for op in Operation)
        raise InvalidParameterError(
            f"Unknown operation: {operation!r} (expected one of: {valid})",
            code="INVALID_OPERATION",
        ) from e
