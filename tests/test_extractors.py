"""
Tests for the extraction table and the static/browser extractors.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from crawl_scrape.errors import InvalidParameterError
from crawl_scrape.services.extractors import (
    EXTRACTION_KINDS,
    Operation,
    browser_html,
    browser_links,
    browser_text,
    extract_title,
    get_extraction_kind,
    parse_html,
    static_html,
    static_links,
    static_text,
    unique_links,
)
from crawl_scrape.services.fetchers.types import FetchResult

from .conftest import FIXTURE_HTML, LINKS_HTML


def make_fetch_result(html: str, url: str = "https://example.com/page") -> FetchResult:
    return FetchResult(
        url=url,
        final_url=url,
        status=200,
        headers={},
        html=html,
        fetched_at="2026-01-01T00:00:00",
        via="httpx",
        content_type="text/html",
    )


# ---------------------------------------------------------------------------
# Extraction table
# ---------------------------------------------------------------------------

def test_every_operation_has_a_kind():
    assert set(EXTRACTION_KINDS) == set(Operation)


def test_load_state_policy():
    assert get_extraction_kind("extractText").load_state == "networkidle"
    assert get_extraction_kind("extractHtml").load_state == "networkidle"
    assert get_extraction_kind("extractLinks").load_state == "load"


def test_messages():
    assert get_extraction_kind("extractLinks").message == "Crawling finished"
    assert get_extraction_kind("extractText").message == "Text extraction finished"
    assert get_extraction_kind("extractHtml").message == "HTML extraction finished"


def test_unknown_operation():
    with pytest.raises(InvalidParameterError) as exc_info:
        get_extraction_kind("extractImages")
    assert exc_info.value.code == "INVALID_OPERATION"


# ---------------------------------------------------------------------------
# Static extractors
# ---------------------------------------------------------------------------

def test_static_links_resolves_and_dedupes():
    payload = static_links(make_fetch_result(LINKS_HTML))
    assert payload == {"links": ["https://example.com/x", "http://y.com/"]}


def test_static_links_skips_unresolvable_hrefs():
    html = '<a href="http://[broken">bad</a><a href="/ok">ok</a>'
    assert static_links(make_fetch_result(html)) == {"links": ["https://example.com/ok"]}


def test_unique_links_keeps_first_occurrence_order():
    hrefs = ["/b", "/a", None, "/b", "/c", "/a"]
    assert unique_links(hrefs, "https://example.com/") == [
        "https://example.com/b",
        "https://example.com/a",
        "https://example.com/c",
    ]


def test_static_text():
    payload = static_text(make_fetch_result(FIXTURE_HTML))
    assert payload == {"text": "Hello", "title": "T", "description": "D"}


def test_static_text_ignores_scripts_and_styles():
    html = "<html><body> Hello <script>var x = 1;</script><style>p {}</style></body></html>"
    assert static_text(make_fetch_result(html))["text"] == "Hello"


def test_static_text_missing_title_and_description():
    payload = static_text(make_fetch_result("<html><body><p>Only text</p></body></html>"))
    assert payload == {"text": "Only text", "title": None, "description": None}


def test_static_html_returns_raw_body():
    payload = static_html(make_fetch_result(FIXTURE_HTML))

    assert payload["html"] == FIXTURE_HTML
    assert payload["title"] == "T"
    assert payload["description"] == "D"


def test_html_reparse_matches_text_title():
    fetch_result = make_fetch_result(FIXTURE_HTML)
    html = static_html(fetch_result)["html"]

    assert extract_title(parse_html(html)) == static_text(fetch_result)["title"]


# ---------------------------------------------------------------------------
# Browser extractors (mocked page)
# ---------------------------------------------------------------------------

def make_page(**overrides) -> MagicMock:
    page = MagicMock()
    page.url = "https://example.com/page?_=1700000000000"
    page.title = AsyncMock(return_value="T")
    page.evaluate = AsyncMock(return_value="Hello")
    page.content = AsyncMock(return_value="<html><head><title>T</title></head></html>")
    page.eval_on_selector_all = AsyncMock(return_value="D")
    for key, value in overrides.items():
        setattr(page, key, value)
    return page


@pytest.mark.asyncio
async def test_browser_links():
    page = make_page(eval_on_selector_all=AsyncMock(return_value=["/x", "http://y.com", "/x", None, "?p=2"]))

    payload = await browser_links(page)

    assert payload == {"links": [
        "https://example.com/x",
        "http://y.com/",
        "https://example.com/page?p=2",
    ]}
    page.eval_on_selector_all.assert_awaited_once()
    assert page.eval_on_selector_all.await_args.args[0] == "a[href]"


@pytest.mark.asyncio
async def test_browser_text():
    payload = await browser_text(make_page())
    assert payload == {"text": "Hello", "title": "T", "description": "D"}


@pytest.mark.asyncio
async def test_browser_text_missing_metadata_is_none():
    page = make_page(title=AsyncMock(return_value=""), eval_on_selector_all=AsyncMock(return_value=None))

    payload = await browser_text(page)

    assert payload["title"] is None
    assert payload["description"] is None


@pytest.mark.asyncio
async def test_browser_html():
    payload = await browser_html(make_page())

    assert payload["html"].startswith("<html>")
    assert payload["title"] == "T"
    assert payload["description"] == "D"
