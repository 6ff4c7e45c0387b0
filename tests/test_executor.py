"""
Tests for sequential item execution and the continue-on-failure policy.
"""

import pytest

from crawl_scrape.errors import FetchError, InvalidParameterError, ItemExecutionError
from crawl_scrape.models import NodeParameters
from crawl_scrape.services.executor import ItemExecutor
from crawl_scrape.services.fetchers.fetch_manager import FetchManager


def item(url, **extra):
    return {"url": url, "operation": "extractLinks", **extra}


@pytest.mark.asyncio
async def test_items_processed_in_order(stub_fetch_manager):
    executor = ItemExecutor(fetch_manager=stub_fetch_manager)

    results = await executor.execute_items([item("https://a.example/"), item("https://b.example/")])

    assert [r.item_index for r in results] == [0, 1]
    assert [r.status for r in results] == ["success", "success"]
    assert results[0].message == "Crawling finished"
    assert results[0].data == {"url": "https://a.example/", "links": ["https://a.example/about"]}
    assert [call[0].url for call in stub_fetch_manager.calls] == ["https://a.example/", "https://b.example/"]


@pytest.mark.asyncio
async def test_continue_on_fail_captures_error_per_item(stub_fetch_manager):
    executor = ItemExecutor(fetch_manager=stub_fetch_manager)
    items = [item("https://a.example/"), item("https://unreachable.example/"), item("https://c.example/")]

    results = await executor.execute_items(items, continue_on_fail=True)

    assert [r.status for r in results] == ["success", "error", "success"]
    failed = results[1]
    assert failed.item_index == 1
    assert failed.data is None
    assert failed.error.code == "FETCH_FAILED"
    assert "unreachable.example" in failed.error.message
    assert len(stub_fetch_manager.calls) == 3


@pytest.mark.asyncio
async def test_failure_aborts_batch_with_item_index(stub_fetch_manager):
    executor = ItemExecutor(fetch_manager=stub_fetch_manager)
    items = [item("https://a.example/"), item("https://unreachable.example/"), item("https://c.example/")]

    with pytest.raises(ItemExecutionError) as exc_info:
        await executor.execute_items(items)

    assert exc_info.value.item_index == 1
    assert exc_info.value.code == "FETCH_FAILED"
    assert isinstance(exc_info.value.cause, FetchError)
    # Item 2 wird nicht mehr verarbeitet
    assert len(stub_fetch_manager.calls) == 2


@pytest.mark.asyncio
async def test_invalid_item_parameters(stub_fetch_manager):
    executor = ItemExecutor(fetch_manager=stub_fetch_manager)
    items = [{"operation": "extractText"}, item("ftp://a.example/"), item("https://a.example/", operation="nope")]

    results = await executor.execute_items(items, continue_on_fail=True)

    assert [r.status for r in results] == ["error", "error", "error"]
    assert results[0].error.code == "INVALID_PARAMETER"
    assert "url" in results[0].error.message
    assert results[1].error.code == "INVALID_URL_SCHEME"
    assert results[2].error.code == "INVALID_OPERATION"


@pytest.mark.asyncio
async def test_invalid_item_aborts_without_continue(stub_fetch_manager):
    executor = ItemExecutor(fetch_manager=stub_fetch_manager)

    with pytest.raises(ItemExecutionError) as exc_info:
        await executor.execute_items([item("https://a.example/"), {"operation": "extractText"}])

    assert exc_info.value.item_index == 1
    assert isinstance(exc_info.value.cause, InvalidParameterError)


@pytest.mark.asyncio
async def test_proxies_rotate_across_items(stub_fetch_manager):
    executor = ItemExecutor(fetch_manager=stub_fetch_manager)
    proxies = "http://p1:8080\nhttp://p2:8080"
    items = [item(f"https://{name}.example/", proxyUrls=proxies) for name in "abc"]
    items.append(item("https://d.example/"))

    await executor.execute_items(items)

    assert [call[2] for call in stub_fetch_manager.calls] == [
        "http://p1:8080",
        "http://p2:8080",
        "http://p1:8080",
        None,
    ]


@pytest.mark.asyncio
async def test_accepts_validated_parameters(stub_fetch_manager):
    executor = ItemExecutor(fetch_manager=stub_fetch_manager)
    params = NodeParameters(url="https://a.example/", operation="extractText", max_depth=3)

    result = await executor.execute_item(params, 0)

    assert result.status == "success"
    assert stub_fetch_manager.calls[0][1] == "extractText"


@pytest.mark.asyncio
async def test_unreachable_item_does_not_affect_others(site_transport):
    executor = ItemExecutor(fetch_manager=FetchManager(transport=site_transport))
    items = [
        {"url": "https://example.com/text", "operation": "extractText"},
        {"url": "https://unreachable.invalid/", "operation": "extractText"},
        {"url": "https://example.com/links", "operation": "extractLinks"},
    ]

    results = await executor.execute_items(items, continue_on_fail=True)

    assert [r.status for r in results] == ["success", "error", "success"]
    assert results[0].data == {"url": "https://example.com/text", "text": "Hello", "title": "T", "description": "D"}
    assert results[1].error.code == "FETCH_FAILED"
    assert results[2].data["links"] == ["https://example.com/x", "http://y.com/"]
