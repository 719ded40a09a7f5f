"""Unit tests for asynchronous ConfluenceQuery calls."""

import asyncio
import json

import httpx
import pytest
from fixtures.confluence_mocks import MOCK_CONTENT_PAGES, MOCK_PAGE_RESPONSE
from fixtures.http_mocks import (
    BASIC_AUTH,
    SERVER,
    RecordingHandler,
    make_async_connection,
)

from confluence_simple_client.exceptions import ConfluenceQueryError


@pytest.mark.anyio
async def test_aquery_end_to_end():
    handler = RecordingHandler(httpx.Response(200, json=MOCK_PAGE_RESPONSE))
    connection = make_async_connection(handler)

    result = await connection.create_query().aquery("content/123")

    assert result == MOCK_PAGE_RESPONSE
    assert connection.is_connected is True

    request = handler.requests[0]
    assert request.method == "GET"
    assert str(request.url) == f"{SERVER}/rest/api/content/123?limit=100"
    assert request.headers["Authorization"] == BASIC_AUTH
    assert request.headers["Accept"] == "application/json"
    assert request.headers["Content-Type"] == "application/json; charset=utf-8"
    assert request.content == b"{}"
    await connection.aclose()


@pytest.mark.anyio
async def test_aquery_with_body_posts_json():
    handler = RecordingHandler(httpx.Response(200, json={"id": "9"}))
    connection = make_async_connection(handler)

    await connection.create_query().aquery(
        "content", body={"type": "page", "title": "Über"}
    )

    request = handler.requests[0]
    assert request.method == "POST"
    assert json.loads(request.content.decode("utf-8")) == {
        "type": "page",
        "title": "Über",
    }


@pytest.mark.anyio
async def test_aquery_failure_reason_phrase():
    handler = RecordingHandler(
        httpx.Response(401, extensions={"reason_phrase": b"Bad credentials"})
    )
    connection = make_async_connection(handler)

    with pytest.raises(ConfluenceQueryError) as exc_info:
        await connection.create_query().aquery("content/123")

    assert str(exc_info.value) == "Bad credentials"
    assert exc_info.value.status_code == 401
    assert connection.is_connected is False


@pytest.mark.anyio
async def test_aquery_failure_without_reason_phrase():
    handler = RecordingHandler(
        httpx.Response(500, extensions={"reason_phrase": b""})
    )
    connection = make_async_connection(handler)

    with pytest.raises(
        ConfluenceQueryError, match="Failed with code 500: Internal Server Error"
    ):
        await connection.create_query().aquery("content/123")


@pytest.mark.anyio
async def test_aquery_none_address():
    connection = make_async_connection(RecordingHandler())
    with pytest.raises(ValueError):
        await connection.create_query().aquery(None)


@pytest.mark.anyio
async def test_aquery_transport_failure_is_not_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    connection = make_async_connection(handler)

    with pytest.raises(httpx.ConnectError):
        await connection.create_query().aquery("content/123")


@pytest.mark.anyio
async def test_aquery_paged_three_pages():
    handler = RecordingHandler(
        *[httpx.Response(200, json=page) for page in MOCK_CONTENT_PAGES]
    )
    connection = make_async_connection(handler)

    query = connection.create_query()

    pages = [page async for page in query.aquery_paged("content", page_size=1)]

    assert pages == MOCK_CONTENT_PAGES
    assert [str(r.url) for r in handler.requests] == [
        f"{SERVER}/rest/api/content?limit=1",
        f"{SERVER}/rest/api/content?limit=1&start=1",
        f"{SERVER}/rest/api/content?limit=1&start=2",
    ]


@pytest.mark.anyio
async def test_aquery_paged_failure_on_second_page():
    handler = RecordingHandler(
        httpx.Response(200, json=MOCK_CONTENT_PAGES[0]),
        httpx.Response(502, extensions={"reason_phrase": b"Proxy Error"}),
        httpx.Response(200, json=MOCK_CONTENT_PAGES[2]),
    )
    connection = make_async_connection(handler)

    received = []
    with pytest.raises(ConfluenceQueryError, match="Proxy Error"):
        async for page in connection.create_query().aquery_paged("content"):
            received.append(page)

    assert received == [MOCK_CONTENT_PAGES[0]]
    assert len(handler.requests) == 2


@pytest.mark.anyio
async def test_aquery_paged_requests_sequentially():
    """The next page is requested only after the previous one was consumed."""
    handler = RecordingHandler(
        *[httpx.Response(200, json=page) for page in MOCK_CONTENT_PAGES]
    )
    connection = make_async_connection(handler)

    pages = connection.create_query().aquery_paged("content")
    assert handler.requests == []

    await pages.__anext__()
    assert len(handler.requests) == 1

    await pages.__anext__()
    assert len(handler.requests) == 2


@pytest.mark.anyio
async def test_aquery_paged_cancellation_aborts_in_flight_page():
    second_page_started = asyncio.Event()

    async def handler(request):
        if "start=1" in str(request.url):
            second_page_started.set()
            await asyncio.sleep(30)
        return httpx.Response(200, json=MOCK_CONTENT_PAGES[0])

    connection = make_async_connection(handler)
    query = connection.create_query()
    received = []

    async def consume():
        async for page in query.aquery_paged("content"):
            received.append(page)

    task = asyncio.create_task(consume())
    await second_page_started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert received == [MOCK_CONTENT_PAGES[0]]


@pytest.mark.anyio
async def test_aquery_cancelled_by_timeout():
    async def handler(request):
        await asyncio.sleep(30)
        return httpx.Response(200, json={})

    connection = make_async_connection(handler)

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(connection.create_query().aquery("content"), 0.01)

    assert connection.is_connected is False
