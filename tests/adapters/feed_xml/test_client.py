from __future__ import annotations

from collections.abc import Callable  # noqa: TC003

import httpx
import pytest

from feedsync.adapters.feed_xml import HttpFeedSource
from feedsync.adapters.http_resilience import ResilienceConfig, ResilientClient
from feedsync.domain.feed_sync import FeedFetchError
from tests.support.feed import SAMPLE_FEED

FEED_URL = "https://shop.example.com/export/feed.xml"


def _make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(transport=httpx.MockTransport(async_handler))  # noqa: SLF001  # type: ignore[reportPrivateUsage]
        return client

    return factory


def test_fetch_returns_body_and_parse_builds_items() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, content=SAMPLE_FEED)

    source = HttpFeedSource(FEED_URL, client_factory=_make_client_factory(handler))

    body = source.fetch()
    items = source.parse(body)

    assert body == SAMPLE_FEED
    assert [str(request.url) for request in requests] == [FEED_URL]
    assert [item.external_id for item in items] == ["SKU-1", "SKU-2"]


def test_non_200_status_is_a_fetch_error() -> None:
    source = HttpFeedSource(
        FEED_URL,
        client_factory=_make_client_factory(lambda request: httpx.Response(503)),
    )

    with pytest.raises(FeedFetchError, match="Unexpected response code: 503") as excinfo:
        source.fetch()

    assert excinfo.value.status_code == 503


@pytest.mark.parametrize(
    ("error", "message"),
    [
        (httpx.ConnectTimeout("too slow"), "Timed out"),
        (httpx.ConnectError("refused"), "ConnectError"),
    ],
)
def test_transport_failures_are_fetch_errors(error: httpx.HTTPError, message: str) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise error

    source = HttpFeedSource(FEED_URL, client_factory=_make_client_factory(handler))

    with pytest.raises(FeedFetchError, match=message):
        source.fetch()
