"""HTTP feed source."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from feedsync.adapters.http_resilience import ResilienceConfig, ResilientClient
from feedsync.config.feed_sync import feed_resilience_config
from feedsync.domain.feed_sync.errors import FeedFetchError

from .parser import parse_feed_document
from .translator import to_feed_item

if TYPE_CHECKING:
    from collections.abc import Callable

    from feedsync.domain.model import FeedItem
    from feedsync.domain.ports.fetching import FeedSource

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class HttpFeedSource:
    url: str
    resilience: ResilienceConfig = field(default_factory=feed_resilience_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def fetch(self) -> bytes:
        return asyncio.run(self._fetch_async())

    def parse(self, body: bytes) -> list[FeedItem]:
        return [to_feed_item(payload, base_url=self.url) for payload in parse_feed_document(body)]

    async def _fetch_async(self) -> bytes:
        log.info("Fetching XML feed from %s", self.url)
        try:
            async with self.client_factory(self.resilience) as client:
                response = await client.get(self.url)
        except httpx.TimeoutException as exc:
            raise FeedFetchError(f"Timed out fetching {self.url}") from exc
        except httpx.HTTPError as exc:
            raise FeedFetchError(f"{type(exc).__name__}: {exc}") from exc

        if response.status_code != httpx.codes.OK:
            raise FeedFetchError(
                f"Unexpected response code: {response.status_code}",
                status_code=response.status_code,
            )
        return response.content


if TYPE_CHECKING:
    _source_check: FeedSource = HttpFeedSource(url="https://example.invalid/feed.xml")
