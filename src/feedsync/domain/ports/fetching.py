"""Ports for retrieving the product feed."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from feedsync.domain.model import FeedItem


@runtime_checkable
class FeedSource(Protocol):
    """Fetch and parse the remote feed.

    ``fetch`` raises ``FeedFetchError``; ``parse`` raises ``FeedParseError`` when the
    document is malformed or the item list is missing.
    """

    def fetch(self) -> bytes: ...

    def parse(self, body: bytes) -> list[FeedItem]: ...


__all__ = ["FeedSource"]
