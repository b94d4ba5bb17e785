"""Image sideloading into a content-addressed media directory."""

from __future__ import annotations

import asyncio
import hashlib
import mimetypes
from logging import getLogger
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Final
from urllib.parse import urlsplit

import httpx

from feedsync.adapters.http_resilience import ResilienceConfig, ResilientClient
from feedsync.config.feed_sync import image_resilience_config
from feedsync.domain.feed_sync.errors import SideloadError

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from feedsync.domain.model import AssetId
    from feedsync.domain.ports.media import ImageSideloader

log = getLogger(__name__)

_KNOWN_SUFFIXES: Final[dict[str, str]] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/svg+xml": ".svg",
}


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class HttpImageSideloader:
    """Download images and store them under ``media_dir`` keyed by content hash.

    One event loop and one HTTP client are kept for the lifetime of the sideloader so
    that rate limiting and response caching apply across a whole run. Call ``close``
    (or use it as a context manager) when done.
    """

    def __init__(
        self,
        media_dir: Path,
        *,
        resilience: ResilienceConfig | None = None,
        client_factory: Callable[[ResilienceConfig], ResilientClient] = _default_client_factory,
    ) -> None:
        self.media_dir = media_dir
        self.resilience = resilience or image_resilience_config()
        self.client_factory = client_factory
        self._runner = asyncio.Runner()
        self._client: ResilientClient | None = None

    def __enter__(self) -> HttpImageSideloader:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def __call__(self, url: str) -> AssetId:
        return self._runner.run(self._sideload(url))

    def close(self) -> None:
        if self._client is not None:
            self._runner.run(self._client.aclose())
            self._client = None
        self._runner.close()

    def path_for(self, asset_id: AssetId) -> Path | None:
        matches = sorted(self.media_dir.glob(f"{asset_id}.*"))
        return matches[0] if matches else None

    async def _sideload(self, url: str) -> AssetId:
        if urlsplit(url).scheme not in {"http", "https"}:
            raise SideloadError(f"Unsupported image URL: {url}", url=url)

        if self._client is None:
            self._client = self.client_factory(self.resilience)
        try:
            response = await self._client.get(url)
        except httpx.TimeoutException as exc:
            raise SideloadError(f"Timed out downloading {url}", url=url) from exc
        except httpx.HTTPError as exc:
            raise SideloadError(f"{type(exc).__name__}: {exc}", url=url) from exc

        if response.status_code != httpx.codes.OK:
            raise SideloadError(f"Unexpected response code: {response.status_code}", url=url)

        content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
        if not content_type.startswith("image/"):
            raise SideloadError(f"Not an image ({content_type or 'no content type'})", url=url)

        content = response.content
        if not content:
            raise SideloadError("Empty image body", url=url)

        asset_id = hashlib.sha256(content).hexdigest()
        target = self.media_dir / f"{asset_id}{_suffix_for(content_type, url)}"
        if not target.exists():
            try:
                self.media_dir.mkdir(parents=True, exist_ok=True)
                target.write_bytes(content)
            except OSError as exc:
                raise SideloadError(f"Could not store image: {exc}", url=url) from exc
            log.debug("Stored image %s as %s", url, target.name)
        return asset_id


def _suffix_for(content_type: str, url: str) -> str:
    suffix = _KNOWN_SUFFIXES.get(content_type) or mimetypes.guess_extension(content_type)
    if suffix:
        return suffix
    url_suffix = PurePosixPath(urlsplit(url).path).suffix.lower()
    return url_suffix or ".img"


if TYPE_CHECKING:
    _sideloader_check: ImageSideloader = HttpImageSideloader(Path("media"))
