"""Feed synchronisation configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

from feedsync.domain.feed_sync.policy import ReconcilePolicy, SweepPolicy

from .env import env_bool, env_float, env_int, optional_env_var, require_env_vars
from .errors import ConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_FETCH_TIMEOUT_SECONDS = 30.0
DEFAULT_IMAGE_TIMEOUT_SECONDS = 15.0
DEFAULT_LOCK_TTL_SECONDS = 3600.0
DEFAULT_SWEEP_PAGE_SIZE = 200
DEFAULT_OPERATION_LOG_CAPACITY = 200
USER_AGENT = "feedsync (+xml product feed sync)"


def feed_resilience_config(
    timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
) -> ResilienceConfig:
    # the feed must always be read fresh, so no response cache here
    return ResilienceConfig(
        name="feed",
        timeout_seconds=timeout_seconds,
        retry=RetryPolicy(total=3),
        cache=None,
        default_headers={"User-Agent": USER_AGENT, "Accept": "application/xml, text/xml"},
    )


def image_resilience_config(
    timeout_seconds: float = DEFAULT_IMAGE_TIMEOUT_SECONDS,
) -> ResilienceConfig:
    return ResilienceConfig(
        name="images",
        timeout_seconds=timeout_seconds,
        retry=RetryPolicy(total=2),
        ratelimit=RateLimit(max_calls=4, per_seconds=1.0),
        cache=CacheConfig(backend="memory"),
        default_headers={"User-Agent": USER_AGENT},
    )


@dataclass(frozen=True, slots=True)
class FeedSyncConfig:
    """Holds everything a feed sync run needs besides storage."""

    feed_url: str
    policy: ReconcilePolicy = field(default_factory=ReconcilePolicy)
    lock_ttl: timedelta = field(default_factory=lambda: timedelta(seconds=DEFAULT_LOCK_TTL_SECONDS))
    operation_log_capacity: int = DEFAULT_OPERATION_LOG_CAPACITY
    feed_resilience: ResilienceConfig = field(default_factory=feed_resilience_config)
    image_resilience: ResilienceConfig = field(default_factory=image_resilience_config)


def _parse_sweep_policy(raw: str | None) -> SweepPolicy:
    if raw is None:
        return SweepPolicy.FLAG
    try:
        return SweepPolicy(raw.lower())
    except ValueError as exc:
        allowed = ", ".join(policy.value for policy in SweepPolicy)
        raise ConfigurationError(
            f"FEEDSYNC_SWEEP_POLICY must be one of {allowed}, got {raw!r}"
        ) from exc


def get_feed_sync_config() -> FeedSyncConfig:
    values = require_env_vars(("FEEDSYNC_FEED_URL",))
    feed_url = values["FEEDSYNC_FEED_URL"]
    if not feed_url.startswith(("http://", "https://")):
        raise ConfigurationError(f"FEEDSYNC_FEED_URL must be an http(s) URL, got {feed_url!r}")

    policy = ReconcilePolicy(
        sweep=_parse_sweep_policy(optional_env_var("FEEDSYNC_SWEEP_POLICY")),
        overwrite_content_on_update=env_bool("FEEDSYNC_OVERWRITE_CONTENT", default=False),
        sweep_page_size=env_int("FEEDSYNC_SWEEP_PAGE_SIZE", DEFAULT_SWEEP_PAGE_SIZE),
    )
    fetch_timeout = env_float("FEEDSYNC_FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT_SECONDS)
    image_timeout = env_float("FEEDSYNC_IMAGE_TIMEOUT", DEFAULT_IMAGE_TIMEOUT_SECONDS)
    lock_ttl = env_float("FEEDSYNC_LOCK_TTL", DEFAULT_LOCK_TTL_SECONDS)

    return FeedSyncConfig(
        feed_url=feed_url,
        policy=policy,
        lock_ttl=timedelta(seconds=lock_ttl),
        feed_resilience=feed_resilience_config(fetch_timeout),
        image_resilience=image_resilience_config(image_timeout),
    )
