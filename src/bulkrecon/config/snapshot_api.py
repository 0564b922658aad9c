"""Snapshot REST API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy, error_logging_hook

SNAPSHOT_API_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class SnapshotApiConfig:
    """Holds the PostgREST endpoint serving bulk snapshot tables."""

    base_url: str
    api_key: str
    resilience: ResilienceConfig


def get_snapshot_api_config(*, resilience: ResilienceConfig | None = None) -> SnapshotApiConfig:
    values = require_env_vars(("SNAPSHOT_API_URL", "SNAPSHOT_API_KEY"))
    base_url = values["SNAPSHOT_API_URL"].rstrip("/") + "/"
    api_key = values["SNAPSHOT_API_KEY"]
    return SnapshotApiConfig(
        base_url=base_url,
        api_key=api_key,
        resilience=resilience
        or ResilienceConfig(
            name="snapshot-api",
            base_url=base_url,
            timeout_seconds=SNAPSHOT_API_TIMEOUT_SECONDS,
            retry=RetryPolicy(total=4),
            ratelimit=RateLimit(max_calls=8, per_seconds=1.0),
            response_hooks=(error_logging_hook("snapshot-api"),),
            default_headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            },
        ),
    )
