from __future__ import annotations

import os
from dataclasses import dataclass

from src.domain.exceptions.feed import ConfigError

DEFAULT_VEHICLE_POSITIONS_URL = (
    "https://gtfs.adelaidemetro.com.au/v1/realtime/vehicle_positions"
)
DEFAULT_USER_AGENT = "adelaide-buses-live/1.1"


def _env_str(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    return raw.strip() or None


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = _env_str(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def _env_port(name: str, default: int) -> int:
    raw = _env_str(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc
    if not (0 < value < 65536):
        raise ConfigError(f"{name} out of range: {value}")
    return value


@dataclass(frozen=True, slots=True)
class ProxyRuntimeConfig:
    vehicle_positions_url: str = DEFAULT_VEHICLE_POSITIONS_URL
    routes_json_url: str | None = None
    routes_gtfs_path: str | None = None
    routes_refresh_interval_s: float = 15 * 60
    feed_timeout_s: float = 10.0
    stale_window_s: float = 120.0
    user_agent: str = DEFAULT_USER_AGENT
    coalesce_requests: bool = False
    public_dir: str = "public"
    host: str = "0.0.0.0"
    port: int = 3000
    reveal_errors: bool = False

    @staticmethod
    def from_env() -> "ProxyRuntimeConfig":
        return ProxyRuntimeConfig(
            vehicle_positions_url=(
                _env_str("VEHICLE_POSITIONS_URL") or DEFAULT_VEHICLE_POSITIONS_URL
            ),
            routes_json_url=_env_str("ROUTES_JSON_URL"),
            routes_gtfs_path=_env_str("ROUTES_GTFS_PATH"),
            routes_refresh_interval_s=_env_float("ROUTES_REFRESH_INTERVAL_S", 900.0),
            feed_timeout_s=_env_float("FEED_TIMEOUT_S", 10.0),
            stale_window_s=_env_float("FEED_STALE_WINDOW_S", 120.0),
            user_agent=_env_str("FEED_USER_AGENT") or DEFAULT_USER_AGENT,
            coalesce_requests=_env_bool("FEED_COALESCE_REQUESTS", False),
            public_dir=_env_str("PUBLIC_DIR") or "public",
            host=_env_str("HOST") or "0.0.0.0",
            port=_env_port("PORT", 3000),
            reveal_errors=_env_bool("PROXY_REVEAL_ERRORS", False),
        )
