from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache

from fastapi import Request

from src.adapters.config import ProxyRuntimeConfig
from src.adapters.realtime.http_gtfs_realtime_feed_fetcher import (
    HttpGtfsRealtimeFeedFetcher,
)
from src.adapters.routes import HttpRouteMetadataSource, LocalGtfsRouteMetadataSource
from src.app.ports.output import IRouteMetadataSource
from src.app.services.freshness_cache import VehiclePositionsCache
from src.app.services.route_metadata_service import (
    RouteMetadataRefresher,
    RouteMetadataStore,
)


@dataclass(slots=True)
class ProxyServices:
    config: ProxyRuntimeConfig
    route_store: RouteMetadataStore
    cache: VehiclePositionsCache
    route_refresher: RouteMetadataRefresher | None = None


def _route_metadata_source(cfg: ProxyRuntimeConfig) -> IRouteMetadataSource | None:
    # An explicit JSON URL wins over a local GTFS routes.txt.
    if cfg.routes_json_url:
        return HttpRouteMetadataSource(
            url=cfg.routes_json_url,
            user_agent=cfg.user_agent,
            timeout_s=cfg.feed_timeout_s,
        )
    if cfg.routes_gtfs_path:
        return LocalGtfsRouteMetadataSource(base_path=cfg.routes_gtfs_path)
    return None


def build_services(cfg: ProxyRuntimeConfig) -> ProxyServices:
    store = RouteMetadataStore()
    fetcher = HttpGtfsRealtimeFeedFetcher(
        url=cfg.vehicle_positions_url,
        user_agent=cfg.user_agent,
        timeout_s=cfg.feed_timeout_s,
        routes=store.current,
    )
    cache = VehiclePositionsCache(
        fetcher=fetcher,
        stale_window=timedelta(seconds=cfg.stale_window_s),
        coalesce=cfg.coalesce_requests,
    )

    refresher = None
    source = _route_metadata_source(cfg)
    if source is not None:
        refresher = RouteMetadataRefresher(
            source=source, store=store, interval_s=cfg.routes_refresh_interval_s
        )

    return ProxyServices(
        config=cfg, route_store=store, cache=cache, route_refresher=refresher
    )


@lru_cache(maxsize=1)
def get_services() -> ProxyServices:
    return build_services(ProxyRuntimeConfig.from_env())


def get_vehicle_positions_cache(request: Request) -> VehiclePositionsCache:
    return request.app.state.services.cache
