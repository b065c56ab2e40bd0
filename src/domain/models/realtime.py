from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class VehicleRecord:
    """One observed vehicle, normalized from a GTFS-RT VehiclePosition entity.

    `timestamp` is milliseconds since epoch.
    """

    id: str
    route: str | None
    lat: float
    lon: float
    route_short_name: str | None = None
    route_long_name: str | None = None
    route_color: str | None = None
    bearing: float | None = None
    timestamp: int | None = None


@dataclass(frozen=True, slots=True)
class RouteMetadata:
    short_name: str | None = None
    long_name: str | None = None
    color: str | None = None


@dataclass(frozen=True, slots=True)
class Snapshot:
    """The single decoded feed held by the cache.

    Never mutated; a refresh builds a new one and swaps it in.
    """

    records: tuple[VehicleRecord, ...]
    fingerprint: str
    entity_tag: str
    fetched_at: datetime


@dataclass(frozen=True, slots=True)
class FeedFetchResult:
    raw: bytes
    records: tuple[VehicleRecord, ...]
