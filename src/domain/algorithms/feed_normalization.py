from __future__ import annotations

import math
from typing import Mapping

from src.domain.models.realtime import RouteMetadata, VehicleRecord


def first_non_empty(*values: str | None) -> str | None:
    for value in values:
        if value:
            return value
    return None


def vehicle_record_id(
    label: str | None, vehicle_id: str | None, entity_id: str | None
) -> str | None:
    """First non-empty of [label, vehicle id, entity id]."""

    return first_non_empty(label, vehicle_id, entity_id)


def seconds_to_millis(seconds: int | None) -> int | None:
    # GTFS-RT uses 0 for "not set" on uint64 fields.
    if not seconds:
        return None
    return int(seconds) * 1000


def is_valid_coordinate(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def build_vehicle_record(
    *,
    record_id: str,
    route: str | None,
    lat: float,
    lon: float,
    bearing: float | None,
    timestamp_s: int | None,
    routes: Mapping[str, RouteMetadata],
) -> VehicleRecord:
    """Assemble a record, joining route metadata by exact `route` key."""

    meta = routes.get(route) if route else None
    return VehicleRecord(
        id=record_id,
        route=route or None,
        lat=float(lat),
        lon=float(lon),
        route_short_name=(meta.short_name or None) if meta else None,
        route_long_name=(meta.long_name or None) if meta else None,
        route_color=(meta.color or None) if meta else None,
        bearing=float(bearing) if bearing is not None else None,
        timestamp=seconds_to_millis(timestamp_s),
    )
