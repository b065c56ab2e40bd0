from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from src.app.services.freshness_cache import CacheResult, RefreshOutcome
from src.domain.models.realtime import Snapshot, VehicleRecord

FEED_ERROR_MESSAGE = "Failed to fetch or parse GTFS-RT feed"


@dataclass(frozen=True, slots=True)
class NegotiatedResponse:
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: dict[str, Any] | None = None


def vehicle_record_to_dict(record: VehicleRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "route": record.route,
        "route_short_name": record.route_short_name,
        "route_long_name": record.route_long_name,
        "route_color": record.route_color,
        "lat": record.lat,
        "lon": record.lon,
        "bearing": record.bearing,
        "timestamp": record.timestamp,
    }


def _snapshot_body(snapshot: Snapshot) -> dict[str, Any]:
    return {
        "vehicles": [vehicle_record_to_dict(r) for r in snapshot.records],
        "updated": int(snapshot.fetched_at.timestamp() * 1000),
    }


def negotiate(result: CacheResult, if_none_match: str | None) -> NegotiatedResponse:
    """Map a cache result and the client's If-None-Match to a response.

    - 304 only when upstream content is unchanged and the client already holds
      the current entity tag.
    - Stale responses are always sent in full, without an ETag.
    """

    headers = {"Cache-Control": "no-store"}
    snapshot = result.snapshot

    if result.outcome is RefreshOutcome.ERROR or snapshot is None:
        return NegotiatedResponse(
            status_code=502, headers=headers, body={"error": FEED_ERROR_MESSAGE}
        )

    if result.outcome is RefreshOutcome.STALE:
        body = _snapshot_body(snapshot)
        body["stale"] = True
        return NegotiatedResponse(status_code=200, headers=headers, body=body)

    headers["ETag"] = snapshot.entity_tag
    if (
        result.outcome is RefreshOutcome.UNCHANGED
        and if_none_match is not None
        and if_none_match == snapshot.entity_tag
    ):
        return NegotiatedResponse(status_code=304, headers=headers)

    return NegotiatedResponse(
        status_code=200, headers=headers, body=_snapshot_body(snapshot)
    )
