from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping

import httpx
from google.protobuf.message import DecodeError as ProtobufDecodeError
from google.transit import gtfs_realtime_pb2

from src.app.ports.output import IVehicleFeedFetcher
from src.domain.algorithms.feed_normalization import (
    build_vehicle_record,
    is_valid_coordinate,
    vehicle_record_id,
)
from src.domain.exceptions.feed import (
    DecodeError,
    UpstreamHTTPError,
    UpstreamNetworkError,
    UpstreamTimeoutError,
)
from src.domain.models.realtime import FeedFetchResult, RouteMetadata, VehicleRecord

RouteLookup = Callable[[], Mapping[str, RouteMetadata]]


def _no_routes() -> Mapping[str, RouteMetadata]:
    return {}


@dataclass(slots=True)
class HttpGtfsRealtimeFeedFetcher(IVehicleFeedFetcher):
    """Fetches a GTFS-Realtime VehiclePositions feed over HTTP and decodes it.

    No retries: the cache decides what a failure means.
    `transport` is only set by tests.
    """

    url: str
    user_agent: str
    timeout_s: float = 10.0
    routes: RouteLookup = _no_routes
    transport: httpx.AsyncBaseTransport | None = None

    async def fetch_and_decode(self) -> FeedFetchResult:
        raw = await self._fetch()
        return FeedFetchResult(
            raw=raw, records=decode_vehicle_positions(raw, self.routes())
        )

    async def _fetch(self) -> bytes:
        headers = {"User-Agent": self.user_agent, "Cache-Control": "no-cache"}
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s,
                transport=self.transport,
                follow_redirects=True,
            ) as client:
                resp = await client.get(self.url, headers=headers)
        except httpx.TimeoutException as exc:
            raise UpstreamTimeoutError(
                f"Upstream feed timed out after {self.timeout_s}s"
            ) from exc
        except httpx.TransportError as exc:
            raise UpstreamNetworkError(f"Upstream feed unreachable: {exc}") from exc

        if not resp.is_success:
            raise UpstreamHTTPError(resp.status_code, url=self.url)
        return resp.content


def decode_vehicle_positions(
    raw: bytes, routes: Mapping[str, RouteMetadata]
) -> tuple[VehicleRecord, ...]:
    feed = gtfs_realtime_pb2.FeedMessage()
    try:
        feed.ParseFromString(raw)
    except ProtobufDecodeError as exc:
        raise DecodeError(f"Invalid GTFS-RT payload: {exc}") from exc

    out: list[VehicleRecord] = []
    for ent in feed.entity:
        record = entity_to_record(ent, routes)
        if record is not None:
            out.append(record)
    return tuple(out)


def entity_to_record(
    ent: gtfs_realtime_pb2.FeedEntity, routes: Mapping[str, RouteMetadata]
) -> VehicleRecord | None:
    """Normalize one entity; None when it carries no usable position."""

    if not ent.HasField("vehicle"):
        return None

    v = ent.vehicle
    if not v.HasField("position"):
        return None

    pos = v.position
    if not (pos.HasField("latitude") and pos.HasField("longitude")):
        return None
    lat = pos.latitude
    lon = pos.longitude
    if not (is_valid_coordinate(lat) and is_valid_coordinate(lon)):
        return None

    label = None
    vehicle_id = None
    if v.HasField("vehicle"):
        label = v.vehicle.label or None
        vehicle_id = v.vehicle.id or None

    record_id = vehicle_record_id(label, vehicle_id, ent.id or None)
    if record_id is None:
        return None

    route_id = None
    if v.HasField("trip"):
        route_id = v.trip.route_id or None

    return build_vehicle_record(
        record_id=record_id,
        route=route_id,
        lat=lat,
        lon=lon,
        bearing=float(pos.bearing) if pos.HasField("bearing") else None,
        timestamp_s=int(v.timestamp) if v.HasField("timestamp") else None,
        routes=routes,
    )
