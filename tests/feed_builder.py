from __future__ import annotations

from typing import Any

from google.transit import gtfs_realtime_pb2


def build_feed(*entities: dict[str, Any], feed_ts: int = 1700000000) -> bytes:
    """Serialize a VehiclePositions FeedMessage.

    Each entity dict may carry: id, label, vehicle_id, route, lat, lon,
    bearing, timestamp. Entities without lat/lon get no position.
    """

    feed = gtfs_realtime_pb2.FeedMessage()
    feed.header.gtfs_realtime_version = "2.0"
    feed.header.timestamp = feed_ts

    for spec in entities:
        ent = feed.entity.add()
        ent.id = spec.get("id", "")
        v = ent.vehicle
        if "label" in spec:
            v.vehicle.label = spec["label"]
        if "vehicle_id" in spec:
            v.vehicle.id = spec["vehicle_id"]
        if "route" in spec:
            v.trip.route_id = spec["route"]
        if "lat" in spec and "lon" in spec:
            v.position.latitude = spec["lat"]
            v.position.longitude = spec["lon"]
            if "bearing" in spec:
                v.position.bearing = spec["bearing"]
        if "timestamp" in spec:
            v.timestamp = spec["timestamp"]

    return feed.SerializeToString()
