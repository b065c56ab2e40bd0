from .realtime import FeedFetchResult, RouteMetadata, Snapshot, VehicleRecord

__all__ = [
    "FeedFetchResult",
    "RouteMetadata",
    "Snapshot",
    "VehicleRecord",
]
