from .route_metadata_source import IRouteMetadataSource
from .vehicle_feed_fetcher import IVehicleFeedFetcher

__all__ = [
    "IRouteMetadataSource",
    "IVehicleFeedFetcher",
]
