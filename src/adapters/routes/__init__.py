from .http_route_metadata_source import HttpRouteMetadataSource
from .local_gtfs_route_metadata_source import LocalGtfsRouteMetadataSource

__all__ = [
    "HttpRouteMetadataSource",
    "LocalGtfsRouteMetadataSource",
]
