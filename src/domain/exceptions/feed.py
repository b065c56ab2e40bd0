class FeedError(Exception):
    """Base exception for a failed feed refresh."""


class UpstreamHTTPError(FeedError):
    """Raised when the upstream feed answers with a non-success status."""

    def __init__(self, status: int, url: str = "") -> None:
        self.status = status
        self.url = url
        super().__init__(f"Upstream feed error {status}")


class UpstreamNetworkError(FeedError):
    """Raised when the upstream feed cannot be reached."""


class UpstreamTimeoutError(UpstreamNetworkError):
    """Raised when the upstream feed does not answer in time."""


class DecodeError(FeedError):
    """Raised when the upstream payload is not a valid GTFS-RT FeedMessage."""


class RouteMetadataError(Exception):
    """Raised when the route metadata table cannot be loaded."""


class ConfigError(Exception):
    """Invalid runtime configuration."""
