from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models.realtime import RouteMetadata


class IRouteMetadataSource(ABC):
    """Port for loading the route_id -> metadata enrichment table."""

    @abstractmethod
    async def load(self) -> dict[str, RouteMetadata]:
        raise NotImplementedError
