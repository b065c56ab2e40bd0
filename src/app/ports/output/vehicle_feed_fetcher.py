from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models.realtime import FeedFetchResult


class IVehicleFeedFetcher(ABC):
    """Port for retrieving and decoding the upstream vehicle positions feed."""

    @abstractmethod
    async def fetch_and_decode(self) -> FeedFetchResult:
        """Raise a `FeedError` subclass when the feed cannot be used."""
        raise NotImplementedError
