from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from src.app.ports.output import IRouteMetadataSource
from src.domain.exceptions.feed import RouteMetadataError
from src.domain.models.realtime import RouteMetadata

logger = logging.getLogger("uvicorn.error")

_EMPTY: Mapping[str, RouteMetadata] = MappingProxyType({})


@dataclass(slots=True)
class RouteMetadataStore:
    """Holds the current route metadata table.

    The table is only ever replaced whole, so readers can take a reference
    without locking.
    """

    _table: Mapping[str, RouteMetadata] = field(
        default_factory=lambda: _EMPTY, init=False
    )

    def current(self) -> Mapping[str, RouteMetadata]:
        return self._table

    def replace(self, table: Mapping[str, RouteMetadata]) -> None:
        self._table = MappingProxyType(dict(table))

    def lookup(self, route_id: str | None) -> RouteMetadata | None:
        if not route_id:
            return None
        return self._table.get(route_id)


@dataclass(slots=True)
class RouteMetadataRefresher:
    """Reloads the route metadata table on a fixed interval.

    Failures keep the previous table; they never reach request handling.
    """

    source: IRouteMetadataSource
    store: RouteMetadataStore
    interval_s: float = 15 * 60

    _task: asyncio.Task[None] | None = field(default=None, init=False, repr=False)

    async def refresh_once(self) -> bool:
        try:
            table = await self.source.load()
        except RouteMetadataError as exc:
            logger.warning("Failed to load route metadata: %s", exc)
            return False
        except Exception:
            logger.exception("Unexpected error loading route metadata")
            return False

        self.store.replace(table)
        logger.info("Loaded route metadata (%d routes)", len(table))
        return True

    async def _run(self) -> None:
        while True:
            await self.refresh_once()
            await asyncio.sleep(self.interval_s)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="route-metadata-refresh")

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
