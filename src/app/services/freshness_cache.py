from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable

from src.app.ports.output import IVehicleFeedFetcher
from src.domain.algorithms.content_hash import content_fingerprint, entity_tag
from src.domain.exceptions.feed import DecodeError, FeedError
from src.domain.models.realtime import Snapshot

logger = logging.getLogger("uvicorn.error")

DEFAULT_STALE_WINDOW = timedelta(minutes=2)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheState(str, Enum):
    EMPTY = "empty"
    FRESH = "fresh"
    STALE = "stale"


class RefreshOutcome(str, Enum):
    CHANGED = "changed"
    UNCHANGED = "unchanged"
    STALE = "stale"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class CacheResult:
    """What one request got out of the cache.

    `snapshot` is None only for ERROR.
    """

    outcome: RefreshOutcome
    snapshot: Snapshot | None = None
    error: FeedError | None = None

    @property
    def stale(self) -> bool:
        return self.outcome is RefreshOutcome.STALE


@dataclass(slots=True)
class VehiclePositionsCache:
    """Single-slot freshness cache in front of the upstream feed.

    Every call to `refresh()` hits upstream. A failed refresh falls back to the
    held snapshot while it is younger than `stale_window`.

    Identical feed bytes keep the held records. If the route metadata table
    changed since they were decoded, the re-enriched records replace them and
    the outcome is CHANGED so clients holding the old body get the new one.

    With `coalesce=True` concurrent callers share one in-flight refresh
    instead of each issuing their own upstream request.
    """

    fetcher: IVehicleFeedFetcher
    stale_window: timedelta = DEFAULT_STALE_WINDOW
    coalesce: bool = False
    clock: Callable[[], datetime] = _utcnow

    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)
    _snapshot: Snapshot | None = field(default=None, init=False, repr=False)
    _state: CacheState = field(default=CacheState.EMPTY, init=False)
    _inflight: asyncio.Task[CacheResult] | None = field(
        default=None, init=False, repr=False
    )

    @property
    def state(self) -> CacheState:
        return self._state

    @property
    def snapshot(self) -> Snapshot | None:
        return self._snapshot

    async def refresh(self) -> CacheResult:
        if not self.coalesce:
            return await self._refresh()

        task = self._inflight
        if task is None or task.done():
            task = asyncio.ensure_future(self._refresh())
            self._inflight = task
        # Shield so one client disconnecting does not cancel the shared refresh.
        return await asyncio.shield(task)

    async def _refresh(self) -> CacheResult:
        try:
            result = await self.fetcher.fetch_and_decode()
        except FeedError as exc:
            return await self._fail(exc)
        except Exception as exc:
            logger.exception("Unexpected failure decoding vehicle positions feed")
            return await self._fail(DecodeError(str(exc) or exc.__class__.__name__))

        fingerprint = content_fingerprint(result.raw)

        async with self._lock:
            now = self.clock()
            held = self._snapshot
            if (
                held is not None
                and held.fingerprint == fingerprint
                and held.records == result.records
            ):
                outcome = RefreshOutcome.UNCHANGED
                snapshot = Snapshot(
                    records=held.records,
                    fingerprint=held.fingerprint,
                    entity_tag=held.entity_tag,
                    fetched_at=now,
                )
            else:
                outcome = RefreshOutcome.CHANGED
                snapshot = Snapshot(
                    records=result.records,
                    fingerprint=fingerprint,
                    entity_tag=entity_tag(result.raw),
                    fetched_at=now,
                )
            self._snapshot = snapshot
            self._state = CacheState.FRESH

        return CacheResult(outcome=outcome, snapshot=snapshot)

    async def _fail(self, exc: FeedError) -> CacheResult:
        logger.warning("Vehicle positions refresh failed: %s", exc)

        async with self._lock:
            held = self._snapshot
            if held is not None and self.clock() - held.fetched_at < self.stale_window:
                self._state = CacheState.STALE
                return CacheResult(
                    outcome=RefreshOutcome.STALE, snapshot=held, error=exc
                )

            self._state = CacheState.EMPTY
            return CacheResult(outcome=RefreshOutcome.ERROR, error=exc)
