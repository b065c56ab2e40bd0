from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.app.services.freshness_cache import CacheResult, RefreshOutcome
from src.app.services.response_negotiator import FEED_ERROR_MESSAGE, negotiate
from src.domain.exceptions.feed import UpstreamHTTPError
from src.domain.models.realtime import Snapshot, VehicleRecord

TAG = '"9-fINXV39R1PCo05OqGqr7KIY9lCE"'
SNAPSHOT = Snapshot(
    records=(
        VehicleRecord(
            id="bus-1",
            route="AO1",
            lat=-34.9,
            lon=138.6,
            route_short_name="O1",
            timestamp=1700000000000,
        ),
    ),
    fingerprint="abc",
    entity_tag=TAG,
    fetched_at=datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc),
)


@pytest.mark.unit
def test_unchanged_with_matching_tag_is_not_modified() -> None:
    resp = negotiate(
        CacheResult(outcome=RefreshOutcome.UNCHANGED, snapshot=SNAPSHOT), TAG
    )

    assert resp.status_code == 304
    assert resp.body is None
    assert resp.headers["ETag"] == TAG
    assert resp.headers["Cache-Control"] == "no-store"


@pytest.mark.unit
def test_changed_content_ignores_matching_tag() -> None:
    resp = negotiate(
        CacheResult(outcome=RefreshOutcome.CHANGED, snapshot=SNAPSHOT), TAG
    )

    assert resp.status_code == 200
    assert resp.body is not None


@pytest.mark.unit
def test_unchanged_with_other_tag_sends_full_body() -> None:
    resp = negotiate(
        CacheResult(outcome=RefreshOutcome.UNCHANGED, snapshot=SNAPSHOT), '"0-x"'
    )

    assert resp.status_code == 200
    assert resp.headers == {"Cache-Control": "no-store", "ETag": TAG}
    assert resp.body == {
        "vehicles": [
            {
                "id": "bus-1",
                "route": "AO1",
                "route_short_name": "O1",
                "route_long_name": None,
                "route_color": None,
                "lat": -34.9,
                "lon": 138.6,
                "bearing": None,
                "timestamp": 1700000000000,
            }
        ],
        "updated": 1700000000000,
    }


@pytest.mark.unit
def test_stale_is_always_full_body_without_etag() -> None:
    resp = negotiate(
        CacheResult(
            outcome=RefreshOutcome.STALE,
            snapshot=SNAPSHOT,
            error=UpstreamHTTPError(500),
        ),
        TAG,
    )

    assert resp.status_code == 200
    assert resp.headers == {"Cache-Control": "no-store"}
    assert resp.body["stale"] is True
    assert resp.body["vehicles"][0]["id"] == "bus-1"


@pytest.mark.unit
def test_error_is_bad_gateway() -> None:
    resp = negotiate(
        CacheResult(outcome=RefreshOutcome.ERROR, error=UpstreamHTTPError(500)), None
    )

    assert resp.status_code == 502
    assert resp.body == {"error": FEED_ERROR_MESSAGE}
    assert "vehicles" not in resp.body
