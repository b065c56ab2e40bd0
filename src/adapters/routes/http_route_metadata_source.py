from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from src.app.ports.output import IRouteMetadataSource
from src.domain.exceptions.feed import RouteMetadataError
from src.domain.models.realtime import RouteMetadata


def _opt_str(value: Any) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def parse_route_metadata(payload: Any) -> dict[str, RouteMetadata]:
    """Parse `{route_id: {short_name, long_name, color}}`.

    Entries that are not objects are skipped.
    """

    if not isinstance(payload, dict):
        raise RouteMetadataError("Route metadata must be a JSON object")

    table: dict[str, RouteMetadata] = {}
    for route_id, meta in payload.items():
        if not isinstance(meta, dict):
            continue
        table[str(route_id)] = RouteMetadata(
            short_name=_opt_str(meta.get("short_name")),
            long_name=_opt_str(meta.get("long_name")),
            color=_opt_str(meta.get("color")),
        )
    return table


@dataclass(slots=True)
class HttpRouteMetadataSource(IRouteMetadataSource):
    """Loads route metadata from a JSON document over HTTP.

    Example document:
      {"AO1": {"short_name": "O-Bahn O1", "color": "#ff6600"}}
    """

    url: str
    user_agent: str
    timeout_s: float = 10.0
    transport: httpx.AsyncBaseTransport | None = None

    async def load(self) -> dict[str, RouteMetadata]:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s,
                transport=self.transport,
                follow_redirects=True,
            ) as client:
                resp = await client.get(
                    self.url, headers={"User-Agent": self.user_agent}
                )
        except httpx.HTTPError as exc:
            raise RouteMetadataError(f"Error loading routes JSON: {exc}") from exc

        if not resp.is_success:
            raise RouteMetadataError(f"Failed to load routes JSON {resp.status_code}")

        try:
            payload = resp.json()
        except ValueError as exc:
            raise RouteMetadataError(f"Routes JSON is not valid JSON: {exc}") from exc
        return parse_route_metadata(payload)
