from __future__ import annotations

import asyncio
import csv
from dataclasses import dataclass
from pathlib import Path

from src.app.ports.output import IRouteMetadataSource
from src.domain.exceptions.feed import RouteMetadataError
from src.domain.models.realtime import RouteMetadata


def _read_routes_txt(path: Path) -> dict[str, RouteMetadata]:
    table: dict[str, RouteMetadata] = {}
    with path.open("r", encoding="utf-8-sig", newline="") as fp:
        reader = csv.DictReader(fp)
        for row in reader:
            route_id = (row.get("route_id") or "").strip()
            if not route_id:
                continue
            # GTFS colors are hex without '#'.
            color = (row.get("route_color") or "").strip()
            table[route_id] = RouteMetadata(
                short_name=(row.get("route_short_name") or "").strip() or None,
                long_name=(row.get("route_long_name") or "").strip() or None,
                color=f"#{color}" if color else None,
            )
    return table


@dataclass(slots=True)
class LocalGtfsRouteMetadataSource(IRouteMetadataSource):
    """Loads route metadata from a static GTFS `routes.txt`.

    `base_path` may be the GTFS directory or the routes.txt file itself.
    """

    base_path: str | Path

    def _routes_path(self) -> Path:
        path = Path(self.base_path)
        if path.is_dir():
            path = path / "routes.txt"
        return path

    async def load(self) -> dict[str, RouteMetadata]:
        path = self._routes_path()
        if not path.exists():
            raise RouteMetadataError(f"Missing GTFS routes file: {path}")
        try:
            return await asyncio.to_thread(_read_routes_txt, path)
        except (OSError, csv.Error, UnicodeDecodeError) as exc:
            raise RouteMetadataError(f"Failed to read {path}: {exc}") from exc
