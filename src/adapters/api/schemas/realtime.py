from __future__ import annotations

from pydantic import BaseModel


class VehicleSchema(BaseModel):
    id: str
    route: str | None = None
    route_short_name: str | None = None
    route_long_name: str | None = None
    route_color: str | None = None
    lat: float
    lon: float
    bearing: float | None = None
    timestamp: int | None = None


class VehiclePositionsSchema(BaseModel):
    vehicles: list[VehicleSchema]
    updated: int
    stale: bool | None = None


class FeedErrorSchema(BaseModel):
    error: str


class HealthSchema(BaseModel):
    ok: bool
