from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Response
from fastapi.responses import JSONResponse

from src.adapters.api.dependencies import get_vehicle_positions_cache
from src.adapters.api.schemas.realtime import FeedErrorSchema, VehiclePositionsSchema
from src.app.services.freshness_cache import VehiclePositionsCache
from src.app.services.response_negotiator import negotiate

router = APIRouter(prefix="/api", tags=["realtime"])


@router.get(
    "/vehicle_positions.json",
    response_model=VehiclePositionsSchema,
    responses={304: {"description": "Not Modified"}, 502: {"model": FeedErrorSchema}},
)
async def vehicle_positions(
    if_none_match: str | None = Header(default=None),
    cache: VehiclePositionsCache = Depends(get_vehicle_positions_cache),
) -> Response:
    result = await cache.refresh()
    negotiated = negotiate(result, if_none_match)

    if negotiated.body is None:
        return Response(status_code=negotiated.status_code, headers=negotiated.headers)

    schema: type[VehiclePositionsSchema] | type[FeedErrorSchema] = (
        FeedErrorSchema if negotiated.status_code >= 400 else VehiclePositionsSchema
    )
    content = schema.model_validate(negotiated.body).model_dump(
        mode="json", exclude_unset=True
    )
    return JSONResponse(
        status_code=negotiated.status_code,
        content=content,
        headers=negotiated.headers,
    )
