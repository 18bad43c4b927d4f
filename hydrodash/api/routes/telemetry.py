from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from hydrodash.api.deps import get_telemetry_service
from hydrodash.core.errors import RaptError, RaptRateLimited
from hydrodash.schemas.telemetry import RateLimitedBody, UpstreamErrorBody
from hydrodash.services.telemetry import TelemetryRangeService

router = APIRouter(prefix="/telemetry")


@router.get(
    "/range",
    responses={
        status.HTTP_429_TOO_MANY_REQUESTS: {"model": RateLimitedBody},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": UpstreamErrorBody},
    },
)
def telemetry_by_range(
    hydrometer_id: Annotated[str, Query(alias="hydrometerId", min_length=1, max_length=128)],
    start_date: Annotated[str, Query(alias="startDate", min_length=1, max_length=64)],
    end_date: Annotated[str, Query(alias="endDate", min_length=1, max_length=64)],
    token: Annotated[str, Query(min_length=1, max_length=4096)],
    service: Annotated[TelemetryRangeService, Depends(get_telemetry_service)],
) -> JSONResponse:
    try:
        payload = service.relay(
            hydrometer_id=hydrometer_id,
            start_date=start_date,
            end_date=end_date,
            token=token,
        )
    except RaptRateLimited:
        body = RateLimitedBody(message=service.rate_limit_message)
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS, content=body.model_dump()
        )
    except RaptError as e:
        body = UpstreamErrorBody(detail=str(e))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body.model_dump()
        )
    return JSONResponse(status_code=status.HTTP_200_OK, content=payload)
