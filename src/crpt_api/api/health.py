import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from crpt_api.services.crpt_gateway import get_crpt_api
from crpt_api.services.throttle import ConfigurationError

logger = logging.getLogger(__name__)
router = APIRouter(tags=["service"])


class HealthResponse(BaseModel):
    status: str = Field(
        ...,
        json_schema_extra={"example": "ok"},
    )


class ThrottleHealthResponse(BaseModel):
    status: str = Field(..., json_schema_extra={"example": "ok"})
    capacity: int = Field(..., description="Total number of permits.", json_schema_extra={"example": 2})
    cooldown_s: float = Field(
        ...,
        description="Seconds a permit stays held after each request.",
        json_schema_extra={"example": 5.0},
    )
    available_permits: int = Field(
        ...,
        description="Permits free right now.",
        json_schema_extra={"example": 2},
    )


@router.get("/health", response_model=HealthResponse, summary="Service health")
def health() -> HealthResponse:
    return HealthResponse(status="ok")


@router.get(
    "/health/throttle",
    response_model=ThrottleHealthResponse,
    summary="Submission throttle state",
    responses={
        500: {"description": "Service misconfiguration (e.g. CRPT_RL_CAPACITY <= 0)."},
    },
)
def health_throttle() -> ThrottleHealthResponse:
    try:
        throttle = get_crpt_api().throttle
    except ConfigurationError as exc:
        logger.exception("Service misconfiguration")
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return ThrottleHealthResponse(
        status="ok",
        capacity=throttle.capacity,
        cooldown_s=throttle.cooldown_s,
        available_permits=throttle.available_permits,
    )
