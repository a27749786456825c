"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import (
    AnalyticsResponse,
    ChatRequest,
    ChatResponse,
    DashboardResponse,
    MeasurementResponse,
    MedicalProfileIn,
    ReadingIn,
    ReadingOut,
    SummaryOut,
    UserCreate,
    UserDocument,
)
from models.records import Metric, Reading
from services.aggregator import InvalidWindowError, TimeWindow
from services.assistant import AssistantError
from services.devices import DeviceReadingError
from services.health import HealthService, build_default_health_service
from settings import get_settings

router = APIRouter()


def get_service() -> HealthService:
    return build_default_health_service()


def _not_found(exc: KeyError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.args[0])


def _reading_out(reading: Reading) -> ReadingOut:
    return ReadingOut(timestamp=reading.timestamp, value=reading.value)


@router.put(
    "/users/{user_id}",
    status_code=status.HTTP_201_CREATED,
    response_model=UserDocument,
    response_model_by_alias=True,
    summary="Create the document for a user if it does not exist yet.",
)
async def register_user(
    user_id: str,
    payload: Optional[UserCreate] = None,
    service: HealthService = Depends(get_service),
) -> UserDocument:
    payload = payload or UserCreate()
    return service.register_user(user_id, name=payload.name, email=payload.email)


@router.get(
    "/users/{user_id}/dashboard",
    response_model=DashboardResponse,
    summary="Latest and recent readings for every metric.",
)
async def get_dashboard(
    user_id: str,
    limit: int = Query(5, ge=1, le=100),
    service: HealthService = Depends(get_service),
) -> DashboardResponse:
    try:
        view = service.dashboard(user_id, limit=limit)
    except KeyError as exc:
        raise _not_found(exc) from exc
    return DashboardResponse(
        user_id=view["user_id"],
        has_profile=view["has_profile"],
        metrics={
            metric: {
                "latest": _reading_out(overview["latest"]) if overview["latest"] else None,
                "recent": [_reading_out(reading) for reading in overview["recent"]],
            }
            for metric, overview in view["metrics"].items()
        },
    )


@router.post(
    "/users/{user_id}/readings/{metric}",
    status_code=status.HTTP_201_CREATED,
    response_model=MeasurementResponse,
    summary="Record a reading supplied by the caller.",
)
async def record_reading(
    user_id: str,
    metric: Metric,
    payload: ReadingIn,
    service: HealthService = Depends(get_service),
) -> MeasurementResponse:
    try:
        reading = service.record_reading(user_id, metric, payload.value, at=payload.timestamp)
    except KeyError as exc:
        raise _not_found(exc) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return MeasurementResponse(metric=metric, reading=_reading_out(reading))


@router.post(
    "/users/{user_id}/measure/{metric}",
    status_code=status.HTTP_201_CREATED,
    response_model=MeasurementResponse,
    summary="Take a reading from the device and record it.",
)
def measure(
    user_id: str,
    metric: Metric,
    service: HealthService = Depends(get_service),
) -> MeasurementResponse:
    try:
        reading = service.measure(user_id, metric)
    except KeyError as exc:
        raise _not_found(exc) from exc
    except DeviceReadingError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(exc),
        ) from exc
    return MeasurementResponse(metric=metric, reading=_reading_out(reading))


@router.get(
    "/users/{user_id}/analytics/{metric}",
    response_model=AnalyticsResponse,
    summary="Windowed readings and summary statistics for one metric.",
)
async def get_analytics(
    user_id: str,
    metric: Metric,
    window: Optional[str] = Query(
        None, description="last-24-hours, last-7-days, last-30-days or all-time."
    ),
    service: HealthService = Depends(get_service),
) -> AnalyticsResponse:
    try:
        selected = TimeWindow.parse(window or get_settings().default_window)
        result = service.analytics(user_id, metric, selected)
    except InvalidWindowError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc
    except KeyError as exc:
        raise _not_found(exc) from exc
    return AnalyticsResponse(
        metric=metric,
        window=selected.value,
        points=[_reading_out(point) for point in result.points],
        summary=SummaryOut(
            average=result.summary.average,
            minimum=result.summary.minimum,
            maximum=result.summary.maximum,
        ),
        skipped=result.skipped,
    )


@router.get(
    "/users/{user_id}/profile",
    summary="Fetch the stored medical profile.",
)
async def get_profile(
    user_id: str,
    service: HealthService = Depends(get_service),
) -> Dict[str, Any]:
    try:
        return service.get_profile(user_id)
    except KeyError as exc:
        raise _not_found(exc) from exc


@router.put(
    "/users/{user_id}/profile",
    summary="Replace the medical profile.",
)
async def update_profile(
    user_id: str,
    payload: MedicalProfileIn,
    service: HealthService = Depends(get_service),
) -> Dict[str, Any]:
    try:
        return service.update_profile(user_id, payload)
    except KeyError as exc:
        raise _not_found(exc) from exc


@router.post(
    "/users/{user_id}/chat",
    response_model=ChatResponse,
    summary="Ask the health assistant a question about the stored data.",
)
def chat(
    user_id: str,
    payload: ChatRequest,
    service: HealthService = Depends(get_service),
) -> ChatResponse:
    try:
        reply = service.chat(user_id, payload.message)
    except KeyError as exc:
        raise _not_found(exc) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except AssistantError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(exc),
        ) from exc
    return ChatResponse(reply=reply)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
