"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from backend.repository.history_repository import HistoryRepository
from backend.services.forecast_service import ForecastService
from backend.utils.config import get_settings


def get_history_repository(request: Request) -> HistoryRepository:
    repository = getattr(request.app.state, "history_repository", None)
    if repository is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="History repository is not initialized",
        )
    return repository


def get_forecast_service(request: Request) -> ForecastService:
    service = getattr(request.app.state, "forecast_service", None)
    if service is None:
        repository = getattr(request.app.state, "history_repository", None)
        signal_provider = getattr(request.app.state, "signal_provider", None)
        if repository is not None:
            service = ForecastService(
                repository=repository,
                signal_provider=signal_provider,
                settings=get_settings(),
            )
            request.app.state.forecast_service = service
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Forecast service is not initialized",
        )
    return service
