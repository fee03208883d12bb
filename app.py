"""
app.py: FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires the history store, market-signal provider and forecast service,
registers the pricing router, and runs startup initialization.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI

from backend.controllers.pricing_controller import router as pricing_router
from backend.repository.history_repository import HistoryRepository, load_records_from_csv
from backend.repository.market_signal_repository import CachedSignalProvider
from backend.services.forecast_service import ForecastService
from backend.utils.config import Settings, get_settings
from backend.utils.logger import configure_logging, get_logger


logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    signal_provider: Optional[CachedSignalProvider] = None,
) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Services are attached to app.state so every dependency is traceable
    from this function. Weather and event fetchers are supplied by the
    host through ``signal_provider``; without one, both signals report
    unavailable and contribute their neutral values.
    """
    resolved_settings = settings or get_settings()
    configure_logging(resolved_settings.log_level)

    history_repository = HistoryRepository()
    provider = signal_provider or CachedSignalProvider(settings=resolved_settings)
    forecast_service = ForecastService(
        repository=history_repository,
        signal_provider=provider,
        settings=resolved_settings,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app, resolved_settings)
        yield

    app = FastAPI(
        title=resolved_settings.app_name,
        version=resolved_settings.app_version,
        lifespan=lifespan,
    )

    app.include_router(pricing_router)

    app.state.history_repository = history_repository
    app.state.signal_provider = provider
    app.state.forecast_service = forecast_service

    return app


def _startup(app: FastAPI, settings: Settings) -> None:
    """Load the optional history export so the first forecast uses real statistics."""
    repository: HistoryRepository = app.state.history_repository

    if settings.history_csv_path:
        history_path = Path(settings.history_csv_path)
        if history_path.exists():
            logger.info("Startup: loading historical records | path=%s", history_path)
            repository.replace_records(load_records_from_csv(history_path))
        else:
            logger.warning("Startup: history file not found | path=%s", history_path)

    logger.info(
        "Startup complete | hotel=%s | total_rooms=%s | base_price=%.2f | records=%s",
        settings.hotel_name,
        settings.hotel_total_rooms,
        settings.hotel_base_price,
        repository.count_records(),
    )


# Module-level app object for uvicorn
app = create_app()
