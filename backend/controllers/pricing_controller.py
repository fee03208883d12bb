"""HTTP controller layer for demand forecasting and pricing."""

from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from backend.controllers.dependencies import get_forecast_service, get_history_repository
from backend.domain.constraints import ElasticityConfig, HotelProfile, PricingConfig
from backend.domain.models import CompetitorRate, HistoricalRecord, LocalEvent, WeatherDay
from backend.repository.history_repository import HistoryRepository, HistoryValidationError
from backend.services.elasticity_service import project_elasticity
from backend.services.forecast_service import (
    ForecastReport,
    ForecastService,
    ForecastValidationError,
)
from backend.services.market_signal_service import aggregate_market_signal
from backend.services.pricing_service import optimize_price
from backend.services.revenue_service import RevenueSimulationInput, simulate_revenue
from backend.utils.config import get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)
settings = get_settings()

router = APIRouter(tags=["pricing"])


class HistoricalRecordPayload(BaseModel):
    date: date
    rooms_available: int = Field(ge=0)
    rooms_sold: int = Field(ge=0)
    average_daily_rate: float = Field(ge=0.0)
    cancellations: int = Field(default=0, ge=0)


class ReplaceHistoryRequest(BaseModel):
    records: list[HistoricalRecordPayload]


class HistoricalStatsResponse(BaseModel):
    has_data: bool
    total_records: int = Field(ge=0)
    avg_occupancy: float = Field(ge=0.0, le=1.0)
    weekday_avg_occupancy: list[float]
    rolling_7day_trend: float
    rolling_30day_seasonality: float
    recent_momentum_14day: float
    occupancy_volatility: float = Field(ge=0.0)
    weekday_booking_pace: list[float]
    avg_adr: float
    total_revenue: int
    date_range_start: Optional[date] = None
    date_range_end: Optional[date] = None


class HotelProfilePayload(BaseModel):
    total_rooms: int = Field(ge=0)
    base_price: float = Field(gt=0.0)
    avg_occupancy: float = Field(ge=0.0, le=1.0)
    currency: str = Field(default=settings.hotel_currency, min_length=1)
    name: str = ""
    city: str = ""
    latitude: Optional[float] = Field(default=None, ge=-90.0, le=90.0)
    longitude: Optional[float] = Field(default=None, ge=-180.0, le=180.0)

    def to_profile(self) -> HotelProfile:
        return HotelProfile(**self.model_dump())


class CompetitorRatePayload(BaseModel):
    competitor_name: str = Field(min_length=1)
    price: float = Field(ge=0.0)


class WeatherDayPayload(BaseModel):
    temperature: float
    rain_probability: float = Field(ge=0.0, le=1.0)
    condition: str = "Clear"


class LocalEventPayload(BaseModel):
    name: str = Field(min_length=1)
    category: str = "other"
    event_date: date
    estimated_attendance: Optional[int] = Field(default=None, ge=0)
    venue_capacity: Optional[int] = Field(default=None, ge=0)
    max_ticket_price: Optional[float] = Field(default=None, ge=0.0)


class ForecastRequest(BaseModel):
    reference_date: date
    hotel: Optional[HotelProfilePayload] = None
    competitor_rates: list[CompetitorRatePayload] = Field(default_factory=list)
    horizon_days: Optional[int] = Field(default=None, ge=1, le=365)


class ForecastDayResponse(BaseModel):
    date: date
    day_offset: int = Field(ge=0)
    demand_score: int = Field(ge=0, le=100)
    predicted_occupancy: int = Field(ge=0, le=100)
    recommended_price: int = Field(ge=0)
    min_price: int = Field(ge=0)
    max_price: int = Field(ge=0)
    static_price: float
    pricing_tier: str
    price_multiplier: float
    is_saturated: bool
    saturation_boost: float
    confidence: int = Field(ge=0, le=100)
    ai_revenue: float
    static_revenue: float
    seasonality_factor: float
    weekday_factor: float
    event_multiplier: float
    trend_factor: float
    booking_pace_velocity: float
    external_signal_score: float
    event_name: Optional[str] = None


class PricingAlertResponse(BaseModel):
    alert_id: str
    alert_type: Literal["surge", "event", "risk"]
    title: str
    description: str
    date: date
    impact: str


class ForecastKpisResponse(BaseModel):
    avg_occupancy: int
    avg_recommended_price: int
    avg_confidence: int
    projected_revenue: float
    static_revenue: float
    revenue_lift: float


class ForecastResponse(BaseModel):
    reference_date: date
    currency: str
    weather_available: bool
    events_available: bool
    kpis: ForecastKpisResponse
    alerts: list[PricingAlertResponse]
    forecasts: list[ForecastDayResponse]


class PriceRequest(BaseModel):
    demand_score: float
    base_price: float = Field(default=settings.hotel_base_price, gt=0.0)
    projected_occupancy: Optional[float] = Field(default=None, ge=0.0, le=100.0)
    floor_multiplier: float = Field(default=settings.pricing_floor_multiplier, gt=0.0)
    ceiling_multiplier: float = Field(default=settings.pricing_ceiling_multiplier, gt=0.0)
    saturation_threshold: float = Field(
        default=settings.pricing_saturation_threshold,
        gt=0.0,
        lt=100.0,
    )


class PriceResponse(BaseModel):
    recommended_price: int
    min_price: int
    max_price: int
    price_multiplier: float
    pricing_tier: str
    is_saturated: bool
    saturation_boost: float = Field(ge=0.0, le=0.2)


class ElasticityRequest(BaseModel):
    base_occupancy: float = Field(ge=0.0, le=100.0)
    recommended_price: float = Field(ge=0.0)
    manual_price: float = Field(ge=0.0)
    response_model: Literal["nonlinear", "linear"] = "nonlinear"


class ElasticityResponse(BaseModel):
    projected_occupancy: float
    occupancy_change: float
    price_change_percent: float
    elasticity_coefficient: float
    response_model: str


class RevenueSimulationRequest(BaseModel):
    total_rooms: int = Field(ge=0)
    predicted_occupancy: float = Field(ge=0.0, le=100.0)
    recommended_price: float = Field(ge=0.0)
    static_price: float = Field(ge=0.0)
    manual_price: float = Field(ge=0.0)


class RevenueSimulationResponse(BaseModel):
    ai_occupancy: float
    ai_rooms_sold: int
    ai_revenue: float
    static_occupancy: float
    static_rooms_sold: int
    static_revenue: float
    manual_occupancy: float
    manual_rooms_sold: int
    manual_revenue: float
    revenue_vs_static: float
    revenue_vs_ai: float
    revenue_lift_percent: float
    underpricing_loss: float = Field(ge=0.0)
    overpricing_loss: float = Field(ge=0.0)


class MarketSignalRequest(BaseModel):
    target_date: date
    reference_date: date
    hotel_price: float = Field(ge=0.0)
    competitor_rates: list[CompetitorRatePayload] = Field(default_factory=list)
    weather: list[WeatherDayPayload] = Field(default_factory=list)
    events: list[LocalEventPayload] = Field(default_factory=list)


class MarketSignalResponse(BaseModel):
    event_impact: float = Field(ge=0.0, le=10.0)
    weather_impact: float = Field(ge=-5.0, le=5.0)
    competitor_impact: float = Field(ge=-5.0, le=5.0)
    total_score: float = Field(ge=0.0, le=20.0)
    weather_available: bool
    events_available: bool


class EvaluationRequest(BaseModel):
    hotel: Optional[HotelProfilePayload] = None


class BacktestDayResponse(BaseModel):
    date: date
    actual_occupancy: int
    actual_adr: float
    actual_revenue: float
    actual_rooms_sold: int
    ai_demand_score: int
    ai_recommended_price: int
    ai_projected_occupancy: int
    ai_projected_revenue: float
    ai_confidence: int
    ai_pricing_tier: str
    revenue_difference: float
    is_win: bool


class BacktestResponse(BaseModel):
    total_days: int
    win_days: int
    loss_days: int
    actual_total_revenue: float
    ai_total_revenue: float
    revenue_difference: float
    revenue_uplift_percent: float
    mean_absolute_error: float
    avg_confidence: int
    daily_results: list[BacktestDayResponse]


class AccuracyWindowResponse(BaseModel):
    mae: float
    mape: float
    accuracy: float = Field(ge=0.0, le=100.0)
    days: int


class DailyForecastErrorResponse(BaseModel):
    date: date
    predicted: float
    actual: float
    absolute_error: float
    percentage_error: float


class ForecastAccuracyResponse(BaseModel):
    mae: float
    mape: float
    accuracy: float = Field(ge=0.0, le=100.0)
    total_days: int
    rolling_30: AccuracyWindowResponse
    daily_errors: list[DailyForecastErrorResponse]


class HealthResponse(BaseModel):
    status: str
    app_name: str
    version: str
    history_records: int


def _forecast_response(report: ForecastReport) -> ForecastResponse:
    days = [
        ForecastDayResponse(
            date=item.date,
            day_offset=item.day_offset,
            demand_score=item.demand.demand_score,
            predicted_occupancy=item.predicted_occupancy,
            recommended_price=item.pricing.recommended_price,
            min_price=item.pricing.min_price,
            max_price=item.pricing.max_price,
            static_price=item.static_price,
            pricing_tier=item.pricing.pricing_tier,
            price_multiplier=item.pricing.price_multiplier,
            is_saturated=item.pricing.is_saturated,
            saturation_boost=item.pricing.saturation_boost,
            confidence=item.confidence.confidence,
            ai_revenue=item.revenue.ai_revenue,
            static_revenue=item.revenue.static_revenue,
            seasonality_factor=item.demand.seasonality_factor,
            weekday_factor=item.demand.weekday_factor,
            event_multiplier=item.demand.event_multiplier,
            trend_factor=item.demand.trend_factor,
            booking_pace_velocity=item.demand.booking_pace_velocity,
            external_signal_score=item.signal.total_score,
            event_name=item.demand.event_name,
        )
        for item in report.forecasts
    ]
    return ForecastResponse(
        reference_date=report.reference_date,
        currency=report.currency,
        weather_available=report.weather_available,
        events_available=report.events_available,
        kpis=ForecastKpisResponse(**report.kpis.to_dict()),
        alerts=[PricingAlertResponse(**alert.to_dict()) for alert in report.alerts],
        forecasts=days,
    )


@router.put(
    "/historical_records",
    response_model=HistoricalStatsResponse,
    status_code=status.HTTP_200_OK,
)
async def replace_historical_records(
    payload: ReplaceHistoryRequest,
    repository: HistoryRepository = Depends(get_history_repository),
) -> HistoricalStatsResponse:
    """Replace the stored history; statistics are recomputed from scratch."""
    try:
        stats = repository.replace_records(
            HistoricalRecord(**record.model_dump()) for record in payload.records
        )
        return HistoricalStatsResponse(**stats.to_dict())
    except HistoryValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected history import failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to import historical records",
        ) from exc


@router.get(
    "/historical_stats",
    response_model=HistoricalStatsResponse,
    status_code=status.HTTP_200_OK,
)
async def historical_stats(
    repository: HistoryRepository = Depends(get_history_repository),
) -> HistoricalStatsResponse:
    return HistoricalStatsResponse(**repository.get_stats().to_dict())


@router.post(
    "/forecast",
    response_model=ForecastResponse,
    status_code=status.HTTP_200_OK,
)
async def forecast(
    payload: ForecastRequest,
    service: ForecastService = Depends(get_forecast_service),
) -> ForecastResponse:
    """Forecast demand and prices for each day from ``reference_date``."""
    try:
        report = service.build_forecast(
            reference_date=payload.reference_date,
            profile=payload.hotel.to_profile() if payload.hotel else None,
            competitor_rates=[
                CompetitorRate(**rate.model_dump()) for rate in payload.competitor_rates
            ],
            horizon=payload.horizon_days,
        )
        return _forecast_response(report)
    except (ForecastValidationError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected forecast failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate forecast",
        ) from exc


@router.post(
    "/price",
    response_model=PriceResponse,
    status_code=status.HTTP_200_OK,
)
async def price(payload: PriceRequest) -> PriceResponse:
    try:
        recommendation = optimize_price(
            payload.demand_score,
            PricingConfig(
                base_price=payload.base_price,
                floor_multiplier=payload.floor_multiplier,
                ceiling_multiplier=payload.ceiling_multiplier,
                min_spread=settings.pricing_min_spread,
                max_spread=settings.pricing_max_spread,
                saturation_threshold=payload.saturation_threshold,
            ),
            projected_occupancy=payload.projected_occupancy,
        )
        return PriceResponse(**recommendation.to_dict())
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected pricing failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute price",
        ) from exc


@router.post(
    "/elasticity",
    response_model=ElasticityResponse,
    status_code=status.HTTP_200_OK,
)
async def elasticity(payload: ElasticityRequest) -> ElasticityResponse:
    try:
        result = project_elasticity(
            payload.base_occupancy,
            payload.recommended_price,
            payload.manual_price,
            ElasticityConfig(
                coefficient=settings.elasticity_coefficient,
                occupancy_floor=settings.elasticity_occupancy_floor,
                occupancy_ceiling=settings.elasticity_occupancy_ceiling,
                response_model=payload.response_model,
            ),
        )
        return ElasticityResponse(**result.to_dict())
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected elasticity failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to project elasticity",
        ) from exc


@router.post(
    "/simulate_revenue",
    response_model=RevenueSimulationResponse,
    status_code=status.HTTP_200_OK,
)
async def revenue_simulation(payload: RevenueSimulationRequest) -> RevenueSimulationResponse:
    try:
        result = simulate_revenue(RevenueSimulationInput(**payload.model_dump()))
        return RevenueSimulationResponse(**result.to_dict())
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected revenue simulation failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to simulate revenue",
        ) from exc


@router.post(
    "/market_signal",
    response_model=MarketSignalResponse,
    status_code=status.HTTP_200_OK,
)
async def market_signal(payload: MarketSignalRequest) -> MarketSignalResponse:
    try:
        result = aggregate_market_signal(
            payload.target_date,
            payload.hotel_price,
            [CompetitorRate(**rate.model_dump()) for rate in payload.competitor_rates],
            [WeatherDay(**day.model_dump()) for day in payload.weather],
            [LocalEvent(**event.model_dump()) for event in payload.events],
            reference_date=payload.reference_date,
        )
        return MarketSignalResponse(**result.to_dict())
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected market signal failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to aggregate market signal",
        ) from exc


@router.post(
    "/backtest",
    response_model=BacktestResponse,
    status_code=status.HTTP_200_OK,
)
async def backtest(
    payload: EvaluationRequest,
    service: ForecastService = Depends(get_forecast_service),
) -> BacktestResponse:
    """Replay the stored history through the pricing pipeline."""
    try:
        summary = service.run_backtest(payload.hotel.to_profile() if payload.hotel else None)
        return BacktestResponse(**summary.to_dict())
    except (ForecastValidationError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected backtest failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to run backtest",
        ) from exc


@router.post(
    "/forecast_accuracy",
    response_model=ForecastAccuracyResponse,
    status_code=status.HTTP_200_OK,
)
async def forecast_accuracy(
    payload: EvaluationRequest,
    service: ForecastService = Depends(get_forecast_service),
) -> ForecastAccuracyResponse:
    try:
        result = service.forecast_accuracy(
            payload.hotel.to_profile() if payload.hotel else None
        )
        return ForecastAccuracyResponse(**result.to_dict())
    except (ForecastValidationError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected forecast accuracy failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute forecast accuracy",
        ) from exc


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health(
    repository: HistoryRepository = Depends(get_history_repository),
) -> HealthResponse:
    return HealthResponse(
        status="ok",
        app_name=settings.app_name,
        version=settings.app_version,
        history_records=repository.count_records(),
    )
