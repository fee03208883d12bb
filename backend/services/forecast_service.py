"""Forward forecast orchestration: demand, price, confidence and revenue per day."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Optional, Sequence

import numpy as np

from backend.domain.constraints import (
    BacktestConfig,
    ConfidenceConfig,
    DemandModelConfig,
    ElasticityConfig,
    HotelProfile,
    PricingConfig,
    validate_hotel_profile,
)
from backend.domain.models import (
    BacktestSummary,
    CompetitorRate,
    DailyForecast,
    ExternalSignalResult,
    ForecastAccuracyResult,
    ForecastKpis,
    HistoricalDemandStats,
    LocalEvent,
    PricingAlert,
    WeatherDay,
)
from backend.repository.history_repository import HistoryRepository
from backend.repository.market_signal_repository import CachedSignalProvider
from backend.services.accuracy_service import build_forecast_records, track_forecast_accuracy
from backend.services.backtest_service import run_backtest
from backend.services.confidence_service import score_confidence
from backend.services.demand_service import score_demand
from backend.services.market_signal_service import AttendanceEstimator, aggregate_market_signal
from backend.services.pricing_service import optimize_price
from backend.services.revenue_service import RevenueSimulationInput, simulate_revenue
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)

MAX_HORIZON_DAYS = 365
SURGE_SCORE = 85
EVENT_ALERT_SCORE = 70
RISK_SCORE = 55
TARGET_OCCUPANCY = 65


class ForecastError(Exception):
    """Base error for forecast workflows."""


class ForecastValidationError(ForecastError):
    """Raised when forecast inputs are invalid."""


@dataclass(frozen=True)
class ForecastReport:
    reference_date: date
    currency: str
    forecasts: tuple[DailyForecast, ...]
    alerts: tuple[PricingAlert, ...]
    kpis: ForecastKpis
    weather_available: bool
    events_available: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "reference_date": self.reference_date.isoformat(),
            "currency": self.currency,
            "weather_available": self.weather_available,
            "events_available": self.events_available,
            "kpis": self.kpis.to_dict(),
            "alerts": [alert.to_dict() for alert in self.alerts],
            "forecasts": [forecast.to_dict() for forecast in self.forecasts],
        }


def pricing_config_for(profile: HotelProfile, settings: Settings) -> PricingConfig:
    return PricingConfig(
        base_price=profile.base_price,
        floor_multiplier=settings.pricing_floor_multiplier,
        ceiling_multiplier=settings.pricing_ceiling_multiplier,
        min_spread=settings.pricing_min_spread,
        max_spread=settings.pricing_max_spread,
        saturation_threshold=settings.pricing_saturation_threshold,
    )


def elasticity_config_for(settings: Settings) -> ElasticityConfig:
    return ElasticityConfig(
        coefficient=settings.elasticity_coefficient,
        occupancy_floor=settings.elasticity_occupancy_floor,
        occupancy_ceiling=settings.elasticity_occupancy_ceiling,
    )


def confidence_config_for(stats: HistoricalDemandStats, settings: Settings) -> ConfidenceConfig:
    return ConfidenceConfig(
        forecast_horizon=settings.forecast_horizon_days,
        historical_stability=settings.confidence_historical_stability,
        data_point_count=stats.total_records,
        min_data_points=settings.confidence_min_data_points,
        occupancy_volatility=stats.occupancy_volatility if stats.has_data else None,
    )


def demand_config_for(
    target_date: date,
    profile: HotelProfile,
    stats: HistoricalDemandStats,
    external_signal_score: float,
) -> DemandModelConfig:
    if not stats.has_data:
        return DemandModelConfig(
            base_occupancy=profile.avg_occupancy,
            external_signal_score=external_signal_score,
        )
    weekday = target_date.weekday()
    return DemandModelConfig(
        base_occupancy=profile.avg_occupancy,
        historical_weekday_avg=stats.weekday_avg_occupancy[weekday],
        historical_trend_7day=stats.rolling_7day_trend,
        historical_seasonality_30day=stats.rolling_30day_seasonality,
        booking_pace_velocity=stats.weekday_booking_pace[weekday],
        external_signal_score=external_signal_score,
    )


def build_daily_forecast(
    target_date: date,
    day_offset: int,
    profile: HotelProfile,
    stats: HistoricalDemandStats,
    signal: ExternalSignalResult,
    settings: Optional[Settings] = None,
) -> DailyForecast:
    """Run one day through demand, pricing, confidence and revenue simulation."""

    resolved = settings or get_settings()
    demand = score_demand(
        target_date,
        day_offset,
        demand_config_for(target_date, profile, stats, signal.total_score),
    )
    pricing = optimize_price(
        demand.demand_score,
        pricing_config_for(profile, resolved),
        projected_occupancy=demand.demand_score,
    )
    confidence = score_confidence(
        day_offset,
        demand.event_name is not None,
        demand.event_multiplier,
        demand.trend_factor,
        confidence_config_for(stats, resolved),
    )
    revenue = simulate_revenue(
        RevenueSimulationInput(
            total_rooms=profile.total_rooms,
            predicted_occupancy=demand.demand_score,
            recommended_price=pricing.recommended_price,
            static_price=profile.base_price,
            manual_price=pricing.recommended_price,
            elasticity_config=elasticity_config_for(resolved),
        )
    )
    return DailyForecast(
        date=target_date,
        day_offset=day_offset,
        demand=demand,
        pricing=pricing,
        confidence=confidence,
        revenue=revenue,
        signal=signal,
        static_price=profile.base_price,
    )


def generate_forecasts(
    reference_date: date,
    profile: HotelProfile,
    stats: HistoricalDemandStats,
    competitor_rates: Sequence[CompetitorRate] = (),
    weather: Sequence[WeatherDay] = (),
    events: Sequence[LocalEvent] = (),
    horizon: Optional[int] = None,
    settings: Optional[Settings] = None,
    attendance_estimator: Optional[AttendanceEstimator] = None,
) -> list[DailyForecast]:
    resolved = settings or get_settings()
    days = resolved.forecast_horizon_days if horizon is None else horizon
    if not 0 < days <= MAX_HORIZON_DAYS:
        raise ForecastValidationError(f"horizon must be between 1 and {MAX_HORIZON_DAYS}")
    try:
        validate_hotel_profile(profile)
    except ValueError as exc:
        raise ForecastValidationError(str(exc)) from exc

    forecasts: list[DailyForecast] = []
    for day_offset in range(days):
        target_date = reference_date + timedelta(days=day_offset)
        signal = aggregate_market_signal(
            target_date,
            profile.base_price,
            competitor_rates,
            weather,
            events,
            reference_date=reference_date,
            attendance_estimator=attendance_estimator,
        )
        forecasts.append(
            build_daily_forecast(target_date, day_offset, profile, stats, signal, resolved)
        )
    return forecasts


def _format_price(currency: str, amount: float) -> str:
    return f"{currency} {amount:,.0f}"


def generate_alerts(
    forecasts: Sequence[DailyForecast],
    limit: int = 5,
    currency: str = "EUR",
) -> list[PricingAlert]:
    """Collect surge, event and low-occupancy alerts in date order, truncated to ``limit``."""

    alerts: list[PricingAlert] = []

    def _add(alert_type: str, title: str, description: str, day: date, impact: str) -> None:
        alerts.append(
            PricingAlert(
                alert_id=str(len(alerts) + 1),
                alert_type=alert_type,
                title=title,
                description=description,
                date=day,
                impact=impact,
            )
        )

    for forecast in forecasts:
        score = forecast.demand.demand_score
        event_name = forecast.demand.event_name
        pricing = forecast.pricing
        label = forecast.date.strftime("%b %d")

        if pricing.is_saturated:
            _add(
                "surge",
                "Demand saturation: profit-maximizing mode",
                (
                    f"Occupancy at {score}% on {label}. Switched to profit-maximizing "
                    f"pricing at {_format_price(currency, pricing.recommended_price)} "
                    f"(+{round(pricing.saturation_boost * 100)}% saturation boost)."
                ),
                forecast.date,
                "Saturation mode active",
            )
        elif score > SURGE_SCORE and event_name:
            uplift = round((pricing.price_multiplier - 1) * 100)
            _add(
                "surge",
                f"High demand surge: {event_name}",
                (
                    f"Demand score of {score} predicted on {label} due to {event_name}. "
                    f"Recommended price {_format_price(currency, pricing.recommended_price)} "
                    f"(+{uplift}% above base)."
                ),
                forecast.date,
                f"+{uplift}% price opportunity",
            )

        if event_name and EVENT_ALERT_SCORE < score <= SURGE_SCORE:
            _add(
                "event",
                f"Event detected: {event_name}",
                (
                    f"{event_name} on {label} is driving demand to {score}. "
                    f"Event multiplier: {forecast.demand.event_multiplier}x."
                ),
                forecast.date,
                f"+{round((forecast.demand.event_multiplier - 1) * 100)}% demand increase",
            )

        if score < RISK_SCORE:
            _add(
                "risk",
                f"Low occupancy risk on {label}",
                (
                    f"Demand score of {score} is below target. Consider promotional "
                    f"pricing at {_format_price(currency, pricing.min_price)}."
                ),
                forecast.date,
                f"{score - TARGET_OCCUPANCY}% below target",
            )

    return alerts[:limit]


def compute_kpis(forecasts: Sequence[DailyForecast]) -> ForecastKpis:
    if not forecasts:
        return ForecastKpis(
            avg_occupancy=0,
            avg_recommended_price=0,
            avg_confidence=0,
            projected_revenue=0.0,
            static_revenue=0.0,
            revenue_lift=0.0,
        )

    projected_revenue = float(sum(forecast.revenue.ai_revenue for forecast in forecasts))
    static_revenue = float(sum(forecast.revenue.static_revenue for forecast in forecasts))
    revenue_lift = (
        round((projected_revenue - static_revenue) / static_revenue * 100, 1)
        if static_revenue > 0
        else 0.0
    )
    return ForecastKpis(
        avg_occupancy=int(round(np.mean([f.predicted_occupancy for f in forecasts]))),
        avg_recommended_price=int(
            round(np.mean([f.pricing.recommended_price for f in forecasts]))
        ),
        avg_confidence=int(round(np.mean([f.confidence.confidence for f in forecasts]))),
        projected_revenue=projected_revenue,
        static_revenue=static_revenue,
        revenue_lift=revenue_lift,
    )


class ForecastService:
    """Wires stored history and market signals into forecasts and backtests.

    Every workflow takes its reference date explicitly so results are
    reproducible for a given record set.
    """

    def __init__(
        self,
        repository: Optional[HistoryRepository] = None,
        signal_provider: Optional[CachedSignalProvider] = None,
        settings: Optional[Settings] = None,
        attendance_estimator: Optional[AttendanceEstimator] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or HistoryRepository()
        self._signal_provider = signal_provider or CachedSignalProvider(settings=self._settings)
        self._attendance_estimator = attendance_estimator

    @property
    def repository(self) -> HistoryRepository:
        return self._repository

    def default_profile(self) -> HotelProfile:
        return HotelProfile(
            total_rooms=self._settings.hotel_total_rooms,
            base_price=self._settings.hotel_base_price,
            avg_occupancy=self._settings.hotel_avg_occupancy,
            currency=self._settings.hotel_currency,
            name=self._settings.hotel_name,
            city=self._settings.hotel_city,
        )

    def build_forecast(
        self,
        reference_date: date,
        profile: Optional[HotelProfile] = None,
        competitor_rates: Sequence[CompetitorRate] = (),
        horizon: Optional[int] = None,
    ) -> ForecastReport:
        resolved_profile = profile or self.default_profile()
        stats = self._repository.get_stats()
        weather = self._signal_provider.fetch_weather(resolved_profile.city)
        events = self._signal_provider.fetch_events(
            resolved_profile.city,
            resolved_profile.latitude,
            resolved_profile.longitude,
        )

        forecasts = generate_forecasts(
            reference_date,
            resolved_profile,
            stats,
            competitor_rates=competitor_rates,
            weather=weather.records,
            events=events.records,
            horizon=horizon,
            settings=self._settings,
            attendance_estimator=self._attendance_estimator,
        )
        alerts = generate_alerts(
            forecasts,
            limit=self._settings.alert_limit,
            currency=resolved_profile.currency,
        )
        kpis = compute_kpis(forecasts)

        logger.info(
            (
                "Forecast generated | reference_date=%s | days=%s | alerts=%s | "
                "history_records=%s | weather_available=%s | events_available=%s"
            ),
            reference_date.isoformat(),
            len(forecasts),
            len(alerts),
            stats.total_records,
            weather.available,
            events.available,
        )
        return ForecastReport(
            reference_date=reference_date,
            currency=resolved_profile.currency,
            forecasts=tuple(forecasts),
            alerts=tuple(alerts),
            kpis=kpis,
            weather_available=weather.available,
            events_available=events.available,
        )

    def backtest_config(self, profile: Optional[HotelProfile] = None) -> BacktestConfig:
        resolved_profile = profile or self.default_profile()
        return BacktestConfig(
            base_occupancy=resolved_profile.avg_occupancy,
            base_price=resolved_profile.base_price,
            total_rooms=resolved_profile.total_rooms,
        )

    def run_backtest(self, profile: Optional[HotelProfile] = None) -> BacktestSummary:
        records = self._repository.list_records()
        if not records:
            raise ForecastValidationError("No historical records available for backtesting")
        return run_backtest(records, self.backtest_config(profile))

    def forecast_accuracy(self, profile: Optional[HotelProfile] = None) -> ForecastAccuracyResult:
        """Score backtested demand against the stored actual occupancy."""

        summary = self.run_backtest(profile)
        predictions = {
            day.date: float(day.ai_projected_occupancy) for day in summary.daily_results
        }
        records = build_forecast_records(self._repository.list_records(), predictions)
        return track_forecast_accuracy(records)
