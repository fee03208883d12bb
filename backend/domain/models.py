"""Domain value objects for demand scoring, pricing and evaluation."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Optional

from backend.domain.constraints import DemandWeights


WEEKDAYS = 7


@dataclass(frozen=True)
class HistoricalRecord:
    date: date
    rooms_available: int
    rooms_sold: int
    average_daily_rate: float
    cancellations: int = 0

    @property
    def occupancy(self) -> float:
        if self.rooms_available <= 0:
            return 0.0
        return self.rooms_sold / self.rooms_available

    @property
    def revenue(self) -> float:
        return self.rooms_sold * self.average_daily_rate


@dataclass(frozen=True)
class HistoricalDemandStats:
    has_data: bool
    total_records: int
    avg_occupancy: float
    weekday_avg_occupancy: tuple[float, ...]
    rolling_7day_trend: float
    rolling_30day_seasonality: float
    recent_momentum_14day: float
    occupancy_volatility: float
    weekday_booking_pace: tuple[float, ...]
    avg_adr: float
    total_revenue: int
    date_range_start: Optional[date] = None
    date_range_end: Optional[date] = None

    @classmethod
    def empty(cls) -> "HistoricalDemandStats":
        return cls(
            has_data=False,
            total_records=0,
            avg_occupancy=0.0,
            weekday_avg_occupancy=(0.0,) * WEEKDAYS,
            rolling_7day_trend=1.0,
            rolling_30day_seasonality=1.0,
            recent_momentum_14day=1.0,
            occupancy_volatility=0.0,
            weekday_booking_pace=(0.0,) * WEEKDAYS,
            avg_adr=0.0,
            total_revenue=0,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class WeatherDay:
    temperature: float
    rain_probability: float
    condition: str = "Clear"


@dataclass(frozen=True)
class LocalEvent:
    name: str
    category: str
    event_date: date
    estimated_attendance: Optional[int] = None
    venue_capacity: Optional[int] = None
    max_ticket_price: Optional[float] = None


@dataclass(frozen=True)
class CompetitorRate:
    competitor_name: str
    price: float


@dataclass(frozen=True)
class SignalFetchResult:
    """Normalized provider output; ``available`` is False on any failure."""

    records: tuple[Any, ...] = ()
    available: bool = False


@dataclass(frozen=True)
class ExternalSignalResult:
    event_impact: float
    weather_impact: float
    competitor_impact: float
    total_score: float
    weather_available: bool
    events_available: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DemandComponents:
    weekday_avg_score: int
    trend_score: int
    seasonality_score: int
    event_score: int
    booking_pace_score: int


@dataclass(frozen=True)
class DemandResult:
    demand_score: int
    seasonality_factor: float
    weekday_factor: float
    event_multiplier: float
    trend_factor: float
    booking_pace_velocity: float
    external_signal_score: float
    components: DemandComponents
    weights: DemandWeights = field(default_factory=DemandWeights)
    event_name: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PriceRecommendation:
    recommended_price: int
    min_price: int
    max_price: int
    price_multiplier: float
    pricing_tier: str
    is_saturated: bool = False
    saturation_boost: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ElasticityResult:
    projected_occupancy: float
    occupancy_change: float
    price_change_percent: float
    elasticity_coefficient: float
    response_model: str = "nonlinear"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ConfidenceResult:
    confidence: int
    data_completeness: float
    event_signal_strength: float
    historical_stability: float
    trend_consistency: float
    data_volume_score: float
    volatility_score: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RevenueSimulationResult:
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
    underpricing_loss: float
    overpricing_loss: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BacktestDayResult:
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
    seasonality_factor: float
    weekday_factor: float
    event_multiplier: float
    trend_factor: float


@dataclass(frozen=True)
class BacktestSummary:
    total_days: int
    win_days: int
    loss_days: int
    actual_total_revenue: float
    ai_total_revenue: float
    revenue_difference: float
    revenue_uplift_percent: float
    mean_absolute_error: float
    avg_confidence: int
    daily_results: tuple[BacktestDayResult, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ForecastRecord:
    date: date
    predicted_occupancy: float
    actual_occupancy: float


@dataclass(frozen=True)
class DailyForecastError:
    date: date
    predicted: float
    actual: float
    absolute_error: float
    percentage_error: float


@dataclass(frozen=True)
class AccuracyWindow:
    mae: float
    mape: float
    accuracy: float
    days: int


@dataclass(frozen=True)
class ForecastAccuracyResult:
    mae: float
    mape: float
    accuracy: float
    total_days: int
    rolling_30: AccuracyWindow
    daily_errors: tuple[DailyForecastError, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DailyForecast:
    """One forecast day as consumed by the pricing screen and alerting."""

    date: date
    day_offset: int
    demand: DemandResult
    pricing: PriceRecommendation
    confidence: ConfidenceResult
    revenue: RevenueSimulationResult
    signal: ExternalSignalResult
    static_price: float

    @property
    def predicted_occupancy(self) -> int:
        return self.demand.demand_score

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PricingAlert:
    alert_id: str
    alert_type: str
    title: str
    description: str
    date: date
    impact: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ForecastKpis:
    avg_occupancy: int
    avg_recommended_price: int
    avg_confidence: int
    projected_revenue: float
    static_revenue: float
    revenue_lift: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
