"""Configuration structs and fail-fast validation for the pricing core."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from typing import Optional


WEIGHT_SUM_TOLERANCE = 1e-6
PRICE_RANGE_TOLERANCE = 1e-9


@dataclass(frozen=True)
class DemandWeights:
    weekday_avg: float = 0.30
    trend_7day: float = 0.20
    seasonality_30day: float = 0.20
    event_strength: float = 0.15
    booking_pace: float = 0.15

    @property
    def total(self) -> float:
        return sum(getattr(self, item.name) for item in fields(self))

    def normalized(self) -> "DemandWeights":
        """Return a copy scaled so the weights sum to exactly 1.0."""
        total = self.total
        if total <= 0.0:
            raise ValueError("demand weights must have a positive sum to normalize")
        return DemandWeights(
            **{item.name: getattr(self, item.name) / total for item in fields(self)}
        )

    def to_dict(self) -> dict[str, float]:
        return {item.name: getattr(self, item.name) for item in fields(self)}


@dataclass(frozen=True)
class DemandModelConfig:
    base_occupancy: float
    weights: DemandWeights = field(default_factory=DemandWeights)
    trend_momentum: Optional[float] = None
    historical_weekday_avg: Optional[float] = None
    historical_trend_7day: Optional[float] = None
    historical_seasonality_30day: Optional[float] = None
    booking_pace_velocity: Optional[float] = None
    external_signal_score: float = 0.0


@dataclass(frozen=True)
class PricingConfig:
    base_price: float
    floor_multiplier: float = 0.70
    ceiling_multiplier: float = 1.80
    min_spread: float = 0.15
    max_spread: float = 0.20
    saturation_threshold: float = 95.0


@dataclass(frozen=True)
class ElasticityConfig:
    coefficient: float = 0.004
    occupancy_floor: float = 15.0
    occupancy_ceiling: float = 98.0
    response_model: str = "nonlinear"
    linear_coefficient: float = -0.4


@dataclass(frozen=True)
class ConfidenceConfig:
    forecast_horizon: int = 30
    historical_stability: float = 0.75
    data_point_count: int = 0
    min_data_points: int = 90
    occupancy_volatility: Optional[float] = None


@dataclass(frozen=True)
class HotelProfile:
    total_rooms: int
    base_price: float
    avg_occupancy: float
    currency: str = "EUR"
    name: str = ""
    city: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None


@dataclass(frozen=True)
class BacktestConfig:
    base_occupancy: float
    base_price: float
    total_rooms: int
    weights: DemandWeights = field(default_factory=DemandWeights)
    momentum_lookback_days: int = 14
    momentum_min_days: int = 3
    volatility_lookback_days: int = 30


def _require_finite(name: str, value: float) -> None:
    if not math.isfinite(value):
        raise ValueError(f"{name} must be a finite number")


def validate_base_occupancy(value: float) -> None:
    _require_finite("base_occupancy", value)
    if not 0.0 <= value <= 1.0:
        raise ValueError("base_occupancy must be between 0 and 1")


def validate_demand_weights(weights: DemandWeights) -> None:
    """Reject weight sets the re-centering step cannot interpret.

    The demand score subtracts ``base_occupancy * 100`` from the weighted
    component sum, which only lands on the 50 midpoint when the weights sum
    to 1.0. Use ``DemandWeights.normalized()`` to rescale explicitly.
    """
    for name, value in weights.to_dict().items():
        _require_finite(f"weights.{name}", value)
        if value < 0.0:
            raise ValueError(f"weights.{name} must be >= 0")
    if abs(weights.total - 1.0) > WEIGHT_SUM_TOLERANCE:
        raise ValueError(
            f"demand weights must sum to 1.0 (got {weights.total:.6f}); "
            "call DemandWeights.normalized() to rescale"
        )


def validate_demand_config(config: DemandModelConfig) -> None:
    validate_base_occupancy(config.base_occupancy)
    validate_demand_weights(config.weights)
    if config.historical_weekday_avg is not None and config.historical_weekday_avg < 0.0:
        raise ValueError("historical_weekday_avg must be >= 0")
    if config.trend_momentum is not None and config.trend_momentum < 0.0:
        raise ValueError("trend_momentum must be >= 0")
    _require_finite("external_signal_score", config.external_signal_score)


def validate_pricing_config(config: PricingConfig) -> None:
    _require_finite("base_price", config.base_price)
    if config.base_price <= 0.0:
        raise ValueError("base_price must be > 0")
    if config.floor_multiplier <= 0.0:
        raise ValueError("floor_multiplier must be > 0")
    if config.ceiling_multiplier < config.floor_multiplier:
        raise ValueError("ceiling_multiplier must be >= floor_multiplier")
    floor = config.base_price * config.floor_multiplier
    ceiling = config.base_price * config.ceiling_multiplier
    if math.ceil(floor - PRICE_RANGE_TOLERANCE) > math.floor(ceiling + PRICE_RANGE_TOLERANCE):
        raise ValueError(
            f"price range [{floor:.2f}, {ceiling:.2f}] contains no whole currency unit"
        )
    if not 0.0 <= config.min_spread < 1.0:
        raise ValueError("min_spread must be in [0, 1)")
    if config.max_spread < 0.0:
        raise ValueError("max_spread must be >= 0")
    if not 0.0 < config.saturation_threshold < 100.0:
        raise ValueError("saturation_threshold must be in (0, 100)")


def validate_elasticity_config(config: ElasticityConfig) -> None:
    if config.response_model not in {"nonlinear", "linear"}:
        raise ValueError("response_model must be 'nonlinear' or 'linear'")
    if config.coefficient < 0.0:
        raise ValueError("coefficient must be >= 0")
    if not 0.0 <= config.occupancy_floor <= config.occupancy_ceiling <= 100.0:
        raise ValueError("occupancy bounds must satisfy 0 <= floor <= ceiling <= 100")


def validate_confidence_config(config: ConfidenceConfig) -> None:
    if config.forecast_horizon <= 0:
        raise ValueError("forecast_horizon must be > 0")
    if not 0.0 <= config.historical_stability <= 1.0:
        raise ValueError("historical_stability must be between 0 and 1")
    if config.data_point_count < 0:
        raise ValueError("data_point_count must be >= 0")
    if config.min_data_points <= 0:
        raise ValueError("min_data_points must be > 0")
    if config.occupancy_volatility is not None and config.occupancy_volatility < 0.0:
        raise ValueError("occupancy_volatility must be >= 0")


def validate_hotel_profile(profile: HotelProfile) -> None:
    if profile.total_rooms < 0:
        raise ValueError("total_rooms must be >= 0")
    _require_finite("base_price", profile.base_price)
    if profile.base_price <= 0.0:
        raise ValueError("base_price must be > 0")
    validate_base_occupancy(profile.avg_occupancy)


def validate_backtest_config(config: BacktestConfig) -> None:
    validate_base_occupancy(config.base_occupancy)
    validate_demand_weights(config.weights)
    if config.base_price <= 0.0:
        raise ValueError("base_price must be > 0")
    if config.total_rooms < 0:
        raise ValueError("total_rooms must be >= 0")
    if config.momentum_lookback_days <= 0:
        raise ValueError("momentum_lookback_days must be > 0")
    if not 0 < config.momentum_min_days <= config.momentum_lookback_days:
        raise ValueError("momentum_min_days must be in (0, momentum_lookback_days]")
    if config.volatility_lookback_days < 2:
        raise ValueError("volatility_lookback_days must be >= 2")
