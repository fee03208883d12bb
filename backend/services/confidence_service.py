"""Per-day forecast confidence score."""

from __future__ import annotations

import math
from typing import Optional

from backend.domain.constraints import ConfidenceConfig, validate_confidence_config
from backend.domain.models import ConfidenceResult


CONFIDENCE_WEIGHTS: dict[str, float] = {
    "data_completeness": 0.25,
    "event_signal_strength": 0.10,
    "historical_stability": 0.15,
    "trend_consistency": 0.10,
    "data_volume": 0.25,
    "volatility": 0.15,
}

NO_EVENT_SIGNAL = 0.60
NO_DATA_VOLUME_SCORE = 0.2
NEUTRAL_VOLATILITY_SCORE = 0.65
MIN_VOLATILITY_SCORE = 0.30
MIN_TREND_CONSISTENCY = 0.3


def data_completeness(day_offset: int, horizon: int) -> float:
    """Exponential decay with forecast distance: 1.0 today, ~0.37 at the horizon."""
    return math.exp(-max(0, day_offset) / horizon)


def event_signal_strength(has_event: bool, event_multiplier: float) -> float:
    if not has_event:
        return NO_EVENT_SIGNAL
    return max(0.0, min(1.0, 0.70 + (event_multiplier - 1.0) * 2.0))


def trend_consistency(trend_factor: float) -> float:
    return max(MIN_TREND_CONSISTENCY, 1.0 - abs(trend_factor - 1.0) * 5.0)


def data_volume_score(data_point_count: int, min_data_points: int) -> float:
    if data_point_count <= 0:
        return NO_DATA_VOLUME_SCORE
    if data_point_count >= min_data_points:
        return 1.0
    growth = math.log1p(data_point_count) / math.log1p(min_data_points)
    return NO_DATA_VOLUME_SCORE + (1.0 - NO_DATA_VOLUME_SCORE) * growth


def volatility_score(occupancy_volatility: Optional[float]) -> float:
    if occupancy_volatility is None:
        return NEUTRAL_VOLATILITY_SCORE
    return max(MIN_VOLATILITY_SCORE, min(1.0, 1.0 - occupancy_volatility * 3.5))


def score_confidence(
    day_offset: int,
    has_event: bool,
    event_multiplier: float,
    trend_factor: float,
    config: Optional[ConfidenceConfig] = None,
) -> ConfidenceResult:
    resolved = config or ConfidenceConfig()
    validate_confidence_config(resolved)

    completeness = data_completeness(day_offset, resolved.forecast_horizon)
    event_signal = event_signal_strength(has_event, event_multiplier)
    consistency = trend_consistency(trend_factor)
    volume = data_volume_score(resolved.data_point_count, resolved.min_data_points)
    volatility = volatility_score(resolved.occupancy_volatility)

    weighted = (
        completeness * CONFIDENCE_WEIGHTS["data_completeness"]
        + event_signal * CONFIDENCE_WEIGHTS["event_signal_strength"]
        + resolved.historical_stability * CONFIDENCE_WEIGHTS["historical_stability"]
        + consistency * CONFIDENCE_WEIGHTS["trend_consistency"]
        + volume * CONFIDENCE_WEIGHTS["data_volume"]
        + volatility * CONFIDENCE_WEIGHTS["volatility"]
    )

    return ConfidenceResult(
        confidence=int(max(0, min(100, round(weighted * 100)))),
        data_completeness=round(completeness, 2),
        event_signal_strength=round(event_signal, 2),
        historical_stability=resolved.historical_stability,
        trend_consistency=round(consistency, 2),
        data_volume_score=round(volume, 2),
        volatility_score=round(volatility, 2),
    )
