"""Weighted multi-factor demand score.

    demand = 50 + (w1*weekday + w2*trend + w3*seasonality + w4*event
                   + w5*booking_pace - base_occupancy*100) + external

Each component is a 0-100 score anchored to the base occupancy, so the
weighted sum sits near ``base_occupancy * 100`` on an ordinary day.
Subtracting that centre moves an ordinary day to 50, which keeps the
discount tier of the price optimizer reachable.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Optional

from backend.domain.constraints import DemandModelConfig, validate_demand_config
from backend.domain.models import DemandComponents, DemandResult
from backend.utils.logger import get_logger


logger = get_logger(__name__)

# January=1 ... December=12
SEASONALITY_FACTORS: dict[int, float] = {
    1: 0.75, 2: 0.80, 3: 0.88, 4: 0.95, 5: 1.05, 6: 1.15,
    7: 1.25, 8: 1.25, 9: 1.10, 10: 1.00, 11: 0.82, 12: 0.85,
}

# Monday=0 ... Sunday=6
WEEKDAY_FACTORS: dict[int, float] = {
    0: 0.78, 1: 0.80, 2: 0.85, 3: 0.92, 4: 1.15, 5: 1.12, 6: 0.90,
}

EVENT_IMPACTS: dict[str, float] = {
    "conference": 1.18,
    "festival": 1.25,
    "sports": 1.15,
    "holiday": 1.12,
    "trade_fair": 1.20,
    "concert": 1.10,
    "none": 1.00,
}


@dataclass(frozen=True)
class ScheduledEvent:
    day_offset: int
    event_type: str
    name: str


SCHEDULED_EVENTS: tuple[ScheduledEvent, ...] = (
    ScheduledEvent(3, "conference", "Tech Conference"),
    ScheduledEvent(7, "sports", "City Marathon"),
    ScheduledEvent(14, "festival", "Music Festival"),
    ScheduledEvent(15, "festival", "Music Festival"),
    ScheduledEvent(21, "trade_fair", "Trade Fair"),
    ScheduledEvent(22, "trade_fair", "Trade Fair"),
    ScheduledEvent(25, "holiday", "National Holiday"),
)

TREND_CYCLE_DAYS = 30
TREND_AMPLITUDE = 0.06
PACE_LEAD_TIME_DAYS = 30
PACE_TREND_GAIN = 3.0
EVENT_SCORE_GAIN = 400.0


def find_scheduled_event(day_offset: int) -> Optional[ScheduledEvent]:
    for event in SCHEDULED_EVENTS:
        if event.day_offset == day_offset:
            return event
    return None


def synthetic_trend_factor(day_offset: int) -> float:
    """Smooth bounded oscillation used when no momentum estimate is supplied."""
    return 1.0 + math.sin(day_offset * math.pi / TREND_CYCLE_DAYS) * TREND_AMPLITUDE


def booking_pace_velocity(
    day_offset: int,
    trend_factor: float,
    provided: Optional[float] = None,
) -> float:
    if provided is not None:
        return max(-1.0, min(1.0, provided))
    lead_time_factor = max(0.0, 1.0 - day_offset / PACE_LEAD_TIME_DAYS)
    pace = (trend_factor - 1.0) * PACE_TREND_GAIN * lead_time_factor
    return max(-1.0, min(1.0, round(pace, 2)))


def _to_score(value: float) -> int:
    return int(max(0, min(100, round(value))))


def _multiplier_score(multiplier: float, base_occupancy: float) -> int:
    return _to_score(base_occupancy * multiplier * 100)


def score_demand(target_date: date, day_offset: int, config: DemandModelConfig) -> DemandResult:
    """Score demand for one calendar day on a 0-100 scale."""

    validate_demand_config(config)
    weights = config.weights
    base_occupancy = config.base_occupancy

    seasonality_factor = SEASONALITY_FACTORS[target_date.month]
    weekday_factor = WEEKDAY_FACTORS[target_date.weekday()]

    scheduled_event = find_scheduled_event(day_offset)
    event_multiplier = EVENT_IMPACTS[scheduled_event.event_type if scheduled_event else "none"]

    trend_factor = (
        config.trend_momentum
        if config.trend_momentum is not None
        else synthetic_trend_factor(day_offset)
    )
    pace_velocity = booking_pace_velocity(
        day_offset,
        trend_factor,
        config.booking_pace_velocity,
    )

    weekday_occupancy = (
        config.historical_weekday_avg
        if config.historical_weekday_avg is not None
        else base_occupancy * weekday_factor
    )
    trend_7day = (
        config.historical_trend_7day
        if config.historical_trend_7day is not None
        else trend_factor
    )
    seasonality_30day = (
        config.historical_seasonality_30day
        if config.historical_seasonality_30day is not None
        else seasonality_factor
    )

    components = DemandComponents(
        weekday_avg_score=_to_score(weekday_occupancy * 100),
        trend_score=_multiplier_score(trend_7day, base_occupancy),
        seasonality_score=_multiplier_score(seasonality_30day, base_occupancy),
        event_score=_to_score(min(100.0, (event_multiplier - 1.0) * EVENT_SCORE_GAIN)),
        booking_pace_score=_to_score((pace_velocity + 1.0) * 50),
    )

    weighted_sum = (
        weights.weekday_avg * components.weekday_avg_score
        + weights.trend_7day * components.trend_score
        + weights.seasonality_30day * components.seasonality_score
        + weights.event_strength * components.event_score
        + weights.booking_pace * components.booking_pace_score
    )
    historical_center = base_occupancy * 100
    recentered = 50 + (weighted_sum - historical_center)
    demand_score = _to_score(recentered + config.external_signal_score)

    logger.debug(
        (
            "Demand scored | date=%s | day_offset=%s | weighted=%.1f | center=%.1f | "
            "external=%.1f | demand_score=%s"
        ),
        target_date.isoformat(),
        day_offset,
        weighted_sum,
        historical_center,
        config.external_signal_score,
        demand_score,
    )
    return DemandResult(
        demand_score=demand_score,
        seasonality_factor=seasonality_factor,
        weekday_factor=weekday_factor,
        event_multiplier=event_multiplier,
        trend_factor=round(trend_factor, 3),
        booking_pace_velocity=pace_velocity,
        external_signal_score=config.external_signal_score,
        components=components,
        weights=weights,
        event_name=scheduled_event.name if scheduled_event else None,
    )
