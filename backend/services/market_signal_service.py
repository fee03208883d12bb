"""External market signal blending: events, weather and competitor rates."""

from __future__ import annotations

import math
from datetime import date
from typing import Callable, Optional, Sequence

from backend.domain.models import CompetitorRate, ExternalSignalResult, LocalEvent, WeatherDay
from backend.utils.logger import get_logger


logger = get_logger(__name__)

EVENT_CATEGORY_WEIGHTS: dict[str, float] = {
    "conference": 1.2,
    "concert": 1.1,
    "sports": 1.15,
    "festival": 1.25,
    "trade_fair": 1.2,
    "holiday": 1.12,
    "meetup": 0.6,
    "other": 0.8,
}

SEVERE_WEATHER_CONDITIONS = frozenset({"thunderstorm", "storm", "snow", "extreme"})

EVENT_IMPACT_NORMALIZER = 9.0
EVENT_IMPACT_MAX = 10.0
SIGNED_IMPACT_LIMIT = 5.0
COMPETITOR_SENSITIVITY = 25.0
TOTAL_SCORE_MAX = 20.0

DEFAULT_ATTENDANCE = 1000

AttendanceEstimator = Callable[[LocalEvent], float]


class ReportedAttendanceEstimator:
    """Trust the provider's attendance estimate, falling back to a flat default."""

    def __init__(self, default_attendance: int = DEFAULT_ATTENDANCE) -> None:
        self._default_attendance = default_attendance

    def __call__(self, event: LocalEvent) -> float:
        if event.estimated_attendance is None:
            return float(self._default_attendance)
        return float(max(0, event.estimated_attendance))


class VenueCapacityAttendanceEstimator:
    """Approximate attendance from venue size and ticket price range."""

    def __init__(
        self,
        default_attendance: int = DEFAULT_ATTENDANCE,
        default_capacity: int = 2000,
        fill_rate: float = 0.8,
        attendance_cap: int = 50000,
        premium_price_threshold: float = 200.0,
        premium_min_attendance: int = 8000,
    ) -> None:
        self._default_attendance = default_attendance
        self._default_capacity = default_capacity
        self._fill_rate = fill_rate
        self._attendance_cap = attendance_cap
        self._premium_price_threshold = premium_price_threshold
        self._premium_min_attendance = premium_min_attendance

    def __call__(self, event: LocalEvent) -> float:
        attendance = float(self._default_attendance)
        if event.venue_capacity is not None:
            capacity = event.venue_capacity or self._default_capacity
            attendance = min(capacity * self._fill_rate, float(self._attendance_cap))
        if (
            event.max_ticket_price is not None
            and event.max_ticket_price > self._premium_price_threshold
        ):
            attendance = max(attendance, float(self._premium_min_attendance))
        return attendance


def compute_event_impact(
    target_date: date,
    events: Sequence[LocalEvent],
    attendance_estimator: Optional[AttendanceEstimator] = None,
) -> float:
    estimator = attendance_estimator or ReportedAttendanceEstimator()
    day_events = [event for event in events if event.event_date == target_date]
    if not day_events:
        return 0.0

    total = 0.0
    for event in day_events:
        attendance = max(0.0, estimator(event))
        weight = EVENT_CATEGORY_WEIGHTS.get(
            event.category.strip().lower(),
            EVENT_CATEGORY_WEIGHTS["other"],
        )
        total += math.log(attendance + 1.0) * weight

    return max(0.0, min(EVENT_IMPACT_MAX, round(total / EVENT_IMPACT_NORMALIZER, 1)))


def compute_weather_impact(weather: Optional[WeatherDay], target_date: date) -> float:
    if weather is None:
        return 0.0

    is_weekend = target_date.weekday() >= 5
    if weather.condition.strip().lower() in SEVERE_WEATHER_CONDITIONS:
        return -SIGNED_IMPACT_LIMIT

    impact = 0.0
    if weather.rain_probability > 0.7 and is_weekend:
        impact = -3.0
    elif weather.rain_probability > 0.5:
        impact = -1.0

    if 18.0 <= weather.temperature <= 28.0 and is_weekend and weather.rain_probability < 0.3:
        impact = max(impact, 2.0)

    return max(-SIGNED_IMPACT_LIMIT, min(SIGNED_IMPACT_LIMIT, impact))


def select_weather_day(
    target_date: date,
    weather_series: Sequence[WeatherDay],
    reference_date: date,
) -> Optional[WeatherDay]:
    """Pick the forecast entry for ``target_date`` counted from ``reference_date``."""
    if not weather_series:
        return None
    day_offset = (target_date - reference_date).days
    if day_offset < 0:
        return None
    return weather_series[min(day_offset, len(weather_series) - 1)]


def compute_competitor_impact(
    hotel_price: float,
    competitor_rates: Sequence[CompetitorRate],
) -> float:
    if not competitor_rates:
        return 0.0
    market_average = sum(rate.price for rate in competitor_rates) / len(competitor_rates)
    if market_average == 0:
        return 0.0
    difference = (market_average - hotel_price) / market_average
    score = round(difference * COMPETITOR_SENSITIVITY, 1)
    return max(-SIGNED_IMPACT_LIMIT, min(SIGNED_IMPACT_LIMIT, score))


def aggregate_market_signal(
    target_date: date,
    hotel_price: float,
    competitor_rates: Sequence[CompetitorRate],
    weather_series: Sequence[WeatherDay],
    events: Sequence[LocalEvent],
    *,
    reference_date: date,
    attendance_estimator: Optional[AttendanceEstimator] = None,
) -> ExternalSignalResult:
    """Blend the three providers into one bounded 0-20 external score.

    Weather and competitor impacts are shifted from [-5, 5] to [0, 10]
    before summing, so a missing provider contributes its neutral value.
    """

    event_impact = compute_event_impact(target_date, events, attendance_estimator)
    weather_impact = compute_weather_impact(
        select_weather_day(target_date, weather_series, reference_date),
        target_date,
    )
    competitor_impact = compute_competitor_impact(hotel_price, competitor_rates)

    raw_score = (
        event_impact
        + (weather_impact + SIGNED_IMPACT_LIMIT)
        + (competitor_impact + SIGNED_IMPACT_LIMIT)
    )
    total_score = max(0.0, min(TOTAL_SCORE_MAX, round(raw_score, 1)))

    result = ExternalSignalResult(
        event_impact=event_impact,
        weather_impact=weather_impact,
        competitor_impact=competitor_impact,
        total_score=total_score,
        weather_available=len(weather_series) > 0,
        events_available=len(events) > 0,
    )
    logger.debug(
        (
            "Market signal aggregated | date=%s | event=%.1f | weather=%.1f | "
            "competitor=%.1f | total=%.1f"
        ),
        target_date.isoformat(),
        event_impact,
        weather_impact,
        competitor_impact,
        total_score,
    )
    return result
