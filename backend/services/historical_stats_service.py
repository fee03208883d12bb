"""Historical demand statistics derived from daily occupancy records."""

from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd

from backend.domain.models import WEEKDAYS, HistoricalDemandStats, HistoricalRecord
from backend.utils.logger import get_logger


logger = get_logger(__name__)

TREND_WINDOW_DAYS = 7
SEASONALITY_WINDOW_DAYS = 30
MOMENTUM_WINDOW_DAYS = 14
VOLATILITY_WINDOW_DAYS = 30
PACE_WINDOW_DAYS = 14

TREND_BOUNDS = (0.8, 1.2)
SEASONALITY_BOUNDS = (0.7, 1.3)
MOMENTUM_BOUNDS = (0.85, 1.15)


def build_occupancy_frame(records: Sequence[HistoricalRecord]) -> pd.DataFrame:
    """Return a date-sorted frame with per-day occupancy and weekday columns."""

    frame = pd.DataFrame(
        [
            {
                "date": record.date,
                "rooms_available": record.rooms_available,
                "rooms_sold": record.rooms_sold,
                "average_daily_rate": record.average_daily_rate,
            }
            for record in records
        ],
        columns=["date", "rooms_available", "rooms_sold", "average_daily_rate"],
    )
    if frame.empty:
        frame["date_dt"] = pd.Series(dtype="datetime64[ns]")
        frame["occupancy"] = pd.Series(dtype=float)
        frame["weekday"] = pd.Series(dtype=int)
        return frame

    frame["date_dt"] = pd.to_datetime(frame["date"])
    frame = frame.sort_values(by="date_dt", kind="mergesort").reset_index(drop=True)
    available = frame["rooms_available"].where(frame["rooms_available"] > 0)
    frame["occupancy"] = (frame["rooms_sold"] / available).fillna(0.0).astype(float)
    frame["weekday"] = frame["date_dt"].dt.dayofweek.astype(int)
    return frame


def _bounded_ratio(
    numerator: float,
    denominator: float,
    bounds: tuple[float, float],
) -> float:
    if denominator <= 0.0:
        return 1.0
    low, high = bounds
    return max(low, min(high, numerator / denominator))


def _weekday_means(frame: pd.DataFrame, fill_value: float) -> pd.Series:
    return (
        frame.groupby("weekday")["occupancy"]
        .mean()
        .reindex(range(WEEKDAYS))
        .fillna(fill_value)
    )


def _weekday_booking_pace(frame: pd.DataFrame) -> tuple[float, ...]:
    if len(frame) < 2 * PACE_WINDOW_DAYS:
        return (0.0,) * WEEKDAYS

    recent = _weekday_means(frame.iloc[-PACE_WINDOW_DAYS:], fill_value=0.0)
    prior = _weekday_means(
        frame.iloc[-2 * PACE_WINDOW_DAYS:-PACE_WINDOW_DAYS],
        fill_value=0.0,
    )

    pace: list[float] = []
    for weekday in range(WEEKDAYS):
        prior_mean = float(prior[weekday])
        if prior_mean <= 0.0:
            pace.append(0.0)
            continue
        velocity = round((float(recent[weekday]) - prior_mean) / prior_mean, 2)
        pace.append(max(-1.0, min(1.0, velocity)))
    return tuple(pace)


def compute_historical_stats(records: Sequence[HistoricalRecord]) -> HistoricalDemandStats:
    """Derive weekday, trend, seasonality, volatility and pace statistics.

    The result is rebuilt wholesale from ``records``; an empty input yields
    neutral multipliers with ``has_data=False``.
    """

    if not records:
        return HistoricalDemandStats.empty()

    frame = build_occupancy_frame(records)
    occupancy = frame["occupancy"]
    record_count = len(frame)
    avg_occupancy = float(occupancy.mean())

    weekday_avg = _weekday_means(frame, fill_value=avg_occupancy)

    rolling_7day_trend = 1.0
    if record_count >= 2 * TREND_WINDOW_DAYS:
        rolling_7day_trend = _bounded_ratio(
            float(occupancy.iloc[-TREND_WINDOW_DAYS:].mean()),
            float(occupancy.iloc[-2 * TREND_WINDOW_DAYS:-TREND_WINDOW_DAYS].mean()),
            TREND_BOUNDS,
        )

    rolling_30day_seasonality = 1.0
    if record_count >= SEASONALITY_WINDOW_DAYS:
        rolling_30day_seasonality = _bounded_ratio(
            float(occupancy.iloc[-SEASONALITY_WINDOW_DAYS:].mean()),
            avg_occupancy,
            SEASONALITY_BOUNDS,
        )

    recent_momentum_14day = 1.0
    if record_count >= MOMENTUM_WINDOW_DAYS:
        recent_momentum_14day = _bounded_ratio(
            float(occupancy.iloc[-MOMENTUM_WINDOW_DAYS:].mean()),
            avg_occupancy,
            MOMENTUM_BOUNDS,
        )

    volatility = occupancy.iloc[-VOLATILITY_WINDOW_DAYS:].std(ddof=1)
    occupancy_volatility = 0.0 if np.isnan(volatility) else float(volatility)

    avg_adr = float(frame["average_daily_rate"].mean())
    total_revenue = float((frame["rooms_sold"] * frame["average_daily_rate"]).sum())

    stats = HistoricalDemandStats(
        has_data=True,
        total_records=record_count,
        avg_occupancy=round(avg_occupancy, 3),
        weekday_avg_occupancy=tuple(float(value) for value in weekday_avg),
        rolling_7day_trend=round(rolling_7day_trend, 3),
        rolling_30day_seasonality=round(rolling_30day_seasonality, 3),
        recent_momentum_14day=round(recent_momentum_14day, 3),
        occupancy_volatility=round(occupancy_volatility, 3),
        weekday_booking_pace=_weekday_booking_pace(frame),
        avg_adr=round(avg_adr, 2),
        total_revenue=int(round(total_revenue)),
        date_range_start=frame["date"].iloc[0],
        date_range_end=frame["date"].iloc[-1],
    )
    logger.debug(
        (
            "Historical stats computed | records=%s | avg_occupancy=%.3f | "
            "trend_7d=%.3f | seasonality_30d=%.3f | volatility=%.3f"
        ),
        stats.total_records,
        stats.avg_occupancy,
        stats.rolling_7day_trend,
        stats.rolling_30day_seasonality,
        stats.occupancy_volatility,
    )
    return stats
