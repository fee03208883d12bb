"""Replay the forward pricing pipeline over historical days."""

from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd

from backend.domain.constraints import (
    BacktestConfig,
    ConfidenceConfig,
    DemandModelConfig,
    PricingConfig,
    validate_backtest_config,
)
from backend.domain.models import BacktestDayResult, BacktestSummary, HistoricalRecord
from backend.services.confidence_service import score_confidence
from backend.services.demand_service import score_demand
from backend.services.historical_stats_service import build_occupancy_frame
from backend.services.pricing_service import optimize_price
from backend.utils.logger import get_logger


logger = get_logger(__name__)

MOMENTUM_BOUNDS = (0.85, 1.15)


def _add_lookback_columns(frame: pd.DataFrame, config: BacktestConfig) -> pd.DataFrame:
    """Attach per-day momentum and volatility computed from preceding days only."""

    prior = frame["occupancy"].shift(1)
    trailing_mean = prior.rolling(
        window=config.momentum_lookback_days,
        min_periods=config.momentum_min_days,
    ).mean()
    if config.base_occupancy > 0.0:
        low, high = MOMENTUM_BOUNDS
        frame["trend_momentum"] = (
            np.clip(trailing_mean / config.base_occupancy, low, high).fillna(1.0)
        )
    else:
        frame["trend_momentum"] = 1.0

    frame["prior_volatility"] = prior.rolling(
        window=config.volatility_lookback_days,
        min_periods=2,
    ).std(ddof=1)
    frame["prior_count"] = np.arange(len(frame))
    return frame


def _backtest_day(row: pd.Series, config: BacktestConfig) -> BacktestDayResult:
    target_date = row["date"]
    demand = score_demand(
        target_date,
        0,
        DemandModelConfig(
            base_occupancy=config.base_occupancy,
            weights=config.weights,
            trend_momentum=float(row["trend_momentum"]),
        ),
    )
    pricing = optimize_price(
        demand.demand_score,
        PricingConfig(base_price=config.base_price),
        projected_occupancy=demand.demand_score,
    )
    volatility = row["prior_volatility"]
    confidence = score_confidence(
        0,
        demand.event_name is not None,
        demand.event_multiplier,
        demand.trend_factor,
        ConfidenceConfig(
            data_point_count=int(row["prior_count"]),
            occupancy_volatility=None if pd.isna(volatility) else float(volatility),
        ),
    )

    rooms_available = int(row["rooms_available"])
    rooms_sold = int(row["rooms_sold"])
    actual_adr = float(row["average_daily_rate"])
    actual_occupancy = int(round(row["occupancy"] * 100)) if rooms_available > 0 else 0
    actual_revenue = rooms_sold * actual_adr

    ai_rooms_sold = int(round(demand.demand_score / 100 * rooms_available))
    ai_revenue = float(ai_rooms_sold * pricing.recommended_price)
    revenue_difference = ai_revenue - actual_revenue

    return BacktestDayResult(
        date=target_date,
        actual_occupancy=actual_occupancy,
        actual_adr=actual_adr,
        actual_revenue=actual_revenue,
        actual_rooms_sold=rooms_sold,
        ai_demand_score=demand.demand_score,
        ai_recommended_price=pricing.recommended_price,
        ai_projected_occupancy=demand.demand_score,
        ai_projected_revenue=ai_revenue,
        ai_confidence=confidence.confidence,
        ai_pricing_tier=pricing.pricing_tier,
        revenue_difference=revenue_difference,
        is_win=revenue_difference > 0,
        seasonality_factor=demand.seasonality_factor,
        weekday_factor=demand.weekday_factor,
        event_multiplier=demand.event_multiplier,
        trend_factor=demand.trend_factor,
    )


def run_backtest(records: Sequence[HistoricalRecord], config: BacktestConfig) -> BacktestSummary:
    """Score every historical day as the forward pipeline would and compare revenue.

    Only days strictly before each target date feed its momentum and
    volatility estimates. Results are returned in date order.
    """

    validate_backtest_config(config)
    frame = _add_lookback_columns(build_occupancy_frame(records), config)
    daily_results = tuple(_backtest_day(row, config) for _, row in frame.iterrows())

    total_days = len(daily_results)
    if total_days == 0:
        return BacktestSummary(
            total_days=0,
            win_days=0,
            loss_days=0,
            actual_total_revenue=0.0,
            ai_total_revenue=0.0,
            revenue_difference=0.0,
            revenue_uplift_percent=0.0,
            mean_absolute_error=0.0,
            avg_confidence=0,
        )

    win_days = sum(1 for day in daily_results if day.is_win)
    actual_total = sum(day.actual_revenue for day in daily_results)
    ai_total = sum(day.ai_projected_revenue for day in daily_results)
    difference = ai_total - actual_total
    uplift = round(difference / actual_total * 100, 1) if actual_total > 0 else 0.0
    absolute_errors = [abs(day.ai_demand_score - day.actual_occupancy) for day in daily_results]
    mean_absolute_error = round(float(np.mean(absolute_errors)), 1)
    avg_confidence = int(round(float(np.mean([day.ai_confidence for day in daily_results]))))

    logger.info(
        (
            "Backtest completed | days=%s | wins=%s | uplift_percent=%.1f | "
            "mae=%.1f | avg_confidence=%s"
        ),
        total_days,
        win_days,
        uplift,
        mean_absolute_error,
        avg_confidence,
    )
    return BacktestSummary(
        total_days=total_days,
        win_days=win_days,
        loss_days=total_days - win_days,
        actual_total_revenue=actual_total,
        ai_total_revenue=ai_total,
        revenue_difference=difference,
        revenue_uplift_percent=uplift,
        mean_absolute_error=mean_absolute_error,
        avg_confidence=avg_confidence,
        daily_results=daily_results,
    )
