from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta

import pytest

from backend.domain.constraints import BacktestConfig
from backend.domain.models import HistoricalRecord
from backend.services.backtest_service import run_backtest


START = date(2026, 3, 2)
CONFIG = BacktestConfig(base_occupancy=0.7, base_price=120.0, total_rooms=100)


def _history(days: int = 20, sold: int = 90, adr: float = 110.0) -> list[HistoricalRecord]:
    return [
        HistoricalRecord(
            date=START + timedelta(days=offset),
            rooms_available=100,
            rooms_sold=sold,
            average_daily_rate=adr,
        )
        for offset in range(days)
    ]


def test_summary_totals_are_consistent() -> None:
    summary = run_backtest(_history(), CONFIG)

    assert summary.total_days == 20
    assert summary.win_days + summary.loss_days == summary.total_days
    assert summary.actual_total_revenue == pytest.approx(20 * 90 * 110.0)
    assert summary.ai_total_revenue == pytest.approx(
        sum(day.ai_projected_revenue for day in summary.daily_results)
    )
    assert summary.revenue_difference == pytest.approx(
        summary.ai_total_revenue - summary.actual_total_revenue
    )


def test_momentum_needs_three_prior_days() -> None:
    days = run_backtest(_history(), CONFIG).daily_results

    assert [day.trend_factor for day in days[:3]] == [1.0, 1.0, 1.0]
    # 0.90 / 0.70 is clamped to the upper bound
    assert days[3].trend_factor == pytest.approx(1.15)


def test_ai_revenue_uses_actual_rooms_available() -> None:
    for day in run_backtest(_history(), CONFIG).daily_results:
        expected_rooms = round(day.ai_demand_score / 100 * 100)
        assert day.ai_projected_revenue == pytest.approx(expected_rooms * day.ai_recommended_price)
        assert day.ai_projected_occupancy == day.ai_demand_score
        assert day.is_win == (day.revenue_difference > 0)


def test_mean_absolute_error_matches_daily_results() -> None:
    summary = run_backtest(_history(), CONFIG)
    errors = [abs(day.ai_demand_score - day.actual_occupancy) for day in summary.daily_results]
    assert summary.mean_absolute_error == pytest.approx(round(sum(errors) / len(errors), 1))
    assert all(day.actual_occupancy == 90 for day in summary.daily_results)


def test_results_are_chronological_for_unsorted_input() -> None:
    records = _history(10)
    summary = run_backtest(list(reversed(records)), CONFIG)
    assert [day.date for day in summary.daily_results] == [record.date for record in records]


def test_later_days_do_not_leak_into_earlier_estimates() -> None:
    records = _history(20)
    altered = list(records)
    altered[10] = replace(altered[10], rooms_sold=10)

    baseline = run_backtest(records, CONFIG).daily_results
    changed = run_backtest(altered, CONFIG).daily_results

    for before, after in zip(baseline[:11], changed[:11]):
        assert before.ai_demand_score == after.ai_demand_score
        assert before.ai_confidence == after.ai_confidence
    assert baseline[10].actual_occupancy != changed[10].actual_occupancy


def test_empty_history_returns_zero_summary() -> None:
    summary = run_backtest([], CONFIG)

    assert summary.total_days == 0
    assert summary.revenue_uplift_percent == 0.0
    assert summary.mean_absolute_error == 0.0
    assert summary.daily_results == ()


def test_zero_room_days_are_handled() -> None:
    records = [
        HistoricalRecord(date=START, rooms_available=0, rooms_sold=0, average_daily_rate=0.0)
    ]
    day = run_backtest(records, CONFIG).daily_results[0]

    assert day.actual_occupancy == 0
    assert day.ai_projected_revenue == 0.0


def test_invalid_config_raises() -> None:
    with pytest.raises(ValueError):
        run_backtest(_history(), replace(CONFIG, base_price=0.0))
