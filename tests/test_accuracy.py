from __future__ import annotations

from datetime import date, timedelta

import pytest

from backend.domain.models import ForecastRecord, HistoricalRecord
from backend.services.accuracy_service import build_forecast_records, track_forecast_accuracy


START = date(2026, 2, 1)


def _record(offset: int, predicted: float, actual: float) -> ForecastRecord:
    return ForecastRecord(
        date=START + timedelta(days=offset),
        predicted_occupancy=predicted,
        actual_occupancy=actual,
    )


def test_empty_input_is_perfect_accuracy() -> None:
    result = track_forecast_accuracy([])

    assert result.mae == 0.0
    assert result.mape == 0.0
    assert result.accuracy == 100.0
    assert result.total_days == 0
    assert result.rolling_30.days == 0
    assert result.rolling_30.accuracy == 100.0


def test_errors_and_means() -> None:
    result = track_forecast_accuracy(
        [_record(0, 80, 100), _record(1, 50, 40), _record(2, 5, 0)]
    )

    assert [error.absolute_error for error in result.daily_errors] == [20.0, 10.0, 5.0]
    assert [error.percentage_error for error in result.daily_errors] == [20.0, 25.0, 0.0]
    assert result.mae == pytest.approx(11.7)
    assert result.mape == pytest.approx(15.0)
    assert result.accuracy == pytest.approx(85.0)
    assert result.rolling_30.days == 3


def test_accuracy_is_clamped_at_zero() -> None:
    result = track_forecast_accuracy([_record(0, 90, 10)])
    assert result.mape == pytest.approx(800.0)
    assert result.accuracy == 0.0


def test_rolling_window_covers_most_recent_thirty_days() -> None:
    records = [_record(offset, 50, 100) for offset in range(10)]
    records += [_record(offset, 100, 100) for offset in range(10, 40)]

    result = track_forecast_accuracy(list(reversed(records)))

    assert result.total_days == 40
    assert result.daily_errors[0].date == START
    assert result.rolling_30.days == 30
    assert result.rolling_30.mae == 0.0
    assert result.rolling_30.accuracy == 100.0
    assert result.mae == pytest.approx(12.5)


def test_build_forecast_records_pairs_by_date() -> None:
    history = [
        HistoricalRecord(date=START, rooms_available=100, rooms_sold=70, average_daily_rate=100.0),
        HistoricalRecord(
            date=START + timedelta(days=1),
            rooms_available=0,
            rooms_sold=0,
            average_daily_rate=0.0,
        ),
        HistoricalRecord(
            date=START + timedelta(days=2),
            rooms_available=50,
            rooms_sold=40,
            average_daily_rate=100.0,
        ),
    ]
    predictions = {START: 65.0, START + timedelta(days=1): 30.0}

    records = build_forecast_records(history, predictions)

    assert [record.date for record in records] == [START, START + timedelta(days=1)]
    assert records[0].actual_occupancy == 70.0
    assert records[0].predicted_occupancy == 65.0
    assert records[1].actual_occupancy == 0.0
