"""Forecast accuracy: predicted vs actual occupancy percentages."""

from __future__ import annotations

from datetime import date
from typing import Mapping, Sequence

from backend.domain.models import (
    AccuracyWindow,
    DailyForecastError,
    ForecastAccuracyResult,
    ForecastRecord,
    HistoricalRecord,
)


ROLLING_WINDOW_DAYS = 30


def _daily_error(record: ForecastRecord) -> DailyForecastError:
    absolute_error = abs(record.predicted_occupancy - record.actual_occupancy)
    percentage_error = (
        absolute_error / record.actual_occupancy * 100
        if record.actual_occupancy > 0
        else 0.0
    )
    return DailyForecastError(
        date=record.date,
        predicted=record.predicted_occupancy,
        actual=record.actual_occupancy,
        absolute_error=round(absolute_error, 1),
        percentage_error=round(percentage_error, 1),
    )


def _window(errors: Sequence[DailyForecastError]) -> AccuracyWindow:
    if not errors:
        return AccuracyWindow(mae=0.0, mape=0.0, accuracy=100.0, days=0)
    mae = round(sum(error.absolute_error for error in errors) / len(errors), 1)
    mape = round(sum(error.percentage_error for error in errors) / len(errors), 1)
    accuracy = max(0.0, min(100.0, round(100.0 - mape, 1)))
    return AccuracyWindow(mae=mae, mape=mape, accuracy=accuracy, days=len(errors))


def track_forecast_accuracy(records: Sequence[ForecastRecord]) -> ForecastAccuracyResult:
    ordered = sorted(records, key=lambda record: record.date)
    daily_errors = tuple(_daily_error(record) for record in ordered)
    overall = _window(daily_errors)
    return ForecastAccuracyResult(
        mae=overall.mae,
        mape=overall.mape,
        accuracy=overall.accuracy,
        total_days=len(daily_errors),
        rolling_30=_window(daily_errors[-ROLLING_WINDOW_DAYS:]),
        daily_errors=daily_errors,
    )


def build_forecast_records(
    historical: Sequence[HistoricalRecord],
    predictions: Mapping[date, float],
) -> list[ForecastRecord]:
    """Pair predictions with the actual occupancy of the same date.

    Historical days without a prediction are skipped.
    """
    paired: list[ForecastRecord] = []
    for record in historical:
        if record.date not in predictions:
            continue
        actual = round(record.occupancy * 100) if record.rooms_available > 0 else 0
        paired.append(
            ForecastRecord(
                date=record.date,
                predicted_occupancy=float(predictions[record.date]),
                actual_occupancy=float(actual),
            )
        )
    return paired
