from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest
from fastapi.testclient import TestClient

from app import create_app
from backend.domain.models import HistoricalRecord
from backend.repository.history_repository import (
    HistoryRepository,
    HistoryValidationError,
    load_records_from_csv,
)
from backend.utils.config import get_settings


CSV_HEADER = "date,rooms_available,rooms_sold,average_daily_rate"


def _write(path, lines):
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_csv_import_defaults_cancellations(tmp_path) -> None:
    csv_path = _write(
        tmp_path / "history.csv",
        [CSV_HEADER, "2026-01-02,80,60,110.5", "2026-01-01,80,40,95.0"],
    )

    records = load_records_from_csv(csv_path)

    assert len(records) == 2
    assert records[0].date == date(2026, 1, 2)
    assert records[0].rooms_sold == 60
    assert records[0].average_daily_rate == pytest.approx(110.5)
    assert records[1].cancellations == 0


def test_csv_import_rejects_missing_columns(tmp_path) -> None:
    csv_path = _write(tmp_path / "history.csv", ["date,rooms_available", "2026-01-01,80"])
    with pytest.raises(HistoryValidationError, match="rooms_sold"):
        load_records_from_csv(csv_path)


def test_csv_import_rejects_bad_dates(tmp_path) -> None:
    csv_path = _write(tmp_path / "history.csv", [CSV_HEADER, "01/02/2026,80,60,110.0"])
    with pytest.raises(HistoryValidationError):
        load_records_from_csv(csv_path)


def test_repository_sorts_and_clears(tmp_path) -> None:
    csv_path = _write(
        tmp_path / "history.csv",
        [CSV_HEADER, "2026-01-02,80,60,110.0", "2026-01-01,80,40,95.0"],
    )
    repository = HistoryRepository()

    stats = repository.replace_records(load_records_from_csv(csv_path))

    assert stats.total_records == 2
    assert [record.date for record in repository.list_records()] == [
        date(2026, 1, 1),
        date(2026, 1, 2),
    ]
    repository.clear()
    assert repository.count_records() == 0
    assert repository.get_stats().has_data is False


def test_failed_replace_keeps_previous_records() -> None:
    good = HistoricalRecord(date=date(2026, 1, 1), rooms_available=10, rooms_sold=5, average_daily_rate=90.0)
    repository = HistoryRepository([good])

    with pytest.raises(HistoryValidationError):
        repository.replace_records([replace(good, rooms_sold=-1)])

    assert repository.count_records() == 1


def test_startup_loads_configured_history(tmp_path) -> None:
    csv_path = _write(
        tmp_path / "history.csv",
        [CSV_HEADER, "2026-01-01,80,40,95.0", "2026-01-02,80,60,110.0"],
    )
    settings = replace(get_settings(), history_csv_path=str(csv_path))

    with TestClient(create_app(settings=settings)) as client:
        assert client.get("/health").json()["history_records"] == 2


def test_startup_tolerates_missing_history_file(tmp_path) -> None:
    settings = replace(get_settings(), history_csv_path=str(tmp_path / "missing.csv"))

    with TestClient(create_app(settings=settings)) as client:
        assert client.get("/health").json()["history_records"] == 0
