"""In-memory store for daily occupancy history and its derived statistics."""

from __future__ import annotations

from pathlib import Path
from threading import RLock
from typing import Iterable, Optional, Union

import pandas as pd

from backend.domain.models import HistoricalDemandStats, HistoricalRecord
from backend.services.historical_stats_service import compute_historical_stats
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class HistoryValidationError(ValueError):
    """Raised when an imported record set is structurally invalid."""


REQUIRED_COLUMNS = ("date", "rooms_available", "rooms_sold", "average_daily_rate")


def validate_record(record: HistoricalRecord) -> None:
    if record.rooms_available < 0:
        raise HistoryValidationError(f"{record.date}: rooms_available must be >= 0")
    if record.rooms_sold < 0:
        raise HistoryValidationError(f"{record.date}: rooms_sold must be >= 0")
    if record.rooms_sold > record.rooms_available:
        raise HistoryValidationError(
            f"{record.date}: rooms_sold cannot exceed rooms_available"
        )
    if record.average_daily_rate < 0:
        raise HistoryValidationError(f"{record.date}: average_daily_rate must be >= 0")
    if record.cancellations < 0:
        raise HistoryValidationError(f"{record.date}: cancellations must be >= 0")


class HistoryRepository:
    """Holds one hotel's history; statistics are rebuilt wholesale on every change."""

    def __init__(self, records: Optional[Iterable[HistoricalRecord]] = None) -> None:
        self._lock = RLock()
        self._records: tuple[HistoricalRecord, ...] = ()
        self._stats: Optional[HistoricalDemandStats] = None
        if records is not None:
            self.replace_records(records)

    def replace_records(self, records: Iterable[HistoricalRecord]) -> HistoricalDemandStats:
        candidate = list(records)
        seen_dates = set()
        for record in candidate:
            validate_record(record)
            if record.date in seen_dates:
                raise HistoryValidationError(f"{record.date}: duplicate date")
            seen_dates.add(record.date)

        ordered = tuple(sorted(candidate, key=lambda record: record.date))
        stats = compute_historical_stats(ordered)
        with self._lock:
            self._records = ordered
            self._stats = stats

        logger.info(
            "Historical records replaced | records=%s | start=%s | end=%s",
            len(ordered),
            stats.date_range_start,
            stats.date_range_end,
        )
        return stats

    def list_records(self) -> list[HistoricalRecord]:
        with self._lock:
            return list(self._records)

    def count_records(self) -> int:
        with self._lock:
            return len(self._records)

    def get_stats(self) -> HistoricalDemandStats:
        with self._lock:
            if self._stats is None:
                self._stats = compute_historical_stats(self._records)
            return self._stats

    def clear(self) -> None:
        with self._lock:
            self._records = ()
            self._stats = None


def load_records_from_csv(path: Union[str, Path]) -> list[HistoricalRecord]:
    """Parse a daily history export; ``cancellations`` is optional and defaults to 0."""

    frame = pd.read_csv(path)
    frame.columns = [str(column).strip().lower() for column in frame.columns]
    missing = [column for column in REQUIRED_COLUMNS if column not in frame.columns]
    if missing:
        raise HistoryValidationError(f"missing columns: {', '.join(missing)}")
    if "cancellations" not in frame.columns:
        frame["cancellations"] = 0

    try:
        frame["date"] = pd.to_datetime(frame["date"], format="%Y-%m-%d").dt.date
    except ValueError as exc:
        raise HistoryValidationError(f"invalid date value: {exc}") from exc
    numeric = frame[["rooms_available", "rooms_sold", "average_daily_rate", "cancellations"]]
    if numeric.isna().any().any():
        raise HistoryValidationError("numeric columns must not contain blanks")

    return [
        HistoricalRecord(
            date=row.date,
            rooms_available=int(row.rooms_available),
            rooms_sold=int(row.rooms_sold),
            average_daily_rate=float(row.average_daily_rate),
            cancellations=int(row.cancellations),
        )
        for row in frame.itertuples(index=False)
    ]
