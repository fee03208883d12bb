#!/usr/bin/env python3
"""Check that the pricing engine can import history, forecast and backtest locally."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from datetime import date, timedelta
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from backend.repository.history_repository import HistoryRepository, load_records_from_csv
from backend.services.forecast_service import ForecastService
from backend.utils.config import get_settings

SEPARATOR_LINE = "=" * 44
SAMPLE_DAYS = 90
REFERENCE_DATE = date(2026, 3, 1)


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def _write_sample_history(path: Path) -> None:
    start = REFERENCE_DATE - timedelta(days=SAMPLE_DAYS)
    lines = ["date,rooms_available,rooms_sold,average_daily_rate,cancellations"]
    for offset in range(SAMPLE_DAYS):
        day = start + timedelta(days=offset)
        sold = 55 + (day.weekday() * 4) % 25
        lines.append(f"{day.isoformat()},85,{sold},{110 + day.weekday() * 3:.2f},{offset % 3}")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="pricing-env-")

    # CHECK 1: Python version >= 3.10
    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable
    package_names = ["fastapi", "uvicorn", "pydantic", "numpy", "pandas", "httpx", "pytest"]
    import_errors: list[str] = []
    for module_name in package_names:
        try:
            importlib.import_module(module_name)
        except ImportError as exc:
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        repository = HistoryRepository()
        service = ForecastService(repository=repository, settings=get_settings())

        # CHECK 3: CSV history import
        try:
            csv_path = Path(temp_dir) / "history.csv"
            _write_sample_history(csv_path)
            stats = repository.replace_records(load_records_from_csv(csv_path))
            if stats.total_records != SAMPLE_DAYS:
                raise RuntimeError(f"expected {SAMPLE_DAYS} records, got {stats.total_records}")
            ok, line = _print_result(
                "History import",
                True,
                f": {stats.total_records} days, avg occupancy {stats.avg_occupancy:.3f}",
            )
        except Exception as exc:
            ok, line = _print_result("History import", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 4: Forward forecast
        try:
            report = service.build_forecast(REFERENCE_DATE)
            prices = [item.pricing.recommended_price for item in report.forecasts]
            ok, line = _print_result(
                "Forecast generation",
                True,
                f": {len(report.forecasts)} days, prices {min(prices)}-{max(prices)}",
            )
        except Exception as exc:
            ok, line = _print_result("Forecast generation", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5: Backtest replay
        try:
            summary = service.run_backtest()
            ok, line = _print_result(
                "Backtest replay",
                True,
                f": uplift {summary.revenue_uplift_percent:.1f}% mae {summary.mean_absolute_error:.1f}",
            )
        except Exception as exc:
            ok, line = _print_result("Backtest replay", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Pricing Engine Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
