from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from app import create_app
from backend.domain.constraints import HotelProfile
from backend.domain.models import HistoricalDemandStats, HistoricalRecord, WeatherDay
from backend.repository.history_repository import HistoryRepository, HistoryValidationError
from backend.repository.market_signal_repository import CachedSignalProvider
from backend.services.forecast_service import (
    ForecastService,
    ForecastValidationError,
    compute_kpis,
    generate_alerts,
    generate_forecasts,
)
from backend.utils.config import get_settings


REFERENCE = date(2026, 3, 1)
PROFILE = HotelProfile(total_rooms=85, base_price=120.0, avg_occupancy=0.72, city="Lisbon")


def _build_test_settings(**overrides):
    base = get_settings()
    values = {
        "hotel_total_rooms": 85,
        "hotel_base_price": 120.0,
        "hotel_avg_occupancy": 0.72,
        "hotel_city": "Lisbon",
        "forecast_horizon_days": 30,
        "alert_limit": 5,
        "history_csv_path": "",
    }
    values.update(overrides)
    return replace(base, **values)


def _history(days: int = 120) -> list[HistoricalRecord]:
    start = REFERENCE - timedelta(days=days)
    return [
        HistoricalRecord(
            date=start + timedelta(days=offset),
            rooms_available=85,
            rooms_sold=60 + (offset % 7) * 3,
            average_daily_rate=115.0,
        )
        for offset in range(days)
    ]


def _history_payload(days: int = 60) -> list[dict]:
    return [
        {
            "date": record.date.isoformat(),
            "rooms_available": record.rooms_available,
            "rooms_sold": record.rooms_sold,
            "average_daily_rate": record.average_daily_rate,
        }
        for record in _history(days)
    ]


def test_forecast_covers_horizon_with_bounded_prices():
    settings = _build_test_settings()
    forecasts = generate_forecasts(REFERENCE, PROFILE, HistoricalDemandStats.empty(), settings=settings)

    assert len(forecasts) == 30
    assert [item.date for item in forecasts] == [
        REFERENCE + timedelta(days=offset) for offset in range(30)
    ]
    for item in forecasts:
        assert 84 <= item.pricing.recommended_price <= 216
        assert 0 <= item.demand.demand_score <= 100
        assert 0 <= item.confidence.confidence <= 100
        assert item.revenue.manual_revenue == item.revenue.ai_revenue
        assert item.static_price == 120.0


def test_scheduled_event_days_carry_event_names():
    forecasts = generate_forecasts(
        REFERENCE, PROFILE, HistoricalDemandStats.empty(), settings=_build_test_settings()
    )
    assert forecasts[14].demand.event_name == "Music Festival"
    assert forecasts[3].demand.event_name == "Tech Conference"
    assert forecasts[1].demand.event_name is None


def test_history_raises_confidence():
    settings = _build_test_settings()
    repository = HistoryRepository(_history())

    without_history = generate_forecasts(
        REFERENCE, PROFILE, HistoricalDemandStats.empty(), settings=settings, horizon=1
    )[0]
    with_history = generate_forecasts(
        REFERENCE, PROFILE, repository.get_stats(), settings=settings, horizon=1
    )[0]

    assert with_history.confidence.data_volume_score == 1.0
    assert with_history.confidence.confidence > without_history.confidence.confidence


def test_invalid_horizon_raises():
    with pytest.raises(ForecastValidationError):
        generate_forecasts(
            REFERENCE, PROFILE, HistoricalDemandStats.empty(), horizon=0, settings=_build_test_settings()
        )


def test_alert_rules():
    base = generate_forecasts(
        REFERENCE, PROFILE, HistoricalDemandStats.empty(), horizon=1, settings=_build_test_settings()
    )[0]

    def variant(score: int, event_name, saturated: bool = False):
        return replace(
            base,
            demand=replace(base.demand, demand_score=score, event_name=event_name),
            pricing=replace(
                base.pricing,
                is_saturated=saturated,
                saturation_boost=0.12 if saturated else 0.0,
            ),
        )

    assert [alert.alert_type for alert in generate_alerts([variant(97, None, saturated=True)])] == ["surge"]
    assert [alert.alert_type for alert in generate_alerts([variant(90, "Music Festival")])] == ["surge"]
    assert [alert.alert_type for alert in generate_alerts([variant(80, "Trade Fair")])] == ["event"]
    assert [alert.alert_type for alert in generate_alerts([variant(40, None)])] == ["risk"]
    assert generate_alerts([variant(65, None)]) == []


def test_alerts_are_truncated_and_numbered():
    base = generate_forecasts(
        REFERENCE, PROFILE, HistoricalDemandStats.empty(), horizon=1, settings=_build_test_settings()
    )[0]
    low_days = [
        replace(base, demand=replace(base.demand, demand_score=30, event_name=None))
        for _ in range(8)
    ]

    alerts = generate_alerts(low_days, limit=5)

    assert len(alerts) == 5
    assert [alert.alert_id for alert in alerts] == ["1", "2", "3", "4", "5"]
    assert "EUR" in alerts[0].description


def test_kpis_summarize_forecasts():
    forecasts = generate_forecasts(
        REFERENCE, PROFILE, HistoricalDemandStats.empty(), settings=_build_test_settings()
    )
    kpis = compute_kpis(forecasts)

    assert kpis.projected_revenue == pytest.approx(sum(f.revenue.ai_revenue for f in forecasts))
    assert kpis.static_revenue == pytest.approx(sum(f.revenue.static_revenue for f in forecasts))
    assert 0 <= kpis.avg_occupancy <= 100
    assert compute_kpis([]).revenue_lift == 0.0


def test_forecast_service_degrades_when_providers_fail():
    settings = _build_test_settings()

    def fetch_weather(city):
        return [WeatherDay(temperature=24.0, rain_probability=0.1)] * 10

    def fetch_events(city, latitude, longitude):
        raise ConnectionError("events API down")

    provider = CachedSignalProvider(
        weather_fetcher=fetch_weather,
        events_fetcher=fetch_events,
        settings=settings,
    )
    service = ForecastService(
        repository=HistoryRepository(_history()),
        signal_provider=provider,
        settings=settings,
    )

    report = service.build_forecast(REFERENCE)

    assert len(report.forecasts) == 30
    assert report.weather_available is True
    assert report.events_available is False
    assert len(report.alerts) <= 5
    assert report.to_dict()["reference_date"] == "2026-03-01"


def test_forecast_service_backtest_requires_history():
    service = ForecastService(repository=HistoryRepository(), settings=_build_test_settings())
    with pytest.raises(ForecastValidationError):
        service.run_backtest()


def test_forecast_accuracy_scores_backtest_predictions():
    service = ForecastService(
        repository=HistoryRepository(_history(45)),
        settings=_build_test_settings(),
    )
    result = service.forecast_accuracy()

    assert result.total_days == 45
    assert 0.0 <= result.accuracy <= 100.0
    assert result.rolling_30.days == 30


def test_history_repository_rejects_oversold_days():
    record = HistoricalRecord(date=REFERENCE, rooms_available=10, rooms_sold=11, average_daily_rate=90.0)
    with pytest.raises(HistoryValidationError):
        HistoryRepository([record])


def test_history_repository_rejects_duplicate_dates():
    record = HistoricalRecord(date=REFERENCE, rooms_available=10, rooms_sold=5, average_daily_rate=90.0)
    with pytest.raises(HistoryValidationError):
        HistoryRepository([record, record])


def test_api_end_to_end_flow():
    app = create_app(settings=_build_test_settings())

    with TestClient(app) as client:
        health = client.get("/health")
        assert health.status_code == 200
        assert health.json()["history_records"] == 0

        empty_stats = client.get("/historical_stats")
        assert empty_stats.status_code == 200
        assert empty_stats.json()["has_data"] is False

        missing_history = client.post("/backtest", json={})
        assert missing_history.status_code == 400

        stats = client.put("/historical_records", json={"records": _history_payload()})
        assert stats.status_code == 200
        assert stats.json()["total_records"] == 60

        forecast = client.post("/forecast", json={"reference_date": "2026-03-01"})
        assert forecast.status_code == 200
        body = forecast.json()
        assert len(body["forecasts"]) == 30
        assert body["currency"] == "EUR"
        assert len(body["alerts"]) <= 5

        short = client.post(
            "/forecast",
            json={
                "reference_date": "2026-03-01",
                "horizon_days": 7,
                "hotel": {"total_rooms": 40, "base_price": 90.0, "avg_occupancy": 0.6},
                "competitor_rates": [{"competitor_name": "Rival", "price": 100.0}],
            },
        )
        assert short.status_code == 200
        assert len(short.json()["forecasts"]) == 7

        backtest = client.post("/backtest", json={})
        assert backtest.status_code == 200
        assert backtest.json()["total_days"] == 60

        accuracy = client.post("/forecast_accuracy", json={})
        assert accuracy.status_code == 200
        assert accuracy.json()["total_days"] == 60


def test_api_pricing_endpoints():
    app = create_app(settings=_build_test_settings())

    with TestClient(app) as client:
        price = client.post("/price", json={"demand_score": 60, "base_price": 120})
        assert price.status_code == 200
        assert price.json()["recommended_price"] == 120
        assert price.json()["pricing_tier"] == "base"

        saturated = client.post(
            "/price",
            json={"demand_score": 90, "base_price": 120, "projected_occupancy": 98},
        )
        assert saturated.json()["is_saturated"] is True

        bad_bounds = client.post(
            "/price",
            json={"demand_score": 60, "floor_multiplier": 2.0, "ceiling_multiplier": 1.5},
        )
        assert bad_bounds.status_code == 400

        elasticity = client.post(
            "/elasticity",
            json={"base_occupancy": 70, "recommended_price": 100, "manual_price": 110},
        )
        assert elasticity.status_code == 200
        assert elasticity.json()["occupancy_change"] == pytest.approx(-0.4)

        revenue = client.post(
            "/simulate_revenue",
            json={
                "total_rooms": 100,
                "predicted_occupancy": 80,
                "recommended_price": 150,
                "static_price": 120,
                "manual_price": 130,
            },
        )
        assert revenue.status_code == 200
        assert revenue.json()["underpricing_loss"] == pytest.approx(1470)

        signal = client.post(
            "/market_signal",
            json={"target_date": "2026-06-02", "reference_date": "2026-06-01", "hotel_price": 120},
        )
        assert signal.status_code == 200
        assert signal.json()["total_score"] == pytest.approx(10.0)


def test_api_rejects_invalid_history():
    app = create_app(settings=_build_test_settings())

    with TestClient(app) as client:
        response = client.put(
            "/historical_records",
            json={
                "records": [
                    {
                        "date": "2026-01-01",
                        "rooms_available": 10,
                        "rooms_sold": 12,
                        "average_daily_rate": 80.0,
                    }
                ]
            },
        )
        assert response.status_code == 400
