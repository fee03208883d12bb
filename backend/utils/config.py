"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration.

    Every field carries its default here so call sites never repeat inline
    fallbacks. Tests derive variants with ``dataclasses.replace``.
    """

    app_name: str = "Hotel Demand Pricing Engine"
    app_version: str = "1.0.0"
    log_level: str = "INFO"
    server_host: str = "127.0.0.1"
    server_port: int = 8000

    hotel_name: str = "Demo Hotel"
    hotel_total_rooms: int = 85
    hotel_base_price: float = 120.0
    hotel_avg_occupancy: float = 0.72
    hotel_currency: str = "EUR"
    hotel_city: str = ""
    history_csv_path: str = ""

    forecast_horizon_days: int = 30
    alert_limit: int = 5

    pricing_floor_multiplier: float = 0.70
    pricing_ceiling_multiplier: float = 1.80
    pricing_min_spread: float = 0.15
    pricing_max_spread: float = 0.20
    pricing_saturation_threshold: float = 95.0

    elasticity_coefficient: float = 0.004
    elasticity_occupancy_floor: float = 15.0
    elasticity_occupancy_ceiling: float = 98.0

    confidence_min_data_points: int = 90
    confidence_historical_stability: float = 0.75

    weather_cache_ttl_seconds: int = 6 * 60 * 60
    events_cache_ttl_seconds: int = 24 * 60 * 60


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once from the environment."""
    defaults = Settings()
    return Settings(
        app_name=_env_str("APP_NAME", defaults.app_name),
        app_version=_env_str("APP_VERSION", defaults.app_version),
        log_level=_env_str("LOG_LEVEL", defaults.log_level),
        server_host=_env_str("SERVER_HOST", defaults.server_host),
        server_port=_env_int("SERVER_PORT", defaults.server_port),
        hotel_name=_env_str("HOTEL_NAME", defaults.hotel_name),
        hotel_total_rooms=_env_int("HOTEL_TOTAL_ROOMS", defaults.hotel_total_rooms),
        hotel_base_price=_env_float("HOTEL_BASE_PRICE", defaults.hotel_base_price),
        hotel_avg_occupancy=_env_float("HOTEL_AVG_OCCUPANCY", defaults.hotel_avg_occupancy),
        hotel_currency=_env_str("HOTEL_CURRENCY", defaults.hotel_currency),
        hotel_city=_env_str("HOTEL_CITY", defaults.hotel_city),
        history_csv_path=_env_str("HISTORY_CSV_PATH", defaults.history_csv_path),
        forecast_horizon_days=_env_int(
            "PRICING_FORECAST_HORIZON_DAYS", defaults.forecast_horizon_days
        ),
        alert_limit=_env_int("PRICING_ALERT_LIMIT", defaults.alert_limit),
        pricing_floor_multiplier=_env_float(
            "PRICING_FLOOR_MULTIPLIER", defaults.pricing_floor_multiplier
        ),
        pricing_ceiling_multiplier=_env_float(
            "PRICING_CEILING_MULTIPLIER", defaults.pricing_ceiling_multiplier
        ),
        pricing_min_spread=_env_float("PRICING_MIN_SPREAD", defaults.pricing_min_spread),
        pricing_max_spread=_env_float("PRICING_MAX_SPREAD", defaults.pricing_max_spread),
        pricing_saturation_threshold=_env_float(
            "PRICING_SATURATION_THRESHOLD", defaults.pricing_saturation_threshold
        ),
        elasticity_coefficient=_env_float(
            "PRICING_ELASTICITY_COEFFICIENT", defaults.elasticity_coefficient
        ),
        elasticity_occupancy_floor=_env_float(
            "PRICING_ELASTICITY_OCCUPANCY_FLOOR", defaults.elasticity_occupancy_floor
        ),
        elasticity_occupancy_ceiling=_env_float(
            "PRICING_ELASTICITY_OCCUPANCY_CEILING", defaults.elasticity_occupancy_ceiling
        ),
        confidence_min_data_points=_env_int(
            "PRICING_CONFIDENCE_MIN_DATA_POINTS", defaults.confidence_min_data_points
        ),
        confidence_historical_stability=_env_float(
            "PRICING_CONFIDENCE_HISTORICAL_STABILITY",
            defaults.confidence_historical_stability,
        ),
        weather_cache_ttl_seconds=_env_int(
            "WEATHER_CACHE_TTL_SECONDS", defaults.weather_cache_ttl_seconds
        ),
        events_cache_ttl_seconds=_env_int(
            "EVENTS_CACHE_TTL_SECONDS", defaults.events_cache_ttl_seconds
        ),
    )
