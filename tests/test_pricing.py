from __future__ import annotations

import pytest

from backend.domain.constraints import PricingConfig
from backend.services.pricing_service import (
    compute_saturation_boost,
    demand_to_multiplier,
    optimize_price,
)


BASE_CONFIG = PricingConfig(base_price=120.0)


def test_base_tier_keeps_price_near_base() -> None:
    result = optimize_price(60, BASE_CONFIG)

    assert result.pricing_tier == "base"
    assert 0.95 <= result.price_multiplier <= 1.05
    assert 114 <= result.recommended_price <= 126
    assert result.recommended_price == 120
    assert result.min_price == 102
    assert result.max_price == 144
    assert result.is_saturated is False


def test_surge_tier_without_saturation() -> None:
    result = optimize_price(90, BASE_CONFIG)

    assert result.pricing_tier == "surge"
    assert 1.30 <= result.price_multiplier <= 1.4334
    assert result.recommended_price > 120
    assert result.saturation_boost == 0.0


def test_saturation_boost_applied_on_top_of_tier_multiplier() -> None:
    plain = optimize_price(90, BASE_CONFIG)
    saturated = optimize_price(90, BASE_CONFIG, projected_occupancy=98)

    assert saturated.is_saturated is True
    assert saturated.pricing_tier == "saturation"
    assert saturated.saturation_boost == pytest.approx(0.12)
    assert saturated.price_multiplier == pytest.approx(plain.price_multiplier * 1.12, abs=1e-3)
    assert saturated.recommended_price > plain.recommended_price


def test_occupancy_at_threshold_is_not_saturated() -> None:
    result = optimize_price(90, BASE_CONFIG, projected_occupancy=95)
    assert result.is_saturated is False
    assert result.pricing_tier == "surge"


def test_score_85_is_premium_and_above_is_surge() -> None:
    premium = optimize_price(85, BASE_CONFIG)
    surge = optimize_price(85.0001, BASE_CONFIG)

    assert premium.pricing_tier == "premium"
    assert premium.price_multiplier == pytest.approx(1.25)
    assert surge.pricing_tier == "surge"
    assert surge.price_multiplier >= 1.30


@pytest.mark.parametrize(
    ("score", "tier"),
    [(0, "discount"), (49.9, "discount"), (50, "base"), (70, "base"), (70.5, "premium"), (100, "surge")],
)
def test_tier_bands(score: float, tier: str) -> None:
    _, resolved_tier = demand_to_multiplier(score)
    assert resolved_tier == tier


def test_multiplier_is_continuous_inside_bands() -> None:
    assert demand_to_multiplier(0)[0] == pytest.approx(0.80)
    assert demand_to_multiplier(50)[0] == pytest.approx(0.95)
    assert demand_to_multiplier(100)[0] == pytest.approx(1.50)


@pytest.mark.parametrize("score", [-50, -1, 0, 25, 49.99, 50, 70, 85, 86, 99, 100, 150])
@pytest.mark.parametrize("projected", [None, 50.0, 96.0, 100.0])
def test_prices_always_within_floor_and_ceiling(score: float, projected) -> None:
    result = optimize_price(score, BASE_CONFIG, projected_occupancy=projected)

    floor = BASE_CONFIG.base_price * BASE_CONFIG.floor_multiplier
    ceiling = BASE_CONFIG.base_price * BASE_CONFIG.ceiling_multiplier
    for price in (result.recommended_price, result.min_price, result.max_price):
        assert floor <= price <= ceiling
    assert result.min_price <= result.recommended_price <= result.max_price


def test_tight_ceiling_caps_saturated_surge() -> None:
    config = PricingConfig(base_price=100.0, ceiling_multiplier=1.3)
    result = optimize_price(100, config, projected_occupancy=100)

    assert result.recommended_price == 130
    assert result.max_price == 130


def test_saturation_boost_caps_at_twenty_percent() -> None:
    assert compute_saturation_boost(100, 95) == pytest.approx(0.20)
    assert compute_saturation_boost(120, 95) == pytest.approx(0.20)
    assert compute_saturation_boost(94, 95) == 0.0


def test_invalid_config_raises() -> None:
    with pytest.raises(ValueError):
        optimize_price(60, PricingConfig(base_price=-1.0))


def test_fractional_fixed_price_is_rejected_rather_than_rounded_out_of_range() -> None:
    config = PricingConfig(base_price=101.0, floor_multiplier=0.7, ceiling_multiplier=0.7)
    with pytest.raises(ValueError):
        optimize_price(50, config)


def test_fixed_whole_price_stays_on_the_bound() -> None:
    config = PricingConfig(base_price=100.0, floor_multiplier=0.7, ceiling_multiplier=0.7)
    result = optimize_price(90, config, projected_occupancy=99.0)
    assert result.recommended_price == 70
    assert result.min_price == 70
    assert result.max_price == 70


def test_repeated_calls_are_identical() -> None:
    first = optimize_price(77.3, BASE_CONFIG, projected_occupancy=97.1)
    second = optimize_price(77.3, BASE_CONFIG, projected_occupancy=97.1)
    assert first == second
