"""Demand score to recommended price conversion.

Tier curve, linearly interpolated inside each band:

    demand < 50    discount   0.80 -> 0.90
    50 <= d <= 70  base       0.95 -> 1.05
    70 < d <= 85   premium    1.10 -> 1.25
    d > 85         surge      1.30 -> 1.50

When projected occupancy crosses the saturation threshold the tier becomes
``saturation`` and the multiplier is boosted by up to 20%.
"""

from __future__ import annotations

import math
from typing import Optional

from backend.domain.constraints import PricingConfig, validate_pricing_config
from backend.domain.models import PriceRecommendation
from backend.utils.logger import get_logger


logger = get_logger(__name__)

MAX_SATURATION_BOOST = 0.20


def demand_to_multiplier(demand_score: float) -> tuple[float, str]:
    if demand_score < 50:
        t = demand_score / 50
        return 0.80 + t * 0.10, "discount"
    if demand_score <= 70:
        t = (demand_score - 50) / 20
        return 0.95 + t * 0.10, "base"
    if demand_score <= 85:
        t = (demand_score - 70) / 15
        return 1.10 + t * 0.15, "premium"
    t = min((demand_score - 85) / 15, 1.0)
    return 1.30 + t * 0.20, "surge"


def compute_saturation_boost(projected_occupancy: float, threshold: float) -> float:
    if projected_occupancy <= threshold:
        return 0.0
    headroom = 100.0 - threshold
    excess = min(projected_occupancy - threshold, headroom)
    return excess / headroom * MAX_SATURATION_BOOST


def _round_within(value: float, low: float, high: float) -> int:
    """Round to whole currency units without leaving [low, high]."""
    rounded = int(round(max(low, min(high, value))))
    if rounded < low:
        rounded = math.ceil(low)
    if rounded > high:
        rounded = math.floor(high)
    return rounded


def optimize_price(
    demand_score: float,
    config: PricingConfig,
    projected_occupancy: Optional[float] = None,
) -> PriceRecommendation:
    """Recommend a price and a safe range for a demand score."""

    validate_pricing_config(config)
    bounded_score = max(0.0, min(100.0, float(demand_score)))
    multiplier, tier = demand_to_multiplier(bounded_score)

    saturation_boost = 0.0
    is_saturated = False
    if projected_occupancy is not None and projected_occupancy > config.saturation_threshold:
        saturation_boost = compute_saturation_boost(
            projected_occupancy,
            config.saturation_threshold,
        )
        multiplier *= 1.0 + saturation_boost
        tier = "saturation"
        is_saturated = True

    floor = config.base_price * config.floor_multiplier
    ceiling = config.base_price * config.ceiling_multiplier
    recommended_price = _round_within(config.base_price * multiplier, floor, ceiling)
    min_price = _round_within(recommended_price * (1 - config.min_spread), floor, ceiling)
    max_price = _round_within(recommended_price * (1 + config.max_spread), floor, ceiling)

    if is_saturated:
        logger.debug(
            (
                "Saturation pricing applied | projected_occupancy=%.1f | threshold=%.1f | "
                "boost=%.3f | recommended_price=%s"
            ),
            projected_occupancy,
            config.saturation_threshold,
            saturation_boost,
            recommended_price,
        )

    return PriceRecommendation(
        recommended_price=recommended_price,
        min_price=min_price,
        max_price=max_price,
        price_multiplier=round(multiplier, 3),
        pricing_tier=tier,
        is_saturated=is_saturated,
        saturation_boost=round(saturation_boost, 3),
    )
