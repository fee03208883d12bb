"""Price elasticity: projected occupancy when a manual price deviates from the recommendation."""

from __future__ import annotations

import math
from typing import Optional

from backend.domain.constraints import ElasticityConfig, validate_elasticity_config
from backend.domain.models import ElasticityResult


def occupancy_change_points(price_change_percent: float, config: ElasticityConfig) -> float:
    """Occupancy shift in percentage points for a relative price change.

    The non-linear response is ``-sign(p) * k * p**2``: +10% price costs
    about 0.4pp and +30% about 3.6pp with the default ``k=0.004``.
    """
    if config.response_model == "linear":
        return config.linear_coefficient * price_change_percent
    return -math.copysign(1.0, price_change_percent) * config.coefficient * price_change_percent**2


def project_elasticity(
    base_occupancy: float,
    recommended_price: float,
    manual_price: float,
    config: Optional[ElasticityConfig] = None,
) -> ElasticityResult:
    resolved = config or ElasticityConfig()
    validate_elasticity_config(resolved)
    coefficient = (
        resolved.linear_coefficient
        if resolved.response_model == "linear"
        else resolved.coefficient
    )

    if recommended_price == 0:
        return ElasticityResult(
            projected_occupancy=base_occupancy,
            occupancy_change=0.0,
            price_change_percent=0.0,
            elasticity_coefficient=coefficient,
            response_model=resolved.response_model,
        )

    price_change_percent = (manual_price - recommended_price) / recommended_price * 100
    change_points = occupancy_change_points(price_change_percent, resolved)
    projected = max(
        resolved.occupancy_floor,
        min(resolved.occupancy_ceiling, round(base_occupancy + change_points)),
    )

    return ElasticityResult(
        projected_occupancy=projected,
        occupancy_change=round(change_points, 1),
        price_change_percent=round(price_change_percent, 1),
        elasticity_coefficient=coefficient,
        response_model=resolved.response_model,
    )
