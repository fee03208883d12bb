"""Revenue comparison of the recommended, static and manual prices."""

from __future__ import annotations

from dataclasses import dataclass, field

from backend.domain.constraints import ElasticityConfig
from backend.domain.models import RevenueSimulationResult
from backend.services.elasticity_service import project_elasticity


@dataclass(frozen=True)
class RevenueSimulationInput:
    total_rooms: int
    predicted_occupancy: float
    recommended_price: float
    static_price: float
    manual_price: float
    elasticity_config: ElasticityConfig = field(default_factory=ElasticityConfig)


def validate_simulation_input(payload: RevenueSimulationInput) -> None:
    if payload.total_rooms < 0:
        raise ValueError("total_rooms must be >= 0")
    if not 0.0 <= payload.predicted_occupancy <= 100.0:
        raise ValueError("predicted_occupancy must be between 0 and 100")
    for name in ("recommended_price", "static_price", "manual_price"):
        if getattr(payload, name) < 0:
            raise ValueError(f"{name} must be >= 0")


def _rooms_sold(occupancy: float, total_rooms: int) -> int:
    return int(round(occupancy / 100 * total_rooms))


def simulate_revenue(payload: RevenueSimulationInput) -> RevenueSimulationResult:
    """Project rooms sold and revenue at each of the three prices.

    The recommended price uses the predicted occupancy directly; static and
    manual prices move occupancy through the elasticity model.
    """

    validate_simulation_input(payload)

    ai_occupancy = payload.predicted_occupancy
    ai_rooms_sold = _rooms_sold(ai_occupancy, payload.total_rooms)
    ai_revenue = ai_rooms_sold * payload.recommended_price

    static_occupancy = project_elasticity(
        payload.predicted_occupancy,
        payload.recommended_price,
        payload.static_price,
        payload.elasticity_config,
    ).projected_occupancy
    static_rooms_sold = _rooms_sold(static_occupancy, payload.total_rooms)
    static_revenue = static_rooms_sold * payload.static_price

    manual_occupancy = project_elasticity(
        payload.predicted_occupancy,
        payload.recommended_price,
        payload.manual_price,
        payload.elasticity_config,
    ).projected_occupancy
    manual_rooms_sold = _rooms_sold(manual_occupancy, payload.total_rooms)
    manual_revenue = manual_rooms_sold * payload.manual_price

    revenue_lift_percent = (
        round((ai_revenue - static_revenue) / static_revenue * 100, 1)
        if static_revenue > 0
        else 0.0
    )
    shortfall = ai_revenue - manual_revenue
    underpricing_loss = shortfall if payload.manual_price < payload.recommended_price else 0.0
    overpricing_loss = shortfall if payload.manual_price > payload.recommended_price else 0.0

    return RevenueSimulationResult(
        ai_occupancy=ai_occupancy,
        ai_rooms_sold=ai_rooms_sold,
        ai_revenue=ai_revenue,
        static_occupancy=static_occupancy,
        static_rooms_sold=static_rooms_sold,
        static_revenue=static_revenue,
        manual_occupancy=manual_occupancy,
        manual_rooms_sold=manual_rooms_sold,
        manual_revenue=manual_revenue,
        revenue_vs_static=ai_revenue - static_revenue,
        revenue_vs_ai=manual_revenue - ai_revenue,
        revenue_lift_percent=revenue_lift_percent,
        underpricing_loss=max(0.0, underpricing_loss),
        overpricing_loss=max(0.0, overpricing_loss),
    )
