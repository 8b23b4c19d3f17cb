"""Ramped cost-savings and efficiency-gain benefits."""

from __future__ import annotations

from dataclasses import dataclass

from caseflow.schema import BusinessCase, ImplementationTimeline


@dataclass(frozen=True)
class BenefitBreakdown:
    baseline_costs: float
    cost_savings: float
    efficiency_gains: float
    total_benefits: float


def ramp_factor(i: int, timeline: ImplementationTimeline | None) -> float:
    """Share of the full benefit realized in period ``i`` (zero-based)."""
    if timeline is None:
        return 1.0
    month = i + 1
    if month < timeline.start_month:
        return 0.0
    if month >= timeline.full_implementation_month:
        return 1.0
    return min(1.0, (month - timeline.start_month + 1) / max(1, timeline.ramp_up_months))


def baseline_costs(case: BusinessCase) -> float:
    return sum(item.current_monthly_cost for item in case.baseline_costs)


def cost_savings(case: BusinessCase, i: int) -> float:
    # savings_potential_pct is a percentage (70 means 70%).
    return sum(
        item.current_monthly_cost * item.savings_potential_pct / 100.0 * ramp_factor(i, item.timeline)
        for item in case.baseline_costs
    )


def efficiency_gains(case: BusinessCase, i: int) -> float:
    return sum(
        abs(item.baseline_value - item.improved_value) * item.value_per_unit * ramp_factor(i, item.timeline)
        for item in case.efficiency_gains
    )


def total_benefits(case: BusinessCase, i: int) -> float:
    return cost_savings(case, i) + efficiency_gains(case, i)


def benefits_for_period(case: BusinessCase, i: int) -> BenefitBreakdown:
    savings = cost_savings(case, i)
    gains = efficiency_gains(case, i)
    return BenefitBreakdown(
        baseline_costs=baseline_costs(case),
        cost_savings=savings,
        efficiency_gains=gains,
        total_benefits=savings + gains,
    )
