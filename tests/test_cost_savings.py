from __future__ import annotations

import pytest

from caseflow.cost_savings import benefits_for_period, cost_savings, efficiency_gains, ramp_factor
from caseflow.schema import BaselineCost, BusinessCase, EfficiencyGain, ImplementationTimeline, parse_business_data


def test_ramp_factor_progression():
    timeline = ImplementationTimeline(start_month=1, ramp_up_months=18, full_implementation_month=24)
    assert ramp_factor(0, timeline) == pytest.approx(1 / 18)
    assert ramp_factor(8, timeline) == pytest.approx(9 / 18)
    assert ramp_factor(17, timeline) == 1.0
    assert ramp_factor(23, timeline) == 1.0
    assert ramp_factor(40, timeline) == 1.0


def test_ramp_factor_before_start_and_without_timeline():
    timeline = ImplementationTimeline(start_month=3, ramp_up_months=4, full_implementation_month=7)
    assert ramp_factor(0, timeline) == 0.0
    assert ramp_factor(1, timeline) == 0.0
    assert ramp_factor(2, timeline) == pytest.approx(0.25)
    assert ramp_factor(0, None) == 1.0


def test_ramp_factor_with_zero_ramp_months_is_immediate():
    timeline = ImplementationTimeline(start_month=2, ramp_up_months=0, full_implementation_month=10)
    assert ramp_factor(0, timeline) == 0.0
    assert ramp_factor(1, timeline) == 1.0


def test_savings_use_percentage_of_current_cost():
    timeline = ImplementationTimeline(1, 18, 24)
    case = BusinessCase(baseline_costs=(BaselineCost("a", "A", 1000.0, 50.0, timeline),))
    assert cost_savings(case, 0) == pytest.approx(1000.0 * 0.5 / 18)
    assert cost_savings(case, 30) == pytest.approx(500.0)


def test_efficiency_gain_counts_absolute_improvement():
    up = BusinessCase(efficiency_gains=(EfficiencyGain("g", "G", 12.0, 120.0, 2.5),))
    down = BusinessCase(efficiency_gains=(EfficiencyGain("g", "G", 120.0, 12.0, 2.5),))
    assert efficiency_gains(up, 0) == pytest.approx(270.0)
    assert efficiency_gains(down, 0) == pytest.approx(270.0)


def test_default_cost_savings_benefits(cost_savings_data):
    case, _ = parse_business_data(cost_savings_data)

    first = benefits_for_period(case, 0)
    assert first.baseline_costs == 33000.0
    assert first.cost_savings == pytest.approx(25000.0 * 0.7 / 6)
    assert first.efficiency_gains == 0.0

    full = benefits_for_period(case, 6)
    assert full.cost_savings == pytest.approx(17500.0 + 6400.0)
    assert full.efficiency_gains == pytest.approx(270.0)
    assert full.total_benefits == pytest.approx(24170.0)
