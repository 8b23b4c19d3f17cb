from __future__ import annotations

import pytest

from caseflow.metrics import (
    CalculatedMetrics,
    IrrError,
    annual_summary,
    break_even_month,
    calculate_business_metrics,
    irr,
    irr_error_message,
    is_irr_error,
    npv,
    payback_period,
    total_investment_required,
)
from caseflow.model import run_model
from caseflow.runtime_logging import read_runtime_events


def test_npv_discounts_first_flow_one_month():
    expected = -100 / 1.01 + 110 / 1.01**2
    assert npv([-100, 110], 0.12) == pytest.approx(expected)
    assert npv([], 0.12) == 0.0


@pytest.mark.parametrize(
    "flows, error, code",
    [
        ([], IrrError.NO_DATA, -999),
        ([0, 0, 0], IrrError.ALL_SAME, -998),
        ([-5, -5.001, -5.002], IrrError.ALL_SAME, -998),
        ([1, 2, 3], IrrError.ALL_POSITIVE, -997),
        ([-1, -2, -3], IrrError.ALL_NEGATIVE, -996),
    ],
)
def test_irr_reports_undefined_cases(flows, error, code):
    result = irr(flows)
    assert not result.ok
    assert result.error is error
    assert result.code == code
    assert result.rate is None
    assert is_irr_error(result)
    assert is_irr_error(result.code)


def test_irr_converges_to_zero_npv():
    flows = [-1000, 300, 400, 500]
    result = irr(flows)
    assert result.ok
    assert abs(npv(flows, result.rate)) < 1e-6
    assert result.annualized == pytest.approx((1 + result.rate / 12) ** 12 - 1)
    assert not is_irr_error(result.rate)


def test_irr_of_simple_loan_matches_monthly_rate():
    flows = [-1000.0] + [0.0] * 11 + [1000.0 * 1.01**12]
    result = irr(flows)
    assert result.ok
    assert result.rate == pytest.approx(0.12, abs=1e-6)


def test_irr_flags_extreme_rates_and_logs():
    result = irr([-1, 1000])
    assert result.error is IrrError.EXTREME_RATE
    assert result.code == -994
    events = read_runtime_events(event="irr_undefined")
    assert len(events) == 1
    assert events[0]["context"]["error"] == "EXTREME_RATE"


def test_irr_stops_after_max_iterations_and_logs():
    result = irr([-1000, 300, 400, 500], max_iter=1)
    assert result.error is IrrError.NO_CONVERGENCE
    assert result.code == -995
    assert result.iterations == 1
    events = read_runtime_events(event="irr_undefined")
    assert len(events) == 1
    assert events[0]["context"]["error"] == "NO_CONVERGENCE"


def test_irr_stops_on_flat_derivative():
    # At a zero rate the derivative is -(1*2 + 2*-1) / 12 == 0 while NPV is 1.
    result = irr([2.0, -1.0, 0.0], initial_guess=0.0)
    assert result.error is IrrError.NO_CONVERGENCE
    assert result.code == -995
    assert result.iterations == 0
    assert read_runtime_events(event="irr_undefined")[0]["context"]["last_rate"] == 0.0


def test_irr_error_messages():
    assert "identical" in irr_error_message(IrrError.ALL_SAME)
    assert irr_error_message(-995) == irr_error_message(IrrError.NO_CONVERGENCE)
    assert irr_error_message(0.15) == ""


def test_break_even_and_payback():
    flows = [-5, -1, 2, -3, 4]
    assert break_even_month(flows) == 3
    assert payback_period(flows) == 0
    assert total_investment_required(flows) == 7

    flows = [-5, 3, 3]
    assert break_even_month(flows) == 2
    assert payback_period(flows) == 3
    assert total_investment_required(flows) == 5

    assert break_even_month([-1, 0, 0]) == 0
    assert total_investment_required([1, 2]) == 0
    assert total_investment_required([]) == 0


def test_calculate_business_metrics_none_returns_zeros():
    metrics = calculate_business_metrics(None)
    assert metrics == CalculatedMetrics()
    assert metrics.irr.rate == 0.0
    assert metrics.monthly_data == ()


def test_calculate_business_metrics_default_case(business_data):
    metrics = calculate_business_metrics(business_data)
    flows = [m.net_cash_flow for m in metrics.monthly_data]

    assert len(metrics.monthly_data) == 60
    assert metrics.total_revenue == sum(m.revenue for m in metrics.monthly_data)
    assert metrics.net_profit == pytest.approx(sum(flows))
    assert metrics.npv == pytest.approx(npv(flows, 0.10))
    assert metrics.total_investment_required > 0
    if metrics.payback_period and metrics.break_even_month:
        assert metrics.payback_period >= metrics.break_even_month
    if metrics.irr.ok:
        assert abs(npv(flows, metrics.irr.rate)) < 1e-6


def test_payback_never_precedes_break_even(cost_savings_data):
    metrics = calculate_business_metrics(cost_savings_data)
    assert metrics.break_even_month > 0
    assert metrics.payback_period >= metrics.break_even_month


def test_annual_summary_rolls_up_years(business_data):
    df = run_model(business_data)
    summary = annual_summary(df)
    assert summary["Year"].tolist() == [1, 2, 3, 4, 5]
    assert summary["Total Revenue"].sum() == pytest.approx(df["Total Revenue"].sum())
    assert summary["Cumulative Cash Flow"].iloc[-1] == pytest.approx(df["Net Cash Flow"].sum())
    assert summary["Gross Margin"].iloc[0] == pytest.approx(0.95, abs=1e-3)


def test_annual_summary_of_empty_frame(business_data):
    df = run_model(business_data).iloc[0:0]
    assert annual_summary(df).empty
