from __future__ import annotations

import pytest

from caseflow.metrics import calculate_business_metrics
from caseflow.model import run_model
from caseflow.value_modes import apply_value_mode, discount_factors, value_mode_label


def test_nominal_mode_is_identity(business_data):
    df = run_model(business_data)
    out = apply_value_mode(df, "nominal")
    assert out.equals(df)
    assert out is not df


def test_present_value_net_cash_flow_sums_to_npv(business_data):
    df = run_model(business_data)
    pv = apply_value_mode(df, "present_value")
    metrics = calculate_business_metrics(business_data)
    assert pv["Net Cash Flow"].sum() == pytest.approx(metrics.npv)
    assert pv["Cumulative Cash Flow"].iloc[-1] == pytest.approx(metrics.npv)


def test_present_value_keeps_non_monetary_columns(business_data):
    df = run_model(business_data)
    pv = apply_value_mode(df, "present_value", annual_rate=0.12)
    assert pv["Sales Volume"].equals(df["Sales Volume"])
    assert pv["Unit Price"].equals(df["Unit Price"])
    assert pv.loc[0, "Total Revenue"] == pytest.approx(df.loc[0, "Total Revenue"] / 1.01)


def test_discount_factors_and_labels():
    assert discount_factors(3, 0.12).tolist() == pytest.approx([1.01, 1.01**2, 1.01**3])
    assert discount_factors(0, 0.12).size == 0
    assert value_mode_label("present_value").startswith("Discounted")
    assert value_mode_label("nominal") == "Nominal dollars"
