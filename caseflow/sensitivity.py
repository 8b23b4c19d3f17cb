"""Driver-based sensitivity analysis over the full projection pipeline."""

from __future__ import annotations

import math
from typing import Iterable

import pandas as pd

from caseflow.goal_seek import GoalSeekResult, solve_bounded_scalar
from caseflow.metrics import CalculatedMetrics, calculate_business_metrics
from caseflow.paths import get_nested_value, set_nested_value
from caseflow.runtime_logging import append_runtime_event, record_warnings
from caseflow.schema import Driver, parse_business_data, parse_drivers


TARGET_OPTIONS = [
    "NPV",
    "IRR",
    "Total Revenue",
    "Net Profit",
    "Payback Period",
    "Break-even Month",
    "Total Investment Required",
]


def evaluate_outputs(metrics: CalculatedMetrics) -> dict[str, float]:
    return {
        "NPV": metrics.npv,
        "IRR": metrics.irr.rate if metrics.irr.ok else math.nan,
        "Total Revenue": metrics.total_revenue,
        "Net Profit": metrics.net_profit,
        "Payback Period": float(metrics.payback_period),
        "Break-even Month": float(metrics.break_even_month),
        "Total Investment Required": metrics.total_investment_required,
    }


def _resolve_drivers(data: dict, drivers: Iterable[Driver | dict] | None) -> list[Driver]:
    warnings: list[str] = []
    if drivers is None:
        case, parse_warnings = parse_business_data(data)
        warnings = [w for w in parse_warnings if w.startswith("drivers")]
        resolved = list(case.drivers)
    else:
        items = list(drivers)
        resolved = [d for d in items if isinstance(d, Driver)]
        resolved += list(parse_drivers([d for d in items if isinstance(d, dict)], warnings))
    record_warnings("sensitivity_driver_skipped", warnings)
    return resolved


def apply_driver_values(data: dict, values: dict[str, float], drivers: Iterable[Driver | dict] | None = None) -> dict:
    """Return a scenario copy of ``data`` with driver values (keyed by driver key or path) applied."""
    by_key = {d.key: d.path for d in _resolve_drivers(data, drivers)}
    scenario = data
    for key, value in values.items():
        scenario = set_nested_value(scenario, by_key.get(key, key), value)
    return scenario


def run_driver_sensitivity(data: dict, drivers: Iterable[Driver | dict] | None = None) -> pd.DataFrame:
    """Re-run the projection once per driver value; one row per scenario."""
    base = evaluate_outputs(calculate_business_metrics(data))
    rows = []
    for driver in _resolve_drivers(data, drivers):
        base_value = get_nested_value(data, driver.path)
        for point, value in enumerate(driver.values, start=1):
            try:
                scenario = set_nested_value(data, driver.path, value)
            except ValueError as exc:
                append_runtime_event(
                    "warning",
                    "sensitivity_driver_skipped",
                    f"Driver {driver.key} could not be applied.",
                    context={"path": driver.path},
                    exc=exc,
                )
                break
            out = evaluate_outputs(calculate_business_metrics(scenario))
            rows.append(
                {
                    "Driver": driver.key,
                    "Label": driver.label,
                    "Path": driver.path,
                    "Point": point,
                    "Value": value,
                    "Base Value": base_value,
                    **out,
                    **{f"Delta {k}": out[k] - base[k] for k in base.keys()},
                }
            )
    columns = ["Driver", "Label", "Path", "Point", "Value", "Base Value"] + TARGET_OPTIONS + [f"Delta {k}" for k in TARGET_OPTIONS]
    return pd.DataFrame(rows, columns=columns)


def driver_swings(sens_df: pd.DataFrame, metric: str = "NPV") -> pd.DataFrame:
    """Spread of ``metric`` per driver, largest first (tornado ordering)."""
    if sens_df.empty:
        return pd.DataFrame(columns=["Driver", "Low", "High", "Swing"])
    grouped = sens_df.groupby("Driver")[metric].agg(["min", "max"]).reset_index()
    grouped.columns = ["Driver", "Low", "High"]
    grouped["Swing"] = grouped["High"] - grouped["Low"]
    return grouped.sort_values("Swing", ascending=False).reset_index(drop=True)


def solve_driver_for_target(
    data: dict,
    path: str,
    metric: str,
    target: float,
    lower_bound: float,
    upper_bound: float,
    tol: float = 1.0,
    max_iter: int = 60,
) -> GoalSeekResult:
    """Find the value at ``path`` that makes ``metric`` hit ``target``."""
    if metric not in TARGET_OPTIONS:
        raise ValueError(f"Unknown target metric {metric!r}. Choose from {TARGET_OPTIONS}.")

    def evaluator(x: float) -> float:
        out = evaluate_outputs(calculate_business_metrics(set_nested_value(data, path, x)))[metric]
        if math.isnan(out):
            raise ValueError(f"{metric} is undefined at {path}={x}.")
        return out

    try:
        return solve_bounded_scalar(evaluator, target, lower_bound, upper_bound, tol=tol, max_iter=max_iter, scan_steps=8)
    except ValueError as exc:
        return GoalSeekResult("failed", None, None, 0, str(exc))
