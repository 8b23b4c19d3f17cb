"""Valuation metrics: NPV, IRR, break-even, payback and funding need."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence

import numpy as np
import pandas as pd

from caseflow.defaults import (
    IRR_ANNUALIZED_CEILING,
    IRR_ANNUALIZED_FLOOR,
    IRR_INITIAL_GUESS,
    IRR_MAX_ITERATIONS,
    IRR_MAX_STEP,
    IRR_SAME_TOLERANCE,
    IRR_TOLERANCE,
)
from caseflow.model import MonthlyData, coerce_case, generate_monthly_data
from caseflow.runtime_logging import append_runtime_event


class IrrError(Enum):
    """IRR failure kinds; values are the legacy sentinel codes."""

    NO_DATA = -999
    ALL_SAME = -998
    ALL_POSITIVE = -997
    ALL_NEGATIVE = -996
    NO_CONVERGENCE = -995
    EXTREME_RATE = -994


IRR_ERROR_CODES = {e.name: e.value for e in IrrError}

_IRR_MESSAGES = {
    IrrError.NO_DATA: "No cash flows to evaluate.",
    IrrError.ALL_SAME: "All cash flows are identical; IRR is undefined.",
    IrrError.ALL_POSITIVE: "All cash flows are non-negative; the investment never goes under water.",
    IrrError.ALL_NEGATIVE: "All cash flows are non-positive; the investment never pays back.",
    IrrError.NO_CONVERGENCE: "IRR solver did not converge.",
    IrrError.EXTREME_RATE: "IRR is outside the -99% to 10000% annual range.",
}


@dataclass(frozen=True)
class IrrResult:
    """Monthly-compounded IRR as a nominal annual rate, or the reason it is undefined."""

    rate: float | None
    error: IrrError | None = None
    iterations: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def code(self) -> float:
        """The rate, or the legacy negative sentinel when undefined."""
        if self.error is not None:
            return float(self.error.value)
        return float(self.rate)

    @property
    def annualized(self) -> float | None:
        if self.rate is None:
            return None
        return (1.0 + self.rate / 12.0) ** 12 - 1.0

    @property
    def message(self) -> str:
        return irr_error_message(self.error) if self.error is not None else ""


@dataclass(frozen=True)
class CalculatedMetrics:
    total_revenue: float = 0.0
    net_profit: float = 0.0
    npv: float = 0.0
    irr: IrrResult = field(default_factory=lambda: IrrResult(0.0))
    payback_period: int = 0
    total_investment_required: float = 0.0
    break_even_month: int = 0
    monthly_data: tuple[MonthlyData, ...] = ()


def is_irr_error(value: float | IrrResult) -> bool:
    if isinstance(value, IrrResult):
        return not value.ok
    return value in IRR_ERROR_CODES.values()


def irr_error_message(error: IrrError | float) -> str:
    if not isinstance(error, IrrError):
        try:
            error = IrrError(int(error))
        except (TypeError, ValueError):
            return ""
    return _IRR_MESSAGES[error]


def _flows(values: Sequence[float] | Sequence[MonthlyData]) -> np.ndarray:
    values = list(values)
    if values and isinstance(values[0], MonthlyData):
        values = [m.net_cash_flow for m in values]
    return np.asarray(values, dtype=float)


def npv(cash_flows: Sequence[float] | Sequence[MonthlyData], annual_rate: float) -> float:
    """Discount monthly flows at ``annual_rate / 12``; the first flow is discounted one period."""
    flows = _flows(cash_flows)
    if flows.size == 0:
        return 0.0
    periods = np.arange(1, flows.size + 1, dtype=float)
    return float(np.sum(flows * (1.0 + annual_rate / 12.0) ** -periods))


def _annualized_in_bounds(rate: float) -> bool:
    base = 1.0 + rate / 12.0
    if base <= 0:
        return False
    annual = base**12 - 1.0
    return IRR_ANNUALIZED_FLOOR < annual < IRR_ANNUALIZED_CEILING


def irr(
    cash_flows: Sequence[float] | Sequence[MonthlyData],
    initial_guess: float = IRR_INITIAL_GUESS,
    tol: float = IRR_TOLERANCE,
    max_iter: int = IRR_MAX_ITERATIONS,
) -> IrrResult:
    """Newton-Raphson IRR on monthly-compounded NPV. Never raises."""
    flows = _flows(cash_flows)
    if flows.size == 0:
        return IrrResult(None, IrrError.NO_DATA)
    if np.all(np.abs(flows - flows[0]) < IRR_SAME_TOLERANCE):
        return IrrResult(None, IrrError.ALL_SAME)
    if np.all(flows >= 0):
        return IrrResult(None, IrrError.ALL_POSITIVE)
    if np.all(flows <= 0):
        return IrrResult(None, IrrError.ALL_NEGATIVE)

    periods = np.arange(1, flows.size + 1, dtype=float)
    rate = float(initial_guess)
    for iteration in range(max_iter):
        if not _annualized_in_bounds(rate):
            return _irr_failure(IrrError.EXTREME_RATE, rate, iteration)
        base = 1.0 + rate / 12.0
        value = float(np.sum(flows * base**-periods))
        if abs(value) < tol:
            return IrrResult(rate, None, iteration)
        derivative = float(np.sum(-periods / 12.0 * flows * base ** -(periods + 1.0)))
        if abs(derivative) < tol:
            return _irr_failure(IrrError.NO_CONVERGENCE, rate, iteration)
        step = value / derivative
        rate -= max(-IRR_MAX_STEP, min(IRR_MAX_STEP, step))
    return _irr_failure(IrrError.NO_CONVERGENCE, rate, max_iter)


def _irr_failure(error: IrrError, rate: float, iterations: int) -> IrrResult:
    append_runtime_event(
        "warning",
        "irr_undefined",
        irr_error_message(error),
        context={"error": error.name, "last_rate": rate, "iterations": iterations},
    )
    return IrrResult(None, error, iterations)


def break_even_month(cash_flows: Sequence[float] | Sequence[MonthlyData]) -> int:
    """First 1-based period with strictly positive net cash flow (0 if none)."""
    for idx, value in enumerate(_flows(cash_flows)):
        if value > 0:
            return idx + 1
    return 0


def payback_period(cash_flows: Sequence[float] | Sequence[MonthlyData]) -> int:
    """First 1-based period whose cumulative cash flow is non-negative (0 if none)."""
    cumulative = np.cumsum(_flows(cash_flows))
    hits = np.flatnonzero(cumulative >= 0)
    return int(hits[0]) + 1 if hits.size else 0


def total_investment_required(cash_flows: Sequence[float] | Sequence[MonthlyData]) -> float:
    """Depth of the deepest cumulative cash trough."""
    cumulative = np.cumsum(_flows(cash_flows))
    if cumulative.size == 0:
        return 0.0
    return float(abs(min(0.0, float(cumulative.min()))))


def compute_metrics(monthly: Sequence[MonthlyData], annual_rate: float) -> CalculatedMetrics:
    monthly = tuple(monthly)
    flows = _flows([m.net_cash_flow for m in monthly])
    return CalculatedMetrics(
        total_revenue=float(sum(m.revenue for m in monthly)),
        net_profit=float(flows.sum()),
        npv=npv(flows, annual_rate),
        irr=irr(flows),
        payback_period=payback_period(flows),
        total_investment_required=total_investment_required(flows),
        break_even_month=break_even_month(flows),
        monthly_data=monthly,
    )


def calculate_business_metrics(data: Any) -> CalculatedMetrics:
    """Project a business case and value it. ``None`` yields all-zero metrics."""
    if data is None:
        return CalculatedMetrics()
    case = coerce_case(data)
    return compute_metrics(generate_monthly_data(case), case.interest_rate)


def _safe_div(a: float, b: float) -> float:
    return float(a / b) if b else 0.0


def annual_summary(df: pd.DataFrame) -> pd.DataFrame:
    """Per-year totals and margins from the monthly table."""
    cols = ["Year", "Total Revenue", "COGS", "Gross Profit", "Total OPEX", "EBITDA", "Capex", "Net Cash Flow"]
    if df.empty:
        return pd.DataFrame(columns=cols + ["Gross Margin", "EBITDA Margin", "Cumulative Cash Flow"])
    by_year = df.groupby("Year", as_index=False).sum(numeric_only=True)
    out = by_year[cols].copy()
    out["Gross Margin"] = by_year.apply(lambda r: _safe_div(r["Gross Profit"], r["Total Revenue"]), axis=1)
    out["EBITDA Margin"] = by_year.apply(lambda r: _safe_div(r["EBITDA"], r["Total Revenue"]), axis=1)
    out["Cumulative Cash Flow"] = out["Net Cash Flow"].cumsum()
    return out
