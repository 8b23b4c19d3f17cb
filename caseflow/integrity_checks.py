"""Accounting identity checks on the monthly projection table."""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd


# (check, lhs column, rhs columns summed)
_SUM_IDENTITIES: list[tuple[str, str, tuple[str, ...]]] = [
    ("Gross profit identity", "Gross Profit", ("Total Revenue", "COGS")),
    ("OPEX identity", "Total OPEX", ("Sales & Marketing", "R&D", "G&A", "Other OPEX", "Total CAC")),
    ("EBITDA identity", "EBITDA", ("Gross Profit", "Total OPEX")),
    ("Net cash flow identity", "Net Cash Flow", ("EBITDA", "Capex")),
]

_BENEFIT_IDENTITIES: list[tuple[str, str, tuple[str, ...]]] = [
    ("Benefits identity", "Total Benefits", ("Cost Savings", "Efficiency Gains")),
    ("Benefits revenue identity", "Total Revenue", ("Total Benefits",)),
]

FINDING_COLUMNS = ["Check", "Max Abs Delta", "Month of Max Delta", "LHS", "RHS"]


def _values(df: pd.DataFrame, column: str) -> np.ndarray:
    return df[column].to_numpy(dtype=float)


def _delta_finding(df: pd.DataFrame, check: str, lhs_name: str, rhs_name: str, delta: np.ndarray, tol: float) -> dict[str, Any] | None:
    delta = np.nan_to_num(delta, nan=0.0)
    if delta.size == 0:
        return None
    worst = int(np.argmax(np.abs(delta)))
    max_abs = float(abs(delta[worst]))
    if max_abs <= tol:
        return None
    if "Year_Month_Label" in df.columns:
        month = str(df["Year_Month_Label"].iloc[worst])
    else:
        month = str(worst)
    return dict(zip(FINDING_COLUMNS, [check, max_abs, month, lhs_name, rhs_name]))


def _sum_identity(df: pd.DataFrame, check: str, lhs: str, rhs: tuple[str, ...], tol: float) -> dict[str, Any] | None:
    total = np.sum([_values(df, col) for col in rhs], axis=0)
    return _delta_finding(df, check, lhs, " + ".join(rhs), _values(df, lhs) - total, tol)


def run_integrity_checks(df: pd.DataFrame, tol: float = 1e-6, benefits_tol: float = 1.0) -> list[dict[str, Any]]:
    """Return integrity findings (empty list means all checks passed).

    Cost-savings benefit components are rounded individually, so their sum may
    differ from the rounded total by up to ``benefits_tol``.
    """
    if not isinstance(df, pd.DataFrame) or df.empty:
        return [dict(zip(FINDING_COLUMNS, ["Dataframe not available", np.nan, "", "", ""]))]

    results = [_sum_identity(df, check, lhs, rhs, tol) for check, lhs, rhs in _SUM_IDENTITIES]
    if "Cumulative Cash Flow" in df.columns:
        roll_forward = _values(df, "Cumulative Cash Flow") - np.cumsum(_values(df, "Net Cash Flow"))
        results.append(
            _delta_finding(
                df, "Cumulative cash roll-forward", "Cumulative Cash Flow", "Running sum of Net Cash Flow", roll_forward, tol
            )
        )
    if "Total Benefits" in df.columns:
        results.append(_sum_identity(df, *_BENEFIT_IDENTITIES[0], benefits_tol))
        results.append(_sum_identity(df, *_BENEFIT_IDENTITIES[1], tol))
    return [r for r in results if r is not None]
