"""Nominal and present-value presentation transforms."""

from __future__ import annotations

import numpy as np
import pandas as pd


VALUE_MODES = ("nominal", "present_value")

NON_MONETARY_COLUMNS = {
    "Month_Number",
    "Year",
    "Date",
    "Year_Month_Label",
    "Sales Volume",
    "New Customers",
    "Existing Customers",
    "Unit Price",
    "CAC per Unit",
}


def money_columns(df: pd.DataFrame) -> list[str]:
    """Numeric columns holding currency amounts (counts and unit prices excluded)."""
    return [
        col
        for col in df.columns
        if col not in NON_MONETARY_COLUMNS and pd.api.types.is_numeric_dtype(df[col])
    ]


def discount_factors(periods: int, annual_rate: float) -> np.ndarray:
    """Monthly-compounded factors; period 1 is discounted one month."""
    t = np.arange(1, periods + 1, dtype=float)
    return (1.0 + float(annual_rate) / 12.0) ** t


def apply_value_mode(df: pd.DataFrame, value_mode: str, annual_rate: float | None = None) -> pd.DataFrame:
    """Return a presentation dataframe transformed for the requested value mode.

    ``present_value`` discounts every monetary column at ``annual_rate / 12`` per
    month, so the summed ``Net Cash Flow`` equals the case NPV. Cumulative
    columns are rebuilt from the discounted flows.
    """
    out = df.copy()
    if value_mode != "present_value":
        return out

    if annual_rate is None:
        annual_rate = df.attrs.get("interest_rate", 0.0)
    monetary = money_columns(out)
    out[monetary] = out[monetary].div(discount_factors(len(out), annual_rate), axis=0)
    if "Cumulative Cash Flow" in out.columns:
        out["Cumulative Cash Flow"] = out["Net Cash Flow"].cumsum()
    return out


def value_mode_label(value_mode: str) -> str:
    if value_mode == "present_value":
        return "Discounted present-value dollars"
    return "Nominal dollars"
