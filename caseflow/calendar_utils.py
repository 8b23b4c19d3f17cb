"""Calendar helpers for projection periods."""

from __future__ import annotations

import pandas as pd

from caseflow.defaults import DEFAULT_START_DATE


def period_dates(start_date: str | None, periods: int) -> pd.DatetimeIndex:
    """Return one date per period, stepping whole calendar months from ``start_date``."""
    start = pd.Timestamp(start_date or DEFAULT_START_DATE)
    if periods <= 0:
        return pd.DatetimeIndex([])
    return pd.date_range(start=start, periods=int(periods), freq=pd.DateOffset(months=1))


def year_month_labels(dates: pd.DatetimeIndex) -> list[str]:
    return [d.strftime("%Y-%m") for d in dates]


def projection_year(i: int) -> int:
    """1-based projection year of zero-based period ``i``."""
    return i // 12 + 1
