"""Monthly projection engine: P&L and cash flow per period."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import pandas as pd

from caseflow.calendar_utils import period_dates, projection_year, year_month_labels
from caseflow.cost_savings import BenefitBreakdown, benefits_for_period
from caseflow.growth import resolve_volume, round_half_up, total_volume, unit_price
from caseflow.runtime_logging import record_warnings
from caseflow.schema import BusinessCase, BusinessModel, OpexItem, parse_business_data


@dataclass(frozen=True)
class MonthlyData:
    """One projected period. Expenses are negative, amounts rounded to whole units."""

    month: int
    date: pd.Timestamp
    sales_volume: float
    new_customers: float
    existing_customers: float
    unit_price: float
    revenue: float
    cogs: float
    gross_profit: float
    sales_marketing: float
    total_cac: float
    cac: float
    rd: float
    ga: float
    other_opex: float
    total_opex: float
    ebitda: float
    capex: float
    net_cash_flow: float
    baseline_costs: float | None = None
    cost_savings: float | None = None
    efficiency_gains: float | None = None
    total_benefits: float | None = None


@dataclass(frozen=True)
class _Sales:
    volume: float
    new_customers: float
    existing_customers: float
    unit_price: float
    revenue: float
    benefits: BenefitBreakdown | None = None


@dataclass(frozen=True)
class OpexBreakdown:
    sales_marketing: float
    rd: float
    ga: float
    total: float


def coerce_case(data: Any) -> BusinessCase:
    """Accept a raw business dict or an already parsed ``BusinessCase``."""
    if isinstance(data, BusinessCase):
        return data
    case, warnings = parse_business_data(data)
    record_warnings("business_data_parse_warnings", warnings, context={"title": case.title})
    return case


def opex_item_cost(item: OpexItem | None, revenue: float, volume: float) -> float:
    if item is None:
        return 0.0
    if item.structured:
        return round_half_up(item.fixed + revenue * item.revenue_rate + volume * item.volume_rate)
    # Flat monthly values are taken as entered.
    return item.fixed


def opex_for_month(case: BusinessCase, revenue: float, volume: float) -> OpexBreakdown:
    items = case.opex
    categories = [opex_item_cost(items[k] if k < len(items) else None, revenue, volume) for k in range(3)]
    total = sum(opex_item_cost(item, revenue, volume) for item in items)
    return OpexBreakdown(categories[0], categories[1], categories[2], total)


def capex_for_month(case: BusinessCase, i: int) -> float:
    total = 0.0
    for item in case.capex:
        total += item.points.get(i + 1, 0.0)
        if item.pattern is not None:
            total += resolve_volume(item.pattern, i)
    return total


def _recurring_sales(case: BusinessCase, i: int, prev: MonthlyData | None) -> _Sales:
    volume = total_volume(case.segments, i)
    if prev is None:
        new, existing = volume, 0.0
    else:
        existing = round_half_up((prev.new_customers + prev.existing_customers) * (1.0 - case.churn_pct))
        new = max(0.0, volume - existing)
    price = unit_price(case.pricing, i)
    return _Sales(volume, new, existing, price, round_half_up(volume * price))


def _one_time_sales(case: BusinessCase, i: int, prev: MonthlyData | None) -> _Sales:
    volume = total_volume(case.segments, i)
    price = unit_price(case.pricing, i)
    return _Sales(volume, volume, 0.0, price, round_half_up(volume * price))


def _cost_savings_sales(case: BusinessCase, i: int, prev: MonthlyData | None) -> _Sales:
    benefits = benefits_for_period(case, i)
    return _Sales(1.0, 0.0, 0.0, 0.0, round_half_up(benefits.total_benefits), benefits)


_SALES_BY_MODEL: dict[BusinessModel, Callable[[BusinessCase, int, MonthlyData | None], _Sales]] = {
    BusinessModel.RECURRING: _recurring_sales,
    BusinessModel.ONE_TIME: _one_time_sales,
    BusinessModel.COST_SAVINGS: _cost_savings_sales,
}


def generate_monthly_data(data: Any) -> list[MonthlyData]:
    """Project every period of a business case."""
    case = coerce_case(data)
    sales_for = _SALES_BY_MODEL[case.business_model]
    recurring = case.business_model is BusinessModel.RECURRING
    dates = period_dates(case.start_date, case.periods)

    months: list[MonthlyData] = []
    prev: MonthlyData | None = None
    for i in range(case.periods):
        sales = sales_for(case, i, prev)

        revenue = sales.revenue
        cogs = -round_half_up(revenue * case.cogs_pct)
        gross_profit = revenue + cogs

        opex = opex_for_month(case, revenue, sales.volume)
        if recurring:
            total_cac = -round_half_up(sales.new_customers * case.cac)
        else:
            total_cac = -round_half_up(sales.volume * case.cac)
        total_opex = -opex.total + total_cac
        ebitda = gross_profit + total_opex
        capex = -capex_for_month(case, i)

        benefits = sales.benefits
        month = MonthlyData(
            month=i + 1,
            date=dates[i],
            sales_volume=round_half_up(sales.volume),
            new_customers=round_half_up(sales.new_customers),
            existing_customers=round_half_up(sales.existing_customers),
            unit_price=sales.unit_price,
            revenue=revenue,
            cogs=cogs,
            gross_profit=gross_profit,
            sales_marketing=-opex.sales_marketing,
            total_cac=total_cac,
            cac=case.cac,
            rd=-opex.rd,
            ga=-opex.ga,
            other_opex=-(opex.total - opex.sales_marketing - opex.rd - opex.ga),
            total_opex=total_opex,
            ebitda=ebitda,
            capex=capex,
            net_cash_flow=ebitda + capex,
            baseline_costs=round_half_up(benefits.baseline_costs) if benefits else None,
            cost_savings=round_half_up(benefits.cost_savings) if benefits else None,
            efficiency_gains=round_half_up(benefits.efficiency_gains) if benefits else None,
            total_benefits=round_half_up(benefits.total_benefits) if benefits else None,
        )
        months.append(month)
        prev = month
    return months


def monthly_frame(monthly: list[MonthlyData], interest_rate: float = 0.0) -> pd.DataFrame:
    """Tabular view of a projection, one row per period."""
    dates = pd.DatetimeIndex([m.date for m in monthly])
    df = pd.DataFrame(
        {
            "Month_Number": [m.month for m in monthly],
            "Date": dates,
            "Year": [projection_year(m.month - 1) for m in monthly],
            "Year_Month_Label": year_month_labels(dates),
            "Sales Volume": [m.sales_volume for m in monthly],
            "New Customers": [m.new_customers for m in monthly],
            "Existing Customers": [m.existing_customers for m in monthly],
            "Unit Price": [m.unit_price for m in monthly],
            "Total Revenue": [m.revenue for m in monthly],
            "COGS": [m.cogs for m in monthly],
            "Gross Profit": [m.gross_profit for m in monthly],
            "Sales & Marketing": [m.sales_marketing for m in monthly],
            "R&D": [m.rd for m in monthly],
            "G&A": [m.ga for m in monthly],
            "Other OPEX": [m.other_opex for m in monthly],
            "Total CAC": [m.total_cac for m in monthly],
            "CAC per Unit": [m.cac for m in monthly],
            "Total OPEX": [m.total_opex for m in monthly],
            "EBITDA": [m.ebitda for m in monthly],
            "Capex": [m.capex for m in monthly],
            "Net Cash Flow": [m.net_cash_flow for m in monthly],
        }
    )
    df["Cumulative Cash Flow"] = df["Net Cash Flow"].cumsum()
    if monthly and monthly[0].total_benefits is not None:
        df["Baseline Costs"] = [m.baseline_costs for m in monthly]
        df["Cost Savings"] = [m.cost_savings for m in monthly]
        df["Efficiency Gains"] = [m.efficiency_gains for m in monthly]
        df["Total Benefits"] = [m.total_benefits for m in monthly]
    df.attrs["interest_rate"] = float(interest_rate)
    return df


def run_model(data: Any) -> pd.DataFrame:
    """Project a business case and return the monthly table."""
    case = coerce_case(data)
    df = monthly_frame(generate_monthly_data(case), case.interest_rate)
    df.attrs["business_model"] = case.business_model.value
    return df
