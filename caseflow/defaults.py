"""Engine constants and default business/market cases."""

from __future__ import annotations

from typing import Any


MAX_PERIODS = 60
DEFAULT_START_DATE = "2026-01-01"

IRR_INITIAL_GUESS = 0.10
IRR_TOLERANCE = 1e-6
IRR_MAX_ITERATIONS = 1000
IRR_MAX_STEP = 1.0
IRR_SAME_TOLERANCE = 0.01
IRR_ANNUALIZED_FLOOR = -0.99
IRR_ANNUALIZED_CEILING = 100.0

DEFAULT_MARKET_BASE_YEAR = 2024
DEFAULT_TARGET_TIMEFRAME_YEARS = 5.0

MAX_PATH_INDEX = 10000


def _v(value: Any, unit: str = "", rationale: str = "") -> dict[str, Any]:
    return {"value": value, "unit": unit, "rationale": rationale}


DEFAULTS: dict[str, Any] = {
    "meta": {
        "title": "Subscription Analytics Platform",
        "description": "Recurring SaaS offering for mid-market finance teams.",
        "business_model": "recurring",
        "currency": "EUR",
        "periods": 60,
        "frequency": "monthly",
        "start_date": DEFAULT_START_DATE,
    },
    "assumptions": {
        "pricing": {
            "avg_unit_price": _v(10.0, "EUR", "Entry tier monthly subscription price."),
            "yearly_adjustments": {
                "pricing_factors": [],
                "price_overrides": [],
            },
        },
        "financial": {
            "interest_rate": _v(0.10, "ratio", "Weighted average cost of capital."),
        },
        "customers": {
            "churn_pct": _v(0.02, "ratio", "Monthly logo churn."),
            "segments": [
                {
                    "id": "mid_market",
                    "label": "Mid-market finance teams",
                    "rationale": "Primary launch segment.",
                    "volume": {
                        "type": "pattern",
                        "pattern_type": "geom_growth",
                        "series": [{"period": 1, "value": 10000, "unit": "customers", "rationale": "Launch base."}],
                        "monthly_growth_rate": _v(0.035, "ratio", "Observed growth of comparable tools."),
                        "yearly_adjustments": {
                            "volume_factors": [],
                            "volume_overrides": [],
                        },
                    },
                }
            ],
        },
        "unit_economics": {
            "cogs_pct": _v(0.05, "ratio", "Hosting and support cost share."),
            "cac": _v(12.0, "EUR", "Blended paid acquisition cost."),
        },
        "opex": [
            {"name": "Sales & Marketing", "value": _v(15000.0, "EUR", "Field marketing budget.")},
            {"name": "R&D", "value": _v(25000.0, "EUR", "Core engineering team.")},
            {
                "name": "G&A",
                "cost_structure": {
                    "fixed_component": _v(8000.0, "EUR", "Finance and office."),
                    "variable_revenue_rate": _v(0.01, "ratio", "Payment processing."),
                    "variable_volume_rate": _v(0.0, "EUR", ""),
                },
            },
        ],
        "capex": [
            {
                "name": "Platform build",
                "timeline": {
                    "type": "time_series",
                    "series": [
                        {"period": 1, "value": 250000, "unit": "EUR", "rationale": "Initial build."},
                        {"period": 13, "value": 80000, "unit": "EUR", "rationale": "Scale-out."},
                    ],
                },
            }
        ],
    },
    "drivers": [
        {
            "key": "unit_price",
            "label": "Average unit price",
            "path": "assumptions.pricing.avg_unit_price.value",
            "range": [8.0, 9.0, 10.0, 11.0, 12.0],
            "rationale": "Pricing tier uncertainty.",
        },
        {
            "key": "churn",
            "label": "Monthly churn",
            "path": "assumptions.customers.churn_pct.value",
            "range": [0.01, 0.015, 0.02, 0.03, 0.04],
            "rationale": "Retention benchmarks.",
        },
        {
            "key": "growth",
            "label": "Monthly customer growth",
            "path": "assumptions.customers.segments[0].volume.monthly_growth_rate.value",
            "range": [0.02, 0.025, 0.035, 0.045, 0.05],
            "rationale": "Growth range of comparable launches.",
        },
    ],
}


COST_SAVINGS_DEFAULTS: dict[str, Any] = {
    "meta": {
        "title": "Invoice Processing Automation",
        "description": "Savings from automating manual invoice handling.",
        "business_model": "cost_savings",
        "currency": "EUR",
        "periods": 36,
        "frequency": "monthly",
    },
    "assumptions": {
        "financial": {"interest_rate": _v(0.08, "ratio", "Company WACC.")},
        "unit_economics": {"cogs_pct": _v(0.0, "ratio", ""), "cac": _v(0.0, "EUR", "")},
        "cost_savings": {
            "baseline_costs": [
                {
                    "id": "manual_processing",
                    "label": "Manual invoice processing",
                    "current_monthly_cost": _v(25000.0, "EUR", "5 FTE at 5k monthly cost."),
                    "savings_potential_pct": _v(70.0, "%", "Share of invoices processed automatically."),
                    "implementation_timeline": {"start_month": 1, "ramp_up_months": 6, "full_implementation_month": 7},
                },
                {
                    "id": "error_handling",
                    "label": "Error correction and rework",
                    "current_monthly_cost": _v(8000.0, "EUR", "Cost of processing errors."),
                    "savings_potential_pct": _v(80.0, "%", "Lower error rates."),
                    "implementation_timeline": {"start_month": 3, "ramp_up_months": 4, "full_implementation_month": 7},
                },
            ],
            "efficiency_gains": [
                {
                    "id": "processing_speed",
                    "label": "Invoice processing speed",
                    "metric": "invoices per hour",
                    "baseline_value": _v(12.0, "invoices/hour", "Manual rate."),
                    "improved_value": _v(120.0, "invoices/hour", "Automated rate."),
                    "value_per_unit": _v(2.5, "EUR", "Value per additional invoice."),
                    "implementation_timeline": {"start_month": 2, "ramp_up_months": 5, "full_implementation_month": 7},
                }
            ],
        },
        "opex": [
            {"name": "Licences", "value": _v(3000.0, "EUR", "Vendor subscription.")},
            {"name": "Support", "value": _v(1500.0, "EUR", "Internal support.")},
            {"name": "Administration", "value": _v(500.0, "EUR", "Governance.")},
        ],
        "capex": [
            {
                "name": "Implementation project",
                "timeline": {"type": "time_series", "series": [{"period": 1, "value": 120000, "unit": "EUR", "rationale": "Integration."}]},
            }
        ],
    },
    "drivers": [
        {
            "key": "manual_savings",
            "label": "Manual processing savings",
            "path": "assumptions.cost_savings.baseline_costs[0].savings_potential_pct.value",
            "range": [50.0, 60.0, 70.0, 80.0, 90.0],
            "rationale": "Automation rate uncertainty.",
        }
    ],
}


MARKET_DEFAULTS: dict[str, Any] = {
    "meta": {
        "title": "European finance analytics market",
        "currency": "EUR",
        "base_year": DEFAULT_MARKET_BASE_YEAR,
        "analysis_horizon_years": 5,
    },
    "market_sizing": {
        "total_addressable_market": {
            "base_value": _v(5_000_000_000.0, "EUR", "Analyst estimate."),
            "growth_rate": _v(8.0, "%", "Category CAGR."),
            "market_definition": "Finance analytics software in the EU.",
            "data_sources": [],
        },
        "serviceable_addressable_market": {"percentage_of_tam": _v(30.0, "%", "Mid-market only.")},
        "serviceable_obtainable_market": {"percentage_of_sam": _v(10.0, "%", "Reachable with current channels.")},
    },
    "market_share": {
        "current_position": {"current_share": _v(0.5, "%", "Pilot customers.")},
        "target_position": {
            "target_share": _v(5.0, "%", "Five year plan."),
            "target_timeframe": _v(5, "years", ""),
            "penetration_strategy": "s_curve",
        },
    },
    "competitive_landscape": {
        "market_structure": {"barriers_to_entry": "medium"},
        "competitors": [
            {"name": "Incumbent A", "market_share": _v(25.0, "%", ""), "positioning": "Enterprise suite", "threat_level": "high"},
            {"name": "Challenger B", "market_share": _v(10.0, "%", ""), "positioning": "Self-serve", "threat_level": "medium"},
        ],
        "competitive_advantages": [
            {"advantage": "Native ERP connectors", "sustainability": "medium", "rationale": ""},
        ],
    },
    "customer_analysis": {
        "market_segments": [
            {"id": "mid", "name": "Mid-market", "size_percentage": _v(45.0, "%", ""), "growth_rate": _v(9.0, "%", "")},
            {"id": "smb", "name": "Small business", "size_percentage": _v(35.0, "%", ""), "growth_rate": _v(4.0, "%", "")},
        ],
    },
}
