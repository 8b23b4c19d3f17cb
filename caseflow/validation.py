"""Advisory validation of raw business and market cases.

Validators report ``errors`` and ``warnings`` side by side and never block a
projection run; the engine always computes a best-effort result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from caseflow.defaults import MAX_PERIODS
from caseflow.schema import BUSINESS_MODEL_ALIASES, BusinessModel


VALID_CURRENCIES = {"EUR", "USD", "GBP", "JPY", "CAD", "AUD", "CHF", "SEK", "NOK", "DKK"}

ASSUMPTION_GUIDANCE: dict[str, dict[str, Any]] = {
    "assumptions.customers.churn_pct": {"min": 0.0, "max": 0.15, "note": "Monthly churn above 15% rarely sustains a recurring model."},
    "assumptions.unit_economics.cogs_pct": {"min": 0.0, "max": 0.9, "note": "COGS is a decimal share of revenue."},
    "assumptions.financial.interest_rate": {"min": 0.0, "max": 0.3, "note": "Annual discount rate as a decimal."},
    "assumptions.unit_economics.cac": {"min": 0.0, "max": 100000.0, "note": "Acquisition cost per new customer or unit."},
    "assumptions.pricing.avg_unit_price": {"min": 0.0, "max": 1000000.0, "note": "Average price per unit sold."},
}


@dataclass(frozen=True)
class ValidationIssue:
    path: str
    message: str
    value: Any = None
    suggestion: str = ""


@dataclass
class ValidationResult:
    valid: bool = True
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    def messages(self) -> list[str]:
        return [f"{i.path}: {i.message}" for i in self.errors + self.warnings]


def _result(errors: list[ValidationIssue], warnings: list[ValidationIssue]) -> ValidationResult:
    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def _value(node: Any) -> Any:
    return node.get("value") if isinstance(node, dict) else node


def _number(node: Any) -> float | None:
    v = _value(node)
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return None
    return float(v)


def _walk(root: Any, path: str) -> Any:
    node = root
    for part in path.split("."):
        if not isinstance(node, dict):
            return None
        node = node.get(part)
    return node


def _fmt(v: float) -> str:
    if abs(v - round(v)) < 1e-9:
        return f"{int(round(v))}"
    return f"{v:.3f}".rstrip("0").rstrip(".")


def _check_value_with_rationale(node: Any, path: str, errors: list[ValidationIssue]) -> None:
    if node is None or not isinstance(node, dict):
        return
    v = node.get("value")
    if isinstance(v, bool) or not isinstance(v, (int, float)) or v != v:
        errors.append(ValidationIssue(f"{path}.value", "Value must be a valid number", v))
        return
    if not isinstance(node.get("unit"), str):
        errors.append(ValidationIssue(f"{path}.unit", "Unit must be a string", node.get("unit")))


def guidance_warnings(data: Any) -> list[ValidationIssue]:
    """Flag assumptions outside their usual range."""
    out: list[ValidationIssue] = []
    for path, g in ASSUMPTION_GUIDANCE.items():
        v = _number(_walk(data, path))
        if v is None:
            continue
        if v < g["min"] or v > g["max"]:
            out.append(
                ValidationIssue(
                    path,
                    f"{_fmt(v)} is outside the recommended range [{_fmt(g['min'])}, {_fmt(g['max'])}].",
                    v,
                    g["note"],
                )
            )
    return out


def _validate_meta(meta: Any, errors: list[ValidationIssue], warnings: list[ValidationIssue]) -> None:
    if not isinstance(meta, dict):
        errors.append(ValidationIssue("meta", "Missing meta information"))
        return
    title = meta.get("title")
    if not isinstance(title, str) or not title.strip():
        errors.append(ValidationIssue("meta.title", "Title is required"))
    if meta.get("currency") not in VALID_CURRENCIES:
        errors.append(ValidationIssue("meta.currency", "Invalid or missing currency code", meta.get("currency")))
    model = meta.get("business_model")
    if model not in {m.value for m in BusinessModel} and model not in BUSINESS_MODEL_ALIASES:
        errors.append(ValidationIssue("meta.business_model", "Invalid or missing business model", model))
    periods = _number(meta.get("periods"))
    if periods is None or periods <= 0:
        errors.append(ValidationIssue("meta.periods", "Periods must be a positive number", meta.get("periods")))
    elif periods > MAX_PERIODS:
        warnings.append(
            ValidationIssue("meta.periods", f"Periods above {MAX_PERIODS} are clamped to {MAX_PERIODS}", periods)
        )


def _validate_assumptions(assumptions: dict, errors: list[ValidationIssue], warnings: list[ValidationIssue]) -> None:
    pricing = assumptions.get("pricing") or {}
    _check_value_with_rationale(pricing.get("avg_unit_price"), "assumptions.pricing.avg_unit_price", errors)
    financial = assumptions.get("financial") or {}
    _check_value_with_rationale(financial.get("interest_rate"), "assumptions.financial.interest_rate", errors)

    segments = (assumptions.get("customers") or {}).get("segments")
    if segments is not None:
        if not isinstance(segments, list):
            errors.append(ValidationIssue("assumptions.customers.segments", "Segments must be an array"))
        elif not segments:
            warnings.append(
                ValidationIssue(
                    "assumptions.customers.segments",
                    "No customer segments defined",
                    suggestion="Add customer segments for better analysis",
                )
            )

    opex = assumptions.get("opex")
    if opex is not None and not isinstance(opex, list):
        errors.append(ValidationIssue("assumptions.opex", "OpEx must be an array"))

    baseline = (assumptions.get("cost_savings") or {}).get("baseline_costs")
    for idx, item in enumerate(baseline if isinstance(baseline, list) else []):
        pct = _number((item or {}).get("savings_potential_pct"))
        if pct is not None and not 0 <= pct <= 100:
            errors.append(
                ValidationIssue(
                    f"assumptions.cost_savings.baseline_costs[{idx}].savings_potential_pct",
                    "Savings potential must be a percentage between 0 and 100",
                    pct,
                )
            )


def validate_business_data(data: Any) -> ValidationResult:
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []
    if not isinstance(data, dict):
        errors.append(ValidationIssue("root", "Business data is null or undefined"))
        return _result(errors, warnings)

    _validate_meta(data.get("meta"), errors, warnings)
    assumptions = data.get("assumptions")
    if not isinstance(assumptions, dict):
        warnings.append(
            ValidationIssue("assumptions", "No assumptions defined", suggestion="Add financial assumptions for better analysis")
        )
    else:
        _validate_assumptions(assumptions, errors, warnings)
        warnings.extend(guidance_warnings(data))
    return _result(errors, warnings)


def validate_market_data(data: Any) -> ValidationResult:
    """Structural checks of a market case (presence of modules and the sizing funnel)."""
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []
    if not isinstance(data, dict):
        errors.append(ValidationIssue("root", "Market data is null or undefined"))
        return _result(errors, warnings)

    if not data.get("meta"):
        warnings.append(
            ValidationIssue("meta", "Missing meta information", suggestion="Add title and description for better documentation")
        )

    sizing = data.get("market_sizing")
    if not isinstance(sizing, dict):
        warnings.append(ValidationIssue("market_sizing", "No market sizing data", suggestion="Add TAM/SAM/SOM analysis"))
    else:
        tam = sizing.get("total_addressable_market")
        if isinstance(tam, dict):
            _check_value_with_rationale(tam.get("base_value"), "market_sizing.total_addressable_market.base_value", errors)
            _check_value_with_rationale(tam.get("growth_rate"), "market_sizing.total_addressable_market.growth_rate", errors)
        has_tam = bool(tam)
        has_sam = bool(sizing.get("serviceable_addressable_market"))
        has_som = bool(sizing.get("serviceable_obtainable_market"))
        if has_tam and not has_sam:
            warnings.append(
                ValidationIssue(
                    "market_sizing.serviceable_addressable_market",
                    "TAM defined but SAM missing",
                    suggestion="Complete the market sizing funnel",
                )
            )
        if has_sam and not has_som:
            warnings.append(
                ValidationIssue(
                    "market_sizing.serviceable_obtainable_market",
                    "SAM defined but SOM missing",
                    suggestion="Complete the market sizing funnel",
                )
            )

    if not data.get("competitive_landscape"):
        warnings.append(
            ValidationIssue("competitive_landscape", "No competitive analysis", suggestion="Add competitor information")
        )
    return _result(errors, warnings)


def validate_market_analysis(data: Any) -> ValidationResult:
    """Consistency checks of sizing percentages and share targets."""
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []

    if not _number(_walk(data, "market_sizing.total_addressable_market.base_value")):
        errors.append(
            ValidationIssue("market_sizing.total_addressable_market.base_value", "Total Addressable Market base value is required")
        )

    sam_path = "market_sizing.serviceable_addressable_market.percentage_of_tam"
    sam_pct = _number(_walk(data, sam_path)) or 0.0
    if sam_pct <= 0 or sam_pct > 100:
        errors.append(ValidationIssue(sam_path, "Serviceable Addressable Market percentage must be between 0 and 100", sam_pct))

    som_path = "market_sizing.serviceable_obtainable_market.percentage_of_sam"
    som_pct = _number(_walk(data, som_path)) or 0.0
    if som_pct <= 0 or som_pct > 100:
        errors.append(ValidationIssue(som_path, "Serviceable Obtainable Market percentage must be between 0 and 100", som_pct))

    current = _number(_walk(data, "market_share.current_position.current_share")) or 0.0
    target_path = "market_share.target_position.target_share"
    target = _number(_walk(data, target_path)) or 0.0
    if target <= current:
        warnings.append(ValidationIssue(target_path, "Target market share should be higher than current market share", target))
    if target > 50:
        warnings.append(
            ValidationIssue(target_path, "Target market share above 50% may be unrealistic in competitive markets", target)
        )

    competitors = _walk(data, "competitive_landscape.competitors")
    total_competitor = sum(_number((c or {}).get("market_share")) or 0.0 for c in (competitors if isinstance(competitors, list) else []))
    if total_competitor + current > 100:
        warnings.append(
            ValidationIssue("competitive_landscape.competitors", "Total market share (including competitors) exceeds 100%", total_competitor + current)
        )
    return _result(errors, warnings)


def validate_market_suite_data(data: Any) -> ValidationResult:
    """Module-level checks; every module is optional, so an empty case is valid."""
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []
    data = data if isinstance(data, dict) else {}

    modules = {
        "market_sizing": "Market Sizing module not configured - add it to analyze TAM/SAM/SOM",
        "competitive_landscape": "Competitive Intelligence module not configured - add it for competitor analysis",
        "customer_analysis": "Customer Analysis module not configured - add it for segment analysis",
        "strategic_planning": "Strategic Planning module not configured - add it for execution strategy and projections",
    }
    for key, message in modules.items():
        if not data.get(key):
            warnings.append(ValidationIssue(key, message))

    if data.get("market_sizing") and not _number(_walk(data, "market_sizing.total_addressable_market.base_value")):
        errors.append(
            ValidationIssue(
                "market_sizing.total_addressable_market.base_value",
                "Market Sizing: Total Addressable Market base value is missing",
            )
        )

    landscape = data.get("competitive_landscape")
    if isinstance(landscape, dict) and landscape:
        if not landscape.get("competitors"):
            warnings.append(
                ValidationIssue(
                    "competitive_landscape.competitors",
                    "Competitive Intelligence: No competitors defined - add competitor data for better analysis",
                )
            )
        if not landscape.get("competitive_advantages"):
            warnings.append(
                ValidationIssue(
                    "competitive_landscape.competitive_advantages",
                    "Competitive Intelligence: No competitive advantages defined",
                )
            )

    customers = data.get("customer_analysis")
    if isinstance(customers, dict) and customers:
        segments = customers.get("market_segments")
        segments = segments if isinstance(segments, list) else []
        if not segments:
            warnings.append(ValidationIssue("customer_analysis.market_segments", "Customer Analysis: No customer segments defined"))
        total = sum(_number((s or {}).get("size_percentage")) or 0.0 for s in segments)
        if total > 100:
            errors.append(
                ValidationIssue(
                    "customer_analysis.market_segments",
                    "Customer Analysis: Total segment percentages exceed 100%",
                    total,
                )
            )
    return _result(errors, warnings)
