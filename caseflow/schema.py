"""Typed assumption structures and boundary parsing of JSON-shaped cases.

Raw business and market cases arrive as nested dicts where numeric leaves are
either plain numbers or ``{"value", "unit", "rationale"}`` objects. The parsers
here normalize every supported input vintage into frozen dataclasses and return
human-readable warnings instead of raising on content problems.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

import pandas as pd

from caseflow.defaults import (
    DEFAULT_MARKET_BASE_YEAR,
    DEFAULT_START_DATE,
    DEFAULT_TARGET_TIMEFRAME_YEARS,
    MAX_PERIODS,
)
from caseflow.runtime_logging import append_runtime_event


class BusinessModel(str, Enum):
    RECURRING = "recurring"
    ONE_TIME = "one_time"
    COST_SAVINGS = "cost_savings"


BUSINESS_MODEL_ALIASES = {"unit_sales": BusinessModel.ONE_TIME}


class PenetrationStrategy(str, Enum):
    LINEAR = "linear"
    EXPONENTIAL = "exponential"
    S_CURVE = "s_curve"


PATTERN_TYPES = {"geom_growth", "linear_growth", "seasonal_growth"}
SEGMENT_PATTERN_TYPES = {"geometric_growth", "linear_growth", "seasonal_growth"}


@dataclass(frozen=True)
class SeriesPoint:
    period: int
    value: float


@dataclass(frozen=True)
class YearlyAdjustments:
    """Year factors keyed by 1-based year and overrides keyed by 1-based period."""

    factors: dict[int, float] = field(default_factory=dict)
    overrides: dict[int, float] = field(default_factory=dict)


@dataclass(frozen=True)
class TimeSeriesVolume:
    points: tuple[SeriesPoint, ...]
    adjustments: YearlyAdjustments = field(default_factory=YearlyAdjustments)


@dataclass(frozen=True)
class GeometricVolume:
    start: float
    monthly_growth_rate: float
    adjustments: YearlyAdjustments = field(default_factory=YearlyAdjustments)


@dataclass(frozen=True)
class LinearVolume:
    start: float
    monthly_increase: float
    adjustments: YearlyAdjustments = field(default_factory=YearlyAdjustments)


@dataclass(frozen=True)
class SeasonalVolume:
    base_year_total: float
    seasonality: tuple[float, ...]
    yoy_growth: float
    adjustments: YearlyAdjustments = field(default_factory=YearlyAdjustments)


@dataclass(frozen=True)
class SegmentSeasonalVolume:
    """Monthly base value shaped by a repeating pattern of any length, compounding monthly."""

    base_value: float
    pattern: tuple[float, ...]
    monthly_growth_rate: float
    adjustments: YearlyAdjustments = field(default_factory=YearlyAdjustments)


VolumeConfig = Union[TimeSeriesVolume, GeometricVolume, LinearVolume, SeasonalVolume, SegmentSeasonalVolume]


@dataclass(frozen=True)
class PricingConfig:
    base_price: float = 0.0
    adjustments: YearlyAdjustments = field(default_factory=YearlyAdjustments)


@dataclass(frozen=True)
class Segment:
    id: str
    label: str
    volume: VolumeConfig | None


@dataclass(frozen=True)
class OpexItem:
    name: str
    fixed: float = 0.0
    revenue_rate: float = 0.0
    volume_rate: float = 0.0
    structured: bool = False


@dataclass(frozen=True)
class CapexItem:
    name: str
    points: dict[int, float] = field(default_factory=dict)
    pattern: VolumeConfig | None = None


@dataclass(frozen=True)
class ImplementationTimeline:
    start_month: int
    ramp_up_months: int
    full_implementation_month: int


@dataclass(frozen=True)
class BaselineCost:
    id: str
    label: str
    current_monthly_cost: float
    savings_potential_pct: float
    timeline: ImplementationTimeline | None = None


@dataclass(frozen=True)
class EfficiencyGain:
    id: str
    label: str
    baseline_value: float
    improved_value: float
    value_per_unit: float
    timeline: ImplementationTimeline | None = None


@dataclass(frozen=True)
class Driver:
    key: str
    label: str
    path: str
    values: tuple[float, ...]
    rationale: str = ""


@dataclass(frozen=True)
class BusinessCase:
    title: str = ""
    business_model: BusinessModel = BusinessModel.ONE_TIME
    currency: str = "EUR"
    periods: int = MAX_PERIODS
    start_date: str = DEFAULT_START_DATE
    pricing: PricingConfig = field(default_factory=PricingConfig)
    segments: tuple[Segment, ...] = ()
    churn_pct: float = 0.0
    cogs_pct: float = 0.0
    cac: float = 0.0
    opex: tuple[OpexItem, ...] = ()
    capex: tuple[CapexItem, ...] = ()
    baseline_costs: tuple[BaselineCost, ...] = ()
    efficiency_gains: tuple[EfficiencyGain, ...] = ()
    interest_rate: float = 0.0
    drivers: tuple[Driver, ...] = ()


@dataclass(frozen=True)
class Competitor:
    name: str
    share_pct: float
    positioning: str = ""
    threat_level: str = ""


@dataclass(frozen=True)
class MarketSegment:
    id: str
    name: str
    size_pct: float
    growth_pct: float


@dataclass(frozen=True)
class MarketCase:
    title: str = ""
    currency: str = "EUR"
    base_year: int = DEFAULT_MARKET_BASE_YEAR
    tam_base: float = 0.0
    tam_growth_pct: float = 0.0
    sam_pct: float = 0.0
    som_pct: float = 0.0
    current_share_pct: float | None = None
    target_share_pct: float | None = None
    target_timeframe_years: float = DEFAULT_TARGET_TIMEFRAME_YEARS
    strategy: PenetrationStrategy = PenetrationStrategy.LINEAR
    competitors: tuple[Competitor, ...] = ()
    competitive_advantages: int = 0
    barriers_to_entry: str = "medium"
    segments: tuple[MarketSegment, ...] = ()
    avg_customer_annual_value: float | None = None
    drivers: tuple[Driver, ...] = ()


def _as_dict(node: Any) -> dict:
    return node if isinstance(node, dict) else {}


def _as_list(node: Any) -> list:
    return node if isinstance(node, list) else []


def _num_or_none(node: Any) -> float | None:
    """Read a plain number or the ``value`` of a value-with-rationale object."""
    if isinstance(node, dict):
        node = node.get("value")
    if node is None or isinstance(node, bool):
        return None
    try:
        value = float(node)
    except (TypeError, ValueError):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def _num(node: Any, default: float = 0.0) -> float:
    value = _num_or_none(node)
    return default if value is None else value


def _int(node: Any, default: int = 0) -> int:
    value = _num_or_none(node)
    return default if value is None else int(value)


def _text(node: Any, default: str = "") -> str:
    if node is None:
        return default
    return str(node)


def _first_wins(rows: Any, key_field: str, value_fields: tuple[str, ...]) -> dict[int, float]:
    out: dict[int, float] = {}
    for row in _as_list(rows):
        if not isinstance(row, dict):
            continue
        key = _num_or_none(row.get(key_field))
        if key is None:
            continue
        value = None
        for name in value_fields:
            value = _num_or_none(row.get(name))
            if value is not None:
                break
        if value is None or int(key) in out:
            continue
        out[int(key)] = value
    return out


def _parse_volume_adjustments(raw: Any) -> YearlyAdjustments:
    raw = _as_dict(raw)
    return YearlyAdjustments(
        factors=_first_wins(raw.get("volume_factors"), "year", ("factor",)),
        overrides=_first_wins(raw.get("volume_overrides"), "period", ("volume", "value")),
    )


def _parse_price_adjustments(raw: Any) -> YearlyAdjustments:
    raw = _as_dict(raw)
    return YearlyAdjustments(
        factors=_first_wins(raw.get("pricing_factors"), "year", ("factor",)),
        overrides=_first_wins(raw.get("price_overrides"), "period", ("price", "value")),
    )


def _parse_series(raw: Any) -> tuple[SeriesPoint, ...]:
    points: list[SeriesPoint] = []
    for row in _as_list(raw):
        if not isinstance(row, dict):
            continue
        period = _num_or_none(row.get("period"))
        value = _num_or_none(row.get("value"))
        if period is None or value is None:
            continue
        points.append(SeriesPoint(int(period), value))
    return tuple(points)


def _seasonality(raw: Any) -> tuple[float, ...] | None:
    if isinstance(raw, dict):
        raw = raw.get("value")
    if not isinstance(raw, (list, tuple)):
        return None
    return tuple(_num(v, 1.0) for v in raw)


def _pick(direct: Any, legacy: Any, name: str, where: str, warnings: list[str]):
    if direct is not None:
        if legacy is not None and legacy != direct:
            warnings.append(f"{where}: {name}={direct} on the segment takes precedence over growth_settings value {legacy}.")
        return direct
    return legacy


def _check_seasonality(index: tuple[float, ...], where: str, warnings: list[str]) -> None:
    if len(index) == 12:
        return
    msg = f"{where}: seasonality index must have exactly 12 values, got {len(index)}; volume resolves to 0."
    warnings.append(msg)
    append_runtime_event("error", "seasonality_index_invalid", msg, context={"where": where, "length": len(index)})


def _direct_start(raw: dict) -> float | None:
    start = _num_or_none(raw.get("start"))
    if start is not None:
        return start
    series = _parse_series(raw.get("series"))
    if series:
        return series[0].value
    base_year_total = _num_or_none(raw.get("base_year_total"))
    if base_year_total is not None:
        return base_year_total / 12.0
    return None


def _detect_pattern(growth_settings: dict) -> str | None:
    if _num(_as_dict(growth_settings.get("seasonal_growth")).get("base_year_total")) > 0:
        return "seasonal_growth"
    if _num(_as_dict(growth_settings.get("geom_growth")).get("start")) > 0:
        return "geom_growth"
    if _num(_as_dict(growth_settings.get("linear_growth")).get("start")) > 0:
        return "linear_growth"
    return None


def _parse_pattern(
    raw: dict,
    pattern_type: str,
    growth_settings: dict,
    adjustments: YearlyAdjustments,
    where: str,
    warnings: list[str],
) -> VolumeConfig:
    if pattern_type == "geom_growth":
        legacy = _as_dict(growth_settings.get("geom_growth"))
        start = _pick(_direct_start(raw), _num_or_none(legacy.get("start")), "start", where, warnings)
        rate = _pick(
            _num_or_none(raw.get("monthly_growth_rate")),
            _num_or_none(legacy.get("monthly_growth")),
            "monthly_growth_rate",
            where,
            warnings,
        )
        return GeometricVolume(start or 0.0, rate or 0.0, adjustments)

    if pattern_type == "linear_growth":
        legacy = _as_dict(growth_settings.get("linear_growth"))
        start = _pick(_direct_start(raw), _num_or_none(legacy.get("start")), "start", where, warnings)
        increase = _pick(
            _num_or_none(raw.get("monthly_flat_increase")),
            _num_or_none(legacy.get("monthly_flat_increase")),
            "monthly_flat_increase",
            where,
            warnings,
        )
        return LinearVolume(start or 0.0, increase or 0.0, adjustments)

    legacy = _as_dict(growth_settings.get("seasonal_growth"))
    base_year_total = _pick(
        _num_or_none(raw.get("base_year_total")),
        _num_or_none(legacy.get("base_year_total")),
        "base_year_total",
        where,
        warnings,
    )
    index = _pick(
        _seasonality(raw.get("seasonality_index_12")),
        _seasonality(legacy.get("seasonality_index_12")),
        "seasonality_index_12",
        where,
        warnings,
    )
    yoy = _pick(_num_or_none(raw.get("yoy_growth")), _num_or_none(legacy.get("yoy_growth")), "yoy_growth", where, warnings)
    index = index if index is not None else (1.0,) * 12
    _check_seasonality(index, where, warnings)
    return SeasonalVolume(base_year_total or 0.0, index, yoy or 0.0, adjustments)


def _parse_segment_level(raw: dict, pattern_type: str, adjustments: YearlyAdjustments) -> VolumeConfig:
    base_value = _num(raw.get("base_value"))
    growth_rate = _num(raw.get("growth_rate"))
    if pattern_type == "geometric_growth":
        return GeometricVolume(base_value, growth_rate, adjustments)
    if pattern_type == "linear_growth":
        return LinearVolume(base_value, growth_rate, adjustments)
    pattern = _seasonality(raw.get("seasonal_pattern")) or ()
    return SegmentSeasonalVolume(base_value, pattern, growth_rate, adjustments)


def parse_volume(raw: Any, growth_settings: Any = None, where: str = "volume", warnings: list[str] | None = None) -> VolumeConfig | None:
    """Normalize one volume configuration. Returns None when nothing usable is present."""
    if warnings is None:
        warnings = []
    if not isinstance(raw, dict):
        return None
    growth_settings = _as_dict(growth_settings)
    adjustments = _parse_volume_adjustments(raw.get("yearly_adjustments"))
    pattern_type = raw.get("pattern_type")

    if pattern_type in SEGMENT_PATTERN_TYPES and "base_value" in raw:
        if pattern_type != "seasonal_growth" or "seasonal_pattern" in raw:
            return _parse_segment_level(raw, pattern_type, adjustments)

    vtype = raw.get("type")
    if vtype == "time_series":
        return TimeSeriesVolume(_parse_series(raw.get("series")), adjustments)
    if vtype == "pattern":
        if pattern_type is None:
            pattern_type = _detect_pattern(growth_settings)
        if pattern_type in PATTERN_TYPES:
            return _parse_pattern(raw, pattern_type, growth_settings, adjustments, where, warnings)
        if pattern_type is not None:
            warnings.append(f"{where}: unknown pattern_type {pattern_type!r}; using the first series value.")

    series = _parse_series(raw.get("series"))
    if series:
        return TimeSeriesVolume(series[:1], adjustments)
    return None


def _parse_business_model(meta: dict, warnings: list[str]) -> BusinessModel:
    raw = meta.get("business_model")
    if raw in BUSINESS_MODEL_ALIASES:
        return BUSINESS_MODEL_ALIASES[raw]
    try:
        return BusinessModel(raw)
    except ValueError:
        warnings.append(f"meta.business_model={raw!r} is not recognized; treating as one_time.")
        return BusinessModel.ONE_TIME


def _parse_periods(meta: dict) -> int:
    periods = _int(meta.get("periods"), 0)
    if periods == 0:
        return MAX_PERIODS
    return max(0, min(periods, MAX_PERIODS))


def _parse_start_date(meta: dict, warnings: list[str]) -> str:
    raw = meta.get("start_date")
    if raw in (None, ""):
        return DEFAULT_START_DATE
    try:
        return pd.Timestamp(str(raw)).strftime("%Y-%m-%d")
    except ValueError:
        warnings.append(f"meta.start_date={raw!r} is not a valid date; using {DEFAULT_START_DATE}.")
        return DEFAULT_START_DATE


def _parse_opex(raw: Any, warnings: list[str]) -> tuple[OpexItem, ...]:
    if raw is not None and not isinstance(raw, list):
        warnings.append("assumptions.opex must be a list; ignoring it.")
        return ()
    items: list[OpexItem] = []
    for idx, item in enumerate(_as_list(raw)):
        item = _as_dict(item)
        name = _text(item.get("name"), f"OPEX {idx + 1}")
        structure = item.get("cost_structure")
        if isinstance(structure, dict):
            items.append(
                OpexItem(
                    name=name,
                    fixed=_num(structure.get("fixed_component")),
                    revenue_rate=_num(structure.get("variable_revenue_rate")),
                    volume_rate=_num(structure.get("variable_volume_rate")),
                    structured=True,
                )
            )
        else:
            items.append(OpexItem(name=name, fixed=_num(item.get("value"))))
    return tuple(items)


def _parse_capex(raw: Any, warnings: list[str]) -> tuple[CapexItem, ...]:
    items: list[CapexItem] = []
    for idx, item in enumerate(_as_list(raw)):
        item = _as_dict(item)
        name = _text(item.get("name"), f"CAPEX {idx + 1}")
        timeline = _as_dict(item.get("timeline"))
        if timeline.get("type") == "time_series":
            points: dict[int, float] = {}
            for point in _parse_series(timeline.get("series")):
                points.setdefault(point.period, point.value)
            items.append(CapexItem(name=name, points=points))
        elif timeline.get("type") == "pattern":
            items.append(CapexItem(name=name, pattern=parse_volume(timeline, None, f"capex[{idx}]", warnings)))
    return tuple(items)


def _parse_timeline(raw: Any) -> ImplementationTimeline | None:
    if not isinstance(raw, dict):
        return None
    return ImplementationTimeline(
        start_month=_int(raw.get("start_month"), 1),
        ramp_up_months=_int(raw.get("ramp_up_months"), 0),
        full_implementation_month=_int(raw.get("full_implementation_month"), 1),
    )


def _parse_cost_savings(raw: Any) -> tuple[tuple[BaselineCost, ...], tuple[EfficiencyGain, ...]]:
    raw = _as_dict(raw)
    baseline = tuple(
        BaselineCost(
            id=_text(item.get("id"), f"baseline_{idx}"),
            label=_text(item.get("label")),
            current_monthly_cost=_num(item.get("current_monthly_cost")),
            savings_potential_pct=_num(item.get("savings_potential_pct")),
            timeline=_parse_timeline(item.get("implementation_timeline")),
        )
        for idx, item in enumerate(_as_dict(i) for i in _as_list(raw.get("baseline_costs")))
    )
    gains = tuple(
        EfficiencyGain(
            id=_text(item.get("id"), f"gain_{idx}"),
            label=_text(item.get("label")),
            baseline_value=_num(item.get("baseline_value")),
            improved_value=_num(item.get("improved_value")),
            value_per_unit=_num(item.get("value_per_unit")),
            timeline=_parse_timeline(item.get("implementation_timeline")),
        )
        for idx, item in enumerate(_as_dict(i) for i in _as_list(raw.get("efficiency_gains")))
    )
    return baseline, gains


def normalize_range(raw: Any) -> tuple[float, ...] | None:
    """Return the five candidate values for a driver range, or None when unusable.

    Five or more values keep the first five; a ``[min, max]`` pair or a
    ``{"min", "max"}`` mapping expands to five evenly spaced points.
    """
    if isinstance(raw, dict):
        lo = _num_or_none(raw.get("min"))
        hi = _num_or_none(raw.get("max"))
        if lo is None or hi is None:
            return None
        raw = [lo, hi]
    if not isinstance(raw, (list, tuple)):
        return None
    values = [_num_or_none(v) for v in raw]
    if any(v is None for v in values):
        return None
    if len(values) >= 5:
        return tuple(values[:5])
    if len(values) == 2:
        lo, hi = values
        return tuple(lo + (hi - lo) * step / 4.0 for step in range(5))
    return None


def parse_drivers(raw: Any, warnings: list[str]) -> tuple[Driver, ...]:
    drivers: list[Driver] = []
    for idx, item in enumerate(_as_list(raw)):
        item = _as_dict(item)
        key = _text(item.get("key"), f"driver_{idx}")
        path = item.get("path")
        if not isinstance(path, str) or not path:
            warnings.append(f"drivers[{idx}] ({key}) has no path; skipped.")
            continue
        values = normalize_range(item.get("range"))
        if values is None:
            warnings.append(f"drivers[{idx}] ({key}) range must hold 5 values or a min/max pair; skipped.")
            continue
        drivers.append(Driver(key, _text(item.get("label"), key), path, values, _text(item.get("rationale"))))
    return tuple(drivers)


def parse_business_data(raw: Any) -> tuple[BusinessCase, list[str]]:
    """Normalize a raw business case into a ``BusinessCase`` plus parse warnings."""
    warnings: list[str] = []
    if not isinstance(raw, dict):
        warnings.append("Business data is not a mapping; using an empty case.")
        return BusinessCase(), warnings

    meta = _as_dict(raw.get("meta"))
    assumptions = _as_dict(raw.get("assumptions"))
    pricing = _as_dict(assumptions.get("pricing"))
    customers = _as_dict(assumptions.get("customers"))
    unit_economics = _as_dict(assumptions.get("unit_economics"))
    growth_settings = _as_dict(assumptions.get("growth_settings"))

    segments = []
    for idx, seg in enumerate(_as_list(customers.get("segments"))):
        seg = _as_dict(seg)
        where = f"segments[{idx}]"
        segments.append(
            Segment(
                id=_text(seg.get("id"), where),
                label=_text(seg.get("label")),
                volume=parse_volume(seg.get("volume"), growth_settings, where, warnings),
            )
        )

    baseline, gains = _parse_cost_savings(assumptions.get("cost_savings"))
    case = BusinessCase(
        title=_text(meta.get("title")),
        business_model=_parse_business_model(meta, warnings),
        currency=_text(meta.get("currency"), "EUR"),
        periods=_parse_periods(meta),
        start_date=_parse_start_date(meta, warnings),
        pricing=PricingConfig(
            base_price=_num(pricing.get("avg_unit_price")),
            adjustments=_parse_price_adjustments(pricing.get("yearly_adjustments")),
        ),
        segments=tuple(segments),
        churn_pct=_num(customers.get("churn_pct")),
        cogs_pct=_num(unit_economics.get("cogs_pct")),
        cac=_num(unit_economics.get("cac")),
        opex=_parse_opex(assumptions.get("opex"), warnings),
        capex=_parse_capex(assumptions.get("capex"), warnings),
        baseline_costs=baseline,
        efficiency_gains=gains,
        interest_rate=_num(_as_dict(assumptions.get("financial")).get("interest_rate")),
        drivers=parse_drivers(raw.get("drivers"), warnings),
    )
    return case, warnings


def parse_market_data(raw: Any) -> tuple[MarketCase, list[str]]:
    """Normalize a raw market case into a ``MarketCase`` plus parse warnings."""
    warnings: list[str] = []
    if not isinstance(raw, dict):
        warnings.append("Market data is not a mapping; using an empty case.")
        return MarketCase(), warnings

    meta = _as_dict(raw.get("meta"))
    sizing = _as_dict(raw.get("market_sizing"))
    tam = _as_dict(sizing.get("total_addressable_market"))
    share = _as_dict(raw.get("market_share"))
    current = share.get("current_position")
    target = share.get("target_position")
    landscape = _as_dict(raw.get("competitive_landscape"))
    customers = _as_dict(raw.get("customer_analysis"))

    current_share = _num(_as_dict(current).get("current_share")) if isinstance(current, dict) else None
    target_share = _num(_as_dict(target).get("target_share")) if isinstance(target, dict) else None
    target = _as_dict(target)

    timeframe = _num(target.get("target_timeframe"))
    if timeframe <= 0:
        timeframe = DEFAULT_TARGET_TIMEFRAME_YEARS

    raw_strategy = target.get("penetration_strategy") or PenetrationStrategy.LINEAR.value
    try:
        strategy = PenetrationStrategy(raw_strategy)
    except ValueError:
        warnings.append(f"market_share.target_position.penetration_strategy={raw_strategy!r} is not recognized; using linear.")
        strategy = PenetrationStrategy.LINEAR

    competitors = tuple(
        Competitor(
            name=_text(c.get("name")),
            share_pct=_num(c.get("market_share")),
            positioning=_text(c.get("positioning")),
            threat_level=_text(c.get("threat_level")).lower(),
        )
        for c in (_as_dict(i) for i in _as_list(landscape.get("competitors")))
    )
    segments = tuple(
        MarketSegment(
            id=_text(s.get("id"), f"segment_{idx}"),
            name=_text(s.get("name")),
            size_pct=_num(s.get("size_percentage")),
            growth_pct=_num(s.get("growth_rate")),
        )
        for idx, s in enumerate(_as_dict(i) for i in _as_list(customers.get("market_segments")))
    )

    avg_value = _num_or_none(_as_dict(customers.get("avg_customer_value")).get("annual_value"))
    if avg_value is not None and avg_value <= 0:
        avg_value = None

    base_year = _int(meta.get("base_year"), 0) or DEFAULT_MARKET_BASE_YEAR
    case = MarketCase(
        title=_text(meta.get("title")),
        currency=_text(meta.get("currency"), "EUR"),
        base_year=base_year,
        tam_base=_num(tam.get("base_value")),
        tam_growth_pct=_num(tam.get("growth_rate")),
        sam_pct=_num(_as_dict(sizing.get("serviceable_addressable_market")).get("percentage_of_tam")),
        som_pct=_num(_as_dict(sizing.get("serviceable_obtainable_market")).get("percentage_of_sam")),
        current_share_pct=current_share,
        target_share_pct=target_share,
        target_timeframe_years=timeframe,
        strategy=strategy,
        competitors=competitors,
        competitive_advantages=len(_as_list(landscape.get("competitive_advantages"))),
        barriers_to_entry=_text(_as_dict(landscape.get("market_structure")).get("barriers_to_entry"), "medium"),
        segments=segments,
        avg_customer_annual_value=avg_value,
        drivers=parse_drivers(raw.get("drivers"), warnings),
    )
    return case, warnings
