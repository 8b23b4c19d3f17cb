"""Per-period volume and price resolution for growth patterns."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from caseflow.schema import (
    GeometricVolume,
    LinearVolume,
    PricingConfig,
    SeasonalVolume,
    Segment,
    SegmentSeasonalVolume,
    SeriesPoint,
    TimeSeriesVolume,
    VolumeConfig,
    YearlyAdjustments,
)


@dataclass(frozen=True)
class TrajectoryPoint:
    period: int
    value: float
    source: str


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves toward positive infinity (``floor(x + 0.5)``), not to even."""
    scale = 10.0**digits
    return math.floor(value * scale + 0.5) / scale


def time_series_value(points: Iterable[SeriesPoint], i: int) -> float:
    points = tuple(points)
    if not points:
        return 0.0
    period = i + 1
    for p in points:
        if p.period == period:
            return p.value

    ordered = sorted(points, key=lambda p: p.period)
    before = [p for p in ordered if p.period <= period]
    after = [p for p in ordered if p.period > period]
    if not before:
        return after[0].value
    if not after:
        return before[-1].value
    p1 = before[-1]
    p2 = after[0]
    ratio = (period - p1.period) / (p2.period - p1.period)
    return p1.value + (p2.value - p1.value) * ratio


def geometric_value(start: float, monthly_growth_rate: float, i: int) -> float:
    return start * (1.0 + monthly_growth_rate) ** i


def linear_value(start: float, monthly_increase: float, i: int) -> float:
    """Straight-line volume; a negative increase bottoms out at zero."""
    return max(0.0, start + monthly_increase * i)


def seasonal_value(base_year_total: float, seasonality: tuple[float, ...], yoy_growth: float, i: int) -> float:
    # A malformed index is reported when the case is parsed.
    if len(seasonality) != 12:
        return 0.0
    year, month_of_year = divmod(i, 12)
    return base_year_total / 12.0 * seasonality[month_of_year] * (1.0 + yoy_growth) ** year


def segment_seasonal_value(base_value: float, pattern: tuple[float, ...], monthly_growth_rate: float, i: int) -> float:
    """Repeat ``pattern`` every ``len(pattern)`` months; zero or missing factors count as 1."""
    if not pattern:
        return base_value
    factor = pattern[i % len(pattern)] or 1.0
    return base_value * factor * (1.0 + monthly_growth_rate) ** i


def base_volume(config: VolumeConfig | None, i: int) -> float:
    """Pattern value for period ``i`` before yearly adjustments."""
    if config is None:
        return 0.0
    if isinstance(config, TimeSeriesVolume):
        return time_series_value(config.points, i)
    if isinstance(config, GeometricVolume):
        return geometric_value(config.start, config.monthly_growth_rate, i)
    if isinstance(config, LinearVolume):
        return linear_value(config.start, config.monthly_increase, i)
    if isinstance(config, SeasonalVolume):
        return seasonal_value(config.base_year_total, config.seasonality, config.yoy_growth, i)
    if isinstance(config, SegmentSeasonalVolume):
        return segment_seasonal_value(config.base_value, config.pattern, config.monthly_growth_rate, i)
    raise TypeError(f"Unsupported volume configuration: {type(config).__name__}")


def apply_yearly_adjustments(value: float, i: int, adjustments: YearlyAdjustments) -> float:
    override = adjustments.overrides.get(i + 1)
    if override is not None:
        return override
    factor = adjustments.factors.get(i // 12 + 1)
    if factor is not None:
        return value * factor
    return value


def resolve_volume(config: VolumeConfig | None, i: int) -> float:
    if config is None:
        return 0.0
    return apply_yearly_adjustments(base_volume(config, i), i, config.adjustments)


def segment_volume(segment: Segment, i: int) -> float:
    return resolve_volume(segment.volume, i)


def total_volume(segments: Iterable[Segment], i: int) -> float:
    return sum(segment_volume(s, i) for s in segments)


def unit_price(pricing: PricingConfig, i: int) -> float:
    """Price for period ``i``: override, else year factor rounded to cents, else base."""
    override = pricing.adjustments.overrides.get(i + 1)
    if override is not None:
        return override
    factor = pricing.adjustments.factors.get(i // 12 + 1)
    if factor is not None:
        return round_half_up(pricing.base_price * factor, 2)
    return pricing.base_price


def pricing_trajectory(pricing: PricingConfig, periods: int) -> list[TrajectoryPoint]:
    out: list[TrajectoryPoint] = []
    for i in range(periods):
        price = unit_price(pricing, i)
        if (i + 1) in pricing.adjustments.overrides:
            source = "override"
        elif price != pricing.base_price:
            source = "yearly"
        else:
            source = "base"
        out.append(TrajectoryPoint(i + 1, price, source))
    return out


def volume_trajectory(segment: Segment, periods: int) -> list[TrajectoryPoint]:
    out: list[TrajectoryPoint] = []
    overrides = segment.volume.adjustments.overrides if segment.volume is not None else {}
    for i in range(periods):
        volume = segment_volume(segment, i)
        if (i + 1) in overrides:
            source = "override"
        elif abs(volume - base_volume(segment.volume, i)) > 0.01:
            source = "yearly"
        else:
            source = "pattern"
        out.append(TrajectoryPoint(i + 1, volume, source))
    return out
