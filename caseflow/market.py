"""Market sizing, penetration curves, opportunity scoring and strategic analysis."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from caseflow.growth import round_half_up
from caseflow.runtime_logging import record_warnings
from caseflow.schema import MarketCase, PenetrationStrategy, parse_market_data


@dataclass(frozen=True)
class CompetitorShare:
    name: str
    share: float
    positioning: str


@dataclass(frozen=True)
class CompetitivePosition:
    our_share: float
    competitor_shares: tuple[CompetitorShare, ...]
    market_concentration: float


@dataclass(frozen=True)
class MarketMetrics:
    year: int
    tam: float
    sam: float
    som: float
    market_share: float
    market_based_volume: float
    market_value: float
    competitive_position: CompetitivePosition


@dataclass(frozen=True)
class MarketVolumeProjection:
    period: int
    year: int
    tam: float
    sam: float
    som: float
    market_share: float
    market_based_volume: float
    market_value: float
    cumulative_volume: float


@dataclass(frozen=True)
class OpportunityScore:
    score: int
    market_size: int
    market_growth: int
    competitive_position: int
    barriers: int
    interpretation: str


@dataclass(frozen=True)
class SegmentAnalysis:
    id: str
    name: str
    attractiveness: float
    accessibility: float
    defensibility: float
    size: float
    growth_rate: float
    competition_level: str
    recommended_strategy: str


@dataclass(frozen=True)
class SuiteSummary:
    market_opportunity: str
    recommendations: tuple[str, ...]
    key_risks: tuple[str, ...]
    next_steps: tuple[str, ...]


@dataclass(frozen=True)
class SuiteMetrics:
    tam: float
    sam: float
    som: float
    opportunity_score: int
    competitive_position: str
    customer_segments: int
    market_growth_rate: float
    market_concentration: float
    competitor_count: int
    average_competitor_strength: float
    market_penetration_rate: float
    entry_barrier_score: float
    strategic_fit_score: float
    risk_score: float
    summary: SuiteSummary


@dataclass(frozen=True)
class OpportunityCell:
    segment: str
    market_size: float
    growth_rate: float
    competitive_intensity: float
    accessibility: float
    overall_score: float
    x: float
    y: float


@dataclass(frozen=True)
class StrategicOption:
    id: str
    name: str
    description: str
    investment_required: float
    expected_return: float
    risk_level: str
    time_to_market_months: int
    probability: float
    strategic_fit: float


def coerce_market(data: Any) -> MarketCase:
    if isinstance(data, MarketCase):
        return data
    case, warnings = parse_market_data(data)
    record_warnings("market_data_parse_warnings", warnings, context={"title": case.title})
    return case


def tam(case: MarketCase, year: int) -> float:
    return case.tam_base * (1.0 + case.tam_growth_pct / 100.0) ** (year - case.base_year)


def sam(case: MarketCase, year: int) -> float:
    return tam(case, year) * case.sam_pct / 100.0


def som(case: MarketCase, year: int) -> float:
    return sam(case, year) * case.som_pct / 100.0


def penetration_factor(strategy: PenetrationStrategy, ratio: float) -> float:
    if strategy is PenetrationStrategy.EXPONENTIAL:
        return 1.0 - math.exp(-3.0 * ratio)
    if strategy is PenetrationStrategy.S_CURVE:
        return 1.0 / (1.0 + math.exp(-10.0 * (ratio - 0.5)))
    return ratio


def market_share_progression(case: MarketCase, i: int) -> float:
    """Own market share (fraction) in zero-based month ``i``."""
    if case.current_share_pct is None or case.target_share_pct is None:
        return 0.0
    current = case.current_share_pct / 100.0
    target = case.target_share_pct / 100.0
    years_passed = max(0, i) / 12.0
    ratio = min(years_passed / case.target_timeframe_years, 1.0)
    return current + (target - current) * penetration_factor(case.strategy, ratio)


def period_year(case: MarketCase, i: int) -> int:
    return i // 12 + case.base_year


def market_based_volume(case: MarketCase, market_value: float) -> float:
    """Customers implied by market value; 0 without an average customer value."""
    if not case.avg_customer_annual_value:
        return 0.0
    return market_value / case.avg_customer_annual_value


def herfindahl(shares: list[float]) -> float:
    return float(sum(s * s for s in shares))


def get_market_analysis_metrics(data: Any, i: int) -> MarketMetrics:
    case = coerce_market(data)
    year = period_year(case, i)
    som_value = som(case, year)
    share = market_share_progression(case, i)
    value = som_value * share
    competitors = tuple(CompetitorShare(c.name, c.share_pct / 100.0, c.positioning) for c in case.competitors)
    return MarketMetrics(
        year=year,
        tam=tam(case, year),
        sam=sam(case, year),
        som=som_value,
        market_share=share,
        market_based_volume=market_based_volume(case, value),
        market_value=value,
        competitive_position=CompetitivePosition(
            our_share=share,
            competitor_shares=competitors,
            market_concentration=herfindahl([share] + [c.share for c in competitors]),
        ),
    )


def get_market_penetration_trajectory(data: Any, periods: int) -> list[MarketVolumeProjection]:
    case = coerce_market(data)
    out: list[MarketVolumeProjection] = []
    cumulative = 0.0
    for i in range(max(0, periods)):
        m = get_market_analysis_metrics(case, i)
        cumulative += m.market_based_volume
        out.append(
            MarketVolumeProjection(
                period=i + 1,
                year=m.year,
                tam=m.tam,
                sam=m.sam,
                som=m.som,
                market_share=m.market_share,
                market_based_volume=m.market_based_volume,
                market_value=m.market_value,
                cumulative_volume=cumulative,
            )
        )
    return out


_BARRIER_POINTS = {"low": 25.0, "medium": 15.0, "high": 5.0}


def market_opportunity_score(data: Any) -> OpportunityScore:
    """Score the opportunity 0-100 from size, growth, position and entry barriers."""
    case = coerce_market(data)
    size_score = min(25.0, math.log10(case.tam_base / 1_000_000) * 5.0) if case.tam_base > 0 else 0.0
    growth_score = min(25.0, case.tam_growth_pct * 2.5)
    position_score = min(25.0, (case.target_share_pct or 0.0) / 2.0 + case.competitive_advantages * 5.0)
    barriers_score = _BARRIER_POINTS.get(case.barriers_to_entry, 5.0)
    total = size_score + growth_score + position_score + barriers_score

    if total >= 75:
        interpretation = "Excellent market opportunity with strong potential"
    elif total >= 60:
        interpretation = "Good market opportunity with moderate potential"
    elif total >= 40:
        interpretation = "Fair market opportunity with some challenges"
    else:
        interpretation = "Challenging market opportunity requiring careful consideration"

    return OpportunityScore(
        score=int(round_half_up(total)),
        market_size=int(round_half_up(size_score)),
        market_growth=int(round_half_up(growth_score)),
        competitive_position=int(round_half_up(position_score)),
        barriers=int(round_half_up(barriers_score)),
        interpretation=interpretation,
    )


def analyze_customer_segments(data: Any) -> list[SegmentAnalysis]:
    case = coerce_market(data)
    out: list[SegmentAnalysis] = []
    for seg in case.segments:
        size = seg.size_pct
        growth = seg.growth_pct
        attractiveness = min(100.0, (size + growth * 2.0) / 2.0)
        accessibility = min(100.0, 60.0 + size / 2.0) if size > 20 else 30.0
        defensibility = 70.0 if growth > 5 else 50.0

        if attractiveness > 70:
            competition = "high"
        elif attractiveness > 40:
            competition = "medium"
        else:
            competition = "low"

        if attractiveness > 70 and accessibility > 60:
            strategy = "Invest heavily - primary target segment"
        elif attractiveness > 50:
            strategy = "Selective investment - secondary target"
        else:
            strategy = "Monitor - potential future opportunity"

        out.append(
            SegmentAnalysis(
                id=seg.id,
                name=seg.name,
                attractiveness=attractiveness,
                accessibility=accessibility,
                defensibility=defensibility,
                size=size,
                growth_rate=growth,
                competition_level=competition,
                recommended_strategy=strategy,
            )
        )
    return out


_THREAT_WEIGHTS = {"high": 3.0, "medium": 2.0}
_ENTRY_BARRIER_SCORES = {"low": 25.0, "medium": 50.0}
BASELINE_RISK_SCORE = 50.0

SUITE_NEXT_STEPS = (
    "Validate market assumptions with primary research",
    "Develop detailed go-to-market strategy",
    "Create competitive differentiation plan",
    "Build financial model with market projections",
)


def _suite_opportunity_score(
    tam_value: float,
    growth_pct: float,
    concentration: float,
    barrier_score: float,
    fit_score: float,
    target_share_pct: float,
) -> int:
    size = min(25.0, math.log10(tam_value / 1_000_000) * 5.0) if tam_value > 0 else 0.0
    growth = min(25.0, growth_pct * 2.5)
    competition = max(0.0, 25.0 - concentration * 25.0)
    barriers = max(0.0, 25.0 - barrier_score / 4.0)
    fit = fit_score / 100.0 * 15.0
    share = min(10.0, target_share_pct / 5.0)
    return int(round_half_up(size + growth + competition + barriers + fit + share))


def competitive_position_label(target_share_pct: float, strategic_fit: float, competitor_strength: float) -> str:
    """Quadrant label from target share (%) and fit net of competitor strength."""
    strong = strategic_fit - competitor_strength * 20.0 > 50
    if target_share_pct >= 10:
        return "Market Leader" if strong else "Strong Challenger"
    if target_share_pct >= 5:
        return "Strategic Challenger" if strong else "Market Follower"
    return "Niche Specialist" if strong else "Emerging Player"


def _suite_summary(
    tam_value: float, score: int, growth_pct: float, risk_score: float, competitor_count: int
) -> SuiteSummary:
    if score >= 75:
        opportunity = (
            f"Excellent market opportunity with {tam_value / 1e9:.1f}B TAM and {growth_pct:.1f}% growth rate. "
            "Strong potential for market entry and expansion."
        )
    elif score >= 60:
        opportunity = (
            f"Good market opportunity with moderate potential. Market size of {tam_value / 1e9:.1f}B "
            "offers solid foundation for growth."
        )
    elif score >= 40:
        opportunity = "Fair market opportunity with some challenges. Consider focused approach on specific segments."
    else:
        opportunity = "Challenging market conditions. Careful strategy and strong differentiation required for success."

    if score >= 70:
        recommendations = [
            "Accelerate market entry with significant investment",
            "Focus on capturing market share in high-growth segments",
        ]
    elif score >= 50:
        recommendations = [
            "Pursue selective market entry with phased approach",
            "Develop strong competitive differentiation",
        ]
    else:
        recommendations = [
            "Consider alternative markets or modified value proposition",
            "Focus on niche segments with lower competition",
        ]
    if growth_pct > 10:
        recommendations.append("Leverage high market growth to gain early market position")
    if competitor_count > 5:
        recommendations.append("Develop clear differentiation strategy in crowded market")

    risks: list[str] = []
    if risk_score > 60:
        risks.append("High market risk profile requires careful risk management")
    if competitor_count > 10:
        risks.append("Highly fragmented market with intense competition")
    if growth_pct < 3:
        risks.append("Slow market growth may limit expansion opportunities")

    return SuiteSummary(opportunity, tuple(recommendations), tuple(risks), SUITE_NEXT_STEPS)


def suite_metrics(data: Any) -> SuiteMetrics:
    """Headline market-suite figures at the base year, with a text summary.

    Concentration here is the Herfindahl index over competitor shares only; the
    per-period metrics include our own share as well.
    """
    case = coerce_market(data)
    sam_value = case.tam_base * case.sam_pct / 100.0
    som_value = sam_value * case.som_pct / 100.0
    concentration = herfindahl([c.share_pct / 100.0 for c in case.competitors])
    count = len(case.competitors)
    strength = sum(_THREAT_WEIGHTS.get(c.threat_level, 1.0) for c in case.competitors) / count if count else 0.0
    target_pct = case.target_share_pct or 0.0
    barrier_score = _ENTRY_BARRIER_SCORES.get(case.barriers_to_entry, 75.0)
    fit_score = min(100.0, case.competitive_advantages * 20.0)
    score = _suite_opportunity_score(case.tam_base, case.tam_growth_pct, concentration, barrier_score, fit_score, target_pct)
    return SuiteMetrics(
        tam=case.tam_base,
        sam=sam_value,
        som=som_value,
        opportunity_score=score,
        competitive_position=competitive_position_label(target_pct, fit_score, strength),
        customer_segments=len(case.segments),
        market_growth_rate=case.tam_growth_pct,
        market_concentration=concentration,
        competitor_count=count,
        average_competitor_strength=strength,
        market_penetration_rate=target_pct / 100.0,
        entry_barrier_score=barrier_score,
        strategic_fit_score=fit_score,
        risk_score=BASELINE_RISK_SCORE,
        summary=_suite_summary(case.tam_base, score, case.tam_growth_pct, BASELINE_RISK_SCORE, count),
    )


def opportunity_matrix(data: Any) -> list[OpportunityCell]:
    """Place each customer segment on an accessibility (x) vs attractiveness (y) grid."""
    case = coerce_market(data)
    cells: list[OpportunityCell] = []
    for seg in case.segments:
        size = seg.size_pct / 100.0 * case.tam_base
        if seg.size_pct > 30:
            intensity = 0.8
        elif seg.size_pct > 20:
            intensity = 0.6
        else:
            intensity = 0.4
        accessibility = 0.8 if seg.size_pct > 15 else 0.5
        # Size is measured against a tenth of TAM, growth against 20 %.
        size_score = min(1.0, size / (case.tam_base * 0.1)) if case.tam_base > 0 else 0.0
        growth_score = min(1.0, seg.growth_pct / 20.0)
        overall = (size_score * 0.3 + growth_score * 0.3 + (1.0 - intensity) * 0.2 + accessibility * 0.2) * 100.0
        cells.append(
            OpportunityCell(
                segment=seg.name,
                market_size=size,
                growth_rate=seg.growth_pct,
                competitive_intensity=intensity,
                accessibility=accessibility,
                overall_score=overall,
                x=accessibility * 100.0,
                y=overall,
            )
        )
    return cells


def strategic_options(data: Any) -> list[StrategicOption]:
    """Entry options sized as fractions of TAM; acquisition is offered only behind high barriers."""
    case = coerce_market(data)
    size = case.tam_base
    barriers = case.barriers_to_entry
    high = barriers == "high"
    direct_probability = {"low": 80.0, "medium": 60.0}.get(barriers, 40.0)
    options = [
        StrategicOption(
            "direct_entry",
            "Direct Market Entry",
            "Enter market with full product offering and direct sales",
            size * 0.001,
            size * 0.01,
            "high" if high else "medium",
            18 if high else 12,
            direct_probability,
            85.0,
        ),
        StrategicOption(
            "partnership",
            "Strategic Partnership",
            "Enter through partnerships with established market players",
            size * 0.0005,
            size * 0.005,
            "low",
            6,
            75.0,
            70.0,
        ),
        StrategicOption(
            "niche_entry",
            "Niche Market Entry",
            "Focus on specific high-value customer segments",
            size * 0.0002,
            size * 0.003,
            "low",
            9,
            85.0,
            80.0,
        ),
    ]
    if high:
        options.append(
            StrategicOption(
                "acquisition",
                "Market Acquisition",
                "Acquire existing market player for immediate presence",
                size * 0.01,
                size * 0.02,
                "medium",
                3,
                60.0,
                90.0,
            )
        )
    return options
