from __future__ import annotations

import math
from typing import Callable

from propcast.core.ballot_wording import analyze_ballot_wording
from propcast.core.config import PredictionWeights
from propcast.core.schemas import (
    FactorKind,
    HistoricalComparison,
    IllustrativeBasis,
    PredictionFactor,
    PropositionWithDetails,
    RealBasis,
)
from propcast.core.utils import clamp, impact_label


FINANCE_SOURCE = "Cal-Access campaign finance filings"
HISTORICAL_SOURCE = "Certified statewide election results"

FACTOR_LABELS: dict[FactorKind, str] = {
    FactorKind.CAMPAIGN_FINANCE: "Campaign finance",
    FactorKind.HISTORICAL_PASS_RATE: "Historical pass rate",
    FactorKind.DEMOGRAPHICS: "Demographics",
    FactorKind.BALLOT_WORDING: "Ballot wording",
    FactorKind.TIMING: "Election timing",
    FactorKind.OPPOSITION: "Organized opposition",
}


def factor_label(kind: FactorKind) -> str:
    return FACTOR_LABELS[kind]


def shrunk_pass_rate(passed: int, total: int) -> float:
    """Posterior mean of the pass rate under a uniform Beta(1, 1) prior."""
    return (1 + passed) / (2 + total)


def historical_factor(
    comparisons: list[HistoricalComparison],
    weights: PredictionWeights,
) -> PredictionFactor | None:
    total = len(comparisons)
    if total < weights.min_comparisons:
        return None
    passed = sum(1 for c in comparisons if c.passed)
    low, high = weights.historical_clamp
    value = clamp(shrunk_pass_rate(passed, total), low, high)
    return PredictionFactor(
        kind=FactorKind.HISTORICAL_PASS_RATE,
        value=value,
        impact=impact_label(value),
        description=(
            f"{passed} of {total} similar past measures passed "
            f"(adjusted rate {value * 100:.0f}%)"
        ),
        basis=RealBasis(source=HISTORICAL_SOURCE),
    )


def finance_factor(
    proposition: PropositionWithDetails,
    weights: PredictionWeights,
) -> PredictionFactor | None:
    finance = proposition.finance
    if finance is None:
        return None
    support = max(finance.total_support, 0.0)
    opposition = max(finance.total_opposition, 0.0)
    total = support + opposition
    if not math.isfinite(total) or total <= 0:
        return None
    share = support / total
    low, high = weights.finance_clamp
    value = clamp(share, low, high)
    return PredictionFactor(
        kind=FactorKind.CAMPAIGN_FINANCE,
        value=value,
        impact=impact_label(value),
        description=(
            f"Support side accounts for {share * 100:.1f}% of "
            f"${total:,.0f} in reported spending"
        ),
        basis=RealBasis(source=FINANCE_SOURCE),
    )


def demographics_factor(proposition: PropositionWithDetails) -> PredictionFactor | None:
    demographics = proposition.demographics
    if demographics is None or not demographics.urban_rural:
        return None
    projected_yes = sum(p.projected_yes * p.estimated_turnout for p in demographics.urban_rural.values())
    projected_no = sum(p.projected_no * p.estimated_turnout for p in demographics.urban_rural.values())
    total = projected_yes + projected_no
    if total <= 0:
        return None
    value = projected_yes / total
    return PredictionFactor(
        kind=FactorKind.DEMOGRAPHICS,
        value=value,
        impact=impact_label(value),
        description=f"Demographic projections show {value * 100:.1f}% support",
        basis=IllustrativeBasis(formula="turnout-weighted projected yes share across urban/suburban/rural"),
    )


def ballot_wording_factor(proposition: PropositionWithDetails) -> PredictionFactor | None:
    analysis = proposition.ballot_analysis
    if analysis is None:
        if not (proposition.summary or proposition.full_text):
            return None
        analysis = analyze_ballot_wording(
            proposition.title,
            proposition.summary,
            proposition.full_text,
            proposition_id=proposition.id,
        )
    value = 0.5 + analysis.sentiment_score * 0.15
    value += (analysis.readability_score / 100 - 0.5) * 0.1
    if analysis.complexity == "simple":
        value += 0.05
    elif analysis.complexity == "complex":
        value -= 0.05
    value = clamp(value, 0.3, 0.7)
    tone = "positive" if analysis.sentiment_score > 0 else "negative" if analysis.sentiment_score < 0 else "neutral"
    return PredictionFactor(
        kind=FactorKind.BALLOT_WORDING,
        value=value,
        impact=impact_label(analysis.sentiment_score, upper=0.2, lower=-0.2),
        description=f"Ballot language is {analysis.complexity} with {tone} framing",
        basis=IllustrativeBasis(formula="word-list sentiment and Flesch readability"),
    )


def timing_factor(proposition: PropositionWithDetails) -> PredictionFactor | None:
    election_date = proposition.election_date
    if election_date is None:
        return None
    is_november = election_date.month == 11
    is_presidential = election_date.year % 4 == 0
    value = 0.5
    if is_november and is_presidential:
        value += 0.1
    elif is_november:
        value += 0.05
    elif election_date.month == 6:
        value -= 0.05
    cycle = "November" if is_november else "Off-cycle"
    suffix = " in a presidential year" if is_presidential else ""
    return PredictionFactor(
        kind=FactorKind.TIMING,
        value=value,
        impact=impact_label(value),
        description=f"{cycle} election{suffix}",
        basis=IllustrativeBasis(formula="November and presidential-year turnout adjustment"),
    )


def opposition_factor(proposition: PropositionWithDetails) -> PredictionFactor | None:
    opponents = proposition.opponents or []
    count = len(opponents)
    if count == 0:
        value = 0.7
    elif count > 5:
        value = 0.35
    else:
        value = 0.5 - count * 0.03
    if proposition.finance is not None and len(proposition.finance.opposition_committees) > 3:
        value -= 0.1
    value = clamp(value, 0.2, 0.8)
    if count <= 1:
        impact = "positive"
    elif count >= 4:
        impact = "negative"
    else:
        impact = "neutral"
    return PredictionFactor(
        kind=FactorKind.OPPOSITION,
        value=value,
        impact=impact,
        description=f"{count} organized opposition {'group' if count == 1 else 'groups'}",
        basis=IllustrativeBasis(formula="count of organized opposition groups and committees"),
    )


ILLUSTRATIVE_CALCULATORS: list[Callable[[PropositionWithDetails], PredictionFactor | None]] = [
    demographics_factor,
    ballot_wording_factor,
    timing_factor,
    opposition_factor,
]


def real_factors(
    proposition: PropositionWithDetails,
    comparisons: list[HistoricalComparison],
    weights: PredictionWeights,
) -> list[PredictionFactor]:
    candidates = [finance_factor(proposition, weights), historical_factor(comparisons, weights)]
    return [f for f in candidates if f is not None]


def illustrative_factors(proposition: PropositionWithDetails) -> list[PredictionFactor]:
    factors = [calc(proposition) for calc in ILLUSTRATIVE_CALCULATORS]
    return [f for f in factors if f is not None]
