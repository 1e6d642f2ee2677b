from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass
from typing import Any

from propcast.core.ballot_wording import analyze_ballot_wording
from propcast.core.config import PredictionWeights, ScenarioConfig
from propcast.core.errors import InvalidScenarioParametersError
from propcast.core.historical import HistoricalFinder
from propcast.core.prediction import build_prediction, fetch_comparisons
from propcast.core.propositions import validate_proposition
from propcast.core.schemas import (
    COMPLEXITIES,
    SUMMARY_COMPLEXITY_SHIFTS,
    BallotWordingAnalysis,
    ConfidenceInterval,
    DemographicImpact,
    FactorContribution,
    FundingParameters,
    FramingParameters,
    HistoricalComparison,
    PredictionFactor,
    PropositionFinance,
    PropositionWithDetails,
    Scenario,
    ScenarioParameters,
    ScenarioResults,
    SensitivityPoint,
    TurnoutParameters,
)
from propcast.core.utils import clamp


logger = logging.getLogger(__name__)

READABILITY_SHIFT = 15.0
SENSITIVITY_PARAMETERS = ("funding.support_multiplier", "funding.opposition_multiplier")


@dataclass(frozen=True)
class ScenarioPreset:
    id: str
    name: str
    description: str
    overrides: dict[str, dict[str, Any]]


SCENARIO_PRESETS: dict[str, ScenarioPreset] = {
    preset.id: preset
    for preset in (
        ScenarioPreset(
            id="high-turnout",
            name="High Turnout Election",
            description="Presidential election year with above-average turnout",
            overrides={"turnout": {"overall_multiplier": 1.3}},
        ),
        ScenarioPreset(
            id="low-turnout",
            name="Low Turnout Election",
            description="Off-year or special election with reduced turnout",
            overrides={"turnout": {"overall_multiplier": 0.6}},
        ),
        ScenarioPreset(
            id="well-funded-support",
            name="Well-Funded Support Campaign",
            description="Support campaign with 2x funding",
            overrides={"funding": {"support_multiplier": 2.0, "opposition_multiplier": 1.0}},
        ),
        ScenarioPreset(
            id="contested",
            name="Highly Contested",
            description="Both sides heavily funded with strong opposition",
            overrides={"funding": {"support_multiplier": 2.0, "opposition_multiplier": 2.5}},
        ),
        ScenarioPreset(
            id="simplified-framing",
            name="Simplified Ballot Language",
            description="Clearer, simpler ballot wording",
            overrides={"framing": {"title_sentiment": 0.2, "summary_complexity": "simpler"}},
        ),
    )
}


def merge_parameters(
    base: ScenarioParameters,
    overrides: dict[str, dict[str, Any]] | None,
) -> ScenarioParameters:
    """Overlay per-section partial overrides onto ``base``."""
    if not overrides:
        return base
    sections = {"funding": base.funding, "turnout": base.turnout, "framing": base.framing}
    unknown = set(overrides) - set(sections)
    if unknown:
        raise InvalidScenarioParametersError(f"unknown parameter sections: {sorted(unknown)}")
    merged: dict[str, Any] = {}
    for name, current in sections.items():
        values = overrides.get(name) or {}
        try:
            merged[name] = dataclasses.replace(current, **values)
        except TypeError as exc:
            raise InvalidScenarioParametersError(f"invalid {name} parameters: {exc}") from exc
    return ScenarioParameters(**merged)


def _check_range(name: str, value: float | None, low: float, high: float) -> None:
    if value is None:
        return
    if not isinstance(value, (int, float)) or not math.isfinite(value) or not low <= value <= high:
        raise InvalidScenarioParametersError(f"{name}={value!r} must be within [{low}, {high}]")


def validate_parameters(params: ScenarioParameters, config: ScenarioConfig | None = None) -> None:
    config = config or ScenarioConfig()
    _check_range("funding.support_multiplier", params.funding.support_multiplier, 0.0, config.max_multiplier)
    _check_range("funding.opposition_multiplier", params.funding.opposition_multiplier, 0.0, config.max_multiplier)
    _check_range("funding.custom_support_amount", params.funding.custom_support_amount, 0.0, math.inf)
    _check_range("funding.custom_opposition_amount", params.funding.custom_opposition_amount, 0.0, math.inf)
    _check_range("turnout.overall_multiplier", params.turnout.overall_multiplier, 0.0, config.max_turnout_multiplier)
    if params.turnout.overall_multiplier == 0:
        raise InvalidScenarioParametersError("turnout.overall_multiplier must be positive")
    _check_range("framing.title_sentiment", params.framing.title_sentiment, -1.0, 1.0)
    if params.framing.summary_complexity not in SUMMARY_COMPLEXITY_SHIFTS:
        raise InvalidScenarioParametersError(
            f"framing.summary_complexity must be one of {SUMMARY_COMPLEXITY_SHIFTS}"
        )


def _apply_funding(proposition: PropositionWithDetails, funding: FundingParameters) -> PropositionFinance:
    finance = proposition.finance or PropositionFinance(
        proposition_id=proposition.id, total_support=0.0, total_opposition=0.0
    )
    support = (
        funding.custom_support_amount
        if funding.custom_support_amount is not None
        else finance.total_support * max(funding.support_multiplier, 0.0)
    )
    opposition = (
        funding.custom_opposition_amount
        if funding.custom_opposition_amount is not None
        else finance.total_opposition * max(funding.opposition_multiplier, 0.0)
    )
    return dataclasses.replace(finance, total_support=support, total_opposition=opposition)


def _apply_turnout(demographics: DemographicImpact | None, turnout: TurnoutParameters) -> DemographicImpact | None:
    if demographics is None or turnout.overall_multiplier == 1.0:
        return demographics
    return dataclasses.replace(
        demographics,
        urban_rural={
            region: dataclasses.replace(
                pattern,
                estimated_turnout=clamp(pattern.estimated_turnout * turnout.overall_multiplier, 0.0, 1.0),
            )
            for region, pattern in demographics.urban_rural.items()
        },
    )


def _shift_complexity(complexity: str, shift: str) -> str:
    index = COMPLEXITIES.index(complexity) if complexity in COMPLEXITIES else 1
    if shift == "simpler":
        index -= 1
    elif shift == "complex":
        index += 1
    return COMPLEXITIES[max(0, min(index, len(COMPLEXITIES) - 1))]


def _apply_framing(
    proposition: PropositionWithDetails, framing: FramingParameters
) -> BallotWordingAnalysis | None:
    analysis = proposition.ballot_analysis
    if framing.title_sentiment == 0 and framing.summary_complexity == "unchanged":
        return analysis
    if analysis is None:
        if not (proposition.summary or proposition.full_text):
            return None
        analysis = analyze_ballot_wording(
            proposition.title, proposition.summary, proposition.full_text, proposition_id=proposition.id
        )
    readability = analysis.readability_score
    if framing.summary_complexity == "simpler":
        readability += READABILITY_SHIFT
    elif framing.summary_complexity == "complex":
        readability -= READABILITY_SHIFT
    return dataclasses.replace(
        analysis,
        sentiment_score=clamp(analysis.sentiment_score + framing.title_sentiment, -1.0, 1.0),
        readability_score=clamp(readability, 0.0, 100.0),
        complexity=_shift_complexity(analysis.complexity, framing.summary_complexity),
    )


def apply_scenario_parameters(
    proposition: PropositionWithDetails,
    params: ScenarioParameters,
) -> PropositionWithDetails:
    """Return a modified snapshot; the input proposition is left untouched."""
    return dataclasses.replace(
        proposition,
        finance=_apply_funding(proposition, params.funding),
        demographics=_apply_turnout(proposition.demographics, params.turnout),
        ballot_analysis=_apply_framing(proposition, params.framing),
    )


def factor_contributions(
    original: list[PredictionFactor],
    adjusted: list[PredictionFactor],
) -> list[FactorContribution]:
    adjusted_by_kind = {f.kind: f for f in adjusted}
    contributions: list[FactorContribution] = []
    for factor in original:
        match = adjusted_by_kind.get(factor.kind)
        new_value = match.value if match is not None else factor.value
        contributions.append(
            FactorContribution(
                factor=factor.name,
                original_impact=factor.value,
                adjusted_impact=new_value,
                contribution=new_value - factor.value,
            )
        )
    return contributions


def display_band(probability: float, width: float = 0.1) -> ConfidenceInterval:
    """Fixed-width display band around a probability, not a statistical interval."""
    return ConfidenceInterval(
        lower=clamp(probability - width, 0.0, 1.0),
        upper=clamp(probability + width, 0.0, 1.0),
    )


def sensitivity_analysis(
    proposition: PropositionWithDetails,
    params: ScenarioParameters,
    comparisons: list[HistoricalComparison],
    weights: PredictionWeights,
    values: list[float],
) -> list[SensitivityPoint]:
    points: list[SensitivityPoint] = []
    for parameter in SENSITIVITY_PARAMETERS:
        field_name = parameter.split(".", 1)[1]
        for value in values:
            probe = dataclasses.replace(params, funding=dataclasses.replace(params.funding, **{field_name: value}))
            snapshot = apply_scenario_parameters(proposition, probe)
            prediction = build_prediction(snapshot, comparisons, weights)
            points.append(
                SensitivityPoint(parameter=parameter, value=value, probability=prediction.passage_probability)
            )
    return points


async def run_scenario(
    proposition: PropositionWithDetails,
    scenario: Scenario | ScenarioParameters,
    finder: HistoricalFinder | None = None,
    weights: PredictionWeights | None = None,
    config: ScenarioConfig | None = None,
    include_historical: bool = True,
    reference_year: int | None = None,
) -> ScenarioResults:
    validate_proposition(proposition)
    weights = weights or PredictionWeights()
    config = config or ScenarioConfig()
    params = scenario.parameters if isinstance(scenario, Scenario) else scenario
    validate_parameters(params, config)

    # Scenario parameters never touch category, title or year, so both runs
    # share one set of comparisons.
    comparisons = await fetch_comparisons(
        proposition, finder, include_historical=include_historical, reference_year=reference_year
    )
    original = build_prediction(proposition, comparisons, weights)
    modified = apply_scenario_parameters(proposition, params)
    adjusted = build_prediction(modified, comparisons, weights)

    delta = adjusted.passage_probability - original.passage_probability
    results = ScenarioResults(
        original_probability=original.passage_probability,
        new_probability=adjusted.passage_probability,
        probability_delta=delta,
        confidence_interval=display_band(adjusted.passage_probability, config.band_width),
        factor_contributions=tuple(factor_contributions(original.factors, adjusted.factors)),
        sensitivity_analysis=tuple(
            sensitivity_analysis(proposition, params, comparisons, weights, config.sensitivity_values)
        ),
        original_data_quality=original.data_quality,
        new_data_quality=adjusted.data_quality,
    )
    logger.info(
        f"Scenario on {proposition.id}: {original.passage_probability:.3f} -> "
        f"{adjusted.passage_probability:.3f} (delta {delta:+.3f})"
    )
    return results
