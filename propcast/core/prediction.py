from __future__ import annotations

import logging

from propcast.core.config import PredictionWeights
from propcast.core.factors import illustrative_factors, real_factors
from propcast.core.historical import HistoricalFinder
from propcast.core.propositions import validate_proposition
from propcast.core.schemas import (
    FactorKind,
    HistoricalComparison,
    PredictionFactor,
    PropositionPrediction,
    PropositionWithDetails,
)
from propcast.core.utils import clamp, utc_now, weighted_average


logger = logging.getLogger(__name__)

ILLUSTRATIVE_MODES = ("exclude", "display", "blend")
ILLUSTRATIVE_SOURCE = "Illustrative heuristics"


def data_quality_for(real_factor_count: int) -> str:
    if real_factor_count >= 2:
        return "strong"
    if real_factor_count == 1:
        return "moderate"
    return "limited"


def blend_real_factors(factors: list[PredictionFactor], weights: PredictionWeights) -> float:
    by_kind = {f.kind: f.value for f in factors if f.has_real_data}
    finance = by_kind.get(FactorKind.CAMPAIGN_FINANCE)
    historical = by_kind.get(FactorKind.HISTORICAL_PASS_RATE)
    if finance is not None and historical is not None:
        return weighted_average(
            [finance, historical], [weights.finance_weight, weights.historical_weight]
        )
    if finance is not None:
        return finance
    if historical is not None:
        return historical
    return 0.0


def blend_all_factors(factors: list[PredictionFactor], weights: PredictionWeights) -> float:
    """Fixed-weight average over every factor, real or illustrative."""
    missing = [f.name for f in factors if f.kind not in weights.illustrative_weights]
    if missing:
        raise ValueError(f"no blend weight configured for {missing}")
    return weighted_average(
        [f.value for f in factors],
        [weights.illustrative_weights[f.kind] for f in factors],
    )


def build_prediction(
    proposition: PropositionWithDetails,
    comparisons: list[HistoricalComparison],
    weights: PredictionWeights,
) -> PropositionPrediction:
    """Turn already-fetched signals into a prediction. Performs no I/O."""
    if weights.illustrative_mode not in ILLUSTRATIVE_MODES:
        raise ValueError(f"unknown illustrative mode: {weights.illustrative_mode!r}")

    real = real_factors(proposition, comparisons, weights)
    quality = data_quality_for(len(real))
    if quality == "limited":
        return PropositionPrediction(
            proposition_id=proposition.id,
            passage_probability=0.0,
            data_quality=quality,
            data_sources=[],
            factors=[],
            historical_comparison=list(comparisons),
        )

    extra = illustrative_factors(proposition) if weights.illustrative_mode != "exclude" else []
    sources = sorted({f.source for f in real})
    if weights.illustrative_mode == "blend":
        factors = real + extra
        probability = blend_all_factors(factors, weights)
        sources.append(ILLUSTRATIVE_SOURCE)
        displayed: list[PredictionFactor] = []
    else:
        factors = real
        probability = blend_real_factors(real, weights)
        displayed = extra

    return PropositionPrediction(
        proposition_id=proposition.id,
        passage_probability=clamp(probability, 0.0, 1.0),
        data_quality=quality,
        data_sources=sources,
        factors=factors,
        historical_comparison=list(comparisons),
        illustrative_factors=displayed,
        generated_at=utc_now(),
    )


async def fetch_comparisons(
    proposition: PropositionWithDetails,
    finder: HistoricalFinder | None,
    include_historical: bool = True,
    reference_year: int | None = None,
) -> list[HistoricalComparison]:
    if not include_historical or finder is None:
        return []
    try:
        return await finder.find_similar(proposition, reference_year=reference_year)
    except Exception as exc:
        logger.warning(f"Historical lookup failed for {proposition.id}: {exc}")
        return []


async def generate_prediction(
    proposition: PropositionWithDetails,
    finder: HistoricalFinder | None = None,
    include_historical: bool = True,
    weights: PredictionWeights | None = None,
    reference_year: int | None = None,
) -> PropositionPrediction:
    validate_proposition(proposition)
    weights = weights or PredictionWeights()
    comparisons = await fetch_comparisons(
        proposition, finder, include_historical=include_historical, reference_year=reference_year
    )
    prediction = build_prediction(proposition, comparisons, weights)
    logger.info(
        f"Prediction for {proposition.id}: p={prediction.passage_probability:.3f} "
        f"quality={prediction.data_quality} factors={[f.name for f in prediction.factors]}"
    )
    return prediction
