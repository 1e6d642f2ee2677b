from __future__ import annotations

import asyncio
import dataclasses
import logging

from propcast.connectors.base import HistoricalArchive
from propcast.core.cache import TTLCache
from propcast.core.config import HistoricalConfig
from propcast.core.schemas import HistoricalComparison, Proposition
from propcast.core.utils import extract_keywords, keyword_overlap, utc_now


logger = logging.getLogger(__name__)

CATEGORY_BASE = 0.6
KEYWORD_WEIGHT = 0.3
RECENCY_BONUS = 0.1
RECENCY_DECAY_PER_YEAR = 0.02


def similarity_score(target: Proposition, candidate: Proposition) -> float:
    """Heuristic 0..1 similarity; different categories are never similar."""
    if target.category != candidate.category:
        return 0.0
    score = CATEGORY_BASE
    score += KEYWORD_WEIGHT * keyword_overlap(
        extract_keywords(target.title), extract_keywords(candidate.title)
    )
    year_diff = abs(target.year - candidate.year)
    score += max(0.0, RECENCY_BONUS - RECENCY_DECAY_PER_YEAR * year_diff)
    return min(score, 1.0)


def years_to_search(target_year: int, reference_year: int, lookback_years: int, max_years: int) -> list[int]:
    """Election years to scan, newest first, skipping the target's own year."""
    years: list[int] = []
    for year in range(reference_year, reference_year - lookback_years - 1, -1):
        if year == target_year:
            continue
        if year % 2 == 0 or year >= reference_year - 1:
            years.append(year)
    return years[:max_years]


def rank_comparisons(
    target: Proposition,
    candidates: list[Proposition],
    min_similarity: float = 0.2,
    top_n: int = 5,
) -> list[HistoricalComparison]:
    comparisons: list[HistoricalComparison] = []
    for prop in candidates:
        if prop.result is None or prop.id == target.id:
            continue
        similarity = similarity_score(target, prop)
        if similarity < min_similarity:
            continue
        comparisons.append(
            HistoricalComparison(
                proposition_id=prop.id,
                proposition_number=prop.number,
                year=prop.year,
                similarity=similarity,
                result="passed" if prop.result.passed else "failed",
                yes_percentage=prop.result.yes_percentage,
            )
        )
    comparisons.sort(key=lambda c: (-c.similarity, -c.year))
    return comparisons[:top_n]


class HistoricalFinder:
    """Finds comparable past measures in a results archive.

    Archive lookups run in worker threads under a timeout. A year that fails
    or times out contributes no candidates; cancellation is never swallowed.
    """

    def __init__(
        self,
        archive: HistoricalArchive,
        config: HistoricalConfig | None = None,
        cache: TTLCache[list[Proposition]] | None = None,
    ) -> None:
        self.archive = archive
        self.config = config or HistoricalConfig()
        self.cache = cache or TTLCache(ttl_seconds=self.config.cache_ttl_seconds)

    def _load_year_sync(self, year: int) -> list[Proposition]:
        props = self.archive.get_propositions_by_year(year)
        if all(p.result is not None for p in props):
            return props
        outcomes = self.archive.fetch_year_results(year)
        merged: list[Proposition] = []
        for prop in props:
            if prop.result is None and prop.number in outcomes.results:
                prop = dataclasses.replace(prop, result=outcomes.results[prop.number])
            passed = outcomes.passed(prop.number)
            # Status-only outcomes settle pass/fail but carry no vote share to compare.
            if passed is not None and prop.status not in ("passed", "failed"):
                prop = dataclasses.replace(prop, status="passed" if passed else "failed")
            merged.append(prop)
        return merged

    async def load_year(self, year: int) -> list[Proposition]:
        cached = self.cache.get(year)
        if cached is not None:
            return cached
        try:
            props = await asyncio.wait_for(
                asyncio.to_thread(self._load_year_sync, year),
                timeout=self.config.fetch_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"{self.archive.source}: year {year} timed out after "
                f"{self.config.fetch_timeout_seconds}s; treating as empty"
            )
            return []
        except Exception as exc:
            logger.warning(f"{self.archive.source}: year {year} unavailable ({exc}); treating as empty")
            return []
        self.cache.set(year, props)
        return props

    async def find_similar(
        self,
        proposition: Proposition,
        reference_year: int | None = None,
    ) -> list[HistoricalComparison]:
        reference_year = reference_year or utc_now().year
        years = years_to_search(
            proposition.year,
            reference_year,
            lookback_years=self.config.lookback_years,
            max_years=self.config.max_years,
        )
        per_year = await asyncio.gather(*(self.load_year(y) for y in years))
        candidates = [prop for props in per_year for prop in props]
        comparisons = rank_comparisons(
            proposition,
            candidates,
            min_similarity=self.config.min_similarity,
            top_n=self.config.top_n,
        )
        logger.info(
            f"Found {len(comparisons)} comparisons for {proposition.id} "
            f"across years {years} ({len(candidates)} candidates)"
        )
        return comparisons


async def find_similar_propositions(
    proposition: Proposition,
    archive: HistoricalArchive,
    config: HistoricalConfig | None = None,
    reference_year: int | None = None,
) -> list[HistoricalComparison]:
    return await HistoricalFinder(archive, config).find_similar(proposition, reference_year=reference_year)
