from __future__ import annotations

import dataclasses
import logging
import threading
from typing import Any, Iterable

from propcast.core.config import PredictionWeights, ScenarioConfig
from propcast.core.historical import HistoricalFinder
from propcast.core.scenario import (
    SCENARIO_PRESETS,
    ScenarioPreset,
    merge_parameters,
    run_scenario,
    validate_parameters,
)
from propcast.core.schemas import (
    PropositionWithDetails,
    Scenario,
    ScenarioComparison,
    ScenarioParameters,
    ScenarioResults,
)
from propcast.core.utils import new_id, utc_now


logger = logging.getLogger(__name__)


def compare_scenarios(scenarios: Iterable[Scenario]) -> ScenarioComparison:
    """Rank scenarios by their new probability.

    Runs that ended with ``limited`` data are listed separately and never
    ranked or averaged.
    """
    with_results = [s for s in scenarios if s.results is not None]
    ranked = [s for s in with_results if s.results.new_data_quality != "limited"]
    insufficient = tuple(s for s in with_results if s.results.new_data_quality == "limited")
    if not ranked:
        return ScenarioComparison(
            scenarios=(),
            best_case=None,
            worst_case=None,
            average_probability=0.0,
            probability_range=(0.0, 0.0),
            insufficient=insufficient,
        )
    probabilities = [s.results.new_probability for s in ranked]
    return ScenarioComparison(
        scenarios=tuple(ranked),
        best_case=max(ranked, key=lambda s: s.results.new_probability),
        worst_case=min(ranked, key=lambda s: s.results.new_probability),
        average_probability=sum(probabilities) / len(probabilities),
        probability_range=(min(probabilities), max(probabilities)),
        insufficient=insufficient,
    )


class ScenarioStore:
    """Process-local scenario map. Each method is atomic on its own; callers
    composing several calls get no atomicity across them."""

    def __init__(self, config: ScenarioConfig | None = None) -> None:
        self.config = config or ScenarioConfig()
        self._scenarios: dict[str, Scenario] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._scenarios)

    def create(
        self,
        base_proposition_id: str,
        parameters: ScenarioParameters | None = None,
        name: str | None = None,
        description: str | None = None,
    ) -> Scenario:
        parameters = parameters or ScenarioParameters()
        validate_parameters(parameters, self.config)
        now = utc_now()
        with self._lock:
            scenario = Scenario(
                id=new_id(),
                name=name or f"Scenario {len(self._scenarios) + 1}",
                description=description,
                base_proposition_id=base_proposition_id,
                parameters=parameters,
                created_at=now,
                updated_at=now,
            )
            self._scenarios[scenario.id] = scenario
        logger.info(f"Created scenario {scenario.id} ({scenario.name}) for {base_proposition_id}")
        return scenario

    def create_from_preset(
        self,
        base_proposition_id: str,
        preset_id: str,
        overrides: dict[str, dict[str, Any]] | None = None,
    ) -> Scenario | None:
        preset = SCENARIO_PRESETS.get(preset_id)
        if preset is None:
            return None
        parameters = merge_parameters(merge_parameters(ScenarioParameters(), preset.overrides), overrides)
        return self.create(base_proposition_id, parameters, name=preset.name, description=preset.description)

    def presets(self) -> list[ScenarioPreset]:
        return list(SCENARIO_PRESETS.values())

    def get(self, scenario_id: str) -> Scenario | None:
        with self._lock:
            return self._scenarios.get(scenario_id)

    def list_by_proposition(self, proposition_id: str) -> list[Scenario]:
        with self._lock:
            return [s for s in self._scenarios.values() if s.base_proposition_id == proposition_id]

    def update_parameters(
        self,
        scenario_id: str,
        overrides: dict[str, dict[str, Any]],
    ) -> Scenario | None:
        with self._lock:
            current = self._scenarios.get(scenario_id)
            if current is None:
                return None
            parameters = merge_parameters(current.parameters, overrides)
            validate_parameters(parameters, self.config)
            updated = dataclasses.replace(current, parameters=parameters, results=None, updated_at=utc_now())
            self._scenarios[scenario_id] = updated
            return updated

    def set_results(
        self,
        scenario_id: str,
        results: ScenarioResults,
        expected_parameters: ScenarioParameters | None = None,
    ) -> Scenario | None:
        """Store results; with ``expected_parameters``, only if they still match."""
        with self._lock:
            current = self._scenarios.get(scenario_id)
            if current is None:
                return None
            if expected_parameters is not None and current.parameters != expected_parameters:
                logger.info(f"Discarding stale results for scenario {scenario_id}")
                return None
            updated = dataclasses.replace(current, results=results, updated_at=utc_now())
            self._scenarios[scenario_id] = updated
            return updated

    def duplicate(self, scenario_id: str, new_name: str | None = None) -> Scenario | None:
        now = utc_now()
        with self._lock:
            original = self._scenarios.get(scenario_id)
            if original is None:
                return None
            copy = dataclasses.replace(
                original,
                id=new_id(),
                name=new_name or f"{original.name} (Copy)",
                results=None,
                created_at=now,
                updated_at=now,
            )
            self._scenarios[copy.id] = copy
            return copy

    def delete(self, scenario_id: str) -> bool:
        with self._lock:
            return self._scenarios.pop(scenario_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._scenarios.clear()

    async def run(
        self,
        scenario_id: str,
        proposition: PropositionWithDetails,
        finder: HistoricalFinder | None = None,
        weights: PredictionWeights | None = None,
        reference_year: int | None = None,
    ) -> ScenarioResults | None:
        scenario = self.get(scenario_id)
        if scenario is None:
            return None
        results = await run_scenario(
            proposition,
            scenario,
            finder=finder,
            weights=weights,
            config=self.config,
            reference_year=reference_year,
        )
        # Parameters may have been replaced while the run was in flight.
        self.set_results(scenario_id, results, expected_parameters=scenario.parameters)
        return results

    def compare(self, scenario_ids: Iterable[str] | None = None) -> ScenarioComparison:
        with self._lock:
            if scenario_ids is None:
                chosen = list(self._scenarios.values())
            else:
                chosen = [self._scenarios[i] for i in scenario_ids if i in self._scenarios]
        return compare_scenarios(chosen)
