from __future__ import annotations

import argparse
import asyncio
import json
from typing import Any

from propcast.core.errors import PropcastError
from propcast.core.scenario_store import ScenarioStore
from propcast.jobs.common import bootstrap, envelope, load_proposition


def build_overrides(
    support_multiplier: float | None = None,
    opposition_multiplier: float | None = None,
    turnout_multiplier: float | None = None,
    title_sentiment: float | None = None,
    summary_complexity: str | None = None,
) -> dict[str, dict[str, Any]]:
    overrides: dict[str, dict[str, Any]] = {"funding": {}, "turnout": {}, "framing": {}}
    if support_multiplier is not None:
        overrides["funding"]["support_multiplier"] = support_multiplier
    if opposition_multiplier is not None:
        overrides["funding"]["opposition_multiplier"] = opposition_multiplier
    if turnout_multiplier is not None:
        overrides["turnout"]["overall_multiplier"] = turnout_multiplier
    if title_sentiment is not None:
        overrides["framing"]["title_sentiment"] = title_sentiment
    if summary_complexity is not None:
        overrides["framing"]["summary_complexity"] = summary_complexity
    return overrides


def run_scenarios(
    proposition_path: str,
    presets: list[str] | None = None,
    overrides: dict[str, dict[str, Any]] | None = None,
    config_path: str | None = None,
    reference_year: int | None = None,
) -> dict[str, Any]:
    """Run each requested preset (or a single custom scenario) and compare them."""
    config, finder = bootstrap(config_path)
    store = ScenarioStore(config.scenario)
    try:
        proposition = load_proposition(proposition_path)
        scenario_ids: list[str] = []
        for preset_id in presets or []:
            scenario = store.create_from_preset(proposition.id, preset_id, overrides)
            if scenario is None:
                raise PropcastError(f"unknown preset: {preset_id}")
            scenario_ids.append(scenario.id)
        if not scenario_ids:
            scenario = store.create(proposition.id, name="Custom")
            scenario = store.update_parameters(scenario.id, overrides or {})
            scenario_ids.append(scenario.id)

        async def _run_all() -> None:
            await asyncio.gather(
                *(
                    store.run(
                        sid,
                        proposition,
                        finder=finder,
                        weights=config.prediction,
                        reference_year=reference_year,
                    )
                    for sid in scenario_ids
                )
            )

        asyncio.run(_run_all())
    except PropcastError as exc:
        return envelope(error=exc)

    return envelope(
        {
            "scenarios": [store.get(sid).to_record() for sid in scenario_ids],
            "comparison": store.compare(scenario_ids).to_record(),
        }
    )


def list_presets() -> dict[str, Any]:
    return envelope(
        [
            {"id": p.id, "name": p.name, "description": p.description, "overrides": p.overrides}
            for p in ScenarioStore().presets()
        ]
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Run what-if scenarios for one proposition.")
    parser.add_argument("proposition", help="Path to a proposition JSON record")
    parser.add_argument("--config", default=None)
    parser.add_argument("--preset", action="append", default=[])
    parser.add_argument("--support-multiplier", type=float, default=None)
    parser.add_argument("--opposition-multiplier", type=float, default=None)
    parser.add_argument("--turnout-multiplier", type=float, default=None)
    parser.add_argument("--title-sentiment", type=float, default=None)
    parser.add_argument("--summary-complexity", choices=["simpler", "unchanged", "complex"], default=None)
    args = parser.parse_args()
    overrides = build_overrides(
        args.support_multiplier,
        args.opposition_multiplier,
        args.turnout_multiplier,
        args.title_sentiment,
        args.summary_complexity,
    )
    print(json.dumps(run_scenarios(args.proposition, args.preset, overrides, args.config), indent=2))


if __name__ == "__main__":
    main()
