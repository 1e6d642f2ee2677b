from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
from typing import Any

from propcast.core.errors import PropcastError
from propcast.core.prediction import generate_prediction
from propcast.core.propositions import validate_proposition
from propcast.jobs.common import bootstrap, envelope, load_proposition


def run_predict(
    proposition_path: str,
    config_path: str | None = None,
    include_historical: bool = True,
    illustrative_mode: str | None = None,
    reference_year: int | None = None,
) -> dict[str, Any]:
    config, finder = bootstrap(config_path)
    weights = config.prediction
    if illustrative_mode:
        weights = dataclasses.replace(weights, illustrative_mode=illustrative_mode)
    try:
        proposition = load_proposition(proposition_path)
        prediction = asyncio.run(
            generate_prediction(
                proposition,
                finder=finder,
                include_historical=include_historical,
                weights=weights,
                reference_year=reference_year,
            )
        )
    except PropcastError as exc:
        return envelope(error=exc)
    return envelope(prediction.to_record())


def run_similar(
    proposition_path: str,
    config_path: str | None = None,
    reference_year: int | None = None,
) -> dict[str, Any]:
    _, finder = bootstrap(config_path)
    try:
        proposition = load_proposition(proposition_path)
        validate_proposition(proposition)
        comparisons = asyncio.run(finder.find_similar(proposition, reference_year=reference_year))
    except PropcastError as exc:
        return envelope(error=exc)
    return envelope([c.to_record() for c in comparisons])


def main() -> None:
    parser = argparse.ArgumentParser(description="Estimate passage probability for one proposition.")
    parser.add_argument("proposition", help="Path to a proposition JSON record")
    parser.add_argument("--config", default=None)
    parser.add_argument("--no-historical", action="store_true")
    parser.add_argument("--illustrative", choices=["exclude", "display", "blend"], default=None)
    args = parser.parse_args()
    result = run_predict(
        args.proposition,
        config_path=args.config,
        include_historical=not args.no_historical,
        illustrative_mode=args.illustrative,
    )
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
