from __future__ import annotations

import argparse
import json
import logging

from propcast.jobs.predict import run_predict, run_similar
from propcast.jobs.scenario import build_overrides, list_presets, run_scenarios


def main() -> None:
    parser = argparse.ArgumentParser(description="California proposition passage forecasts")
    parser.add_argument("--log-level", default="WARNING")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_predict = sub.add_parser("predict")
    p_predict.add_argument("proposition")
    p_predict.add_argument("--config", default=None)
    p_predict.add_argument("--no-historical", action="store_true")
    p_predict.add_argument("--illustrative", choices=["exclude", "display", "blend"], default=None)
    p_predict.add_argument("--reference-year", type=int, default=None)

    p_similar = sub.add_parser("similar")
    p_similar.add_argument("proposition")
    p_similar.add_argument("--config", default=None)
    p_similar.add_argument("--reference-year", type=int, default=None)

    p_scenario = sub.add_parser("scenario")
    p_scenario.add_argument("proposition")
    p_scenario.add_argument("--config", default=None)
    p_scenario.add_argument("--preset", action="append", default=[])
    p_scenario.add_argument("--support-multiplier", type=float, default=None)
    p_scenario.add_argument("--opposition-multiplier", type=float, default=None)
    p_scenario.add_argument("--turnout-multiplier", type=float, default=None)
    p_scenario.add_argument("--title-sentiment", type=float, default=None)
    p_scenario.add_argument("--summary-complexity", choices=["simpler", "unchanged", "complex"], default=None)
    p_scenario.add_argument("--reference-year", type=int, default=None)

    sub.add_parser("presets")

    args = parser.parse_args()
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "predict":
        result = run_predict(
            args.proposition,
            config_path=args.config,
            include_historical=not args.no_historical,
            illustrative_mode=args.illustrative,
            reference_year=args.reference_year,
        )
    elif args.cmd == "similar":
        result = run_similar(args.proposition, config_path=args.config, reference_year=args.reference_year)
    elif args.cmd == "scenario":
        overrides = build_overrides(
            args.support_multiplier,
            args.opposition_multiplier,
            args.turnout_multiplier,
            args.title_sentiment,
            args.summary_complexity,
        )
        result = run_scenarios(
            args.proposition,
            presets=args.preset,
            overrides=overrides,
            config_path=args.config,
            reference_year=args.reference_year,
        )
    else:
        result = list_presets()
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
