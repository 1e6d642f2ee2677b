from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
import tomllib

from propcast.core.schemas import FactorKind


DEFAULT_CONFIG_PATH = "propcast.toml"


@dataclass
class ArchiveConfig:
    kind: str = "json"
    path: str = "data/archive"
    base_url: str | None = None
    timeout_seconds: int = 20
    max_retries: int = 3
    cache_ttl_seconds: int = 300


@dataclass
class HistoricalConfig:
    max_years: int = 4
    lookback_years: int = 10
    min_similarity: float = 0.2
    top_n: int = 5
    fetch_timeout_seconds: float = 5.0
    cache_ttl_seconds: float = 300.0


@dataclass
class PredictionWeights:
    """Blend weights and factor policy for one prediction request.

    Passed explicitly into every prediction and scenario run.
    """

    finance_weight: float = 0.6
    historical_weight: float = 0.4
    min_comparisons: int = 3
    finance_clamp: tuple[float, float] = (0.15, 0.85)
    historical_clamp: tuple[float, float] = (0.1, 0.9)
    # exclude | display | blend
    illustrative_mode: str = "exclude"
    illustrative_weights: dict[FactorKind, float] = field(
        default_factory=lambda: {
            FactorKind.CAMPAIGN_FINANCE: 0.25,
            FactorKind.HISTORICAL_PASS_RATE: 0.20,
            FactorKind.DEMOGRAPHICS: 0.20,
            FactorKind.BALLOT_WORDING: 0.15,
            FactorKind.TIMING: 0.10,
            FactorKind.OPPOSITION: 0.10,
        }
    )


@dataclass
class ScenarioConfig:
    band_width: float = 0.1
    max_multiplier: float = 10.0
    max_turnout_multiplier: float = 3.0
    sensitivity_values: list[float] = field(default_factory=lambda: [0.5, 1.0, 1.5, 2.0])


@dataclass
class PropcastConfig:
    archive: ArchiveConfig = field(default_factory=ArchiveConfig)
    historical: HistoricalConfig = field(default_factory=HistoricalConfig)
    prediction: PredictionWeights = field(default_factory=PredictionWeights)
    scenario: ScenarioConfig = field(default_factory=ScenarioConfig)


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key, {})
    if not isinstance(value, dict):
        return {}
    return value


def _prediction_weights(raw: dict[str, Any]) -> PredictionWeights:
    values = dict(raw)
    for key in ("finance_clamp", "historical_clamp"):
        if key in values:
            low, high = values[key]
            values[key] = (float(low), float(high))
    if "illustrative_weights" in values:
        defaults = PredictionWeights().illustrative_weights
        defaults.update({FactorKind(k): float(v) for k, v in values["illustrative_weights"].items()})
        values["illustrative_weights"] = defaults
    return PredictionWeights(**values)


def resolve_config_path(path: str | None = None) -> str:
    return path or os.getenv("PROPCAST_CONFIG") or DEFAULT_CONFIG_PATH


def load_config(path: str | None = None) -> PropcastConfig:
    cfg_path = Path(resolve_config_path(path))
    if not cfg_path.exists():
        return PropcastConfig()

    with cfg_path.open("rb") as f:
        raw = tomllib.load(f)

    return PropcastConfig(
        archive=ArchiveConfig(**_section(raw, "archive")),
        historical=HistoricalConfig(**_section(raw, "historical")),
        prediction=_prediction_weights(_section(raw, "prediction")),
        scenario=ScenarioConfig(**_section(raw, "scenario")),
    )
