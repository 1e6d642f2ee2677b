from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import dotenv

from propcast.connectors import build_archive
from propcast.core.config import PropcastConfig, load_config
from propcast.core.historical import HistoricalFinder
from propcast.core.schemas import PropositionWithDetails


def bootstrap(config_path: str | None = None) -> tuple[PropcastConfig, HistoricalFinder]:
    dotenv.load_dotenv()
    config = load_config(config_path)
    archive = build_archive(config.archive)
    return config, HistoricalFinder(archive, config.historical)


def load_proposition(path: str) -> PropositionWithDetails:
    record = json.loads(Path(path).read_text(encoding="utf-8"))
    return PropositionWithDetails.from_record(record)


def envelope(data: Any = None, error: Exception | None = None) -> dict[str, Any]:
    if error is not None:
        return {
            "success": False,
            "data": None,
            "error": {"code": type(error).__name__, "message": str(error)},
        }
    return {"success": True, "data": data}
