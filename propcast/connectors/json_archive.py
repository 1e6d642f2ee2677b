from __future__ import annotations

import json
import logging
from pathlib import Path

from propcast.connectors.base import HistoricalArchive
from propcast.core.errors import UpstreamUnavailableError
from propcast.core.propositions import derive_status
from propcast.core.schemas import Proposition


logger = logging.getLogger(__name__)


class JsonArchive(HistoricalArchive):
    """Reads one ``<year>.json`` file of proposition records per election year."""

    source = "json_archive"

    def __init__(self, directory: str) -> None:
        self.directory = Path(directory)

    def _year_file(self, year: int) -> Path:
        return self.directory / f"{year}.json"

    def get_propositions_by_year(self, year: int) -> list[Proposition]:
        path = self._year_file(year)
        if not path.exists():
            return []
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise UpstreamUnavailableError(self.source, f"cannot read {path}: {exc}") from exc

        rows = payload.get("propositions", []) if isinstance(payload, dict) else payload
        output: list[Proposition] = []
        for row in rows:
            if not isinstance(row, dict):
                continue
            row = {"year": year, **row}
            prop = Proposition.from_record(row)
            if "status" not in row:
                prop.status = derive_status(prop.election_date, prop.result)
            output.append(prop)
        logger.info(f"Loaded {len(output)} propositions for {year} from {path}")
        return output
