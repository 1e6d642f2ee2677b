from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Any

from propcast.connectors.base import HistoricalArchive
from propcast.connectors.http_client import SimpleHttpClient
from propcast.core.propositions import (
    derive_status,
    generate_election_dates,
    infer_category,
    proposition_id,
)
from propcast.core.schemas import Proposition, PropositionResult


logger = logging.getLogger(__name__)

RACE_DATE = re.compile(r"([A-Z][a-z]+ \d{1,2}, \d{4})")
RACE_YEAR = re.compile(r"\b((?:19|20)\d{2})\b")


def _to_int(value: Any) -> int:
    try:
        return int(str(value).replace(",", "").strip() or 0)
    except ValueError:
        return 0


def _to_float(value: Any) -> float:
    try:
        return float(str(value).replace("%", "").strip() or 0.0)
    except ValueError:
        return 0.0


def parse_race_date(race_title: str) -> date | None:
    match = RACE_DATE.search(race_title or "")
    if not match:
        return None
    try:
        return datetime.strptime(match.group(1), "%B %d, %Y").date()
    except ValueError:
        return None


def build_result(row: dict[str, Any]) -> PropositionResult:
    yes_votes = _to_int(row.get("yesVotes"))
    no_votes = _to_int(row.get("noVotes"))
    yes_pct = _to_float(row.get("yesPercent"))
    return PropositionResult(
        yes_votes=yes_votes,
        no_votes=no_votes,
        yes_percentage=yes_pct,
        no_percentage=_to_float(row.get("noPercent")),
        passed=yes_pct > 50.0,
        total_votes=yes_votes + no_votes,
        # Not reported by the returns feed.
        turnout=0.0,
    )


class CaSosArchive(HistoricalArchive):
    """California Secretary of State election returns feed.

    The feed only reports the most recent statewide election, so years other
    than the one named in its race title come back empty.
    """

    source = "ca_sos"

    def __init__(self, base_url: str | None = None, http: SimpleHttpClient | None = None) -> None:
        self.base_url = (base_url or "https://api.sos.ca.gov").rstrip("/")
        self.http = http or SimpleHttpClient()

    def get_propositions_by_year(self, year: int) -> list[Proposition]:
        payload = self.http.get_json(f"{self.base_url}/returns/ballot-measures")
        if not isinstance(payload, dict):
            return []

        race_title = str(payload.get("raceTitle", ""))
        election_date = parse_race_date(race_title)
        year_match = RACE_YEAR.search(race_title)
        feed_year = election_date.year if election_date else int(year_match.group(1)) if year_match else None
        if feed_year != year:
            logger.info(f"CA SOS feed covers {feed_year}, not {year}")
            return []
        election_date = election_date or generate_election_dates(year)[0]

        output: list[Proposition] = []
        for row in payload.get("ballot-measures", []) or []:
            number = str(row.get("Number", "")).strip()
            if not number:
                continue
            title = str(row.get("Name", "")).strip()
            result = build_result(row)
            output.append(
                Proposition(
                    id=proposition_id(year, number),
                    year=year,
                    number=number,
                    title=title,
                    summary="",
                    category=infer_category(title),
                    election_date=election_date,
                    status=derive_status(election_date, result),
                    result=result,
                )
            )
        logger.info(f"CA SOS returned {len(output)} ballot measures for {year}")
        return output
