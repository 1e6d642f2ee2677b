from __future__ import annotations

from datetime import date, datetime, timedelta

from propcast.core.errors import MalformedPropositionError
from propcast.core.schemas import CATEGORIES, Proposition, PropositionResult
from propcast.core.utils import utc_now


# Checked in order; the first category with a matching keyword wins.
CATEGORY_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("taxation", ("tax", "bond", "fee")),
    ("education", ("school", "education", "college")),
    ("healthcare", ("health", "medical", "hospital")),
    ("environment", ("environment", "water", "climate", "energy")),
    ("criminal_justice", ("crime", "criminal", "prison", "police")),
    ("labor", ("labor", "worker", "wage", "employee")),
    ("housing", ("housing", "rent", "home")),
    ("transportation", ("transport", "road", "highway", "rail")),
    ("civil_rights", ("rights", "vote", "marriage", "discrimination")),
]


def proposition_id(year: int, number: str) -> str:
    return f"{year}-{number}"


def infer_category(title: str) -> str:
    lowered = (title or "").lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(kw in lowered for kw in keywords):
            return category
    return "government"


def first_tuesday_after_first_monday(year: int, month: int) -> date:
    first = date(year, month, 1)
    # Monday is weekday 0.
    first_monday = first + timedelta(days=(7 - first.weekday()) % 7)
    return first_monday + timedelta(days=1)


def generate_election_dates(year: int) -> list[date]:
    """Candidate statewide election dates for a year, November general first."""
    dates = [first_tuesday_after_first_monday(year, 11)]
    if year % 2 == 0:
        dates.append(first_tuesday_after_first_monday(year, 6))
        dates.append(first_tuesday_after_first_monday(year, 3))
    else:
        dates.append(first_tuesday_after_first_monday(year, 9))
    return dates


def derive_status(
    election_date: date | None,
    result: PropositionResult | None,
    now: datetime | None = None,
) -> str:
    if election_date is None:
        return "upcoming"
    today = (now or utc_now()).date()
    # Polls close at the end of election day.
    if election_date + timedelta(days=1) > today:
        return "upcoming"
    if result is not None:
        return "passed" if result.passed else "failed"
    return "active"


def validate_proposition(proposition: Proposition) -> None:
    """Fail fast on records that cannot be identified."""
    missing = [
        name
        for name, value in (
            ("id", proposition.id),
            ("year", proposition.year),
            ("number", proposition.number),
            ("category", proposition.category),
        )
        if not value
    ]
    if missing:
        raise MalformedPropositionError(
            f"proposition is missing required fields: {', '.join(missing)}"
        )
    if proposition.category not in CATEGORIES:
        raise MalformedPropositionError(
            f"proposition {proposition.id} has unknown category {proposition.category!r}"
        )
    expected_id = proposition_id(proposition.year, proposition.number)
    if proposition.id != expected_id:
        raise MalformedPropositionError(
            f"proposition id {proposition.id!r} does not match year/number {expected_id!r}"
        )
