from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from propcast.core.schemas import Proposition, PropositionResult


@dataclass
class ArchiveYear:
    """Certified outcomes for one election year, keyed by measure number.

    ``statuses`` holds pass/fail for older measures that have no vote counts.
    """

    year: int
    results: dict[str, PropositionResult] = field(default_factory=dict)
    statuses: dict[str, bool] = field(default_factory=dict)

    def passed(self, number: str) -> bool | None:
        if number in self.results:
            return self.results[number].passed
        return self.statuses.get(number)


class HistoricalArchive(ABC):
    source: str

    @abstractmethod
    def get_propositions_by_year(self, year: int) -> list[Proposition]:
        raise NotImplementedError

    def fetch_year_results(self, year: int) -> ArchiveYear:
        outcome = ArchiveYear(year=year)
        for prop in self.get_propositions_by_year(year):
            if prop.result is not None:
                outcome.results[prop.number] = prop.result
            elif prop.status in ("passed", "failed"):
                outcome.statuses[prop.number] = prop.status == "passed"
        return outcome


class InMemoryArchive(HistoricalArchive):
    source = "memory"

    def __init__(self, propositions: list[Proposition] | None = None) -> None:
        self._by_year: dict[int, list[Proposition]] = {}
        for prop in propositions or []:
            self.add(prop)

    def add(self, proposition: Proposition) -> None:
        self._by_year.setdefault(proposition.year, []).append(proposition)

    def get_propositions_by_year(self, year: int) -> list[Proposition]:
        return list(self._by_year.get(year, []))
