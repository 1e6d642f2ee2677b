from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Union

from propcast.core.utils import from_iso, to_iso, utc_now


JsonDict = dict[str, Any]

CATEGORIES = (
    "taxation",
    "education",
    "healthcare",
    "environment",
    "criminal_justice",
    "labor",
    "housing",
    "transportation",
    "government",
    "civil_rights",
    "other",
)
STATUSES = ("upcoming", "active", "passed", "failed")
COMPLEXITIES = ("simple", "moderate", "complex")
DATA_QUALITIES = ("strong", "moderate", "limited")
SUMMARY_COMPLEXITY_SHIFTS = ("simpler", "unchanged", "complex")


@dataclass
class PropositionResult:
    yes_votes: int
    no_votes: int
    yes_percentage: float
    no_percentage: float
    passed: bool
    total_votes: int = 0
    turnout: float = 0.0

    def to_record(self) -> JsonDict:
        return asdict(self)

    @staticmethod
    def from_record(record: JsonDict) -> "PropositionResult":
        yes_votes = int(record.get("yes_votes", 0))
        no_votes = int(record.get("no_votes", 0))
        yes_pct = float(record.get("yes_percentage", 0.0))
        return PropositionResult(
            yes_votes=yes_votes,
            no_votes=no_votes,
            yes_percentage=yes_pct,
            no_percentage=float(record.get("no_percentage", 100.0 - yes_pct)),
            passed=bool(record.get("passed", yes_pct > 50.0)),
            total_votes=int(record.get("total_votes", yes_votes + no_votes)),
            turnout=float(record.get("turnout", 0.0)),
        )


@dataclass
class Committee:
    id: str
    name: str
    position: str
    total_raised: float = 0.0
    total_spent: float = 0.0

    @staticmethod
    def from_record(record: JsonDict) -> "Committee":
        return Committee(
            id=str(record["id"]),
            name=str(record.get("name", "")),
            position=str(record.get("position", "support")),
            total_raised=float(record.get("total_raised", 0.0)),
            total_spent=float(record.get("total_spent", 0.0)),
        )


@dataclass
class Donor:
    name: str
    amount: float
    position: str
    type: str = "individual"

    @staticmethod
    def from_record(record: JsonDict) -> "Donor":
        return Donor(
            name=str(record.get("name", "")),
            amount=float(record.get("amount", 0.0)),
            position=str(record.get("position", "support")),
            type=str(record.get("type", "individual")),
        )


@dataclass(frozen=True)
class PropositionFinance:
    proposition_id: str
    total_support: float
    total_opposition: float
    support_committees: tuple[Committee, ...] = ()
    opposition_committees: tuple[Committee, ...] = ()
    top_donors: tuple[Donor, ...] = ()
    last_updated: datetime = field(default_factory=utc_now)

    @property
    def total_spending(self) -> float:
        return self.total_support + self.total_opposition

    def to_record(self) -> JsonDict:
        return {
            "proposition_id": self.proposition_id,
            "total_support": self.total_support,
            "total_opposition": self.total_opposition,
            "support_committees": [asdict(c) for c in self.support_committees],
            "opposition_committees": [asdict(c) for c in self.opposition_committees],
            "top_donors": [asdict(d) for d in self.top_donors],
            "last_updated": to_iso(self.last_updated),
        }

    @staticmethod
    def from_record(record: JsonDict) -> "PropositionFinance":
        return PropositionFinance(
            proposition_id=str(record.get("proposition_id", "")),
            total_support=float(record.get("total_support", 0.0)),
            total_opposition=float(record.get("total_opposition", 0.0)),
            support_committees=tuple(
                Committee.from_record(c) for c in record.get("support_committees", [])
            ),
            opposition_committees=tuple(
                Committee.from_record(c) for c in record.get("opposition_committees", [])
            ),
            top_donors=tuple(Donor.from_record(d) for d in record.get("top_donors", [])),
            last_updated=from_iso(record.get("last_updated")) or utc_now(),
        )


@dataclass(frozen=True)
class BallotWordingAnalysis:
    proposition_id: str
    word_count: int
    readability_score: float
    sentiment_score: float
    complexity: str
    key_phrases: tuple[str, ...] = ()

    def to_record(self) -> JsonDict:
        record = asdict(self)
        record["key_phrases"] = list(self.key_phrases)
        return record

    @staticmethod
    def from_record(record: JsonDict) -> "BallotWordingAnalysis":
        return BallotWordingAnalysis(
            proposition_id=str(record.get("proposition_id", "")),
            word_count=int(record.get("word_count", 0)),
            readability_score=float(record.get("readability_score", 0.0)),
            sentiment_score=float(record.get("sentiment_score", 0.0)),
            complexity=str(record.get("complexity", "moderate")),
            key_phrases=tuple(record.get("key_phrases", [])),
        )


@dataclass(frozen=True)
class VotingPattern:
    population: int
    estimated_turnout: float
    projected_yes: float
    projected_no: float


@dataclass(frozen=True)
class DemographicImpact:
    proposition_id: str
    urban_rural: dict[str, VotingPattern] = field(default_factory=dict)

    def to_record(self) -> JsonDict:
        return {
            "proposition_id": self.proposition_id,
            "urban_rural": {k: asdict(v) for k, v in self.urban_rural.items()},
        }

    @staticmethod
    def from_record(record: JsonDict) -> "DemographicImpact":
        return DemographicImpact(
            proposition_id=str(record.get("proposition_id", "")),
            urban_rural={
                str(k): VotingPattern(
                    population=int(v.get("population", 0)),
                    estimated_turnout=float(v.get("estimated_turnout", 0.0)),
                    projected_yes=float(v.get("projected_yes", 0.0)),
                    projected_no=float(v.get("projected_no", 0.0)),
                )
                for k, v in record.get("urban_rural", {}).items()
            },
        )


@dataclass
class Proposition:
    id: str
    year: int
    number: str
    title: str
    summary: str
    category: str
    election_date: date | None
    status: str = "upcoming"
    result: PropositionResult | None = None
    full_text: str | None = None
    sponsors: list[str] = field(default_factory=list)
    opponents: list[str] = field(default_factory=list)

    def to_record(self) -> JsonDict:
        return {
            "id": self.id,
            "year": self.year,
            "number": self.number,
            "title": self.title,
            "summary": self.summary,
            "category": self.category,
            "election_date": self.election_date.isoformat() if self.election_date else None,
            "status": self.status,
            "result": self.result.to_record() if self.result else None,
            "full_text": self.full_text,
            "sponsors": list(self.sponsors),
            "opponents": list(self.opponents),
        }

    @staticmethod
    def _base_fields(record: JsonDict) -> JsonDict:
        year = int(record.get("year", 0))
        number = str(record.get("number", ""))
        raw_date = record.get("election_date")
        return {
            "id": str(record.get("id") or (f"{year}-{number}" if year and number else "")),
            "year": year,
            "number": number,
            "title": str(record.get("title", "")),
            "summary": str(record.get("summary", "")),
            "category": str(record.get("category", "other")),
            "election_date": date.fromisoformat(raw_date[:10]) if raw_date else None,
            "status": str(record.get("status", "upcoming")),
            "result": PropositionResult.from_record(record["result"]) if record.get("result") else None,
            "full_text": record.get("full_text"),
            "sponsors": [str(s) for s in record.get("sponsors", [])],
            "opponents": [str(s) for s in record.get("opponents", [])],
        }

    @staticmethod
    def from_record(record: JsonDict) -> "Proposition":
        return Proposition(**Proposition._base_fields(record))


@dataclass
class PropositionWithDetails(Proposition):
    finance: PropositionFinance | None = None
    ballot_analysis: BallotWordingAnalysis | None = None
    demographics: DemographicImpact | None = None

    def to_record(self) -> JsonDict:
        record = super().to_record()
        record["finance"] = self.finance.to_record() if self.finance else None
        record["ballot_analysis"] = self.ballot_analysis.to_record() if self.ballot_analysis else None
        record["demographics"] = self.demographics.to_record() if self.demographics else None
        return record

    @staticmethod
    def from_record(record: JsonDict) -> "PropositionWithDetails":
        base = Proposition._base_fields(record)
        finance = record.get("finance")
        analysis = record.get("ballot_analysis")
        demographics = record.get("demographics")
        return PropositionWithDetails(
            **base,
            finance=PropositionFinance.from_record(finance) if finance else None,
            ballot_analysis=BallotWordingAnalysis.from_record(analysis) if analysis else None,
            demographics=DemographicImpact.from_record(demographics) if demographics else None,
        )


@dataclass(frozen=True)
class HistoricalComparison:
    proposition_id: str
    proposition_number: str
    year: int
    similarity: float
    result: str
    yes_percentage: float

    @property
    def passed(self) -> bool:
        return self.result == "passed"

    def to_record(self) -> JsonDict:
        return asdict(self)


class FactorKind(str, Enum):
    CAMPAIGN_FINANCE = "campaignFinance"
    HISTORICAL_PASS_RATE = "historicalPassRate"
    DEMOGRAPHICS = "demographics"
    BALLOT_WORDING = "ballotWording"
    TIMING = "timing"
    OPPOSITION = "opposition"


@dataclass(frozen=True)
class RealBasis:
    source: str


@dataclass(frozen=True)
class IllustrativeBasis:
    formula: str


FactorBasis = Union[RealBasis, IllustrativeBasis]


@dataclass(frozen=True)
class PredictionFactor:
    kind: FactorKind
    value: float
    impact: str
    description: str
    basis: FactorBasis

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def has_real_data(self) -> bool:
        return isinstance(self.basis, RealBasis)

    @property
    def source(self) -> str:
        if isinstance(self.basis, RealBasis):
            return self.basis.source
        return "illustrative"

    def to_record(self) -> JsonDict:
        record: JsonDict = {
            "name": self.name,
            "value": self.value,
            "impact": self.impact,
            "description": self.description,
            "source": self.source,
            "has_real_data": self.has_real_data,
        }
        if isinstance(self.basis, IllustrativeBasis):
            record["formula"] = self.basis.formula
        return record


@dataclass
class PropositionPrediction:
    proposition_id: str
    passage_probability: float
    data_quality: str
    data_sources: list[str]
    factors: list[PredictionFactor]
    historical_comparison: list[HistoricalComparison]
    illustrative_factors: list[PredictionFactor] = field(default_factory=list)
    generated_at: datetime = field(default_factory=utc_now)

    @property
    def is_insufficient(self) -> bool:
        return self.data_quality == "limited"

    def factor(self, kind: FactorKind) -> PredictionFactor | None:
        for item in self.factors:
            if item.kind == kind:
                return item
        return None

    def to_record(self) -> JsonDict:
        return {
            "proposition_id": self.proposition_id,
            "passage_probability": self.passage_probability,
            "data_quality": self.data_quality,
            "data_sources": list(self.data_sources),
            "factors": [f.to_record() for f in self.factors],
            "historical_comparison": [c.to_record() for c in self.historical_comparison],
            "illustrative_factors": [f.to_record() for f in self.illustrative_factors],
            "generated_at": to_iso(self.generated_at),
        }


@dataclass(frozen=True)
class FundingParameters:
    support_multiplier: float = 1.0
    opposition_multiplier: float = 1.0
    custom_support_amount: float | None = None
    custom_opposition_amount: float | None = None


@dataclass(frozen=True)
class TurnoutParameters:
    overall_multiplier: float = 1.0


@dataclass(frozen=True)
class FramingParameters:
    title_sentiment: float = 0.0
    summary_complexity: str = "unchanged"


@dataclass(frozen=True)
class ScenarioParameters:
    funding: FundingParameters = field(default_factory=FundingParameters)
    turnout: TurnoutParameters = field(default_factory=TurnoutParameters)
    framing: FramingParameters = field(default_factory=FramingParameters)

    def to_record(self) -> JsonDict:
        return asdict(self)

    @staticmethod
    def from_record(record: JsonDict | None) -> "ScenarioParameters":
        record = record or {}
        return ScenarioParameters(
            funding=FundingParameters(**dict(record.get("funding") or {})),
            turnout=TurnoutParameters(**dict(record.get("turnout") or {})),
            framing=FramingParameters(**dict(record.get("framing") or {})),
        )


@dataclass(frozen=True)
class ConfidenceInterval:
    lower: float
    upper: float


@dataclass(frozen=True)
class FactorContribution:
    factor: str
    original_impact: float
    adjusted_impact: float
    contribution: float


@dataclass(frozen=True)
class SensitivityPoint:
    parameter: str
    value: float
    probability: float


@dataclass(frozen=True)
class ScenarioResults:
    original_probability: float
    new_probability: float
    probability_delta: float
    confidence_interval: ConfidenceInterval
    factor_contributions: tuple[FactorContribution, ...] = ()
    sensitivity_analysis: tuple[SensitivityPoint, ...] = ()
    original_data_quality: str = "limited"
    new_data_quality: str = "limited"

    def to_record(self) -> JsonDict:
        record = asdict(self)
        record["factor_contributions"] = [asdict(c) for c in self.factor_contributions]
        record["sensitivity_analysis"] = [asdict(p) for p in self.sensitivity_analysis]
        return record


@dataclass(frozen=True)
class Scenario:
    id: str
    name: str
    base_proposition_id: str
    parameters: ScenarioParameters
    results: ScenarioResults | None = None
    description: str | None = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def to_record(self) -> JsonDict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "base_proposition_id": self.base_proposition_id,
            "parameters": self.parameters.to_record(),
            "results": self.results.to_record() if self.results else None,
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
        }


@dataclass(frozen=True)
class ScenarioComparison:
    scenarios: tuple[Scenario, ...]
    best_case: Scenario | None
    worst_case: Scenario | None
    average_probability: float
    probability_range: tuple[float, float]
    # Runs that ended "limited"; their 0 is not an estimate.
    insufficient: tuple[Scenario, ...] = ()

    def to_record(self) -> JsonDict:
        return {
            "scenarios": [s.id for s in self.scenarios],
            "insufficient": [s.id for s in self.insufficient],
            "best_case": self.best_case.id if self.best_case else None,
            "worst_case": self.worst_case.id if self.worst_case else None,
            "average_probability": self.average_probability,
            "probability_range": {"min": self.probability_range[0], "max": self.probability_range[1]},
        }
