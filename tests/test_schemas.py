from __future__ import annotations

import unittest
from datetime import date

from propcast.core.schemas import (
    PropositionWithDetails,
    Scenario,
    ScenarioParameters,
)
from propcast.core.utils import utc_now


RECORD = {
    "year": 2024,
    "number": "33",
    "title": "Expands Local Governments' Authority to Enact Rent Control",
    "summary": "Repeals the Costa-Hawkins Rental Housing Act.",
    "category": "housing",
    "election_date": "2024-11-05T00:00:00Z",
    "opponents": ["California Apartment Association"],
    "finance": {
        "total_support": 50_000_000,
        "total_opposition": 120_000_000,
        "support_committees": [{"id": "c1", "name": "Yes on 33", "position": "support"}],
        "top_donors": [{"name": "AIDS Healthcare Foundation", "amount": 46_000_000, "position": "support"}],
    },
    "demographics": {
        "urban_rural": {
            "urban": {"population": 10, "estimated_turnout": 0.6, "projected_yes": 0.5, "projected_no": 0.5}
        }
    },
}


class PropositionRecordTests(unittest.TestCase):
    def test_from_record_fills_derived_fields(self) -> None:
        prop = PropositionWithDetails.from_record(RECORD)
        self.assertEqual(prop.id, "2024-33")
        self.assertEqual(prop.election_date, date(2024, 11, 5))
        self.assertEqual(prop.status, "upcoming")
        self.assertIsNone(prop.result)
        self.assertEqual(prop.finance.total_spending, 170_000_000)
        self.assertEqual(prop.finance.support_committees[0].name, "Yes on 33")
        self.assertEqual(prop.finance.top_donors[0].type, "individual")
        self.assertEqual(prop.demographics.urban_rural["urban"].estimated_turnout, 0.6)
        self.assertIsNone(prop.ballot_analysis)

    def test_record_survives_reload(self) -> None:
        prop = PropositionWithDetails.from_record(RECORD)
        again = PropositionWithDetails.from_record(prop.to_record())
        self.assertEqual(again.id, prop.id)
        self.assertEqual(again.finance.total_opposition, prop.finance.total_opposition)
        self.assertEqual(again.finance.last_updated, prop.finance.last_updated)
        self.assertEqual(again.opponents, prop.opponents)


class ScenarioRecordTests(unittest.TestCase):
    def test_parameters_from_partial_record(self) -> None:
        params = ScenarioParameters.from_record({"funding": {"support_multiplier": 1.5}})
        self.assertEqual(params.funding.support_multiplier, 1.5)
        self.assertEqual(params.funding.opposition_multiplier, 1.0)
        self.assertEqual(params.turnout.overall_multiplier, 1.0)
        self.assertEqual(ScenarioParameters.from_record(None), ScenarioParameters())

    def test_scenario_record(self) -> None:
        now = utc_now()
        scenario = Scenario(
            id="abc",
            name="Base",
            base_proposition_id="2024-33",
            parameters=ScenarioParameters(),
            created_at=now,
            updated_at=now,
        )
        record = scenario.to_record()
        self.assertIsNone(record["results"])
        self.assertEqual(record["parameters"]["framing"]["summary_complexity"], "unchanged")
        self.assertEqual(record["created_at"], record["updated_at"])


if __name__ == "__main__":
    unittest.main()
