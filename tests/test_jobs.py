from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from propcast.jobs.common import envelope
from propcast.jobs.predict import run_predict, run_similar
from propcast.jobs.scenario import build_overrides, list_presets, run_scenarios


ARCHIVE_2022 = [
    {"number": "30", "title": "Tax on Income Over $2 Million", "category": "taxation",
     "election_date": "2022-11-08", "result": {"yes_votes": 41, "no_votes": 59, "yes_percentage": 41.0}},
    {"number": "31", "title": "Flavored Tobacco Tax Products", "category": "taxation",
     "election_date": "2022-11-08", "result": {"yes_votes": 63, "no_votes": 37, "yes_percentage": 63.0}},
    {"number": "26", "title": "Sports Wagering Tax on Tribal Lands", "category": "taxation",
     "election_date": "2022-11-08", "result": {"yes_votes": 33, "no_votes": 67, "yes_percentage": 33.0}},
    {"number": "28", "title": "Arts and Music Education Funding", "category": "education",
     "election_date": "2022-11-08", "result": {"yes_votes": 64, "no_votes": 36, "yes_percentage": 64.0}},
]

PROPOSITION = {
    "year": 2024,
    "number": "5",
    "title": "Local Bond Tax Threshold for Affordable Housing",
    "summary": "Lowers the voter threshold for local bond measures.",
    "category": "taxation",
    "election_date": "2024-11-05",
    "finance": {"total_support": 6_000_000, "total_opposition": 4_000_000},
}


class JobTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        root = Path(self._tmp.name)
        (root / "archive").mkdir()
        (root / "archive" / "2022.json").write_text(json.dumps(ARCHIVE_2022), encoding="utf-8")
        self.config_path = str(root / "propcast.toml")
        Path(self.config_path).write_text(
            f'[archive]\nkind = "json"\npath = "{(root / "archive").as_posix()}"\n', encoding="utf-8"
        )
        self.prop_path = str(root / "prop.json")
        Path(self.prop_path).write_text(json.dumps(PROPOSITION), encoding="utf-8")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_predict(self) -> None:
        result = run_predict(self.prop_path, config_path=self.config_path, reference_year=2024)
        self.assertTrue(result["success"])
        data = result["data"]
        self.assertEqual(data["data_quality"], "strong")
        self.assertEqual(len(data["historical_comparison"]), 3)
        # finance 0.6, history (1 + 1) / (2 + 3) = 0.4
        self.assertAlmostEqual(data["passage_probability"], 0.6 * 0.6 + 0.4 * 0.4)

    def test_predict_without_history(self) -> None:
        result = run_predict(
            self.prop_path, config_path=self.config_path, include_historical=False, illustrative_mode="display"
        )
        self.assertEqual(result["data"]["data_quality"], "moderate")
        self.assertTrue(result["data"]["illustrative_factors"])

    def test_predict_reports_malformed_input(self) -> None:
        Path(self.prop_path).write_text(json.dumps({**PROPOSITION, "category": "astrology"}), encoding="utf-8")
        result = run_predict(self.prop_path, config_path=self.config_path)
        self.assertFalse(result["success"])
        self.assertEqual(result["error"]["code"], "MalformedPropositionError")

    def test_similar(self) -> None:
        result = run_similar(self.prop_path, config_path=self.config_path, reference_year=2024)
        self.assertEqual({c["proposition_id"] for c in result["data"]}, {"2022-30", "2022-31", "2022-26"})

    def test_similar_reports_malformed_input(self) -> None:
        Path(self.prop_path).write_text(json.dumps({**PROPOSITION, "category": "astrology"}), encoding="utf-8")
        result = run_similar(self.prop_path, config_path=self.config_path, reference_year=2024)
        self.assertFalse(result["success"])
        self.assertEqual(result["error"]["code"], "MalformedPropositionError")

    def test_scenarios_from_presets(self) -> None:
        result = run_scenarios(
            self.prop_path, presets=["well-funded-support", "contested"], config_path=self.config_path,
            reference_year=2024,
        )
        self.assertTrue(result["success"])
        scenarios = result["data"]["scenarios"]
        self.assertEqual(len(scenarios), 2)
        self.assertTrue(all(s["results"] is not None for s in scenarios))
        comparison = result["data"]["comparison"]
        self.assertEqual(comparison["best_case"], scenarios[0]["id"])

    def test_custom_scenario_and_bad_input(self) -> None:
        overrides = build_overrides(support_multiplier=0.5)
        result = run_scenarios(self.prop_path, overrides=overrides, config_path=self.config_path)
        self.assertTrue(result["success"])
        self.assertLess(result["data"]["scenarios"][0]["results"]["probability_delta"], 0.0)

        bad = run_scenarios(self.prop_path, overrides=build_overrides(support_multiplier=-1.0),
                            config_path=self.config_path)
        self.assertFalse(bad["success"])
        self.assertEqual(bad["error"]["code"], "InvalidScenarioParametersError")

        unknown = run_scenarios(self.prop_path, presets=["landslide"], config_path=self.config_path)
        self.assertFalse(unknown["success"])

    def test_presets_and_envelope(self) -> None:
        presets = list_presets()
        self.assertIn("high-turnout", {p["id"] for p in presets["data"]})
        failure = envelope(error=ValueError("boom"))
        self.assertEqual(failure["error"], {"code": "ValueError", "message": "boom"})


if __name__ == "__main__":
    unittest.main()
