from __future__ import annotations

import random
import unittest

from propcast.connectors.base import HistoricalArchive, InMemoryArchive
from propcast.core.config import PredictionWeights
from propcast.core.errors import MalformedPropositionError, UpstreamUnavailableError
from propcast.core.historical import HistoricalFinder
from propcast.core.prediction import build_prediction, data_quality_for, generate_prediction
from propcast.core.schemas import FactorKind
from tests.factories import make_comparisons, make_past, make_proposition


class _DownArchive(HistoricalArchive):
    source = "down"

    def get_propositions_by_year(self, year: int):
        raise UpstreamUnavailableError(self.source, "503")


class BuildPredictionTests(unittest.TestCase):
    def test_no_real_factors_is_limited(self) -> None:
        prediction = build_prediction(make_proposition(), make_comparisons(1, 1), PredictionWeights())
        self.assertEqual(prediction.data_quality, "limited")
        self.assertEqual(prediction.passage_probability, 0.0)
        self.assertEqual(prediction.factors, [])
        self.assertEqual(prediction.illustrative_factors, [])
        self.assertTrue(prediction.is_insufficient)

    def test_finance_only_is_moderate(self) -> None:
        prediction = build_prediction(make_proposition(9_000, 1_000), make_comparisons(2, 0), PredictionWeights())
        self.assertEqual(prediction.data_quality, "moderate")
        self.assertEqual(prediction.passage_probability, 0.85)
        self.assertEqual(len(prediction.factors), 1)

    def test_historical_only_is_moderate(self) -> None:
        prediction = build_prediction(make_proposition(), make_comparisons(3, 1), PredictionWeights())
        self.assertEqual(prediction.data_quality, "moderate")
        self.assertAlmostEqual(prediction.passage_probability, 4 / 6)

    def test_exact_blend_weights(self) -> None:
        # Finance share 0.7; 17 of 28 passed -> (1 + 17) / (2 + 28) = 0.6.
        prediction = build_prediction(make_proposition(7_000, 3_000), make_comparisons(17, 11), PredictionWeights())
        self.assertAlmostEqual(prediction.factor(FactorKind.CAMPAIGN_FINANCE).value, 0.7)
        self.assertAlmostEqual(prediction.factor(FactorKind.HISTORICAL_PASS_RATE).value, 0.6)
        self.assertAlmostEqual(prediction.passage_probability, 0.7 * 0.6 + 0.6 * 0.4)
        self.assertAlmostEqual(prediction.passage_probability, 0.66)
        self.assertEqual(prediction.data_quality, "strong")

    def test_display_mode_keeps_illustrative_out_of_probability(self) -> None:
        prop = make_proposition(5_000, 5_000, opponents=["a"])
        excluded = build_prediction(prop, [], PredictionWeights())
        displayed = build_prediction(prop, [], PredictionWeights(illustrative_mode="display"))
        self.assertEqual(excluded.illustrative_factors, [])
        self.assertTrue(displayed.illustrative_factors)
        self.assertEqual(excluded.passage_probability, displayed.passage_probability)
        self.assertEqual([f.name for f in displayed.factors], ["campaignFinance"])

    def test_blend_mode_uses_fixed_weights(self) -> None:
        prop = make_proposition(5_000, 5_000, summary="")
        prediction = build_prediction(prop, [], PredictionWeights(illustrative_mode="blend"))
        # finance 0.5 (w .25), timing 0.6 (w .10), opposition 0.7 (w .10)
        expected = (0.5 * 0.25 + 0.6 * 0.10 + 0.7 * 0.10) / 0.45
        self.assertAlmostEqual(prediction.passage_probability, expected)
        self.assertEqual(prediction.data_quality, "moderate")
        self.assertIn("Illustrative heuristics", prediction.data_sources)

    def test_blend_requires_a_weight_for_every_kind(self) -> None:
        weights = PredictionWeights(illustrative_mode="blend")
        del weights.illustrative_weights[FactorKind.TIMING]
        with self.assertRaises(ValueError):
            build_prediction(make_proposition(5_000, 5_000), [], weights)

    def test_unknown_mode_rejected(self) -> None:
        with self.assertRaises(ValueError):
            build_prediction(make_proposition(1, 1), [], PredictionWeights(illustrative_mode="sometimes"))

    def test_probability_always_in_unit_interval(self) -> None:
        rng = random.Random(2024)
        for _ in range(500):
            support = rng.choice([0.0, rng.uniform(0, 5e7)])
            opposition = rng.choice([0.0, rng.uniform(0, 5e7)])
            passed = rng.randint(0, 6)
            failed = rng.randint(0, 6)
            prediction = build_prediction(
                make_proposition(support, opposition), make_comparisons(passed, failed), PredictionWeights()
            )
            self.assertGreaterEqual(prediction.passage_probability, 0.0)
            self.assertLessEqual(prediction.passage_probability, 1.0)
            if prediction.data_quality == "limited":
                self.assertEqual(prediction.passage_probability, 0.0)
                self.assertEqual(prediction.factors, [])

    def test_data_quality_labels(self) -> None:
        self.assertEqual(data_quality_for(0), "limited")
        self.assertEqual(data_quality_for(1), "moderate")
        self.assertEqual(data_quality_for(2), "strong")


class GeneratePredictionTests(unittest.IsolatedAsyncioTestCase):
    async def test_end_to_end_with_archive(self) -> None:
        archive = InMemoryArchive(
            [
                make_past(2022, "30", "Income Tax for Vehicles", passed=False),
                make_past(2022, "31", "Tax on Homes"),
                make_past(2020, "15", "Property Tax for Schools"),
                make_past(2018, "6", "Gas Tax Repeal"),
            ]
        )
        finder = HistoricalFinder(archive)
        prop = make_proposition(5_000_000, 3_000_000)
        prediction = await generate_prediction(prop, finder=finder, reference_year=2024)
        self.assertEqual(len(prediction.historical_comparison), 4)
        self.assertAlmostEqual(prediction.factor(FactorKind.HISTORICAL_PASS_RATE).value, 4 / 6)
        self.assertAlmostEqual(prediction.passage_probability, 0.625 * 0.6 + (4 / 6) * 0.4)
        self.assertAlmostEqual(prediction.passage_probability, 0.6418, places=3)
        self.assertEqual(prediction.data_quality, "strong")
        self.assertEqual(len(prediction.data_sources), 2)

    async def test_skip_historical(self) -> None:
        archive = InMemoryArchive([make_past(2022, str(i), "Tax on Homes") for i in range(5)])
        prediction = await generate_prediction(
            make_proposition(5_000, 5_000),
            finder=HistoricalFinder(archive),
            include_historical=False,
            reference_year=2024,
        )
        self.assertEqual(prediction.historical_comparison, [])
        self.assertEqual(prediction.data_quality, "moderate")

    async def test_upstream_failure_degrades(self) -> None:
        prediction = await generate_prediction(
            make_proposition(6_000, 4_000), finder=HistoricalFinder(_DownArchive()), reference_year=2024
        )
        self.assertEqual(prediction.data_quality, "moderate")
        self.assertAlmostEqual(prediction.passage_probability, 0.6)

    async def test_malformed_proposition_fails_fast(self) -> None:
        prop = make_proposition(1_000, 1_000)
        prop.id = ""
        with self.assertRaises(MalformedPropositionError):
            await generate_prediction(prop)


if __name__ == "__main__":
    unittest.main()
