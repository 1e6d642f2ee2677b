from __future__ import annotations

import unittest

from propcast.core.utils import (
    clamp,
    extract_keywords,
    impact_label,
    keyword_overlap,
    weighted_average,
)


class UtilsTests(unittest.TestCase):
    def test_clamp_bounds(self) -> None:
        self.assertEqual(clamp(1.5, 0.0, 1.0), 1.0)
        self.assertEqual(clamp(-0.2, 0.0, 1.0), 0.0)
        self.assertEqual(clamp(0.4, 0.0, 1.0), 0.4)

    def test_weighted_average(self) -> None:
        self.assertAlmostEqual(weighted_average([0.7, 0.6], [0.6, 0.4]), 0.66)
        with self.assertRaises(ValueError):
            weighted_average([], [])
        with self.assertRaises(ValueError):
            weighted_average([0.5], [0.0])
        with self.assertRaises(ValueError):
            weighted_average([0.5, 0.2], [1.0])

    def test_extract_keywords_drops_stop_words_and_short_tokens(self) -> None:
        words = extract_keywords("Tax on the Sale of $2 Million Homes, and Rentals")
        self.assertEqual(words, ["tax", "sale", "million", "homes", "rentals"])

    def test_keyword_overlap_uses_larger_set(self) -> None:
        self.assertAlmostEqual(keyword_overlap(["tax", "homes"], ["tax", "homes", "rent", "fee"]), 0.5)
        self.assertEqual(keyword_overlap([], []), 0.0)

    def test_impact_label(self) -> None:
        self.assertEqual(impact_label(0.6), "positive")
        self.assertEqual(impact_label(0.4), "negative")
        self.assertEqual(impact_label(0.55), "neutral")


if __name__ == "__main__":
    unittest.main()
