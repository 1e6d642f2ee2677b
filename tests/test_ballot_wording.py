from __future__ import annotations

import unittest

from propcast.core.ballot_wording import (
    analyze_ballot_wording,
    complexity_for,
    count_syllables,
    extract_key_phrases,
    readability_score,
    sentiment_score,
)


class BallotWordingTests(unittest.TestCase):
    def test_sentiment_word_lists(self) -> None:
        self.assertEqual(sentiment_score("Protect clean water"), 1.0)
        self.assertEqual(sentiment_score("New tax and fee"), -1.0)
        self.assertEqual(sentiment_score("Nothing relevant here"), 0.0)

    def test_complexity_thresholds(self) -> None:
        self.assertEqual(complexity_for(60), "simple")
        self.assertEqual(complexity_for(59.9), "moderate")
        self.assertEqual(complexity_for(40), "moderate")
        self.assertEqual(complexity_for(39.9), "complex")

    def test_short_sentences_read_easily(self) -> None:
        self.assertEqual(readability_score("The cat sat. The dog ran."), 100.0)
        self.assertEqual(count_syllables("make"), 1)
        self.assertEqual(count_syllables("water"), 2)

    def test_key_phrases(self) -> None:
        text = "Authorizes $10 billion in bonds. Requires voter approval and a constitutional amendment."
        phrases = extract_key_phrases(text)
        self.assertIn("authorizes $10 billion", phrases)
        self.assertIn("voter approval", phrases)
        self.assertIn("constitutional amendment", phrases)
        self.assertEqual(len(phrases), len(set(phrases)))

    def test_analysis_prefers_full_text(self) -> None:
        analysis = analyze_ballot_wording(
            "Protect Schools",
            "Short summary.",
            full_text="One two three four five six.",
            proposition_id="2024-1",
        )
        self.assertEqual(analysis.word_count, 6)
        self.assertEqual(analysis.proposition_id, "2024-1")
        self.assertGreaterEqual(analysis.readability_score, 0)
        self.assertLessEqual(analysis.readability_score, 100)
        self.assertGreater(analysis.sentiment_score, 0)


if __name__ == "__main__":
    unittest.main()
