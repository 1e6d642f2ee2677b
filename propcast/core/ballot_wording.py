from __future__ import annotations

import re

from propcast.core.schemas import BallotWordingAnalysis
from propcast.core.utils import clamp


POSITIVE_WORDS = (
    "protect", "improve", "benefit", "support", "help", "ensure",
    "provide", "fund", "create", "invest", "strengthen", "safe",
    "clean", "affordable", "fair", "equal", "right", "freedom",
)
NEGATIVE_WORDS = (
    "tax", "fee", "cost", "burden", "restrict", "limit", "ban",
    "eliminate", "reduce", "cut", "penalty", "fine", "mandate",
    "require", "force", "risk", "danger", "threat",
)
NEUTRAL_WORDS = (
    "amend", "change", "modify", "establish", "authorize", "allow",
    "permit", "regulate", "determine", "define",
)

KEY_PHRASE_PATTERNS = [
    re.compile(r"authoriz\w* \$?[\d,.]+ (?:billion|million)", re.IGNORECASE),
    re.compile(r"\d+(?:\.\d+)?%"),
    re.compile(r"constitutional amendment", re.IGNORECASE),
    re.compile(r"bond (?:measure|act)", re.IGNORECASE),
    re.compile(r"tax (?:increase|decrease|on)", re.IGNORECASE),
    re.compile(r"minimum wage", re.IGNORECASE),
    re.compile(r"voter approval", re.IGNORECASE),
    re.compile(r"state legislature", re.IGNORECASE),
    re.compile(r"local government", re.IGNORECASE),
    re.compile(r"general fund", re.IGNORECASE),
]
CAPITALIZED_PHRASE = re.compile(r"[A-Z][a-z]+(?: [A-Z][a-z]+)+")

MAX_KEY_PHRASES = 10


def count_syllables(text: str) -> int:
    total = 0
    for word in text.lower().split():
        cleaned = re.sub(r"[^a-z]", "", word)
        if not cleaned:
            continue
        syllables = len(re.findall(r"[aeiouy]+", cleaned))
        # Silent trailing e.
        if cleaned.endswith("e") and syllables > 1:
            syllables -= 1
        total += max(1, syllables)
    return total


def readability_score(text: str) -> float:
    """Flesch reading ease, clamped to 0..100 (higher is easier)."""
    words = text.split()
    sentences = [s for s in re.split(r"[.!?]+", text) if s.strip()]
    avg_sentence_length = len(words) / max(len(sentences), 1)
    avg_syllables = count_syllables(text) / max(len(words), 1)
    return clamp(206.835 - 1.015 * avg_sentence_length - 84.6 * avg_syllables, 0.0, 100.0)


def sentiment_score(text: str) -> float:
    positive = negative = neutral = 0
    for word in text.lower().split():
        if any(w in word for w in POSITIVE_WORDS):
            positive += 1
        if any(w in word for w in NEGATIVE_WORDS):
            negative += 1
        if any(w in word for w in NEUTRAL_WORDS):
            neutral += 1
    total = positive + negative + neutral
    if total == 0:
        return 0.0
    return (positive - negative) / total


def complexity_for(readability: float) -> str:
    if readability >= 60:
        return "simple"
    if readability < 40:
        return "complex"
    return "moderate"


def extract_key_phrases(text: str) -> list[str]:
    phrases: list[str] = []
    for pattern in KEY_PHRASE_PATTERNS:
        phrases.extend(m.group(0).lower() for m in pattern.finditer(text))
    phrases.extend(CAPITALIZED_PHRASE.findall(text)[:3])
    return list(dict.fromkeys(phrases))[:MAX_KEY_PHRASES]


def analyze_ballot_wording(
    title: str,
    summary: str,
    full_text: str | None = None,
    proposition_id: str = "",
) -> BallotWordingAnalysis:
    text = full_text or summary or ""
    readability = readability_score(text)
    return BallotWordingAnalysis(
        proposition_id=proposition_id,
        word_count=len(text.split()),
        readability_score=round(readability),
        sentiment_score=round(sentiment_score(f"{title} {summary}"), 2),
        complexity=complexity_for(readability),
        key_phrases=tuple(extract_key_phrases(text)),
    )
