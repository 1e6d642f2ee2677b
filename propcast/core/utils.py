from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone
from typing import Iterable, Sequence


STOP_WORDS = frozenset(
    {
        "a", "an", "the", "and", "or", "but", "for", "to", "of", "in", "on", "at",
        "by", "from", "with", "as", "is", "was", "are", "be", "been", "being",
        "that", "this", "it", "its", "not", "no", "all", "any", "each", "which",
    }
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()


def from_iso(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def new_id() -> str:
    return uuid.uuid4().hex[:12]


def clamp(value: float, low: float, high: float) -> float:
    return min(max(float(value), low), high)


def weighted_average(values: Sequence[float], weights: Sequence[float]) -> float:
    if len(values) != len(weights) or not values:
        raise ValueError("values and weights must have the same non-zero length")
    total_weight = sum(weights)
    if total_weight == 0:
        raise ValueError("total weight cannot be zero")
    return sum(v * w for v, w in zip(values, weights)) / total_weight


def impact_label(value: float, upper: float = 0.55, lower: float = 0.45) -> str:
    if value > upper:
        return "positive"
    if value < lower:
        return "negative"
    return "neutral"


def extract_keywords(title: str) -> list[str]:
    cleaned = re.sub(r"[^a-z\s]", "", (title or "").lower())
    return [w for w in cleaned.split() if len(w) > 2 and w not in STOP_WORDS]


def keyword_overlap(a: Iterable[str], b: Iterable[str]) -> float:
    """Share of keywords in common, relative to the larger keyword set."""
    set_a = set(a)
    set_b = set(b)
    denominator = max(len(set_a), len(set_b), 1)
    return len(set_a & set_b) / denominator
