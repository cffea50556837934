"""Candidate scoring, identity merge and route-order ranking."""

from __future__ import annotations

import math
from typing import Iterable, Optional

from roadtrip.domain.models import Candidate, ScoredCandidate

DISTANCE_DECAY_KM = 6.0
FINGERPRINT_ADDRESS_CHARS = 20


def score_place(
    rating: Optional[float],
    ratings_total: Optional[int],
    distance_km: Optional[float] = None,
    *,
    decay_km: float = DISTANCE_DECAY_KM,
) -> float:
    """rating x log-dampened popularity x proximity to the originating probe."""
    popularity = math.log10((ratings_total or 0) + 1) + 1
    proximity = 1.0 / (1.0 + distance_km / decay_km) if distance_km is not None else 1.0
    return (rating or 0.0) * popularity * proximity


def rating_near(rating: Optional[float], distance_km: float, *, decay_km: float = DISTANCE_DECAY_KM) -> float:
    """Rating weighted down by distance; used to attach lunch and lodging."""
    return (rating or 0.0) / (1.0 + distance_km / decay_km)


class CandidatePool:
    """Best-scoring candidate per place id. Equal scores keep the first seen."""

    def __init__(self) -> None:
        self._by_id: dict[str, ScoredCandidate] = {}

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, place_id: object) -> bool:
        return place_id in self._by_id

    def get(self, place_id: str) -> Optional[ScoredCandidate]:
        return self._by_id.get(place_id)

    def offer(self, candidate: Candidate, score: float) -> bool:
        """Keep ``candidate`` if it is new or beats the current score."""
        if not candidate.place_id:
            return False
        current = self._by_id.get(candidate.place_id)
        if current is not None and score <= current.score:
            return False
        self._by_id[candidate.place_id] = ScoredCandidate(**{**candidate.model_dump(), "score": score})
        return True

    def merge(self, scored: Iterable[tuple[Candidate, float]]) -> None:
        for candidate, score in scored:
            self.offer(candidate, score)

    def ordered(self) -> list[ScoredCandidate]:
        """Route order: progress ascending, then score descending."""
        return sorted(self._by_id.values(), key=lambda c: (c.progress, -c.score))


def fingerprint(candidate: Candidate) -> str:
    name = (candidate.name or "").strip()
    address = (candidate.address or "")[:FINGERPRINT_ADDRESS_CHARS]
    return f"{name}@{address}"


def dedupe_by_fingerprint(items: Iterable[ScoredCandidate]) -> list[ScoredCandidate]:
    """Drop near-duplicates (same venue under two ids); first in order wins."""
    seen: set[str] = set()
    out: list[ScoredCandidate] = []
    for item in items:
        key = fingerprint(item)
        if key in seen:
            continue
        seen.add(key)
        out.append(item)
    return out


def rank_pool(pool: CandidatePool) -> list[ScoredCandidate]:
    return dedupe_by_fingerprint(pool.ordered())
