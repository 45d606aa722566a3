"""Merge candidates from independent signals into one ranked list."""
from dataclasses import replace
from typing import Dict, Iterable, List

from movie_recommendation_service.services.signals import Candidate, CandidateType

# Applied once, on a movie's first occurrence
TYPE_WEIGHTS: Dict[str, float] = {
    CandidateType.CONTENT: 3.0,
    CandidateType.COLLABORATIVE: 2.0,
    CandidateType.TRENDING: 0.3,
}

# Share of a repeat occurrence's raw score added to the existing entry
REPEAT_BONUS = 0.5


def combine_candidates(candidates: Iterable[Candidate]) -> List[Candidate]:
    """
    Deduplicate candidates by movie id and rank them.

    The first occurrence of a movie is stored with its type weight applied;
    later occurrences add REPEAT_BONUS * their raw score. Ties keep the order
    in which movies were first seen.

    Args:
        candidates: Candidates from all signals, in signal order

    Returns:
        One candidate per movie, sorted by score descending
    """
    merged: Dict[int, Candidate] = {}

    for candidate in candidates:
        existing = merged.get(candidate.movie_id)
        if existing is not None:
            existing.score += candidate.score * REPEAT_BONUS
        else:
            weight = TYPE_WEIGHTS.get(candidate.type, 1.0)
            merged[candidate.movie_id] = replace(candidate, score=candidate.score * weight)

    return sorted(merged.values(), key=lambda c: c.score, reverse=True)
