# Area: Scoring
"""
lastcall_engine._scoring.leaderboard — Ranking and score statistics
===================================================================

Leaderboards are rebuilt from scratch on every call: sort, then assign
ranks 1..N with no gaps. Tied entries get distinct sequential ranks;
among full ties the earlier-registered entry stays ahead (stable sort).
"""

from __future__ import annotations

import statistics
from typing import Callable, Dict, List, Sequence, Tuple

from ..types import ScoreDistribution
from .models import LeaderboardEntry

SortKey = Callable[[LeaderboardEntry], Tuple[float, ...]]

SORT_KEYS: Dict[str, SortKey] = {
    "score": lambda e: (-e.score, -e.accuracy),
    "accuracy": lambda e: (-e.accuracy, -e.score),
    "correct_answers": lambda e: (-e.correct_answers, -e.score, -e.accuracy),
}


def rank_entries(
    entries: Sequence[LeaderboardEntry], sort_by: str = "score"
) -> List[LeaderboardEntry]:
    """
    Order entries and assign ranks.

    Args:
        entries: Unranked entries in registration order
        sort_by: "score" (score desc, then accuracy desc), "accuracy"
            or "correct_answers"

    Returns:
        New list, ranked 1..N

    Raises:
        ValueError: If sort_by is not a known ordering
    """
    if sort_by not in SORT_KEYS:
        raise ValueError(
            f"Unknown leaderboard ordering '{sort_by}' (expected one of {sorted(SORT_KEYS)})"
        )
    ranked = sorted(entries, key=SORT_KEYS[sort_by])
    for index, entry in enumerate(ranked):
        entry.rank = index + 1
    return ranked


def score_distribution(scores: Sequence[float]) -> ScoreDistribution:
    """Min, max, mean and median of a set of totals; all zero when empty."""
    if not scores:
        return ScoreDistribution(min=0, max=0, mean=0, median=0)
    return ScoreDistribution(
        min=min(scores),
        max=max(scores),
        mean=statistics.mean(scores),
        median=statistics.median(scores),
    )
