# Area: Scoring
"""
Score Ledger - grading, aggregates, and leaderboards.

This package handles:
- Grading submissions against the answer key
- Multipliers, streak bonus and incorrect-answer penalty
- Participant and team aggregates, host adjustments
- Leaderboard ranking and score state export/import
"""

from .models import (
    LeaderboardEntry,
    ParticipantScore,
    QuestionScore,
    ScoreAdjustment,
    ScoreUpdate,
    TeamScore,
)
from .grading import (
    GradeOutcome,
    current_streak,
    grade_answer,
    is_answer_correct,
    normalize_answer,
    round_half_up,
)
from .leaderboard import rank_entries, score_distribution
from .ledger import ScoreLedger

__all__ = [
    "LeaderboardEntry",
    "ParticipantScore",
    "QuestionScore",
    "ScoreAdjustment",
    "ScoreUpdate",
    "TeamScore",
    "GradeOutcome",
    "current_streak",
    "grade_answer",
    "is_answer_correct",
    "normalize_answer",
    "round_half_up",
    "rank_entries",
    "score_distribution",
    "ScoreLedger",
]
