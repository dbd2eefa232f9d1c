# Area: Scoring
"""
lastcall_engine._scoring.grading — Answer grading and point arithmetic
======================================================================

Pure functions: no state, no events. The Score Ledger feeds them the
question, the wager and the participant's prior graded answers.
"""

from __future__ import annotations

import math
from typing import Iterable, NamedTuple

from ..rules import ScoringRules


class GradeOutcome(NamedTuple):
    """Points produced by grading one answer."""
    points_awarded: int
    bonus_points: int
    penalty_points: float
    streak: int


def normalize_answer(answer: str) -> str:
    """Trim surrounding whitespace and case-fold."""
    return (answer or "").strip().casefold()


def is_answer_correct(submitted: str, correct: str) -> bool:
    """Exact match after normalization. No partial credit."""
    return normalize_answer(submitted) == normalize_answer(correct)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def current_streak(prior_results: Iterable[bool]) -> int:
    """
    Count consecutive correct answers.

    Args:
        prior_results: Correctness of earlier graded answers, most recent first

    Returns:
        Length of the leading run of True values
    """
    streak = 0
    for correct in prior_results:
        if not correct:
            break
        streak += 1
    return streak


def grade_answer(
    rules: ScoringRules,
    point_value: int,
    is_correct: bool,
    question_type: str,
    round_number: int,
    prior_streak: int,
) -> GradeOutcome:
    """
    Apply the scoring rules to one answer.

    Correct answers earn the wager times the correct-answer, question-type
    and round multipliers, plus the streak bonus once the run of correct
    answers (this one included) reaches the threshold. Incorrect answers
    lose ``incorrect_answer_penalty`` of the wager. The time bonus is not
    applied: the engine captures no per-answer timing.

    Args:
        rules: Scoring policy
        point_value: Wagered value
        is_correct: Grading result
        question_type: Tag for the question-type multiplier
        round_number: Round for the round multiplier
        prior_streak: Consecutive correct answers before this one

    Returns:
        GradeOutcome with integer points_awarded
    """
    if not is_correct:
        penalty = point_value * rules.incorrect_answer_penalty
        return GradeOutcome(
            points_awarded=round_half_up(-penalty),
            bonus_points=0,
            penalty_points=penalty,
            streak=0,
        )

    streak = prior_streak + 1
    points = (
        point_value
        * rules.correct_answer_multiplier
        * rules.question_type_multiplier(question_type)
        * rules.round_multiplier(round_number)
    )
    bonus = 0
    if rules.streak_bonus and streak >= rules.streak_bonus_threshold:
        bonus = rules.streak_bonus_points

    return GradeOutcome(
        points_awarded=round_half_up(points + bonus),
        bonus_points=bonus,
        penalty_points=0.0,
        streak=streak,
    )
