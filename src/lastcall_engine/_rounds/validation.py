# Area: Rounds
"""
lastcall_engine._rounds.validation — Round configuration checks
===============================================================

Returns lists of problems (empty if valid). The Round Ledger turns a
non-empty list into a fatal RoundConfigurationError.
"""

from __future__ import annotations
from typing import List, Sequence, Set

from .constants import (
    LAST_CALL_ROUND_1_POINTS,
    LAST_CALL_ROUND_2_POINTS,
    LEGAL_POINT_VALUES,
)
from .models import Round, RoundType


# ══════════════════════════════════════════════════════════════
# FATAL CHECKS
# ══════════════════════════════════════════════════════════════

def find_configuration_problems(rounds: Sequence[Round]) -> List[str]:
    """
    Check a full round configuration.

    Parameters
    ----------
    rounds : Sequence[Round]
        Rounds in any order.

    Returns
    -------
    List[str]
        Problems found. Empty if the configuration is usable.
    """
    problems: List[str] = []

    if not rounds:
        problems.append("No rounds configured")
        return problems

    problems.extend(_check_contiguous_numbers(rounds))
    for round_ in sorted(rounds, key=lambda r: r.number):
        problems.extend(_check_point_values(round_))
    problems.extend(_check_unique_question_ids(rounds))

    return problems


def _check_contiguous_numbers(rounds: Sequence[Round]) -> List[str]:
    """Round numbers must be exactly 1..N."""
    numbers = sorted(r.number for r in rounds)
    for expected, actual in enumerate(numbers, start=1):
        if actual != expected:
            return [
                f"Round numbers must be sequential starting from 1. "
                f"Found {numbers}, gap or duplicate at round {expected}"
            ]
    return []


def _check_point_values(round_: Round) -> List[str]:
    """Values must exist, be unique, and lie in the legal range."""
    values = round_.available_point_values
    if not values:
        return [f"Round {round_.number} has no available point values"]

    errors = []
    seen: Set[int] = set()
    for value in values:
        if value in seen:
            errors.append(f"Duplicate point value {value} in round {round_.number}")
        seen.add(value)
        if value not in LEGAL_POINT_VALUES:
            errors.append(
                f"Invalid point value {value} in round {round_.number} "
                f"(legal: {list(LEGAL_POINT_VALUES)})"
            )
    return errors


def _check_unique_question_ids(rounds: Sequence[Round]) -> List[str]:
    """A question id identifies one question across the whole game."""
    errors = []
    seen: Set[str] = set()
    for round_ in sorted(rounds, key=lambda r: r.number):
        for question_id in round_.question_ids():
            if question_id in seen:
                errors.append(
                    f"Question id '{question_id}' appears more than once "
                    f"(round {round_.number})"
                )
            seen.add(question_id)
    return errors


# ══════════════════════════════════════════════════════════════
# SOFT CHECKS
# ══════════════════════════════════════════════════════════════

def find_format_deviations(rounds: Sequence[Round]) -> List[str]:
    """
    Compare standard rounds 1 and 2 with the Last Call format.

    Only applies when at least two standard rounds exist. Deviations
    are logged as warnings, never fatal.
    """
    standard = {r.number: r for r in rounds if r.round_type == RoundType.STANDARD}
    if len(standard) < 2:
        return []

    warnings = []
    expected = {1: LAST_CALL_ROUND_1_POINTS, 2: LAST_CALL_ROUND_2_POINTS}
    for number, points in expected.items():
        round_ = standard.get(number)
        if round_ and sorted(round_.available_point_values) != list(points):
            warnings.append(
                f"Round {number} does not follow Last Call format "
                f"(expected: {list(points)})"
            )
    return warnings
