# Area: Rounds
"""
lastcall_engine._rounds.factory — Round configuration builders
==============================================================

Builds Round lists from plain configuration. The result still has to
pass RoundLedger construction, which performs the fatal checks.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from ..errors import RoundConfigurationError
from .constants import (
    DEFAULT_ROUND_TIME_LIMIT_SECONDS,
    LAST_CALL_ROUND_1_POINTS,
    LAST_CALL_ROUND_2_POINTS,
)
from .models import Question, Round
from .snapshot import RoundRecord, format_validation_errors


def create_last_call_rounds(
    round1_questions: Sequence[Question],
    round2_questions: Sequence[Question],
    custom_config: Optional[Sequence[Dict[str, Any]]] = None,
) -> List[Round]:
    """
    Build the canonical two-round Last Call game.

    Round 1 spends {1, 3, 5}, round 2 spends {2, 4, 6}. Entries of
    ``custom_config`` are merged over the defaults of the round at the
    same position.
    """
    defaults: List[Dict[str, Any]] = [
        {
            "number": 1,
            "round_type": "standard",
            "name": "Round 1",
            "description": "First round with point values 1, 3, 5",
            "available_point_values": list(LAST_CALL_ROUND_1_POINTS),
            "questions": list(round1_questions),
            "time_limit": DEFAULT_ROUND_TIME_LIMIT_SECONDS,
            "max_questions": len(round1_questions),
        },
        {
            "number": 2,
            "round_type": "standard",
            "name": "Round 2",
            "description": "Second round with point values 2, 4, 6",
            "available_point_values": list(LAST_CALL_ROUND_2_POINTS),
            "questions": list(round2_questions),
            "time_limit": DEFAULT_ROUND_TIME_LIMIT_SECONDS,
            "max_questions": len(round2_questions),
        },
    ]

    for index, overrides in enumerate(custom_config or []):
        if index < len(defaults):
            defaults[index] = {**defaults[index], **overrides}

    return create_custom_rounds(defaults)


def create_custom_rounds(configurations: Sequence[Dict[str, Any]]) -> List[Round]:
    """
    Build rounds from plain dictionaries.

    Raises:
        RoundConfigurationError: If an entry is malformed
    """
    rounds = []
    problems = []
    for index, config in enumerate(configurations):
        config = dict(config)
        questions = config.get("questions", [])
        config["questions"] = [
            q.to_dict() if isinstance(q, Question) else q for q in questions
        ]
        try:
            record = RoundRecord.model_validate(config)
        except ValidationError as e:
            problems.extend(
                f"rounds[{index}].{msg}" for msg in format_validation_errors(e)
            )
            continue
        rounds.append(Round.from_dict(record.model_dump()))

    if problems:
        raise RoundConfigurationError(problems)
    return rounds
