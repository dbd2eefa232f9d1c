"""
lastcall_engine.types — TypedDict schemas for operation results
===============================================================

This module documents the exact structure of the plain dictionaries
returned by engine operations. Hosts can use these for type checking:

    from lastcall_engine import SubmitResult, RoundProgress

Use __annotations__ to inspect fields:

    >>> OperationResult.__annotations__
    {'success': <class 'bool'>, 'errors': typing.List[str]}
"""

from typing import Dict, List, Optional, TypedDict


# ============================================
# Mutation results
# ============================================

class OperationResult(TypedDict):
    """Outcome of a mutating operation.

    ``errors`` holds every problem found, so the caller can present
    them all at once. On failure no state was changed.
    """
    success: bool
    errors: List[str]


class SubmitResult(TypedDict):
    """Outcome of SubmissionStore.submit()."""
    success: bool
    submission_id: Optional[str]    # e.g., "submission_3f2a9c81d0b4"
    errors: List[str]


class BulkLockResult(TypedDict):
    """Outcome of lock_all_submissions() / unlock_all_submissions()."""
    success: bool
    errors: List[str]
    round_number: int
    count: int                      # submissions whose lock state changed


class AdjustmentResult(TypedDict):
    """Outcome of ScoreLedger.adjust_score() / revert_adjustment()."""
    success: bool
    adjustment_id: Optional[str]
    errors: List[str]


# ============================================
# Read-only snapshots
# ============================================

class RoundProgress(TypedDict):
    """Progress of one round, for display or telemetry.

    Fields
    ------
    current_round : int
        The round number described (0 if the round does not exist).
    total_rounds : int
        Number of rounds in the ledger.
    questions_answered : int
        Questions of the round present in ``answered_question_ids``.
    questions_remaining : int
        Questions of the round not yet answered.
    points_used : Dict[str, List[int]]
        participant_id -> point values spent in this round.
    is_complete : bool
    can_advance : bool
        True when the round is complete and is not the last one.
    """
    current_round: int
    total_rounds: int
    questions_answered: int
    questions_remaining: int
    points_used: Dict[str, List[int]]
    is_complete: bool
    can_advance: bool


class RoundParticipantStats(TypedDict):
    """One participant's point usage within one round."""
    points_used: List[int]
    points_remaining: List[int]
    total_points_used: int
    questions_answered: int


class ScoreDistribution(TypedDict):
    """Spread of player totals."""
    min: float
    max: float
    mean: float
    median: float
