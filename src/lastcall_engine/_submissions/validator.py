# Area: Submissions
"""
lastcall_engine._submissions.validator — Submission validation
==============================================================

Validates a submission (new or updated) against the store's policy and
the Round Ledger. Returns list of validation errors (empty if valid),
never raises, so a caller can show every problem at once.

Input checks (blank ids, blank answer, missing point value) obey
``SubmissionOptions.enable_validation``. Structural checks (round open,
question in round, point-value legality, attempt limit) always run
because the engine's invariants depend on them.
"""

from __future__ import annotations
from typing import List, Optional

from ..rules import SubmissionOptions
from .._rounds.ledger import RoundLedger
from .models import Submission


# ══════════════════════════════════════════════════════════════
# MAIN VALIDATION FUNCTIONS
# ══════════════════════════════════════════════════════════════

def validate_new_submission(
    ledger: RoundLedger,
    options: SubmissionOptions,
    question_id: str,
    participant_id: str,
    answer: str,
    point_value: Optional[int],
    round_number: int,
    round_locked: bool,
    existing: Optional[Submission],
    attempts: int,
) -> List[str]:
    """
    Validate a call to submit().

    Parameters
    ----------
    round_number : int
        The active round the submission would belong to.
    round_locked : bool
        Whether answering is closed for that round.
    existing : Submission or None
        The participant's current submission for this question.
    attempts : int
        Submits already made by the participant for this question.

    Returns
    -------
    List[str]
        Validation error messages. Empty if valid.
    """
    errors: List[str] = []

    if options.enable_validation:
        errors.extend(_check_identifiers(question_id, participant_id))
        errors.extend(_check_answer(answer, options))
        errors.extend(_check_point_value_present(point_value, options))

    round_errors = _check_round_open(ledger, round_number, round_locked)
    errors.extend(round_errors)
    if round_errors:
        return errors

    errors.extend(_check_question_in_round(ledger, question_id, round_number))

    if existing is not None:
        errors.extend(_check_attempt_limit(options, attempts))
        if existing.is_locked:
            errors.append("Cannot replace locked submission")

    if point_value is not None:
        kept_value = existing.point_value if existing is not None else None
        errors.extend(_check_point_value_legal(
            ledger, options, participant_id, point_value, round_number, kept_value,
        ))

    return errors


def validate_update(
    ledger: RoundLedger,
    options: SubmissionOptions,
    submission: Submission,
    answer: Optional[str],
    point_value: Optional[int],
) -> List[str]:
    """
    Validate a call to update_submission().

    ``answer`` / ``point_value`` set to None keep the current value.
    An update that changes neither is refused.
    A round lock only closes the round to new submissions; an unlocked
    submission stays editable.

    Returns
    -------
    List[str]
        Validation error messages. Empty if valid.
    """
    errors: List[str] = []

    if submission.is_locked:
        return ["Cannot update locked submission"]

    if (answer is None or answer == submission.answer) and (
        point_value is None or point_value == submission.point_value
    ):
        return ["No changes to update"]

    if options.enable_validation and answer is not None:
        errors.extend(_check_answer(answer, options))

    if point_value is not None:
        if options.enable_validation:
            errors.extend(_check_point_value_present(point_value, options))
        errors.extend(_check_point_value_legal(
            ledger, options, submission.participant_id, point_value,
            submission.round_number, submission.point_value,
        ))

    return errors


# ══════════════════════════════════════════════════════════════
# FIELD-LEVEL VALIDATION HELPERS
# ══════════════════════════════════════════════════════════════

def _check_identifiers(question_id: str, participant_id: str) -> List[str]:
    errors = []
    if not question_id or not question_id.strip():
        errors.append("Question ID is required")
    if not participant_id or not participant_id.strip():
        errors.append("Participant ID is required")
    return errors


def _check_answer(answer: Optional[str], options: SubmissionOptions) -> List[str]:
    if options.require_answer_text and (answer is None or not answer.strip()):
        return ["Answer is required"]
    return []


def _check_point_value_present(
    point_value: Optional[int], options: SubmissionOptions
) -> List[str]:
    if options.require_point_value_selection and (not point_value or point_value <= 0):
        return ["Point value selection is required"]
    return []


def _check_round_open(ledger: RoundLedger, round_number: int, round_locked: bool) -> List[str]:
    round_ = ledger.get_round(round_number)
    if round_ is None:
        return [f"Round {round_number} not found"]
    if round_.is_complete:
        return [f"Round {round_number} is already complete"]
    if round_locked:
        return [f"Round {round_number} is locked"]
    return []


def _check_question_in_round(ledger: RoundLedger, question_id: str, round_number: int) -> List[str]:
    if not question_id:
        return []
    round_ = ledger.get_round(round_number)
    if round_ is not None and round_.get_question(question_id) is None:
        return [f"Question '{question_id}' is not part of round {round_number}"]
    return []


def _check_attempt_limit(options: SubmissionOptions, attempts: int) -> List[str]:
    limit = options.max_submissions_per_question
    if limit > 0 and attempts >= limit:
        return [f"Maximum {limit} submission(s) allowed per question"]
    return []


def _check_point_value_legal(
    ledger: RoundLedger,
    options: SubmissionOptions,
    participant_id: str,
    point_value: int,
    round_number: int,
    kept_value: Optional[int],
) -> List[str]:
    """Value must be offered by the round and, unless duplicates are
    allowed, not spent by another of the participant's submissions."""
    available = ledger.available_point_values(round_number)
    if point_value not in available:
        return [
            f"Point value {point_value} is not valid for round {round_number} "
            f"(available: {available})"
        ]
    if options.allow_duplicate_point_values or point_value == kept_value:
        return []
    if point_value in ledger.used_point_values(participant_id, round_number):
        return [f"Point value {point_value} has already been used in round {round_number}"]
    return []
