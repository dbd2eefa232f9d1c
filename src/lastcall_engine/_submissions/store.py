# Area: Submissions
"""
lastcall_engine._submissions.store — Submission Store
=====================================================

Owns one submission per (participant, question) pair and gates point
value legality through the Round Ledger. Every mutation either fully
succeeds and emits its event, or returns the reasons it was refused
and changes nothing.

Event payloads carry copies, never the stored objects:
    submission-created / submission-deleted: {"submission": Submission}
    submission-updated: {"previous": Submission, "submission": Submission}
    submission-locked / submission-unlocked: {"submission": Submission}
    round-locked / round-unlocked: {"round_number": int, "count": int}
    validation-failed: {"errors": [...], "question_id", "point_value"}
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from pydantic import ValidationError

from ..errors import SnapshotImportError
from ..rules import SubmissionOptions
from ..types import BulkLockResult, OperationResult, RoundProgress, SubmitResult
from .._rounds.ledger import RoundLedger
from .._rounds.snapshot import format_validation_errors
from .._shared.clock import current_timestamp, generate_id
from .._shared.events import EventBus, EventType
from .models import Submission
from .snapshot import SubmissionStoreSnapshot
from .validator import validate_new_submission, validate_update

logger = logging.getLogger("lastcall_engine.submissions")

PairKey = Tuple[str, str]


class SubmissionStore:
    """
    Answer submissions, their wagers and their locks.

    Attributes:
        round_ledger: Ledger consulted and updated for point values
        options: Validation policy
        event_bus: Bus receiving every submission event
    """

    def __init__(
        self,
        round_ledger: RoundLedger,
        options: Optional[SubmissionOptions] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.round_ledger = round_ledger
        self.options = options or SubmissionOptions()
        self.event_bus = event_bus or EventBus()
        # Insertion order is submission order
        self._submissions: Dict[str, Submission] = {}
        self._by_pair: Dict[PairKey, str] = {}
        self._attempts: Dict[PairKey, int] = {}
        self._locked_rounds: Set[int] = set()

    # ── Mutations ───────────────────────────────────────────────

    def submit(
        self,
        question_id: str,
        participant_id: str,
        answer: str,
        point_value: Optional[int],
    ) -> SubmitResult:
        """
        Record an answer with its wager in the current round.

        When ``max_submissions_per_question`` allows another attempt,
        submitting again for the same question replaces the existing
        unlocked submission (same id, emits submission-updated).

        Returns:
            SubmitResult with the submission id on success
        """
        round_number = self.round_ledger.current_round_number
        pair = (participant_id, question_id)
        existing = self._submissions.get(self._by_pair.get(pair, ""))
        attempts = self._attempts.get(pair, 0)

        errors = validate_new_submission(
            self.round_ledger,
            self.options,
            question_id,
            participant_id,
            answer,
            point_value,
            round_number,
            round_number in self._locked_rounds,
            existing,
            attempts,
        )
        if errors:
            logger.warning(
                f"Submission by {participant_id} for {question_id} rejected: {errors}"
            )
            self.event_bus.emit(
                EventType.VALIDATION_FAILED,
                participant_id=participant_id,
                question_id=question_id,
                payload={
                    "errors": list(errors),
                    "question_id": question_id,
                    "point_value": point_value,
                },
            )
            return SubmitResult(success=False, submission_id=None, errors=errors)

        self._attempts[pair] = attempts + 1
        if existing is not None:
            self._replace(existing, answer, point_value or 0)
            return SubmitResult(
                success=True, submission_id=existing.submission_id, errors=[]
            )

        submission = Submission(
            submission_id=generate_id("submission"),
            question_id=question_id,
            participant_id=participant_id,
            round_number=round_number,
            answer=answer or "",
            point_value=point_value or 0,
            is_locked=self.options.auto_lock_on_submission,
            submitted_at=current_timestamp(),
        )
        self._acquire(submission.participant_id, submission.point_value, round_number)
        self._submissions[submission.submission_id] = submission
        self._by_pair[pair] = submission.submission_id

        logger.info(
            f"{participant_id} submitted {question_id} for {submission.point_value} "
            f"point(s) in round {round_number}",
            extra={
                "participant_id": participant_id,
                "question_id": question_id,
                "round_number": round_number,
            },
        )
        self.event_bus.emit(
            EventType.SUBMISSION_CREATED,
            participant_id=participant_id,
            question_id=question_id,
            submission_id=submission.submission_id,
            payload={"submission": copy.copy(submission)},
        )
        return SubmitResult(
            success=True, submission_id=submission.submission_id, errors=[]
        )

    def update_submission(
        self,
        submission_id: str,
        answer: Optional[str] = None,
        point_value: Optional[int] = None,
    ) -> OperationResult:
        """
        Change the answer and/or wager of an unlocked submission.

        A new wager releases the old value and acquires the new one;
        the new value is checked first, so either both happen or neither.
        """
        submission = self._submissions.get(submission_id)
        if submission is None:
            return self._refused(f"Submission '{submission_id}' not found")

        errors = validate_update(
            self.round_ledger, self.options, submission, answer, point_value,
        )
        if errors:
            logger.warning(f"Update of {submission_id} rejected: {errors}")
            return OperationResult(success=False, errors=errors)

        self._replace(
            submission,
            submission.answer if answer is None else answer,
            submission.point_value if point_value is None else point_value,
        )
        return OperationResult(success=True, errors=[])

    def delete_submission(self, submission_id: str) -> OperationResult:
        """Remove an unlocked submission and give its wager back."""
        submission = self._submissions.get(submission_id)
        if submission is None:
            return self._refused(f"Submission '{submission_id}' not found")
        if submission.is_locked:
            return self._refused("Cannot delete locked submission")

        self._drop(submission)
        return OperationResult(success=True, errors=[])

    def discard_round(self, round_number: int) -> int:
        """
        Drop every submission of a round, locked ones included, and reopen it.

        Each dropped submission emits submission-deleted, so listeners
        (the Score Ledger) forget it too.

        Returns:
            Number of submissions dropped
        """
        dropped = self._drop_where(lambda s: s.round_number == round_number)
        self._locked_rounds.discard(round_number)
        logger.info(
            f"Discarded {dropped} submission(s) of round {round_number}",
            extra={"round_number": round_number},
        )
        return dropped

    def discard_participant(self, participant_id: str) -> int:
        """Drop every submission of one participant, locked ones included."""
        dropped = self._drop_where(lambda s: s.participant_id == participant_id)
        logger.info(
            f"Discarded {dropped} submission(s) of {participant_id}",
            extra={"participant_id": participant_id},
        )
        return dropped

    # ── Locking ─────────────────────────────────────────────────

    def lock_submission(self, submission_id: str) -> OperationResult:
        """Lock one submission. Locking a locked submission is a no-op."""
        return self._set_locked(submission_id, True)

    def unlock_submission(self, submission_id: str) -> OperationResult:
        return self._set_locked(submission_id, False)

    def lock_all_submissions(self, round_number: Optional[int] = None) -> BulkLockResult:
        """
        Lock every submission of a round and close it to new submissions.

        Args:
            round_number: Round to lock (default: current)

        Returns:
            BulkLockResult with the number of submissions newly locked
        """
        return self._set_round_locked(round_number, True)

    def unlock_all_submissions(self, round_number: Optional[int] = None) -> BulkLockResult:
        """Unlock every submission of a round and reopen it."""
        return self._set_round_locked(round_number, False)

    def is_submission_locked(self, submission_id: str) -> bool:
        submission = self._submissions.get(submission_id)
        return submission.is_locked if submission else False

    def is_round_locked(self, round_number: Optional[int] = None) -> bool:
        return self._target(round_number) in self._locked_rounds

    # ── Queries ─────────────────────────────────────────────────

    def get_submission(self, submission_id: str) -> Optional[Submission]:
        submission = self._submissions.get(submission_id)
        return copy.copy(submission) if submission else None

    def get_submission_for_question(
        self, participant_id: str, question_id: str
    ) -> Optional[Submission]:
        return self.get_submission(self._by_pair.get((participant_id, question_id), ""))

    def get_submissions_by_participant(self, participant_id: str) -> List[Submission]:
        return self._select(lambda s: s.participant_id == participant_id)

    def get_submissions_by_question(self, question_id: str) -> List[Submission]:
        return self._select(lambda s: s.question_id == question_id)

    def get_submissions_by_round(self, round_number: Optional[int] = None) -> List[Submission]:
        target = self._target(round_number)
        return self._select(lambda s: s.round_number == target)

    def get_all_submissions(self) -> List[Submission]:
        return self._select(lambda s: True)

    def participant_ids(self) -> List[str]:
        """Participants with at least one submission, in first-seen order."""
        seen: Dict[str, None] = {}
        for submission in self._submissions.values():
            seen.setdefault(submission.participant_id, None)
        return list(seen)

    def used_point_values(
        self, participant_id: str, round_number: Optional[int] = None
    ) -> List[int]:
        return self.round_ledger.used_point_values(participant_id, round_number)

    def available_point_values(
        self, participant_id: str, round_number: Optional[int] = None
    ) -> List[int]:
        """Values the participant can still wager in the round."""
        return self.round_ledger.remaining_point_values(participant_id, round_number)

    def submission_count(self, round_number: Optional[int] = None) -> int:
        """Number of submissions, in one round or (None) in all rounds."""
        if round_number is None:
            return len(self._submissions)
        return len(self.get_submissions_by_round(round_number))

    def locked_submission_count(self, round_number: Optional[int] = None) -> int:
        return sum(
            1 for s in self._submissions.values()
            if s.is_locked and (round_number is None or s.round_number == round_number)
        )

    def answered_question_ids(self, round_number: Optional[int] = None) -> Set[str]:
        """Questions of a round carrying at least one submission."""
        target = self._target(round_number)
        return {
            s.question_id for s in self._submissions.values()
            if s.round_number == target
        }

    def round_progress(self, round_number: Optional[int] = None) -> RoundProgress:
        target = self._target(round_number)
        return self.round_ledger.round_progress(target, self.answered_question_ids(target))

    # ── Round completion ────────────────────────────────────────

    def missing_submissions(
        self,
        round_number: Optional[int] = None,
        participant_ids: Optional[Iterable[str]] = None,
    ) -> List[str]:
        """
        Describe every (participant, question) of a round without a submission.

        Args:
            round_number: Round to check (default: current)
            participant_ids: Participants expected to answer (default:
                everyone who has submitted anything)

        Returns:
            One message per missing answer. Empty if none.
        """
        target = self._target(round_number)
        round_ = self.round_ledger.get_round(target)
        if round_ is None:
            return [f"Round {target} not found"]

        participants = (
            list(participant_ids) if participant_ids is not None
            else self.participant_ids()
        )
        missing = []
        for participant_id in participants:
            for question_id in round_.question_ids():
                if (participant_id, question_id) not in self._by_pair:
                    missing.append(
                        f"Participant '{participant_id}' has not answered "
                        f"question '{question_id}'"
                    )
        return missing

    def complete_round(
        self,
        round_number: Optional[int] = None,
        participant_ids: Optional[Iterable[str]] = None,
    ) -> OperationResult:
        """
        Lock a round and mark it complete in the Round Ledger.

        With ``require_all_answers`` the round only completes when
        missing_submissions() is empty.
        """
        target = self._target(round_number)
        if not self.round_ledger.has_round(target):
            return self._refused(f"Round {target} not found")

        if self.options.require_all_answers:
            missing = self.missing_submissions(target, participant_ids)
            if missing:
                logger.warning(
                    f"Round {target} not completed: {len(missing)} answer(s) missing"
                )
                return OperationResult(success=False, errors=missing)

        self.lock_all_submissions(target)
        self.round_ledger.complete_round(target)
        return OperationResult(success=True, errors=[])

    # ── Persistence ─────────────────────────────────────────────

    def reset(self) -> None:
        """Drop every submission and give back every wager."""
        for submission in list(self._submissions.values()):
            self._submissions.pop(submission.submission_id)
            self._release(submission)
        self._by_pair.clear()
        self._attempts.clear()
        self._locked_rounds.clear()
        logger.info("Submission store reset")

    def export_state(self) -> Dict[str, Any]:
        return {
            "submissions": [s.to_dict() for s in self._submissions.values()],
            "attempts": [
                {"participant_id": p, "question_id": q, "count": count}
                for (p, q), count in self._attempts.items()
            ],
            "locked_rounds": sorted(self._locked_rounds),
        }

    def import_state(self, state: Dict[str, Any]) -> None:
        """
        Replace all submissions with an exported state.

        The Round Ledger state must be imported first; its point usage
        has to account for every imported wager.

        Raises:
            SnapshotImportError: If the payload is malformed or
                inconsistent with the Round Ledger
        """
        try:
            snapshot = SubmissionStoreSnapshot.model_validate(state)
        except ValidationError as e:
            raise SnapshotImportError("submissions", format_validation_errors(e)) from e

        submissions = [Submission.from_dict(r.model_dump()) for r in snapshot.submissions]
        problems = self._import_problems(submissions, snapshot.locked_rounds)
        if problems:
            raise SnapshotImportError("submissions", problems)

        self._submissions = {s.submission_id: s for s in submissions}
        self._by_pair = {
            (s.participant_id, s.question_id): s.submission_id for s in submissions
        }
        self._attempts = {
            (a.participant_id, a.question_id): a.count for a in snapshot.attempts
        }
        for pair in self._by_pair:
            self._attempts.setdefault(pair, 1)
        self._locked_rounds = set(snapshot.locked_rounds)
        logger.info(f"Submission store state imported ({len(submissions)} submission(s))")

    # ── Internals ───────────────────────────────────────────────

    def _replace(self, submission: Submission, answer: str, point_value: int) -> None:
        previous = copy.copy(submission)
        if point_value != submission.point_value:
            self._release(submission)
            self._acquire(submission.participant_id, point_value, submission.round_number)
            submission.point_value = point_value
        submission.answer = answer
        submission.updated_at = current_timestamp()

        logger.info(f"Updated submission {submission.submission_id}")
        self.event_bus.emit(
            EventType.SUBMISSION_UPDATED,
            participant_id=submission.participant_id,
            question_id=submission.question_id,
            submission_id=submission.submission_id,
            payload={"previous": previous, "submission": copy.copy(submission)},
        )

    def _acquire(self, participant_id: str, value: int, round_number: int) -> None:
        if not value:
            return
        if self.options.allow_duplicate_point_values:
            # A repeated value is already recorded in the usage table
            if self.round_ledger.can_use_point_value(participant_id, value, round_number):
                self.round_ledger.use_point_value(participant_id, value, round_number)
            return
        self.round_ledger.use_point_value(participant_id, value, round_number)

    def _release(self, submission: Submission) -> None:
        if not submission.point_value:
            return
        if self.options.allow_duplicate_point_values and any(
            other.submission_id != submission.submission_id
            and other.participant_id == submission.participant_id
            and other.round_number == submission.round_number
            and other.point_value == submission.point_value
            for other in self._submissions.values()
        ):
            return
        self.round_ledger.release_point_value(
            submission.participant_id, submission.point_value, submission.round_number,
        )

    def _drop(self, submission: Submission) -> None:
        self._release(submission)
        del self._submissions[submission.submission_id]
        pair = (submission.participant_id, submission.question_id)
        self._by_pair.pop(pair, None)
        self._attempts.pop(pair, None)

        logger.info(
            f"Deleted submission {submission.submission_id} of "
            f"{submission.participant_id} for {submission.question_id}",
            extra={
                "participant_id": submission.participant_id,
                "question_id": submission.question_id,
                "round_number": submission.round_number,
            },
        )
        self.event_bus.emit(
            EventType.SUBMISSION_DELETED,
            participant_id=submission.participant_id,
            question_id=submission.question_id,
            submission_id=submission.submission_id,
            payload={"submission": copy.copy(submission)},
        )

    def _drop_where(self, predicate) -> int:
        doomed = [s for s in self._submissions.values() if predicate(s)]
        for submission in doomed:
            self._drop(submission)
        return len(doomed)

    def _set_locked(self, submission_id: str, locked: bool) -> OperationResult:
        submission = self._submissions.get(submission_id)
        if submission is None:
            return self._refused(f"Submission '{submission_id}' not found")
        if submission.is_locked == locked:
            return OperationResult(success=True, errors=[])

        submission.is_locked = locked
        self.event_bus.emit(
            EventType.SUBMISSION_LOCKED if locked else EventType.SUBMISSION_UNLOCKED,
            participant_id=submission.participant_id,
            question_id=submission.question_id,
            submission_id=submission_id,
            payload={"submission": copy.copy(submission)},
        )
        return OperationResult(success=True, errors=[])

    def _set_round_locked(self, round_number: Optional[int], locked: bool) -> BulkLockResult:
        target = self._target(round_number)
        if not self.round_ledger.has_round(target):
            logger.warning(f"Cannot change lock of unknown round {target}")
            return BulkLockResult(
                success=False, errors=[f"Round {target} not found"],
                round_number=target, count=0,
            )

        changed = [
            s.submission_id for s in self._submissions.values()
            if s.round_number == target and s.is_locked != locked
        ]
        for submission_id in changed:
            self._set_locked(submission_id, locked)

        if locked:
            self._locked_rounds.add(target)
        else:
            self._locked_rounds.discard(target)

        action = "Locked" if locked else "Unlocked"
        logger.info(f"{action} round {target} ({len(changed)} submission(s))")
        self.event_bus.emit(
            EventType.ROUND_LOCKED if locked else EventType.ROUND_UNLOCKED,
            payload={"round_number": target, "count": len(changed)},
        )
        return BulkLockResult(
            success=True, errors=[], round_number=target, count=len(changed),
        )

    def _import_problems(
        self, submissions: List[Submission], locked_rounds: List[int]
    ) -> List[str]:
        problems = []
        seen_ids: Set[str] = set()
        seen_pairs: Set[PairKey] = set()
        for s in submissions:
            pair = (s.participant_id, s.question_id)
            if s.submission_id in seen_ids:
                problems.append(f"duplicate submission id '{s.submission_id}'")
            if pair in seen_pairs:
                problems.append(
                    f"more than one submission for {s.participant_id} / {s.question_id}"
                )
            seen_ids.add(s.submission_id)
            seen_pairs.add(pair)

            if not self.round_ledger.has_round(s.round_number):
                problems.append(f"{s.submission_id}: unknown round {s.round_number}")
                continue
            if s.point_value and s.point_value not in self.round_ledger.used_point_values(
                s.participant_id, s.round_number
            ):
                problems.append(
                    f"{s.submission_id}: point value {s.point_value} not recorded "
                    f"as used in round {s.round_number}"
                )
        for number in locked_rounds:
            if not self.round_ledger.has_round(number):
                problems.append(f"locked_rounds: unknown round {number}")
        return problems

    def _select(self, predicate) -> List[Submission]:
        return [copy.copy(s) for s in self._submissions.values() if predicate(s)]

    def _target(self, round_number: Optional[int]) -> int:
        if round_number is None:
            return self.round_ledger.current_round_number
        return round_number

    @staticmethod
    def _refused(message: str) -> OperationResult:
        logger.warning(message)
        return OperationResult(success=False, errors=[message])
