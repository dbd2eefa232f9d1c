# Area: Rounds
"""
lastcall_engine._rounds.ledger — Round Ledger
=============================================

Owns the ordered rounds, each round's spendable point values, and
per-participant consumption of those values. Pure bookkeeping: it
knows nothing about answers or scores.

Every ``round_number`` argument defaults to the current round.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from pydantic import ValidationError

from ..errors import RoundConfigurationError, SnapshotImportError
from ..types import RoundParticipantStats, RoundProgress
from .._shared.clock import current_timestamp, parse_timestamp
from .models import Round
from .point_usage import PointUsageTable
from .snapshot import RoundLedgerSnapshot, format_validation_errors
from .validation import find_configuration_problems, find_format_deviations

logger = logging.getLogger("lastcall_engine.rounds")


class RoundLedger:
    """
    Round configuration, progression and point-value consumption.

    Construction validates the configuration and raises
    RoundConfigurationError on any problem: round numbers not
    contiguous from 1, a round without point values, duplicate or
    out-of-range point values, or a question id used twice.

    Attributes:
        current_round_number: Number of the active round
        total_rounds: Number of configured rounds
    """

    def __init__(self, rounds: Sequence[Round]):
        """
        Initialize the ledger with its own copy of the rounds.

        Args:
            rounds: Round configuration, in any order

        Raises:
            RoundConfigurationError: If the configuration is unusable
        """
        self._rounds: List[Round] = self._validated(
            [copy.deepcopy(r) for r in rounds]
        )
        self._current_index = 0
        self._usage = PointUsageTable()
        self._start_times: Dict[int, str] = {}
        self._end_times: Dict[int, str] = {}
        logger.info(f"Round ledger ready with {len(self._rounds)} round(s)")

    # ── Round access ────────────────────────────────────────────

    @property
    def current_round_number(self) -> int:
        return self._rounds[self._current_index].number

    @property
    def total_rounds(self) -> int:
        return len(self._rounds)

    def get_round(self, round_number: Optional[int] = None) -> Optional[Round]:
        """Return a copy of a round, or None if it does not exist."""
        round_ = self._find(round_number)
        return copy.deepcopy(round_) if round_ else None

    def get_current_round(self) -> Round:
        return copy.deepcopy(self._rounds[self._current_index])

    def all_rounds(self) -> List[Round]:
        return copy.deepcopy(self._rounds)

    def has_round(self, round_number: int) -> bool:
        return self._find(round_number) is not None

    def is_last_round(self) -> bool:
        return self._current_index >= len(self._rounds) - 1

    def find_question_round(self, question_id: str) -> Optional[int]:
        """Number of the round containing a question, or None."""
        for round_ in self._rounds:
            if round_.get_question(question_id) is not None:
                return round_.number
        return None

    # ── Point values ────────────────────────────────────────────

    def available_point_values(self, round_number: Optional[int] = None) -> List[int]:
        """Configured legal values of a round, in configured order."""
        round_ = self._find(round_number)
        return list(round_.available_point_values) if round_ else []

    def used_point_values(
        self, participant_id: str, round_number: Optional[int] = None
    ) -> List[int]:
        """Values the participant already spent in the round."""
        return self._usage.used(participant_id, self._target(round_number))

    def remaining_point_values(
        self, participant_id: str, round_number: Optional[int] = None
    ) -> List[int]:
        """Available minus used, in configured order."""
        target = self._target(round_number)
        used = self._usage.used(participant_id, target)
        return [v for v in self.available_point_values(target) if v not in used]

    def can_use_point_value(
        self, participant_id: str, value: int, round_number: Optional[int] = None
    ) -> bool:
        """True iff the value is offered by the round and not yet spent."""
        target = self._target(round_number)
        round_ = self._find(target)
        if round_ is None or value not in round_.available_point_values:
            return False
        return not self._usage.is_used(participant_id, target, value)

    def use_point_value(
        self, participant_id: str, value: int, round_number: Optional[int] = None
    ) -> bool:
        """
        Mark a value as spent.

        Returns:
            True on success; False (nothing changed) if the value
            cannot be used
        """
        target = self._target(round_number)
        if not self.can_use_point_value(participant_id, value, target):
            return False
        self._usage.mark(participant_id, target, value)
        logger.debug(f"{participant_id} spent {value} in round {target}")
        return True

    def release_point_value(
        self, participant_id: str, value: int, round_number: Optional[int] = None
    ) -> bool:
        """
        Return a spent value to the participant's pool.

        Returns:
            False if the value was not marked used
        """
        target = self._target(round_number)
        released = self._usage.release(participant_id, target, value)
        if released:
            logger.debug(f"{participant_id} released {value} in round {target}")
        return released

    def validate_point_selection(
        self, participant_id: str, value: int, round_number: Optional[int] = None
    ) -> List[str]:
        """
        Explain why a value cannot be spent.

        Returns:
            List of error messages. Empty if the value can be used.
        """
        target = self._target(round_number)
        round_ = self._find(target)
        if round_ is None:
            return [f"Round {target} not found"]
        if value not in round_.available_point_values:
            return [
                f"Point value {value} not available in round {target} "
                f"(available: {round_.available_point_values})"
            ]
        if self._usage.is_used(participant_id, target, value):
            return [
                f"Point value {value} already used in round {target} "
                f"(remaining: {self.remaining_point_values(participant_id, target)})"
            ]
        return []

    # ── Lifecycle ───────────────────────────────────────────────

    def validate_round_start(self, round_number: Optional[int] = None) -> List[str]:
        """Problems preventing a round from starting. Empty if none."""
        target = self._target(round_number)
        round_ = self._find(target)
        if round_ is None:
            return [f"Round {target} not found"]
        errors = []
        if not round_.questions:
            errors.append(f"Round {target} has no questions")
        if round_.is_complete:
            errors.append(f"Round {target} is already complete")
        return errors

    def start_round(self, round_number: Optional[int] = None) -> bool:
        """Record the start time of a round with questions that is not complete."""
        target = self._target(round_number)
        problems = self.validate_round_start(target)
        if problems:
            logger.warning(f"Cannot start round {target}: {problems}")
            return False

        timestamp = current_timestamp()
        self._start_times[target] = timestamp
        self._find(target).started_at = timestamp
        logger.info(f"Round {target} started", extra={"round_number": target})
        return True

    def complete_round(self, round_number: Optional[int] = None) -> bool:
        """Mark a round complete. Completing a complete round is a no-op."""
        target = self._target(round_number)
        round_ = self._find(target)
        if round_ is None:
            logger.warning(f"Cannot complete unknown round {target}")
            return False
        if round_.is_complete:
            return True

        timestamp = current_timestamp()
        round_.is_complete = True
        round_.completed_at = timestamp
        self._end_times[target] = timestamp
        logger.info(f"Round {target} completed", extra={"round_number": target})
        return True

    def advance_to_next_round(self) -> bool:
        """Complete the current round if needed and move to the next one."""
        if self.is_last_round():
            logger.warning("Cannot advance past the last round")
            return False
        self.complete_round()
        self._current_index += 1
        logger.info(f"Advanced to round {self.current_round_number}")
        return True

    def go_to_previous_round(self) -> bool:
        if self._current_index <= 0:
            return False
        self._current_index -= 1
        logger.info(f"Moved back to round {self.current_round_number}")
        return True

    def go_to_round(self, round_number: int) -> bool:
        for index, round_ in enumerate(self._rounds):
            if round_.number == round_number:
                self._current_index = index
                logger.info(f"Moved to round {round_number}")
                return True
        return False

    def reset_round(self, round_number: int) -> bool:
        """
        Clear completion, timing and point usage of one round.

        Submissions are not touched; TriviaEngine.reset_round() drops
        them together with their scores.
        """
        round_ = self._find(round_number)
        if round_ is None:
            return False
        round_.reset_progress()
        self._start_times.pop(round_number, None)
        self._end_times.pop(round_number, None)
        self._usage.clear_round(round_number)
        logger.info(f"Round {round_number} reset", extra={"round_number": round_number})
        return True

    def reset_all_rounds(self) -> None:
        for round_ in self._rounds:
            round_.reset_progress()
        self._current_index = 0
        self._usage.clear()
        self._start_times.clear()
        self._end_times.clear()
        logger.info("All rounds reset")

    def clear_participant(self, participant_id: str) -> None:
        """Forget every value a participant spent, in all rounds."""
        self._usage.clear_participant(participant_id)

    # ── Progress and statistics ─────────────────────────────────

    def round_progress(
        self,
        round_number: Optional[int] = None,
        answered_question_ids: Optional[Iterable[str]] = None,
    ) -> RoundProgress:
        """
        Read-only snapshot of one round.

        Args:
            round_number: Round to describe (default: current)
            answered_question_ids: Questions that carry at least one
                submission; the ledger itself does not track answers

        Returns:
            RoundProgress dictionary
        """
        target = self._target(round_number)
        round_ = self._find(target)
        if round_ is None:
            return RoundProgress(
                current_round=0,
                total_rounds=len(self._rounds),
                questions_answered=0,
                questions_remaining=0,
                points_used={},
                is_complete=False,
                can_advance=False,
            )

        answered = set(answered_question_ids or ())
        answered_count = sum(1 for qid in round_.question_ids() if qid in answered)
        is_last = round_.number == self._rounds[-1].number
        return RoundProgress(
            current_round=target,
            total_rounds=len(self._rounds),
            questions_answered=answered_count,
            questions_remaining=len(round_.questions) - answered_count,
            points_used=self._usage.by_round(target),
            is_complete=round_.is_complete,
            can_advance=round_.is_complete and not is_last,
        )

    def all_round_progress(self) -> List[RoundProgress]:
        return [self.round_progress(r.number) for r in self._rounds]

    def participant_round_stats(self, participant_id: str) -> Dict[int, RoundParticipantStats]:
        """Per-round usage summary for one participant."""
        stats: Dict[int, RoundParticipantStats] = {}
        for round_ in self._rounds:
            used = self._usage.used(participant_id, round_.number)
            stats[round_.number] = RoundParticipantStats(
                points_used=used,
                points_remaining=self.remaining_point_values(participant_id, round_.number),
                total_points_used=sum(used),
                questions_answered=len(used),
            )
        return stats

    def round_duration(self, round_number: int) -> Optional[float]:
        """Seconds between start and completion, or None if either is missing."""
        started = parse_timestamp(self._start_times.get(round_number))
        ended = parse_timestamp(self._end_times.get(round_number))
        if started is None or ended is None:
            return None
        return (ended - started).total_seconds()

    # ── Persistence ─────────────────────────────────────────────

    def export_state(self) -> Dict[str, Any]:
        """Plain, serializable copy of the full ledger state."""
        return {
            "rounds": [r.to_dict() for r in self._rounds],
            "current_round_index": self._current_index,
            "point_usage": self._usage.to_dict(),
            "round_start_times": dict(self._start_times),
            "round_end_times": dict(self._end_times),
        }

    def import_state(self, state: Dict[str, Any]) -> None:
        """
        Replace the ledger state with an exported one.

        Raises:
            SnapshotImportError: If the payload is malformed or breaks
                a point-usage invariant
            RoundConfigurationError: If the contained rounds are invalid
        """
        try:
            snapshot = RoundLedgerSnapshot.model_validate(state)
        except ValidationError as e:
            raise SnapshotImportError("rounds", format_validation_errors(e)) from e

        rounds = self._validated(
            [Round.from_dict(record.model_dump()) for record in snapshot.rounds]
        )
        problems = []
        if snapshot.current_round_index >= len(rounds):
            problems.append(
                f"current_round_index {snapshot.current_round_index} out of range"
            )
        usage = PointUsageTable.from_dict(snapshot.point_usage)
        problems.extend(_usage_problems(rounds, snapshot.point_usage))
        if problems:
            raise SnapshotImportError("rounds", problems)

        self._rounds = rounds
        self._current_index = snapshot.current_round_index
        self._usage = usage
        self._start_times = dict(snapshot.round_start_times)
        self._end_times = dict(snapshot.round_end_times)
        logger.info(f"Round ledger state imported ({len(rounds)} round(s))")

    # ── Internals ───────────────────────────────────────────────

    def _target(self, round_number: Optional[int]) -> int:
        return self.current_round_number if round_number is None else round_number

    def _find(self, round_number: Optional[int]) -> Optional[Round]:
        target = self._target(round_number)
        # Contiguous from 1, so the number is the index + 1
        if 1 <= target <= len(self._rounds):
            return self._rounds[target - 1]
        return None

    @staticmethod
    def _validated(rounds: List[Round]) -> List[Round]:
        problems = find_configuration_problems(rounds)
        if problems:
            error = RoundConfigurationError(problems)
            logger.error(error.format_error_log())
            raise error
        for warning in find_format_deviations(rounds):
            logger.warning(warning)
        return sorted(rounds, key=lambda r: r.number)


def _usage_problems(
    rounds: List[Round], point_usage: Dict[str, Dict[int, List[int]]]
) -> List[str]:
    """Imported usage must only hold unique values offered by each round."""
    offered = {r.number: set(r.available_point_values) for r in rounds}
    problems = []
    for participant_id, per_round in point_usage.items():
        for round_number, values in per_round.items():
            if round_number not in offered:
                problems.append(
                    f"point_usage.{participant_id}: unknown round {round_number}"
                )
                continue
            if len(set(values)) != len(values):
                problems.append(
                    f"point_usage.{participant_id}.{round_number}: duplicate values {values}"
                )
            illegal = [v for v in values if v not in offered[round_number]]
            if illegal:
                problems.append(
                    f"point_usage.{participant_id}.{round_number}: values {illegal} "
                    f"not available in round {round_number}"
                )
    return problems
