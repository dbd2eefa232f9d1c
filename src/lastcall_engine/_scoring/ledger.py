# Area: Scoring
"""
lastcall_engine._scoring.ledger — Score Ledger
==============================================

Listens to the Submission Store, grades each created or updated
submission against the answer key, applies the scoring rules and keeps
per-participant and per-team aggregates plus a ranked leaderboard.

Totals are never incremented. After every change the affected
participant's round subtotals and total are re-summed from their
question scores and active adjustments, so replaying the same history
always reproduces the same numbers.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..errors import EngineInvariantError, SnapshotImportError
from ..rules import ScoreOptions, ScoringRules
from ..types import AdjustmentResult, OperationResult, ScoreDistribution
from .._rounds.ledger import RoundLedger
from .._rounds.snapshot import format_validation_errors
from .._shared.clock import current_timestamp, generate_id
from .._shared.events import EngineEvent, EventBus, EventType
from .._submissions.models import Submission
from .._submissions.store import SubmissionStore
from .grading import current_streak, grade_answer, is_answer_correct, round_half_up
from .leaderboard import rank_entries, score_distribution
from .models import (
    LeaderboardEntry,
    ParticipantScore,
    QuestionScore,
    ScoreAdjustment,
    ScoreUpdate,
    TeamScore,
)
from .snapshot import ScoreLedgerSnapshot

logger = logging.getLogger("lastcall_engine.scoring")


class ScoreLedger:
    """
    Grading, aggregates and leaderboards.

    Attributes:
        submission_store: Store whose events drive grading
        round_ledger: Source of questions, answer keys and point values
        scoring_rules: Effective policy (ScoreOptions toggles applied)
        options: Behaviour switches
        event_bus: Bus receiving every score event
    """

    def __init__(
        self,
        submission_store: SubmissionStore,
        round_ledger: Optional[RoundLedger] = None,
        scoring_rules: Optional[ScoringRules] = None,
        options: Optional[ScoreOptions] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.submission_store = submission_store
        self.round_ledger = round_ledger or submission_store.round_ledger
        self.options = options or ScoreOptions()
        self.scoring_rules = self.options.apply_to(scoring_rules or ScoringRules())
        self.event_bus = event_bus or submission_store.event_bus

        self._players: Dict[str, ParticipantScore] = {}
        self._teams: Dict[str, TeamScore] = {}
        self._updates: List[ScoreUpdate] = []
        self._adjustments: Dict[str, ScoreAdjustment] = {}
        self._sequence = 0

        store_bus = submission_store.event_bus
        store_bus.subscribe(EventType.SUBMISSION_CREATED, self._on_submission_changed)
        store_bus.subscribe(EventType.SUBMISSION_UPDATED, self._on_submission_changed)
        store_bus.subscribe(EventType.SUBMISSION_DELETED, self._on_submission_deleted)

    # ── Grading ─────────────────────────────────────────────────

    def process_submission_score(self, submission: Submission) -> QuestionScore:
        """
        Grade a submission and fold the result into the aggregates.

        Re-grading a question replaces its previous score.

        Args:
            submission: The submission to grade

        Returns:
            Copy of the recorded QuestionScore

        Raises:
            EngineInvariantError: If the question is not in the
                submission's round
        """
        round_ = self.round_ledger.get_round(submission.round_number)
        question = round_.get_question(submission.question_id) if round_ else None
        if question is None:
            message = (
                f"Question '{submission.question_id}' not found in round "
                f"{submission.round_number}"
            )
            logger.error(message)
            raise EngineInvariantError(message, submission_id=submission.submission_id)

        player = self._player(submission.participant_id)
        previous_total = player.total_score

        # A regrade keeps its place in answer order
        existing = player.question_scores.get(submission.question_id)
        if existing is None:
            self._sequence += 1
            sequence = self._sequence
        else:
            sequence = existing.sequence
        prior = sorted(
            (s for s in player.question_scores.values() if s.sequence < sequence),
            key=lambda s: s.sequence,
            reverse=True,
        )
        is_correct = is_answer_correct(submission.answer, question.correct_answer)
        outcome = grade_answer(
            self.scoring_rules,
            submission.point_value,
            is_correct,
            question.question_type,
            submission.round_number,
            current_streak(s.is_correct for s in prior),
        )

        score = QuestionScore(
            question_id=submission.question_id,
            submission_id=submission.submission_id,
            participant_id=submission.participant_id,
            round_number=submission.round_number,
            answer=submission.answer,
            correct_answer=question.correct_answer,
            is_correct=is_correct,
            points_awarded=outcome.points_awarded,
            points_attempted=submission.point_value,
            bonus_points=outcome.bonus_points,
            penalty_points=outcome.penalty_points,
            streak=outcome.streak,
            sequence=sequence,
            scored_at=current_timestamp(),
        )
        player.question_scores[submission.question_id] = score
        self._recompute_player(player)
        self._record_update(
            "automatic", player, previous_total, score.points_awarded,
            question_id=score.question_id,
            submission_id=score.submission_id,
            is_correct=is_correct,
        )
        logger.info(
            f"{player.participant_id} {'correct' if is_correct else 'incorrect'} "
            f"on {score.question_id}: {score.points_awarded:+d} (total {player.total_score})",
            extra={
                "participant_id": player.participant_id,
                "question_id": score.question_id,
                "round_number": score.round_number,
            },
        )

        self._emit_grading_events(player, score, previous_total)
        self._after_change(player, points_awarded=score.points_awarded)
        return copy.deepcopy(score)

    def remove_submission_score(self, submission: Submission) -> bool:
        """
        Drop the score of a deleted submission and re-sum.

        Returns:
            False if no score of that submission was recorded
        """
        player = self._players.get(submission.participant_id)
        score = player.question_scores.get(submission.question_id) if player else None
        if score is None or score.submission_id != submission.submission_id:
            return False

        previous_total = player.total_score
        del player.question_scores[submission.question_id]
        self._recompute_player(player)
        self._record_update(
            "removal", player, previous_total, -score.points_awarded,
            question_id=score.question_id,
            submission_id=score.submission_id,
        )
        logger.info(
            f"Removed score of {score.question_id} for {player.participant_id} "
            f"(total {player.total_score})",
            extra={
                "participant_id": player.participant_id,
                "question_id": score.question_id,
                "round_number": score.round_number,
            },
        )
        self.event_bus.emit(
            EventType.SCORE_UPDATED,
            participant_id=player.participant_id,
            team_id=player.team_id,
            question_id=score.question_id,
            submission_id=score.submission_id,
            payload={
                "question_score": None,
                "removed_score": copy.copy(score),
                "previous_score": previous_total,
                "new_score": player.total_score,
                "points_awarded": -score.points_awarded,
            },
        )
        self._after_change(player, points_awarded=-score.points_awarded)
        return True

    # ── Teams ───────────────────────────────────────────────────

    def assign_team(
        self, participant_id: str, team_id: str, team_name: Optional[str] = None
    ) -> OperationResult:
        """
        Put a participant in a team, leaving any previous team.

        Requires ``ScoreOptions.enable_team_scoring``.
        """
        if not self.options.enable_team_scoring:
            return self._refused("Team scoring is disabled")
        errors = []
        if not participant_id or not participant_id.strip():
            errors.append("Participant ID is required")
        if not team_id or not team_id.strip():
            errors.append("Team ID is required")
        if errors:
            logger.warning(f"Team assignment rejected: {errors}")
            return OperationResult(success=False, errors=errors)

        player = self._player(participant_id)
        team = self._teams.get(team_id)
        if team is None:
            team = TeamScore(team_id=team_id, team_name=team_name or team_id)
            self._teams[team_id] = team
        elif team_name:
            team.team_name = team_name

        if player.team_id != team_id:
            self._leave_team(player)
            team.member_ids.append(participant_id)
            player.team_id = team_id
            logger.info(f"{participant_id} joined team {team_id}")

        self._recompute_team(team)
        if self.options.auto_update_leaderboard:
            self.update_leaderboards()
        return OperationResult(success=True, errors=[])

    def remove_from_team(self, participant_id: str) -> OperationResult:
        player = self._players.get(participant_id)
        if player is None or player.team_id is None:
            return self._refused(f"Participant '{participant_id}' is not in a team")
        self._leave_team(player)
        if self.options.auto_update_leaderboard:
            self.update_leaderboards()
        return OperationResult(success=True, errors=[])

    # ── Host adjustments ────────────────────────────────────────

    def adjust_score(
        self,
        participant_id: str,
        amount: int,
        reason: str,
        adjusted_by: str,
        round_number: Optional[int] = None,
        question_id: Optional[str] = None,
    ) -> AdjustmentResult:
        """
        Add (or, when negative, subtract) points by hand.

        The adjustment joins the participant's re-summed total, and
        their round subtotal when ``round_number`` is given.

        Returns:
            AdjustmentResult with the new adjustment id
        """
        errors = []
        if not participant_id or not participant_id.strip():
            errors.append("Participant ID is required")
        if not reason or not reason.strip():
            errors.append("Adjustment reason is required")
        if amount == 0:
            errors.append("Adjustment amount must be non-zero")
        if round_number is not None and not self.round_ledger.has_round(round_number):
            errors.append(f"Round {round_number} not found")
        if errors:
            logger.warning(f"Score adjustment rejected: {errors}")
            return AdjustmentResult(success=False, adjustment_id=None, errors=errors)

        player = self._player(participant_id)
        previous_total = player.total_score
        adjustment = ScoreAdjustment(
            adjustment_id=generate_id("adjustment"),
            participant_id=participant_id,
            amount=amount,
            reason=reason,
            adjusted_by=adjusted_by,
            previous_score=previous_total,
            new_score=previous_total,
            timestamp=current_timestamp(),
            round_number=round_number,
            question_id=question_id,
        )
        self._adjustments[adjustment.adjustment_id] = adjustment
        self._recompute_player(player)
        adjustment.new_score = player.total_score
        self._record_update(
            "manual", player, previous_total, amount,
            question_id=question_id,
            adjustment_id=adjustment.adjustment_id,
        )

        logger.info(
            f"{adjusted_by} adjusted {participant_id} by {amount:+d}: {reason}",
            extra={"participant_id": participant_id},
        )
        self.event_bus.emit(
            EventType.SCORE_ADJUSTED,
            participant_id=participant_id,
            team_id=player.team_id,
            question_id=question_id,
            payload={
                "adjustment": copy.copy(adjustment),
                "previous_score": previous_total,
                "new_score": player.total_score,
            },
        )
        self._after_change(player, points_awarded=amount)
        return AdjustmentResult(
            success=True, adjustment_id=adjustment.adjustment_id, errors=[]
        )

    def revert_adjustment(
        self, adjustment_id: str, reason: str, reverted_by: str
    ) -> AdjustmentResult:
        """Cancel an adjustment; it stays in the history marked reverted."""
        adjustment = self._adjustments.get(adjustment_id)
        errors = []
        if adjustment is None:
            errors.append(f"Adjustment '{adjustment_id}' not found")
        elif adjustment.is_reverted:
            errors.append(f"Adjustment '{adjustment_id}' is already reverted")
        if not reason or not reason.strip():
            errors.append("Revert reason is required")
        if errors:
            logger.warning(f"Adjustment revert rejected: {errors}")
            return AdjustmentResult(success=False, adjustment_id=adjustment_id, errors=errors)

        player = self._player(adjustment.participant_id)
        previous_total = player.total_score
        adjustment.is_reverted = True
        adjustment.reverted_at = current_timestamp()
        adjustment.reverted_by = reverted_by
        adjustment.revert_reason = reason
        self._recompute_player(player)
        self._record_update(
            "revert", player, previous_total, -adjustment.amount,
            question_id=adjustment.question_id,
            adjustment_id=adjustment_id,
        )

        logger.info(f"{reverted_by} reverted adjustment {adjustment_id}: {reason}")
        self.event_bus.emit(
            EventType.ADJUSTMENT_REVERTED,
            participant_id=player.participant_id,
            team_id=player.team_id,
            question_id=adjustment.question_id,
            payload={
                "adjustment": copy.copy(adjustment),
                "previous_score": previous_total,
                "new_score": player.total_score,
            },
        )
        self._after_change(player, points_awarded=-adjustment.amount)
        return AdjustmentResult(success=True, adjustment_id=adjustment_id, errors=[])

    # ── Leaderboards ────────────────────────────────────────────

    def update_leaderboards(self) -> None:
        """Re-rank every participant and team and emit leaderboard-updated."""
        players = self.get_player_leaderboard()
        for entry in players:
            self._players[entry.entry_id].rank = entry.rank
        teams = self.get_team_leaderboard()
        for entry in teams:
            self._teams[entry.entry_id].rank = entry.rank

        logger.debug(f"Leaderboard rebuilt ({len(players)} player(s), {len(teams)} team(s))")
        self.event_bus.emit(
            EventType.LEADERBOARD_UPDATED,
            payload={"player_leaderboard": players, "team_leaderboard": teams},
        )

    def get_player_leaderboard(self, sort_by: str = "score") -> List[LeaderboardEntry]:
        """Freshly ranked players; see rank_entries() for orderings."""
        return rank_entries(
            [
                LeaderboardEntry(
                    entry_id=p.participant_id,
                    name=p.name,
                    score=p.total_score,
                    rank=0,
                    accuracy=p.accuracy,
                    correct_answers=p.correct_answers,
                    total_questions=p.total_questions,
                    entry_type="player",
                )
                for p in self._players.values()
            ],
            sort_by,
        )

    def get_team_leaderboard(self, sort_by: str = "score") -> List[LeaderboardEntry]:
        return rank_entries(
            [
                LeaderboardEntry(
                    entry_id=t.team_id,
                    name=t.team_name,
                    score=t.total_score,
                    rank=0,
                    accuracy=t.accuracy,
                    correct_answers=t.correct_answers,
                    total_questions=t.total_questions,
                    entry_type="team",
                )
                for t in self._teams.values()
            ],
            sort_by,
        )

    def get_top_players(self, limit: int = 10) -> List[LeaderboardEntry]:
        return self.get_player_leaderboard()[:limit]

    def get_top_teams(self, limit: int = 10) -> List[LeaderboardEntry]:
        return self.get_team_leaderboard()[:limit]

    def get_player_rank(self, participant_id: str) -> Optional[int]:
        for entry in self.get_player_leaderboard():
            if entry.entry_id == participant_id:
                return entry.rank
        return None

    def get_team_rank(self, team_id: str) -> Optional[int]:
        for entry in self.get_team_leaderboard():
            if entry.entry_id == team_id:
                return entry.rank
        return None

    # ── Queries ─────────────────────────────────────────────────

    def get_player_score(self, participant_id: str) -> Optional[ParticipantScore]:
        return copy.deepcopy(self._players.get(participant_id))

    def get_team_score(self, team_id: str) -> Optional[TeamScore]:
        return copy.deepcopy(self._teams.get(team_id))

    def get_all_player_scores(self) -> List[ParticipantScore]:
        return copy.deepcopy(list(self._players.values()))

    def get_all_team_scores(self) -> List[TeamScore]:
        return copy.deepcopy(list(self._teams.values()))

    def get_question_score(
        self, participant_id: str, question_id: str
    ) -> Optional[QuestionScore]:
        player = self._players.get(participant_id)
        score = player.question_scores.get(question_id) if player else None
        return copy.copy(score) if score else None

    def get_question_scores(self, question_id: str) -> List[QuestionScore]:
        """Scores of every participant on one question."""
        return [
            copy.copy(p.question_scores[question_id])
            for p in self._players.values()
            if question_id in p.question_scores
        ]

    def get_player_round_score(self, participant_id: str, round_number: int) -> int:
        player = self._players.get(participant_id)
        return player.round_scores.get(round_number, 0) if player else 0

    def get_score_updates(self, participant_id: Optional[str] = None) -> List[ScoreUpdate]:
        """Score history in order, optionally for one participant."""
        return [
            copy.copy(u) for u in self._updates
            if participant_id is None or u.participant_id == participant_id
        ]

    def get_adjustments(self, participant_id: Optional[str] = None) -> List[ScoreAdjustment]:
        return [
            copy.copy(a) for a in self._adjustments.values()
            if participant_id is None or a.participant_id == participant_id
        ]

    def get_average_score(self) -> float:
        distribution = self.get_score_distribution()
        return float(distribution["mean"])

    def get_score_distribution(self) -> ScoreDistribution:
        return score_distribution([p.total_score for p in self._players.values()])

    def calculate_total_possible_score(self, round_number: Optional[int] = None) -> int:
        """
        Best score reachable in a round, streak bonuses excluded.

        With exclusive point values each value is spent once, so the
        largest values are paired with the highest question-type
        multipliers. With duplicates allowed every question can carry
        the largest value.
        """
        round_ = self.round_ledger.get_round(round_number)
        if round_ is None or not round_.questions:
            return 0

        rules = self.scoring_rules
        multipliers = sorted(
            (rules.question_type_multiplier(q.question_type) for q in round_.questions),
            reverse=True,
        )
        values = sorted(round_.available_point_values, reverse=True)
        if self.submission_store.options.allow_duplicate_point_values:
            values = [values[0]] * len(multipliers)

        round_multiplier = rules.round_multiplier(round_.number)
        return sum(
            round_half_up(
                value * rules.correct_answer_multiplier * multiplier * round_multiplier
            )
            for value, multiplier in zip(values, multipliers)
        )

    # ── Persistence ─────────────────────────────────────────────

    def reset(self) -> None:
        self._players.clear()
        self._teams.clear()
        self._updates.clear()
        self._adjustments.clear()
        self._sequence = 0
        logger.info("Score ledger reset")

    def export_state(self) -> Dict[str, Any]:
        """Aggregates, question scores, adjustments and the full history."""
        return {
            "player_scores": [p.to_dict() for p in self._players.values()],
            "team_scores": [t.to_dict() for t in self._teams.values()],
            "score_updates": [u.to_dict() for u in self._updates],
            "adjustments": [a.to_dict() for a in self._adjustments.values()],
            "next_sequence": self._sequence,
        }

    def import_state(self, state: Dict[str, Any]) -> None:
        """
        Replace all scores with an exported state, verbatim.

        Raises:
            SnapshotImportError: If the payload is malformed or its
                team membership is inconsistent
        """
        try:
            snapshot = ScoreLedgerSnapshot.model_validate(state)
        except ValidationError as e:
            raise SnapshotImportError("scores", format_validation_errors(e)) from e

        players = {
            r.participant_id: ParticipantScore.from_dict(r.model_dump())
            for r in snapshot.player_scores
        }
        teams = {t.team_id: TeamScore.from_dict(t.model_dump()) for t in snapshot.team_scores}
        problems = _membership_problems(players, teams)
        problems.extend(
            f"adjustments: unknown participant '{a.participant_id}'"
            for a in snapshot.adjustments if a.participant_id not in players
        )
        if problems:
            raise SnapshotImportError("scores", problems)

        self._players = players
        self._teams = teams
        self._updates = [ScoreUpdate.from_dict(u.model_dump()) for u in snapshot.score_updates]
        self._adjustments = {
            a.adjustment_id: ScoreAdjustment.from_dict(a.model_dump())
            for a in snapshot.adjustments
        }
        self._sequence = max(
            [snapshot.next_sequence]
            + [s.sequence for p in players.values() for s in p.question_scores.values()]
        )
        logger.info(f"Score ledger state imported ({len(players)} player(s))")

    # ── Internals ───────────────────────────────────────────────

    def _on_submission_changed(self, event: EngineEvent) -> None:
        self.process_submission_score(event.payload["submission"])

    def _on_submission_deleted(self, event: EngineEvent) -> None:
        self.remove_submission_score(event.payload["submission"])

    def _player(self, participant_id: str) -> ParticipantScore:
        player = self._players.get(participant_id)
        if player is None:
            player = ParticipantScore(
                participant_id=participant_id,
                name=participant_id,
                last_updated=current_timestamp(),
            )
            self._players[participant_id] = player
        return player

    def _recompute_player(self, player: ParticipantScore) -> None:
        scores = list(player.question_scores.values())
        adjustments = [
            a for a in self._adjustments.values()
            if a.participant_id == player.participant_id and not a.is_reverted
        ]

        round_scores: Dict[int, int] = {}
        for score in scores:
            round_scores[score.round_number] = (
                round_scores.get(score.round_number, 0) + score.points_awarded
            )
        for adjustment in adjustments:
            if adjustment.round_number is not None:
                round_scores[adjustment.round_number] = (
                    round_scores.get(adjustment.round_number, 0) + adjustment.amount
                )

        player.round_scores = dict(sorted(round_scores.items()))
        player.total_score = (
            sum(s.points_awarded for s in scores) + sum(a.amount for a in adjustments)
        )
        player.correct_answers = sum(1 for s in scores if s.is_correct)
        player.incorrect_answers = len(scores) - player.correct_answers
        player.total_questions = len(scores)
        player.accuracy = (
            player.correct_answers / player.total_questions * 100
            if player.total_questions else 0.0
        )
        player.average_point_value = (
            sum(s.points_attempted for s in scores) / len(scores) if scores else 0.0
        )
        player.last_updated = current_timestamp()

    def _recompute_team(self, team: TeamScore) -> None:
        members = [self._players[m] for m in team.member_ids if m in self._players]
        attempted = [
            s.points_attempted for m in members for s in m.question_scores.values()
        ]

        round_scores: Dict[int, int] = {}
        for member in members:
            for number, subtotal in member.round_scores.items():
                round_scores[number] = round_scores.get(number, 0) + subtotal

        team.round_scores = dict(sorted(round_scores.items()))
        team.total_score = sum(m.total_score for m in members)
        team.correct_answers = sum(m.correct_answers for m in members)
        team.incorrect_answers = sum(m.incorrect_answers for m in members)
        team.total_questions = sum(m.total_questions for m in members)
        team.accuracy = (
            team.correct_answers / team.total_questions * 100
            if team.total_questions else 0.0
        )
        team.average_point_value = sum(attempted) / len(attempted) if attempted else 0.0
        team.last_updated = current_timestamp()

    def _leave_team(self, player: ParticipantScore) -> None:
        team = self._teams.get(player.team_id) if player.team_id else None
        player.team_id = None
        if team is None:
            return
        if player.participant_id in team.member_ids:
            team.member_ids.remove(player.participant_id)
        self._recompute_team(team)
        logger.info(f"{player.participant_id} left team {team.team_id}")

    def _record_update(
        self,
        kind: str,
        player: ParticipantScore,
        previous_total: int,
        points_awarded: int,
        question_id: Optional[str] = None,
        submission_id: Optional[str] = None,
        is_correct: Optional[bool] = None,
        adjustment_id: Optional[str] = None,
    ) -> None:
        self._updates.append(
            ScoreUpdate(
                update_id=generate_id("update"),
                kind=kind,
                participant_id=player.participant_id,
                previous_score=previous_total,
                new_score=player.total_score,
                points_awarded=points_awarded,
                timestamp=current_timestamp(),
                question_id=question_id,
                submission_id=submission_id,
                is_correct=is_correct,
                team_id=player.team_id,
                adjustment_id=adjustment_id,
            )
        )

    def _emit_grading_events(
        self, player: ParticipantScore, score: QuestionScore, previous_total: int
    ) -> None:
        ids = {
            "participant_id": player.participant_id,
            "team_id": player.team_id,
            "question_id": score.question_id,
            "submission_id": score.submission_id,
        }
        self.event_bus.emit(
            EventType.SCORE_UPDATED,
            payload={
                "question_score": copy.copy(score),
                "previous_score": previous_total,
                "new_score": player.total_score,
                "points_awarded": score.points_awarded,
            },
            **ids,
        )
        if score.is_correct:
            self.event_bus.emit(
                EventType.PLAYER_SCORED, payload={"question_score": copy.copy(score)}, **ids,
            )
        if score.bonus_points > 0:
            self.event_bus.emit(
                EventType.STREAK_ACHIEVED,
                payload={"streak": score.streak, "bonus_points": score.bonus_points},
                **ids,
            )
            self.event_bus.emit(
                EventType.BONUS_AWARDED,
                payload={"bonus_points": score.bonus_points, "bonus_type": "streak"},
                **ids,
            )
        if score.penalty_points > 0:
            self.event_bus.emit(
                EventType.PENALTY_APPLIED,
                payload={
                    "penalty_points": score.penalty_points,
                    "points_awarded": score.points_awarded,
                },
                **ids,
            )

    def _after_change(self, player: ParticipantScore, points_awarded: int) -> None:
        """Refresh the player's team and, if enabled, the leaderboard."""
        team = self._teams.get(player.team_id) if player.team_id else None
        if team is not None and self.options.enable_team_scoring:
            self._recompute_team(team)
            self.event_bus.emit(
                EventType.TEAM_SCORED,
                participant_id=player.participant_id,
                team_id=team.team_id,
                payload={
                    "team_score": copy.deepcopy(team),
                    "points_awarded": points_awarded,
                },
            )
        if self.options.auto_update_leaderboard:
            self.update_leaderboards()

    @staticmethod
    def _refused(message: str) -> OperationResult:
        logger.warning(message)
        return OperationResult(success=False, errors=[message])


def _membership_problems(
    players: Dict[str, ParticipantScore], teams: Dict[str, TeamScore]
) -> List[str]:
    """Each team member must exist and name that team back."""
    problems = []
    for team in teams.values():
        for member_id in team.member_ids:
            player = players.get(member_id)
            if player is None:
                problems.append(f"team {team.team_id}: unknown member '{member_id}'")
            elif player.team_id != team.team_id:
                problems.append(
                    f"team {team.team_id}: member '{member_id}' belongs to {player.team_id}"
                )
    for player in players.values():
        if player.team_id is not None and player.team_id not in teams:
            problems.append(
                f"player {player.participant_id}: unknown team '{player.team_id}'"
            )
    return problems
