# Area: Engine
"""
lastcall_engine.engine — TriviaEngine facade
============================================

Wires the Round Ledger, Submission Store and Score Ledger to one shared
event bus. Hosts may use the components directly through the
``rounds`` / ``submissions`` / ``scores`` attributes; the facade adds
round completion, advancement, resets and whole-engine snapshots.

Example:
    from lastcall_engine import EventType, Question, TriviaEngine, create_last_call_rounds

    engine = TriviaEngine(create_last_call_rounds(
        [Question("q1", "Paris"), Question("q2", "Blue"), Question("q3", "7")],
        [Question("q4", "Mars"), Question("q5", "1969"), Question("q6", "Oak")],
    ))
    engine.subscribe(EventType.LEADERBOARD_UPDATED, refresh_display)
    engine.submissions.submit("q1", "alice", "paris", 5)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional, Sequence

from .errors import RoundConfigurationError, SnapshotImportError
from .rules import ScoreOptions, ScoringRules, SubmissionOptions
from .types import OperationResult
from ._rounds.factory import create_custom_rounds, create_last_call_rounds
from ._rounds.ledger import RoundLedger
from ._rounds.models import Question, Round
from ._scoring.ledger import ScoreLedger
from ._shared.events import EventBus, EventListener, EventType
from ._submissions.store import SubmissionStore

logger = logging.getLogger("lastcall_engine.engine")

SNAPSHOT_SECTIONS = ("rounds", "submissions", "scores")


class TriviaEngine:
    """
    One game's round, submission and score state.

    Not thread-safe: the host must serialize every call.

    Attributes:
        event_bus: Bus shared by all components
        rounds: RoundLedger
        submissions: SubmissionStore
        scores: ScoreLedger
    """

    def __init__(
        self,
        rounds: Sequence[Round],
        scoring_rules: Optional[ScoringRules] = None,
        submission_options: Optional[SubmissionOptions] = None,
        score_options: Optional[ScoreOptions] = None,
        event_bus: Optional[EventBus] = None,
    ):
        """
        Build and wire the three components.

        Raises:
            RoundConfigurationError: If the rounds are unusable
        """
        self.event_bus = event_bus or EventBus()
        self.rounds = RoundLedger(rounds)
        self.submissions = SubmissionStore(self.rounds, submission_options, self.event_bus)
        self.scores = ScoreLedger(
            self.submissions, self.rounds, scoring_rules, score_options, self.event_bus,
        )
        logger.info(f"Engine ready with {self.rounds.total_rounds} round(s)")

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "TriviaEngine":
        """
        Build an engine from a load_engine_config() dict.

        Rounds come from ``rounds`` (custom) or ``last_call`` (the
        canonical two-round format).

        Raises:
            RoundConfigurationError: If no usable rounds are configured
            pydantic.ValidationError: If an options section is invalid
        """
        if "rounds" in config:
            rounds = create_custom_rounds(config["rounds"])
        elif "last_call" in config:
            last_call = config["last_call"]
            rounds = create_last_call_rounds(
                [Question.from_dict(q) for q in last_call.get("round1_questions", [])],
                [Question.from_dict(q) for q in last_call.get("round2_questions", [])],
                last_call.get("custom_config"),
            )
        else:
            raise RoundConfigurationError(["No rounds configured"])

        log_level = config.get("log_level")
        if log_level:
            logging.getLogger("lastcall_engine").setLevel(log_level)

        return cls(
            rounds,
            scoring_rules=ScoringRules.model_validate(config.get("scoring_rules", {})),
            submission_options=SubmissionOptions.model_validate(
                config.get("submission_options", {})
            ),
            score_options=ScoreOptions.model_validate(config.get("score_options", {})),
        )

    # ── Events ──────────────────────────────────────────────────

    def subscribe(self, event_type: EventType, listener: EventListener) -> None:
        self.event_bus.subscribe(event_type, listener)

    def unsubscribe(self, event_type: EventType, listener: EventListener) -> bool:
        return self.event_bus.unsubscribe(event_type, listener)

    # ── Round flow ──────────────────────────────────────────────

    def complete_round(
        self,
        round_number: Optional[int] = None,
        participant_ids: Optional[Iterable[str]] = None,
    ) -> OperationResult:
        """
        Close a round: lock its submissions, mark it complete and emit
        round-completed with every participant's subtotal for it.

        Completing a round that is already complete changes nothing.
        """
        target = self.rounds.current_round_number if round_number is None else round_number
        round_ = self.rounds.get_round(target)
        if round_ is not None and round_.is_complete:
            logger.debug(f"Round {target} is already complete")
            return OperationResult(success=True, errors=[])

        result = self.submissions.complete_round(target, participant_ids)
        if not result["success"]:
            return result

        round_scores = {
            player.participant_id: player.round_scores.get(target, 0)
            for player in self.scores.get_all_player_scores()
        }
        logger.info(f"Round {target} completed with {len(round_scores)} participant(s)")
        self.event_bus.emit(
            EventType.ROUND_COMPLETED,
            payload={
                "round_number": target,
                "round_scores": round_scores,
                "leaderboard": self.scores.get_player_leaderboard(),
            },
        )
        return result

    def advance_round(self) -> OperationResult:
        """Complete the current round if needed, then move to the next one."""
        if self.rounds.is_last_round():
            message = "Cannot advance past the last round"
            logger.warning(message)
            return OperationResult(success=False, errors=[message])

        if not self.rounds.get_current_round().is_complete:
            result = self.complete_round()
            if not result["success"]:
                return result
        self.rounds.advance_to_next_round()
        return OperationResult(success=True, errors=[])

    # ── Resets ──────────────────────────────────────────────────

    def reset_round(self, round_number: int) -> OperationResult:
        """
        Replay a round from scratch.

        Drops the round's submissions (locked ones included) and their
        scores, reopens the round and gives every wager back. The
        current round does not change.
        """
        if not self.rounds.has_round(round_number):
            message = f"Round {round_number} not found"
            logger.warning(message)
            return OperationResult(success=False, errors=[message])

        dropped = self.submissions.discard_round(round_number)
        self.rounds.reset_round(round_number)
        logger.info(
            f"Round {round_number} reset ({dropped} submission(s) dropped)",
            extra={"round_number": round_number},
        )
        return OperationResult(success=True, errors=[])

    def clear_participant(self, participant_id: str) -> None:
        """Drop every submission and question score of one participant."""
        dropped = self.submissions.discard_participant(participant_id)
        self.rounds.clear_participant(participant_id)
        logger.info(
            f"Cleared {participant_id} ({dropped} submission(s) dropped)",
            extra={"participant_id": participant_id},
        )

    def reset(self) -> None:
        """Back to round 1 with no submissions, scores or teams."""
        self.submissions.reset()
        self.scores.reset()
        self.rounds.reset_all_rounds()
        logger.info("Engine reset")

    # ── Persistence ─────────────────────────────────────────────

    def export_state(self) -> Dict[str, Any]:
        """Plain snapshot of rounds, submissions and scores."""
        return {
            "rounds": self.rounds.export_state(),
            "submissions": self.submissions.export_state(),
            "scores": self.scores.export_state(),
        }

    def import_state(self, state: Dict[str, Any]) -> None:
        """
        Replace the whole engine state. On failure nothing changes.

        Raises:
            SnapshotImportError: If a section is missing or invalid
            RoundConfigurationError: If the contained rounds are invalid
        """
        missing = [s for s in SNAPSHOT_SECTIONS if s not in state]
        if missing:
            raise SnapshotImportError("engine", [f"missing section '{s}'" for s in missing])

        backup = self.export_state()
        try:
            self.rounds.import_state(state["rounds"])
            self.submissions.import_state(state["submissions"])
            self.scores.import_state(state["scores"])
        except (SnapshotImportError, RoundConfigurationError) as e:
            logger.error(f"State import failed, restoring previous state: {e}")
            self.rounds.import_state(backup["rounds"])
            self.submissions.import_state(backup["submissions"])
            self.scores.import_state(backup["scores"])
            raise
        logger.info("Engine state imported")
