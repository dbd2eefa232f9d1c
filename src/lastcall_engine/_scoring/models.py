# Area: Scoring
"""
lastcall_engine._scoring.models — Score Ledger records
======================================================

Plain dataclasses for graded answers, running aggregates, the score
update history and host adjustments. Every record has ``to_dict`` /
``from_dict`` so the whole ledger exports to JSON-ready data.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class QuestionScore:
    """
    Graded outcome of one submission.

    Attributes:
        question_id: Question graded
        submission_id: Submission graded
        participant_id: Owner of the submission
        round_number: Round of the submission
        answer: Answer as submitted
        correct_answer: Answer key at grading time
        is_correct: Normalized exact match
        points_awarded: Final integer points, bonus included; may be negative
        points_attempted: Wagered point value
        bonus_points: Streak bonus included in points_awarded
        penalty_points: Points lost to the incorrect-answer penalty
        streak: Consecutive correct answers ending with this one
        sequence: Grading order, used for streaks
        scored_at: ISO timestamp of grading
    """

    question_id: str
    submission_id: str
    participant_id: str
    round_number: int
    answer: str
    correct_answer: str
    is_correct: bool
    points_awarded: int
    points_attempted: int
    bonus_points: int = 0
    penalty_points: float = 0.0
    streak: int = 0
    sequence: int = 0
    scored_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question_id": self.question_id,
            "submission_id": self.submission_id,
            "participant_id": self.participant_id,
            "round_number": self.round_number,
            "answer": self.answer,
            "correct_answer": self.correct_answer,
            "is_correct": self.is_correct,
            "points_awarded": self.points_awarded,
            "points_attempted": self.points_attempted,
            "bonus_points": self.bonus_points,
            "penalty_points": self.penalty_points,
            "streak": self.streak,
            "sequence": self.sequence,
            "scored_at": self.scored_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuestionScore":
        return cls(**data)


@dataclass
class ParticipantScore:
    """
    Running aggregate of one participant.

    ``total_score`` and ``round_scores`` are always re-summed from
    ``question_scores`` plus active adjustments, never incremented.
    """

    participant_id: str
    name: str
    team_id: Optional[str] = None
    total_score: int = 0
    round_scores: Dict[int, int] = field(default_factory=dict)
    question_scores: Dict[str, QuestionScore] = field(default_factory=dict)
    correct_answers: int = 0
    incorrect_answers: int = 0
    total_questions: int = 0
    accuracy: float = 0.0
    average_point_value: float = 0.0
    rank: int = 0
    last_updated: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "participant_id": self.participant_id,
            "name": self.name,
            "team_id": self.team_id,
            "total_score": self.total_score,
            "round_scores": dict(self.round_scores),
            "question_scores": {
                qid: score.to_dict() for qid, score in self.question_scores.items()
            },
            "correct_answers": self.correct_answers,
            "incorrect_answers": self.incorrect_answers,
            "total_questions": self.total_questions,
            "accuracy": self.accuracy,
            "average_point_value": self.average_point_value,
            "rank": self.rank,
            "last_updated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParticipantScore":
        values = dict(data)
        values["round_scores"] = {
            int(number): subtotal for number, subtotal in data.get("round_scores", {}).items()
        }
        values["question_scores"] = {
            qid: QuestionScore.from_dict(score)
            for qid, score in data.get("question_scores", {}).items()
        }
        return cls(**values)


@dataclass
class TeamScore:
    """Aggregate of a team, re-summed from its members' aggregates."""

    team_id: str
    team_name: str
    member_ids: List[str] = field(default_factory=list)
    total_score: int = 0
    round_scores: Dict[int, int] = field(default_factory=dict)
    correct_answers: int = 0
    incorrect_answers: int = 0
    total_questions: int = 0
    accuracy: float = 0.0
    average_point_value: float = 0.0
    rank: int = 0
    last_updated: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "team_id": self.team_id,
            "team_name": self.team_name,
            "member_ids": list(self.member_ids),
            "total_score": self.total_score,
            "round_scores": dict(self.round_scores),
            "correct_answers": self.correct_answers,
            "incorrect_answers": self.incorrect_answers,
            "total_questions": self.total_questions,
            "accuracy": self.accuracy,
            "average_point_value": self.average_point_value,
            "rank": self.rank,
            "last_updated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TeamScore":
        values = dict(data)
        values["member_ids"] = list(data.get("member_ids", []))
        values["round_scores"] = {
            int(number): subtotal for number, subtotal in data.get("round_scores", {}).items()
        }
        return cls(**values)


@dataclass
class ScoreUpdate:
    """
    One entry of the append-only score history.

    ``kind`` is "automatic" (grading), "removal" (submission deleted),
    "manual" (host adjustment) or "revert" (adjustment reverted).
    """

    update_id: str
    kind: str
    participant_id: str
    previous_score: int
    new_score: int
    points_awarded: int
    timestamp: str
    question_id: Optional[str] = None
    submission_id: Optional[str] = None
    is_correct: Optional[bool] = None
    team_id: Optional[str] = None
    adjustment_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "update_id": self.update_id,
            "kind": self.kind,
            "participant_id": self.participant_id,
            "previous_score": self.previous_score,
            "new_score": self.new_score,
            "points_awarded": self.points_awarded,
            "timestamp": self.timestamp,
            "question_id": self.question_id,
            "submission_id": self.submission_id,
            "is_correct": self.is_correct,
            "team_id": self.team_id,
            "adjustment_id": self.adjustment_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScoreUpdate":
        return cls(**data)


@dataclass
class ScoreAdjustment:
    """A manual change of a participant's score made by the host."""

    adjustment_id: str
    participant_id: str
    amount: int
    reason: str
    adjusted_by: str
    previous_score: int
    new_score: int
    timestamp: str
    round_number: Optional[int] = None
    question_id: Optional[str] = None
    is_reverted: bool = False
    reverted_at: Optional[str] = None
    reverted_by: Optional[str] = None
    revert_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "adjustment_id": self.adjustment_id,
            "participant_id": self.participant_id,
            "amount": self.amount,
            "reason": self.reason,
            "adjusted_by": self.adjusted_by,
            "previous_score": self.previous_score,
            "new_score": self.new_score,
            "timestamp": self.timestamp,
            "round_number": self.round_number,
            "question_id": self.question_id,
            "is_reverted": self.is_reverted,
            "reverted_at": self.reverted_at,
            "reverted_by": self.reverted_by,
            "revert_reason": self.revert_reason,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScoreAdjustment":
        return cls(**data)


@dataclass
class LeaderboardEntry:
    """One ranked row of the player or team leaderboard."""

    entry_id: str
    name: str
    score: int
    rank: int
    accuracy: float
    correct_answers: int
    total_questions: int
    entry_type: str  # "player" or "team"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entry_id": self.entry_id,
            "name": self.name,
            "score": self.score,
            "rank": self.rank,
            "accuracy": self.accuracy,
            "correct_answers": self.correct_answers,
            "total_questions": self.total_questions,
            "entry_type": self.entry_type,
        }
