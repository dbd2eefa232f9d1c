# Area: Scoring
"""
lastcall_engine._scoring.snapshot — Score Ledger state schema
=============================================================

Validates an exported Score Ledger payload before it replaces live
state. Imported aggregates are taken verbatim, not re-derived.
"""

from __future__ import annotations
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class QuestionScoreRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

    question_id: str
    submission_id: str
    participant_id: str
    round_number: int = Field(ge=1)
    answer: str
    correct_answer: str
    is_correct: bool
    points_awarded: int
    points_attempted: int
    bonus_points: int = 0
    penalty_points: float = 0.0
    streak: int = Field(default=0, ge=0)
    sequence: int = Field(default=0, ge=0)
    scored_at: str = ""


class ParticipantScoreRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

    participant_id: str = Field(min_length=1)
    name: str
    team_id: Optional[str] = None
    total_score: int = 0
    round_scores: Dict[int, int] = Field(default_factory=dict)
    question_scores: Dict[str, QuestionScoreRecord] = Field(default_factory=dict)
    correct_answers: int = Field(default=0, ge=0)
    incorrect_answers: int = Field(default=0, ge=0)
    total_questions: int = Field(default=0, ge=0)
    accuracy: float = Field(default=0.0, ge=0, le=100)
    average_point_value: float = 0.0
    rank: int = Field(default=0, ge=0)
    last_updated: str = ""


class TeamScoreRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

    team_id: str = Field(min_length=1)
    team_name: str
    member_ids: List[str] = Field(default_factory=list)
    total_score: int = 0
    round_scores: Dict[int, int] = Field(default_factory=dict)
    correct_answers: int = Field(default=0, ge=0)
    incorrect_answers: int = Field(default=0, ge=0)
    total_questions: int = Field(default=0, ge=0)
    accuracy: float = Field(default=0.0, ge=0, le=100)
    average_point_value: float = 0.0
    rank: int = Field(default=0, ge=0)
    last_updated: str = ""


class ScoreUpdateRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

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


class ScoreAdjustmentRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

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


class ScoreLedgerSnapshot(BaseModel):
    """Exported Score Ledger state."""
    model_config = ConfigDict(extra="forbid")

    player_scores: List[ParticipantScoreRecord] = Field(default_factory=list)
    team_scores: List[TeamScoreRecord] = Field(default_factory=list)
    score_updates: List[ScoreUpdateRecord] = Field(default_factory=list)
    adjustments: List[ScoreAdjustmentRecord] = Field(default_factory=list)
    next_sequence: int = Field(default=0, ge=0)
