# Area: Submissions
"""
lastcall_engine._submissions.models — Submission dataclass
==========================================================
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class Submission:
    """
    One participant's (or team's) answer to one question.

    Attributes:
        submission_id: Unique identifier
        question_id: Question answered
        participant_id: Participant, or team when teams submit
        round_number: Active round when the submission was created
        answer: Free-text answer
        point_value: Value wagered on this answer
        is_locked: Locked submissions cannot be updated or deleted
        submitted_at: ISO timestamp of creation
        updated_at: ISO timestamp of the last update, if any
    """

    submission_id: str
    question_id: str
    participant_id: str
    round_number: int
    answer: str
    point_value: int
    is_locked: bool = False
    submitted_at: str = ""
    updated_at: Optional[str] = None

    @property
    def round_id(self) -> str:
        return f"round-{self.round_number}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "submission_id": self.submission_id,
            "question_id": self.question_id,
            "participant_id": self.participant_id,
            "round_number": self.round_number,
            "answer": self.answer,
            "point_value": self.point_value,
            "is_locked": self.is_locked,
            "submitted_at": self.submitted_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Submission":
        return cls(
            submission_id=data["submission_id"],
            question_id=data["question_id"],
            participant_id=data["participant_id"],
            round_number=data["round_number"],
            answer=data["answer"],
            point_value=data["point_value"],
            is_locked=data.get("is_locked", False),
            submitted_at=data.get("submitted_at", ""),
            updated_at=data.get("updated_at"),
        )
