# Area: Rounds
"""
lastcall_engine._rounds.models — Round and question dataclasses
===============================================================

Rounds are built once from configuration and owned by the Round
Ledger afterwards. Only the ledger's lifecycle operations touch
``is_complete`` / ``started_at`` / ``completed_at``.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class RoundType(Enum):
    """Kind of round. Only STANDARD rounds follow the Last Call format."""
    STANDARD = "standard"
    PICTURE = "picture"
    AUDIO = "audio"
    VIDEO = "video"
    WAGER = "wager"
    BONUS = "bonus"
    LIGHTNING = "lightning"


@dataclass
class Question:
    """
    Read-only question lookup entry.

    Attributes:
        question_id: Stable identifier, unique across the whole game
        correct_answer: Answer key compared after trim + case-fold
        question_type: Tag used for per-type scoring multipliers
        text: Question text (display only)
        category: Free-form category (display only)
    """

    question_id: str
    correct_answer: str
    question_type: str = "text"
    text: str = ""
    category: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question_id": self.question_id,
            "correct_answer": self.correct_answer,
            "question_type": self.question_type,
            "text": self.text,
            "category": self.category,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Question":
        return cls(
            question_id=data["question_id"],
            correct_answer=data["correct_answer"],
            question_type=data.get("question_type", "text"),
            text=data.get("text", ""),
            category=data.get("category", ""),
        )


@dataclass
class Round:
    """
    One 1-indexed phase of the game.

    Attributes:
        number: Round number, contiguous from 1 across the ledger
        name: Display name
        available_point_values: Ordered spendable values, unique
        questions: Questions belonging to this round
        round_type: Standard or one of the special kinds
        description: Optional display text
        time_limit: Advisory limit in seconds
        max_questions: Optional cap carried for the host
        is_complete: Set by complete_round()
        started_at: ISO timestamp set by start_round()
        completed_at: ISO timestamp set by complete_round()
    """

    number: int
    name: str
    available_point_values: List[int]
    questions: List[Question] = field(default_factory=list)
    round_type: RoundType = RoundType.STANDARD
    description: Optional[str] = None
    time_limit: Optional[int] = None
    max_questions: Optional[int] = None
    is_complete: bool = False
    started_at: Optional[str] = None
    completed_at: Optional[str] = None

    @property
    def round_id(self) -> str:
        return f"round-{self.number}"

    def get_question(self, question_id: str) -> Optional[Question]:
        for question in self.questions:
            if question.question_id == question_id:
                return question
        return None

    def question_ids(self) -> List[str]:
        return [q.question_id for q in self.questions]

    def reset_progress(self) -> None:
        self.is_complete = False
        self.started_at = None
        self.completed_at = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "name": self.name,
            "round_type": self.round_type.value,
            "available_point_values": list(self.available_point_values),
            "questions": [q.to_dict() for q in self.questions],
            "description": self.description,
            "time_limit": self.time_limit,
            "max_questions": self.max_questions,
            "is_complete": self.is_complete,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Round":
        round_type = data.get("round_type", RoundType.STANDARD)
        return cls(
            number=data["number"],
            name=data.get("name") or f"Round {data['number']}",
            available_point_values=list(data["available_point_values"]),
            questions=[
                q if isinstance(q, Question) else Question.from_dict(q)
                for q in data.get("questions", [])
            ],
            round_type=RoundType(round_type),
            description=data.get("description"),
            time_limit=data.get("time_limit"),
            max_questions=data.get("max_questions"),
            is_complete=data.get("is_complete", False),
            started_at=data.get("started_at"),
            completed_at=data.get("completed_at"),
        )
