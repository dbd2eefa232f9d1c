# Area: Submissions
"""
lastcall_engine._submissions.snapshot — Submission Store state schema
=====================================================================
"""

from __future__ import annotations
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SubmissionRecord(BaseModel):
    """Plain form of a Submission."""
    model_config = ConfigDict(extra="forbid")

    submission_id: str = Field(min_length=1)
    question_id: str = Field(min_length=1)
    participant_id: str = Field(min_length=1)
    round_number: int = Field(ge=1)
    answer: str
    point_value: int
    is_locked: bool = False
    submitted_at: str = ""
    updated_at: Optional[str] = None


class AttemptRecord(BaseModel):
    """How many times a participant submitted for a question."""
    model_config = ConfigDict(extra="forbid")

    participant_id: str
    question_id: str
    count: int = Field(ge=1)


class SubmissionStoreSnapshot(BaseModel):
    """Exported Submission Store state."""
    model_config = ConfigDict(extra="forbid")

    submissions: List[SubmissionRecord] = Field(default_factory=list)
    attempts: List[AttemptRecord] = Field(default_factory=list)
    locked_rounds: List[int] = Field(default_factory=list)
