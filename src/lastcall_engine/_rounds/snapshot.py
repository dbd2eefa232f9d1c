# Area: Rounds
"""
lastcall_engine._rounds.snapshot — Round configuration / state schemas
======================================================================

Pydantic records used to validate plain dictionaries coming from
configuration files and from exported state before the ledger
trusts them.
"""

from __future__ import annotations
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .models import RoundType


class QuestionRecord(BaseModel):
    """Plain form of a Question."""
    model_config = ConfigDict(extra="ignore")

    question_id: str = Field(min_length=1)
    correct_answer: str
    question_type: str = "text"
    text: str = ""
    category: str = ""


class RoundRecord(BaseModel):
    """Plain form of a Round (configuration or exported state)."""
    model_config = ConfigDict(extra="ignore")

    number: int
    name: Optional[str] = None
    round_type: RoundType = RoundType.STANDARD
    available_point_values: List[int]
    questions: List[QuestionRecord] = Field(default_factory=list)
    description: Optional[str] = None
    time_limit: Optional[int] = Field(default=None, gt=0)
    max_questions: Optional[int] = Field(default=None, ge=0)
    is_complete: bool = False
    started_at: Optional[str] = None
    completed_at: Optional[str] = None


class RoundLedgerSnapshot(BaseModel):
    """Exported Round Ledger state."""
    model_config = ConfigDict(extra="forbid")

    rounds: List[RoundRecord]
    current_round_index: int = Field(ge=0)
    point_usage: Dict[str, Dict[int, List[int]]] = Field(default_factory=dict)
    round_start_times: Dict[int, str] = Field(default_factory=dict)
    round_end_times: Dict[int, str] = Field(default_factory=dict)


def format_validation_errors(error: ValidationError) -> List[str]:
    """Flatten a pydantic ValidationError into readable strings."""
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        messages.append(f"{location}: {item.get('msg', 'invalid value')}")
    return messages
