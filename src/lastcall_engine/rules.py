"""
lastcall_engine.rules — Scoring policy and component options
============================================================

Pydantic models for everything a host can tune. Each model is supplied
once at construction; any field may be omitted to keep its default.

    rules = ScoringRules(incorrect_answer_penalty=0.5)
    stricter = rules.with_overrides(streak_bonus_threshold=4)

Invalid values (negative multipliers, a penalty fraction above 1,
unknown keys) raise ``pydantic.ValidationError`` at construction.
"""

from __future__ import annotations
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_QUESTION_TYPE_MULTIPLIERS: Dict[str, float] = {
    "multiple-choice": 1.0,
    "open-ended": 1.5,
    "true-false": 0.8,
}


class ScoringRules(BaseModel):
    """
    Scoring-rules policy applied by the Score Ledger.

    Attributes:
        correct_answer_multiplier: Applied to the wager of a correct answer
        incorrect_answer_penalty: Fraction of the wager lost when wrong
        time_bonus: Time bonus toggle (carried, not applied; the engine
            captures no per-answer timing)
        time_bonus_threshold: Seconds under which a time bonus would apply
        time_bonus_multiplier: Multiplier a time bonus would apply
        streak_bonus: Streak bonus toggle
        streak_bonus_threshold: Consecutive correct answers needed
        streak_bonus_points: Flat bonus added when the streak is reached
        round_multipliers: round number -> multiplier (default 1.0)
        question_type_multipliers: question type -> multiplier (default 1.0)
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    correct_answer_multiplier: float = Field(default=1.0, ge=0)
    incorrect_answer_penalty: float = Field(default=0.0, ge=0, le=1)
    time_bonus: bool = True
    time_bonus_threshold: float = Field(default=10.0, gt=0)
    time_bonus_multiplier: float = Field(default=1.2, ge=0)
    streak_bonus: bool = True
    streak_bonus_threshold: int = Field(default=3, ge=1)
    streak_bonus_points: int = Field(default=5, ge=0)
    round_multipliers: Dict[int, float] = Field(default_factory=dict)
    question_type_multipliers: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_QUESTION_TYPE_MULTIPLIERS)
    )

    @field_validator("round_multipliers", "question_type_multipliers")
    @classmethod
    def _multipliers_non_negative(cls, value: Dict[Any, float]) -> Dict[Any, float]:
        negative = [key for key, multiplier in value.items() if multiplier < 0]
        if negative:
            raise ValueError(f"multipliers must be >= 0, got negative for {negative}")
        return value

    def with_overrides(self, **overrides: Any) -> "ScoringRules":
        """Return a validated copy with some fields replaced."""
        data = self.model_dump()
        data.update(overrides)
        return ScoringRules.model_validate(data)

    def round_multiplier(self, round_number: int) -> float:
        return self.round_multipliers.get(round_number, 1.0)

    def question_type_multiplier(self, question_type: str) -> float:
        return self.question_type_multipliers.get(question_type, 1.0)


class SubmissionOptions(BaseModel):
    """
    Validation policy of the Submission Store.

    Attributes:
        allow_duplicate_point_values: Let a participant reuse a value
            within one round
        auto_lock_on_submission: Lock each submission as soon as it exists
        max_submissions_per_question: Submit attempts allowed per
            (participant, question); 0 means unlimited. Attempts beyond
            the first replace the existing unlocked submission.
        require_point_value_selection: Reject missing / non-positive values
        require_answer_text: Reject blank answers
        require_all_answers: complete_round() refuses while a
            participant is missing a question of the round
        enable_validation: Master switch for input checks
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    allow_duplicate_point_values: bool = False
    auto_lock_on_submission: bool = False
    max_submissions_per_question: int = Field(default=1, ge=0)
    require_point_value_selection: bool = True
    require_answer_text: bool = True
    require_all_answers: bool = False
    enable_validation: bool = True


class ScoreOptions(BaseModel):
    """
    Behaviour switches of the Score Ledger.

    ``enable_time_bonus`` / ``enable_streak_bonus`` set to False force the
    matching ScoringRules toggle off.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    enable_time_bonus: bool = True
    enable_streak_bonus: bool = True
    enable_team_scoring: bool = False
    auto_update_leaderboard: bool = True

    def apply_to(self, rules: ScoringRules) -> ScoringRules:
        """Return ``rules`` with the bonus toggles this option set disables."""
        overrides: Dict[str, Any] = {}
        if not self.enable_time_bonus and rules.time_bonus:
            overrides["time_bonus"] = False
        if not self.enable_streak_bonus and rules.streak_bonus:
            overrides["streak_bonus"] = False
        return rules.with_overrides(**overrides) if overrides else rules
