"""
lastcall_engine — Round and scoring engine for point-wagering trivia
===================================================================

Quick Start:
    from lastcall_engine import Question, TriviaEngine, create_last_call_rounds

    engine = TriviaEngine(create_last_call_rounds(round1, round2))
    result = engine.submissions.submit("q1", "alice", "Paris", 5)
    engine.scores.get_player_leaderboard()

From a config file:
    from lastcall_engine import TriviaEngine, load_engine_config
    engine = TriviaEngine.from_config(load_engine_config("game.json"))

Three components, leaves first:
1. RoundLedger - rounds, point values, point-value consumption
2. SubmissionStore - one answer per (participant, question), locks
3. ScoreLedger - grading, aggregates, leaderboard

Result Types
------------
Operation results are plain dicts described in lastcall_engine.types:

    from lastcall_engine import OperationResult, SubmitResult, RoundProgress
"""

from .engine import TriviaEngine
from .config import load_engine_config
from .rules import ScoreOptions, ScoringRules, SubmissionOptions
from .errors import (
    LastCallEngineError,
    RoundConfigurationError,
    EngineInvariantError,
    SnapshotImportError,
)
from .types import (
    OperationResult,
    SubmitResult,
    BulkLockResult,
    AdjustmentResult,
    RoundProgress,
    RoundParticipantStats,
    ScoreDistribution,
)
from ._shared import EngineEvent, EventBus, EventType, setup_logging
from ._rounds import (
    Question,
    Round,
    RoundLedger,
    RoundType,
    create_custom_rounds,
    create_last_call_rounds,
)
from ._submissions import Submission, SubmissionStore
from ._scoring import (
    LeaderboardEntry,
    ParticipantScore,
    QuestionScore,
    ScoreAdjustment,
    ScoreLedger,
    ScoreUpdate,
    TeamScore,
)

__version__ = "1.0.0"

__all__ = [
    # Main classes
    "TriviaEngine",
    "RoundLedger",
    "SubmissionStore",
    "ScoreLedger",
    # Configuration
    "load_engine_config",
    "ScoringRules",
    "SubmissionOptions",
    "ScoreOptions",
    "create_last_call_rounds",
    "create_custom_rounds",
    # Errors
    "LastCallEngineError",
    "RoundConfigurationError",
    "EngineInvariantError",
    "SnapshotImportError",
    # Events and logging
    "EngineEvent",
    "EventBus",
    "EventType",
    "setup_logging",
    # Records
    "Question",
    "Round",
    "RoundType",
    "Submission",
    "QuestionScore",
    "ParticipantScore",
    "TeamScore",
    "ScoreUpdate",
    "ScoreAdjustment",
    "LeaderboardEntry",
    # Result types
    "OperationResult",
    "SubmitResult",
    "BulkLockResult",
    "AdjustmentResult",
    "RoundProgress",
    "RoundParticipantStats",
    "ScoreDistribution",
]
