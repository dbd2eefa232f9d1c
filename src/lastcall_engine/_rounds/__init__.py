# Area: Rounds
"""
Round Ledger - rounds, point values, and point-value consumption.

This package handles:
- Round configuration and its fatal validation
- Per-participant point-value usage per round
- Round lifecycle (start, complete, advance, reset)
- Round state export/import
"""

from .constants import (
    LEGAL_POINT_VALUES,
    LAST_CALL_ROUND_1_POINTS,
    LAST_CALL_ROUND_2_POINTS,
    DEFAULT_ROUND_TIME_LIMIT_SECONDS,
)
from .models import Question, Round, RoundType
from .point_usage import PointUsageTable
from .factory import create_last_call_rounds, create_custom_rounds
from .ledger import RoundLedger

__all__ = [
    "LEGAL_POINT_VALUES",
    "LAST_CALL_ROUND_1_POINTS",
    "LAST_CALL_ROUND_2_POINTS",
    "DEFAULT_ROUND_TIME_LIMIT_SECONDS",
    "Question",
    "Round",
    "RoundType",
    "PointUsageTable",
    "create_last_call_rounds",
    "create_custom_rounds",
    "RoundLedger",
]
