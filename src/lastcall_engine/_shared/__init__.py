# Area: Shared
"""
Shared utilities used by the Round Ledger, Submission Store and Score Ledger.

This package contains:
- The typed synchronous event bus
- Logging configuration
- Timestamp and identifier helpers
"""

from .clock import current_timestamp, generate_id, parse_timestamp
from .events import EngineEvent, EventBus, EventListener, EventType
from .logging_config import setup_logging

__all__ = [
    "current_timestamp",
    "generate_id",
    "parse_timestamp",
    "EngineEvent",
    "EventBus",
    "EventListener",
    "EventType",
    "setup_logging",
]
