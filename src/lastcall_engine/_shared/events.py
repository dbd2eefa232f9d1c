# Area: Shared
"""
lastcall_engine._shared.events — Typed synchronous event bus
============================================================

Components publish state changes here and hosts subscribe per event
kind. Dispatch is synchronous and in registration order, inside the
call stack of the mutation that triggered it. A listener that raises
is logged and skipped; later listeners still run and the mutation is
never rolled back.

Usage:
    bus = EventBus()
    bus.subscribe(EventType.SCORE_UPDATED, on_score)
    bus.emit(EventType.SCORE_UPDATED, participant_id="P1", payload={...})
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .clock import current_timestamp

logger = logging.getLogger("lastcall_engine.events")


class EventType(Enum):
    """Kinds of notifications emitted by the engine."""
    # Submission Store
    SUBMISSION_CREATED = "submission-created"
    SUBMISSION_UPDATED = "submission-updated"
    SUBMISSION_DELETED = "submission-deleted"
    SUBMISSION_LOCKED = "submission-locked"
    SUBMISSION_UNLOCKED = "submission-unlocked"
    ROUND_LOCKED = "round-locked"
    ROUND_UNLOCKED = "round-unlocked"
    VALIDATION_FAILED = "validation-failed"
    # Score Ledger
    SCORE_UPDATED = "score-updated"
    PLAYER_SCORED = "player-scored"
    TEAM_SCORED = "team-scored"
    STREAK_ACHIEVED = "streak-achieved"
    BONUS_AWARDED = "bonus-awarded"
    PENALTY_APPLIED = "penalty-applied"
    SCORE_ADJUSTED = "score-adjusted"
    ADJUSTMENT_REVERTED = "adjustment-reverted"
    LEADERBOARD_UPDATED = "leaderboard-updated"
    # Engine
    ROUND_COMPLETED = "round-completed"


@dataclass
class EngineEvent:
    """
    A single notification delivered to listeners.

    Attributes:
        event_type: Kind of event
        timestamp: ISO 8601 UTC time of emission
        participant_id: Participant the event concerns, if any
        team_id: Team the event concerns, if any
        question_id: Question the event concerns, if any
        submission_id: Submission the event concerns, if any
        payload: Event-specific data (new submission, before/after, ...)
    """

    event_type: EventType
    timestamp: str
    participant_id: Optional[str] = None
    team_id: Optional[str] = None
    question_id: Optional[str] = None
    submission_id: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)


EventListener = Callable[[EngineEvent], None]


class EventBus:
    """
    Per-event-kind subscriber lists with isolated synchronous delivery.

    The engine performs no locking; hosts that mutate from several
    threads must serialize their calls.
    """

    def __init__(self):
        """Initialize bus with empty subscriber lists."""
        self._listeners: Dict[EventType, List[EventListener]] = {}

    def subscribe(self, event_type: EventType, listener: EventListener) -> None:
        """
        Register a listener for an event kind.

        Registering the same listener twice for one kind is a no-op.

        Args:
            event_type: The event kind to listen for
            listener: Callable receiving the EngineEvent
        """
        listeners = self._listeners.setdefault(event_type, [])
        if listener in listeners:
            return
        listeners.append(listener)
        logger.debug(f"Subscribed listener to {event_type.value}")

    def unsubscribe(self, event_type: EventType, listener: EventListener) -> bool:
        """
        Remove a listener.

        Returns:
            True if the listener was registered, False otherwise
        """
        listeners = self._listeners.get(event_type, [])
        if listener not in listeners:
            return False
        listeners.remove(listener)
        return True

    def clear(self, event_type: Optional[EventType] = None) -> None:
        """Remove all listeners, or only those of one event kind."""
        if event_type is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event_type, None)

    def listener_count(self, event_type: EventType) -> int:
        """Number of listeners registered for an event kind."""
        return len(self._listeners.get(event_type, []))

    def emit(
        self,
        event_type: EventType,
        participant_id: Optional[str] = None,
        team_id: Optional[str] = None,
        question_id: Optional[str] = None,
        submission_id: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> EngineEvent:
        """
        Build an event and deliver it to every listener of its kind.

        Returns:
            The delivered EngineEvent
        """
        event = EngineEvent(
            event_type=event_type,
            timestamp=current_timestamp(),
            participant_id=participant_id,
            team_id=team_id,
            question_id=question_id,
            submission_id=submission_id,
            payload=payload or {},
        )

        # Copy so a listener that (un)subscribes does not disturb this delivery
        for listener in list(self._listeners.get(event_type, [])):
            try:
                listener(event)
            except Exception:
                logger.error(
                    "Listener for %s failed", event_type.value, exc_info=True,
                )
        return event
