# Area: Shared Tests
"""Tests for lastcall_engine._shared.events — synchronous event bus."""

from unittest.mock import patch

from lastcall_engine._shared.events import EngineEvent, EventBus, EventType


class TestSubscribe:
    """Tests for subscribe() / unsubscribe()."""

    def test_listener_receives_event(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventType.SCORE_UPDATED, received.append)
        event = bus.emit(EventType.SCORE_UPDATED, participant_id="alice", payload={"x": 1})

        assert received == [event]
        assert isinstance(event, EngineEvent)
        assert event.participant_id == "alice"
        assert event.payload == {"x": 1}
        assert event.timestamp

    def test_only_matching_kind_is_delivered(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventType.SCORE_UPDATED, received.append)
        bus.emit(EventType.PLAYER_SCORED)
        assert received == []

    def test_double_subscribe_is_noop(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventType.SCORE_UPDATED, received.append)
        bus.subscribe(EventType.SCORE_UPDATED, received.append)
        bus.emit(EventType.SCORE_UPDATED)
        assert len(received) == 1
        assert bus.listener_count(EventType.SCORE_UPDATED) == 1

    def test_unsubscribe(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventType.SCORE_UPDATED, received.append)
        assert bus.unsubscribe(EventType.SCORE_UPDATED, received.append) is True
        assert bus.unsubscribe(EventType.SCORE_UPDATED, received.append) is False
        bus.emit(EventType.SCORE_UPDATED)
        assert received == []

    def test_clear(self):
        bus = EventBus()
        bus.subscribe(EventType.SCORE_UPDATED, lambda e: None)
        bus.subscribe(EventType.PLAYER_SCORED, lambda e: None)
        bus.clear(EventType.SCORE_UPDATED)
        assert bus.listener_count(EventType.SCORE_UPDATED) == 0
        assert bus.listener_count(EventType.PLAYER_SCORED) == 1
        bus.clear()
        assert bus.listener_count(EventType.PLAYER_SCORED) == 0


class TestDelivery:
    """Tests for emit() ordering and listener isolation."""

    def test_registration_order(self):
        bus = EventBus()
        calls = []
        bus.subscribe(EventType.ROUND_LOCKED, lambda e: calls.append("first"))
        bus.subscribe(EventType.ROUND_LOCKED, lambda e: calls.append("second"))
        bus.emit(EventType.ROUND_LOCKED)
        assert calls == ["first", "second"]

    def test_failing_listener_is_isolated(self):
        bus = EventBus()
        calls = []

        def broken(event):
            raise RuntimeError("display offline")

        bus.subscribe(EventType.ROUND_LOCKED, broken)
        bus.subscribe(EventType.ROUND_LOCKED, lambda e: calls.append(e.event_type))

        with patch("lastcall_engine._shared.events.logger") as mock_logger:
            bus.emit(EventType.ROUND_LOCKED)

        assert calls == [EventType.ROUND_LOCKED]
        mock_logger.error.assert_called_once()

    def test_listener_unsubscribing_during_delivery(self):
        bus = EventBus()
        calls = []

        def once(event):
            calls.append("once")
            bus.unsubscribe(EventType.ROUND_LOCKED, once)

        bus.subscribe(EventType.ROUND_LOCKED, once)
        bus.subscribe(EventType.ROUND_LOCKED, lambda e: calls.append("always"))
        bus.emit(EventType.ROUND_LOCKED)
        bus.emit(EventType.ROUND_LOCKED)
        assert calls == ["once", "always", "always"]

    def test_emit_without_listeners(self):
        event = EventBus().emit(EventType.LEADERBOARD_UPDATED)
        assert event.payload == {}
        assert event.participant_id is None
