# Area: Scoring Tests
"""Tests for lastcall_engine._scoring.ledger — grading, aggregates, leaderboards."""

import json
from unittest.mock import patch

import pytest

from lastcall_engine._rounds.ledger import RoundLedger
from lastcall_engine._rounds.models import Question, Round
from lastcall_engine._scoring.ledger import ScoreLedger
from lastcall_engine._shared.events import EventBus, EventType
from lastcall_engine._submissions.models import Submission
from lastcall_engine._submissions.store import SubmissionStore
from lastcall_engine.errors import EngineInvariantError, SnapshotImportError
from lastcall_engine.rules import ScoreOptions, ScoringRules, SubmissionOptions

SCORE_EVENTS = (
    EventType.SCORE_UPDATED,
    EventType.PLAYER_SCORED,
    EventType.TEAM_SCORED,
    EventType.STREAK_ACHIEVED,
    EventType.BONUS_AWARDED,
    EventType.PENALTY_APPLIED,
    EventType.LEADERBOARD_UPDATED,
)


def make_rounds(round1_types=("text", "text", "text")):
    answers = ["Paris", "Blue", "Seven"]
    return [
        Round(
            number=1, name="Round 1", available_point_values=[1, 3, 5],
            questions=[
                Question(f"q{i + 1}", answers[i], question_type)
                for i, question_type in enumerate(round1_types)
            ],
        ),
        Round(
            number=2, name="Round 2", available_point_values=[2, 4, 6],
            questions=[Question("q4", "Mars"), Question("q5", "1969"), Question("q6", "Oak")],
        ),
    ]


def make_single_round():
    return [
        Round(
            number=1, name="Final", available_point_values=[1, 2, 3, 4, 5, 6],
            questions=[Question(f"q{i}", f"a{i}") for i in range(1, 7)],
        ),
    ]


def make_scoring(rules=None, score_options=None, submission_options=None, rounds=None):
    ledger = RoundLedger(rounds or make_rounds())
    store = SubmissionStore(ledger, submission_options or SubmissionOptions(), EventBus())
    scores = ScoreLedger(store, ledger, rules, score_options)
    return ledger, store, scores


def record_events(scores, *event_types):
    events = []
    for event_type in event_types or SCORE_EVENTS:
        scores.event_bus.subscribe(event_type, events.append)
    return events


class TestGrading:
    """Tests for process_submission_score() driven by submissions."""

    def test_correct_answer_scores_its_wager(self):
        """Correct answer for 5 under the default policy awards 5."""
        _, store, scores = make_scoring()
        store.submit("q1", "alice", "Paris", 5)

        score = scores.get_question_score("alice", "q1")
        assert score.is_correct is True
        assert score.points_awarded == 5
        assert score.points_attempted == 5
        assert score.correct_answer == "Paris"
        assert scores.get_player_score("alice").total_score == 5

    def test_incorrect_answer_without_penalty_scores_zero(self):
        """The default policy never takes points away."""
        _, store, scores = make_scoring()
        store.submit("q1", "alice", "London", 5)

        score = scores.get_question_score("alice", "q1")
        assert score.is_correct is False
        assert score.points_awarded == 0
        assert score.penalty_points == 0
        assert scores.get_player_score("alice").total_score == 0

    def test_answer_match_ignores_case_and_whitespace(self):
        _, store, scores = make_scoring()
        store.submit("q1", "alice", "  pARIS ", 5)
        assert scores.get_question_score("alice", "q1").is_correct is True

    def test_no_partial_credit(self):
        _, store, scores = make_scoring()
        store.submit("q1", "alice", "Paris, France", 5)
        assert scores.get_question_score("alice", "q1").is_correct is False

    def test_incorrect_answer_penalty(self):
        _, store, scores = make_scoring(rules=ScoringRules(incorrect_answer_penalty=1.0))
        events = record_events(scores, EventType.PENALTY_APPLIED)
        store.submit("q1", "alice", "London", 3)

        score = scores.get_question_score("alice", "q1")
        assert score.points_awarded == -3
        assert score.penalty_points == 3
        assert scores.get_player_score("alice").total_score == -3
        assert events[0].payload == {"penalty_points": 3.0, "points_awarded": -3}

    def test_fractional_penalty_rounds_half_up(self):
        _, store, scores = make_scoring(rules=ScoringRules(incorrect_answer_penalty=0.5))
        store.submit("q1", "alice", "London", 5)
        score = scores.get_question_score("alice", "q1")
        assert score.penalty_points == 2.5
        assert score.points_awarded == -2

    def test_question_type_multiplier(self):
        _, store, scores = make_scoring(rounds=make_rounds(("open-ended", "text", "text")))
        store.submit("q1", "alice", "Paris", 3)
        assert scores.get_question_score("alice", "q1").points_awarded == 5

    def test_round_multiplier(self):
        ledger, store, scores = make_scoring(rules=ScoringRules(round_multipliers={2: 2.0}))
        store.submit("q1", "alice", "Paris", 5)
        ledger.advance_to_next_round()
        store.submit("q4", "alice", "Mars", 4)

        assert scores.get_question_score("alice", "q1").points_awarded == 5
        assert scores.get_question_score("alice", "q4").points_awarded == 8

    def test_correct_answer_multiplier(self):
        _, store, scores = make_scoring(rules=ScoringRules(correct_answer_multiplier=2.0))
        store.submit("q1", "alice", "Paris", 3)
        assert scores.get_question_score("alice", "q1").points_awarded == 6

    def test_missing_question_is_an_invariant_violation(self):
        _, _, scores = make_scoring()
        orphan = Submission(
            submission_id="s1", question_id="zz", participant_id="alice",
            round_number=1, answer="x", point_value=1,
        )
        with pytest.raises(EngineInvariantError) as exc_info:
            scores.process_submission_score(orphan)
        assert exc_info.value.submission_id == "s1"

    def test_events_for_correct_answer(self):
        _, store, scores = make_scoring()
        events = record_events(scores)
        store.submit("q1", "alice", "Paris", 5)
        assert [e.event_type for e in events] == [
            EventType.SCORE_UPDATED,
            EventType.PLAYER_SCORED,
            EventType.LEADERBOARD_UPDATED,
        ]
        assert events[0].payload["previous_score"] == 0
        assert events[0].payload["new_score"] == 5

    def test_incorrect_answer_is_not_player_scored(self):
        _, store, scores = make_scoring()
        events = record_events(scores, EventType.PLAYER_SCORED)
        store.submit("q1", "alice", "London", 5)
        assert events == []

    def test_grading_logs_structured_fields(self):
        _, store, scores = make_scoring()
        with patch("lastcall_engine._scoring.ledger.logger") as mock_logger:
            store.submit("q1", "alice", "Paris", 5)
        extras = [c.kwargs.get("extra") for c in mock_logger.info.call_args_list]
        assert {"participant_id": "alice", "question_id": "q1", "round_number": 1} in extras


class TestStreakBonus:
    """Tests for the streak bonus."""

    def test_third_consecutive_correct_answer_earns_bonus(self):
        """Threshold 3, bonus 5: the third correct answer carries the bonus."""
        _, store, scores = make_scoring()
        events = record_events(scores, EventType.STREAK_ACHIEVED, EventType.BONUS_AWARDED)
        store.submit("q1", "alice", "Paris", 1)
        store.submit("q2", "alice", "Blue", 3)
        assert events == []

        store.submit("q3", "alice", "Seven", 5)
        third = scores.get_question_score("alice", "q3")
        assert third.bonus_points == 5
        assert third.points_awarded == 10
        assert third.streak == 3
        assert [e.event_type for e in events] == [
            EventType.STREAK_ACHIEVED, EventType.BONUS_AWARDED,
        ]
        assert events[0].payload == {"streak": 3, "bonus_points": 5}
        assert scores.get_player_score("alice").total_score == 14

    def test_wrong_answer_breaks_streak(self):
        _, store, scores = make_scoring()
        store.submit("q1", "alice", "Paris", 1)
        store.submit("q2", "alice", "Green", 3)
        store.submit("q3", "alice", "Seven", 5)
        assert scores.get_question_score("alice", "q3").bonus_points == 0

    def test_streak_continues_across_rounds(self):
        ledger, store, scores = make_scoring()
        store.submit("q1", "alice", "Paris", 1)
        store.submit("q2", "alice", "Blue", 3)
        store.submit("q3", "alice", "Seven", 5)
        ledger.advance_to_next_round()
        store.submit("q4", "alice", "Mars", 2)

        fourth = scores.get_question_score("alice", "q4")
        assert fourth.streak == 4
        assert fourth.bonus_points == 5
        assert fourth.points_awarded == 7

    def test_streaks_are_per_participant(self):
        _, store, scores = make_scoring()
        store.submit("q1", "alice", "Paris", 1)
        store.submit("q2", "alice", "Blue", 3)
        store.submit("q3", "bob", "Seven", 5)
        assert scores.get_question_score("bob", "q3").bonus_points == 0

    def test_update_without_changes_keeps_bonus(self):
        _, store, scores = make_scoring()
        submission_id = store.submit("q1", "alice", "Paris", 1)["submission_id"]
        store.submit("q2", "alice", "Blue", 3)
        store.submit("q3", "alice", "Seven", 5)

        result = store.update_submission(submission_id, answer="Paris")
        assert result["success"] is False
        assert scores.get_question_score("alice", "q1").bonus_points == 0
        assert scores.get_player_score("alice").total_score == 14
        assert len(scores.get_score_updates("alice")) == 3

    def test_regrade_counts_streak_from_original_position(self):
        """Correcting the first answer later does not count the answers after it."""
        _, store, scores = make_scoring()
        submission_id = store.submit("q1", "alice", "London", 1)["submission_id"]
        store.submit("q2", "alice", "Blue", 3)
        store.submit("q3", "alice", "Seven", 5)

        store.update_submission(submission_id, answer="Paris")
        first = scores.get_question_score("alice", "q1")
        assert first.streak == 1
        assert first.bonus_points == 0
        assert first.sequence == 1
        assert scores.get_player_score("alice").total_score == 9

    def test_regrade_counts_earlier_answers(self):
        _, store, scores = make_scoring()
        store.submit("q1", "alice", "Paris", 1)
        store.submit("q2", "alice", "Blue", 3)
        submission_id = store.submit("q3", "alice", "Eight", 5)["submission_id"]
        assert scores.get_player_score("alice").total_score == 4

        store.update_submission(submission_id, answer="Seven")
        assert scores.get_question_score("alice", "q3").bonus_points == 5
        assert scores.get_player_score("alice").total_score == 14

    def test_streak_bonus_disabled_by_options(self):
        _, store, scores = make_scoring(score_options=ScoreOptions(enable_streak_bonus=False))
        store.submit("q1", "alice", "Paris", 1)
        store.submit("q2", "alice", "Blue", 3)
        store.submit("q3", "alice", "Seven", 5)
        assert scores.scoring_rules.streak_bonus is False
        assert scores.get_player_score("alice").total_score == 9


class TestAggregates:
    """Tests for re-summed totals and statistics."""

    def test_update_regrades_and_replaces_score(self):
        _, store, scores = make_scoring()
        submission_id = store.submit("q1", "alice", "London", 5)["submission_id"]
        store.update_submission(submission_id, answer="Paris")

        player = scores.get_player_score("alice")
        assert player.total_score == 5
        assert player.total_questions == 1
        assert player.question_scores["q1"].submission_id == submission_id
        assert [u.kind for u in scores.get_score_updates()] == ["automatic", "automatic"]

    def test_update_point_value_regrades(self):
        _, store, scores = make_scoring()
        submission_id = store.submit("q1", "alice", "Paris", 5)["submission_id"]
        store.update_submission(submission_id, point_value=1)
        assert scores.get_player_score("alice").total_score == 1

    def test_delete_removes_score(self):
        _, store, scores = make_scoring()
        events = record_events(scores, EventType.SCORE_UPDATED)
        submission_id = store.submit("q1", "alice", "Paris", 5)["submission_id"]
        store.submit("q2", "alice", "Blue", 3)
        store.delete_submission(submission_id)

        player = scores.get_player_score("alice")
        assert player.total_score == 3
        assert scores.get_question_score("alice", "q1") is None
        last_update = scores.get_score_updates()[-1]
        assert last_update.kind == "removal"
        assert last_update.points_awarded == -5
        assert events[-1].payload["question_score"] is None

    def test_round_subtotals(self):
        ledger, store, scores = make_scoring()
        store.submit("q1", "alice", "Paris", 5)
        ledger.advance_to_next_round()
        store.submit("q4", "alice", "Mars", 4)

        player = scores.get_player_score("alice")
        assert player.round_scores == {1: 5, 2: 4}
        assert scores.get_player_round_score("alice", 2) == 4
        assert scores.get_player_round_score("alice", 3) == 0
        assert scores.get_player_round_score("nobody", 1) == 0

    def test_statistics(self):
        _, store, scores = make_scoring()
        store.submit("q1", "alice", "Paris", 1)
        store.submit("q2", "alice", "Green", 3)
        store.submit("q3", "alice", "Seven", 5)

        player = scores.get_player_score("alice")
        assert player.correct_answers == 2
        assert player.incorrect_answers == 1
        assert player.total_questions == 3
        assert player.accuracy == pytest.approx(200 / 3)
        assert player.average_point_value == 3

    def test_history_records_previous_and_new_totals(self):
        _, store, scores = make_scoring()
        store.submit("q1", "alice", "Paris", 5)
        store.submit("q2", "alice", "Blue", 3)
        updates = scores.get_score_updates("alice")
        assert [(u.previous_score, u.new_score) for u in updates] == [(0, 5), (5, 8)]

    def test_returned_aggregates_are_copies(self):
        _, store, scores = make_scoring()
        store.submit("q1", "alice", "Paris", 5)
        player = scores.get_player_score("alice")
        player.total_score = 999
        player.question_scores.clear()
        assert scores.get_player_score("alice").total_score == 5
        assert scores.get_question_score("alice", "q1") is not None

    def test_question_scores_across_participants(self):
        _, store, scores = make_scoring()
        store.submit("q1", "alice", "Paris", 5)
        store.submit("q1", "bob", "Rome", 3)
        assert [s.participant_id for s in scores.get_question_scores("q1")] == ["alice", "bob"]


class TestLeaderboard:
    """Tests for ranking."""

    def test_tie_on_score_broken_by_accuracy(self):
        """Equal totals: 80% accuracy ranks above 60%."""
        _, store, scores = make_scoring(
            rules=ScoringRules(streak_bonus=False), rounds=make_single_round(),
        )
        # bob: 3 of 5 correct, total 10
        store.submit("q1", "bob", "a1", 5)
        store.submit("q2", "bob", "a2", 3)
        store.submit("q3", "bob", "a3", 2)
        store.submit("q4", "bob", "wrong", 1)
        store.submit("q5", "bob", "wrong", 4)
        # alice: 4 of 5 correct, total 10
        store.submit("q1", "alice", "a1", 1)
        store.submit("q2", "alice", "a2", 2)
        store.submit("q3", "alice", "a3", 3)
        store.submit("q4", "alice", "a4", 4)
        store.submit("q5", "alice", "wrong", 5)

        leaderboard = scores.get_player_leaderboard()
        assert [(e.entry_id, e.score, e.accuracy) for e in leaderboard] == [
            ("alice", 10, 80.0), ("bob", 10, 60.0),
        ]
        assert [e.rank for e in leaderboard] == [1, 2]
        assert scores.get_player_rank("alice") == 1
        assert scores.get_player_score("bob").rank == 2

    def test_full_tie_gets_distinct_sequential_ranks(self):
        _, store, scores = make_scoring()
        store.submit("q1", "carol", "Paris", 5)
        store.submit("q1", "dave", "Paris", 5)
        leaderboard = scores.get_player_leaderboard()
        assert [(e.entry_id, e.rank) for e in leaderboard] == [("carol", 1), ("dave", 2)]

    def test_sort_by_correct_answers(self):
        _, store, scores = make_scoring()
        store.submit("q1", "alice", "Paris", 5)
        store.submit("q1", "bob", "Paris", 1)
        store.submit("q2", "bob", "Blue", 3)
        by_score = scores.get_player_leaderboard()
        by_correct = scores.get_player_leaderboard(sort_by="correct_answers")
        assert by_score[0].entry_id == "alice"
        assert by_correct[0].entry_id == "bob"

    def test_top_players(self):
        _, store, scores = make_scoring()
        store.submit("q1", "alice", "Paris", 1)
        store.submit("q1", "bob", "Paris", 5)
        store.submit("q1", "carol", "Paris", 3)
        assert [e.entry_id for e in scores.get_top_players(2)] == ["bob", "carol"]

    def test_leaderboard_event_payload(self):
        _, store, scores = make_scoring()
        events = record_events(scores, EventType.LEADERBOARD_UPDATED)
        store.submit("q1", "alice", "Paris", 5)
        payload = events[-1].payload
        assert payload["player_leaderboard"][0].entry_id == "alice"
        assert payload["team_leaderboard"] == []

    def test_manual_leaderboard_updates(self):
        _, store, scores = make_scoring(
            score_options=ScoreOptions(auto_update_leaderboard=False),
        )
        events = record_events(scores, EventType.LEADERBOARD_UPDATED)
        store.submit("q1", "alice", "Paris", 5)
        assert events == []
        assert scores.get_player_score("alice").rank == 0
        assert scores.get_player_rank("alice") == 1

        scores.update_leaderboards()
        assert len(events) == 1
        assert scores.get_player_score("alice").rank == 1

    def test_score_distribution(self):
        _, store, scores = make_scoring()
        store.submit("q1", "alice", "Paris", 5)
        store.submit("q1", "bob", "Paris", 3)
        store.submit("q1", "carol", "Rome", 1)
        distribution = scores.get_score_distribution()
        assert distribution["min"] == 0
        assert distribution["max"] == 5
        assert distribution["median"] == 3
        assert distribution["mean"] == pytest.approx(8 / 3)
        assert scores.get_average_score() == pytest.approx(8 / 3)

    def test_empty_distribution(self):
        _, _, scores = make_scoring()
        assert scores.get_score_distribution() == {"min": 0, "max": 0, "mean": 0, "median": 0}
        assert scores.get_average_score() == 0.0


class TestTeams:
    """Tests for team aggregates."""

    def create_team_scoring(self):
        _, store, scores = make_scoring(score_options=ScoreOptions(enable_team_scoring=True))
        scores.assign_team("alice", "t1", "Quizzers")
        scores.assign_team("bob", "t1")
        return store, scores

    def test_team_total_is_sum_of_members(self):
        store, scores = self.create_team_scoring()
        events = record_events(scores, EventType.TEAM_SCORED)
        store.submit("q1", "alice", "Paris", 5)
        store.submit("q1", "bob", "Paris", 3)

        team = scores.get_team_score("t1")
        assert team.team_name == "Quizzers"
        assert team.member_ids == ["alice", "bob"]
        assert team.total_score == 8
        assert team.round_scores == {1: 8}
        assert team.correct_answers == 2
        assert team.accuracy == 100.0
        assert len(events) == 2
        assert events[0].team_id == "t1"

    def test_team_leaderboard(self):
        store, scores = self.create_team_scoring()
        scores.assign_team("carol", "t2", "Brains")
        store.submit("q1", "alice", "Paris", 1)
        store.submit("q1", "carol", "Paris", 5)
        leaderboard = scores.get_team_leaderboard()
        assert [(e.entry_id, e.rank, e.entry_type) for e in leaderboard] == [
            ("t2", 1, "team"), ("t1", 2, "team"),
        ]
        assert scores.get_team_rank("t1") == 2
        assert scores.get_top_teams(1)[0].name == "Brains"

    def test_remove_from_team(self):
        store, scores = self.create_team_scoring()
        store.submit("q1", "alice", "Paris", 5)
        store.submit("q1", "bob", "Paris", 3)
        assert scores.remove_from_team("bob")["success"] is True

        team = scores.get_team_score("t1")
        assert team.member_ids == ["alice"]
        assert team.total_score == 5
        assert scores.get_player_score("bob").team_id is None
        assert scores.remove_from_team("bob")["success"] is False

    def test_reassigning_moves_member(self):
        store, scores = self.create_team_scoring()
        store.submit("q1", "bob", "Paris", 3)
        scores.assign_team("bob", "t2")
        assert scores.get_team_score("t1").total_score == 0
        assert scores.get_team_score("t2").total_score == 3

    def test_team_scoring_disabled(self):
        _, _, scores = make_scoring()
        result = scores.assign_team("alice", "t1")
        assert result == {"success": False, "errors": ["Team scoring is disabled"]}


class TestTotalPossibleScore:
    """Tests for calculate_total_possible_score()."""

    def test_each_value_spent_once(self):
        _, _, scores = make_scoring()
        assert scores.calculate_total_possible_score() == 9
        assert scores.calculate_total_possible_score(2) == 12

    def test_largest_values_meet_highest_multipliers(self):
        _, _, scores = make_scoring(rounds=make_rounds(("open-ended", "true-false", "text")))
        # 5 x 1.5 -> 8, 3 x 1.0 -> 3, 1 x 0.8 -> 1
        assert scores.calculate_total_possible_score(1) == 12

    def test_round_multiplier_applies(self):
        _, _, scores = make_scoring(rules=ScoringRules(round_multipliers={1: 2.0}))
        assert scores.calculate_total_possible_score(1) == 18

    def test_duplicate_values_allowed(self):
        _, _, scores = make_scoring(
            submission_options=SubmissionOptions(allow_duplicate_point_values=True),
        )
        assert scores.calculate_total_possible_score(1) == 15

    def test_unknown_round(self):
        _, _, scores = make_scoring()
        assert scores.calculate_total_possible_score(5) == 0


class TestPersistence:
    """Tests for reset() and export/import."""

    def create_played_scoring(self):
        ledger, store, scores = make_scoring(score_options=ScoreOptions(enable_team_scoring=True))
        scores.assign_team("alice", "t1")
        store.submit("q1", "alice", "Paris", 1)
        store.submit("q2", "alice", "Blue", 3)
        store.submit("q3", "alice", "Seven", 5)
        store.submit("q1", "bob", "Rome", 5)
        scores.adjust_score("bob", 2, "Good sport", "host", round_number=1)
        return ledger, store, scores

    def test_round_trip_through_json(self):
        _, _, scores = self.create_played_scoring()
        exported = scores.export_state()

        _, _, restored = make_scoring(score_options=ScoreOptions(enable_team_scoring=True))
        restored.import_state(json.loads(json.dumps(exported)))

        assert restored.export_state() == exported
        assert [e.to_dict() for e in restored.get_player_leaderboard()] == [
            e.to_dict() for e in scores.get_player_leaderboard()
        ]
        assert restored.get_question_score("alice", "q3").bonus_points == 5

    def test_import_rejects_unknown_team_member(self):
        _, _, scores = self.create_played_scoring()
        state = scores.export_state()
        state["team_scores"][0]["member_ids"].append("ghost")

        _, _, restored = make_scoring()
        with pytest.raises(SnapshotImportError) as exc_info:
            restored.import_state(state)
        assert "unknown member 'ghost'" in exc_info.value.validation_errors[0]
        assert restored.get_all_player_scores() == []

    def test_import_rejects_malformed_payload(self):
        _, _, scores = make_scoring()
        with pytest.raises(SnapshotImportError):
            scores.import_state({"player_scores": [{"participant_id": ""}]})

    def test_reset(self):
        _, _, scores = self.create_played_scoring()
        scores.reset()
        assert scores.get_all_player_scores() == []
        assert scores.get_all_team_scores() == []
        assert scores.get_score_updates() == []
        assert scores.get_adjustments() == []
