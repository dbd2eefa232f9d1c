# Area: Configuration Tests
"""Tests for lastcall_engine.rules and lastcall_engine.config."""

import json
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from lastcall_engine.config import ENV_MAPPINGS, load_engine_config
from lastcall_engine.rules import ScoreOptions, ScoringRules, SubmissionOptions


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep LASTCALL_* variables from the host environment out of the tests."""
    for key in ENV_MAPPINGS:
        monkeypatch.delenv(key, raising=False)


class TestScoringRules:
    """Tests for ScoringRules validation."""

    def test_defaults(self):
        rules = ScoringRules()
        assert rules.correct_answer_multiplier == 1.0
        assert rules.incorrect_answer_penalty == 0.0
        assert rules.streak_bonus is True
        assert rules.streak_bonus_threshold == 3
        assert rules.streak_bonus_points == 5
        assert rules.round_multipliers == {}
        assert rules.question_type_multiplier("open-ended") == 1.5
        assert rules.question_type_multiplier("true-false") == 0.8
        assert rules.question_type_multiplier("riddle") == 1.0
        assert rules.round_multiplier(2) == 1.0

    @pytest.mark.parametrize("overrides", [
        {"correct_answer_multiplier": -1},
        {"incorrect_answer_penalty": 1.5},
        {"streak_bonus_threshold": 0},
        {"round_multipliers": {1: -0.5}},
        {"question_type_multipliers": {"open-ended": -2}},
        {"unknown_rule": True},
    ])
    def test_rejects_invalid_values(self, overrides):
        with pytest.raises(ValidationError):
            ScoringRules(**overrides)

    def test_round_multipliers_keys_coerced(self):
        rules = ScoringRules.model_validate({"round_multipliers": {"2": 2.0}})
        assert rules.round_multiplier(2) == 2.0

    def test_with_overrides_returns_validated_copy(self):
        rules = ScoringRules()
        stricter = rules.with_overrides(streak_bonus_threshold=4)
        assert stricter.streak_bonus_threshold == 4
        assert rules.streak_bonus_threshold == 3
        with pytest.raises(ValidationError):
            rules.with_overrides(incorrect_answer_penalty=2)

    def test_frozen(self):
        with pytest.raises(ValidationError):
            ScoringRules().streak_bonus = False


class TestOptions:
    """Tests for SubmissionOptions and ScoreOptions."""

    def test_submission_defaults(self):
        options = SubmissionOptions()
        assert options.allow_duplicate_point_values is False
        assert options.max_submissions_per_question == 1
        assert options.require_all_answers is False
        assert options.enable_validation is True

    def test_negative_attempt_limit_rejected(self):
        with pytest.raises(ValidationError):
            SubmissionOptions(max_submissions_per_question=-1)

    def test_apply_to_disables_streak_bonus(self):
        rules = ScoreOptions(enable_streak_bonus=False).apply_to(ScoringRules())
        assert rules.streak_bonus is False

    def test_apply_to_leaves_rules_untouched_when_enabled(self):
        rules = ScoringRules(streak_bonus_points=7)
        assert ScoreOptions().apply_to(rules) is rules


class TestLoadEngineConfig:
    """Tests for load_engine_config()."""

    def test_reads_json_file(self, tmp_path):
        config_file = tmp_path / "game.json"
        config_file.write_text(json.dumps({
            "last_call": {"round1_questions": [], "round2_questions": []},
            "scoring_rules": {"incorrect_answer_penalty": 0.5},
        }))
        config = load_engine_config(str(config_file), env_file=str(tmp_path / "none.env"))
        assert config["scoring_rules"] == {"incorrect_answer_penalty": 0.5}
        assert "last_call" in config

    def test_missing_file_warns(self, tmp_path):
        with patch("lastcall_engine.config.logger") as mock_logger:
            config = load_engine_config(
                str(tmp_path / "absent.json"), env_file=str(tmp_path / "none.env"),
            )
        assert config == {}
        mock_logger.warning.assert_called_once()

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        config_file = tmp_path / "game.json"
        config_file.write_text(json.dumps({"scoring_rules": {"streak_bonus_points": 5}}))
        monkeypatch.setenv("LASTCALL_STREAK_BONUS_POINTS", "8")
        monkeypatch.setenv("LASTCALL_ALLOW_DUPLICATE_POINT_VALUES", "yes")
        monkeypatch.setenv("LASTCALL_ENABLE_TEAM_SCORING", "0")
        monkeypatch.setenv("LASTCALL_LOG_LEVEL", "debug")

        config = load_engine_config(str(config_file), env_file=str(tmp_path / "none.env"))
        assert config["scoring_rules"]["streak_bonus_points"] == 8
        assert config["submission_options"]["allow_duplicate_point_values"] is True
        assert config["score_options"]["enable_team_scoring"] is False
        assert config["log_level"] == "DEBUG"

    def test_dotenv_file(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("LASTCALL_INCORRECT_ANSWER_PENALTY=0.25\n")
        # Registered so monkeypatch removes what load_dotenv sets
        monkeypatch.setenv("LASTCALL_INCORRECT_ANSWER_PENALTY", "placeholder")
        monkeypatch.delenv("LASTCALL_INCORRECT_ANSWER_PENALTY")

        config = load_engine_config(env_file=str(env_file))
        assert config == {"scoring_rules": {"incorrect_answer_penalty": 0.25}}

    def test_invalid_environment_value(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LASTCALL_MAX_SUBMISSIONS_PER_QUESTION", "many")
        with pytest.raises(ValueError) as exc_info:
            load_engine_config(env_file=str(tmp_path / "none.env"))
        assert "LASTCALL_MAX_SUBMISSIONS_PER_QUESTION" in str(exc_info.value)
