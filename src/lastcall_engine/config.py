# Area: Configuration
"""
lastcall_engine.config — Engine configuration loading
=====================================================

Builds the plain configuration dict consumed by
``TriviaEngine.from_config()``. Values come from an optional JSON file
and are then overridden by ``LASTCALL_*`` environment variables (a
``.env`` file is loaded first through python-dotenv).

JSON layout (every section optional except the rounds):

    {
      "rounds": [{"number": 1, "available_point_values": [1, 3, 5],
                  "questions": [{"question_id": "q1", "correct_answer": "Paris"}]}],
      "last_call": {"round1_questions": [...], "round2_questions": [...]},
      "scoring_rules": {"incorrect_answer_penalty": 0.5},
      "submission_options": {"max_submissions_per_question": 2},
      "score_options": {"enable_team_scoring": true},
      "log_level": "INFO"
    }
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from dotenv import load_dotenv

logger = logging.getLogger("lastcall_engine.config")

TRUE_VALUES = ("true", "1", "yes", "on")


def _as_bool(value: str) -> bool:
    return value.strip().lower() in TRUE_VALUES


# env var -> (config section or None for top level, key, converter)
ENV_MAPPINGS: Dict[str, Tuple[Optional[str], str, Callable[[str], Any]]] = {
    "LASTCALL_CORRECT_ANSWER_MULTIPLIER": ("scoring_rules", "correct_answer_multiplier", float),
    "LASTCALL_INCORRECT_ANSWER_PENALTY": ("scoring_rules", "incorrect_answer_penalty", float),
    "LASTCALL_STREAK_BONUS": ("scoring_rules", "streak_bonus", _as_bool),
    "LASTCALL_STREAK_BONUS_THRESHOLD": ("scoring_rules", "streak_bonus_threshold", int),
    "LASTCALL_STREAK_BONUS_POINTS": ("scoring_rules", "streak_bonus_points", int),
    "LASTCALL_ALLOW_DUPLICATE_POINT_VALUES": (
        "submission_options", "allow_duplicate_point_values", _as_bool,
    ),
    "LASTCALL_AUTO_LOCK_ON_SUBMISSION": ("submission_options", "auto_lock_on_submission", _as_bool),
    "LASTCALL_MAX_SUBMISSIONS_PER_QUESTION": (
        "submission_options", "max_submissions_per_question", int,
    ),
    "LASTCALL_REQUIRE_ALL_ANSWERS": ("submission_options", "require_all_answers", _as_bool),
    "LASTCALL_ENABLE_TEAM_SCORING": ("score_options", "enable_team_scoring", _as_bool),
    "LASTCALL_AUTO_UPDATE_LEADERBOARD": ("score_options", "auto_update_leaderboard", _as_bool),
    "LASTCALL_LOG_LEVEL": (None, "log_level", str.upper),
}


def load_engine_config(
    config_path: Optional[str] = None,
    env_file: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Load config from file, then environment.

    Args:
        config_path: JSON file to read; a missing file is skipped
        env_file: ``.env`` file to load (default: python-dotenv's search)

    Returns:
        Configuration dict for TriviaEngine.from_config()

    Raises:
        ValueError: If an environment override cannot be converted
    """
    config: Dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path, encoding="utf-8") as f:
                config = json.load(f)
            logger.info(f"Loaded engine config from {path}")
        else:
            logger.warning(f"Config file {path} not found, using defaults")

    load_dotenv(dotenv_path=env_file)

    for env_key, (section, key, convert) in ENV_MAPPINGS.items():
        if env_key not in os.environ:
            continue
        raw = os.environ[env_key]
        try:
            value = convert(raw)
        except ValueError as e:
            raise ValueError(f"Invalid value for {env_key}: {raw!r}") from e
        target = config.setdefault(section, {}) if section else config
        target[key] = value
        logger.debug(f"{env_key} overrides {section or 'config'}.{key}")

    return config
