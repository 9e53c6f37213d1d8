"""Loading of the bundled question sets and mock leaderboard."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from ..config import config
from ..models.question import Question, questions_from_list
from ..models.user_profile import LeaderboardUser

logger = logging.getLogger(__name__)

LEVEL_TEST = "level_test"
PRACTICE_DAILY = "practice_daily"
PRACTICE_RECOMMENDED = "practice_recommended"
PRACTICE_FALLBACK = "practice_fallback"
LEADERBOARD = "leaderboard"


def _read(name: str, data_dir: Optional[Path] = None) -> list:
    path = Path(data_dir or config.paths.question_sets_dir) / f"{name}.json"
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


@lru_cache(maxsize=None)
def load_question_set(name: str) -> tuple:
    """
    Load and normalise a bundled question set.

    Returns a tuple so the cached value cannot be mutated by callers.
    """
    questions = questions_from_list(_read(name))
    logger.debug(f"Loaded {len(questions)} questions from '{name}'")
    return tuple(questions)


def level_test_questions() -> List[Question]:
    return list(load_question_set(LEVEL_TEST))


def daily_practice_questions() -> List[Question]:
    return list(load_question_set(PRACTICE_DAILY))


def recommended_practice_questions() -> List[Question]:
    return list(load_question_set(PRACTICE_RECOMMENDED))


def fallback_practice_questions() -> List[Question]:
    return list(load_question_set(PRACTICE_FALLBACK))


def leaderboard_users() -> List[LeaderboardUser]:
    return [LeaderboardUser.from_dict(item) for item in _read(LEADERBOARD)]
