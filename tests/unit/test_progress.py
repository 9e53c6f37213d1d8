"""
Unit tests for progress analytics helpers.
"""

import pytest

from speakly.models.user_profile import LeaderboardUser, default_user
from speakly.utils.progress import (
    build_leaderboard,
    daily_progress_percent,
    format_time,
    level_progress,
    next_level_xp,
    rank_of,
)


class TestLevelProgress:
    def test_next_level_xp(self):
        assert next_level_xp("Novato") == 100
        assert next_level_xp("Intermedio") == 250
        assert next_level_xp("Experto") is None

    def test_novice_progress(self):
        progress = level_progress("Novato", 40)
        assert progress["percent"] == 40.0
        assert progress["points_to_next"] == 60
        assert progress["title"] == "Novato Aspirante"

    def test_progress_is_capped(self):
        progress = level_progress("Intermedio", 400)
        assert progress["percent"] == 100.0
        assert progress["points_to_next"] == 0

    def test_top_level(self):
        progress = level_progress("Experto", 5000)
        assert progress == {
            "percent": 100.0,
            "points_to_next": 0,
            "next_level_xp": None,
            "title": "Experto Lingüista",
        }

    def test_unknown_level_treated_as_novice(self):
        assert level_progress("???", 10)["next_level_xp"] == 100


class TestLeaderboard:
    @pytest.fixture
    def others(self):
        return [
            LeaderboardUser("2", "Ana C.", 1250, "Experto"),
            LeaderboardUser("3", "Luis G.", 980, "Intermedio"),
            LeaderboardUser("4", "Sofia M.", 55, "Novato"),
        ]

    def test_current_user_is_ranked_by_xp(self, others):
        user = default_user()
        user.xp = 100
        board = build_leaderboard(others, user)
        assert [u.name for u in board] == ["Ana C.", "Luis G.", "Mario", "Sofia M."]
        assert board[2].is_current_user
        assert rank_of(board, user.user_id) == 3

    def test_same_id_is_replaced(self, others):
        user = default_user()
        user.user_id = "3"
        user.xp = 10
        board = build_leaderboard(others, user)
        assert len(board) == 3
        assert board[-1].name == "Mario"

    def test_does_not_mutate_input(self, others):
        build_leaderboard(others, default_user())
        assert not any(u.is_current_user for u in others)

    def test_rank_of_missing_user(self, others):
        assert rank_of(build_leaderboard(others), "nobody") is None


class TestSmallHelpers:
    @pytest.mark.parametrize(
        "progress,target,expected", [(0, 5, 0.0), (2, 5, 40.0), (9, 5, 100.0), (1, 0, 0.0)]
    )
    def test_daily_progress_percent(self, progress, target, expected):
        assert daily_progress_percent(progress, target) == expected

    @pytest.mark.parametrize(
        "seconds,expected", [(180, "3:00"), (65, "1:05"), (9, "0:09"), (0, "0:00"), (-4, "0:00")]
    )
    def test_format_time(self, seconds, expected):
        assert format_time(seconds) == expected
