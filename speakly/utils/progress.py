"""
Progress analytics helpers for the dashboard and progress pages.

Provides:
- Level progress (percentage and XP to the next level)
- Leaderboard assembly and ranking
- Daily lesson progress
- Countdown formatting
"""

from __future__ import annotations

from typing import Dict, List, Optional

from ..models.user_profile import LEVEL_DETAILS, LeaderboardUser, UserProfile
from ..constants import LEVEL_NOVICE


def next_level_xp(level: str) -> Optional[int]:
    """XP needed to leave ``level``; None for the top level."""
    return LEVEL_DETAILS.get(level, LEVEL_DETAILS[LEVEL_NOVICE])["next_level_xp"]


def level_progress(level: str, xp: int) -> Dict[str, object]:
    """
    Calculate progress towards the next level.

    Args:
        level: Current learner level
        xp: Experience points

    Returns:
        Dict with percent (0-100), points_to_next, next_level_xp and title

    Example:
        >>> level_progress("Novato", 40)["percent"]
        40.0
    """
    details = LEVEL_DETAILS.get(level, LEVEL_DETAILS[LEVEL_NOVICE])
    target = details["next_level_xp"]

    if target is None:
        return {"percent": 100.0, "points_to_next": 0, "next_level_xp": None, "title": details["title"]}

    percent = max(0.0, min(100.0, (xp / target) * 100))
    return {
        "percent": round(percent, 1),
        "points_to_next": max(0, target - xp),
        "next_level_xp": target,
        "title": details["title"],
    }


def build_leaderboard(
    others: List[LeaderboardUser], current_user: Optional[UserProfile] = None
) -> List[LeaderboardUser]:
    """
    Merge the current user into the leaderboard and sort by XP (descending).

    An existing entry with the same id is replaced by the live profile.
    Ties keep their original order.
    """
    entries = [
        LeaderboardUser(u.user_id, u.name, u.xp, u.level, u.avatar_url)
        for u in others
        if current_user is None or u.user_id != current_user.user_id
    ]
    if current_user is not None:
        entries.append(
            LeaderboardUser(
                user_id=current_user.user_id,
                name=current_user.name,
                xp=current_user.xp,
                level=current_user.level,
                avatar_url=current_user.avatar_url,
                is_current_user=True,
            )
        )
    return sorted(entries, key=lambda u: u.xp, reverse=True)


def rank_of(leaderboard: List[LeaderboardUser], user_id: str) -> Optional[int]:
    """1-based rank of ``user_id`` or None if absent."""
    for position, entry in enumerate(leaderboard, start=1):
        if entry.user_id == user_id:
            return position
    return None


def daily_progress_percent(progress: int, target: int) -> float:
    if target <= 0:
        return 0.0
    return round(max(0.0, min(100.0, progress / target * 100)), 1)


def format_time(seconds: int) -> str:
    """Format a countdown as m:ss."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"
