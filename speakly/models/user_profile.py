"""
User profile and leaderboard models.

Profiles are stored as camelCase JSON in local storage, so ``to_dict`` and
``from_dict`` speak that shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..constants import LEVEL_EXPERT, LEVEL_INTERMEDIATE, LEVEL_NOVICE

# Level -> XP needed to reach the next level (None = top level)
LEVEL_DETAILS: Dict[str, Dict[str, Any]] = {
    LEVEL_NOVICE: {"display": "NIVEL 1", "title": "Novato Aspirante", "next_level_xp": 100},
    LEVEL_INTERMEDIATE: {"display": "NIVEL 2", "title": "Intermedio Destacado", "next_level_xp": 250},
    LEVEL_EXPERT: {"display": "NIVEL 3", "title": "Experto Lingüista", "next_level_xp": None},
}

_STORAGE_FIELDS = {
    "user_id": "id",
    "name": "name",
    "email": "email",
    "avatar_url": "avatarUrl",
    "level": "level",
    "xp": "xp",
    "words_learned": "wordsLearned",
    "consecutive_days": "consecutiveDays",
    "current_vocabulary_level": "currentVocabularyLevel",
    "learning_goals": "learningGoals",
    "topic": "topic",
    "last_login": "lastLogin",
    "daily_lesson_target": "dailyLessonTarget",
    "daily_lesson_progress": "dailyLessonProgress",
}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class UserProfile:
    """
    The signed-in learner.

    Attributes:
        user_id: Unique identifier
        name: Display name
        email: Email address
        avatar_url: Avatar image URL
        level: Novato / Intermedio / Experto
        xp: Experience points earned in practice
        words_learned: Count of words practised
        consecutive_days: Current streak
        current_vocabulary_level: Level label used for vocabulary suggestions
        learning_goals: Free-text goals
        topic: Preferred topic
        last_login: ISO timestamp of the last sign-in
        daily_lesson_target: Lessons planned per day
        daily_lesson_progress: Lessons completed today
    """
    user_id: str
    name: str
    email: str
    avatar_url: Optional[str] = None
    level: str = LEVEL_NOVICE
    xp: int = 0
    words_learned: int = 0
    consecutive_days: int = 0
    current_vocabulary_level: str = "Beginner"
    learning_goals: str = "General English improvement"
    topic: Optional[str] = None
    last_login: Optional[str] = field(default_factory=_now_iso)
    daily_lesson_target: int = 5
    daily_lesson_progress: int = 0

    @property
    def display_level(self) -> str:
        return LEVEL_DETAILS.get(self.level, LEVEL_DETAILS[LEVEL_NOVICE])["display"]

    @property
    def initials(self) -> str:
        parts = [p for p in self.name.split() if p]
        return "".join(p[0] for p in parts[:2]).upper() or "?"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the stored camelCase shape."""
        return {key: getattr(self, attr) for attr, key in _STORAGE_FIELDS.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserProfile":
        known = {f.name for f in fields(cls)}
        kwargs = {
            attr: data[key]
            for attr, key in _STORAGE_FIELDS.items()
            if key in data and attr in known
        }
        return cls(**kwargs)


def default_user() -> UserProfile:
    """The single mock account."""
    return UserProfile(
        user_id="user_mock_mario_123",
        name="Mario",
        email="mario@speakly.ai",
        avatar_url="https://placehold.co/40x40.png?text=M",
        level=LEVEL_NOVICE,
        xp=0,
        words_learned=0,
        consecutive_days=0,
        current_vocabulary_level="Beginner",
        learning_goals="General English improvement",
        topic="Viajes",
        daily_lesson_target=5,
        daily_lesson_progress=0,
    )


@dataclass
class LeaderboardUser:
    user_id: str
    name: str
    xp: int
    level: str
    avatar_url: Optional[str] = None
    is_current_user: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.user_id,
            "name": self.name,
            "avatarUrl": self.avatar_url,
            "xp": self.xp,
            "level": self.level,
            "isCurrentUser": self.is_current_user,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LeaderboardUser":
        return cls(
            user_id=data["id"],
            name=data["name"],
            xp=int(data.get("xp", 0)),
            level=data.get("level", LEVEL_NOVICE),
            avatar_url=data.get("avatarUrl"),
        )
