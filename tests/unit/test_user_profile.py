"""
Unit tests for the user profile model.
"""

from speakly.models.user_profile import LeaderboardUser, UserProfile, default_user


class TestUserProfile:
    def test_default_user(self):
        user = default_user()
        assert user.user_id == "user_mock_mario_123"
        assert user.email == "mario@speakly.ai"
        assert user.level == "Novato"
        assert user.topic == "Viajes"
        assert user.display_level == "NIVEL 1"
        assert user.initials == "M"

    def test_storage_shape_is_camel_case(self):
        data = default_user().to_dict()
        assert data["id"] == "user_mock_mario_123"
        assert data["wordsLearned"] == 0
        assert data["currentVocabularyLevel"] == "Beginner"
        assert "words_learned" not in data

    def test_from_dict_ignores_unknown_keys(self):
        user = UserProfile.from_dict(
            {"id": "u1", "name": "Ana Clara", "email": "a@b.c", "level": "Experto", "extra": 1}
        )
        assert user.user_id == "u1"
        assert user.initials == "AC"
        assert user.display_level == "NIVEL 3"

    def test_blank_name_initials(self):
        assert UserProfile("u1", "  ", "a@b.c").initials == "?"


class TestLeaderboardUser:
    def test_from_dict(self):
        entry = LeaderboardUser.from_dict({"id": "2", "name": "Ana C.", "xp": "1250"})
        assert entry.xp == 1250
        assert entry.level == "Novato"
        assert entry.to_dict()["isCurrentUser"] is False
