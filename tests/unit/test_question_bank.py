"""
Unit tests for the bundled question sets.
"""

from speakly.utils import question_bank


class TestQuestionBank:
    def test_level_test_set(self):
        questions = question_bank.level_test_questions()
        assert [q.question_id for q in questions] == [f"ltq{i}" for i in range(1, 11)]
        for question in questions:
            assert question.max_attempts == 2
            assert question.correct_option.option_id == "A"
        assert questions[0].correct_option.text == "Ecstatic"

    def test_daily_set(self):
        questions = question_bank.daily_practice_questions()
        assert len(questions) == 10
        assert all(q.correct_option.option_id == "o1" for q in questions)

    def test_recommended_set(self):
        questions = question_bank.recommended_practice_questions()
        assert [q.question_id for q in questions] == [
            "rec_ebullient",
            "rec_ephemeral",
            "rec_serendipity",
        ]
        assert all(q.translation for q in questions)

    def test_fallback_set(self):
        questions = question_bank.fallback_practice_questions()
        assert [q.correct_option.text for q in questions] == ["Paris", "Mars"]

    def test_returned_lists_are_copies(self):
        first = question_bank.daily_practice_questions()
        first.clear()
        assert len(question_bank.daily_practice_questions()) == 10

    def test_leaderboard(self):
        users = question_bank.leaderboard_users()
        assert [u.name for u in users] == ["Ana C.", "Luis G.", "Sofia M.", "Carlos P."]
        assert users[0].xp == 1250
