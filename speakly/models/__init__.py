"""
Data models for SpeaklyAI.

This module contains core data models:
- Question: Normalised multiple-choice question
- QuizSession: Timed, attempt-scored quiz state machine
- UserProfile: Signed-in learner and leaderboard entries
"""

from .question import Question, QuestionOption, question_from_dict, questions_from_list
from .quiz_session import (
    AnswerAttempt,
    QuestionProgress,
    QuizMode,
    QuizResult,
    QuizSession,
    QuizState,
)
from .user_profile import LEVEL_DETAILS, LeaderboardUser, UserProfile, default_user

__all__ = [
    "Question",
    "QuestionOption",
    "question_from_dict",
    "questions_from_list",
    "AnswerAttempt",
    "QuestionProgress",
    "QuizMode",
    "QuizResult",
    "QuizSession",
    "QuizState",
    "LEVEL_DETAILS",
    "LeaderboardUser",
    "UserProfile",
    "default_user",
]
