"""
Learning Orchestrator - one per client.

Coordinates what the pages need:
1. Mock auth, theme and practice settings over the client's storage
2. Home dashboard (level display, streak, vocabulary suggestions)
3. Practice sessions from the daily, recommended or custom question sets
4. The level test and its AI placement (with score-based fallback)
5. Progress overview and leaderboard

Quiz completion updates the stored profile: practice adds XP, the level
test assigns the learner's level.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .agents.level_test_analyzer import (
    LevelTestAnalysisResult,
    LevelTestAnalyzer,
    fallback_analysis,
)
from .agents.vocabulary_advisor import (
    ERROR_SUGGESTIONS,
    DailyVocabularySuggestionsInput,
    VocabularySuggester,
    create_suggester,
    get_daily_vocabulary_suggestions,
)
from .auth import MockAuthProvider
from .config import config
from .constants import (
    LEVEL_TEST_TITLE,
    PRACTICE_SOURCE_CUSTOM,
    PRACTICE_SOURCE_DAILY,
    PRACTICE_SOURCE_RECOMMENDATIONS,
    PRACTICE_TITLES,
    VOCABULARY_LEVELS,
)
from .exceptions import LevelTestAnalysisError, VocabularySuggestionError
from .models.quiz_session import QuizMode, QuizResult, QuizSession
from .models.user_profile import UserProfile
from .practice_settings import PracticeSettingsStore
from .theme import ThemeController
from .utils import question_bank
from .utils.progress import build_leaderboard, daily_progress_percent, level_progress, rank_of
from .utils.question_service import PracticeQuestionsResult, QuestionServiceClient
from .utils.storage import LocalStorage

logger = logging.getLogger(__name__)


@dataclass
class LevelTestOutcome:
    """
    What the level-test result page shows.

    Attributes:
        quiz_score: Score computed by the quiz (authoritative)
        analysis: Placement from the analyzer or the fallback
        result: The completed quiz result
    """
    quiz_score: int
    analysis: LevelTestAnalysisResult
    result: QuizResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            "quizScore": self.quiz_score,
            "analysis": self.analysis.to_dict(),
            "result": self.result.to_dict(),
        }


@dataclass
class PracticeNotice:
    message: str
    is_warning: bool = False


class LearningOrchestrator:
    """
    Per-client coordinator for the page flows.

    Quiz sessions are keyed by mode; starting a new one disposes the
    previous session of the same mode.
    """

    def __init__(
        self,
        storage: LocalStorage,
        analyzer: Optional[LevelTestAnalyzer] = None,
        suggester: Optional[VocabularySuggester] = None,
        question_service: Optional[QuestionServiceClient] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the orchestrator.

        Args:
            storage: The client's local storage
            analyzer: Level-test analyzer (created on first use if None)
            suggester: Vocabulary suggester (configured default if None)
            question_service: Question generator client (created on first use if None)
            clock: Monotonic clock handed to quiz sessions
        """
        self.storage = storage
        self.auth = MockAuthProvider(storage)
        self.theme = ThemeController(storage)
        self.practice_settings = PracticeSettingsStore(storage)

        self._analyzer = analyzer
        self.suggester = suggester or create_suggester()
        self._question_service = question_service
        self.clock = clock

        self.quizzes: Dict[str, QuizSession] = {}
        self.practice_notice: Optional[PracticeNotice] = None
        self.practice_source: str = PRACTICE_SOURCE_DAILY
        self.last_practice_result: Optional[QuizResult] = None
        self.level_test_outcome: Optional[LevelTestOutcome] = None

    @property
    def analyzer(self) -> LevelTestAnalyzer:
        if self._analyzer is None:
            self._analyzer = LevelTestAnalyzer()
        return self._analyzer

    @property
    def question_service(self) -> QuestionServiceClient:
        if self._question_service is None:
            self._question_service = QuestionServiceClient()
        return self._question_service

    # ==================== Dashboard ====================

    def vocabulary_suggestions(self, user: UserProfile) -> List[str]:
        """Suggested words for the dashboard; a placeholder list on failure."""
        request = DailyVocabularySuggestionsInput(
            user_level=user.current_vocabulary_level,
            learning_goals=user.learning_goals,
            number_of_suggestions=config.quiz.default_suggestions,
        )
        try:
            return get_daily_vocabulary_suggestions(request, self.suggester).suggested_words
        except VocabularySuggestionError as e:
            logger.warning(f"Vocabulary suggestions unavailable: {e}")
            return list(ERROR_SUGGESTIONS)

    def home_dashboard(self, user: UserProfile) -> Dict[str, Any]:
        has_practiced = user.words_learned > 0
        return {
            "display_level": user.display_level,
            "daily_percent": daily_progress_percent(
                user.daily_lesson_progress, user.daily_lesson_target
            ),
            "streak_message": (
                f"¡Estás de racha! Llevas {user.consecutive_days} respuestas correctas seguidas."
            ),
            "cta_label": "Continuar Práctica" if has_practiced else "Hacer mi Primera Práctica",
            "show_level_test_link": not has_practiced,
            "suggested_words": self.vocabulary_suggestions(user),
            "recommendations_url": f"/practice?source={PRACTICE_SOURCE_RECOMMENDATIONS}",
        }

    # ==================== Quizzes ====================

    def get_quiz(self, mode: str) -> Optional[QuizSession]:
        """The client's session for ``mode``, caught up with the clock."""
        quiz = self.quizzes.get(mode)
        if quiz is not None:
            quiz.sync()
        return quiz

    def discard_quiz(self, mode: str):
        quiz = self.quizzes.pop(mode, None)
        if quiz is not None:
            quiz.dispose()

    def dispose(self):
        """Stop every session timer (client context expired)."""
        for mode in list(self.quizzes):
            self.discard_quiz(mode)

    def _new_quiz(self, mode: str, questions, title: str, on_complete) -> QuizSession:
        self.discard_quiz(mode)
        quiz = QuizSession(
            questions,
            mode=mode,
            title=title,
            on_complete=on_complete,
            clock=self.clock,
        )
        self.quizzes[mode] = quiz
        quiz.start()
        return quiz

    def _practice_questions(self, source: str):
        if source == PRACTICE_SOURCE_RECOMMENDATIONS:
            questions = question_bank.recommended_practice_questions()
            if questions:
                return questions, None
            logger.warning("No recommended questions, using the daily set")
            return question_bank.daily_practice_questions(), None

        if source == PRACTICE_SOURCE_CUSTOM:
            settings = self.practice_settings.load()
            loaded: PracticeQuestionsResult = self.question_service.load_practice_questions(settings)
            notice = (
                PracticeNotice(loaded.message, loaded.is_warning) if loaded.message else None
            )
            return loaded.questions, notice

        return question_bank.daily_practice_questions(), None

    def start_practice(self, source: Optional[str] = None) -> QuizSession:
        """
        Start a practice session.

        Args:
            source: None/"daily", "recommendations" or "custom"
        """
        source = source if source in PRACTICE_TITLES else PRACTICE_SOURCE_DAILY
        questions, notice = self._practice_questions(source)
        self.practice_source = source
        self.practice_notice = notice
        self.last_practice_result = None
        return self._new_quiz(
            QuizMode.PRACTICE, questions, PRACTICE_TITLES[source], self._on_practice_complete
        )

    def start_level_test(self) -> QuizSession:
        self.level_test_outcome = None
        return self._new_quiz(
            QuizMode.LEVEL_TEST,
            question_bank.level_test_questions(),
            LEVEL_TEST_TITLE,
            self._on_level_test_complete,
        )

    # ==================== Completion ====================

    def _on_practice_complete(self, result: QuizResult):
        self.last_practice_result = result
        user = self.auth.current_user()
        if user is None:
            return
        self.auth.update_profile(
            xp=user.xp + result.score,
            words_learned=user.words_learned + result.correct_answers,
            daily_lesson_progress=user.daily_lesson_progress + 1,
        )
        logger.info(f"User {user.user_id} earned {result.score} XP")

    def analyze_level_test(
        self, answers: List[Dict[str, Any]], quiz_score: int
    ) -> LevelTestAnalysisResult:
        """
        Placement for a finished level test.

        Skips the analyzer when nothing was answered and falls back to an
        Intermedio placement when the analyzer fails.
        """
        if not answers:
            return fallback_analysis(quiz_score, had_answers=False)
        try:
            return self.analyzer.analyze(answers)
        except LevelTestAnalysisError as e:
            logger.warning(f"Level test analysis failed, using fallback: {e}")
            return fallback_analysis(quiz_score, had_answers=True)

    def _on_level_test_complete(self, result: QuizResult):
        analysis = self.analyze_level_test(result.answers or [], result.score)
        self.level_test_outcome = LevelTestOutcome(
            quiz_score=result.score, analysis=analysis, result=result
        )
        if self.auth.current_user() is not None:
            self.auth.update_profile(
                level=analysis.level,
                current_vocabulary_level=VOCABULARY_LEVELS[analysis.level],
            )
            logger.info(f"Assigned level {analysis.level} ({analysis.analyzed_by})")

    # ==================== Progress ====================

    def progress_overview(self, user: UserProfile) -> Dict[str, Any]:
        leaderboard = build_leaderboard(question_bank.leaderboard_users(), user)
        return {
            "level": level_progress(user.level, user.xp),
            "leaderboard": leaderboard,
            "rank": rank_of(leaderboard, user.user_id),
            "xp": user.xp,
            "words_learned": user.words_learned,
            "consecutive_days": user.consecutive_days,
        }
