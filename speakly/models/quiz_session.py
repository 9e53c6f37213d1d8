"""
Quiz Session - the timed, attempt-scored quiz behind practice and the level test.

A session walks through its questions one at a time. Each question allows one
or two attempts, awards points by attempt number, shows feedback once resolved
and advances on request (or automatically after a configurable delay). A
countdown ends the session early when it reaches zero.
"""

from __future__ import annotations

import logging
import random
import threading
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..config import config
from ..exceptions import NoSelectionError, QuizError
from .question import Question

logger = logging.getLogger(__name__)


class QuizMode:
    LEVEL_TEST = "level-test"
    PRACTICE = "practice"

    ALL = (LEVEL_TEST, PRACTICE)


class QuizState:
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    SHOWING_FEEDBACK = "showing_feedback"
    COMPLETED = "completed"
    NO_QUESTIONS = "no_questions"


def points_for_mode(mode: str) -> tuple:
    """Points awarded for a correct first and second attempt."""
    if mode == QuizMode.LEVEL_TEST:
        return tuple(config.quiz.level_test_points)
    return tuple(config.quiz.practice_points)


@dataclass
class AnswerAttempt:
    """
    A single selection against a question.

    Attributes:
        question_id: Question identifier
        selected_option_id: Option the learner picked
        selected_option_text: Text of that option
        attempt_number: 1 or 2
        is_correct: Whether the option was the correct one
        points_awarded: Points added to the session score
    """
    question_id: str
    selected_option_id: str
    selected_option_text: str
    attempt_number: int
    is_correct: bool
    points_awarded: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionId": self.question_id,
            "selectedOptionId": self.selected_option_id,
            "selectedOptionText": self.selected_option_text,
            "attemptNumber": self.attempt_number,
            "isCorrect": self.is_correct,
            "pointsAwarded": self.points_awarded,
        }


@dataclass
class QuestionProgress:
    """Attempt state of one question within a session."""
    question: Question
    attempts: List[AnswerAttempt] = field(default_factory=list)
    resolved: bool = False

    @property
    def exhausted_option_ids(self) -> set:
        return {a.selected_option_id for a in self.attempts if not a.is_correct}

    @property
    def attempts_left(self) -> int:
        return max(0, self.question.max_attempts - len(self.attempts))

    @property
    def answered_correctly(self) -> bool:
        return bool(self.attempts) and self.attempts[-1].is_correct

    @property
    def points(self) -> int:
        return sum(a.points_awarded for a in self.attempts)

    @property
    def feedback_message(self) -> Optional[str]:
        if not self.attempts:
            return None

        last = self.attempts[-1]
        if last.is_correct:
            return f"¡Correcto! Ganaste +{last.points_awarded} puntos."

        if not self.resolved:
            return "Incorrecto. Tenés una oportunidad más."

        question = self.question
        if question.question_type == "vocabulary" and question.translation:
            return f'Incorrecto. La palabra "{question.text}" significa: {question.translation}.'
        if question.explanation:
            return f"Incorrecto. {question.explanation.rstrip('.')}."
        return "Respuesta incorrecta."

    def analysis_entry(self) -> Dict[str, Any]:
        """Per-question record sent to the level-test analysis."""
        last = self.attempts[-1]
        return {
            "question": self.question.text,
            "selectedAnswer": last.selected_option_text,
            "correctAnswer": self.question.correct_option.text,
            "attempts": len(self.attempts),
        }


@dataclass
class QuizResult:
    """
    Outcome of a completed session.

    ``answers`` is only populated for level tests.
    """
    session_id: str
    mode: str
    title: str
    score: int
    total_questions: int
    answered_questions: int
    correct_answers: int
    timed_out: bool
    completed_at: str
    answers: Optional[List[Dict[str, Any]]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "mode": self.mode,
            "title": self.title,
            "score": self.score,
            "totalQuestions": self.total_questions,
            "answeredQuestions": self.answered_questions,
            "correctAnswers": self.correct_answers,
            "timedOut": self.timed_out,
            "completedAt": self.completed_at,
            "answers": self.answers,
        }


class QuizSession:
    """
    Timed quiz over a fixed list of questions.

    States: not_started -> in_progress <-> showing_feedback -> completed,
    or no_questions when built with an empty list.

    Answering comes in two flavours over the same state:
    - ``select_option`` records an attempt immediately
    - ``choose_option`` + ``submit`` records the pending choice

    ``on_complete`` is called exactly once per run with the ``QuizResult``.
    The countdown is driven by ``tick`` (one second) or ``sync`` (catch up on
    the injected clock). After completion nothing mutates the session
    except ``restart`` in practice mode.
    """

    def __init__(
        self,
        questions: Sequence[Question],
        mode: str = QuizMode.PRACTICE,
        title: str = "",
        on_complete: Optional[Callable[[QuizResult], None]] = None,
        time_limit_seconds: Optional[int] = None,
        auto_advance_seconds: Optional[float] = None,
        shuffle_options: Optional[bool] = None,
        random_seed: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
        session_id: Optional[str] = None,
    ):
        """
        Initialize a quiz session.

        Args:
            questions: Questions in presentation order
            mode: QuizMode.PRACTICE or QuizMode.LEVEL_TEST
            title: Title shown on the page
            on_complete: Callback receiving the QuizResult
            time_limit_seconds: Countdown length (default from config)
            auto_advance_seconds: Delay before moving on after feedback (None = manual)
            shuffle_options: Shuffle options per question (default from config)
            random_seed: Seed for option shuffling
            clock: Monotonic clock in seconds
            session_id: Session ID (auto-generated if None)
        """
        if mode not in QuizMode.ALL:
            raise QuizError(f"Unknown quiz mode '{mode}'")

        self.session_id = session_id or f"qz-{uuid.uuid4()}"
        self.mode = mode
        self.title = title
        self.on_complete = on_complete
        self.points_table = points_for_mode(mode)
        self.time_limit_seconds = (
            time_limit_seconds if time_limit_seconds is not None else config.quiz.time_limit_seconds
        )
        self.auto_advance_seconds = (
            auto_advance_seconds
            if auto_advance_seconds is not None
            else config.quiz.auto_advance_seconds
        )
        self._clock = clock
        self._lock = threading.RLock()

        if shuffle_options is None:
            shuffle_options = config.quiz.shuffle_options
        if shuffle_options:
            rng = random.Random(random_seed if random_seed is not None else config.quiz.random_seed)
            questions = [self._shuffled(q, rng) for q in questions]
        self.questions: List[Question] = list(questions)

        self._reset()

    @staticmethod
    def _shuffled(question: Question, rng: random.Random) -> Question:
        options = list(question.options)
        rng.shuffle(options)
        return Question(
            question_id=question.question_id,
            question_type=question.question_type,
            text=question.text,
            options=options,
            translation=question.translation,
            explanation=question.explanation,
        )

    def _reset(self):
        self.state = QuizState.NO_QUESTIONS if not self.questions else QuizState.NOT_STARTED
        self.current_index = 0
        self.score = 0
        self.time_left_seconds = self.time_limit_seconds
        self.timed_out = False
        self.answers: List[AnswerAttempt] = []
        self.progress: List[QuestionProgress] = [QuestionProgress(q) for q in self.questions]
        self.pending_option_id: Optional[str] = None
        self.result: Optional[QuizResult] = None
        self.started_at: Optional[str] = None
        self._last_tick: Optional[float] = None
        self._feedback_since: Optional[float] = None
        self._timer_active = False
        self._disposed = False

    # --- Read-only views ---

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def completed(self) -> bool:
        return self.state == QuizState.COMPLETED

    @property
    def is_active(self) -> bool:
        return self.state in (QuizState.IN_PROGRESS, QuizState.SHOWING_FEEDBACK)

    @property
    def current_question(self) -> Optional[Question]:
        if not self.questions or self.current_index >= len(self.questions):
            return None
        return self.questions[self.current_index]

    @property
    def current_progress(self) -> Optional[QuestionProgress]:
        if not self.progress or self.current_index >= len(self.progress):
            return None
        return self.progress[self.current_index]

    @property
    def is_last_question(self) -> bool:
        return self.current_index >= len(self.questions) - 1

    @property
    def action_label(self) -> str:
        """Label of the primary quiz button."""
        if self.state == QuizState.SHOWING_FEEDBACK:
            return "Ver Resultados" if self.is_last_question else "Siguiente Pregunta"
        progress = self.current_progress
        if progress is not None and progress.attempts:
            return "Confirmar 2ª Oportunidad"
        return "Verificar Respuesta"

    # --- Lifecycle ---

    def start(self):
        """Start the countdown. No-op unless the session has not started yet."""
        with self._lock:
            if self.state != QuizState.NOT_STARTED or self._disposed:
                return
            self.state = QuizState.IN_PROGRESS
            self.time_left_seconds = self.time_limit_seconds
            self.started_at = datetime.now(timezone.utc).isoformat()
            self._last_tick = self._clock()
            self._timer_active = True
            logger.info(
                f"Quiz {self.session_id} started [mode={self.mode}, questions={self.total_questions}]"
            )

    def tick(self):
        """Advance the countdown by one second."""
        with self._lock:
            if not self._timer_active or not self.is_active:
                return
            self.time_left_seconds = max(0, self.time_left_seconds - 1)
            if self.time_left_seconds == 0:
                self.timed_out = True
                logger.info(f"Quiz {self.session_id} timed out with score {self.score}")
                self._complete()

    def sync(self):
        """Replay the ticks owed since the last one, then auto-advance if due."""
        with self._lock:
            if not self._timer_active or self._last_tick is None:
                return
            now = self._clock()
            owed = int(now - self._last_tick)
            for _ in range(owed):
                self._last_tick += 1
                self.tick()
                if not self._timer_active:
                    return
            self.advance_if_due()

    def dispose(self):
        """Stop the countdown for good (the owning page went away)."""
        with self._lock:
            self._timer_active = False
            self._disposed = True

    @property
    def disposed(self) -> bool:
        return self._disposed

    # --- Answering ---

    def _option_for_current(self, option_id: str):
        question = self.current_question
        option = question.get_option(option_id) if question else None
        if option is None:
            raise QuizError(f"Option '{option_id}' does not belong to the current question")
        return option

    def choose_option(self, option_id: str) -> bool:
        """
        Mark an option as the pending choice.

        Returns:
            False (and changes nothing) if the question is not open or the
            option was already tried

        Raises:
            QuizError: If the option is not part of the current question
        """
        with self._lock:
            if self.state != QuizState.IN_PROGRESS:
                return False
            self._option_for_current(option_id)
            if option_id in self.current_progress.exhausted_option_ids:
                return False
            self.pending_option_id = option_id
            return True

    def submit(self) -> Optional[AnswerAttempt]:
        """
        Record the pending choice as an attempt.

        Returns:
            The recorded attempt, or None if the question is not open

        Raises:
            NoSelectionError: If no option was chosen
        """
        with self._lock:
            if self.state != QuizState.IN_PROGRESS:
                return None
            if self.pending_option_id is None:
                raise NoSelectionError()
            return self._record(self.pending_option_id)

    def select_option(self, option_id: str) -> Optional[AnswerAttempt]:
        """
        Choose and submit in one step.

        Returns:
            The recorded attempt, or None when the selection is a no-op
            (feedback showing, session finished, option already tried)
        """
        with self._lock:
            if not self.choose_option(option_id):
                return None
            return self._record(option_id)

    def _record(self, option_id: str) -> AnswerAttempt:
        progress = self.current_progress
        option = self._option_for_current(option_id)
        attempt_number = len(progress.attempts) + 1

        points = 0
        if option.is_correct:
            points = self.points_table[min(attempt_number, len(self.points_table)) - 1]

        attempt = AnswerAttempt(
            question_id=progress.question.question_id,
            selected_option_id=option.option_id,
            selected_option_text=option.text,
            attempt_number=attempt_number,
            is_correct=option.is_correct,
            points_awarded=points,
        )
        progress.attempts.append(attempt)
        self.answers.append(attempt)
        self.score += points
        self.pending_option_id = None

        if option.is_correct or progress.attempts_left == 0:
            progress.resolved = True
            self.state = QuizState.SHOWING_FEEDBACK
            self._feedback_since = self._clock()

        return attempt

    # --- Navigation ---

    def next_question(self) -> bool:
        """Leave the feedback view: go to the next question or finish."""
        with self._lock:
            if self.state != QuizState.SHOWING_FEEDBACK:
                return False
            if self.is_last_question:
                self._complete()
            else:
                self.current_index += 1
                self.state = QuizState.IN_PROGRESS
                self.pending_option_id = None
                self._feedback_since = None
            return True

    def advance_if_due(self) -> bool:
        """Auto-advance once feedback has been shown long enough."""
        with self._lock:
            if self.auto_advance_seconds is None or self.state != QuizState.SHOWING_FEEDBACK:
                return False
            if self._clock() - self._feedback_since < self.auto_advance_seconds:
                return False
            return self.next_question()

    def restart(self) -> bool:
        """Repeat a finished practice from the beginning."""
        with self._lock:
            if self.mode != QuizMode.PRACTICE or self.state != QuizState.COMPLETED:
                return False
            self._reset()
            logger.info(f"Quiz {self.session_id} restarted")
            self.start()
            return True

    def _complete(self):
        if self.state == QuizState.COMPLETED:
            return
        self.state = QuizState.COMPLETED
        self._timer_active = False
        self.pending_option_id = None

        resolved = [p for p in self.progress if p.resolved]
        self.result = QuizResult(
            session_id=self.session_id,
            mode=self.mode,
            title=self.title,
            score=self.score,
            total_questions=self.total_questions,
            answered_questions=len(resolved),
            correct_answers=sum(1 for p in resolved if p.answered_correctly),
            timed_out=self.timed_out,
            completed_at=datetime.now(timezone.utc).isoformat(),
            answers=self.level_test_answers() if self.mode == QuizMode.LEVEL_TEST else None,
        )
        logger.info(
            f"Quiz {self.session_id} completed [mode={self.mode}, score={self.score}, "
            f"answered={len(resolved)}/{self.total_questions}, timed_out={self.timed_out}]"
        )
        if self.on_complete is not None:
            self.on_complete(self.result)

    def level_test_answers(self) -> List[Dict[str, Any]]:
        """Analysis records for every resolved question, in order."""
        return [p.analysis_entry() for p in self.progress if p.resolved]

    # --- Serialisation ---

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot for templates and the JSON API. Correctness stays hidden until resolved."""
        question = self.current_question if self.state != QuizState.COMPLETED else None
        progress = self.current_progress if question else None

        current = None
        if question is not None:
            resolved = progress.resolved
            current = {
                "id": question.question_id,
                "type": question.question_type,
                "text": question.display_text,
                "options": [
                    {
                        "id": opt.option_id,
                        "text": opt.text,
                        "isCorrect": opt.is_correct if resolved else None,
                        "disabled": resolved or opt.option_id in progress.exhausted_option_ids,
                        "picked": opt.option_id in progress.exhausted_option_ids,
                    }
                    for opt in question.options
                ],
                "attempts": len(progress.attempts),
                "maxAttempts": question.max_attempts,
                "resolved": resolved,
                "feedback": progress.feedback_message,
                "translation": question.translation if resolved else None,
                "explanation": question.explanation if resolved else None,
            }

        return {
            "sessionId": self.session_id,
            "mode": self.mode,
            "title": self.title,
            "state": self.state,
            "currentQuestionIndex": self.current_index,
            "totalQuestions": self.total_questions,
            "score": self.score,
            "timeLeftSeconds": self.time_left_seconds,
            "timedOut": self.timed_out,
            "completed": self.completed,
            "pendingOptionId": self.pending_option_id,
            "actionLabel": self.action_label,
            "question": current,
            "answers": [a.to_dict() for a in self.answers],
            "result": self.result.to_dict() if self.result else None,
        }
