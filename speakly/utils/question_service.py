"""
Client for the external practice question generator.

The backend answers ``{source: api|mock|error, questions, message?}``.
``load_practice_questions`` never raises: every failure maps to a
``PracticeQuestionsResult`` carrying either the local fallback questions or
an empty list plus a message for the learner.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from ..config import config
from ..exceptions import InvalidQuestionError, QuestionServiceError
from ..models.question import Question, questions_from_list
from .question_bank import fallback_practice_questions
from .validation import load_validator

logger = logging.getLogger(__name__)

MOCK_SOURCE_WARNING = (
    "Se están usando preguntas de ejemplo del backend ya que el servicio "
    "principal de IA podría no estar disponible."
)
FALLBACK_PREFIX = (
    "El servicio de preguntas no está disponible o no generó preguntas. "
    "Usando preguntas de ejemplo. Detalle: "
)
LOAD_FAILED_PREFIX = "No se pudieron cargar las preguntas de práctica. "


@dataclass
class PracticeQuestionsResult:
    """
    Questions to play plus what to tell the learner about them.

    Attributes:
        questions: Normalised questions (may be empty)
        source: "api", "mock", "fallback" or "error"
        message: Notice shown above the quiz
        is_warning: True when the notice is informational rather than an error
    """
    questions: List[Question] = field(default_factory=list)
    source: str = "api"
    message: Optional[str] = None
    is_warning: bool = False


class QuestionServiceClient:
    """HTTP client for ``POST /api/practice/generate-questions``."""

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.url = url or config.service.questions_api_url
        self.timeout = timeout if timeout is not None else config.service.timeout
        self.session = session or requests.Session()
        self.validator = load_validator("generate_questions_response")

    @staticmethod
    def build_payload(settings) -> Dict[str, Any]:
        """Request body for a ``PracticeSettings``."""
        return {
            "language": settings.language,
            "level": settings.level,
            "topic": settings.topic,
            "questionCount": settings.num_questions,
            "questionType": settings.question_type,
        }

    def generate_questions(self, settings) -> Dict[str, Any]:
        """
        Call the backend and return its validated JSON body.

        Raises:
            requests.ConnectionError / requests.Timeout: Backend unreachable
            QuestionServiceError: HTTP error status or malformed body
        """
        payload = self.build_payload(settings)
        logger.info(f"Requesting practice questions: {payload}")

        response = self.session.post(self.url, json=payload, timeout=self.timeout)
        if response.status_code >= 400:
            detail = _error_detail(response)
            raise QuestionServiceError(
                f"Error del backend: {response.status_code} - {detail}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise QuestionServiceError(f"Respuesta inválida del backend: {e}") from e

        result = self.validator.validate(body)
        if not result:
            raise QuestionServiceError(
                "Respuesta inválida del backend: " + "; ".join(result.errors)
            )
        return body

    def load_practice_questions(self, settings) -> PracticeQuestionsResult:
        """Fetch questions for ``settings`` and apply the fallback policy."""
        try:
            body = self.generate_questions(settings)
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.warning(f"Question backend unreachable: {e}")
            return PracticeQuestionsResult(
                questions=fallback_practice_questions(),
                source="fallback",
                message=LOAD_FAILED_PREFIX
                + "Error de red. No se pudo conectar con el servidor de preguntas. "
                "Usando preguntas de ejemplo.",
            )
        except QuestionServiceError as e:
            if e.status_code is not None:
                logger.error(f"Question backend failed: {e}")
                return PracticeQuestionsResult(
                    questions=[], source="error", message=LOAD_FAILED_PREFIX + str(e)
                )
            logger.warning(f"Question backend returned an unusable body: {e}")
            return PracticeQuestionsResult(
                questions=fallback_practice_questions(),
                source="fallback",
                message=FALLBACK_PREFIX + str(e),
            )
        except requests.RequestException as e:
            logger.error(f"Question backend request failed: {e}")
            return PracticeQuestionsResult(
                questions=[], source="error", message=LOAD_FAILED_PREFIX + str(e)
            )

        source = body.get("source")
        raw_questions = body.get("questions") or []
        if source == "error" or not raw_questions:
            detail = body.get("message") or (
                "Error desconocido al generar preguntas desde el backend "
                "o no se recibieron preguntas."
            )
            logger.warning(f"Question backend reported no questions: {detail}")
            return PracticeQuestionsResult(
                questions=fallback_practice_questions(),
                source="fallback",
                message=FALLBACK_PREFIX + detail,
            )

        try:
            questions = questions_from_list(raw_questions)
        except InvalidQuestionError as e:
            logger.warning(f"Question backend sent an invalid question: {e}")
            return PracticeQuestionsResult(
                questions=fallback_practice_questions(),
                source="fallback",
                message=FALLBACK_PREFIX + str(e),
            )

        if source == "mock":
            logger.warning("Question backend returned mock data")
            return PracticeQuestionsResult(
                questions=questions, source="mock", message=MOCK_SOURCE_WARNING, is_warning=True
            )

        return PracticeQuestionsResult(questions=questions, source="api")


def _error_detail(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return "Respuesta no detallada."
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return "Respuesta no detallada."
