"""
Level Test Analyzer - LLM-based placement from level-test answers.

Sends the per-question answer log to the model and returns a level
(Novato / Intermedio / Experto), an AI score and a short summary.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from langchain_core.prompts import PromptTemplate
from langchain_openai import ChatOpenAI

from ..config import config, token_tracker
from ..constants import LEVEL_INTERMEDIATE
from ..exceptions import LevelTestAnalysisError
from ..utils.validation import load_validator, parse_llm_json

logger = logging.getLogger(__name__)

ANALYSIS_FAILED_SUMMARY = (
    "No se pudo completar el análisis IA. Nivel asignado basado en puntaje."
)
NO_ANSWERS_SUMMARY = (
    "Nivel asignado basado en puntaje. No se proveyeron respuestas para análisis detallado."
)


@dataclass
class LevelTestAnswer:
    """One entry of the level-test answer log."""
    question: str
    selected_answer: str
    correct_answer: str
    attempts: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question,
            "selectedAnswer": self.selected_answer,
            "correctAnswer": self.correct_answer,
            "attempts": self.attempts,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LevelTestAnswer":
        return cls(
            question=data["question"],
            selected_answer=data["selectedAnswer"],
            correct_answer=data["correctAnswer"],
            attempts=int(data["attempts"]),
        )


@dataclass
class LevelTestAnalysisResult:
    """
    Result of a level-test analysis.

    Attributes:
        level: Novato / Intermedio / Experto
        score: Score as computed by the analyzer
        summary: Short performance summary
        analyzed_by: "llm" or "fallback"
    """
    level: str
    score: float
    summary: str
    analyzed_by: str = "llm"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "score": self.score,
            "summary": self.summary,
            "analyzedBy": self.analyzed_by,
        }


def fallback_analysis(score: float, had_answers: bool = True) -> LevelTestAnalysisResult:
    """Placement used when the AI analysis is skipped or fails."""
    return LevelTestAnalysisResult(
        level=LEVEL_INTERMEDIATE,
        score=score,
        summary=ANALYSIS_FAILED_SUMMARY if had_answers else NO_ANSWERS_SUMMARY,
        analyzed_by="fallback",
    )


class LevelTestAnalyzer:
    """
    AI-powered placement agent for the level test.

    The model is created on first use so the app can start without an
    API key; a missing key surfaces as ``LevelTestAnalysisError``.
    """

    def __init__(
        self,
        model_name: Optional[str] = None,
        temperature: Optional[float] = None,
        llm: Optional[Any] = None,
    ):
        """
        Initialize the analyzer.

        Args:
            model_name: LLM model name
            temperature: LLM temperature (low for consistent placement)
            llm: Pre-built chat model (tests inject a mock)
        """
        self.model_name = model_name or config.model.model_name
        self.temperature = (
            temperature if temperature is not None else config.model.analysis_temperature
        )
        self._llm = llm
        self.input_validator = load_validator("level_test_analysis_input")
        self.output_validator = load_validator("level_test_analysis_output")

        self.analysis_prompt = PromptTemplate(
            input_variables=["answers"],
            template="""You are an expert in language assessment. Analyze the user's answers to a level test and assign them an appropriate level (Novato, Intermedio, Experto).

Consider the number of attempts the user took to answer each question. Award 2 points if the user answers correctly on the first attempt, 1 point if they answer correctly on the second attempt, and 0 points if they fail both attempts.

Here are the user's answers:

{answers}

Based on their performance, assign a level and provide a short summary of their performance in Spanish. Also calculate the total score based on attempts.

**Format your response as JSON:**
{{
  "level": "<Novato|Intermedio|Experto>",
  "score": <total score>,
  "summary": "<short summary>"
}}""",
        )

    @property
    def llm(self):
        if self._llm is None:
            if not config.model.api_key:
                raise LevelTestAnalysisError("OPENAI_API_KEY not set in environment")
            self._llm = ChatOpenAI(
                model=self.model_name,
                temperature=self.temperature,
                api_key=config.model.api_key,
                base_url=config.model.base_url,
                timeout=config.model.request_timeout,
                max_tokens=config.model.max_tokens,
            )
        return self._llm

    @staticmethod
    def _format_answers(answers: List[Dict[str, Any]]) -> str:
        return "\n\n".join(
            f"Question: {a['question']}\n"
            f"Selected Answer: {a['selectedAnswer']}\n"
            f"Correct Answer: {a['correctAnswer']}\n"
            f"Attempts: {a['attempts']}"
            for a in answers
        )

    def analyze(self, answers: List[Any]) -> LevelTestAnalysisResult:
        """
        Grade a level test.

        Args:
            answers: ``LevelTestAnswer`` objects or their dict form

        Returns:
            LevelTestAnalysisResult from the model

        Raises:
            LevelTestAnalysisError: Invalid input, unavailable model, or an
                unusable reply
        """
        payload = {
            "answers": [a.to_dict() if isinstance(a, LevelTestAnswer) else a for a in answers]
        }
        checked = self.input_validator.validate(payload)
        if not checked:
            raise LevelTestAnalysisError("Invalid level test answers: " + "; ".join(checked.errors))
        if not payload["answers"]:
            raise LevelTestAnalysisError("No answers to analyze")

        prompt = self.analysis_prompt.format(answers=self._format_answers(payload["answers"]))

        try:
            message = self.llm.invoke(prompt)
        except LevelTestAnalysisError:
            raise
        except Exception as e:
            # Provider/network failures come from several client libraries
            raise LevelTestAnalysisError(f"Level test analysis request failed: {e}") from e

        self._track_usage(message)

        try:
            data = parse_llm_json(message.content)
        except (json.JSONDecodeError, IndexError, AttributeError, TypeError) as e:
            raise LevelTestAnalysisError(f"Unable to parse analysis response: {e}") from e

        result = self.output_validator.validate(data, auto_repair=True)
        if not result:
            raise LevelTestAnalysisError("Invalid analysis response: " + "; ".join(result.errors))
        if result.repairs:
            logger.info(f"Repaired analysis response: {result.repairs}")

        data = result.data
        logger.info(f"Level test analyzed [level={data['level']}, score={data['score']}]")
        return LevelTestAnalysisResult(
            level=data["level"],
            score=data["score"],
            summary=data["summary"],
            analyzed_by="llm",
        )

    @staticmethod
    def _track_usage(message):
        usage = getattr(message, "usage_metadata", None)
        if not isinstance(usage, dict) or not config.logging.log_tokens:
            return
        token_tracker.add_tokens(
            input_tokens=int(usage.get("input_tokens", 0)),
            output_tokens=int(usage.get("output_tokens", 0)),
        )
