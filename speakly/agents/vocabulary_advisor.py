"""
Vocabulary Advisor - daily word suggestions for the home dashboard.

``VocabularySuggester`` is the seam: the static suggester returns a fixed
list, the LLM suggester asks the model for words tailored to the learner.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from langchain_core.prompts import PromptTemplate
from langchain_openai import ChatOpenAI

from ..config import config, token_tracker
from ..exceptions import VocabularySuggestionError
from ..utils.validation import load_validator, parse_llm_json

logger = logging.getLogger(__name__)

DEFAULT_SUGGESTIONS = ["Ebullient", "Ephemeral", "Serendipity"]
ERROR_SUGGESTIONS = ["error", "fetching", "words", "please", "retry"]


@dataclass
class DailyVocabularySuggestionsInput:
    """
    Attributes:
        user_level: Current vocabulary level (e.g. Beginner, Intermediate)
        learning_goals: What the learner wants English for
        number_of_suggestions: How many words to return
    """
    user_level: str
    learning_goals: str
    number_of_suggestions: int = field(default_factory=lambda: config.quiz.default_suggestions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userLevel": self.user_level,
            "learningGoals": self.learning_goals,
            "numberOfSuggestions": self.number_of_suggestions,
        }


@dataclass
class DailyVocabularySuggestionsOutput:
    suggested_words: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {"suggestedWords": list(self.suggested_words)}


class VocabularySuggester(ABC):
    """Produces vocabulary suggestions for a learner."""

    @abstractmethod
    def suggest(self, request: DailyVocabularySuggestionsInput) -> DailyVocabularySuggestionsOutput:
        pass


class StaticVocabularySuggester(VocabularySuggester):
    """Returns a fixed word list (at most ``number_of_suggestions`` words)."""

    def __init__(self, words: Optional[List[str]] = None):
        self.words = list(words) if words is not None else list(DEFAULT_SUGGESTIONS)

    def suggest(self, request: DailyVocabularySuggestionsInput) -> DailyVocabularySuggestionsOutput:
        count = max(0, request.number_of_suggestions)
        return DailyVocabularySuggestionsOutput(suggested_words=self.words[:count])


class LLMVocabularySuggester(VocabularySuggester):
    """Asks the chat model for words suited to the learner's level and goals."""

    def __init__(
        self,
        model_name: Optional[str] = None,
        temperature: Optional[float] = None,
        llm: Optional[Any] = None,
    ):
        self.model_name = model_name or config.model.model_name
        self.temperature = (
            temperature if temperature is not None else config.model.suggestion_temperature
        )
        self._llm = llm
        self.output_validator = load_validator("vocabulary_suggestions_output")

        self.suggestion_prompt = PromptTemplate(
            input_variables=["number_of_suggestions", "user_level", "learning_goals"],
            template="""You are an AI vocabulary tutor. Suggest {number_of_suggestions} new vocabulary words tailored to the user's current level and learning goals.

User Level: {user_level}
Learning Goals: {learning_goals}

Ensure that the words you suggest are appropriate for the user's level and relevant to their goals. Do not provide definitions or examples, only the words themselves.

**Format your response as JSON:**
{{
  "suggestedWords": ["word 1", "word 2", ...]
}}""",
        )

    @property
    def llm(self):
        if self._llm is None:
            if not config.model.api_key:
                raise VocabularySuggestionError("OPENAI_API_KEY not set in environment")
            self._llm = ChatOpenAI(
                model=self.model_name,
                temperature=self.temperature,
                api_key=config.model.api_key,
                base_url=config.model.base_url,
                timeout=config.model.request_timeout,
            )
        return self._llm

    def suggest(self, request: DailyVocabularySuggestionsInput) -> DailyVocabularySuggestionsOutput:
        """
        Raises:
            VocabularySuggestionError: If the model is unavailable or its reply is unusable
        """
        prompt = self.suggestion_prompt.format(
            number_of_suggestions=request.number_of_suggestions,
            user_level=request.user_level,
            learning_goals=request.learning_goals,
        )

        try:
            message = self.llm.invoke(prompt)
        except VocabularySuggestionError:
            raise
        except Exception as e:
            raise VocabularySuggestionError(f"Vocabulary suggestion request failed: {e}") from e

        usage = getattr(message, "usage_metadata", None)
        if isinstance(usage, dict) and config.logging.log_tokens:
            token_tracker.add_tokens(
                int(usage.get("input_tokens", 0)), int(usage.get("output_tokens", 0))
            )

        try:
            data = parse_llm_json(message.content)
        except (json.JSONDecodeError, IndexError, AttributeError, TypeError) as e:
            raise VocabularySuggestionError(f"Unable to parse suggestions: {e}") from e

        result = self.output_validator.validate(data, auto_repair=True)
        if not result:
            raise VocabularySuggestionError("Invalid suggestions: " + "; ".join(result.errors))

        words = [w.strip() for w in result.data["suggestedWords"] if w.strip()]
        return DailyVocabularySuggestionsOutput(
            suggested_words=words[: request.number_of_suggestions]
        )


def create_suggester() -> VocabularySuggester:
    """Pick the suggester configured for this deployment."""
    if config.model.ai_suggestions_enabled:
        return LLMVocabularySuggester()
    return StaticVocabularySuggester()


def get_daily_vocabulary_suggestions(
    request: DailyVocabularySuggestionsInput,
    suggester: Optional[VocabularySuggester] = None,
) -> DailyVocabularySuggestionsOutput:
    """Suggest daily vocabulary words for a learner."""
    suggester = suggester or create_suggester()
    output = suggester.suggest(request)
    logger.debug(f"Suggested {len(output.suggested_words)} words for level {request.user_level}")
    return output
