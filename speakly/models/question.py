"""
Question model - the unit shown by every quiz.

All incoming question shapes (bundled data, ``correctOptionId`` references,
and the generation backend's labelled options) are normalised here into a
single immutable ``Question`` whose options carry an ``is_correct`` flag.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..exceptions import InvalidQuestionError

# Type aliases
QuestionType = str  # "vocabulary", "grammar"

QUESTION_TYPES = ("vocabulary", "grammar")

_SINGLE_WORD = re.compile(r"^[^\s]+$")


@dataclass(frozen=True)
class QuestionOption:
    """
    One answer option.

    Attributes:
        option_id: Identifier unique within the question ("o1", "A", ...)
        text: Option text
        is_correct: Whether this is the correct answer
        explanation: Why this option is (in)correct
    """
    option_id: str
    text: str
    is_correct: bool = False
    explanation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.option_id,
            "text": self.text,
            "isCorrect": self.is_correct,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class Question:
    """
    A multiple-choice question.

    Attributes:
        question_id: Unique identifier
        question_type: "vocabulary" or "grammar"
        text: Prompt (a single word for plain vocabulary items)
        options: Answer options, exactly one of them correct
        translation: Spanish translation of the word being tested
        explanation: Explanation revealed once the question is resolved
    """
    question_id: str
    question_type: QuestionType
    text: str
    options: tuple = field(default_factory=tuple)
    translation: Optional[str] = None
    explanation: Optional[str] = None

    def __post_init__(self):
        # Accept lists from callers but keep the stored value immutable
        object.__setattr__(self, "options", tuple(self.options))
        self.validate()

    def validate(self) -> None:
        """
        Validate question integrity.

        Raises:
            InvalidQuestionError: If validation fails
        """
        if not self.text or not self.text.strip():
            raise InvalidQuestionError(f"Question {self.question_id} has empty text")

        if self.question_type not in QUESTION_TYPES:
            raise InvalidQuestionError(
                f"Question {self.question_id} has invalid type '{self.question_type}', "
                f"expected one of {QUESTION_TYPES}"
            )

        if len(self.options) < 2:
            raise InvalidQuestionError(
                f"Question {self.question_id} must have at least 2 options, got {len(self.options)}"
            )

        correct = [opt for opt in self.options if opt.is_correct]
        if len(correct) != 1:
            raise InvalidQuestionError(
                f"Question {self.question_id} must have exactly one correct option, got {len(correct)}"
            )

        option_ids = [opt.option_id for opt in self.options]
        if len(set(option_ids)) != len(option_ids):
            raise InvalidQuestionError(
                f"Question {self.question_id} has duplicate option ids: {option_ids}"
            )

    @property
    def correct_option(self) -> QuestionOption:
        return next(opt for opt in self.options if opt.is_correct)

    @property
    def max_attempts(self) -> int:
        """Questions that can teach something on a miss get a second chance."""
        return 2 if (self.translation or self.explanation) else 1

    @property
    def display_text(self) -> str:
        """Text shown to the learner."""
        if self.question_type == "vocabulary" and _SINGLE_WORD.match(self.text.strip()):
            return f'¿Qué significa "{self.text.strip()}"?'
        return self.text

    def get_option(self, option_id: str) -> Optional[QuestionOption]:
        return next((opt for opt in self.options if opt.option_id == option_id), None)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (app shape)."""
        return {
            "id": self.question_id,
            "type": self.question_type,
            "text": self.text,
            "options": [opt.to_dict() for opt in self.options],
            "translation": self.translation,
            "explanation": self.explanation,
        }


def question_from_dict(data: Dict[str, Any], index: int = 0) -> Question:
    """
    Build a ``Question`` from any supported payload shape.

    Supported shapes:
        - ``{id, type, text, options: [{id, text, isCorrect}]}``
        - ``{..., options: [{id, text}], correctOptionId}``
        - ``{id?, question, options: [{label, text, explanation}]}`` where the
          first option is correct unless one is flagged otherwise

    Args:
        data: Raw question payload
        index: Position in its list, used to generate missing ids

    Raises:
        InvalidQuestionError: If the payload cannot form a valid question
    """
    if not isinstance(data, dict):
        raise InvalidQuestionError(f"Question {index} is not an object")

    raw_options = data.get("options")
    if not isinstance(raw_options, list) or not raw_options:
        raise InvalidQuestionError(f"Question {index} has no options")

    question_id = data.get("id") or f"q{index}-{uuid.uuid4().hex[:8]}"
    _require_text_fields(data, ("text", "question", "translation", "explanation"), question_id)
    text = data.get("text") or data.get("question") or ""

    option_ids: List[str] = []
    for i, opt in enumerate(raw_options, start=1):
        if not isinstance(opt, dict):
            raise InvalidQuestionError(f"Question {question_id} option {i} is not an object")
        _require_text_fields(opt, ("explanation",), f"{question_id} option {i}")
        option_ids.append(str(opt.get("id") or opt.get("label") or f"o{i}"))

    correct_flags = _resolve_correct_flags(data, raw_options, option_ids)

    options = [
        QuestionOption(
            option_id=option_id,
            text=str(opt.get("text", "")),
            is_correct=is_correct,
            explanation=opt.get("explanation"),
        )
        for opt, option_id, is_correct in zip(raw_options, option_ids, correct_flags)
    ]

    explanation = data.get("explanation")
    if not explanation:
        explanation = next((o.explanation for o in options if o.is_correct), None)

    return Question(
        question_id=str(question_id),
        question_type=data.get("type") or "vocabulary",
        text=text,
        options=options,
        translation=data.get("translation") or None,
        explanation=explanation or None,
    )


def _require_text_fields(data: Dict[str, Any], keys: tuple, owner: Any) -> None:
    for key in keys:
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            raise InvalidQuestionError(
                f"Question {owner} field '{key}' must be a string, got {type(value).__name__}"
            )


def _resolve_correct_flags(
    data: Dict[str, Any], raw_options: List[Dict[str, Any]], option_ids: List[str]
) -> List[bool]:
    if any("isCorrect" in opt for opt in raw_options):
        return [bool(opt.get("isCorrect")) for opt in raw_options]

    correct_id = data.get("correctOptionId") or data.get("correctLabel")
    if correct_id is not None:
        if correct_id not in option_ids:
            raise InvalidQuestionError(
                f"Question {data.get('id')} references unknown correct option '{correct_id}'"
            )
        return [option_id == correct_id for option_id in option_ids]

    # Generated questions list the correct answer first
    return [i == 0 for i in range(len(raw_options))]


def questions_from_list(items: List[Dict[str, Any]]) -> List[Question]:
    """Normalise a list of payloads, preserving order."""
    return [question_from_dict(item, index) for index, item in enumerate(items)]
