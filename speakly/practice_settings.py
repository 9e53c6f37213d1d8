"""
Practice settings: what the custom practice asks the question generator for.

Settings live in local storage under a single key as camelCase JSON.
Invalid stored data is discarded and the defaults apply.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping

from .constants import PRACTICE_SETTINGS_STORAGE_KEY
from .exceptions import InvalidSettingsError
from .utils.storage import LocalStorage, read_json_item
from .utils.validation import load_validator

logger = logging.getLogger(__name__)

LANGUAGE_OPTIONS = (("en", "Inglés"),)
LEVEL_OPTIONS = (
    ("beginner", "Principiante"),
    ("intermediate", "Intermedio"),
    ("advanced", "Avanzado"),
)
TOPIC_OPTIONS = (
    ("general", "General"),
    ("negocios", "Negocios"),
    ("viajes", "Viajes"),
    ("tecnologia", "Tecnología"),
    ("vida_diaria", "Vida Diaria"),
)
NUM_QUESTIONS_OPTIONS = ((5, "5 Preguntas"), (10, "10 Preguntas"), (15, "15 Preguntas"))
QUESTION_TYPE_OPTIONS = (
    ("correct_answer", "Respuesta Correcta"),
    ("meaning", "Cuál es el significado"),
    ("fill_blank", "Completa la que falta"),
    ("mix", "Mix de las 3"),
)


@dataclass(frozen=True)
class PracticeSettings:
    language: str = "en"
    level: str = "beginner"
    topic: str = "general"
    num_questions: int = 10
    question_type: str = "mix"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "language": self.language,
            "level": self.level,
            "topic": self.topic,
            "numQuestions": self.num_questions,
            "questionType": self.question_type,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PracticeSettings":
        return cls(
            language=data["language"],
            level=data["level"],
            topic=data["topic"],
            num_questions=int(data["numQuestions"]),
            question_type=data["questionType"],
        )


class PracticeSettingsStore:
    """Load/save ``PracticeSettings`` in a client's storage."""

    def __init__(self, storage: LocalStorage):
        self.storage = storage
        self.validator = load_validator("practice_settings")

    def load(self) -> PracticeSettings:
        data = read_json_item(self.storage, PRACTICE_SETTINGS_STORAGE_KEY, self.validator)
        if data is None:
            return PracticeSettings()
        return PracticeSettings.from_dict(data)

    def save(self, settings: PracticeSettings) -> PracticeSettings:
        result = self.validator.validate(settings.to_dict())
        if not result:
            raise InvalidSettingsError("; ".join(result.errors))
        self.storage.set_json(PRACTICE_SETTINGS_STORAGE_KEY, settings.to_dict())
        logger.info(f"Saved practice settings: {settings.to_dict()}")
        return settings

    def save_form(self, form: Mapping[str, Any]) -> PracticeSettings:
        """
        Validate raw form values (strings) and save them.

        ``numQuestions`` is coerced to an integer.

        Raises:
            InvalidSettingsError: If any value is not allowed
        """
        defaults = PracticeSettings().to_dict()
        data = {key: form.get(key, defaults[key]) for key in defaults}
        result = self.validator.validate(data, auto_repair=True)
        if not result:
            raise InvalidSettingsError("; ".join(result.errors))
        return self.save(PracticeSettings.from_dict(result.data))
