"""Exception hierarchy for SpeaklyAI."""


class SpeaklyError(Exception):
    """Base class for all application errors."""


class InvalidQuestionError(SpeaklyError, ValueError):
    """A question payload cannot be turned into a playable question."""


class QuizError(SpeaklyError, ValueError):
    """An operation is not allowed in the current quiz state."""


class NoSelectionError(QuizError):
    """Submit was pressed without choosing an option."""

    def __init__(self, message: str = "Por favor, seleccioná una respuesta."):
        super().__init__(message)


class AuthenticationError(SpeaklyError):
    """Credentials were rejected by the auth provider."""


class ProfileUpdateError(SpeaklyError, ValueError):
    """A profile edit was rejected."""


class LevelTestAnalysisError(SpeaklyError):
    """The AI collaborator could not grade the level test."""


class VocabularySuggestionError(SpeaklyError):
    """The AI collaborator could not suggest vocabulary."""


class QuestionServiceError(SpeaklyError):
    """The question-generation backend failed."""

    def __init__(self, message: str, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class InvalidSettingsError(SpeaklyError, ValueError):
    """Practice settings outside the allowed values."""
