"""AI collaborators: level-test placement and vocabulary suggestions."""

from .level_test_analyzer import (
    LevelTestAnalysisResult,
    LevelTestAnalyzer,
    LevelTestAnswer,
    fallback_analysis,
)
from .vocabulary_advisor import (
    DailyVocabularySuggestionsInput,
    DailyVocabularySuggestionsOutput,
    LLMVocabularySuggester,
    StaticVocabularySuggester,
    VocabularySuggester,
    create_suggester,
    get_daily_vocabulary_suggestions,
)

__all__ = [
    "LevelTestAnalysisResult",
    "LevelTestAnalyzer",
    "LevelTestAnswer",
    "fallback_analysis",
    "DailyVocabularySuggestionsInput",
    "DailyVocabularySuggestionsOutput",
    "LLMVocabularySuggester",
    "StaticVocabularySuggester",
    "VocabularySuggester",
    "create_suggester",
    "get_daily_vocabulary_suggestions",
]
