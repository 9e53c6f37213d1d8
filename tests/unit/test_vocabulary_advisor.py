"""
Unit tests for vocabulary suggestions.
"""

import pytest

from conftest import llm_reply
from speakly.agents.vocabulary_advisor import (
    DEFAULT_SUGGESTIONS,
    DailyVocabularySuggestionsInput,
    LLMVocabularySuggester,
    StaticVocabularySuggester,
    create_suggester,
    get_daily_vocabulary_suggestions,
)
from speakly.config import config
from speakly.exceptions import VocabularySuggestionError


@pytest.fixture
def request_input():
    return DailyVocabularySuggestionsInput(
        user_level="Beginner",
        learning_goals="General English improvement",
        number_of_suggestions=5,
    )


class TestStaticSuggester:
    def test_default_words(self, request_input):
        output = StaticVocabularySuggester().suggest(request_input)
        assert output.suggested_words == DEFAULT_SUGGESTIONS
        assert output.to_dict() == {"suggestedWords": DEFAULT_SUGGESTIONS}

    def test_limited_to_requested_count(self, request_input):
        request_input.number_of_suggestions = 2
        output = StaticVocabularySuggester(["a", "b", "c"]).suggest(request_input)
        assert output.suggested_words == ["a", "b"]


class TestLLMSuggester:
    def test_suggest(self, fake_llm, request_input):
        fake_llm.invoke.return_value = llm_reply(
            '{"suggestedWords": ["Journey", " Luggage ", "", "Passport"]}'
        )
        output = LLMVocabularySuggester(llm=fake_llm).suggest(request_input)
        assert output.suggested_words == ["Journey", "Luggage", "Passport"]

        prompt = fake_llm.invoke.call_args[0][0]
        assert "User Level: Beginner" in prompt
        assert "Suggest 5 new vocabulary words" in prompt

    def test_truncates_long_lists(self, fake_llm, request_input):
        request_input.number_of_suggestions = 1
        fake_llm.invoke.return_value = llm_reply('{"suggestedWords": ["One", "Two"]}')
        output = LLMVocabularySuggester(llm=fake_llm).suggest(request_input)
        assert output.suggested_words == ["One"]

    def test_bad_reply_raises(self, fake_llm, request_input):
        fake_llm.invoke.return_value = llm_reply('{"words": "nope"}')
        with pytest.raises(VocabularySuggestionError):
            LLMVocabularySuggester(llm=fake_llm).suggest(request_input)

    def test_model_failure_raises(self, fake_llm, request_input):
        fake_llm.invoke.side_effect = ConnectionError("offline")
        with pytest.raises(VocabularySuggestionError):
            LLMVocabularySuggester(llm=fake_llm).suggest(request_input)


class TestFactory:
    def test_static_by_default(self):
        assert isinstance(create_suggester(), StaticVocabularySuggester)

    def test_llm_when_enabled(self, monkeypatch):
        monkeypatch.setattr(config.model, "ai_suggestions_enabled", True)
        assert isinstance(create_suggester(), LLMVocabularySuggester)

    def test_get_daily_suggestions(self, request_input):
        output = get_daily_vocabulary_suggestions(request_input)
        assert output.suggested_words == DEFAULT_SUGGESTIONS
