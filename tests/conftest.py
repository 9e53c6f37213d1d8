"""
Shared pytest fixtures and configuration for SpeaklyAI tests.

This file is automatically discovered by pytest and provides
fixtures available to all tests.
"""

import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

# Make the package importable without installing it
sys.path.insert(0, str(Path(__file__).parent.parent))

from speakly.config import config, token_tracker
from speakly.models.question import Question, QuestionOption
from speakly.utils.storage import MemoryStorage


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def make_question(
    question_id="q1",
    text="Ephemeral",
    correct="o2",
    translation=None,
    explanation=None,
    question_type="vocabulary",
):
    """Three-option question with ``correct`` as the right answer."""
    return Question(
        question_id=question_id,
        question_type=question_type,
        text=text,
        options=[
            QuestionOption(option_id=f"o{i}", text=f"Option {i}", is_correct=f"o{i}" == correct)
            for i in (1, 2, 3)
        ],
        translation=translation,
        explanation=explanation,
    )


def llm_reply(content: str, usage=None) -> Mock:
    """A chat-model message as returned by ``llm.invoke``."""
    message = Mock()
    message.content = content
    message.usage_metadata = usage
    return message


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def two_attempt_questions():
    """Questions that allow a second chance (they carry a translation)."""
    return [
        make_question(f"q{i}", text=f"Word{i}", translation=f"Palabra{i}")
        for i in range(1, 4)
    ]


@pytest.fixture
def single_attempt_questions():
    """Questions with nothing to teach on a miss (one attempt each)."""
    return [make_question(f"s{i}", text=f"Word{i}") for i in range(1, 4)]


@pytest.fixture
def fake_llm():
    """Chat model mock; set ``fake_llm.invoke.return_value`` per test."""
    return Mock()


@pytest.fixture
def tmp_data_dir(tmp_path, monkeypatch):
    """Point writable paths (storage, logs) at a temporary directory."""
    monkeypatch.setattr(config.paths, "data_dir", tmp_path)
    monkeypatch.setattr(config.paths, "storage_dir", tmp_path / "storage")
    monkeypatch.setattr(config.paths, "logs_dir", tmp_path / "logs")
    return tmp_path


@pytest.fixture(autouse=True)
def reset_token_tracker():
    """Reset token tracker before each test."""
    token_tracker.reset()
    yield
    token_tracker.reset()


@pytest.fixture(autouse=True)
def fixed_quiz_config(monkeypatch):
    """Keep quiz timing independent of the environment."""
    monkeypatch.setattr(config.quiz, "time_limit_seconds", 180)
    monkeypatch.setattr(config.quiz, "auto_advance_seconds", None)
    monkeypatch.setattr(config.quiz, "shuffle_options", False)
    monkeypatch.setattr(config.model, "ai_suggestions_enabled", False)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "web: tests that drive the FastAPI app")
    config.addinivalue_line("markers", "slow: marks tests as slow")
