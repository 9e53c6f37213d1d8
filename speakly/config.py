"""
Configuration management for SpeaklyAI.

This module centralizes all configuration settings following 12-factor app principles:
- Secrets loaded from environment variables
- Sensible defaults for development
- Single source of truth for all settings
- Thread-safe token tracking
"""

import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_optional_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return float(value)


@dataclass
class ModelConfig:
    """LLM model configuration with OpenAI API settings."""

    api_key: str = field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    model_name: str = field(
        default_factory=lambda: os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    )
    base_url: Optional[str] = field(
        default_factory=lambda: os.getenv("OPENAI_BASE_URL")
    )

    max_tokens: int = 800
    request_timeout: float = field(
        default_factory=lambda: float(os.getenv("REQUEST_TIMEOUT", "30.0"))
    )

    # Flow-specific temperatures
    analysis_temperature: float = 0.2
    suggestion_temperature: float = 0.7

    # The vocabulary flow ships with a static list; the LLM one is opt-in
    ai_suggestions_enabled: bool = field(
        default_factory=lambda: _env_flag("SPEAKLY_AI_SUGGESTIONS")
    )


@dataclass
class QuizConfig:
    """Quiz session timing and scoring."""

    time_limit_seconds: int = field(
        default_factory=lambda: int(os.getenv("SPEAKLY_QUIZ_TIME_LIMIT", "180"))
    )
    # None means the learner presses "next" explicitly
    auto_advance_seconds: Optional[float] = field(
        default_factory=lambda: _env_optional_float("SPEAKLY_AUTO_ADVANCE")
    )

    # Points by attempt number (index 0 = first attempt)
    level_test_points: tuple = (2, 1)
    practice_points: tuple = (10, 5)

    shuffle_options: bool = False
    random_seed: Optional[int] = None

    default_suggestions: int = 5


@dataclass
class ServiceConfig:
    """External question-generation backend."""

    questions_api_url: str = field(
        default_factory=lambda: os.getenv(
            "SPEAKLY_QUESTIONS_API_URL",
            "http://localhost:3001/api/practice/generate-questions",
        )
    )
    timeout: float = field(
        default_factory=lambda: float(os.getenv("SPEAKLY_QUESTIONS_API_TIMEOUT", "10"))
    )


@dataclass
class AuthConfig:
    """Mock authentication and client session settings."""

    mock_email: str = "mario@speakly.ai"
    mock_password: str = field(
        default_factory=lambda: os.getenv("SPEAKLY_MOCK_PASSWORD", "Password123")
    )
    cookie_name: str = "speakly_client_id"
    session_timeout_minutes: int = field(
        default_factory=lambda: int(os.getenv("SPEAKLY_SESSION_TIMEOUT", "120"))
    )


@dataclass
class PathConfig:
    """File system paths - single source of truth for all directories."""

    package_root: Path = field(default_factory=lambda: Path(__file__).parent)
    data_dir: Path = field(
        default_factory=lambda: Path(os.getenv("SPEAKLY_DATA_DIR", "data"))
    )

    storage_dir: Path = field(init=False)
    logs_dir: Path = field(init=False)

    # Packaged resources
    schemas_dir: Path = field(init=False)
    question_sets_dir: Path = field(init=False)
    templates_dir: Path = field(init=False)

    def __post_init__(self):
        """Initialize computed paths."""
        self.storage_dir = self.data_dir / "storage"
        self.logs_dir = self.data_dir / "logs"
        self.schemas_dir = self.package_root / "schemas"
        self.question_sets_dir = self.package_root / "data"
        self.templates_dir = self.package_root / "web" / "templates"

    def prepare_filesystem(self):
        """
        Create writable directories if they don't exist.

        Separated from __post_init__ to avoid side-effects on import.
        Call this explicitly from your app entrypoint.
        """
        for directory in [self.data_dir, self.storage_dir, self.logs_dir]:
            directory.mkdir(parents=True, exist_ok=True)


@dataclass
class LoggingConfig:
    """Logging and metrics configuration with env-driven pricing."""

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_file: str = "speakly.log"
    max_bytes: int = 5_000_000
    backup_count: int = 3
    log_tokens: bool = True

    cost_per_1k_input: float = field(
        default_factory=lambda: float(os.getenv("COST_PER_1K_INPUT", "0.00015"))
    )
    cost_per_1k_output: float = field(
        default_factory=lambda: float(os.getenv("COST_PER_1K_OUTPUT", "0.0006"))
    )


class Config:
    """
    Main configuration class. Singleton pattern.

    Usage:
        from speakly.config import config

        api_key = config.model.api_key
        limit = config.quiz.time_limit_seconds

        # Prepare filesystem (call once at startup)
        config.prepare_fs()
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.paths = PathConfig()
            cls._instance.model = ModelConfig()
            cls._instance.quiz = QuizConfig()
            cls._instance.service = ServiceConfig()
            cls._instance.auth = AuthConfig()
            cls._instance.logging = LoggingConfig()

        return cls._instance

    def prepare_fs(self):
        """Prepare filesystem (create directories). Call once at startup."""
        self.paths.prepare_filesystem()

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if not self.model.api_key:
            errors.append("OPENAI_API_KEY not set in environment")

        for name in ("analysis_temperature", "suggestion_temperature"):
            value = getattr(self.model, name)
            if not (0 <= value <= 2):
                errors.append(f"{name} must be in [0, 2], got {value}")

        if self.model.max_tokens <= 0:
            errors.append(f"max_tokens must be > 0, got {self.model.max_tokens}")

        if self.quiz.time_limit_seconds <= 0:
            errors.append(
                f"time_limit_seconds must be > 0, got {self.quiz.time_limit_seconds}"
            )

        if self.quiz.auto_advance_seconds is not None and self.quiz.auto_advance_seconds < 0:
            errors.append(
                f"auto_advance_seconds must be >= 0, got {self.quiz.auto_advance_seconds}"
            )

        for name in ("level_test_points", "practice_points"):
            points = getattr(self.quiz, name)
            if len(points) != 2 or points[0] < points[1]:
                errors.append(f"{name} must be (first_try, second_try), got {points}")

        if self.service.timeout <= 0:
            errors.append(f"questions API timeout must be > 0, got {self.service.timeout}")

        if self.auth.session_timeout_minutes <= 0:
            errors.append(
                f"session_timeout_minutes must be > 0, got {self.auth.session_timeout_minutes}"
            )

        if not self.paths.schemas_dir.exists():
            errors.append(f"Schemas directory not found: {self.paths.schemas_dir}")

        return errors


# Global config instance
config = Config()


class TokenTracker:
    """
    Thread-safe tracker for token usage and estimated costs.

    Usage:
        from speakly.config import token_tracker

        token_tracker.add_tokens(input_tokens=100, output_tokens=50)
        print(token_tracker.summary())
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.input_tokens = 0
        self.output_tokens = 0
        self.total_calls = 0

    def add_tokens(self, input_tokens: int, output_tokens: int):
        """Add tokens from an API call (thread-safe)."""
        with self._lock:
            self.input_tokens += input_tokens
            self.output_tokens += output_tokens
            self.total_calls += 1

    def _cost(self, input_tokens: int, output_tokens: int) -> float:
        return (input_tokens / 1000) * config.logging.cost_per_1k_input + (
            output_tokens / 1000
        ) * config.logging.cost_per_1k_output

    def summary(self) -> str:
        """Formatted usage summary."""
        stats = self.get_stats()
        return (
            "Token Usage Summary:\n"
            f"  API Calls: {stats['calls']}\n"
            f"  Input Tokens: {stats['input_tokens']:,}\n"
            f"  Output Tokens: {stats['output_tokens']:,}\n"
            f"  Total Tokens: {stats['total_tokens']:,}\n"
            f"  Estimated Cost: ${stats['estimated_cost']:.4f}"
        )

    def reset(self):
        """Reset counters (thread-safe)."""
        with self._lock:
            self.input_tokens = 0
            self.output_tokens = 0
            self.total_calls = 0

    def get_stats(self) -> dict:
        """Current stats as dict (thread-safe)."""
        with self._lock:
            input_tokens = self.input_tokens
            output_tokens = self.output_tokens
            total_calls = self.total_calls

        return {
            "calls": total_calls,
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "total_tokens": input_tokens + output_tokens,
            "estimated_cost": self._cost(input_tokens, output_tokens),
        }


# Global token tracker instance
token_tracker = TokenTracker()
