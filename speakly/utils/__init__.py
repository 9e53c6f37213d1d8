"""
Utility modules for SpeaklyAI.

- validation: JSON Schema validation with auto-repair and LLM JSON parsing
- storage: Per-client local storage
- progress: Level progress and leaderboard helpers
- question_bank: Bundled question sets
- question_service: External question generator client
"""

from .validation import SchemaValidator, ValidationResult, load_validator, parse_llm_json
from .storage import FileStorage, LocalStorage, MemoryStorage, read_json_item
from .progress import (
    build_leaderboard,
    daily_progress_percent,
    format_time,
    level_progress,
    rank_of,
)

__all__ = [
    "SchemaValidator",
    "ValidationResult",
    "load_validator",
    "parse_llm_json",
    "FileStorage",
    "LocalStorage",
    "MemoryStorage",
    "read_json_item",
    "build_leaderboard",
    "daily_progress_percent",
    "format_time",
    "level_progress",
    "rank_of",
]
