"""Theme selection persisted per client."""

from __future__ import annotations

import logging

from .constants import THEME_STORAGE_KEY
from .utils.storage import LocalStorage

logger = logging.getLogger(__name__)

DEFAULT_THEME = "vocabmastertheme"

AVAILABLE_THEMES = (
    "vocabmastertheme",
    "light",
    "dark",
    "cupcake",
    "bumblebee",
    "emerald",
    "corporate",
    "synthwave",
    "retro",
    "cyberpunk",
    "valentine",
    "halloween",
    "garden",
    "forest",
    "aqua",
    "lofi",
    "pastel",
    "fantasy",
    "wireframe",
    "black",
    "luxury",
    "dracula",
    "cmyk",
    "autumn",
    "business",
    "acid",
    "lemonade",
    "night",
    "coffee",
    "winter",
)


class ThemeController:
    """Reads and writes the active theme name in the client's storage."""

    def __init__(self, storage: LocalStorage):
        self.storage = storage

    @property
    def available_themes(self) -> tuple:
        return AVAILABLE_THEMES

    def current_theme(self) -> str:
        """Stored theme, resetting storage to the default when it is unknown."""
        stored = self.storage.get_item(THEME_STORAGE_KEY)
        if stored in AVAILABLE_THEMES:
            return stored
        if stored is None:
            return DEFAULT_THEME
        logger.warning(f"Unknown stored theme '{stored}', resetting to {DEFAULT_THEME}")
        self.storage.set_item(THEME_STORAGE_KEY, DEFAULT_THEME)
        return DEFAULT_THEME

    def set_theme(self, name: str) -> bool:
        """Persist ``name``; unknown themes are ignored."""
        if name not in AVAILABLE_THEMES:
            logger.debug(f"Ignoring unknown theme '{name}'")
            return False
        self.storage.set_item(THEME_STORAGE_KEY, name)
        return True
