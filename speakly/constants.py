"""Shared constants: storage keys, routes and level names."""

APP_NAME = "SpeaklyAI"

# Local storage keys
SESSION_STORAGE_KEY = "speaklyai_mock_user_session_v2"
PRACTICE_SETTINGS_STORAGE_KEY = "speaklyai_practice_settings_v2"
THEME_STORAGE_KEY = "vocabmaster-theme"

# Learner levels
LEVEL_NOVICE = "Novato"
LEVEL_INTERMEDIATE = "Intermedio"
LEVEL_EXPERT = "Experto"
LEVELS = (LEVEL_NOVICE, LEVEL_INTERMEDIATE, LEVEL_EXPERT)

# Learner level -> vocabulary level label shown to the suggestion flow
VOCABULARY_LEVELS = {
    LEVEL_NOVICE: "Beginner",
    LEVEL_INTERMEDIATE: "Intermediate",
    LEVEL_EXPERT: "Advanced",
}

# Routes that require a signed-in user
PROTECTED_PATHS = (
    "/home",
    "/practice",
    "/practice-settings",
    "/level-test",
    "/progress",
    "/profile",
    "/api/quiz",
)

NAV_LINKS = (
    ("/home", "Inicio"),
    ("/practice", "Práctica"),
    ("/level-test", "Test de Nivel"),
    ("/progress", "Progreso"),
    ("/profile", "Perfil"),
)

PRACTICE_SOURCE_DAILY = "daily"
PRACTICE_SOURCE_RECOMMENDATIONS = "recommendations"
PRACTICE_SOURCE_CUSTOM = "custom"

PRACTICE_TITLES = {
    PRACTICE_SOURCE_DAILY: "Práctica Diaria",
    PRACTICE_SOURCE_RECOMMENDATIONS: "Práctica de Palabras Recomendadas",
    PRACTICE_SOURCE_CUSTOM: "Práctica Personalizada",
}
LEVEL_TEST_TITLE = "Test de Nivel"
