"""
Application Constants for StudyHub.

True constants only; environment-driven values live in config.py.
"""

# =============================================================================
# File Upload Limits
# =============================================================================

MAX_UPLOAD_SIZE_BYTES = 10 * 1024 * 1024  # 10MB
MAX_FILENAME_LENGTH = 255

ALLOWED_MIME_TYPES = ["text/plain", "application/pdf"]

# =============================================================================
# Content Generation
# =============================================================================

WORDS_PER_MINUTE = 200

QUESTIONS_PER_DIFFICULTY = {
    "easy": 5,
    "medium": 8,
    "hard": 10,
}
QUIZ_OPTION_IDS = ["a", "b", "c", "d"]

FLASHCARD_BATCH_SIZE = 5

# =============================================================================
# Study Tracking
# =============================================================================

STATS_WINDOW_DAYS = 30

# =============================================================================
# Authentication
# =============================================================================

DEFAULT_TOKEN_EXPIRE_MINUTES = 1440  # 24 hours
JWT_ALGORITHM = "HS256"
SYNTHETIC_USERNAME_PREFIX_LENGTH = 8
