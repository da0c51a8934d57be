"""Data models and schemas for StudyHub.

Records are serialized with camelCase keys on the wire (``fileName``,
``createdAt``) and accept either spelling on input.
"""

from enum import Enum
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Enums for validated parameters
# =============================================================================

class SummaryFormat(str, Enum):
    """Shapes a generated summary can take."""
    CONCISE = "concise"
    DETAILED = "detailed"
    BULLET = "bullet"
    SECTIONED = "sectioned"


class Readability(str, Enum):
    """Register of a generated summary."""
    SIMPLE = "simple"
    ACADEMIC = "academic"


class Difficulty(str, Enum):
    """Quiz difficulty levels."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class ActivityType(str, Enum):
    """Kinds of study activity recorded in a session."""
    SUMMARY = "summary"
    FLASHCARD = "flashcard"
    QUIZ = "quiz"


# =============================================================================
# Users
# =============================================================================

class UserCreate(CamelModel):
    username: str
    email: str
    name: Optional[str] = None
    external_auth_id: Optional[str] = None


class User(UserCreate):
    id: int
    study_streak: int = 0
    created_at: datetime


class UserProfile(CamelModel):
    """Public representation of the calling user."""
    id: int
    username: str
    email: str
    name: Optional[str] = None
    study_streak: int
    created_at: datetime


# =============================================================================
# Documents
# =============================================================================

class DocumentCreate(CamelModel):
    user_id: int
    title: str
    file_name: str
    file_type: str
    file_size: int = Field(..., ge=0)
    content: Optional[str] = None


class Document(DocumentCreate):
    id: int
    created_at: datetime
    updated_at: datetime


class DocumentInfo(CamelModel):
    """Document listing shape (no extracted content)."""
    id: int
    title: str
    file_name: str
    file_type: str
    file_size: int
    created_at: datetime

    @classmethod
    def from_document(cls, document: Document) -> "DocumentInfo":
        return cls(
            id=document.id,
            title=document.title,
            file_name=document.file_name,
            file_type=document.file_type,
            file_size=document.file_size,
            created_at=document.created_at,
        )


# =============================================================================
# Summaries
# =============================================================================

class KeyTerm(CamelModel):
    term: str
    definition: str


class SummaryCreate(CamelModel):
    user_id: int
    document_id: int
    title: str
    content: str
    format: SummaryFormat
    key_terms: Optional[List[KeyTerm]] = None
    read_time: Optional[int] = None


class Summary(SummaryCreate):
    id: int
    created_at: datetime


class SummaryRequest(CamelModel):
    """Body of POST /api/summaries/generate."""
    document_id: int
    format: SummaryFormat
    readability: Readability
    extract_key_terms: bool


# =============================================================================
# Flashcards
# =============================================================================

class FlashcardCreate(CamelModel):
    user_id: int
    summary_id: Optional[int] = None
    front: str
    back: str


class Flashcard(FlashcardCreate):
    id: int
    last_studied: Optional[datetime] = None
    interval: int = Field(default=1, ge=1)
    created_at: datetime


class FlashcardRequest(CamelModel):
    """Body of POST /api/flashcards/generate."""
    summary_id: int


class FlashcardManualCreate(CamelModel):
    """Body of POST /api/flashcards."""
    summary_id: Optional[int] = None
    front: str = Field(..., min_length=1)
    back: str = Field(..., min_length=1)


class IntervalUpdate(CamelModel):
    """Body of PATCH /api/flashcards/{id}/interval."""
    interval: int = Field(..., gt=0, strict=True)


# =============================================================================
# Quizzes
# =============================================================================

class QuizOption(CamelModel):
    id: str
    text: str


class QuizQuestion(CamelModel):
    id: int
    type: str = "multiple_choice"
    question: str
    options: List[QuizOption] = Field(..., min_length=2)
    correct_answer: str

    @model_validator(mode="after")
    def correct_answer_is_an_option(self):
        option_ids = [o.id for o in self.options]
        if self.correct_answer not in option_ids:
            raise ValueError(
                f"correct_answer {self.correct_answer!r} is not one of {option_ids}"
            )
        return self


class QuizCreate(CamelModel):
    user_id: int
    summary_id: int
    title: str
    difficulty: Difficulty
    questions: List[QuizQuestion]


class Quiz(QuizCreate):
    id: int
    created_at: datetime


class QuizRequest(CamelModel):
    """Body of POST /api/quizzes/generate."""
    summary_id: int
    difficulty: Difficulty


# =============================================================================
# Quiz Results
# =============================================================================

class QuizResultCreate(CamelModel):
    user_id: int
    quiz_id: int
    score: int = Field(..., ge=0, le=100, strict=True)
    total_questions: int = Field(..., ge=1, strict=True)


class QuizResult(QuizResultCreate):
    id: int
    completed_at: datetime


class QuizResultRequest(CamelModel):
    """Body of POST /api/quiz-results."""
    quiz_id: int
    score: int = Field(..., ge=0, le=100, strict=True)
    total_questions: int = Field(..., ge=1, strict=True)


# =============================================================================
# Study Sessions
# =============================================================================

class StudySessionCreate(CamelModel):
    user_id: int
    duration: int = Field(..., gt=0, strict=True)
    activity_type: ActivityType
    activity_id: int = Field(..., gt=0, strict=True)


class StudySession(StudySessionCreate):
    id: int
    completed_at: datetime


class StudySessionRequest(CamelModel):
    """Body of POST /api/study-sessions."""
    duration: int = Field(..., gt=0, strict=True)
    activity_type: ActivityType
    activity_id: int = Field(..., gt=0, strict=True)


# =============================================================================
# Responses
# =============================================================================

class DeleteResponse(CamelModel):
    success: bool


class StudyStats(CamelModel):
    summaries_this_month: int
    quizzes_completed: int
    flashcards_practiced: int
    study_streak: int
