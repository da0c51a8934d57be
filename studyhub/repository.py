"""
In-memory repository for StudyHub data access.

Holds every entity type in its own dict keyed by a per-type,
monotonically increasing integer ID. Nothing is persisted; the store lives
exactly as long as the application instance that owns it.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from .models import (
    User, UserCreate,
    Document, DocumentCreate,
    Summary, SummaryCreate,
    Flashcard, FlashcardCreate,
    Quiz, QuizCreate,
    QuizResult, QuizResultCreate,
    StudySession, StudySessionCreate,
)
from .repository_interface import StudyRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _Table(Generic[T]):
    """One entity map plus its identifier sequence."""

    def __init__(self) -> None:
        self.rows: Dict[int, T] = {}
        self._next_id = 1

    def insert(self, build: Callable[[int], T]) -> T:
        record_id = self._next_id
        self._next_id += 1
        record = build(record_id)
        self.rows[record_id] = record
        return record

    def get(self, record_id: int) -> Optional[T]:
        return self.rows.get(record_id)

    def delete(self, record_id: int) -> bool:
        return self.rows.pop(record_id, None) is not None

    def select(self, predicate: Callable[[T], bool]) -> List[T]:
        return [row for row in self.rows.values() if predicate(row)]

    def first(self, predicate: Callable[[T], bool]) -> Optional[T]:
        return next((row for row in self.rows.values() if predicate(row)), None)


class InMemoryStudyRepository(StudyRepository):
    """
    Repository for users, documents, summaries, flashcards, quizzes,
    quiz results and study sessions.

    Mutations are serialized with an asyncio lock. Reads never suspend.
    """

    def __init__(self):
        self.users: _Table[User] = _Table()
        self.documents: _Table[Document] = _Table()
        self.summaries: _Table[Summary] = _Table()
        self.flashcards: _Table[Flashcard] = _Table()
        self.quizzes: _Table[Quiz] = _Table()
        self.quiz_results: _Table[QuizResult] = _Table()
        self.study_sessions: _Table[StudySession] = _Table()

        self._lock = asyncio.Lock()

    # =============================================================================
    # USER OPERATIONS
    # =============================================================================

    async def get_user(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return self.users.first(lambda u: u.username == username)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return self.users.first(lambda u: u.email == email)

    async def get_user_by_external_id(self, external_auth_id: str) -> Optional[User]:
        return self.users.first(lambda u: u.external_auth_id == external_auth_id)

    async def create_user(self, data: UserCreate) -> User:
        async with self._lock:
            user = self.users.insert(
                lambda user_id: User(
                    id=user_id,
                    study_streak=0,
                    created_at=utcnow(),
                    **data.model_dump(),
                )
            )
        logger.info(f"Created user {user.id}: {user.username}")
        return user

    async def update_user_streak(self, user_id: int, streak: int) -> Optional[User]:
        async with self._lock:
            user = self.users.get(user_id)
            if user is None:
                return None

            updated = user.model_copy(update={"study_streak": streak})
            self.users.rows[user_id] = updated

        logger.debug(f"User {user_id} study streak set to {streak}")
        return updated

    # =============================================================================
    # DOCUMENT OPERATIONS
    # =============================================================================

    async def list_documents(self, user_id: int) -> List[Document]:
        return self.documents.select(lambda d: d.user_id == user_id)

    async def get_document(self, document_id: int) -> Optional[Document]:
        return self.documents.get(document_id)

    async def create_document(self, data: DocumentCreate) -> Document:
        async with self._lock:
            now = utcnow()
            document = self.documents.insert(
                lambda document_id: Document(
                    id=document_id,
                    created_at=now,
                    updated_at=now,
                    **data.model_dump(),
                )
            )
        logger.info(f"Created document {document.id}: {document.file_name}")
        return document

    async def delete_document(self, document_id: int) -> bool:
        async with self._lock:
            deleted = self.documents.delete(document_id)
        if deleted:
            logger.info(f"Deleted document {document_id}")
        return deleted

    # =============================================================================
    # SUMMARY OPERATIONS
    # =============================================================================

    async def list_summaries(self, user_id: int) -> List[Summary]:
        return self.summaries.select(lambda s: s.user_id == user_id)

    async def get_summary(self, summary_id: int) -> Optional[Summary]:
        return self.summaries.get(summary_id)

    async def create_summary(self, data: SummaryCreate) -> Summary:
        async with self._lock:
            summary = self.summaries.insert(
                lambda summary_id: Summary(
                    id=summary_id,
                    created_at=utcnow(),
                    **data.model_dump(),
                )
            )
        logger.info(f"Created summary {summary.id} for document {summary.document_id}")
        return summary

    async def delete_summary(self, summary_id: int) -> bool:
        async with self._lock:
            deleted = self.summaries.delete(summary_id)
        if deleted:
            logger.info(f"Deleted summary {summary_id}")
        return deleted

    # =============================================================================
    # FLASHCARD OPERATIONS
    # =============================================================================

    async def list_flashcards(
        self,
        user_id: int,
        summary_id: Optional[int] = None
    ) -> List[Flashcard]:
        if summary_id is None:
            return self.flashcards.select(lambda f: f.user_id == user_id)
        return self.flashcards.select(
            lambda f: f.user_id == user_id and f.summary_id == summary_id
        )

    async def get_flashcard(self, flashcard_id: int) -> Optional[Flashcard]:
        return self.flashcards.get(flashcard_id)

    async def create_flashcard(self, data: FlashcardCreate) -> Flashcard:
        async with self._lock:
            flashcard = self.flashcards.insert(
                lambda flashcard_id: Flashcard(
                    id=flashcard_id,
                    last_studied=None,
                    interval=1,
                    created_at=utcnow(),
                    **data.model_dump(),
                )
            )
        logger.debug(f"Created flashcard {flashcard.id}")
        return flashcard

    async def update_flashcard(self, flashcard_id: int, interval: int) -> Optional[Flashcard]:
        if interval < 1:
            raise ValueError(f"Flashcard interval must be >= 1, got {interval}")

        async with self._lock:
            flashcard = self.flashcards.get(flashcard_id)
            if flashcard is None:
                return None

            updated = flashcard.model_copy(
                update={"interval": interval, "last_studied": utcnow()}
            )
            self.flashcards.rows[flashcard_id] = updated

        logger.info(f"Flashcard {flashcard_id} interval {flashcard.interval} -> {interval}")
        return updated

    async def delete_flashcard(self, flashcard_id: int) -> bool:
        async with self._lock:
            return self.flashcards.delete(flashcard_id)

    # =============================================================================
    # QUIZ OPERATIONS
    # =============================================================================

    async def list_quizzes(self, user_id: int) -> List[Quiz]:
        return self.quizzes.select(lambda q: q.user_id == user_id)

    async def get_quiz(self, quiz_id: int) -> Optional[Quiz]:
        return self.quizzes.get(quiz_id)

    async def create_quiz(self, data: QuizCreate) -> Quiz:
        async with self._lock:
            quiz = self.quizzes.insert(
                lambda quiz_id: Quiz(
                    id=quiz_id,
                    created_at=utcnow(),
                    **data.model_dump(),
                )
            )
        logger.info(f"Created quiz {quiz.id} for summary {quiz.summary_id}")
        return quiz

    async def delete_quiz(self, quiz_id: int) -> bool:
        async with self._lock:
            return self.quizzes.delete(quiz_id)

    # =============================================================================
    # QUIZ RESULT OPERATIONS
    # =============================================================================

    async def list_quiz_results(self, user_id: int) -> List[QuizResult]:
        return self.quiz_results.select(lambda r: r.user_id == user_id)

    async def create_quiz_result(self, data: QuizResultCreate) -> QuizResult:
        async with self._lock:
            return self.quiz_results.insert(
                lambda result_id: QuizResult(
                    id=result_id,
                    completed_at=utcnow(),
                    **data.model_dump(),
                )
            )

    # =============================================================================
    # STUDY SESSION OPERATIONS
    # =============================================================================

    async def list_study_sessions(self, user_id: int) -> List[StudySession]:
        return self.study_sessions.select(lambda s: s.user_id == user_id)

    async def create_study_session(self, data: StudySessionCreate) -> StudySession:
        async with self._lock:
            return self.study_sessions.insert(
                lambda session_id: StudySession(
                    id=session_id,
                    completed_at=utcnow(),
                    **data.model_dump(),
                )
            )

    # =============================================================================
    # STATISTICS
    # =============================================================================

    async def get_counts(self) -> Dict[str, int]:
        return {
            "users": len(self.users.rows),
            "documents": len(self.documents.rows),
            "summaries": len(self.summaries.rows),
            "flashcards": len(self.flashcards.rows),
            "quizzes": len(self.quizzes.rows),
            "quiz_results": len(self.quiz_results.rows),
            "study_sessions": len(self.study_sessions.rows),
        }
