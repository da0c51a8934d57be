"""
Abstract Repository Interface for StudyHub.

Defines the contract that all entity store implementations must follow.
Absence is signalled by ``None`` (lookups and updates) or ``False``
(deletes), never by an exception.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .models import (
    User, UserCreate,
    Document, DocumentCreate,
    Summary, SummaryCreate,
    Flashcard, FlashcardCreate,
    Quiz, QuizCreate,
    QuizResult, QuizResultCreate,
    StudySession, StudySessionCreate,
)


class StudyRepository(ABC):
    """
    Abstract base class for StudyHub data access.

    Every entity type has its own identifier sequence starting at 1.
    Identifiers are never reused, and deletes never cascade.
    """

    # =============================================================================
    # USER OPERATIONS
    # =============================================================================

    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[User]:
        pass

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[User]:
        pass

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    async def get_user_by_external_id(self, external_auth_id: str) -> Optional[User]:
        """
        Get the user linked to an identity-provider subject.

        Args:
            external_auth_id: Subject identifier from a verified token

        Returns:
            User or None if not found
        """
        pass

    @abstractmethod
    async def create_user(self, data: UserCreate) -> User:
        """
        Create a user with a zero study streak.

        Args:
            data: User fields

        Returns:
            Stored user record
        """
        pass

    @abstractmethod
    async def update_user_streak(self, user_id: int, streak: int) -> Optional[User]:
        """
        Replace a user's study streak.

        Args:
            user_id: User ID
            streak: New streak value

        Returns:
            Updated user or None if not found
        """
        pass

    # =============================================================================
    # DOCUMENT OPERATIONS
    # =============================================================================

    @abstractmethod
    async def list_documents(self, user_id: int) -> List[Document]:
        pass

    @abstractmethod
    async def get_document(self, document_id: int) -> Optional[Document]:
        pass

    @abstractmethod
    async def create_document(self, data: DocumentCreate) -> Document:
        pass

    @abstractmethod
    async def delete_document(self, document_id: int) -> bool:
        """
        Delete a document.

        Summaries generated from the document are left in place.

        Returns:
            True if deleted, False if not found
        """
        pass

    # =============================================================================
    # SUMMARY OPERATIONS
    # =============================================================================

    @abstractmethod
    async def list_summaries(self, user_id: int) -> List[Summary]:
        pass

    @abstractmethod
    async def get_summary(self, summary_id: int) -> Optional[Summary]:
        pass

    @abstractmethod
    async def create_summary(self, data: SummaryCreate) -> Summary:
        pass

    @abstractmethod
    async def delete_summary(self, summary_id: int) -> bool:
        """
        Delete a summary.

        Flashcards and quizzes generated from the summary keep their
        ``summary_id`` and become orphaned.

        Returns:
            True if deleted, False if not found
        """
        pass

    # =============================================================================
    # FLASHCARD OPERATIONS
    # =============================================================================

    @abstractmethod
    async def list_flashcards(
        self,
        user_id: int,
        summary_id: Optional[int] = None
    ) -> List[Flashcard]:
        """
        List a user's flashcards.

        Args:
            user_id: Owning user
            summary_id: Optional source summary filter

        Returns:
            Matching flashcards
        """
        pass

    @abstractmethod
    async def get_flashcard(self, flashcard_id: int) -> Optional[Flashcard]:
        pass

    @abstractmethod
    async def create_flashcard(self, data: FlashcardCreate) -> Flashcard:
        """Create a flashcard with interval 1 and no last-studied time."""
        pass

    @abstractmethod
    async def update_flashcard(self, flashcard_id: int, interval: int) -> Optional[Flashcard]:
        """
        Replace a flashcard's interval and stamp it as studied now.

        Args:
            flashcard_id: Flashcard ID
            interval: New interval, must be >= 1

        Returns:
            Updated flashcard or None if not found
        """
        pass

    @abstractmethod
    async def delete_flashcard(self, flashcard_id: int) -> bool:
        pass

    # =============================================================================
    # QUIZ OPERATIONS
    # =============================================================================

    @abstractmethod
    async def list_quizzes(self, user_id: int) -> List[Quiz]:
        pass

    @abstractmethod
    async def get_quiz(self, quiz_id: int) -> Optional[Quiz]:
        pass

    @abstractmethod
    async def create_quiz(self, data: QuizCreate) -> Quiz:
        pass

    @abstractmethod
    async def delete_quiz(self, quiz_id: int) -> bool:
        pass

    # =============================================================================
    # QUIZ RESULT OPERATIONS
    # =============================================================================

    @abstractmethod
    async def list_quiz_results(self, user_id: int) -> List[QuizResult]:
        pass

    @abstractmethod
    async def create_quiz_result(self, data: QuizResultCreate) -> QuizResult:
        pass

    # =============================================================================
    # STUDY SESSION OPERATIONS
    # =============================================================================

    @abstractmethod
    async def list_study_sessions(self, user_id: int) -> List[StudySession]:
        pass

    @abstractmethod
    async def create_study_session(self, data: StudySessionCreate) -> StudySession:
        pass

    # =============================================================================
    # STATISTICS
    # =============================================================================

    @abstractmethod
    async def get_counts(self) -> Dict[str, int]:
        """
        Count stored records per entity type.

        Returns:
            Mapping of entity name to record count
        """
        pass


__all__ = ["StudyRepository"]
