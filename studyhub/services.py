"""
Service layer for StudyHub.

Services sequence repository reads, generator calls and repository writes
into the operations exposed over HTTP. They hold no state of their own.
A ``None`` return means a referenced record is missing (or belongs to
another user); earlier writes in a sequence are never rolled back.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, TypeVar

from .constants import STATS_WINDOW_DAYS
from .content_generator import ContentGenerator, SummaryOptions
from .file_processor import FileProcessor
from .models import (
    ActivityType,
    Document, DocumentCreate,
    Difficulty,
    Flashcard, FlashcardCreate, FlashcardManualCreate,
    Quiz, QuizCreate,
    QuizResult, QuizResultCreate, QuizResultRequest,
    StudySession, StudySessionCreate, StudySessionRequest,
    StudyStats,
    Summary, SummaryCreate, SummaryRequest,
    User,
)
from .repository_interface import StudyRepository
from .sanitization import title_from_filename

logger = logging.getLogger(__name__)

R = TypeVar("R")


def owned(record: Optional[R], user_id: int) -> Optional[R]:
    """Return ``record`` only if it exists and belongs to ``user_id``."""
    if record is None or record.user_id != user_id:
        return None
    return record


class DocumentService:
    """Service for document upload and management."""

    def __init__(self, repository: StudyRepository, file_processor: FileProcessor):
        self.repo = repository
        self.files = file_processor

    async def upload(
        self,
        user_id: int,
        data: bytes,
        filename: str,
        mimetype: str
    ) -> Document:
        """
        Persist an upload, extract its text and create the document record.

        Args:
            user_id: Owning user
            data: Raw file bytes
            filename: Sanitized client filename
            mimetype: Declared content type

        Returns:
            Created document
        """
        stored = await self.files.save_file(data, filename, mimetype)

        document = await self.repo.create_document(DocumentCreate(
            user_id=user_id,
            title=title_from_filename(stored.original_name),
            file_name=stored.original_name,
            file_type=stored.mimetype,
            file_size=stored.size,
            content=stored.content,
        ))
        logger.info(f"User {user_id} uploaded document {document.id} ({document.file_size} bytes)")
        return document

    async def list(self, user_id: int) -> List[Document]:
        return await self.repo.list_documents(user_id)

    async def get(self, user_id: int, document_id: int) -> Optional[Document]:
        return owned(await self.repo.get_document(document_id), user_id)

    async def delete(self, user_id: int, document_id: int) -> bool:
        if await self.get(user_id, document_id) is None:
            return False
        return await self.repo.delete_document(document_id)


class SummaryService:
    """Service for summary generation and management."""

    def __init__(self, repository: StudyRepository, generator: ContentGenerator):
        self.repo = repository
        self.generator = generator

    async def generate(self, user_id: int, request: SummaryRequest) -> Optional[Summary]:
        """
        Summarize a document and store the result.

        Returns:
            Created summary, or None if the document is missing
        """
        document = owned(await self.repo.get_document(request.document_id), user_id)
        if document is None:
            return None

        result = await self.generator.summarize(
            document.content or "",
            document.title,
            SummaryOptions(
                format=request.format,
                readability=request.readability,
                extract_key_terms=request.extract_key_terms,
            ),
        )

        summary = await self.repo.create_summary(SummaryCreate(
            user_id=user_id,
            document_id=document.id,
            title=document.title,
            content=result.content,
            format=request.format,
            key_terms=result.key_terms,
            read_time=result.read_time,
        ))
        logger.info(f"Created summary {summary.id} for document {document.id}")
        return summary

    async def list(self, user_id: int) -> List[Summary]:
        return await self.repo.list_summaries(user_id)

    async def get(self, user_id: int, summary_id: int) -> Optional[Summary]:
        return owned(await self.repo.get_summary(summary_id), user_id)

    async def delete(self, user_id: int, summary_id: int) -> bool:
        """Delete a summary; its flashcards and quizzes are kept."""
        if await self.get(user_id, summary_id) is None:
            return False
        return await self.repo.delete_summary(summary_id)


class QuizService:
    """Service for quiz generation and management."""

    def __init__(self, repository: StudyRepository, generator: ContentGenerator):
        self.repo = repository
        self.generator = generator

    async def generate(
        self,
        user_id: int,
        summary_id: int,
        difficulty: Difficulty
    ) -> Optional[Quiz]:
        """
        Build a quiz from a summary and store it.

        Returns:
            Created quiz, or None if the summary is missing
        """
        summary = owned(await self.repo.get_summary(summary_id), user_id)
        if summary is None:
            return None

        draft = await self.generator.generate_quiz(summary.content, summary.title, difficulty)

        quiz = await self.repo.create_quiz(QuizCreate(
            user_id=user_id,
            summary_id=summary.id,
            title=draft.title,
            difficulty=difficulty,
            questions=draft.questions,
        ))
        logger.info(f"Created quiz {quiz.id} ({len(quiz.questions)} questions) for summary {summary.id}")
        return quiz

    async def list(self, user_id: int) -> List[Quiz]:
        return await self.repo.list_quizzes(user_id)

    async def get(self, user_id: int, quiz_id: int) -> Optional[Quiz]:
        return owned(await self.repo.get_quiz(quiz_id), user_id)

    async def delete(self, user_id: int, quiz_id: int) -> bool:
        if await self.get(user_id, quiz_id) is None:
            return False
        return await self.repo.delete_quiz(quiz_id)


class FlashcardService:
    """Service for flashcard generation, review and management."""

    def __init__(self, repository: StudyRepository, generator: ContentGenerator):
        self.repo = repository
        self.generator = generator

    async def generate(self, user_id: int, summary_id: int) -> Optional[List[Flashcard]]:
        """
        Build a flashcard batch from a summary and store every card.

        Returns:
            Created flashcards, or None if the summary is missing
        """
        summary = owned(await self.repo.get_summary(summary_id), user_id)
        if summary is None:
            return None

        drafts = await self.generator.generate_flashcards(summary.content, summary.title)

        flashcards = []
        for draft in drafts:
            flashcards.append(await self.repo.create_flashcard(FlashcardCreate(
                user_id=user_id,
                summary_id=summary.id,
                front=draft.front,
                back=draft.back,
            )))

        logger.info(f"Created {len(flashcards)} flashcards for summary {summary.id}")
        return flashcards

    async def create(self, user_id: int, request: FlashcardManualCreate) -> Optional[Flashcard]:
        """
        Create a single hand-written flashcard.

        Returns:
            Created flashcard, or None if a given summary is missing
        """
        if request.summary_id is not None:
            if owned(await self.repo.get_summary(request.summary_id), user_id) is None:
                return None

        return await self.repo.create_flashcard(FlashcardCreate(
            user_id=user_id,
            summary_id=request.summary_id,
            front=request.front,
            back=request.back,
        ))

    async def list(self, user_id: int, summary_id: Optional[int] = None) -> List[Flashcard]:
        return await self.repo.list_flashcards(user_id, summary_id)

    async def get(self, user_id: int, flashcard_id: int) -> Optional[Flashcard]:
        return owned(await self.repo.get_flashcard(flashcard_id), user_id)

    async def update_interval(
        self,
        user_id: int,
        flashcard_id: int,
        interval: int
    ) -> Optional[Flashcard]:
        """
        Replace a flashcard's review interval and mark it studied now.

        Any positive interval is accepted, including one smaller than the
        current value.

        Returns:
            Updated flashcard, or None if it is missing
        """
        if await self.get(user_id, flashcard_id) is None:
            return None
        return await self.repo.update_flashcard(flashcard_id, interval)

    async def delete(self, user_id: int, flashcard_id: int) -> bool:
        if await self.get(user_id, flashcard_id) is None:
            return False
        return await self.repo.delete_flashcard(flashcard_id)


class StudyService:
    """Service for study sessions, quiz results, streaks and statistics."""

    def __init__(self, repository: StudyRepository):
        self.repo = repository

    async def get_user(self, user_id: int) -> Optional[User]:
        return await self.repo.get_user(user_id)

    async def record_session(self, user_id: int, request: StudySessionRequest) -> StudySession:
        """
        Store a study session and bump the user's streak by one.

        Every session increments the streak, including several on one day.
        """
        session = await self.repo.create_study_session(StudySessionCreate(
            user_id=user_id,
            duration=request.duration,
            activity_type=request.activity_type,
            activity_id=request.activity_id,
        ))

        user = await self.repo.get_user(user_id)
        if user is not None:
            await self.repo.update_user_streak(user_id, user.study_streak + 1)

        logger.info(
            f"User {user_id} studied {request.activity_type.value} {request.activity_id} "
            f"for {request.duration}s"
        )
        return session

    async def record_quiz_result(
        self,
        user_id: int,
        request: QuizResultRequest
    ) -> Optional[QuizResult]:
        """
        Store a quiz score.

        Returns:
            Created result, or None if the quiz is missing
        """
        quiz = owned(await self.repo.get_quiz(request.quiz_id), user_id)
        if quiz is None:
            return None

        return await self.repo.create_quiz_result(QuizResultCreate(
            user_id=user_id,
            quiz_id=quiz.id,
            score=request.score,
            total_questions=request.total_questions,
        ))

    async def list_quiz_results(self, user_id: int) -> List[QuizResult]:
        return await self.repo.list_quiz_results(user_id)

    async def get_stats(self, user_id: int, now: Optional[datetime] = None) -> Optional[StudyStats]:
        """
        Aggregate activity over the last 30 days.

        Returns:
            StudyStats, or None if the user is missing
        """
        user = await self.repo.get_user(user_id)
        if user is None:
            return None

        since = (now or datetime.now(timezone.utc)) - timedelta(days=STATS_WINDOW_DAYS)

        summaries = await self.repo.list_summaries(user_id)
        sessions = [
            s for s in await self.repo.list_study_sessions(user_id)
            if s.completed_at >= since
        ]

        return StudyStats(
            summaries_this_month=sum(1 for s in summaries if s.created_at >= since),
            quizzes_completed=sum(1 for s in sessions if s.activity_type == ActivityType.QUIZ),
            flashcards_practiced=sum(1 for s in sessions if s.activity_type == ActivityType.FLASHCARD),
            study_streak=user.study_streak,
        )
