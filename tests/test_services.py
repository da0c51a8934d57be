"""
Tests for the service layer.

Runs each orchestration sequence against a real in-memory repository and
the placeholder generator.
"""

from datetime import datetime, timedelta, timezone

import pytest

from studyhub.exceptions import UnsupportedFileTypeError
from studyhub.models import (
    ActivityType,
    Difficulty,
    FlashcardManualCreate,
    QuizResultRequest,
    Readability,
    StudySessionRequest,
    SummaryFormat,
    SummaryRequest,
    UserCreate,
)
from studyhub.services import (
    DocumentService,
    FlashcardService,
    QuizService,
    StudyService,
    SummaryService,
)


@pytest.fixture
def services(repo, generator, file_processor):
    return {
        "documents": DocumentService(repo, file_processor),
        "summaries": SummaryService(repo, generator),
        "quizzes": QuizService(repo, generator),
        "flashcards": FlashcardService(repo, generator),
        "study": StudyService(repo),
    }


async def new_user(repo, name="ada"):
    return await repo.create_user(UserCreate(username=name, email=f"{name}@example.com"))


def summary_request(document_id, extract_key_terms=False):
    return SummaryRequest(
        document_id=document_id,
        format=SummaryFormat.CONCISE,
        readability=Readability.SIMPLE,
        extract_key_terms=extract_key_terms,
    )


# =============================================================================
# Documents
# =============================================================================

class TestDocumentService:

    @pytest.mark.asyncio
    async def test_upload_text(self, repo, services, file_processor):
        user = await new_user(repo)

        document = await services["documents"].upload(
            user.id, b"Hello world", "hello.txt", "text/plain"
        )

        assert document.title == "hello"
        assert document.file_name == "hello.txt"
        assert document.file_size == 11
        assert document.content == "Hello world"
        assert len(list(file_processor.upload_dir.iterdir())) == 1

    @pytest.mark.asyncio
    async def test_upload_rejects_type_without_record(self, repo, services):
        user = await new_user(repo)

        with pytest.raises(UnsupportedFileTypeError):
            await services["documents"].upload(user.id, b"<html/>", "page.html", "text/html")

        assert await repo.list_documents(user.id) == []

    @pytest.mark.asyncio
    async def test_other_users_document_is_hidden(self, repo, services):
        ada = await new_user(repo, "ada")
        grace = await new_user(repo, "grace")
        document = await services["documents"].upload(ada.id, b"notes", "n.txt", "text/plain")

        assert await services["documents"].get(grace.id, document.id) is None
        assert await services["documents"].delete(grace.id, document.id) is False
        assert await services["documents"].get(ada.id, document.id) is not None


# =============================================================================
# Generation Sequences
# =============================================================================

class TestGeneration:

    @pytest.mark.asyncio
    async def test_summary_for_missing_document(self, repo, services):
        user = await new_user(repo)
        assert await services["summaries"].generate(user.id, summary_request(99)) is None
        assert await repo.list_summaries(user.id) == []

    @pytest.mark.asyncio
    async def test_full_pipeline(self, repo, services):
        user = await new_user(repo)
        document = await services["documents"].upload(user.id, b"Hello world", "hello.txt", "text/plain")

        summary = await services["summaries"].generate(user.id, summary_request(document.id))
        assert summary.document_id == document.id
        assert summary.title == "hello"
        assert summary.read_time == 1
        assert summary.key_terms == []

        quiz = await services["quizzes"].generate(user.id, summary.id, Difficulty.MEDIUM)
        assert quiz.summary_id == summary.id
        assert len(quiz.questions) == 8

        cards = await services["flashcards"].generate(user.id, summary.id)
        assert len(cards) == 5
        assert all(c.summary_id == summary.id and c.interval == 1 for c in cards)
        assert len(await repo.list_flashcards(user.id, summary.id)) == 5

    @pytest.mark.asyncio
    async def test_generation_from_missing_summary(self, repo, services):
        user = await new_user(repo)
        assert await services["quizzes"].generate(user.id, 5, Difficulty.EASY) is None
        assert await services["flashcards"].generate(user.id, 5) is None

    @pytest.mark.asyncio
    async def test_manual_flashcard(self, repo, services):
        user = await new_user(repo)

        card = await services["flashcards"].create(
            user.id, FlashcardManualCreate(front="Capital of France?", back="Paris")
        )
        assert card.summary_id is None
        assert card.interval == 1

        missing = await services["flashcards"].create(
            user.id, FlashcardManualCreate(summary_id=12, front="Q", back="A")
        )
        assert missing is None

    @pytest.mark.asyncio
    async def test_update_interval(self, repo, services):
        user = await new_user(repo)
        card = await services["flashcards"].create(user.id, FlashcardManualCreate(front="Q", back="A"))

        updated = await services["flashcards"].update_interval(user.id, card.id, 2)

        assert updated.interval == 2
        assert updated.last_studied is not None
        assert await services["flashcards"].update_interval(user.id, 999, 2) is None


# =============================================================================
# Study Activity
# =============================================================================

class TestStudyService:

    @pytest.mark.asyncio
    async def test_each_session_increments_streak(self, repo, services):
        user = await new_user(repo)
        request = StudySessionRequest(duration=300, activity_type=ActivityType.FLASHCARD, activity_id=1)

        await services["study"].record_session(user.id, request)
        await services["study"].record_session(user.id, request)

        assert (await repo.get_user(user.id)).study_streak == 2

    @pytest.mark.asyncio
    async def test_stats(self, repo, services):
        user = await new_user(repo)
        document = await services["documents"].upload(user.id, b"Hello world", "hello.txt", "text/plain")
        await services["summaries"].generate(user.id, summary_request(document.id))
        for activity in (ActivityType.QUIZ, ActivityType.QUIZ, ActivityType.FLASHCARD, ActivityType.SUMMARY):
            await services["study"].record_session(
                user.id, StudySessionRequest(duration=60, activity_type=activity, activity_id=1)
            )

        stats = await services["study"].get_stats(user.id)

        assert stats.summaries_this_month == 1
        assert stats.quizzes_completed == 2
        assert stats.flashcards_practiced == 1
        assert stats.study_streak == 4

    @pytest.mark.asyncio
    async def test_stats_window_excludes_old_activity(self, repo, services):
        user = await new_user(repo)
        document = await services["documents"].upload(user.id, b"Hello world", "hello.txt", "text/plain")
        await services["summaries"].generate(user.id, summary_request(document.id))
        await services["study"].record_session(
            user.id, StudySessionRequest(duration=60, activity_type=ActivityType.QUIZ, activity_id=1)
        )

        later = datetime.now(timezone.utc) + timedelta(days=31)
        stats = await services["study"].get_stats(user.id, now=later)

        assert stats.summaries_this_month == 0
        assert stats.quizzes_completed == 0
        assert stats.study_streak == 1

    @pytest.mark.asyncio
    async def test_stats_for_missing_user(self, services):
        assert await services["study"].get_stats(42) is None

    @pytest.mark.asyncio
    async def test_quiz_results(self, repo, services):
        user = await new_user(repo)
        document = await services["documents"].upload(user.id, b"Hello world", "hello.txt", "text/plain")
        summary = await services["summaries"].generate(user.id, summary_request(document.id))
        quiz = await services["quizzes"].generate(user.id, summary.id, Difficulty.EASY)

        result = await services["study"].record_quiz_result(
            user.id, QuizResultRequest(quiz_id=quiz.id, score=80, total_questions=5)
        )
        assert result.score == 80
        assert [r.id for r in await services["study"].list_quiz_results(user.id)] == [result.id]

        missing = await services["study"].record_quiz_result(
            user.id, QuizResultRequest(quiz_id=999, score=80, total_questions=5)
        )
        assert missing is None
