"""
Study Activity Router for StudyHub.

Endpoints:
- POST /api/study-sessions - Record a study session (bumps the streak)
- POST /api/quiz-results - Record a quiz score
- GET /api/quiz-results - List the caller's quiz scores
- GET /api/stats - Activity over the last 30 days
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ..auth import AuthIdentity
from ..dependencies import get_current_identity, get_study_service
from ..models import (
    QuizResult,
    QuizResultRequest,
    StudySession,
    StudySessionRequest,
    StudyStats,
)
from ..services import StudyService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["study"],
    responses={401: {"description": "Unauthorized"}},
)

# =============================================================================
# Study Sessions
# =============================================================================

@router.post("/study-sessions", response_model=StudySession, status_code=status.HTTP_201_CREATED)
async def record_study_session(
    body: StudySessionRequest,
    identity: AuthIdentity = Depends(get_current_identity),
    service: StudyService = Depends(get_study_service),
):
    """
    Record a study session and increment the caller's study streak.

    Args:
        body: Duration in seconds, activity type and activity ID
        identity: Authenticated caller
        service: Study service (injected)

    Returns:
        Created study session
    """
    try:
        return await service.record_session(identity.user_id, body)
    except Exception as e:
        logger.error(f"Error recording study session: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error recording study session")

# =============================================================================
# Quiz Results
# =============================================================================

@router.post("/quiz-results", response_model=QuizResult, status_code=status.HTTP_201_CREATED)
async def record_quiz_result(
    body: QuizResultRequest,
    identity: AuthIdentity = Depends(get_current_identity),
    service: StudyService = Depends(get_study_service),
):
    """
    Record the score of a completed quiz.

    Raises:
        HTTPException 404: If quiz not found
    """
    try:
        result = await service.record_quiz_result(identity.user_id, body)
    except Exception as e:
        logger.error(f"Error recording quiz result: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error recording quiz result")

    if result is None:
        raise HTTPException(status_code=404, detail="Quiz not found")
    return result


@router.get("/quiz-results", response_model=List[QuizResult])
async def list_quiz_results(
    identity: AuthIdentity = Depends(get_current_identity),
    service: StudyService = Depends(get_study_service),
):
    try:
        return await service.list_quiz_results(identity.user_id)
    except Exception as e:
        logger.error(f"Error fetching quiz results: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching quiz results")

# =============================================================================
# Statistics
# =============================================================================

@router.get("/stats", response_model=StudyStats)
async def get_stats(
    identity: AuthIdentity = Depends(get_current_identity),
    service: StudyService = Depends(get_study_service),
):
    """
    Get the caller's study statistics over a rolling 30-day window.

    Returns:
        summariesThisMonth, quizzesCompleted, flashcardsPracticed, studyStreak
    """
    try:
        stats = await service.get_stats(identity.user_id)
    except Exception as e:
        logger.error(f"Error fetching statistics: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching statistics")

    if stats is None:
        raise HTTPException(status_code=404, detail="User not found")
    return stats
