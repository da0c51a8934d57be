"""
Quizzes Router for StudyHub.

Endpoints:
- POST /api/quizzes/generate - Build a quiz from a summary
- GET /api/quizzes - List the caller's quizzes
- GET /api/quizzes/{quiz_id} - Get a single quiz
- DELETE /api/quizzes/{quiz_id} - Delete a quiz
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..auth import AuthIdentity
from ..dependencies import get_current_identity, get_quiz_service, parse_id
from ..exceptions import GenerationError, LLMRateLimitError
from ..models import DeleteResponse, Quiz, QuizRequest
from ..rate_limit import GENERATION_RATE_LIMIT, limiter
from ..services import QuizService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/quizzes",
    tags=["quizzes"],
    responses={401: {"description": "Unauthorized"}},
)


@router.post("/generate", response_model=Quiz, status_code=status.HTTP_201_CREATED)
@limiter.limit(GENERATION_RATE_LIMIT)
async def generate_quiz(
    request: Request,
    body: QuizRequest,
    identity: AuthIdentity = Depends(get_current_identity),
    service: QuizService = Depends(get_quiz_service),
):
    """
    Generate a multiple-choice quiz from one of the caller's summaries.

    Easy quizzes have 5 questions, medium 8 and hard 10.

    Raises:
        HTTPException 404: If summary not found
        HTTPException 429: If the language model is rate limited
        HTTPException 502: If the language model fails
    """
    try:
        quiz = await service.generate(identity.user_id, body.summary_id, body.difficulty)
    except LLMRateLimitError as e:
        raise HTTPException(status_code=429, detail=str(e))
    except GenerationError as e:
        logger.error(f"Quiz generation failed for summary {body.summary_id}: {e}", exc_info=True)
        raise HTTPException(status_code=502, detail="Error generating quiz")
    except Exception as e:
        logger.error(f"Error generating quiz: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error generating quiz")

    if quiz is None:
        raise HTTPException(status_code=404, detail="Summary not found")
    return quiz


@router.get("", response_model=List[Quiz])
async def list_quizzes(
    identity: AuthIdentity = Depends(get_current_identity),
    service: QuizService = Depends(get_quiz_service),
):
    try:
        return await service.list(identity.user_id)
    except Exception as e:
        logger.error(f"Error fetching quizzes: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching quizzes")


@router.get("/{quiz_id}", response_model=Quiz)
async def get_quiz(
    quiz_id: str,
    identity: AuthIdentity = Depends(get_current_identity),
    service: QuizService = Depends(get_quiz_service),
):
    qid = parse_id(quiz_id, "quiz")
    try:
        quiz = await service.get(identity.user_id, qid)
    except Exception as e:
        logger.error(f"Error fetching quiz {qid}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching quiz")

    if quiz is None:
        raise HTTPException(status_code=404, detail="Quiz not found")
    return quiz


@router.delete("/{quiz_id}", response_model=DeleteResponse)
async def delete_quiz(
    quiz_id: str,
    identity: AuthIdentity = Depends(get_current_identity),
    service: QuizService = Depends(get_quiz_service),
):
    qid = parse_id(quiz_id, "quiz")
    try:
        deleted = await service.delete(identity.user_id, qid)
    except Exception as e:
        logger.error(f"Error deleting quiz {qid}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error deleting quiz")

    if not deleted:
        raise HTTPException(status_code=404, detail="Quiz not found")
    return DeleteResponse(success=True)
