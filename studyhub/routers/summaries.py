"""
Summaries Router for StudyHub.

Endpoints:
- POST /api/summaries/generate - Summarize an uploaded document
- GET /api/summaries - List the caller's summaries
- GET /api/summaries/{summary_id} - Get a single summary
- DELETE /api/summaries/{summary_id} - Delete a summary
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..auth import AuthIdentity
from ..dependencies import get_current_identity, get_summary_service, parse_id
from ..exceptions import GenerationError, LLMRateLimitError
from ..models import DeleteResponse, Summary, SummaryRequest
from ..rate_limit import GENERATION_RATE_LIMIT, limiter
from ..services import SummaryService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/summaries",
    tags=["summaries"],
    responses={401: {"description": "Unauthorized"}},
)


@router.post("/generate", response_model=Summary, status_code=status.HTTP_201_CREATED)
@limiter.limit(GENERATION_RATE_LIMIT)
async def generate_summary(
    request: Request,
    body: SummaryRequest,
    identity: AuthIdentity = Depends(get_current_identity),
    service: SummaryService = Depends(get_summary_service),
):
    """
    Generate a summary for one of the caller's documents.

    Rate limited to 10 requests per minute.

    Args:
        request: FastAPI request (for rate limiting)
        body: Document ID, format, readability and key-term flag
        identity: Authenticated caller
        service: Summary service (injected)

    Returns:
        Created summary

    Raises:
        HTTPException 404: If document not found
        HTTPException 429: If the language model is rate limited
        HTTPException 502: If the language model fails
    """
    try:
        summary = await service.generate(identity.user_id, body)
    except LLMRateLimitError as e:
        raise HTTPException(status_code=429, detail=str(e))
    except GenerationError as e:
        logger.error(f"Summary generation failed for document {body.document_id}: {e}", exc_info=True)
        raise HTTPException(status_code=502, detail="Error generating summary")
    except Exception as e:
        logger.error(f"Error generating summary: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error generating summary")

    if summary is None:
        raise HTTPException(status_code=404, detail="Document not found")
    return summary


@router.get("", response_model=List[Summary])
async def list_summaries(
    identity: AuthIdentity = Depends(get_current_identity),
    service: SummaryService = Depends(get_summary_service),
):
    try:
        return await service.list(identity.user_id)
    except Exception as e:
        logger.error(f"Error fetching summaries: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching summaries")


@router.get("/{summary_id}", response_model=Summary)
async def get_summary(
    summary_id: str,
    identity: AuthIdentity = Depends(get_current_identity),
    service: SummaryService = Depends(get_summary_service),
):
    sid = parse_id(summary_id, "summary")
    try:
        summary = await service.get(identity.user_id, sid)
    except Exception as e:
        logger.error(f"Error fetching summary {sid}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching summary")

    if summary is None:
        raise HTTPException(status_code=404, detail="Summary not found")
    return summary


@router.delete("/{summary_id}", response_model=DeleteResponse)
async def delete_summary(
    summary_id: str,
    identity: AuthIdentity = Depends(get_current_identity),
    service: SummaryService = Depends(get_summary_service),
):
    """Delete a summary. Flashcards and quizzes generated from it are kept."""
    sid = parse_id(summary_id, "summary")
    try:
        deleted = await service.delete(identity.user_id, sid)
    except Exception as e:
        logger.error(f"Error deleting summary {sid}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error deleting summary")

    if not deleted:
        raise HTTPException(status_code=404, detail="Summary not found")
    return DeleteResponse(success=True)
