"""
Flashcards Router for StudyHub.

Endpoints:
- POST /api/flashcards/generate - Generate a batch of cards from a summary
- POST /api/flashcards - Create a single card by hand
- GET /api/flashcards - List the caller's cards (optional ?summaryId=)
- GET /api/flashcards/{flashcard_id} - Get a single card
- PATCH /api/flashcards/{flashcard_id}/interval - Record a review
- DELETE /api/flashcards/{flashcard_id} - Delete a card
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from ..auth import AuthIdentity
from ..dependencies import get_current_identity, get_flashcard_service, parse_id
from ..exceptions import GenerationError, LLMRateLimitError
from ..models import (
    DeleteResponse,
    Flashcard,
    FlashcardManualCreate,
    FlashcardRequest,
    IntervalUpdate,
)
from ..rate_limit import GENERATION_RATE_LIMIT, limiter
from ..services import FlashcardService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/flashcards",
    tags=["flashcards"],
    responses={401: {"description": "Unauthorized"}},
)

# =============================================================================
# Creation Endpoints
# =============================================================================

@router.post("/generate", response_model=List[Flashcard], status_code=status.HTTP_201_CREATED)
@limiter.limit(GENERATION_RATE_LIMIT)
async def generate_flashcards(
    request: Request,
    body: FlashcardRequest,
    identity: AuthIdentity = Depends(get_current_identity),
    service: FlashcardService = Depends(get_flashcard_service),
):
    """
    Generate a batch of flashcards from one of the caller's summaries.

    Returns:
        Every created flashcard, each with interval 1 and no lastStudied

    Raises:
        HTTPException 404: If summary not found
        HTTPException 429: If the language model is rate limited
        HTTPException 502: If the language model fails
    """
    try:
        flashcards = await service.generate(identity.user_id, body.summary_id)
    except LLMRateLimitError as e:
        raise HTTPException(status_code=429, detail=str(e))
    except GenerationError as e:
        logger.error(f"Flashcard generation failed for summary {body.summary_id}: {e}", exc_info=True)
        raise HTTPException(status_code=502, detail="Error generating flashcards")
    except Exception as e:
        logger.error(f"Error generating flashcards: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error generating flashcards")

    if flashcards is None:
        raise HTTPException(status_code=404, detail="Summary not found")
    return flashcards


@router.post("", response_model=Flashcard, status_code=status.HTTP_201_CREATED)
async def create_flashcard(
    body: FlashcardManualCreate,
    identity: AuthIdentity = Depends(get_current_identity),
    service: FlashcardService = Depends(get_flashcard_service),
):
    """
    Create a flashcard by hand.

    Raises:
        HTTPException 404: If a summaryId is given and that summary is not found
    """
    try:
        flashcard = await service.create(identity.user_id, body)
    except Exception as e:
        logger.error(f"Error creating flashcard: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error creating flashcard")

    if flashcard is None:
        raise HTTPException(status_code=404, detail="Summary not found")
    return flashcard

# =============================================================================
# Read Endpoints
# =============================================================================

@router.get("", response_model=List[Flashcard])
async def list_flashcards(
    summary_id: Optional[str] = Query(None, alias="summaryId"),
    identity: AuthIdentity = Depends(get_current_identity),
    service: FlashcardService = Depends(get_flashcard_service),
):
    """List the caller's flashcards, optionally only those from one summary."""
    sid = parse_id(summary_id, "summary") if summary_id is not None else None
    try:
        return await service.list(identity.user_id, sid)
    except Exception as e:
        logger.error(f"Error fetching flashcards: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching flashcards")


@router.get("/{flashcard_id}", response_model=Flashcard)
async def get_flashcard(
    flashcard_id: str,
    identity: AuthIdentity = Depends(get_current_identity),
    service: FlashcardService = Depends(get_flashcard_service),
):
    fid = parse_id(flashcard_id, "flashcard")
    try:
        flashcard = await service.get(identity.user_id, fid)
    except Exception as e:
        logger.error(f"Error fetching flashcard {fid}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching flashcard")

    if flashcard is None:
        raise HTTPException(status_code=404, detail="Flashcard not found")
    return flashcard

# =============================================================================
# Review / Delete Endpoints
# =============================================================================

@router.patch("/{flashcard_id}/interval", response_model=Flashcard)
async def update_flashcard_interval(
    flashcard_id: str,
    body: IntervalUpdate,
    identity: AuthIdentity = Depends(get_current_identity),
    service: FlashcardService = Depends(get_flashcard_service),
):
    """
    Replace a flashcard's review interval and stamp lastStudied.

    The new interval must be a positive integer; it may be lower than the
    current one.

    Raises:
        HTTPException 400: If the interval is not a positive integer
        HTTPException 404: If flashcard not found
    """
    fid = parse_id(flashcard_id, "flashcard")
    try:
        flashcard = await service.update_interval(identity.user_id, fid, body.interval)
    except Exception as e:
        logger.error(f"Error updating flashcard {fid}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error updating flashcard")

    if flashcard is None:
        raise HTTPException(status_code=404, detail="Flashcard not found")
    return flashcard


@router.delete("/{flashcard_id}", response_model=DeleteResponse)
async def delete_flashcard(
    flashcard_id: str,
    identity: AuthIdentity = Depends(get_current_identity),
    service: FlashcardService = Depends(get_flashcard_service),
):
    fid = parse_id(flashcard_id, "flashcard")
    try:
        deleted = await service.delete(identity.user_id, fid)
    except Exception as e:
        logger.error(f"Error deleting flashcard {fid}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error deleting flashcard")

    if not deleted:
        raise HTTPException(status_code=404, detail="Flashcard not found")
    return DeleteResponse(success=True)
