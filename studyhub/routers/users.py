"""
User Router for StudyHub.

Endpoints:
- GET /api/user - Profile of the authenticated caller
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..auth import AuthIdentity
from ..dependencies import get_current_identity, get_study_service
from ..models import UserProfile
from ..services import StudyService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["users"],
    responses={401: {"description": "Unauthorized"}},
)


@router.get("/user", response_model=UserProfile)
async def get_current_user_profile(
    identity: AuthIdentity = Depends(get_current_identity),
    service: StudyService = Depends(get_study_service),
):
    """Return the caller's profile, created on first authenticated request."""
    user = await service.get_user(identity.user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    return UserProfile(
        id=user.id,
        username=user.username,
        email=user.email,
        name=user.name,
        study_streak=user.study_streak,
        created_at=user.created_at,
    )
