"""
Shared Dependencies for StudyHub.

Provides:
- Per-app state access (repository, content generator, file processor)
- Authentication dependencies (get_optional_identity, get_current_identity)
- Service instances built on the per-app state
- Path ID parsing
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .auth import AuthIdentity, resolve_identity
from .content_generator import ContentGenerator
from .file_processor import FileProcessor
from .repository_interface import StudyRepository
from .services import (
    DocumentService,
    FlashcardService,
    QuizService,
    StudyService,
    SummaryService,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Bearer Scheme
# =============================================================================

# Missing credentials leave the identity unset instead of failing here
bearer_scheme = HTTPBearer(auto_error=False)

# =============================================================================
# App State Access
# =============================================================================

def get_repository(request: Request) -> StudyRepository:
    """
    Get the repository constructed for this application instance.

    Usage:
        @router.get("/api/documents")
        async def list_documents(repo: StudyRepository = Depends(get_repository)):
            ...
    """
    return request.app.state.repository


def get_content_generator(request: Request) -> ContentGenerator:
    return request.app.state.content_generator


def get_file_processor(request: Request) -> FileProcessor:
    return request.app.state.file_processor

# =============================================================================
# Authentication Dependencies
# =============================================================================

async def get_optional_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    repo: StudyRepository = Depends(get_repository),
) -> Optional[AuthIdentity]:
    """
    Resolve the bearer token, if any, to an identity.

    Invalid or expired tokens are treated like absent ones. The resolved
    identity is also stored on ``request.state.identity``.

    Returns:
        AuthIdentity or None
    """
    identity = None
    if credentials is not None and credentials.credentials:
        secret_key = request.app.state.settings.secret_key
        identity = await resolve_identity(repo, credentials.credentials, secret_key)
    request.state.identity = identity
    return identity


async def get_current_identity(
    identity: Optional[AuthIdentity] = Depends(get_optional_identity),
) -> AuthIdentity:
    """
    Require an authenticated caller.

    Raises:
        HTTPException 401: If no valid bearer token was presented
    """
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity

# =============================================================================
# Service Instances
# =============================================================================

def get_document_service(
    repo: StudyRepository = Depends(get_repository),
    files: FileProcessor = Depends(get_file_processor),
) -> DocumentService:
    return DocumentService(repo, files)


def get_summary_service(
    repo: StudyRepository = Depends(get_repository),
    generator: ContentGenerator = Depends(get_content_generator),
) -> SummaryService:
    return SummaryService(repo, generator)


def get_quiz_service(
    repo: StudyRepository = Depends(get_repository),
    generator: ContentGenerator = Depends(get_content_generator),
) -> QuizService:
    return QuizService(repo, generator)


def get_flashcard_service(
    repo: StudyRepository = Depends(get_repository),
    generator: ContentGenerator = Depends(get_content_generator),
) -> FlashcardService:
    return FlashcardService(repo, generator)


def get_study_service(repo: StudyRepository = Depends(get_repository)) -> StudyService:
    return StudyService(repo)

# =============================================================================
# Path Parameters
# =============================================================================

def parse_id(raw: str, entity: str) -> int:
    """
    Parse a path ID.

    Raises:
        HTTPException 400: If ``raw`` is not a positive integer
    """
    try:
        value = int(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {entity} ID")
    if value < 1:
        raise HTTPException(status_code=400, detail=f"Invalid {entity} ID")
    return value
