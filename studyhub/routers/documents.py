"""
Documents Router for StudyHub.

Endpoints:
- POST /api/documents/upload - Upload a text or PDF file
- GET /api/documents - List the caller's documents
- GET /api/documents/{doc_id} - Get a single document with its content
- DELETE /api/documents/{doc_id} - Delete a document
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status

from ..auth import AuthIdentity
from ..dependencies import get_current_identity, get_document_service, parse_id
from ..exceptions import UploadError
from ..models import DeleteResponse, Document, DocumentInfo
from ..rate_limit import UPLOAD_RATE_LIMIT, limiter
from ..sanitization import sanitize_filename
from ..services import DocumentService

# Initialize logger
logger = logging.getLogger(__name__)

# Create router
router = APIRouter(
    prefix="/api/documents",
    tags=["documents"],
    responses={401: {"description": "Unauthorized"}},
)

# =============================================================================
# Upload Endpoint
# =============================================================================

@router.post("/upload", response_model=DocumentInfo, status_code=status.HTTP_201_CREATED)
@limiter.limit(UPLOAD_RATE_LIMIT)
async def upload_document(
    request: Request,
    file: UploadFile = File(...),
    identity: AuthIdentity = Depends(get_current_identity),
    service: DocumentService = Depends(get_document_service),
):
    """
    Upload a document and extract its text.

    Rate limited to 10 uploads per minute.

    Args:
        request: FastAPI request (for rate limiting)
        file: Multipart ``file`` field (text/plain or application/pdf, max 10MB)
        identity: Authenticated caller
        service: Document service (injected)

    Returns:
        Document info (no content)

    Raises:
        HTTPException 400: If the file is missing, too large, of an
            unsupported type or cannot be decoded
    """
    try:
        filename = sanitize_filename(file.filename or "")
        # One byte past the limit is enough to detect an oversized upload
        data = await file.read(service.files.max_size + 1)
        mimetype = (file.content_type or "").split(";")[0].strip().lower()

        document = await service.upload(identity.user_id, data, filename, mimetype)
        return DocumentInfo.from_document(document)

    except HTTPException:
        raise
    except UploadError as e:
        logger.warning(f"Rejected upload from user {identity.user_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Upload failed for user {identity.user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error uploading document")
    finally:
        await file.close()

# =============================================================================
# List / Get / Delete Endpoints
# =============================================================================

@router.get("", response_model=List[DocumentInfo])
async def list_documents(
    identity: AuthIdentity = Depends(get_current_identity),
    service: DocumentService = Depends(get_document_service),
):
    """List the caller's documents without their extracted content."""
    try:
        documents = await service.list(identity.user_id)
        return [DocumentInfo.from_document(d) for d in documents]
    except Exception as e:
        logger.error(f"Failed to list documents: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching documents")


@router.get("/{doc_id}", response_model=Document)
async def get_document(
    doc_id: str,
    identity: AuthIdentity = Depends(get_current_identity),
    service: DocumentService = Depends(get_document_service),
):
    """
    Get a single document including its extracted content.

    Raises:
        HTTPException 400: If doc_id is not an integer
        HTTPException 404: If document not found
    """
    document_id = parse_id(doc_id, "document")
    try:
        document = await service.get(identity.user_id, document_id)
    except Exception as e:
        logger.error(f"Failed to fetch document {document_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching document")

    if document is None:
        raise HTTPException(status_code=404, detail="Document not found")
    return document


@router.delete("/{doc_id}", response_model=DeleteResponse)
async def delete_document(
    doc_id: str,
    identity: AuthIdentity = Depends(get_current_identity),
    service: DocumentService = Depends(get_document_service),
):
    """
    Delete a document. Summaries generated from it are kept.

    Raises:
        HTTPException 404: If document not found
    """
    document_id = parse_id(doc_id, "document")
    try:
        deleted = await service.delete(identity.user_id, document_id)
    except Exception as e:
        logger.error(f"Failed to delete document {document_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error deleting document")

    if not deleted:
        raise HTTPException(status_code=404, detail="Document not found")
    return DeleteResponse(success=True)
