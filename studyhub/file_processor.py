"""
Upload persistence and text extraction for StudyHub.

Uploaded bytes are written to the upload directory under a name derived
from their SHA-256 digest, then text is extracted:
- text/plain: decoded as UTF-8
- application/pdf: page text extracted with pypdf
"""

import asyncio
import hashlib
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from .constants import ALLOWED_MIME_TYPES
from .exceptions import FileTooLargeError, TextExtractionError, UnsupportedFileTypeError
from .sanitization import safe_extension

logger = logging.getLogger(__name__)


@dataclass
class FileMetadata:
    original_name: str
    mimetype: str
    size: int
    path: Path
    filename: str
    content: str


class FileProcessor:
    """Stores uploads on disk and extracts their text."""

    def __init__(
        self,
        upload_dir: Union[str, Path],
        max_size: int,
        allowed_types: List[str] = None
    ):
        self.upload_dir = Path(upload_dir)
        self.max_size = max_size
        self.allowed_types = allowed_types or list(ALLOWED_MIME_TYPES)

    def ensure_upload_dir(self) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def validate(self, size: int, mimetype: str) -> None:
        """
        Check an upload against the type allow-list and the size limit.

        Raises:
            UnsupportedFileTypeError: If mimetype is not allowed
            FileTooLargeError: If size exceeds the limit
        """
        if mimetype not in self.allowed_types:
            raise UnsupportedFileTypeError(mimetype, self.allowed_types)
        if size > self.max_size:
            raise FileTooLargeError(size, self.max_size)

    async def save_file(self, data: bytes, original_name: str, mimetype: str) -> FileMetadata:
        """
        Validate, persist and extract text from an upload.

        Args:
            data: Raw file bytes
            original_name: Sanitized client filename
            mimetype: Declared content type

        Returns:
            FileMetadata including the extracted text
        """
        self.validate(len(data), mimetype)

        digest = hashlib.sha256(data).hexdigest()
        filename = f"{digest}{safe_extension(original_name)}"
        path = self.upload_dir / filename

        self.ensure_upload_dir()
        await asyncio.to_thread(path.write_bytes, data)
        logger.info(f"Stored upload {original_name!r} as {filename} ({len(data)} bytes)")

        content = await asyncio.to_thread(self.extract_content, data, mimetype, original_name)

        return FileMetadata(
            original_name=original_name,
            mimetype=mimetype,
            size=len(data),
            path=path,
            filename=filename,
            content=content,
        )

    def extract_content(self, data: bytes, mimetype: str, filename: str) -> str:
        """
        Extract text content from supported file types.

        Raises:
            TextExtractionError: If the bytes cannot be read as the declared type
            UnsupportedFileTypeError: For any other mimetype
        """
        if mimetype == "text/plain":
            try:
                return data.decode("utf-8")
            except UnicodeDecodeError as e:
                raise TextExtractionError(filename, mimetype) from e

        if mimetype == "application/pdf":
            return self.extract_pdf_text(data, filename)

        raise UnsupportedFileTypeError(mimetype, self.allowed_types)

    @staticmethod
    def extract_pdf_text(data: bytes, filename: str) -> str:
        """Extract text from every page of a PDF, pages separated by blank lines."""
        try:
            reader = PdfReader(io.BytesIO(data))
            text_parts = []
            for page in reader.pages:
                text = page.extract_text() or ""
                if text.strip():
                    text_parts.append(text.strip())
        except (PdfReadError, ValueError, KeyError) as e:
            logger.warning(f"PDF extraction failed for {filename}: {e}")
            raise TextExtractionError(filename, "application/pdf") from e

        logger.info(f"Extracted text from {len(reader.pages)} PDF pages of {filename}")
        return "\n\n".join(text_parts)
