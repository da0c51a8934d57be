"""
Input Sanitization Module

Cleans client-supplied filenames before they are stored or displayed:
- strips directory components and null/control characters
- bounds the length
- derives a document title and a safe on-disk extension
"""

import os
import re

from fastapi import HTTPException

from .constants import MAX_FILENAME_LENGTH

CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
EXTENSION_PATTERN = re.compile(r"\.[^/.]+$")
SAFE_EXTENSION = re.compile(r"^\.[a-z0-9]{1,10}$")


def sanitize_filename(filename: str) -> str:
    """
    Reduce an uploaded filename to a display-safe basename.

    Args:
        filename: Filename as sent by the client

    Returns:
        Basename without control characters, at most 255 characters

    Raises:
        HTTPException: If nothing usable is left

    Examples:
        >>> sanitize_filename("../../notes/chapter 1.txt")
        "chapter 1.txt"
    """
    if not filename or not filename.strip():
        raise HTTPException(status_code=400, detail="Filename cannot be empty")

    # Browsers on Windows may send full paths
    filename = filename.replace("\\", "/")
    filename = os.path.basename(filename)
    filename = CONTROL_CHARS.sub("", filename).strip()

    if not filename or filename in (".", ".."):
        raise HTTPException(status_code=400, detail="Filename invalid after sanitization")

    if len(filename) > MAX_FILENAME_LENGTH:
        name, ext = os.path.splitext(filename)
        filename = name[:MAX_FILENAME_LENGTH - len(ext)] + ext

    return filename


def title_from_filename(filename: str) -> str:
    """Strip the final extension: ``"notes.v2.txt"`` becomes ``"notes.v2"``."""
    title = EXTENSION_PATTERN.sub("", filename)
    return title or filename


def safe_extension(filename: str) -> str:
    """Lower-cased extension suitable for a stored filename, or ``""``."""
    ext = os.path.splitext(filename)[1].lower()
    return ext if SAFE_EXTENSION.match(ext) else ""
