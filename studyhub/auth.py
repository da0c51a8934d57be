"""
Authentication Module for StudyHub.

Provides:
- JWT token creation and verification (python-jose)
- Claim extraction from verified tokens
- Mapping of token subjects onto stored users (created on first sight)
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from .config import settings
from .constants import JWT_ALGORITHM, SYNTHETIC_USERNAME_PREFIX_LENGTH
from .exceptions import InvalidTokenError
from .models import User, UserCreate
from .repository_interface import StudyRepository

logger = logging.getLogger(__name__)


@dataclass
class AuthClaims:
    """Identity claims carried by a verified token."""
    subject: str
    email: Optional[str] = None
    name: Optional[str] = None


@dataclass
class AuthIdentity:
    """Request-scoped identity attached for downstream handlers."""
    uid: str
    email: Optional[str]
    display_name: Optional[str]
    user_id: int


# =============================================================================
# JWT Token Management
# =============================================================================

def create_access_token(
    data: dict,
    secret_key: Optional[str] = None,
    expires_minutes: Optional[int] = None
) -> str:
    """
    Create a signed JWT access token.

    Args:
        data: Claims, e.g. {"sub": "uid-123", "email": "ada@example.com"}
        secret_key: Signing key (defaults to configured secret)
        expires_minutes: Lifetime (defaults to configured expiry)

    Returns:
        JWT token string
    """
    to_encode = data.copy()
    minutes = expires_minutes if expires_minutes is not None else settings.token_expire_minutes
    to_encode["exp"] = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    return jwt.encode(to_encode, secret_key or settings.secret_key, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str, secret_key: Optional[str] = None) -> AuthClaims:
    """
    Verify a JWT and extract its identity claims.

    The subject is read from ``sub``, falling back to ``user_id``.

    Raises:
        InvalidTokenError: If the signature, expiry or subject is invalid
    """
    try:
        payload = jwt.decode(token, secret_key or settings.secret_key, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        raise InvalidTokenError(str(e)) from e

    subject = payload.get("sub") or payload.get("user_id")
    if not subject or not isinstance(subject, str):
        raise InvalidTokenError("missing subject")

    return AuthClaims(
        subject=subject,
        email=payload.get("email"),
        name=payload.get("name"),
    )


# =============================================================================
# User Resolution
# =============================================================================

def _local_part(email: Optional[str]) -> Optional[str]:
    if email and "@" in email:
        return email.split("@")[0] or None
    return email or None


def new_user_from_claims(claims: AuthClaims) -> UserCreate:
    """Build the user record for a subject seen for the first time."""
    local = _local_part(claims.email)
    return UserCreate(
        username=local or f"user-{claims.subject[:SYNTHETIC_USERNAME_PREFIX_LENGTH]}",
        email=claims.email or "",
        name=claims.name or local or "User",
        external_auth_id=claims.subject,
    )


async def resolve_user(repo: StudyRepository, claims: AuthClaims) -> User:
    """
    Look up the user for a token subject, creating it if absent.

    Args:
        repo: Entity store
        claims: Verified claims

    Returns:
        Stored user
    """
    user = await repo.get_user_by_external_id(claims.subject)
    if user is None:
        user = await repo.create_user(new_user_from_claims(claims))
        logger.info(f"Registered user {user.id} for subject {claims.subject}")
    return user


async def resolve_identity(
    repo: StudyRepository,
    token: str,
    secret_key: Optional[str] = None
) -> Optional[AuthIdentity]:
    """
    Resolve a bearer token to an identity.

    Args:
        repo: Entity store
        token: Raw bearer token
        secret_key: Verification key of the serving app (defaults to configured secret)

    Returns:
        AuthIdentity, or None when the token does not verify
    """
    try:
        claims = decode_access_token(token, secret_key)
    except InvalidTokenError as e:
        logger.warning(f"Rejected bearer token: {e}")
        return None

    user = await resolve_user(repo, claims)
    return AuthIdentity(
        uid=claims.subject,
        email=claims.email,
        display_name=claims.name,
        user_id=user.id,
    )
