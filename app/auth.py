"""Authentication dependencies.

Access tokens are issued by the external auth service as HS256-signed JWTs
whose "sub" claim is the user's UUID. This module only verifies them.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

import jwt
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.services.access import AccessScope, build_access_scope, get_user_profile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedUser:
    id: UUID
    email: Optional[str] = None


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_access_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token.

    Raises:
        HTTPException: 401 if the token is malformed, expired, has the wrong
            audience, or lacks a UUID subject.
    """
    settings = get_settings()
    if not settings.AUTH_JWT_SECRET:
        logger.error("AUTH_JWT_SECRET is not configured; rejecting all tokens")
        raise _unauthorized()

    try:
        payload = jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE,
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        logger.warning("Rejected expired access token")
        raise _unauthorized()
    except jwt.InvalidTokenError as e:
        logger.warning(f"Rejected invalid access token: {e}")
        raise _unauthorized()

    try:
        UUID(str(payload["sub"]))
    except ValueError:
        logger.warning("Rejected access token with non-UUID subject")
        raise _unauthorized()
    return payload


def get_current_user(authorization: Optional[str] = Header(None)) -> AuthenticatedUser:
    """Dependency resolving the caller from the Authorization header."""
    if not authorization:
        raise _unauthorized()

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise _unauthorized()

    payload = verify_access_token(token.strip())
    return AuthenticatedUser(id=UUID(str(payload["sub"])), email=payload.get("email"))


def get_access_scope(
    user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AccessScope:
    """Dependency resolving the caller's tenant and row-scoping privileges."""
    profile = get_user_profile(db, user.id)
    if profile is None:
        logger.warning(f"No user profile for authenticated user {user.id}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User profile not found")
    if profile.organization_id is None:
        logger.warning(f"User {user.id} is not assigned to an organization")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is not assigned to an organization",
        )
    return build_access_scope(profile)
