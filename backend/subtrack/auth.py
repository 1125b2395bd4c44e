"""
SubTrack Backend — Access Token Verification
=============================================

What:  FastAPI dependency that turns the request's bearer token into the
       current user's identity.
How:   Verifies the HS256 JWT issued by the hosted auth provider (signature,
       expiry, audience) and reads the user id from `sub`.
Who:   Every /api route depends on `get_current_user`; the resulting id
       scopes all subscription queries to the caller's own rows.

Sign-in, sign-out, refresh and session persistence all happen at the auth
provider. This module never issues or revokes tokens.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from subtrack.config import settings
from subtrack.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Identity carried by a verified access token."""
    id: uuid.UUID
    email: Optional[str] = None


def decode_access_token(token: str) -> CurrentUser:
    """
    Verify an access token and extract the user it was issued to.

    Raises:
        AuthenticationError: no secret configured, bad signature, expired,
            wrong audience, or a `sub` claim that is not a UUID.
    """
    if not settings.auth_jwt_secret:
        logger.error("AUTH_JWT_SECRET is not configured; rejecting request")
        raise AuthenticationError(message="Authentication is not configured on the server")

    try:
        claims = jwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=[settings.auth_jwt_algorithm],
            audience=settings.auth_jwt_audience,
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError(message="Your session has expired. Please sign in again.")
    except jwt.PyJWTError as e:
        logger.info("Rejected access token: %s", type(e).__name__)
        raise AuthenticationError(context={"reason": type(e).__name__})

    try:
        user_id = uuid.UUID(str(claims["sub"]))
    except ValueError:
        raise AuthenticationError(context={"reason": "InvalidSubject"})

    return CurrentUser(id=user_id, email=claims.get("email"))


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """Dependency: the authenticated user, or AuthenticationError (401)."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()
    return decode_access_token(credentials.credentials)
