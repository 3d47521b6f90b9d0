"""Explicit session context for the acting user.

The hosted auth platform issues HS256-signed access tokens. Routes receive a
SessionContext through dependency injection and pass it on to every data
access call that needs the user's identity.
"""

import logging
from dataclasses import dataclass
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, Request, status

from imjang.config import settings

logger = logging.getLogger(__name__)

TOKEN_AUDIENCE = "authenticated"


class NotAuthenticatedError(Exception):
    pass


@dataclass(frozen=True)
class SessionContext:
    user_id: str | None = None
    email: str = ""

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def require_user_id(self) -> str:
        if self.user_id is None:
            raise NotAuthenticatedError("Not authenticated")
        return self.user_id


ANONYMOUS = SessionContext()
_DEV_SESSION = SessionContext(user_id="dev-user", email="dev@imjang.local")


def _extract_token(request: Request) -> str | None:
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth[len("Bearer "):].strip() or None
    return None


def decode_session_token(token: str, secret: str | None = None) -> SessionContext:
    """Decode an access token into a SessionContext. Raises jwt.InvalidTokenError."""
    payload = jwt.decode(
        token,
        secret if secret is not None else settings.auth_jwt_secret,
        algorithms=["HS256"],
        audience=TOKEN_AUDIENCE,
    )
    return SessionContext(user_id=payload["sub"], email=payload.get("email", ""))


async def get_session_context(request: Request) -> SessionContext:
    """FastAPI dependency: anonymous when no token, 401 when the token is bad."""
    if settings.auth_disabled:
        return _DEV_SESSION

    token = _extract_token(request)
    if token is None:
        return ANONYMOUS

    try:
        return decode_session_token(token)
    except jwt.ExpiredSignatureError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    except (jwt.InvalidTokenError, KeyError) as exc:
        logger.warning("Rejected session token: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


Session = Annotated[SessionContext, Depends(get_session_context)]


async def require_session(ctx: Session) -> SessionContext:
    if not ctx.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return ctx


AuthenticatedSession = Annotated[SessionContext, Depends(require_session)]
