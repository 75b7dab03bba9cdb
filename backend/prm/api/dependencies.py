from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyCookie
from sqlalchemy.orm import Session
from prm.core.config import settings
from prm.core.database import get_db
from prm.core.security import tokens_match
from prm.models.session import UserSession
from prm.repositories.user_repository import UserRepository
from prm.services.auth_service import AuthService
from prm.services.session_store import session_store

# Reads the opaque session token from the session cookie
# auto_error=False so we can answer with our own 401 message
session_cookie = APIKeyCookie(name=settings.SESSION_COOKIE_NAME, auto_error=False)


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    """Credential service bound to the request's database session"""
    return AuthService(UserRepository(db))


async def get_current_session(
    token: str | None = Depends(session_cookie),
    db: Session = Depends(get_db)
) -> UserSession:
    """
    Resolve the logged-in session from the session cookie.

    Raises 401 when there is no cookie, the token is unknown, or the
    session has expired.
    """
    session = session_store.get(db, token)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return session


async def verify_csrf(request: Request) -> None:
    """
    Anti-forgery check for state-changing requests.

    The token issued by GET /auth/csrf lives in a cookie; the client must
    echo it in the CSRF header. A cross-site form post can send the cookie
    but cannot read it to fill in the header.
    """
    if not settings.CSRF_ENABLED:
        return
    cookie_token = request.cookies.get(settings.CSRF_COOKIE_NAME)
    header_token = request.headers.get(settings.CSRF_HEADER_NAME)
    if not tokens_match(cookie_token, header_token):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="CSRF token missing or invalid",
        )
