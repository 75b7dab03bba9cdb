from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from prm.core.config import settings
from prm.core.database import get_db
from prm.core.security import generate_token
from prm.api.dependencies import get_auth_service, get_current_session, session_cookie, verify_csrf
from prm.models.session import UserSession
from prm.schemas import (
    AuthResponse,
    CsrfResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    SessionResponse,
    UserResponse,
)
from prm.services.auth_service import AuthService, ResultCode
from prm.services.session_store import session_store

router = APIRouter(prefix="/auth", tags=["auth"])

# Failed results map to HTTP status by result code
REGISTER_FAILURE_STATUS = {
    ResultCode.DUPLICATE_EMAIL: status.HTTP_400_BAD_REQUEST,
    ResultCode.STORE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}
LOGIN_FAILURE_STATUS = {
    ResultCode.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ResultCode.INACTIVE_ACCOUNT: status.HTTP_403_FORBIDDEN,
    ResultCode.STORE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@router.get("/csrf", response_model=CsrfResponse)
async def issue_csrf_token(response: Response):
    """Issue an anti-forgery token as a cookie and in the body"""
    token = generate_token()
    # Not HttpOnly: the client has to read it back into the CSRF header
    # SameSite=strict stops other sites from sending it at all
    response.set_cookie(
        settings.CSRF_COOKIE_NAME,
        token,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="strict",
    )
    return {"csrf_token": token}


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(verify_csrf)],
)
async def register(data: RegisterRequest, auth_service: AuthService = Depends(get_auth_service)):
    """Register a new user"""
    # Input shape (names, email syntax, password length, confirmation) was
    # already validated by RegisterRequest; only business rules remain
    result = auth_service.register(data)
    if not result.success:
        raise HTTPException(
            status_code=REGISTER_FAILURE_STATUS.get(result.code, status.HTTP_400_BAD_REQUEST),
            detail=result.message,
        )
    return {"message": result.message, "user": result.user}


@router.post("/login", response_model=AuthResponse, dependencies=[Depends(verify_csrf)])
async def login(
    data: LoginRequest,
    response: Response,
    token: str | None = Depends(session_cookie),
    auth_service: AuthService = Depends(get_auth_service),
    db: Session = Depends(get_db)
):
    """Check credentials and start a server-side session"""
    result = auth_service.login(data)
    if not result.success:
        # Unknown email and wrong password share one status and message so
        # the response cannot reveal which emails are registered
        raise HTTPException(
            status_code=LOGIN_FAILURE_STATUS.get(result.code, status.HTTP_401_UNAUTHORIZED),
            detail=result.message,
        )

    # A browser switching accounts must not keep the previous session alive
    session_store.clear(db, token)

    session = session_store.create(db, result.user)
    # HttpOnly keeps the token away from page scripts; the user values stay
    # server-side in the session row
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        session.token,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return {"message": result.message, "user": result.user}


@router.post("/logout", response_model=MessageResponse, dependencies=[Depends(verify_csrf)])
async def logout(
    response: Response,
    token: str | None = Depends(session_cookie),
    db: Session = Depends(get_db)
):
    """End the current session; succeeds even when no session exists"""
    # Delete the server-side row first so the token is dead even if the
    # browser ignores the cookie deletion
    session_store.clear(db, token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"message": "Logged out successfully"}


@router.get("/session", response_model=SessionResponse)
async def get_session(current_session: UserSession = Depends(get_current_session)):
    """Values stored in the current session"""
    return current_session


@router.get("/profile", response_model=UserResponse)
async def get_profile(
    current_session: UserSession = Depends(get_current_session),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Get the logged-in user's record"""
    user = auth_service.get_user_by_id(current_session.user_id)
    if user is None:
        # Session outlived the user record
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
