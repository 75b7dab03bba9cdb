import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from sqlalchemy.orm import Session
from prm.core.config import settings
from prm.core.security import generate_token
from prm.models.session import UserSession
from prm.models.user import User

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; every stored value is UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SessionStore:
    """
    Server-side session records keyed by an opaque token.

    Holds user_id, user_email and user_display_name for a logged-in
    browser. Sessions expire after SESSION_IDLE_MINUTES without a lookup.
    """

    def __init__(self, idle_minutes: Optional[int] = None):
        self._idle_minutes = idle_minutes

    @property
    def idle_timeout(self) -> timedelta:
        minutes = self._idle_minutes if self._idle_minutes is not None else settings.SESSION_IDLE_MINUTES
        return timedelta(minutes=minutes)

    def create(self, db: Session, user: User) -> UserSession:
        """Start a session for a user who just logged in"""
        now = _utcnow()
        session = UserSession(
            token=generate_token(),
            user_id=user.id,
            user_email=user.email,
            user_display_name=user.display_name,
            created_at=now,
            expires_at=now + self.idle_timeout,
        )
        db.add(session)
        db.commit()
        db.refresh(session)
        logger.info(f"Session started for user {user.id}")
        return session

    def get(self, db: Session, token: Optional[str]) -> Optional[UserSession]:
        """
        Look up a live session and extend its expiry.

        Expired sessions are deleted on sight and reported as absent.
        """
        if not token:
            return None

        session = db.query(UserSession).filter(UserSession.token == token).first()
        if session is None:
            return None

        now = _utcnow()
        if _as_utc(session.expires_at) <= now:
            user_id = session.user_id
            db.delete(session)
            db.commit()
            logger.info(f"Session expired for user {user_id}")
            return None

        session.expires_at = now + self.idle_timeout
        db.commit()
        db.refresh(session)
        return session

    def clear(self, db: Session, token: Optional[str]) -> bool:
        if not token:
            return False
        deleted = db.query(UserSession).filter(UserSession.token == token).delete(synchronize_session=False)
        db.commit()
        return deleted > 0

    def clear_for_user(self, db: Session, user_id: int) -> int:
        """End every session belonging to a user"""
        deleted = db.query(UserSession).filter(UserSession.user_id == user_id).delete(synchronize_session=False)
        db.commit()
        if deleted:
            logger.info(f"Cleared {deleted} session(s) for user {user_id}")
        return deleted

    def purge_expired(self, db: Session) -> int:
        deleted = db.query(UserSession).filter(UserSession.expires_at <= _utcnow()).delete(synchronize_session=False)
        db.commit()
        return deleted


session_store = SessionStore()
