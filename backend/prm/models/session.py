from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from prm.core.database import Base


class UserSession(Base):
    """
    Server-side login session.

    The token is the only value handed to the browser (in a cookie); the
    user values live here. expires_at slides forward on every lookup and
    is indexed for the periodic cleanup query.
    """
    __tablename__ = "user_sessions"

    id = Column(Integer, primary_key=True, index=True)
    token = Column(String(64), unique=True, index=True, nullable=False)
    user_id = Column(Integer, index=True, nullable=False)
    user_email = Column(String(255), nullable=False)
    user_display_name = Column(String(201), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    expires_at = Column(DateTime(timezone=True), index=True, nullable=False)

    def __repr__(self):
        return f"<UserSession(id={self.id}, user_id={self.user_id})>"
