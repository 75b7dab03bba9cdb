from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.sql import func
from prm.core.database import Base


class User(Base):
    """
    User model representing application users.

    Passwords are stored as hashes (never plaintext). The hash string
    carries its own scheme prefix, so older formats can be recognised
    and upgraded on login.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    # Unique index closes the gap between the registration lookup and the insert
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    # Set once by the service at registration, never updated
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"
