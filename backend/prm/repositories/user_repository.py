import logging
from typing import List, Optional
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from prm.core.exceptions import DuplicateEmailError, StoreError
from prm.models.user import User

logger = logging.getLogger(__name__)


class UserRepository:
    """
    Persistence for user records.

    Every method either returns a value or raises StoreError; SQLAlchemy
    exceptions never leave this class. Writes are rolled back on failure
    so the session stays usable.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_user_by_email(self, email: str) -> Optional[User]:
        try:
            return self.db.query(User).filter(User.email == email).first()
        except SQLAlchemyError as e:
            raise self._store_error("get_user_by_email", e)

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        try:
            return self.db.query(User).filter(User.id == user_id).first()
        except SQLAlchemyError as e:
            raise self._store_error("get_user_by_id", e)

    def get_all_users(self) -> List[User]:
        try:
            return self.db.query(User).order_by(User.id).all()
        except SQLAlchemyError as e:
            raise self._store_error("get_all_users", e)

    def create_user(self, user: User) -> User:
        """Insert a user and return it with its assigned id"""
        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
            return user
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateEmailError(str(e.orig)) from e
        except SQLAlchemyError as e:
            raise self._store_error("create_user", e)

    def update_user(self, user: User) -> User:
        """Persist changes made to an already loaded user"""
        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
            return user
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateEmailError(str(e.orig)) from e
        except SQLAlchemyError as e:
            raise self._store_error("update_user", e)

    def delete_user(self, user_id: int) -> bool:
        """Hard-delete a user. Returns False if no such user exists."""
        try:
            user = self.db.query(User).filter(User.id == user_id).first()
            if user is None:
                return False
            self.db.delete(user)
            self.db.commit()
            return True
        except SQLAlchemyError as e:
            raise self._store_error("delete_user", e)

    def _store_error(self, operation: str, error: SQLAlchemyError) -> StoreError:
        self.db.rollback()
        logger.error(f"User store {operation} failed: {error}")
        detail = getattr(error, "orig", None) or error
        return StoreError(str(detail))
