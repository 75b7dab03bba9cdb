"""
Credential service.

Business rules for registration, login and user administration. Every
outcome is returned as a result object; store failures are converted into
failed results here and never reach the caller as exceptions.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
from prm.core.config import settings
from prm.core.exceptions import DuplicateEmailError, StoreError
from prm.core.security import get_password_hash, verify_and_update_password
from prm.models.user import User
from prm.repositories.user_repository import UserRepository
from prm.schemas import LoginRequest, RegisterRequest, UserUpdate

logger = logging.getLogger(__name__)

EMAIL_ALREADY_REGISTERED = "Email already registered"
INVALID_CREDENTIALS = "Invalid email or password"
ACCOUNT_INACTIVE = "User account is inactive"
USER_NOT_FOUND = "User not found"


class ResultCode(str, Enum):
    OK = "ok"
    DUPLICATE_EMAIL = "duplicate_email"
    INVALID_CREDENTIALS = "invalid_credentials"
    INACTIVE_ACCOUNT = "inactive_account"
    NOT_FOUND = "not_found"
    STORE_ERROR = "store_error"


@dataclass(frozen=True)
class AuthResult:
    success: bool
    message: str
    user: Optional[User] = None
    code: ResultCode = ResultCode.OK


@dataclass(frozen=True)
class OperationResult:
    success: bool
    message: str
    code: ResultCode = ResultCode.OK


def _error_text(error: StoreError) -> str:
    # Raw driver messages can reveal schema details, so they are opt-in
    if settings.EXPOSE_ERROR_DETAILS:
        return str(error)
    return "database error"


class AuthService:
    def __init__(self, repository: UserRepository):
        self.repository = repository

    def register(self, data: RegisterRequest) -> AuthResult:
        """Create a new active user unless the email is already taken"""
        try:
            existing_user = self.repository.get_user_by_email(data.email)
            if existing_user:
                logger.warning(f"Registration failed: Email {data.email} already exists")
                return AuthResult(False, EMAIL_ALREADY_REGISTERED, code=ResultCode.DUPLICATE_EMAIL)

            user = User(
                first_name=data.first_name,
                last_name=data.last_name,
                email=data.email,
                hashed_password=get_password_hash(data.password),
                created_at=datetime.now(timezone.utc),
                is_active=True,
            )
            created_user = self.repository.create_user(user)
        except DuplicateEmailError:
            # Another request inserted the same email after our lookup
            logger.warning(f"Registration failed: Email {data.email} registered concurrently")
            return AuthResult(False, EMAIL_ALREADY_REGISTERED, code=ResultCode.DUPLICATE_EMAIL)
        except StoreError as e:
            logger.error(f"Registration error: {e}")
            return AuthResult(False, f"Registration failed: {_error_text(e)}", code=ResultCode.STORE_ERROR)

        logger.info(f"User registered successfully: {created_user.email}")
        return AuthResult(True, "Registration successful", created_user)

    def login(self, data: LoginRequest) -> AuthResult:
        """
        Check credentials and account state.

        Unknown email and wrong password produce the same message. The
        inactive-account message is only reachable with a correct password.
        """
        try:
            user = self.repository.get_user_by_email(data.email)
            if user is None:
                logger.warning(f"Login failed: User not found with email {data.email}")
                return AuthResult(False, INVALID_CREDENTIALS, code=ResultCode.INVALID_CREDENTIALS)

            valid, new_hash = verify_and_update_password(data.password, user.hashed_password)
            if not valid:
                logger.warning(f"Login failed: Invalid password for {data.email}")
                return AuthResult(False, INVALID_CREDENTIALS, code=ResultCode.INVALID_CREDENTIALS)

            if not user.is_active:
                logger.warning(f"Login failed: User account is inactive {data.email}")
                return AuthResult(False, ACCOUNT_INACTIVE, code=ResultCode.INACTIVE_ACCOUNT)
        except StoreError as e:
            logger.error(f"Login error: {e}")
            return AuthResult(False, f"Login failed: {_error_text(e)}", code=ResultCode.STORE_ERROR)

        if new_hash:
            self._upgrade_password_hash(user, new_hash)

        logger.info(f"User logged in successfully: {data.email}")
        return AuthResult(True, "Login successful", user)

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self.repository.get_user_by_id(user_id)

    def get_all_users(self) -> List[User]:
        return self.repository.get_all_users()

    def update_user(self, user_id: int, patch: UserUpdate) -> OperationResult:
        """Overwrite names, email and active flag of an existing user"""
        try:
            existing_user = self.repository.get_user_by_id(user_id)
            if existing_user is None:
                return OperationResult(False, USER_NOT_FOUND, ResultCode.NOT_FOUND)

            existing_user.first_name = patch.first_name
            existing_user.last_name = patch.last_name
            existing_user.email = patch.email
            existing_user.is_active = patch.is_active

            self.repository.update_user(existing_user)
        except DuplicateEmailError:
            logger.warning(f"Update failed: Email {patch.email} already exists")
            return OperationResult(False, EMAIL_ALREADY_REGISTERED, ResultCode.DUPLICATE_EMAIL)
        except StoreError as e:
            logger.error(f"Update user error: {e}")
            return OperationResult(False, f"Update failed: {_error_text(e)}", ResultCode.STORE_ERROR)

        logger.info(f"User updated: {existing_user.email}")
        return OperationResult(True, "User updated successfully")

    def delete_user(self, user_id: int) -> OperationResult:
        try:
            deleted = self.repository.delete_user(user_id)
        except StoreError as e:
            logger.error(f"Delete user error: {e}")
            return OperationResult(False, f"Delete failed: {_error_text(e)}", ResultCode.STORE_ERROR)

        if not deleted:
            return OperationResult(False, USER_NOT_FOUND, ResultCode.NOT_FOUND)

        logger.info(f"User deleted: {user_id}")
        return OperationResult(True, "User deleted successfully")

    def _upgrade_password_hash(self, user: User, new_hash: str) -> None:
        """Replace a deprecated hash; a failure here must not fail the login"""
        email = user.email
        user.hashed_password = new_hash
        try:
            self.repository.update_user(user)
            logger.info(f"Upgraded password hash for {email}")
        except StoreError as e:
            logger.warning(f"Could not upgrade password hash for {email}: {e}")
