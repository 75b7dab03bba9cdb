import base64
import hashlib
import secrets
from typing import Optional, Tuple
from passlib.context import CryptContext
from passlib.utils import handlers as uh
from passlib.utils.binary import BASE64_CHARS


class legacy_sha256(uh.StaticHandler):
    """Unsalted SHA-256 digest encoded as standard base64.

    This is the format written by the previous version of the application.
    It is only ever verified, never produced for new passwords: the context
    below marks it deprecated so successful logins re-hash with the default
    scheme.
    """

    name = "legacy_sha256"
    checksum_chars = BASE64_CHARS + "="
    checksum_size = 44

    def _calc_checksum(self, secret):
        if isinstance(secret, str):
            secret = secret.encode("utf-8")
        return base64.b64encode(hashlib.sha256(secret).digest()).decode("ascii")


# pbkdf2_sha256 generates a per-password salt and stores scheme, rounds and
# salt inside the hash string, so stored hashes describe their own format.
# Hashes in any deprecated scheme are reported by verify_and_update() with a
# replacement hash.
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256", legacy_sha256],
    deprecated=["legacy_sha256"],
)


def get_password_hash(password: str) -> str:
    """Hash a password with the current default scheme"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a stored hash using constant-time comparison"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Unrecognised or malformed hash - treat as a mismatch
        return False


def verify_and_update_password(plain_password: str, hashed_password: str) -> Tuple[bool, Optional[str]]:
    """
    Verify a password and report a replacement hash when the stored one
    uses a deprecated scheme.

    Returns (valid, new_hash); new_hash is None unless the caller should
    persist an upgraded hash.
    """
    try:
        return pwd_context.verify_and_update(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False, None


def generate_token() -> str:
    """Random URL-safe token used for session ids and CSRF tokens"""
    return secrets.token_urlsafe(32)


def tokens_match(expected: Optional[str], provided: Optional[str]) -> bool:
    """Constant-time comparison of two tokens; missing values never match"""
    if not expected or not provided:
        return False
    return secrets.compare_digest(expected.encode("utf-8"), provided.encode("utf-8"))
