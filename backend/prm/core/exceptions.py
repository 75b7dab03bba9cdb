class StoreError(Exception):
    """Raised by the user store when the database operation failed."""


class DuplicateEmailError(StoreError):
    """Raised when a write violates the unique email constraint."""
