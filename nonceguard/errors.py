"""
Error taxonomy.

Callers branch on the exception type; the messages are stable and safe to
surface verbatim. Validation errors are raised before any storage access.
"""


class NonceError(Exception):
    """Base class for all nonce errors."""

    message = "nonce error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class NoTokenError(NonceError):
    """Raised when a blank token is presented."""

    message = "no token supplied"


class InvalidTokenError(NonceError):
    """Raised for a malformed token, or one bound to another action, user, or superseded."""

    message = "invalid token"


class TokenUsedError(NonceError):
    """Raised when the nonce has already been consumed."""

    message = "duplicate submission"


class TokenExpiredError(NonceError):
    message = "token expired"


class TokenNotFoundError(NonceError):
    message = "token not found"


class TokenGenerationError(NonceError):
    """Raised when the secure random source cannot produce a salt."""

    message = "unable to generate token"


class StoreError(NonceError):
    """Opaque storage failure. The driver exception is chained as __cause__."""

    message = "nonce store unavailable"
