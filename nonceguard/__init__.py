"""Single-use, time-bound nonces bound to an (action, user) pair."""

from nonceguard.errors import (
    InvalidTokenError,
    NoTokenError,
    NonceError,
    StoreError,
    TokenExpiredError,
    TokenGenerationError,
    TokenNotFoundError,
    TokenUsedError,
)
from nonceguard.schemas.nonce import Nonce
from nonceguard.services.nonce_service import NonceService, new_in_memory_service, new_service

__version__ = "0.1.0"

__all__ = [
    "InvalidTokenError",
    "NoTokenError",
    "Nonce",
    "NonceError",
    "NonceService",
    "StoreError",
    "TokenExpiredError",
    "TokenGenerationError",
    "TokenNotFoundError",
    "TokenUsedError",
    "new_in_memory_service",
    "new_service",
]
