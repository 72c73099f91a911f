import base64
import hashlib
import secrets
import uuid
from datetime import UTC, datetime, timedelta

from nonceguard.errors import (
    InvalidTokenError,
    NoTokenError,
    TokenExpiredError,
    TokenGenerationError,
    TokenUsedError,
)
from nonceguard.schemas.nonce import Nonce

TOKEN_LENGTH = 88  # urlsafe base64 of a SHA-512 digest
SALT_BYTES = 16


def utcnow() -> datetime:
    """Current UTC time as a naive datetime."""
    return datetime.now(UTC).replace(tzinfo=None)


def check_token(token: str | None) -> None:
    """
    Shape-check a presented token before it reaches storage.

    Raises NoTokenError for blank input, InvalidTokenError for wrong length.
    """
    if token is None or not token.strip():
        raise NoTokenError()
    if len(token) != TOKEN_LENGTH:
        raise InvalidTokenError()


def generate_salt() -> str:
    """Draw SALT_BYTES from the OS random source, base64 encoded (24 chars)."""
    try:
        raw_salt = secrets.token_bytes(SALT_BYTES)
    except (OSError, NotImplementedError) as e:
        raise TokenGenerationError() from e
    return base64.b64encode(raw_salt).decode()


def derive_token(action: str, user_id: uuid.UUID, created_at: int, salt: str) -> str:
    raw_token = f"{action}::{user_id}::{created_at}::{salt}"
    digest = hashlib.sha512(raw_token.encode()).digest()
    return base64.urlsafe_b64encode(digest).decode()


def new_nonce(action: str, user_id: uuid.UUID, expires_in: timedelta) -> Nonce:
    """
    Mint an unsaved nonce for (action, user_id).

    expires_at is truncated to whole seconds since durable stores
    may drop sub-second precision.
    """
    salt = generate_salt()

    now = datetime.now(UTC)
    created_at = int(now.timestamp())
    expires_at = (now + expires_in).replace(microsecond=0, tzinfo=None)

    return Nonce(
        user_id=user_id,
        token=derive_token(action, user_id, created_at, salt),
        action=action,
        salt=salt,
        is_used=False,
        is_valid=True,
        created_at=created_at,
        expires_at=expires_at,
    )


def check_nonce(nonce: Nonce, action: str, user_id: uuid.UUID) -> None:
    """
    Verify a stored nonce against the caller's expectations.

    Order matters: binding/validity first, then use, then expiry. The three
    binding failures are deliberately indistinguishable.
    """
    if not nonce.is_valid or nonce.action != action or nonce.user_id != user_id:
        raise InvalidTokenError()

    if nonce.is_used:
        raise TokenUsedError()

    if not nonce.expires_at > utcnow():
        raise TokenExpiredError()
