"""
Nonce lifecycle: issue, check, consume and look up single-use tokens.

A NonceService wraps exactly one store and owns the expiry sweeper for it.
The sweeper starts with the service and stops on shutdown().

Usage::

    service = new_in_memory_service()
    nonce = service.new("reset-password", user_id, timedelta(hours=1))
    ...
    service.check_then_consume(token, "reset-password", user_id)
    service.shutdown()
"""

import uuid
from collections.abc import Callable
from datetime import timedelta

import structlog
from sqlalchemy import Engine

from nonceguard.config import settings
from nonceguard.database import check_database_tables, create_db_engine, create_session_factory
from nonceguard.errors import StoreError, TokenNotFoundError, TokenUsedError
from nonceguard.scheduler import ExpirySweeper
from nonceguard.schemas.nonce import Nonce
from nonceguard.services.token_service import check_nonce, check_token, new_nonce
from nonceguard.stores.base import NonceStore
from nonceguard.stores.memory_store import MemoryNonceStore
from nonceguard.stores.sql_store import SQLNonceStore

logger = structlog.get_logger()

TOKEN_LOG_PREFIX = 8


def _token_prefix(token: str) -> str:
    """Never log a full token."""
    return token[:TOKEN_LOG_PREFIX]


class NonceService:
    """Issues and verifies nonces against a single store."""

    def __init__(
        self,
        store: NonceStore,
        sweep_interval_seconds: float | None = None,
        on_sweep_error: Callable[[StoreError], None] | None = None,
    ) -> None:
        if sweep_interval_seconds is None:
            sweep_interval_seconds = settings.sweep_interval_seconds

        self._store = store
        self._sweeper = ExpirySweeper(store, sweep_interval_seconds, on_error=on_sweep_error)
        self._sweeper.start()

    @property
    def store(self) -> NonceStore:
        return self._store

    @property
    def sweeper(self) -> ExpirySweeper:
        return self._sweeper

    def new(self, action: str, user_id: uuid.UUID, expires_in: timedelta | float) -> Nonce:
        """
        Issue a nonce for (action, user_id) and supersede older ones.

        The new nonce is saved before older ones are invalidated, so a
        concurrent reader may briefly see two valid nonces for the pair.
        """
        if not isinstance(expires_in, timedelta):
            expires_in = timedelta(seconds=expires_in)

        nonce = self._store.save(new_nonce(action, user_id, expires_in))

        invalidated = 0
        for other in self._store.list_by_action_and_user(action, user_id):
            if other.is_valid and other.id != nonce.id:
                self._store.save(other.model_copy(update={"is_valid": False}))
                invalidated += 1

        logger.info(
            "nonce_created",
            action=action,
            user_id=str(user_id),
            nonce_id=str(nonce.id),
            expires_at=nonce.expires_at.isoformat(),
        )
        if invalidated:
            logger.info(
                "nonces_invalidated",
                action=action,
                user_id=str(user_id),
                count=invalidated,
            )

        return nonce

    def _lookup(self, token: str) -> Nonce:
        check_token(token)
        nonce = self._store.get_by_token(token)
        if nonce is None:
            raise TokenNotFoundError()
        return nonce

    def check(self, token: str, action: str, user_id: uuid.UUID) -> None:
        """
        Verify a token without changing any state.

        Raises NoTokenError, InvalidTokenError, TokenNotFoundError,
        TokenUsedError or TokenExpiredError.
        """
        nonce = self._lookup(token)
        check_nonce(nonce, action, user_id)

    def consume(self, token: str) -> Nonce:
        """
        Mark a nonce as used and return it.

        Does not check action, user, validity or expiry. Exactly one caller
        can consume a given token; every other one gets TokenUsedError.
        """
        nonce = self._lookup(token)
        if nonce.is_used:
            raise TokenUsedError()

        consumed = self._store.mark_used(token)
        if consumed is None:
            # Lost to a concurrent consume, or swept since the lookup
            if self._store.get_by_token(token) is None:
                raise TokenNotFoundError()
            logger.info("nonce_consume_race_lost", token_prefix=_token_prefix(token))
            raise TokenUsedError()

        logger.info(
            "nonce_consumed",
            action=consumed.action,
            user_id=str(consumed.user_id),
            nonce_id=str(consumed.id),
        )
        return consumed

    def check_then_consume(self, token: str, action: str, user_id: uuid.UUID) -> Nonce:
        self.check(token, action, user_id)
        return self.consume(token)

    def get(self, action: str, user_id: uuid.UUID) -> Nonce:
        """
        Return the current nonce for (action, user_id).

        With several on record the newest by created_at wins, preferring the
        valid one among same-second ties. If that newest one is not valid the
        pair has no current nonce; older valid ones are not considered.
        """
        nonces = list(self._store.list_by_action_and_user(action, user_id))
        if not nonces:
            raise TokenNotFoundError()
        if len(nonces) == 1:
            return nonces[0]

        newest = max(nonces, key=lambda n: (n.created_at, n.is_valid, str(n.id)))
        if not newest.is_valid:
            raise TokenNotFoundError()
        return newest

    def shutdown(self) -> None:
        """Stop the expiry sweeper. Safe to call more than once."""
        self._sweeper.stop()

    def __enter__(self) -> "NonceService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()


def new_service(
    engine: Engine | None = None,
    *,
    sweep_interval_seconds: float | None = None,
    on_sweep_error: Callable[[StoreError], None] | None = None,
) -> NonceService:
    """
    Create a service backed by the database.

    Fails fast with RuntimeError when the nonce table has not been migrated.
    """
    engine = engine if engine is not None else create_db_engine()
    check_database_tables(engine)
    store = SQLNonceStore(create_session_factory(engine))
    return NonceService(
        store,
        sweep_interval_seconds=sweep_interval_seconds,
        on_sweep_error=on_sweep_error,
    )


def new_in_memory_service(
    *,
    sweep_interval_seconds: float | None = None,
) -> NonceService:
    """Create a service that keeps nonces in process memory."""
    return NonceService(MemoryNonceStore(), sweep_interval_seconds=sweep_interval_seconds)
