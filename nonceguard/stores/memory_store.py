import uuid
from collections.abc import Sequence
from datetime import datetime

from readerwriterlock import rwlock

from nonceguard.schemas.nonce import Nonce


class MemoryNonceStore:
    """
    In-process nonce store keyed by token.

    A single reader/writer lock guards the dict: lookups share it, mutations
    take it exclusively. Nothing survives a restart.
    """

    def __init__(self) -> None:
        self._lock = rwlock.RWLockFair()
        self._nonces: dict[str, Nonce] = {}

    def save(self, nonce: Nonce) -> Nonce:
        with self._lock.gen_wlock():
            if nonce.id is None:
                stored = nonce.model_copy(update={"id": uuid.uuid4()})
            else:
                current = self._nonces.get(nonce.token)
                if current is None or current.id != nonce.id:
                    # Row was swept (or never existed); nothing to update
                    return nonce.model_copy()
                stored = current.model_copy(
                    update={"is_used": nonce.is_used, "is_valid": nonce.is_valid}
                )
            self._nonces[stored.token] = stored
            return stored.model_copy()

    def get_by_token(self, token: str) -> Nonce | None:
        with self._lock.gen_rlock():
            nonce = self._nonces.get(token)
            return nonce.model_copy() if nonce is not None else None

    def list_by_action_and_user(self, action: str, user_id: uuid.UUID) -> Sequence[Nonce]:
        with self._lock.gen_rlock():
            return [
                n.model_copy()
                for n in self._nonces.values()
                if n.action == action and n.user_id == user_id
            ]

    def mark_used(self, token: str) -> Nonce | None:
        with self._lock.gen_wlock():
            current = self._nonces.get(token)
            if current is None or current.is_used:
                return None
            stored = current.model_copy(update={"is_used": True})
            self._nonces[token] = stored
            return stored.model_copy()

    def delete_expired(self, now: datetime) -> int:
        with self._lock.gen_wlock():
            expired = [token for token, n in self._nonces.items() if n.expires_at < now]
            for token in expired:
                del self._nonces[token]
            return len(expired)

    def clear(self) -> None:
        """Drop every nonce."""
        with self._lock.gen_wlock():
            self._nonces.clear()

    def __len__(self) -> int:
        with self._lock.gen_rlock():
            return len(self._nonces)
