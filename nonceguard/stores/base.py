import uuid
from collections.abc import Sequence
from datetime import datetime
from typing import Protocol, runtime_checkable

from nonceguard.schemas.nonce import Nonce


@runtime_checkable
class NonceStore(Protocol):
    """
    Storage capability shared by the persistent and in-memory backends.

    Implementations return copies, report absence as None rather than raising,
    and wrap infrastructure faults in StoreError.
    """

    def save(self, nonce: Nonce) -> Nonce:
        """
        Insert when nonce.id is None (assigning an id), else update is_used/is_valid.

        Returns the stored state.
        """
        ...

    def get_by_token(self, token: str) -> Nonce | None: ...

    def list_by_action_and_user(self, action: str, user_id: uuid.UUID) -> Sequence[Nonce]: ...

    def mark_used(self, token: str) -> Nonce | None:
        """
        Atomically flip is_used to True if it is currently False.

        Returns the updated nonce when this call made the transition,
        None when the token is unknown or was already used.
        """
        ...

    def delete_expired(self, now: datetime) -> int:
        """Delete every nonce with expires_at strictly before now. Returns the count."""
        ...
