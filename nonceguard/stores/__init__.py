from nonceguard.stores.base import NonceStore
from nonceguard.stores.memory_store import MemoryNonceStore
from nonceguard.stores.sql_store import SQLNonceStore

__all__ = ["MemoryNonceStore", "NonceStore", "SQLNonceStore"]
