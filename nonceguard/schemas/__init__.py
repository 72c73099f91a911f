from nonceguard.schemas.nonce import Nonce

__all__ = ["Nonce"]
