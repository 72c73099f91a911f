from nonceguard.models.nonce import NonceRecord

__all__ = ["NonceRecord"]
