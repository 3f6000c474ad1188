"""Encryption helpers for storing shop access tokens at rest."""

import base64
import hashlib
from functools import lru_cache

from cryptography.fernet import Fernet

from privacy_popup.core.config import settings


@lru_cache(maxsize=1)
def _get_fernet() -> Fernet:
    """Get Fernet instance keyed from the session secret.

    The secret is stretched to 32 bytes with SHA-256 and base64-encoded into a
    valid Fernet key. Rotating SESSION_SECRET makes stored access tokens
    undecryptable, so every shop has to reinstall afterwards.
    """
    key_bytes = hashlib.sha256(f"access-token:{settings.session_secret}".encode()).digest()
    return Fernet(base64.urlsafe_b64encode(key_bytes))


def encrypt_token(token: str) -> str:
    """Encrypt an access token."""
    return _get_fernet().encrypt(token.encode()).decode()


def decrypt_token(encrypted: str) -> str:
    """Decrypt an encrypted access token."""
    return _get_fernet().decrypt(encrypted.encode()).decode()
