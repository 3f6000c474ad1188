"""HMAC-SHA256 signature checks for Shopify OAuth callbacks and webhooks."""

import base64
import hashlib
import hmac
import logging
from collections.abc import Mapping

logger = logging.getLogger(__name__)

SIGNATURE_PARAM = "hmac"


def sign(payload: bytes | str, secret: str) -> str:
    """Compute the base64-encoded HMAC-SHA256 of ``payload``."""
    data = payload.encode("utf-8") if isinstance(payload, str) else payload
    digest = hmac.new(secret.encode("utf-8"), data, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify(payload: bytes | str | None, signature: str | None, secret: str | None) -> bool:
    """Check a base64 HMAC-SHA256 signature in constant time.

    Args:
        payload: The raw request body or canonical query string.
        signature: The base64 signature supplied by the caller.
        secret: The Shopify API secret.

    Returns:
        True if the signature is valid. Malformed input returns False instead
        of raising.
    """
    if payload is None or not signature or not secret:
        return False

    try:
        expected = sign(payload, secret).encode("ascii")
        provided = signature.encode("ascii")
    except (UnicodeError, TypeError):
        logger.debug("Signature input could not be encoded")
        return False

    return hmac.compare_digest(expected, provided)


def canonical_query(params: Mapping[str, str]) -> str:
    """Build the string Shopify signs: ``key=value`` pairs sorted by key, minus ``hmac``."""
    pairs = sorted((k, v) for k, v in params.items() if k != SIGNATURE_PARAM)
    return "&".join(f"{k}={v}" for k, v in pairs)


def verify_oauth_params(params: Mapping[str, str], secret: str | None) -> bool:
    """Verify the ``hmac`` parameter of an OAuth callback query.

    Callbacks without an ``hmac`` parameter are rejected before any digest is
    computed.
    """
    signature = params.get(SIGNATURE_PARAM)
    if not signature:
        return False
    return verify(canonical_query(params), signature, secret)
