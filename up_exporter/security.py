"""HMAC authentication of inbound Up webhook deliveries."""
import hashlib
import hmac
from typing import Optional

UP_AUTHENTICITY_HEADER = "X-Up-Authenticity-Signature"


def compute_signature(secret_key: bytes, body: bytes) -> str:
    """Hex-encoded HMAC-SHA256 of `body` under `secret_key`."""
    return hmac.new(secret_key, body, hashlib.sha256).hexdigest()


class WebhookAuthenticator:
    """Verify the authenticity signature Up attaches to each webhook delivery."""

    def __init__(self, secret_key: bytes):
        self._secret_key = secret_key

    def authenticate(self, body: bytes, signature: Optional[str]) -> bool:
        """
        Check `signature` (hex, from the authenticity header) against the raw body.

        Must be given the exact bytes received, before any JSON decoding.
        A missing, empty or non-hex signature never authenticates.
        """
        if not signature:
            return False
        try:
            received = bytes.fromhex(signature.strip())
        except ValueError:
            return False
        if not received:
            return False

        expected = hmac.new(self._secret_key, body, hashlib.sha256).digest()
        return hmac.compare_digest(expected, received)
