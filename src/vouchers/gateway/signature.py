"""Notification signature verification.

The gateway signs each notification as::

    SHA512(order_id + status_code + gross_amount + server_key)

hex-encoded in lowercase. Verification recomputes the digest locally and
compares it in constant time.
"""

import hashlib
import hmac


def compute_signature(order_id: str, status_code: str, gross_amount: str, server_key: str) -> str:
    """Return the lowercase hex SHA-512 signature for a notification."""
    payload = f"{order_id}{status_code}{gross_amount}{server_key}"
    return hashlib.sha512(payload.encode("utf-8")).hexdigest()


def verify_signature(
    order_id: str,
    status_code: str,
    gross_amount: str,
    signature_key: str,
    server_key: str,
) -> bool:
    """Check a notification's signature against the shared server key.

    Never raises: missing or non-string inputs, and fields that cannot be
    encoded as UTF-8 (lone surrogates from JSON escapes), are a mismatch.
    """
    fields = (order_id, status_code, gross_amount, signature_key, server_key)
    if not all(isinstance(value, str) for value in fields) or not signature_key or not server_key:
        return False
    # A genuine signature is lowercase hex
    if not signature_key.isascii():
        return False

    try:
        expected = compute_signature(order_id, status_code, gross_amount, server_key)
    except UnicodeEncodeError:
        return False
    return hmac.compare_digest(expected.encode("ascii"), signature_key.encode("ascii"))
