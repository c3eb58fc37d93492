"""Voucher code generation.

Codes look like ``KSP-2026-7QKX4M2HZP9R``: a configurable prefix, the year of
issuance and a random part drawn with :mod:`secrets` from an alphabet that
leaves out the easily confused characters (0/O, 1/I).
"""

import os
import secrets
from datetime import UTC, datetime

VOUCHER_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_RANDOM_LENGTH = 12
MAX_CODE_ATTEMPTS = 5


def voucher_code_prefix() -> str:
    return os.environ.get("VOUCHER_CODE_PREFIX", "KSP")


def generate_voucher_code(prefix: str | None = None, now: datetime | None = None) -> str:
    prefix = prefix or voucher_code_prefix()
    year = (now or datetime.now(UTC)).year
    random_part = "".join(secrets.choice(VOUCHER_CODE_ALPHABET) for _ in range(CODE_RANDOM_LENGTH))
    return f"{prefix}-{year}-{random_part}"
