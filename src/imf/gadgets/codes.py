"""Self-destruct confirmation codes.

Codes are 6 characters drawn uniformly from A-Z, a-z and 0-9 using a
cryptographic random source. Comparison is case-sensitive.
"""

from __future__ import annotations

import random
import secrets
import string

CODE_CHARSET = string.ascii_letters + string.digits
CODE_LENGTH = 6

_rng = secrets.SystemRandom()


def generate_confirmation_code(rng: random.Random | None = None) -> str:
    """Generate a 6-character alphanumeric confirmation code."""
    source = rng or _rng
    return "".join(source.choice(CODE_CHARSET) for _ in range(CODE_LENGTH))


def codes_match(expected: str | None, supplied: str | None) -> bool:
    """Constant-time comparison of a stored code with a user-supplied one."""
    if not expected or not supplied:
        return False
    return secrets.compare_digest(expected.encode(), supplied.encode())
