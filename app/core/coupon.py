# app/core/coupon.py
import secrets
import string
import time

ALPHABET = string.digits + string.ascii_uppercase  # base36, uppercase

SUFFIX_LENGTH = 4


def to_base36(value: int) -> str:
    """
    Encode a non-negative integer in uppercase base36.

    >>> to_base36(35)
    'Z'
    """
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"

    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(ALPHABET[rem])
    return "".join(reversed(digits))


def generate_coupon_code(prefix: str = "GIT", now_ms: int | None = None) -> str:
    """
    Build a human-readable order code: PREFIX-<base36 ms timestamp>-<4 random>.

    Example: GIT-LQX3K2ZB-7F0A

    The code is probabilistic, not guaranteed unique. Uniqueness is enforced
    by the unique index on bookings.coupon_code; callers regenerate on collision.
    """
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{prefix}-{to_base36(now_ms)}-{suffix}".upper()


def normalize_coupon_code(code: str) -> str:
    """Coupon lookups are case-insensitive: strip and uppercase."""
    return code.strip().upper()
