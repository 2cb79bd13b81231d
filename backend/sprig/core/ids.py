"""Time-ordered identifiers."""

import secrets
import time


def new_uuid() -> str:
    """Return a time-ordered id in UUID text layout.

    The first 14 hex digits encode the current time in microseconds, the
    remaining 18 come from 9 random bytes.
    """
    micros = time.time_ns() // 1000
    raw = f"{micros:014x}{secrets.token_hex(9)}"
    return f"{raw[:8]}-{raw[8:12]}-{raw[12:16]}-{raw[16:20]}-{raw[20:]}"
