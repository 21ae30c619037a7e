# matchpass/domain/references.py

import secrets
import time
from typing import Callable

from matchpass.domain.limits import BOOKING_REFERENCE_MAX_LENGTH


class BookingReferenceGenerator:
    """
    Builds human-readable booking references:
    <prefix><epoch millis><6 uppercase hex chars>, e.g. IPLBK1744271234567A3F09C.
    Uniqueness is finally enforced by the store's unique constraint.
    """

    def __init__(
        self,
        prefix: str = "IPLBK",
        clock_ms: Callable[[], int] | None = None,
        token: Callable[[], str] | None = None,
    ):
        # 13 digits of epoch millis plus 6 hex chars follow the prefix.
        if len(prefix) + 19 > BOOKING_REFERENCE_MAX_LENGTH:
            raise ValueError(f"Booking reference prefix too long: {prefix!r}")
        self.prefix = prefix
        self._clock_ms = clock_ms or (lambda: time.time_ns() // 1_000_000)
        self._token = token or (lambda: secrets.token_hex(3).upper())

    def __call__(self) -> str:
        return f"{self.prefix}{self._clock_ms()}{self._token()}"
