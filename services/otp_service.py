"""
One-time passcode issuing and checking.

Codes are 6 digits, valid for 10 minutes and single-use. Only a hash of
the code is kept.
"""
from __future__ import annotations

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

OTP_LENGTH = 6
OTP_TTL = timedelta(minutes=10)
MAX_ATTEMPTS = 5


def generate_otp(length: int = OTP_LENGTH) -> str:
    return "".join(secrets.choice("0123456789") for _ in range(length))


def _hash(otp: str) -> str:
    return hashlib.sha256(otp.encode("utf-8")).hexdigest()


@dataclass
class _PendingCode:
    digest: str
    expires_at: datetime
    attempts: int = 0


class OTPStore:
    """In-process OTP store keyed by normalized email."""

    def __init__(self, ttl: timedelta = OTP_TTL, clock: Optional[Callable[[], datetime]] = None):
        self.ttl = ttl
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._pending: Dict[str, _PendingCode] = {}

    @staticmethod
    def _key(email: str) -> str:
        return email.strip().lower()

    def issue(self, email: str) -> str:
        """Create (or replace) the code for this email and return it."""
        otp = generate_otp()
        self._pending[self._key(email)] = _PendingCode(
            digest=_hash(otp),
            expires_at=self._clock() + self.ttl,
        )
        return otp

    def discard(self, email: str) -> None:
        self._pending.pop(self._key(email), None)

    def verify(self, email: str, otp: str) -> bool:
        """True once for a matching, unexpired code. Consumes it on success."""
        key = self._key(email)
        pending = self._pending.get(key)
        if pending is None:
            return False

        if self._clock() >= pending.expires_at:
            del self._pending[key]
            return False

        if not hmac.compare_digest(pending.digest, _hash(otp.strip())):
            pending.attempts += 1
            if pending.attempts >= MAX_ATTEMPTS:
                del self._pending[key]
            return False

        del self._pending[key]
        return True
