"""
Lockout Policy

Pure decisions over (failed_login_attempts, locked_until, now). Stores apply
the failure update atomically; next_failure_state is the reference semantics
for that update.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional


@dataclass(frozen=True)
class LoginCounters:
    """Lockout counters as they stand after an update"""

    failed_login_attempts: int
    locked_until: Optional[datetime]


def next_failure_state(
    failed_login_attempts: int,
    locked_until: Optional[datetime],
    max_attempts: int,
    lock_until: datetime,
) -> LoginCounters:
    """
    Counters after one more failed attempt.

    The count only ever grows by one. Reaching max_attempts sets the lock to
    lock_until, but an existing lock that ends later is kept as it is.
    """
    attempts = failed_login_attempts + 1
    new_lock = locked_until
    if attempts >= max_attempts and (locked_until is None or locked_until < lock_until):
        new_lock = lock_until
    return LoginCounters(failed_login_attempts=attempts, locked_until=new_lock)


class LockoutPolicy:
    def __init__(self, max_attempts: int = 5, lock_duration: timedelta = timedelta(minutes=15)):
        self.max_attempts = max_attempts
        self.lock_duration = lock_duration

    @classmethod
    def from_settings(cls, settings) -> "LockoutPolicy":
        return cls(
            max_attempts=settings.lockout_max_attempts,
            lock_duration=settings.lockout_duration,
        )

    def is_locked(self, locked_until: Optional[datetime], now: datetime) -> bool:
        return locked_until is not None and locked_until > now

    def lock_expiry(self, now: datetime) -> datetime:
        return now + self.lock_duration
