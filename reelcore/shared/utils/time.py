"""
Time helpers.

Services take a ``clock`` callable so windowed rules (view deduplication,
trending score) can be exercised at fixed instants.
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)
