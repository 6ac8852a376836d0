from datetime import datetime, timedelta, timezone
from typing import Optional


class DateTimeManager:
    """
    Centralized DateTime management.
    All persisted timestamps and token lifetimes are computed in UTC.
    """
    
    @classmethod
    def _now(cls) -> datetime:
        """Current time in UTC"""
        return datetime.now(timezone.utc)

    @classmethod
    def expires_in(cls, minutes: int, start: Optional[datetime] = None) -> datetime:
        """Expiry timestamp `minutes` after `start` (defaults to now)"""
        return (start or cls._now()) + timedelta(minutes=minutes)
