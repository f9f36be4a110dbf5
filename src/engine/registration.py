"""
Registration expiry: pending registrations lapse after a fixed window.
"""
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from .models import Registration, parse_timestamp

EXPIRY_DAYS = 14


def is_registration_expired(registration: Registration, now: datetime,
                            expiry_days: int = EXPIRY_DAYS) -> bool:
    if registration.status != 'pending' or registration.registered_at is None:
        return False
    return now - registration.registered_at > timedelta(days=expiry_days)


def get_expired_registration_user_ids(registrations: Sequence[Registration],
                                      now: Optional[datetime] = None,
                                      expiry_days: int = EXPIRY_DAYS) -> List[str]:
    """
    Return the user ids of pending registrations older than ``expiry_days``.

    This is the only engine call that reads the clock; pass ``now`` to pin it.
    """
    now = parse_timestamp(now) if now is not None else datetime.now(timezone.utc)
    return [
        reg.user_id for reg in registrations
        if is_registration_expired(reg, now, expiry_days)
    ]
