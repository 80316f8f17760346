from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from rebroadcast.core.errors import TimestampFormatError

# "Wed Aug 27 13:08:45 +0000 2008" (formato created_at de la API)
CREATED_AT_FORMAT = "%a %b %d %H:%M:%S %z %Y"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

SECOND = timedelta(seconds=1)
HOUR = timedelta(hours=1)


def parse_created_at(raw: str, what: str = "created_at") -> datetime:
    """
    Un timestamp que no parsea indica un cambio de formato upstream,
    no un evento malo: es fatal.
    """
    try:
        return datetime.strptime(raw, CREATED_AT_FORMAT)
    except (TypeError, ValueError) as e:
        raise TimestampFormatError(f"Unable to parse {what}: {raw!r}") from e


def format_created_at(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.strftime(CREATED_AT_FORMAT)


def truncate(dt: datetime, granularity: timedelta) -> datetime:
    """Redondea hacia abajo a múltiplos de `granularity` (desde epoch)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt - ((dt - _EPOCH) % granularity)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def post_time(created_at: str, delta_seconds: int) -> Tuple[datetime, timedelta]:
    """Hora del post (a segundo entero) + delta mínimo como timedelta."""
    created = truncate(parse_created_at(created_at), SECOND)
    return created, timedelta(seconds=delta_seconds)


def account_age(created_at: str, now: Optional[datetime] = None) -> timedelta:
    """Edad de la cuenta con ambos extremos truncados a la hora."""
    created = truncate(parse_created_at(created_at, what="user.created_at"), HOUR)
    current = truncate(now or utcnow(), HOUR)
    return current - created
