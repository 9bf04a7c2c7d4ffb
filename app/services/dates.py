from datetime import datetime, timezone
from typing import Optional

DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d",
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y",
)


def to_seconds(value: Optional[datetime]) -> int:
    """Whole seconds since the epoch; None counts as the epoch. Naive values are UTC."""
    if value is None:
        return 0
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def _as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_date(raw: Optional[str]) -> Optional[datetime]:
    """Parse a loosely formatted date; None when absent or unparseable."""
    if not raw or not raw.strip():
        return None
    text = raw.strip()
    try:
        return _as_naive_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
