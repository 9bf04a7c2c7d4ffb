from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC now; timestamp columns are plain DateTime and hold naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
