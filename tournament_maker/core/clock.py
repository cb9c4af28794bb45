from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp, the form the DateTime columns store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
