# wecargo/core/clock.py
import threading
from datetime import datetime, timedelta, timezone

_lock = threading.Lock()
_last: datetime | None = None


def utcnow() -> datetime:
    """
    Naive UTC "now", strictly increasing within the process.

    Naive because SQLite drops tzinfo on round-trip; all stored timestamps are
    UTC. If the clock did not advance since the previous call, the result is
    bumped by one microsecond so ledger entries never share a timestamp.
    """
    global _last
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    with _lock:
        if _last is not None and now <= _last:
            now = _last + timedelta(microseconds=1)
        _last = now
    return now
