# services/time_utils.py
from datetime import datetime, timezone


def utcnow() -> datetime:
    """UTC の現在時刻を naive で返す（DB には naive UTC で保存する）"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(dt: datetime | None) -> datetime | None:
    """
    aware / naive を問わず UTC naive に揃える
    DB の DateTime 列はすべて naive UTC で持つので、保存・比較の前に必ず通す
    """
    if dt is None:
        return None
    if dt.tzinfo is not None and dt.utcoffset() is not None:
        return dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt
