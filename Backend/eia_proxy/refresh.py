"""Staleness strategies for cached regions.

A policy looks at the rows the cache found for a region and decides whether
they can be served or must be replaced by a fresh upstream page.
"""
from datetime import datetime, timedelta
from typing import Optional, Sequence

from dateutil import tz

from .config import CACHE_REFRESH, CACHE_TTL_HOURS


def utcnow() -> datetime:
    return datetime.now(tz.UTC)


def _as_utc(ts: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if ts.tzinfo is None:
        return ts.replace(tzinfo=tz.UTC)
    return ts.astimezone(tz.UTC)


class RefreshPolicy:
    name = "base"

    def is_stale(self, rows: Sequence, now: Optional[datetime] = None) -> bool:
        raise NotImplementedError


class NeverRefresh(RefreshPolicy):
    """A non-empty region is served forever."""

    name = "never"

    def is_stale(self, rows, now=None):
        return False


class TimeToLive(RefreshPolicy):
    """A region is stale once its newest row is older than ``hours``."""

    name = "ttl"

    def __init__(self, hours: float):
        if hours <= 0:
            raise ValueError("TTL must be positive")
        self.max_age = timedelta(hours=hours)

    def is_stale(self, rows, now=None):
        stamps = [_as_utc(r.fetched_at) for r in rows if r.fetched_at is not None]
        if not stamps:
            return True
        now = now or utcnow()
        return now - max(stamps) > self.max_age


def policy_from_env(mode: str = CACHE_REFRESH, ttl_hours: float = CACHE_TTL_HOURS) -> RefreshPolicy:
    mode = (mode or "never").lower()
    if mode == "never":
        return NeverRefresh()
    if mode == "ttl":
        return TimeToLive(ttl_hours)
    raise ValueError(f"Unknown CACHE_REFRESH mode: {mode!r} (expected 'never' or 'ttl')")
