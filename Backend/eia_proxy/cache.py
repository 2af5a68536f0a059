"""Read-through cache of EIA generation rows.

``fetch_region`` serves a region from ``energy_data`` when it has rows the
refresh policy accepts, otherwise pulls one page from EIA and writes it back
in a single transaction. Concurrent calls for the same region inside this
process share one fill.
"""
import logging
import threading
from concurrent.futures import Future
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import CACHE_WINDOW
from .errors import StoreError
from .models import GenerationRecord
from .refresh import NeverRefresh, RefreshPolicy, utcnow

log = logging.getLogger(__name__)


class InFlightRegistry:
    """Maps a region code to the future of the fill currently running for it."""

    def __init__(self):
        self._lock = threading.Lock()
        self._pending: dict[str, Future] = {}

    def claim(self, key: str) -> tuple[Future, bool]:
        """Return (future, is_leader). Only the leader runs the work."""
        with self._lock:
            fut = self._pending.get(key)
            if fut is not None:
                return fut, False
            fut = Future()
            self._pending[key] = fut
            return fut, True

    def release(self, key: str) -> None:
        with self._lock:
            self._pending.pop(key, None)

    def __len__(self):
        with self._lock:
            return len(self._pending)


class GenerationCache:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        fetch_upstream: Callable[[str], list[dict]],
        policy: RefreshPolicy = None,
        window: int = CACHE_WINDOW,
    ):
        self.session_factory = session_factory
        self.fetch_upstream = fetch_upstream
        self.policy = policy or NeverRefresh()
        self.window = window
        self._inflight = InFlightRegistry()

    def fetch_region(self, region: str) -> list[dict]:
        fut, leader = self._inflight.claim(region)
        if not leader:
            log.info("Joining in-flight fill for %s", region)
            return list(fut.result())

        try:
            rows = self._fetch_region(region)
        except BaseException as exc:
            # followers must never be left waiting on an unset future
            fut.set_exception(exc)
            raise
        else:
            fut.set_result(rows)
            return list(rows)
        finally:
            self._inflight.release(region)

    def _lookup(self, region: str) -> tuple[list[dict], bool]:
        """Cached rows for a region as dicts, and whether the policy calls them stale."""
        db = self.session_factory()
        try:
            cached = (
                db.query(GenerationRecord)
                .filter(GenerationRecord.state_code == region)
                .order_by(GenerationRecord.period.desc())
                .limit(self.window)
                .all()
            )
            stale = bool(cached) and self.policy.is_stale(cached)
            return [r.to_dict() for r in cached], stale
        except SQLAlchemyError as exc:
            raise StoreError(f"Cache lookup failed for {region}: {exc}") from exc
        finally:
            db.close()

    def _fetch_region(self, region: str) -> list[dict]:
        # the lookup session is closed before the upstream call so no
        # pooled connection is held open across the HTTP round trip
        cached, stale = self._lookup(region)
        if cached and not stale:
            log.info("Cache hit for %s (%d rows)", region, len(cached))
            return cached
        if stale:
            log.info("Cache for %s is stale under %s policy, refreshing", region, self.policy.name)
        else:
            log.info("Cache miss for %s, fetching from EIA", region)

        records = self.fetch_upstream(region)
        if stale and not records:
            log.warning("EIA returned no rows for stale region %s, keeping %d cached rows", region, len(cached))
            return cached

        self._write_back(region, records, replace=stale)
        return records

    def _write_back(self, region: str, records: list[dict], replace: bool) -> None:
        # one transaction: a failure leaves the region as it was before the fill
        fetched_at = utcnow()
        db = self.session_factory()
        try:
            if replace:
                db.query(GenerationRecord).filter(
                    GenerationRecord.state_code == region
                ).delete(synchronize_session=False)
            db.add_all([GenerationRecord(fetched_at=fetched_at, **rec) for rec in records])
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise StoreError(f"Write-back failed for {region}: {exc}") from exc
        finally:
            db.close()
        log.info("Stored %d rows for %s", len(records), region)

    def invalidate(self, region: str) -> int:
        """Drop every cached row for a region; the next fetch refills it."""
        db = self.session_factory()
        try:
            deleted = db.query(GenerationRecord).filter(
                GenerationRecord.state_code == region
            ).delete(synchronize_session=False)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise StoreError(f"Invalidation failed for {region}: {exc}") from exc
        finally:
            db.close()
        log.info("Invalidated %d rows for %s", deleted, region)
        return deleted
