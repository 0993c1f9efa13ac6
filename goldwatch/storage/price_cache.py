# goldwatch/storage/price_cache.py

"""In-memory last-known-good price cache."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from goldwatch.models.price_record import PriceRecord
from goldwatch.storage.rwlock import ReadWriteLock

logger = logging.getLogger("goldwatch.cache")


class CacheStatus(str, Enum):
    """Observable cache state. There is no terminal failed state."""

    INITIALIZING = "initializing"
    HEALTHY = "healthy"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class CacheSnapshot:
    """A consistent view of the cache taken under one read lock.

    ``record`` is the latest *successful* fetch while ``error`` is the
    outcome of the latest *attempt*, so the two can come from different
    ticks. Use ``record.fetched_at`` (or :meth:`data_age`) to judge
    staleness.
    """

    record: PriceRecord | None
    error: Exception | None
    last_attempt_at: datetime | None
    last_success_at: datetime | None

    @property
    def status(self) -> CacheStatus:
        if self.record is None:
            return CacheStatus.INITIALIZING
        if self.error is not None:
            return CacheStatus.DEGRADED
        return CacheStatus.HEALTHY

    @property
    def last_error(self) -> str | None:
        return str(self.error) if self.error is not None else None

    def data_age(self, now: datetime | None = None) -> float | None:
        """Seconds since the cached record was fetched."""
        if self.record is None:
            return None
        now = now or datetime.now(timezone.utc)
        return max(
            (now - self.record.fetched_at).total_seconds(), 0.0
        )


class PriceCache:
    """Holds at most one record and at most one error.

    Written only by the poller, read by any number of request
    handlers. Lock holds cover reference assignment only, never I/O.
    """

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._record: PriceRecord | None = None
        self._error: Exception | None = None
        self._last_attempt_at: datetime | None = None
        self._last_success_at: datetime | None = None

    def record_success(
        self, record: PriceRecord, at: datetime | None = None,
    ) -> None:
        """Replace the record and clear any stored error."""
        at = at or datetime.now(timezone.utc)
        with self._lock.write_locked():
            self._record = record
            self._error = None
            self._last_attempt_at = at
            self._last_success_at = at
        logger.info(
            "Cache updated: bar %.2f/%.2f jewelry %.2f/%.2f (%s)",
            record.bar_sell,
            record.bar_buy,
            record.jewelry_sell,
            record.jewelry_buy,
            record.released_at,
        )

    def record_failure(
        self, error: Exception, at: datetime | None = None,
    ) -> None:
        """Store *error*, keeping whatever record is already cached."""
        at = at or datetime.now(timezone.utc)
        with self._lock.write_locked():
            self._error = error
            self._last_attempt_at = at
            has_record = self._record is not None
        logger.debug(
            "Cache error set (serving %s): %s",
            "stale record" if has_record else "nothing",
            error,
        )

    def snapshot(self) -> CacheSnapshot:
        """Return record, error and timestamps as one consistent view."""
        with self._lock.read_locked():
            return CacheSnapshot(
                record=self._record,
                error=self._error,
                last_attempt_at=self._last_attempt_at,
                last_success_at=self._last_success_at,
            )
