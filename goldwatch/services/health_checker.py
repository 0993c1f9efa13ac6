# goldwatch/services/health_checker.py

"""Service health reporting and source connectivity probing."""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from goldwatch.config.settings import Settings
from goldwatch.scrapers.errors import ParseError
from goldwatch.scrapers.extractor import extract_price_record
from goldwatch.scrapers.fetcher import PageFetcher
from goldwatch.storage.price_cache import CacheSnapshot

logger = logging.getLogger("goldwatch.health")


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def build_health_report(
    snapshot: CacheSnapshot, now: datetime | None = None,
) -> dict[str, Any]:
    """Render the ``/health`` body from one cache snapshot."""
    record = snapshot.record
    age = snapshot.data_age(now)
    return {
        "status": snapshot.status.value,
        "hasData": record is not None,
        "lastError": snapshot.last_error,
        "lastFetchTime": _iso(record.fetched_at) if record else None,
        "lastAttemptTime": _iso(snapshot.last_attempt_at),
        "dataAge": round(age, 3) if age is not None else None,
    }


@dataclass
class HealthResult:
    """Result of a one-off probe against the source page."""

    url: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    parsed: bool
    message: str


def _down(url: str, start: float, exc: Exception) -> HealthResult:
    return HealthResult(
        url=url,
        status="down",
        latency_ms=(time.monotonic() - start) * 1000,
        parsed=False,
        message=str(exc)[:120],
    )


def _probe(url: str, fetcher: PageFetcher) -> HealthResult:
    start = time.monotonic()
    try:
        soup = fetcher.fetch(url)
    except Exception as exc:
        return _down(url, start, exc)
    elapsed_ms = (time.monotonic() - start) * 1000

    try:
        extract_price_record(soup, url, datetime.now(timezone.utc))
        parsed, message = True, ""
    except ParseError as exc:
        parsed, message = False, str(exc)
    except Exception as exc:
        logger.error(
            "Extraction from %s raised unexpectedly: %s",
            url,
            exc,
            exc_info=True,
        )
        return HealthResult(
            url=url,
            status="down",
            latency_ms=elapsed_ms,
            parsed=False,
            message=str(exc)[:120],
        )

    status = (
        "slow" if elapsed_ms > Settings.SLOW_THRESHOLD_MS else "ok"
    )
    if status == "slow" and not message:
        message = "High latency"

    return HealthResult(
        url=url,
        status=status,
        latency_ms=elapsed_ms,
        parsed=parsed,
        message=message,
    )


def probe_source(
    url: str | None = None, fetcher: PageFetcher | None = None,
) -> HealthResult:
    """Fetch and extract once, timing the round trip.

    Never raises: any failure is reported as ``"down"``. A fetcher
    created here is closed before returning.
    """
    url = url or Settings.SOURCE_URL
    owned = fetcher is None
    active = fetcher if fetcher is not None else PageFetcher()
    try:
        result = _probe(url, active)
    finally:
        if owned:
            active.close()

    logger.info(
        "Health check %s: %s (%.0fms) parsed=%s %s",
        result.url,
        result.status,
        result.latency_ms,
        result.parsed,
        result.message,
    )
    return result
