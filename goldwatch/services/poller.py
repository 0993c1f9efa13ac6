# goldwatch/services/poller.py

"""Background fetch-extract-cache loop."""

import asyncio
import contextlib
import logging
import math
import time
from collections.abc import Callable
from datetime import datetime, timezone

from bs4 import BeautifulSoup

from goldwatch.config.settings import Settings
from goldwatch.models.price_record import PriceRecord
from goldwatch.scrapers.errors import GoldwatchError
from goldwatch.scrapers.extractor import (
    extract_price_record,
    load_anchor_ids,
)
from goldwatch.scrapers.fetcher import PageFetcher
from goldwatch.storage.price_cache import PriceCache

logger = logging.getLogger("goldwatch.poller")

Extractor = Callable[[BeautifulSoup, str, datetime], PriceRecord]


class PricePoller:
    """Runs one tick every ``interval`` seconds for the process lifetime.

    Each tick is independent: failures are logged and stored in the
    cache, never raised, and there is no backoff between ticks.
    """

    def __init__(
        self,
        cache: PriceCache,
        fetcher: PageFetcher | None = None,
        url: str | None = None,
        interval: float | None = None,
        extract: Extractor | None = None,
    ) -> None:
        self.interval = (
            interval if interval is not None else Settings.POLL_INTERVAL
        )
        if not math.isfinite(self.interval) or self.interval <= 0:
            raise ValueError("poll interval must be a positive finite number")
        self.cache = cache
        self.fetcher = fetcher or PageFetcher()
        self.url = url or Settings.SOURCE_URL
        if extract is None:
            anchor_ids = load_anchor_ids()

            def _extract_anchors(
                soup: BeautifulSoup, url: str, fetched_at: datetime,
            ) -> PriceRecord:
                return extract_price_record(
                    soup, url, fetched_at, anchor_ids
                )

            extract = _extract_anchors
        self._extract = extract
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None
        self.tick_count: int = 0

    def tick(self) -> bool:
        """Fetch, extract and update the cache once.

        Returns True when the cache received a new record.
        """
        self.tick_count += 1
        started = time.monotonic()
        try:
            soup = self.fetcher.fetch(self.url)
            record = self._extract(
                soup, self.url, datetime.now(timezone.utc)
            )
        except GoldwatchError as exc:
            logger.warning("Tick %d failed: %s", self.tick_count, exc)
            self.cache.record_failure(exc)
            return False
        except Exception as exc:
            logger.error(
                "Tick %d raised unexpectedly: %s",
                self.tick_count,
                exc,
                exc_info=True,
            )
            self.cache.record_failure(exc)
            return False

        self.cache.record_success(record)
        logger.info(
            "Tick %d ok in %.0fms",
            self.tick_count,
            (time.monotonic() - started) * 1000,
        )
        return True

    async def run(self, stop_event: asyncio.Event) -> None:
        """Tick immediately, then on a fixed schedule until stopped.

        Periods missed while a slow tick was running are skipped
        rather than fired back-to-back.
        """
        loop = asyncio.get_running_loop()
        next_at = loop.time()
        logger.info(
            "Poller started: %s every %.1fs", self.url, self.interval,
        )
        while not stop_event.is_set():
            await asyncio.to_thread(self.tick)

            next_at += self.interval
            now = loop.time()
            if next_at <= now:
                skipped = int((now - next_at) // self.interval) + 1
                next_at += skipped * self.interval
                logger.debug("Skipped %d missed tick(s)", skipped)

            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(
                    stop_event.wait(), timeout=next_at - now,
                )
        logger.info("Poller stopped after %d tick(s)", self.tick_count)

    def start(self) -> asyncio.Task[None]:
        """Launch :meth:`run` as a background task on the running loop."""
        if self._task is not None and not self._task.done():
            return self._task
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(
            self.run(self._stop_event), name="goldwatch-poller",
        )
        return self._task

    async def stop(self) -> None:
        """Signal the loop to stop and cancel any pending wait.

        A tick already running in its worker thread is abandoned; its
        result may still land in the cache.
        """
        if self._stop_event is not None:
            self._stop_event.set()
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()
