# goldwatch/api/app.py

"""FastAPI application serving the cached GTA prices."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from goldwatch.config.settings import Settings
from goldwatch.services.health_checker import build_health_report
from goldwatch.services.poller import PricePoller
from goldwatch.storage.price_cache import CacheStatus, PriceCache

logger = logging.getLogger("goldwatch.api")

_STALE_WARNING = '110 - "Response is Stale"'


def create_app(
    cache: PriceCache, poller: PricePoller | None = None,
) -> FastAPI:
    """Build the API around an injected cache.

    When *poller* is given, the app's lifespan starts it on startup and
    stops it on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if poller is not None:
            poller.start()
        logger.info("API ready (poller=%s)", poller is not None)
        yield
        if poller is not None:
            await poller.stop()
            poller.fetcher.close()

    app = FastAPI(
        title="goldwatch",
        description="Latest GTA gold bar and jewelry prices",
        version=Settings.APP_VERSION,
        lifespan=lifespan,
    )

    @app.get("/")
    async def root():
        return {
            "name": "goldwatch",
            "version": Settings.APP_VERSION,
            "routes": ["/price", "/goldprice", "/health"],
        }

    async def get_price():
        """Latest cached record; 503 until the first success."""
        snapshot = cache.snapshot()
        if snapshot.record is None:
            return JSONResponse(
                status_code=503,
                content={
                    "detail": "No price data available yet",
                    "status": snapshot.status.value,
                    "lastError": snapshot.last_error,
                },
            )

        stale = snapshot.status is CacheStatus.DEGRADED
        body = {
            **snapshot.record.to_dict(),
            "stale": stale,
            "lastError": snapshot.last_error,
        }
        headers = {"Warning": _STALE_WARNING} if stale else None
        return JSONResponse(content=body, headers=headers)

    app.add_api_route("/price", get_price, methods=["GET"])
    app.add_api_route("/goldprice", get_price, methods=["GET"])

    @app.get("/health")
    async def health():
        return build_health_report(cache.snapshot())

    return app
