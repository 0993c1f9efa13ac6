# goldwatch/config/settings.py

"""Central configuration for the goldwatch service."""

import os
from collections.abc import Mapping
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


def resolve_logs_dir(env: Mapping[str, str] | None = None) -> Path:
    """Log directory: GOLDWATCH_LOGS_DIR, else ``logs/`` under the CWD."""
    env = os.environ if env is None else env
    configured = env.get("GOLDWATCH_LOGS_DIR")
    if configured:
        return Path(configured)
    return Path.cwd() / "logs"


class Settings:
    """Central configuration for the goldwatch service."""

    APP_VERSION: str = "0.1.0"

    # --- Source ---
    SOURCE_URL: str = os.getenv(
        "GOLDWATCH_SOURCE_URL", "https://www.goldtraders.or.th/"
    )

    # --- Fetching ---
    REQUEST_TIMEOUT: int = int(
        os.getenv("GOLDWATCH_REQUEST_TIMEOUT", "15")
    )                                   # Seconds before a request times out
    POLL_INTERVAL: float = float(
        os.getenv("GOLDWATCH_POLL_INTERVAL", "5.0")
    )                                   # Seconds between ticks
    SLOW_THRESHOLD_MS: float = 5000.0   # Probe latency reported as "slow"

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    USER_AGENT: str = os.getenv(
        "GOLDWATCH_USER_AGENT", "GTA-GoldScraper/1.1 (goldwatch)"
    )
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,*/*;q=0.8"
        ),
        "Accept-Language": "th-TH,th;q=0.9,en-US;q=0.8,en;q=0.7",
    }

    # --- API ---
    API_HOST: str = os.getenv("GOLDWATCH_HOST", "127.0.0.1")
    API_PORT: int = int(os.getenv("GOLDWATCH_PORT", "8080"))

    # --- Paths ---
    SELECTORS_PATH: Path = Path(__file__).resolve().parent / "selectors.json"
    LOGS_DIR: Path = resolve_logs_dir()
