# goldwatch/scrapers/extractor.py

"""Turn the GTA homepage markup into a :class:`PriceRecord`.

Two different failure policies apply:

* An anchor element that is missing, or present but empty, fails the
  whole extraction with :class:`ParseError`.
* An anchor that resolves to text which is not a number (``"-"``,
  ``"N/A"``) becomes ``0.0`` instead of failing.

The second rule means a partial markup change can publish zeros rather
than an error. Callers relying on non-zero prices must check for it.
"""

import json
import logging
import math
from datetime import datetime, timezone
from pathlib import Path

from bs4 import BeautifulSoup

from goldwatch.config.settings import Settings
from goldwatch.models.price_record import PriceRecord
from goldwatch.scrapers.errors import ParseError

logger = logging.getLogger("goldwatch.extractor")

# Record field -> anchor key in selectors.json, in page order
ANCHOR_FIELDS: tuple[str, ...] = (
    "released_at",
    "bar_sell",
    "bar_buy",
    "jewelry_sell",
    "jewelry_buy",
)


def load_anchor_ids(
    path: Path | None = None, source: str = "goldtraders",
) -> dict[str, str]:
    """Load the element ids for *source* from selectors.json."""
    with open(path or Settings.SELECTORS_PATH, encoding="utf-8") as f:
        all_selectors: dict[str, dict[str, str]] = json.load(f)
    anchors = all_selectors.get(source, {})
    unknown = [k for k in ANCHOR_FIELDS if k not in anchors]
    if unknown:
        raise ValueError(
            f"selectors.json lacks anchors for {source}: "
            f"{', '.join(unknown)}"
        )
    return {k: anchors[k] for k in ANCHOR_FIELDS}


def parse_number(text: str | None) -> float:
    """Parse localized numeric text such as ``'59,450.00'``.

    Thousands separators and surrounding whitespace are removed.
    Empty, unparseable or non-finite input returns ``0.0``.
    """
    if not text:
        return 0.0
    cleaned = text.replace(",", "").strip()
    try:
        value = float(cleaned)
    except ValueError:
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return value


def _anchor_text(soup: BeautifulSoup, element_id: str) -> str:
    node = soup.find("span", id=element_id)
    if node is None:
        return ""
    return node.get_text().strip()


def extract_price_record(
    soup: BeautifulSoup,
    source_url: str,
    fetched_at: datetime | None = None,
    anchor_ids: dict[str, str] | None = None,
) -> PriceRecord:
    """Build a record from the five anchor fields of *soup*.

    The result depends only on the arguments, so repeated calls with
    the same document and ``fetched_at`` give equal records.

    Raises:
        ParseError: if any anchor is absent or has no text. Every
            missing field is listed, not only the first.
    """
    ids = anchor_ids or load_anchor_ids()
    texts = {
        field: _anchor_text(soup, ids[field])
        for field in ANCHOR_FIELDS
    }

    missing = tuple(f for f in ANCHOR_FIELDS if not texts[f])
    if missing:
        raise ParseError(
            f"anchor field(s) not found: {', '.join(missing)}",
            missing=missing,
        )

    logger.debug(
        "Anchors at=%r bar_sell=%r bar_buy=%r jw_sell=%r jw_buy=%r",
        texts["released_at"],
        texts["bar_sell"],
        texts["bar_buy"],
        texts["jewelry_sell"],
        texts["jewelry_buy"],
    )

    return PriceRecord(
        released_at=texts["released_at"],
        bar_sell=parse_number(texts["bar_sell"]),
        bar_buy=parse_number(texts["bar_buy"]),
        jewelry_sell=parse_number(texts["jewelry_sell"]),
        jewelry_buy=parse_number(texts["jewelry_buy"]),
        source_url=source_url,
        fetched_at=fetched_at or datetime.now(timezone.utc),
    )
