# goldwatch/models/price_record.py

"""Immutable price record produced by one successful tick."""

import re
from dataclasses import dataclass
from datetime import datetime

# Buddhist-era years run 543 ahead of the Common Era
_BE_OFFSET = 543

_DATE_RE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")
_TIME_RE = re.compile(r"(\d{1,2}):(\d{2})")
_ROUND_RE = re.compile(r"\(\D*(\d+)\)")


@dataclass(frozen=True)
class ReleaseInfo:
    """Components of the source's release text, where recognisable."""

    date_be: str | None = None
    date_ce: str | None = None
    time: str | None = None
    round: int | None = None


def parse_release_text(text: str) -> ReleaseInfo:
    """Split text like ``04/10/2568 เวลา 09:07 น. (ครั้งที่ 1)``.

    Unrecognised parts come back as ``None``; this never raises.
    """
    date_be = date_ce = time_str = None
    round_no = None

    date_match = _DATE_RE.search(text)
    if date_match:
        day, month, year_be = (int(g) for g in date_match.groups())
        date_be = f"{day:02d}/{month:02d}/{year_be:04d}"
        try:
            date_ce = datetime(
                year_be - _BE_OFFSET, month, day
            ).date().isoformat()
        except ValueError:
            date_ce = None

    time_match = _TIME_RE.search(text)
    if time_match:
        hour, minute = time_match.groups()
        time_str = f"{int(hour):02d}:{minute}"

    round_match = _ROUND_RE.search(text)
    if round_match:
        round_no = int(round_match.group(1))

    return ReleaseInfo(
        date_be=date_be,
        date_ce=date_ce,
        time=time_str,
        round=round_no,
    )


@dataclass(frozen=True)
class PriceRecord:
    """GTA headline prices (THB per baht-weight, 96.5% gold)."""

    released_at: str
    bar_sell: float
    bar_buy: float
    jewelry_sell: float
    jewelry_buy: float
    source_url: str
    fetched_at: datetime

    @property
    def release(self) -> ReleaseInfo:
        """Release text broken into date/time/round components."""
        return parse_release_text(self.released_at)

    def to_dict(self) -> dict[str, object]:
        """Serialise to the JSON shape served by the API."""
        release = self.release
        return {
            "releasedAt": self.released_at,
            "release": {
                "dateBE": release.date_be,
                "dateCE": release.date_ce,
                "time": release.time,
                "round": release.round,
            },
            "bar": {"sell": self.bar_sell, "buy": self.bar_buy},
            "jewelry": {
                "sell": self.jewelry_sell,
                "buy": self.jewelry_buy,
            },
            "source": self.source_url,
            "fetchedAt": self.fetched_at.isoformat(),
        }
