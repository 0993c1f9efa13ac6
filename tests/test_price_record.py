# tests/test_price_record.py

"""Tests for the PriceRecord model and release text parsing."""

import dataclasses
import unittest
from datetime import datetime, timezone

from goldwatch.models.price_record import (
    PriceRecord,
    ReleaseInfo,
    parse_release_text,
)


def _record(**overrides: object) -> PriceRecord:
    fields: dict[str, object] = {
        "released_at": "04/10/2568 เวลา 09:07 น. (ครั้งที่ 1)",
        "bar_sell": 59450.0,
        "bar_buy": 59350.0,
        "jewelry_sell": 60250.0,
        "jewelry_buy": 58168.92,
        "source_url": "https://www.goldtraders.or.th/",
        "fetched_at": datetime(2025, 10, 4, 2, 10, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    return PriceRecord(**fields)  # type: ignore[arg-type]


class TestParseReleaseText(unittest.TestCase):
    """parse_release_text splits the GTA announcement line."""

    def test_full_text(self) -> None:
        info = parse_release_text("04/10/2568 เวลา 09:07 น. (ครั้งที่ 1)")
        self.assertEqual(info.date_be, "04/10/2568")
        self.assertEqual(info.date_ce, "2025-10-04")
        self.assertEqual(info.time, "09:07")
        self.assertEqual(info.round, 1)

    def test_single_digit_parts_padded(self) -> None:
        info = parse_release_text("4/1/2569 เวลา 9:30 น. (ครั้งที่ 12)")
        self.assertEqual(info.date_be, "04/01/2569")
        self.assertEqual(info.date_ce, "2026-01-04")
        self.assertEqual(info.time, "09:30")
        self.assertEqual(info.round, 12)

    def test_unrecognised_text(self) -> None:
        self.assertEqual(parse_release_text("ปิดตลาด"), ReleaseInfo())

    def test_impossible_date_keeps_be_only(self) -> None:
        info = parse_release_text("31/02/2568")
        self.assertEqual(info.date_be, "31/02/2568")
        self.assertIsNone(info.date_ce)


class TestPriceRecord(unittest.TestCase):
    """PriceRecord is an immutable value object."""

    def test_frozen(self) -> None:
        record = _record()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            record.bar_sell = 1.0  # type: ignore[misc]

    def test_equality_by_value(self) -> None:
        self.assertEqual(_record(), _record())
        self.assertNotEqual(_record(), _record(bar_buy=1.0))

    def test_to_dict_shape(self) -> None:
        data = _record().to_dict()
        self.assertEqual(data["bar"], {"sell": 59450.0, "buy": 59350.0})
        self.assertEqual(
            data["jewelry"], {"sell": 60250.0, "buy": 58168.92}
        )
        self.assertEqual(data["source"], "https://www.goldtraders.or.th/")
        self.assertEqual(data["fetchedAt"], "2025-10-04T02:10:00+00:00")
        self.assertEqual(data["release"]["round"], 1)  # type: ignore[index]


if __name__ == "__main__":
    unittest.main()
