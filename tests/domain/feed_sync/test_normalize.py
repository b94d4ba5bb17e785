from __future__ import annotations

from decimal import Decimal

import pytest

from feedsync.domain.feed_sync import normalize_price, resolve_stock, sanitize_description
from feedsync.domain.model import StockMarker


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("1 234,50", Decimal("1234.50")),
        ("19,90", Decimal("19.90")),
        ("12.99 EUR", Decimal("12.99")),
        (" 19,90 ", Decimal("19.90")),
        ("0", Decimal(0)),
        ("", Decimal(0)),
        ("abc", Decimal(0)),
        ("NaN", Decimal(0)),
        ("-5,00", Decimal(0)),
    ],
)
def test_normalize_price(raw: str, expected: Decimal) -> None:
    assert normalize_price(raw) == expected


def test_presence_id_wins_over_text() -> None:
    assert resolve_stock(StockMarker(presence_id="7", text="ni na zalogi")) is True


def test_phrase_match_is_case_insensitive() -> None:
    assert resolve_stock(StockMarker(presence_id="0", text="Na voljo takoj")) is True
    assert resolve_stock(StockMarker(presence_id=None, text="ZALOGA: 3 kos")) is True


def test_no_stock_information_means_out_of_stock() -> None:
    assert resolve_stock(StockMarker(presence_id="", text="")) is False
    assert resolve_stock(StockMarker(presence_id="0", text="Po narocilu")) is False
    assert resolve_stock(None) is False


def test_sanitize_description_strips_scripts_and_keeps_formatting() -> None:
    cleaned = sanitize_description(
        '<p onclick="x()">Nice <b>thing</b></p><script>alert(1)</script>'
        '<a href="javascript:alert(1)">link</a>'
    )

    assert "<script" not in cleaned
    assert "alert(1)" not in cleaned
    assert "onclick" not in cleaned
    assert "javascript:" not in cleaned
    assert "<p>Nice <b>thing</b></p>" in cleaned


def test_sanitize_description_keeps_safe_links() -> None:
    cleaned = sanitize_description('<a href="https://example.com/x">more</a>')

    assert 'href="https://example.com/x"' in cleaned
    assert ">more</a>" in cleaned


def test_sanitize_blank_description() -> None:
    assert sanitize_description("") == ""
    assert sanitize_description("   \n") == ""
