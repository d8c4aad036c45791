"""Tests for UI utility functions (no GUI deps)."""

from datetime import datetime

from crypto_wallet.theming.style import COLOR_NEGATIVE, COLOR_POSITIVE, TEXT_MUTED
from crypto_wallet.ui.utils import (
    avatar_initial,
    color_for_value,
    display_name,
    format_coin_amount,
    format_idr,
    format_market_cap,
    format_percent,
    format_signed_idr,
    resolve_avatar_url,
)


def test_color_for_value() -> None:
    assert color_for_value(1.0) == COLOR_POSITIVE
    assert color_for_value(-0.01) == COLOR_NEGATIVE
    assert color_for_value(0) == TEXT_MUTED
    assert color_for_value(None) == TEXT_MUTED
    assert color_for_value("x") == TEXT_MUTED  # type: ignore[arg-type]


def test_format_idr() -> None:
    assert format_idr(1234567) == "Rp 1.234.567"
    assert format_idr(999.4) == "Rp 999"
    assert format_idr(-5000) == "-Rp 5.000"
    assert format_idr(None) == "Rp 0"


def test_format_signed_idr() -> None:
    assert format_signed_idr(2500) == "+Rp 2.500"
    assert format_signed_idr(-2500) == "-Rp 2.500"
    assert format_signed_idr(0) == "+Rp 0"


def test_format_percent() -> None:
    assert format_percent(25) == "+25.00%"
    assert format_percent(-3.456) == "-3.46%"
    assert format_percent(0) == "+0.00%"
    assert format_percent(-1.5, signed=False) == "-1.50%"


def test_format_coin_and_market_cap() -> None:
    assert format_coin_amount(0.5) == "0.50000000"
    assert format_market_cap(2_500_000_000_000) == "2.50 T IDR"


def test_display_name_prefers_username() -> None:
    assert display_name({"id": 7, "username": "  satoshi "}) == "satoshi"
    assert display_name(None) == "User"


def test_display_name_placeholder() -> None:
    profile = {"id": 1234, "username": None, "created_at": "2024-03-05T07:08:09"}
    assert display_name(profile) == "user#20240305070809234"
    profile = {"id": 2000, "username": "", "created_at": datetime(2023, 1, 2, 3, 4, 5)}
    assert display_name(profile) == "user#20230102030405001"


def test_avatar_initial() -> None:
    assert avatar_initial("satoshi") == "S"
    assert avatar_initial("") == "U"


def test_resolve_avatar_url() -> None:
    base = "https://wallet.example.com/"
    assert resolve_avatar_url("/uploads/a.jpg", base) == "https://wallet.example.com/uploads/a.jpg"
    assert resolve_avatar_url("https://cdn.example.com/a.jpg", base) == "https://cdn.example.com/a.jpg"
    assert resolve_avatar_url(None, base) is None
