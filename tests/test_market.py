"""Tests for market listing helpers."""

import pytest

from crypto_wallet.services.market import (
    coin_option,
    coin_options,
    filter_coin_options,
    find_coin,
    holding_amount,
    idr_balance,
)

RAW_BTC = {
    "name": "Bitcoin",
    "symbol": "BTC",
    "cmc_rank": 1,
    "quote": {"IDR": {"price": "1500000000", "percent_change_24h": -1.25, "market_cap": 3.0e16}},
}
RAW_ETH = {
    "name": "Ethereum",
    "symbol": "ETH",
    "cmc_rank": 2,
    "quote": {"IDR": {"price": 60000000, "percent_change_24h": None, "market_cap": "7.2e15"}},
}


def test_coin_option_flattens_quote() -> None:
    option = coin_option(RAW_BTC)
    assert option["symbol"] == "BTC"
    assert option["rank"] == 1
    assert option["price_idr"] == pytest.approx(1.5e9)
    assert option["percent_change_24h"] == pytest.approx(-1.25)


def test_coin_option_missing_quote() -> None:
    option = coin_option({"symbol": "xyz", "name": "Unknown"})
    assert option["symbol"] == "XYZ"
    assert option["price_idr"] == 0.0
    assert option["percent_change_24h"] == 0.0


def test_filter_by_symbol_or_name() -> None:
    options = coin_options([RAW_BTC, RAW_ETH, "junk"])
    assert len(options) == 2
    assert [o["symbol"] for o in filter_coin_options(options, "eth")] == ["ETH"]
    assert [o["symbol"] for o in filter_coin_options(options, "bitc")] == ["BTC"]
    assert filter_coin_options(options, "  ") == options


def test_find_coin() -> None:
    options = coin_options([RAW_BTC, RAW_ETH])
    assert find_coin(options, " eth ")["name"] == "Ethereum"
    assert find_coin(options, "DOGE") is None


def test_idr_balance() -> None:
    assert idr_balance([{"currency": "USD", "balance": 5}, {"currency": "IDR", "balance": "250000"}]) == 250000.0
    assert idr_balance([]) == 0.0


def test_holding_amount() -> None:
    holdings = [{"symbol": "BTC", "amount": "0.25"}]
    assert holding_amount(holdings, "btc") == pytest.approx(0.25)
    assert holding_amount(holdings, "ETH") == 0.0
