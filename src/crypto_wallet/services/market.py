"""Top-coins listing helpers and balance lookups."""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping

from crypto_wallet.config.constants import DISPLAY_CURRENCY
from crypto_wallet.models.core import CoinOption
from crypto_wallet.services.portfolio import to_number


def coin_option(raw: Mapping[str, Any]) -> CoinOption:
    """Flatten one /crypto/top entry; the quote lives under quote.IDR."""
    quote = (raw.get("quote") or {}).get(DISPLAY_CURRENCY) or {}
    return {
        "symbol": str(raw.get("symbol") or "").upper(),
        "name": str(raw.get("name") or ""),
        "rank": int(to_number(raw.get("cmc_rank"))),
        "price_idr": to_number(quote.get("price")),
        "percent_change_24h": to_number(quote.get("percent_change_24h")),
        "market_cap_idr": to_number(quote.get("market_cap")),
    }


def coin_options(items: Iterable[Any]) -> List[CoinOption]:
    return [coin_option(item) for item in items if isinstance(item, Mapping)]


def filter_coin_options(options: List[CoinOption], query: str) -> List[CoinOption]:
    """Case-insensitive substring search on symbol or name. Blank query keeps everything."""
    q = (query or "").strip().lower()
    if not q:
        return options
    return [o for o in options if q in o["symbol"].lower() or q in o["name"].lower()]


def find_coin(options: List[CoinOption], symbol: str) -> CoinOption | None:
    s = (symbol or "").strip().upper()
    return next((o for o in options if o["symbol"] == s), None)


def idr_balance(balances: Iterable[Mapping[str, Any]]) -> float:
    """Balance of the IDR row, or 0 when there is none."""
    row = next((b for b in balances if b.get("currency") == DISPLAY_CURRENCY), None)
    return to_number(row.get("balance")) if row else 0.0


def holding_amount(holdings: Iterable[Mapping[str, Any]], symbol: str) -> float:
    """Units of symbol currently held (0 if none)."""
    s = (symbol or "").strip().upper()
    row = next((h for h in holdings if str(h.get("symbol") or "").upper() == s), None)
    return to_number(row.get("amount")) if row else 0.0
