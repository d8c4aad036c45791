"""Typed structures for server records and derived portfolio figures."""

from __future__ import annotations

from typing import Optional, TypedDict


class PositionRecord(TypedDict):
    """One held symbol as returned by parse_position (plain, non-wire names)."""

    symbol: str
    amount: float
    current_price: float
    current_value: float
    total_buy: float
    total_sell: float
    # Net (lifetime) accounting
    net_invested: float
    net_pnl: float
    net_pnl_percent: float
    net_avg_entry_price: Optional[float]
    # Broker (open lots) accounting
    broker_cost_basis: float
    broker_avg_entry_price: Optional[float]
    broker_realized_pnl: float
    broker_unrealized_pnl: float
    broker_unrealized_pnl_percent: float


class PortfolioTotals(TypedDict):
    """Portfolio-level totals as returned by aggregate."""

    total_value: float
    base: float
    pnl_value: float
    pnl_percent: float
    realized_total: float


class PositionView(TypedDict):
    """Mode-specific display values for one position."""

    pnl_value: float
    pnl_percent: float
    avg_entry_price: Optional[float]
    sign: str
    mode_label: str


class BalanceRow(TypedDict, total=False):
    currency: str
    balance: float


class BalanceTransaction(TypedDict, total=False):
    id: int
    type: str
    currency: str
    amount: float
    balance_after: float
    created_at: str


class HoldingRow(TypedDict, total=False):
    symbol: str
    amount: float


class TradeRow(TypedDict, total=False):
    id: int
    symbol: str
    side: str
    amount: float
    price_idr: float
    notional_idr: float
    created_at: str


class TradeResult(TypedDict, total=False):
    """Body of a successful buy or sell."""

    symbol: str
    amount_coin: float
    price_idr: float


class CoinOption(TypedDict):
    """One entry of the top-coins listing, with the IDR quote flattened."""

    symbol: str
    name: str
    rank: int
    price_idr: float
    percent_change_24h: float
    market_cap_idr: float


class Profile(TypedDict, total=False):
    id: int
    email: str
    username: Optional[str]
    avatar_url: Optional[str]
    created_at: str
