"""Portfolio P&L aggregation under the NET and BROKER accounting views (pure functions).

NET uses lifetime buys and lifetime P&L whether or not the position is still
open. BROKER uses the cost basis of open lots, with realized P&L from closed
lots reported separately. The server computes both views for every position;
this module only selects and sums them.
"""

from __future__ import annotations

import logging
import math
import threading
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from crypto_wallet.models.core import PortfolioTotals, PositionRecord, PositionView
from crypto_wallet.services.errors import WalletError

logger = logging.getLogger(__name__)


class PnlMode(str, Enum):
    NET = "NET"
    BROKER = "BROKER"

    @classmethod
    def coerce(cls, value: Any) -> "PnlMode":
        """Return the mode named by value (member or case-insensitive string); NET otherwise."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.NET


class _ModeFields(NamedTuple):
    base: str
    pnl: str
    realized: Optional[str]
    pnl_percent: str
    avg_entry: str
    label: str


_MODE_FIELDS: Dict[PnlMode, _ModeFields] = {
    PnlMode.NET: _ModeFields(
        base="total_buy",
        pnl="net_pnl",
        realized=None,
        pnl_percent="net_pnl_percent",
        avg_entry="net_avg_entry_price",
        label="Net",
    ),
    PnlMode.BROKER: _ModeFields(
        base="broker_cost_basis",
        pnl="broker_unrealized_pnl",
        realized="broker_realized_pnl",
        pnl_percent="broker_unrealized_pnl_percent",
        avg_entry="broker_avg_entry_price",
        label="Broker",
    ),
}

_SUMMARY_LABELS: Dict[PnlMode, Tuple[str, str]] = {
    PnlMode.NET: ("Total cost (lifetime)", "P&L (lifetime, all trades)"),
    PnlMode.BROKER: ("Cost basis (open positions)", "Unrealized P&L (open positions)"),
}

REALIZED_LABEL = "Realized P&L (all time)"

# Plain field name -> key used by the positions endpoint
WIRE_FIELDS: Dict[str, str] = {
    "amount": "amount",
    "current_price": "current_price_idr",
    "current_value": "current_value_idr",
    "total_buy": "total_buy_idr",
    "total_sell": "total_sell_idr",
    "net_invested": "net_invested_idr",
    "net_pnl": "net_pnl_idr",
    "net_pnl_percent": "net_pnl_percent",
    "broker_cost_basis": "broker_cost_basis_idr",
    "broker_realized_pnl": "broker_realized_pnl_idr",
    "broker_unrealized_pnl": "broker_unrealized_pnl_idr",
    "broker_unrealized_pnl_percent": "broker_unrealized_pnl_percent",
}
NULLABLE_WIRE_FIELDS: Dict[str, str] = {
    "net_avg_entry_price": "net_avg_entry_price_idr",
    "broker_avg_entry_price": "broker_avg_entry_price_idr",
}


def to_number(value: Any, default: float = 0.0) -> float:
    """
    Coerce a loosely typed JSON value to float.

    None, bools, non-numeric strings, NaN and infinities give default;
    numeric strings are parsed.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(result) or math.isinf(result):
        return default
    return result


def to_optional_number(value: Any) -> Optional[float]:
    """Like to_number, but absent or invalid values stay None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def _pick(raw: Mapping[str, Any], plain: str, wire: str) -> Any:
    if wire in raw:
        return raw[wire]
    return raw.get(plain)


def parse_position(raw: Mapping[str, Any]) -> PositionRecord:
    """Build a PositionRecord from one element of the positions payload."""
    record: Dict[str, Any] = {"symbol": str(raw.get("symbol") or "").strip().upper()}
    for plain, wire in WIRE_FIELDS.items():
        record[plain] = to_number(_pick(raw, plain, wire))
    for plain, wire in NULLABLE_WIRE_FIELDS.items():
        record[plain] = to_optional_number(_pick(raw, plain, wire))
    return record  # type: ignore[return-value]


def parse_positions(items: Any) -> List[PositionRecord]:
    """Parse a positions list; non-dict entries are skipped."""
    if not isinstance(items, list):
        return []
    positions: List[PositionRecord] = []
    for item in items:
        if not isinstance(item, Mapping):
            logger.warning("Skipping malformed position entry: %r", item)
            continue
        positions.append(parse_position(item))
    return positions


def aggregate(positions: Sequence[Mapping[str, Any]], mode: PnlMode) -> PortfolioTotals:
    """
    Compute portfolio totals for the selected accounting view.

    Single pass over positions; the input is never mutated. Missing or
    non-numeric fields count as zero. A non-positive base gives a zero
    percentage rather than a division error.
    """
    fields = _MODE_FIELDS[PnlMode.coerce(mode)]

    total_value = 0.0
    base = 0.0
    pnl_value = 0.0
    realized_total = 0.0
    for p in positions:
        total_value += to_number(p.get("current_value"))
        base += to_number(p.get(fields.base))
        pnl_value += to_number(p.get(fields.pnl))
        if fields.realized:
            realized_total += to_number(p.get(fields.realized))

    pnl_percent = (pnl_value / base) * 100.0 if base > 0 else 0.0
    return {
        "total_value": total_value,
        "base": base,
        "pnl_value": pnl_value,
        "pnl_percent": pnl_percent,
        "realized_total": realized_total,
    }


def sign_for(value: float) -> str:
    """Zero counts as a gain."""
    return "+" if value >= 0 else "-"


def position_view(position: Mapping[str, Any], mode: PnlMode) -> PositionView:
    """Return the P&L, percentage, average entry price and sign shown for one position."""
    fields = _MODE_FIELDS[PnlMode.coerce(mode)]
    pnl_value = to_number(position.get(fields.pnl))
    return {
        "pnl_value": pnl_value,
        "pnl_percent": to_number(position.get(fields.pnl_percent)),
        "avg_entry_price": to_optional_number(position.get(fields.avg_entry)),
        "sign": sign_for(pnl_value),
        "mode_label": fields.label,
    }


def summary_labels(mode: PnlMode) -> Tuple[str, str]:
    """Captions for the (base, P&L) rows of the summary card."""
    return _SUMMARY_LABELS[PnlMode.coerce(mode)]


def show_realized(mode: PnlMode) -> bool:
    return PnlMode.coerce(mode) is PnlMode.BROKER


class PositionsFeed:
    """
    Latest position snapshot for the portfolio screen.

    Each load gets an increasing request id. Only the most recent request may
    replace the snapshot or set the error, so a slow response that completes
    after a newer one is dropped. A failure empties the snapshot: the screen
    shows either positions or an error, never both.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest = 0
        self._positions: List[PositionRecord] = []
        self._failure: Optional[WalletError] = None

    @property
    def positions(self) -> List[PositionRecord]:
        with self._lock:
            return list(self._positions)

    @property
    def failure(self) -> Optional[WalletError]:
        with self._lock:
            return self._failure

    @property
    def error(self) -> Optional[str]:
        failure = self.failure
        return failure.message if failure is not None else None

    def begin(self) -> int:
        with self._lock:
            self._latest += 1
            return self._latest

    def complete(self, request_id: int, positions: List[PositionRecord]) -> bool:
        with self._lock:
            if request_id != self._latest:
                logger.debug("Dropping stale positions response %s (latest %s)", request_id, self._latest)
                return False
            self._positions = list(positions)
            self._failure = None
            return True

    def fail(self, request_id: int, error: WalletError) -> bool:
        with self._lock:
            if request_id != self._latest:
                return False
            self._positions = []
            self._failure = error
            return True

    def load(self, fetch: Callable[[], List[PositionRecord]]) -> bool:
        """Fetch and store positions. Returns True if this call's result was applied."""
        request_id = self.begin()
        try:
            positions = fetch()
        except WalletError as e:
            logger.warning("Loading positions failed: %s", e.message)
            return self.fail(request_id, e)
        return self.complete(request_id, positions)

    def totals(self, mode: PnlMode) -> PortfolioTotals:
        return aggregate(self.positions, mode)
