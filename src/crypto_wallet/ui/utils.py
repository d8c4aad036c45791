"""Shared display helpers: rupiah/percent formatting, value colors, profile captions."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from crypto_wallet.services.portfolio import sign_for, to_number
from crypto_wallet.theming.style import COLOR_NEGATIVE, COLOR_POSITIVE, TEXT_MUTED


def color_for_value(value: Optional[float]) -> str:
    """
    Return foreground color for a numeric value (P&L, percent change, etc.).

    Returns:
        COLOR_POSITIVE if value > 0, COLOR_NEGATIVE if value < 0,
        TEXT_MUTED if value is None, non-numeric or exactly zero.
    """
    if value is None:
        return TEXT_MUTED
    try:
        v = float(value)
    except (TypeError, ValueError):
        return TEXT_MUTED
    if v > 0:
        return COLOR_POSITIVE
    if v < 0:
        return COLOR_NEGATIVE
    return TEXT_MUTED


def format_idr(value: Any) -> str:
    """Whole rupiah with '.' thousands separators, e.g. 'Rp 1.234.567' or '-Rp 5.000'."""
    amount = int(round(to_number(value)))
    grouped = f"{abs(amount):,}".replace(",", ".")
    return f"-Rp {grouped}" if amount < 0 else f"Rp {grouped}"


def format_signed_idr(value: Any) -> str:
    """'+Rp 1.000' / '-Rp 1.000'; zero gets '+'."""
    v = to_number(value)
    return f"{sign_for(v)}{format_idr(abs(v))}"


def format_percent(value: Any, signed: bool = True) -> str:
    v = to_number(value)
    if not signed:
        return f"{v:.2f}%"
    return f"{'+' if v >= 0 else ''}{v:.2f}%"


def format_coin_amount(value: Any) -> str:
    return f"{to_number(value):.8f}"


def format_market_cap(value: Any) -> str:
    """Market cap in trillions of rupiah."""
    return f"{to_number(value) / 1_000_000_000_000:.2f} T IDR"


def _parse_created_at(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, str) and raw:
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return datetime.now()
        # Shown in local time like the rest of the UI
        return parsed.astimezone() if parsed.tzinfo else parsed
    return datetime.now()


def display_name(profile: Optional[Mapping[str, Any]]) -> str:
    """
    Username if set, else a placeholder 'user#YYYYMMDDHHMMSSxxx' built from
    the account creation time and the last three digits of the id.
    """
    if not profile:
        return "User"
    username = profile.get("username")
    if username and str(username).strip():
        return str(username).strip()
    created = _parse_created_at(profile.get("created_at"))
    suffix = str(int(to_number(profile.get("id"))) % 1000 or 1).zfill(3)
    return f"user#{created.strftime('%Y%m%d%H%M%S')}{suffix}"


def avatar_initial(name: str) -> str:
    stripped = (name or "").strip()
    return stripped[0].upper() if stripped else "U"


def resolve_avatar_url(avatar_url: Optional[str], base_url: str) -> Optional[str]:
    """Absolute URLs pass through; server-relative paths get the API base prefix."""
    if not avatar_url:
        return None
    if avatar_url.startswith("http"):
        return avatar_url
    return f"{base_url.rstrip('/')}{avatar_url}"
