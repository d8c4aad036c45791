"""Validation of user-entered form values and request payload building.

All functions raise InvalidInputError with a dialog title and message; none
of them touch the network.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Optional

from crypto_wallet.config.constants import MIN_PASSWORD_LENGTH
from crypto_wallet.services.errors import InvalidInputError

_NON_DIGITS = re.compile(r"[^\d]")
_NON_DECIMAL = re.compile(r"[^0-9.]")


def validate_credentials(
    mode: str, email: str, password: str, confirm_password: str = ""
) -> Dict[str, str]:
    """
    Check the login/register form and return the request payload.

    Login sends {identifier, password}; register sends {email, password}.
    """
    is_register = mode == "register"
    if not email or not password or (is_register and not confirm_password):
        raise InvalidInputError("Missing info", "Please fill in all fields.")
    if is_register and password != confirm_password:
        raise InvalidInputError("Error", "Passwords do not match.")
    if is_register:
        return {"email": email, "password": password}
    return {"identifier": email, "password": password}


def validate_password_change(current_password: str, new_password: str, confirm_password: str) -> None:
    if not current_password.strip() or not new_password.strip() or not confirm_password.strip():
        raise InvalidInputError("Invalid input", "All fields are required.")
    if new_password != confirm_password:
        raise InvalidInputError("Invalid input", "New password and confirmation do not match.")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise InvalidInputError(
            "Weak password", f"Please use at least {MIN_PASSWORD_LENGTH} characters."
        )


def validate_profile_update(email: str, username: str, current_password: str) -> Dict[str, Any]:
    """Return {email, username, current_password}; a blank username clears it (None)."""
    if not email.strip():
        raise InvalidInputError("Invalid input", "Email is required.")
    if not current_password.strip():
        raise InvalidInputError(
            "Invalid input", "Please enter your current password to confirm changes."
        )
    cleaned_username: Optional[str] = username.strip() or None
    return {
        "email": email.strip(),
        "username": cleaned_username,
        "current_password": current_password,
    }


def parse_idr_amount(text: str) -> int:
    """Rupiah input: every non-digit (separators, 'Rp', spaces) is dropped."""
    digits = _NON_DIGITS.sub("", text or "")
    return int(digits) if digits else 0


def parse_coin_amount(text: str) -> float:
    """Coin input: thousands commas and other junk dropped; malformed decimals give 0."""
    cleaned = _NON_DECIMAL.sub("", (text or "").replace(",", ""))
    if not cleaned:
        return 0.0
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def validate_balance_amount(text: str, kind: str) -> int:
    """Return the positive rupiah amount for a DEPOSIT or WITHDRAW."""
    amount = parse_idr_amount(text)
    if amount <= 0:
        word = "deposit" if kind.upper() == "DEPOSIT" else "withdrawal"
        raise InvalidInputError("Invalid input", f"Enter a positive {word} amount in IDR.")
    return amount


def normalize_symbol(symbol: str) -> str:
    return (symbol or "").strip().upper()


def build_buy_payload(
    symbol: str, buy_mode: str, spend_text: str = "", amount_text: str = ""
) -> Dict[str, Any]:
    """Payload for /trade/buy: spend_idr in IDR mode, amount_coin in COIN mode."""
    s = normalize_symbol(symbol)
    if buy_mode.upper() == "IDR":
        spend = parse_idr_amount(spend_text)
        if not s or spend <= 0:
            raise InvalidInputError(
                "Invalid input", "Select a symbol and enter amount in IDR to spend."
            )
        return {"symbol": s, "spend_idr": spend}

    amount = parse_coin_amount(amount_text)
    if not s or amount <= 0:
        raise InvalidInputError(
            "Invalid input", "Select a symbol and enter amount of coin to buy."
        )
    return {"symbol": s, "amount_coin": amount}


def build_sell_payload(symbol: str, amount_text: str) -> Dict[str, Any]:
    s = normalize_symbol(symbol)
    amount = parse_coin_amount(amount_text)
    if not s or amount <= 0:
        raise InvalidInputError(
            "Invalid input", "Select a symbol and enter amount of coin to sell."
        )
    return {"symbol": s, "amount_coin": amount}
