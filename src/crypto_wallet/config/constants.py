"""Global configuration constants for Crypto Wallet.

These values are intentionally free of any UI / Tkinter concerns so they
can be reused by services, scripts, and the desktop application.
"""

from __future__ import annotations

import os
from pathlib import Path

# API endpoint (trailing slashes stripped so paths can be appended directly)
DEFAULT_API_BASE_URL = "https://bpp-server-production.up.railway.app"
API_BASE_URL = os.getenv("CRYPTO_WALLET_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/")

# Seconds before an HTTP request is abandoned
REQUEST_TIMEOUT = float(os.getenv("CRYPTO_WALLET_TIMEOUT", "10"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# --- File paths ---
DATA_DIR = Path(os.getenv("CRYPTO_WALLET_HOME", str(Path.home() / ".crypto_wallet")))
TOKEN_FILE = str(DATA_DIR / "auth_token.json")
SETTINGS_FILE = str(DATA_DIR / "settings.json")

# Everything is priced and settled in rupiah
DISPLAY_CURRENCY = "IDR"

# Listing sizes requested from the server
TOP_COINS_LIMIT = 200
BALANCE_TRANSACTIONS_LIMIT = 100

MIN_PASSWORD_LENGTH = 6

NOT_AUTHENTICATED_MESSAGE = "Not authenticated. Please log in again."

DEFAULT_SETTINGS = {
    "pnl_mode": "NET",
    "api_base_url": None,
}
