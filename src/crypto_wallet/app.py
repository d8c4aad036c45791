"""Application bootstrap and core API entrypoints for Crypto Wallet.

Provides a small core API (build_client, login, logout, load_positions,
portfolio_summary) for use by the desktop UI or scripts. The GUI is
launched via main().
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, List, Optional, TypeVar

from crypto_wallet.config.constants import API_BASE_URL, LOG_LEVEL
from crypto_wallet.models.core import PortfolioTotals, PositionRecord, PositionView
from crypto_wallet.services import storage
from crypto_wallet.services.api import ApiClient
from crypto_wallet.services.errors import ApiRequestError, NotAuthenticatedError, WalletError
from crypto_wallet.services.forms import validate_credentials
from crypto_wallet.services.portfolio import PnlMode, aggregate, position_view

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNEXPECTED_ERROR_MESSAGE = "Something went wrong. Please try again."


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def resolve_base_url(settings: Optional[Dict[str, Any]] = None) -> str:
    """Environment variable wins, then the stored setting, then the built-in default."""
    if os.getenv("CRYPTO_WALLET_API_BASE_URL"):
        return API_BASE_URL
    settings = settings if settings is not None else storage.load_settings()
    return (settings.get("api_base_url") or API_BASE_URL).rstrip("/")


def build_client(settings: Optional[Dict[str, Any]] = None) -> ApiClient:
    """Create an ApiClient with the configured base URL and the stored token (if any)."""
    return ApiClient(base_url=resolve_base_url(settings), token=storage.load_token())


def login(client: ApiClient, identifier: str, password: str) -> str:
    """Validate, log in, and persist the token. Raises WalletError on failure."""
    payload = validate_credentials("login", identifier, password)
    token = client.login(payload["identifier"], payload["password"])
    storage.save_token(token)
    logger.info("Logged in as %s", identifier)
    return token


def register(client: ApiClient, email: str, password: str, confirm_password: str) -> Optional[str]:
    """Validate and create an account; persists the token when the server returns one."""
    payload = validate_credentials("register", email, password, confirm_password)
    token = client.register(payload["email"], payload["password"])
    if token:
        storage.save_token(token)
    return token


def logout(client: ApiClient) -> None:
    storage.clear_token()
    client.token = None


def handle_session_error(client: ApiClient, err: WalletError) -> bool:
    """Forget a token the server rejected. Returns True when the user must log in again."""
    if not isinstance(err, NotAuthenticatedError):
        return False
    if client.is_authenticated:
        logger.info("Session rejected by server; clearing stored token")
    logout(client)
    return True


def run_guarded(work: Callable[[], T]) -> T:
    """
    Run work so that only WalletError escapes.

    Any other exception is logged with its traceback and re-raised as a
    generic ApiRequestError.
    """
    try:
        return work()
    except WalletError:
        raise
    except Exception as e:
        logger.exception("Unexpected error in background task")
        raise ApiRequestError(UNEXPECTED_ERROR_MESSAGE) from e


def load_positions(client: ApiClient) -> List[PositionRecord]:
    """Fetch positions. Raises NotAuthenticatedError when no token is stored."""
    return client.get_positions()


def selected_mode(settings: Optional[Dict[str, Any]] = None) -> PnlMode:
    settings = settings if settings is not None else storage.load_settings()
    return PnlMode.coerce(settings.get("pnl_mode"))


def portfolio_summary(
    positions: List[PositionRecord], mode: PnlMode
) -> Dict[str, Any]:
    """Totals plus one view per position, keyed by symbol."""
    totals: PortfolioTotals = aggregate(positions, mode)
    views: Dict[str, PositionView] = {p["symbol"]: position_view(p, mode) for p in positions}
    return {"mode": PnlMode.coerce(mode), "totals": totals, "positions": views}


def main() -> None:
    """Launch the Crypto Wallet Tkinter application."""
    configure_logging()
    from crypto_wallet.ui.main_window import WalletApp  # Deferred so core API is usable without GUI deps

    app = WalletApp()
    app.mainloop()


if __name__ == "__main__":
    main()
