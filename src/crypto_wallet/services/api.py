"""HTTP client for the wallet server: auth, profile, balance, market, trading, portfolio."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

import requests

from crypto_wallet.config.constants import (
    API_BASE_URL,
    BALANCE_TRANSACTIONS_LIMIT,
    REQUEST_TIMEOUT,
    TOP_COINS_LIMIT,
)
from crypto_wallet.models.core import (
    BalanceRow,
    BalanceTransaction,
    HoldingRow,
    PositionRecord,
    Profile,
    TradeResult,
    TradeRow,
)
from crypto_wallet.services.errors import ApiRequestError, NotAuthenticatedError
from crypto_wallet.services.portfolio import parse_positions, to_number

logger = logging.getLogger(__name__)


class ApiClient:
    """
    Thin request/response wrapper around the wallet server.

    Every method returns the useful part of the JSON body or raises a
    WalletError subclass; requests exceptions never escape.
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self.base_url = (base_url or API_BASE_URL).rstrip("/")
        self.token = token
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def _request(
        self,
        method: str,
        path: str,
        failure_message: str,
        *,
        auth: bool = True,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        allow_empty: bool = False,
    ) -> Dict[str, Any]:
        headers: Dict[str, str] = {}
        if auth:
            if not self.token:
                raise NotAuthenticatedError()
            headers["Authorization"] = f"Bearer {self.token}"

        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method,
                url,
                headers=headers,
                params=params,
                json=json,
                files=files,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise ApiRequestError(failure_message) from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.ok:
            message = body.get("message") if isinstance(body, dict) else None
            logger.info("%s %s returned %s: %s", method, path, response.status_code, message)
            if response.status_code == 401:
                raise NotAuthenticatedError(message or NotAuthenticatedError().message)
            raise ApiRequestError(message or failure_message, response.status_code)

        if isinstance(body, dict):
            return body
        if allow_empty:
            return {}
        logger.warning("%s %s returned %s with an unusable body", method, path, response.status_code)
        raise ApiRequestError(failure_message, response.status_code)

    # --- Auth ---

    def login(self, identifier: str, password: str) -> str:
        """Log in with email or username. Stores and returns the token."""
        data = self._request(
            "POST",
            "/auth/login",
            "Failed to authenticate. Please try again.",
            auth=False,
            json={"identifier": identifier, "password": password},
        )
        token = data.get("token")
        if not token:
            raise ApiRequestError("Failed to authenticate. Please try again.")
        self.token = token
        return token

    def register(self, email: str, password: str) -> Optional[str]:
        """Create an account. Returns the token if the server issued one."""
        data = self._request(
            "POST",
            "/auth/register",
            "Failed to authenticate. Please try again.",
            auth=False,
            json={"email": email, "password": password},
        )
        token = data.get("token")
        if token:
            self.token = token
        return token or None

    def change_password(self, current_password: str, new_password: str) -> Dict[str, Any]:
        return self._request(
            "POST",
            "/auth/change-password",
            "Failed to change password.",
            json={"current_password": current_password, "new_password": new_password},
        )

    # --- Profile ---

    def get_profile(self) -> Profile:
        return self._request("GET", "/user/profile", "Failed to load profile.")  # type: ignore[return-value]

    def update_profile(
        self, email: str, username: Optional[str], current_password: str
    ) -> Dict[str, Any]:
        return self._request(
            "PUT",
            "/user/profile",
            "Failed to update profile.",
            json={"email": email, "username": username, "current_password": current_password},
        )

    def upload_avatar(self, image_path: str) -> Dict[str, Any]:
        """Upload a JPEG avatar from disk as multipart field 'avatar'."""
        try:
            with open(image_path, "rb") as f:
                content = f.read()
        except OSError as e:
            raise ApiRequestError(f"Failed to read image: {os.path.basename(image_path)}") from e
        return self._request(
            "POST",
            "/user/avatar",
            "Failed to upload avatar.",
            files={"avatar": ("avatar.jpg", content, "image/jpeg")},
        )

    # --- Balance ---

    def get_balances(self) -> List[BalanceRow]:
        data = self._request("GET", "/balance", "Failed to load balance.")
        return data.get("balances") or []

    def list_balance_transactions(self, limit: int = BALANCE_TRANSACTIONS_LIMIT) -> List[BalanceTransaction]:
        data = self._request(
            "GET", "/balance/transactions", "Failed to load transactions.", params={"limit": limit}
        )
        return data.get("transactions") or []

    def deposit(self, amount_idr: int) -> float:
        """Deposit rupiah. Returns the new IDR balance."""
        data = self._request(
            "POST", "/balance/deposit", "Failed to deposit.", json={"amount_idr": amount_idr}
        )
        return to_number(data.get("new_balance_idr"))

    def withdraw(self, amount_idr: int) -> float:
        """Withdraw rupiah. Returns the new IDR balance."""
        data = self._request(
            "POST", "/balance/withdraw", "Failed to withdraw.", json={"amount_idr": amount_idr}
        )
        return to_number(data.get("new_balance_idr"))

    # --- Market ---

    def top_coins(self, limit: int = TOP_COINS_LIMIT) -> Dict[str, Any]:
        """Return {'data': [...coins], 'last_updated': str | None}."""
        data = self._request(
            "GET", "/crypto/top", "Failed to load crypto data.", auth=False, params={"limit": limit}
        )
        return {"data": data.get("data") or [], "last_updated": data.get("last_updated")}

    def refresh_prices(self) -> None:
        """Ask the server to pull fresh quotes from its upstream provider."""
        self._request("POST", "/crypto/refresh", "Failed to refresh prices.", auth=False, allow_empty=True)

    # --- Trading ---

    def get_portfolio(self) -> Dict[str, List[Any]]:
        """Return {'balances': [BalanceRow], 'holdings': [HoldingRow]}."""
        data = self._request("GET", "/portfolio", "Failed to load portfolio.")
        balances: List[BalanceRow] = data.get("balances") or []
        holdings: List[HoldingRow] = data.get("holdings") or []
        return {"balances": balances, "holdings": holdings}

    def list_trades(self) -> List[TradeRow]:
        data = self._request("GET", "/trades", "Failed to load trades.")
        return data.get("trades") or []

    def buy(
        self,
        symbol: str,
        spend_idr: Optional[int] = None,
        amount_coin: Optional[float] = None,
    ) -> TradeResult:
        """Market buy sized either by rupiah to spend or by coin amount (exactly one)."""
        if (spend_idr is None) == (amount_coin is None):
            raise ValueError("Pass exactly one of spend_idr or amount_coin")
        payload: Dict[str, Any] = {"symbol": symbol}
        if spend_idr is not None:
            payload["spend_idr"] = spend_idr
        else:
            payload["amount_coin"] = amount_coin
        return self._request("POST", "/trade/buy", "Failed to buy.", json=payload)  # type: ignore[return-value]

    def sell(self, symbol: str, amount_coin: float) -> TradeResult:
        return self._request(  # type: ignore[return-value]
            "POST",
            "/trade/sell",
            "Failed to sell.",
            json={"symbol": symbol, "amount_coin": amount_coin},
        )

    # --- Portfolio positions ---

    def get_positions(self) -> List[PositionRecord]:
        """Fetch per-symbol positions with both accounting views."""
        data = self._request("GET", "/portfolio/positions", "Failed to load portfolio.")
        raw = data.get("positions")
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Positions payload is %s, not a list", type(raw).__name__)
            raise ApiRequestError("Failed to load portfolio.")
        return parse_positions(raw)
