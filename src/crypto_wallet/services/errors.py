"""Exceptions raised by the API client, storage and form validation."""

from __future__ import annotations

from typing import Optional

from crypto_wallet.config.constants import NOT_AUTHENTICATED_MESSAGE


class WalletError(Exception):
    """Base class for every error the UI is expected to show to the user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotAuthenticatedError(WalletError):
    """No stored credential, or the server rejected it (HTTP 401)."""

    def __init__(self, message: str = NOT_AUTHENTICATED_MESSAGE) -> None:
        super().__init__(message)


class ApiRequestError(WalletError):
    """The request failed: network error, non-2xx status or unusable body."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidInputError(WalletError, ValueError):
    """User-entered form values were rejected before any request was made."""

    def __init__(self, title: str, message: str) -> None:
        super().__init__(message)
        self.title = title
