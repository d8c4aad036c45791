"""Tests for app core API (build_client, login, logout, portfolio_summary, background helpers)."""

import logging

import pytest

from conftest import FakeResponse
from crypto_wallet import app
from crypto_wallet.services import storage
from crypto_wallet.services.api import ApiClient
from crypto_wallet.services.errors import ApiRequestError, InvalidInputError, NotAuthenticatedError
from crypto_wallet.services.portfolio import PnlMode, parse_position


def test_build_client_uses_stored_token(wallet_home, monkeypatch) -> None:
    monkeypatch.delenv("CRYPTO_WALLET_API_BASE_URL", raising=False)
    storage.save_token("stored")
    client = app.build_client({"api_base_url": "http://localhost:3000/"})
    assert client.token == "stored"
    assert client.base_url == "http://localhost:3000"


def test_build_client_without_token(wallet_home) -> None:
    client = app.build_client()
    assert not client.is_authenticated
    with pytest.raises(NotAuthenticatedError):
        app.load_positions(client)


def test_login_persists_token(wallet_home, fake_session) -> None:
    client = ApiClient(base_url="http://x", session=fake_session(FakeResponse(200, {"token": "t1"})))
    assert app.login(client, "me@example.com", "pw") == "t1"
    assert storage.load_token() == "t1"


def test_login_validates_before_request(wallet_home, fake_session) -> None:
    session = fake_session()
    client = ApiClient(base_url="http://x", session=session)
    with pytest.raises(InvalidInputError):
        app.login(client, "", "pw")
    assert session.calls == []


def test_logout_clears_token(wallet_home) -> None:
    storage.save_token("t1")
    client = ApiClient(base_url="http://x", token="t1")
    app.logout(client)
    assert client.token is None
    assert storage.load_token() is None


def test_selected_mode_from_settings(wallet_home) -> None:
    assert app.selected_mode() is PnlMode.NET
    storage.update_setting("pnl_mode", "BROKER")
    assert app.selected_mode() is PnlMode.BROKER


def test_portfolio_summary() -> None:
    positions = [
        parse_position({"symbol": "BTC", "current_value_idr": 100, "total_buy_idr": 80, "net_pnl_idr": 20,
                        "broker_cost_basis_idr": 50, "broker_unrealized_pnl_idr": 10,
                        "broker_realized_pnl_idr": 5, "broker_avg_entry_price_idr": None}),
    ]
    summary = app.portfolio_summary(positions, "BROKER")
    assert summary["mode"] is PnlMode.BROKER
    assert summary["totals"]["pnl_percent"] == pytest.approx(20.0)
    assert summary["totals"]["realized_total"] == pytest.approx(5.0)
    assert summary["positions"]["BTC"]["avg_entry_price"] is None
    assert summary["positions"]["BTC"]["sign"] == "+"


def test_rejected_session_clears_token(wallet_home, fake_session) -> None:
    storage.save_token("expired")
    client = ApiClient(base_url="http://x", token="expired",
                       session=fake_session(FakeResponse(401, {"message": "Token expired"})))
    with pytest.raises(NotAuthenticatedError) as exc:
        client.get_profile()
    assert app.handle_session_error(client, exc.value)
    assert client.token is None
    assert storage.load_token() is None


def test_other_errors_keep_session(wallet_home) -> None:
    storage.save_token("t1")
    client = ApiClient(base_url="http://x", token="t1")
    assert not app.handle_session_error(client, ApiRequestError("Failed to load profile.", 500))
    assert not app.handle_session_error(client, InvalidInputError("Input Error", "Enter an amount."))
    assert client.token == "t1"
    assert storage.load_token() == "t1"


def test_run_guarded_returns_result() -> None:
    assert app.run_guarded(lambda: 42) == 42


def test_run_guarded_passes_wallet_errors_through() -> None:
    err = ApiRequestError("Failed to withdraw.", 400)

    def work():
        raise err

    with pytest.raises(ApiRequestError) as exc:
        app.run_guarded(work)
    assert exc.value is err


def test_run_guarded_wraps_unexpected_errors(caplog) -> None:
    def work():
        raise KeyError("balances")

    with caplog.at_level(logging.ERROR, logger="crypto_wallet.app"):
        with pytest.raises(ApiRequestError) as exc:
            app.run_guarded(work)
    assert exc.value.message == app.UNEXPECTED_ERROR_MESSAGE
    assert exc.value.status_code is None
    assert isinstance(exc.value.__cause__, KeyError)
    assert "Unexpected error in background task" in caplog.text
