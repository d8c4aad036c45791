"""Tests for the HTTP client (fake session, no network)."""

import pytest
import requests

from conftest import FakeResponse
from crypto_wallet.services.api import ApiClient
from crypto_wallet.services.errors import ApiRequestError, NotAuthenticatedError
from crypto_wallet.services.portfolio import PositionsFeed

BASE = "https://wallet.example.com"


def _client(session, token="tok"):
    return ApiClient(base_url=BASE + "/", token=token, session=session, timeout=3)


def test_base_url_trailing_slash_stripped(fake_session) -> None:
    session = fake_session(FakeResponse(200, {"positions": []}))
    _client(session).get_positions()
    assert session.calls[0]["url"] == f"{BASE}/portfolio/positions"
    assert session.calls[0]["timeout"] == 3


def test_positions_sends_bearer_and_parses(fake_session) -> None:
    body = {
        "positions": [
            {"symbol": "BTC", "current_value_idr": 100, "total_buy_idr": 80, "net_pnl_idr": 20},
        ]
    }
    session = fake_session(FakeResponse(200, body))
    positions = _client(session).get_positions()
    assert session.calls[0]["headers"]["Authorization"] == "Bearer tok"
    assert positions[0]["symbol"] == "BTC"
    assert positions[0]["total_buy"] == 80.0
    assert positions[0]["net_avg_entry_price"] is None


def test_missing_token_raises_without_request(fake_session) -> None:
    """No credential is an error, never an empty list."""
    session = fake_session()
    with pytest.raises(NotAuthenticatedError) as exc:
        _client(session, token=None).get_positions()
    assert exc.value.message == "Not authenticated. Please log in again."
    assert session.calls == []


def test_unauthorized_maps_to_not_authenticated(fake_session) -> None:
    session = fake_session(FakeResponse(401, {"message": "Token expired"}))
    with pytest.raises(NotAuthenticatedError) as exc:
        _client(session).get_balances()
    assert exc.value.message == "Token expired"


def test_server_message_surfaces(fake_session) -> None:
    session = fake_session(FakeResponse(400, {"message": "Insufficient IDR balance"}))
    with pytest.raises(ApiRequestError) as exc:
        _client(session).buy("BTC", spend_idr=1000)
    assert exc.value.message == "Insufficient IDR balance"
    assert exc.value.status_code == 400


def test_default_message_when_body_unusable(fake_session) -> None:
    session = fake_session(FakeResponse(500, None))
    with pytest.raises(ApiRequestError) as exc:
        _client(session).get_positions()
    assert exc.value.message == "Failed to load portfolio."


@pytest.mark.parametrize("body", [None, ["not", "a", "dict"], "ok"])
def test_success_with_unusable_body_is_an_error(fake_session, body) -> None:
    session = fake_session(FakeResponse(200, body))
    with pytest.raises(ApiRequestError) as exc:
        _client(session).get_positions()
    assert exc.value.message == "Failed to load portfolio."
    assert exc.value.status_code == 200


def test_positions_not_a_list_is_an_error(fake_session) -> None:
    session = fake_session(FakeResponse(200, {"positions": {"BTC": 1}}))
    with pytest.raises(ApiRequestError):
        _client(session).get_positions()


def test_missing_positions_key_is_empty(fake_session) -> None:
    session = fake_session(FakeResponse(200, {}))
    assert _client(session).get_positions() == []


@pytest.mark.parametrize("body", [None, ["not", "a", "dict"], {"positions": {"BTC": 1}}])
def test_feed_shows_error_for_malformed_positions(fake_session, body) -> None:
    """A broken payload reaches the portfolio screen as an error, not an empty portfolio."""
    client = _client(fake_session(FakeResponse(200, body)))
    feed = PositionsFeed()
    assert feed.load(client.get_positions)
    assert feed.error == "Failed to load portfolio."
    assert feed.positions == []


def test_network_error_wrapped(fake_session) -> None:
    session = fake_session(requests.ConnectionError("boom"))
    with pytest.raises(ApiRequestError) as exc:
        _client(session).withdraw(5000)
    assert exc.value.message == "Failed to withdraw."
    assert exc.value.status_code is None


def test_login_stores_token_on_client(fake_session) -> None:
    session = fake_session(FakeResponse(200, {"token": "new-token"}))
    client = _client(session, token=None)
    assert client.login("me@example.com", "secret") == "new-token"
    assert client.token == "new-token"
    call = session.calls[0]
    assert call["json"] == {"identifier": "me@example.com", "password": "secret"}
    assert "Authorization" not in call["headers"]


def test_login_without_token_in_body_fails(fake_session) -> None:
    session = fake_session(FakeResponse(200, {}))
    with pytest.raises(ApiRequestError):
        _client(session, token=None).login("me", "secret")


def test_register_optional_token(fake_session) -> None:
    session = fake_session(FakeResponse(201, {"id": 5}))
    client = _client(session, token=None)
    assert client.register("me@example.com", "secret") is None
    assert client.token is None
    assert session.calls[0]["json"] == {"email": "me@example.com", "password": "secret"}


def test_deposit_returns_new_balance(fake_session) -> None:
    session = fake_session(FakeResponse(200, {"new_balance_idr": "1500000"}))
    assert _client(session).deposit(500000) == 1500000.0
    assert session.calls[0]["json"] == {"amount_idr": 500000}
    assert session.calls[0]["url"].endswith("/balance/deposit")


def test_transactions_limit_param(fake_session) -> None:
    session = fake_session(FakeResponse(200, {"transactions": [{"id": 1, "type": "DEPOSIT"}]}))
    transactions = _client(session).list_balance_transactions()
    assert session.calls[0]["params"] == {"limit": 100}
    assert transactions[0]["type"] == "DEPOSIT"


def test_top_coins_is_public(fake_session) -> None:
    session = fake_session(FakeResponse(200, {"data": [{"symbol": "BTC"}], "last_updated": "2024-01-01"}))
    result = _client(session, token=None).top_coins(limit=50)
    assert result == {"data": [{"symbol": "BTC"}], "last_updated": "2024-01-01"}
    assert session.calls[0]["params"] == {"limit": 50}
    assert "Authorization" not in session.calls[0]["headers"]


def test_refresh_prices_posts(fake_session) -> None:
    session = fake_session(FakeResponse(200, None))
    _client(session, token=None).refresh_prices()
    assert session.calls[0]["method"] == "POST"
    assert session.calls[0]["url"] == f"{BASE}/crypto/refresh"


def test_portfolio_defaults_missing_lists(fake_session) -> None:
    session = fake_session(FakeResponse(200, {"balances": [{"currency": "IDR", "balance": 10}]}))
    portfolio = _client(session).get_portfolio()
    assert portfolio["balances"] == [{"currency": "IDR", "balance": 10}]
    assert portfolio["holdings"] == []


def test_buy_payload_variants(fake_session) -> None:
    session = fake_session(
        FakeResponse(200, {"symbol": "BTC", "amount_coin": 0.01, "price_idr": 1e9}),
        FakeResponse(200, {"symbol": "ETH", "amount_coin": 2, "price_idr": 5e7}),
    )
    client = _client(session)
    client.buy("BTC", spend_idr=10_000_000)
    client.buy("ETH", amount_coin=2.0)
    assert session.calls[0]["json"] == {"symbol": "BTC", "spend_idr": 10_000_000}
    assert session.calls[1]["json"] == {"symbol": "ETH", "amount_coin": 2.0}


def test_buy_requires_exactly_one_size(fake_session) -> None:
    client = _client(fake_session())
    with pytest.raises(ValueError):
        client.buy("BTC")
    with pytest.raises(ValueError):
        client.buy("BTC", spend_idr=1, amount_coin=1.0)


def test_sell(fake_session) -> None:
    session = fake_session(FakeResponse(200, {"symbol": "BTC", "amount_coin": 0.5, "price_idr": 1e9}))
    result = _client(session).sell("BTC", 0.5)
    assert result["amount_coin"] == 0.5
    assert session.calls[0]["json"] == {"symbol": "BTC", "amount_coin": 0.5}


def test_profile_update_and_password(fake_session) -> None:
    session = fake_session(FakeResponse(200, {"ok": True}), FakeResponse(200, {"ok": True}))
    client = _client(session)
    client.update_profile("me@example.com", None, "pw")
    client.change_password("old-pw", "new-pw")
    assert session.calls[0]["method"] == "PUT"
    assert session.calls[0]["json"] == {"email": "me@example.com", "username": None, "current_password": "pw"}
    assert session.calls[1]["url"] == f"{BASE}/auth/change-password"
    assert session.calls[1]["json"] == {"current_password": "old-pw", "new_password": "new-pw"}


def test_upload_avatar_multipart(fake_session, tmp_path) -> None:
    image = tmp_path / "me.jpg"
    image.write_bytes(b"\xff\xd8jpeg")
    session = fake_session(FakeResponse(200, {"avatar_url": "/uploads/1.jpg"}))
    _client(session).upload_avatar(str(image))
    assert session.calls[0]["files"] == {"avatar": ("avatar.jpg", b"\xff\xd8jpeg", "image/jpeg")}


def test_upload_avatar_missing_file(fake_session, tmp_path) -> None:
    session = fake_session()
    with pytest.raises(ApiRequestError):
        _client(session).upload_avatar(str(tmp_path / "nope.jpg"))
    assert session.calls == []
