"""Pytest configuration: ensure src is on path when running tests from repo root."""

import sys
from pathlib import Path

import pytest

_root = Path(__file__).resolve().parents[1]
_src = _root / "src"
if _src.is_dir() and str(_src) not in sys.path:
    sys.path.insert(0, str(_src))


@pytest.fixture
def wallet_home(tmp_path, monkeypatch):
    """Point token and settings files at a temporary directory."""
    from crypto_wallet.config import constants

    monkeypatch.setattr(constants, "TOKEN_FILE", str(tmp_path / "auth_token.json"))
    monkeypatch.setattr(constants, "SETTINGS_FILE", str(tmp_path / "settings.json"))
    return tmp_path


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body


class FakeSession:
    """Records requests and replays canned responses (or raises queued exceptions)."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_session():
    def _make(*responses):
        return FakeSession(*responses)

    return _make
