from __future__ import annotations

import responses

from milan_client_sdk import load_config
from milan_client_sdk.auth_store import AuthStore
from milan_client_sdk.models import SessionData, TokenResponse, UserResponse
from milan_client_sdk.session import ApiSession

BASE = "https://api.example.com"


def test_session_restores_stored_token(tmp_path) -> None:
    store = AuthStore(base_dir=tmp_path)
    store.save(SessionData(access_token="jwt-stored", user=UserResponse(id=1, username="caja1"), env_name="dev"))

    session = ApiSession(load_config(), auth_store=store)
    assert session.is_authenticated
    assert session.token == "jwt-stored"
    assert session.cash_closing_client().access_token == "jwt-stored"


def test_session_from_other_env_is_ignored(tmp_path, monkeypatch) -> None:
    store = AuthStore(base_dir=tmp_path)
    store.save(SessionData(access_token="jwt-dev", user=UserResponse(id=1, username="caja1"), env_name="dev"))
    monkeypatch.setenv("MILAN_ENV", "prod")
    monkeypatch.setenv("MILAN_API_BASE_URL_PROD", "https://api.milan.example.com")

    session = ApiSession(load_config(), auth_store=store)
    assert not session.is_authenticated
    assert session.user is None
    assert session.cash_closing_client().access_token is None


def test_clients_share_one_transport(tmp_path) -> None:
    session = ApiSession(load_config(), auth_store=AuthStore(base_dir=tmp_path))
    assert session.cash_closing_client().http is session.cash_session_client().http
    assert session.auth_client().access_token is None


@responses.activate
def test_establish_persists_and_clears_cache(tmp_path) -> None:
    store = AuthStore(base_dir=tmp_path)
    session = ApiSession(load_config(), auth_store=store)
    responses.add(responses.GET, f"{BASE}/cash-closing", json=[], status=200)
    session.cash_closing_client().list_closings()
    assert session.http is not None
    assert len(session.http.cache) == 1

    session.establish(TokenResponse(token="jwt-new", user=UserResponse(id=2, username="admin")))
    assert len(session.http.cache) == 0
    stored = store.load()
    assert stored is not None
    assert stored.access_token == "jwt-new"
    assert stored.env_name == "dev"

    session.clear()
    assert not session.is_authenticated
    assert store.load() is None
