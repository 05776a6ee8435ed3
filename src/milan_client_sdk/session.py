from __future__ import annotations

from dataclasses import dataclass

from .auth_store import AuthStore
from .clients.auth import AuthClient
from .clients.cash_closing_client import CashClosingClient
from .clients.cash_session_client import CashSessionClient
from .config import ClientConfig
from .http_client import HttpClient
from .models import SessionData, TokenResponse, UserResponse
from .tracing import TraceContext


@dataclass
class ApiSession:
    config: ClientConfig
    auth_store: AuthStore | None = None
    trace: TraceContext | None = None
    token: str | None = None
    user: UserResponse | None = None
    http: HttpClient | None = None

    def __post_init__(self) -> None:
        self.auth_store = self.auth_store or AuthStore()
        self.trace = self.trace or TraceContext()
        stored = self.auth_store.load()
        if stored and not self.token and self._same_env(stored.env_name):
            self.token = stored.access_token
            self.user = stored.user

    def _same_env(self, env_name: str | None) -> bool:
        # Tokens are issued per environment and must not follow a MILAN_ENV switch.
        return (env_name or "").lower().strip() == self.config.normalized_env

    def _http(self) -> HttpClient:
        # One pooled transport per session so the GET cache is shared across clients.
        if self.http is None:
            self.http = HttpClient(config=self.config, trace=self.trace)
        return self.http

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def auth_client(self) -> AuthClient:
        return AuthClient(http=self._http(), access_token=self.token)

    def cash_closing_client(self) -> CashClosingClient:
        return CashClosingClient(http=self._http(), access_token=self.token)

    def cash_session_client(self) -> CashSessionClient:
        return CashSessionClient(http=self._http(), access_token=self.token)

    def establish(self, token: TokenResponse, user: UserResponse | None = None) -> None:
        self.token = token.access_token
        self.user = user or token.user
        self._http().clear_cache()
        self.auth_store.save(SessionData(access_token=self.token, user=self.user, env_name=self.config.env_name))

    def clear(self) -> None:
        self.token = None
        self.user = None
        if self.http is not None:
            self.http.clear_cache()
        if self.auth_store:
            self.auth_store.clear()
