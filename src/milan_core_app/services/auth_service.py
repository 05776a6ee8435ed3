from __future__ import annotations

import logging

from milan_client_sdk import ApiSession
from milan_client_sdk.models import TokenResponse

from .errors import normalize_error

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, session: ApiSession) -> None:
        self.session = session

    def has_active_session(self) -> bool:
        return self.session.is_authenticated

    def login(self, username: str, password: str) -> TokenResponse:
        logger.info("login_attempt", extra={"username": username})
        try:
            token = self.session.auth_client().login(username, password)
        except Exception as exc:
            logger.exception("login_failure", extra={"username": username})
            raise normalize_error(exc, fallback="Login failed") from exc
        self.session.establish(token)
        logger.info("login_success", extra={"username": username})
        return token

    def logout(self) -> None:
        logger.info("logout")
        self.session.clear()
