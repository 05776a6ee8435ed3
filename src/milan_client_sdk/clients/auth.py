from __future__ import annotations

from ..models import LoginRequest, TokenResponse
from .base import BaseClient, unwrap_envelope


class AuthClient(BaseClient):
    def login(self, username: str, password: str) -> TokenResponse:
        payload = LoginRequest(username=username, password=password).model_dump()
        data = unwrap_envelope(
            self.http.request(
                "POST",
                "/auth/login",
                json_body=payload,
                module="auth",
                operation="login",
            )
        )
        if not isinstance(data, dict):
            raise ValueError("Expected login response to be a JSON object")
        return TokenResponse.model_validate(data)
