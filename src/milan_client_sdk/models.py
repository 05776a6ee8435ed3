from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    username: str
    password: str


class UserResponse(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: int | str
    username: str
    name: str | None = Field(default=None, alias="nombre")
    email: str | None = None
    role: str | None = None
    is_active: bool | None = Field(default=None, alias="isActive")
    permissions: list[str] = Field(default_factory=list)


class TokenResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    token: str
    user: UserResponse | None = None
    trace_id: str | None = None

    @property
    def access_token(self) -> str:
        return self.token


class ApiEnvelope(BaseModel):
    """Wrapper used by most routes: {"success": ..., "data": ..., "message": ...}."""

    model_config = ConfigDict(extra="allow")

    success: bool
    data: object | None = None
    message: str | None = None
    error: str | None = None


class SessionData(BaseModel):
    access_token: str
    user: Optional[UserResponse] = None
    env_name: str | None = None
