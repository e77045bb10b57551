from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class User(BaseModel):
    id: int
    email: str
    display_name: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    last_login_at: datetime | None = None


class UserCredentials(User):
    email_normalized: str
    password_hash: str


class AccessToken(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class Identity(BaseModel):
    """Signed-in user handle shared by the session tracker and the dashboard."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    email: str
    display_name: str | None = None

    @classmethod
    def from_user(cls, user: User) -> "Identity":
        return cls(user_id=user.id, email=user.email, display_name=user.display_name)
