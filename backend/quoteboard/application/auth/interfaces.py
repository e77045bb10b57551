from __future__ import annotations

from typing import Protocol

from quoteboard.domain.auth.schemas import AccessToken, Identity, User


class AuthApplicationService(Protocol):
    def register(self, *, email: str, password: str, display_name: str | None = None) -> User: ...

    def login(self, *, email: str, password: str, display_name: str | None = None) -> AccessToken: ...

    def get_user(self, *, user_id: int) -> User | None: ...

    def get_current_user_from_token(self, *, token: str) -> User: ...

    def get_identity_from_token(self, *, token: str) -> Identity: ...
