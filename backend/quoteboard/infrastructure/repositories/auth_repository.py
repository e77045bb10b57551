from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quoteboard.domain.auth.constants import ERROR_EMAIL_ALREADY_REGISTERED
from quoteboard.domain.auth.schemas import User, UserCredentials
from quoteboard.infrastructure.db.mappers import user_to_credentials, user_to_domain
from quoteboard.infrastructure.db.models.user import UserModel


class SqlAlchemyAuthRepository:
    """User profiles; the application layer owns the transaction."""

    def __init__(self, *, session: Session) -> None:
        self._session = session

    def create_user(
        self,
        *,
        email: str,
        email_normalized: str,
        password_hash: str,
        display_name: str | None = None,
    ) -> User:
        row = UserModel(
            email=email,
            email_normalized=email_normalized,
            display_name=display_name,
            password_hash=password_hash,
            is_active=True,
        )
        self._session.add(row)
        try:
            self._session.flush()
        except IntegrityError as exc:
            raise ValueError(ERROR_EMAIL_ALREADY_REGISTERED) from exc
        return user_to_domain(row)

    def find_credentials(self, *, email_normalized: str) -> UserCredentials | None:
        row = self._session.scalars(
            select(UserModel).where(UserModel.email_normalized == email_normalized).limit(1)
        ).first()
        return user_to_credentials(row) if row is not None else None

    def get_user(self, *, user_id: int) -> User | None:
        row = self._session.get(UserModel, user_id)
        return user_to_domain(row) if row is not None else None

    def record_sign_in(self, *, user_id: int, display_name: str | None = None) -> User | None:
        """Stamp the sign-in time and merge a newly supplied display name into the profile."""
        row = self._session.get(UserModel, user_id)
        if row is None:
            return None
        row.last_login_at = datetime.now(tz=timezone.utc)
        if display_name:
            row.display_name = display_name
        self._session.flush()
        return user_to_domain(row)
