from __future__ import annotations

from datetime import timedelta

from quoteboard.application.auth.interfaces import AuthApplicationService
from quoteboard.core.config import settings
from quoteboard.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    normalize_email,
    verify_password,
)
from quoteboard.domain.auth.constants import (
    ERROR_EMAIL_ALREADY_REGISTERED,
    ERROR_INVALID_EMAIL_OR_PASSWORD,
    ERROR_INVALID_TOKEN,
    ERROR_INVALID_USER_ID,
    ERROR_USER_INACTIVE,
)
from quoteboard.domain.auth.schemas import AccessToken, Identity, User
from quoteboard.infrastructure.db.uow import SqlAlchemyUnitOfWork

SECONDS_PER_DAY = 24 * 60 * 60


class DefaultAuthApplicationService(AuthApplicationService):
    """Identity provider for the dashboard: email/password accounts and bearer tokens."""

    def __init__(self, *, uow: SqlAlchemyUnitOfWork) -> None:
        self._uow = uow

    def register(self, *, email: str, password: str, display_name: str | None = None) -> User:
        email_normalized = normalize_email(email)
        password_hash = hash_password(password)
        with self._uow as uow:
            if uow.auth_repo.find_credentials(email_normalized=email_normalized) is not None:
                raise ValueError(ERROR_EMAIL_ALREADY_REGISTERED)
            user = uow.auth_repo.create_user(
                email=email.strip(),
                email_normalized=email_normalized,
                password_hash=password_hash,
                display_name=_clean_display_name(display_name),
            )
            uow.commit()
        return user

    def login(self, *, email: str, password: str, display_name: str | None = None) -> AccessToken:
        email_normalized = normalize_email(email)
        with self._uow as uow:
            credentials = uow.auth_repo.find_credentials(email_normalized=email_normalized)
            if credentials is None or not verify_password(password, credentials.password_hash):
                raise ValueError(ERROR_INVALID_EMAIL_OR_PASSWORD)
            if not credentials.is_active:
                raise ValueError(ERROR_USER_INACTIVE)
            user = uow.auth_repo.record_sign_in(
                user_id=credentials.id,
                display_name=_clean_display_name(display_name),
            )
            uow.commit()
        if user is None:
            raise ValueError(ERROR_INVALID_EMAIL_OR_PASSWORD)
        return _issue_token(user)

    def get_user(self, *, user_id: int) -> User | None:
        if user_id < 1:
            raise ValueError(ERROR_INVALID_USER_ID)
        with self._uow as uow:
            return uow.auth_repo.get_user(user_id=user_id)

    def get_current_user_from_token(self, *, token: str) -> User:
        claims = decode_access_token(token=token, secret_key=settings.app_secret_key)
        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject.isdigit():
            raise ValueError(ERROR_INVALID_TOKEN)

        user = self.get_user(user_id=int(subject))
        if user is None or not user.is_active:
            raise ValueError(ERROR_INVALID_TOKEN)
        return user

    def get_identity_from_token(self, *, token: str) -> Identity:
        return Identity.from_user(self.get_current_user_from_token(token=token))


def _issue_token(user: User) -> AccessToken:
    expires_in = settings.auth_access_token_expire_days * SECONDS_PER_DAY
    token = create_access_token(
        subject=str(user.id),
        secret_key=settings.app_secret_key,
        expires_delta=timedelta(seconds=expires_in),
        additional_claims={"name": user.display_name} if user.display_name else None,
    )
    return AccessToken(access_token=token, expires_in=expires_in)


def _clean_display_name(display_name: str | None) -> str | None:
    if display_name is None:
        return None
    cleaned = " ".join(display_name.split())
    return cleaned or None
