from __future__ import annotations

import base64
import hashlib
import hmac
import json
import os
from datetime import datetime, timedelta, timezone
from typing import Any

from quoteboard.domain.auth.constants import (
    ERROR_INVALID_EMAIL,
    ERROR_INVALID_TOKEN,
    ERROR_PASSWORD_TOO_SHORT,
    ERROR_TOKEN_EXPIRED,
)

PASSWORD_SCHEME = "pbkdf2_sha256"
PASSWORD_ITERATIONS = 390000
PASSWORD_MIN_LENGTH = 8
TOKEN_ALGORITHM = "HS256"


def normalize_email(email: str) -> str:
    normalized = email.strip().lower()
    local, _, domain = normalized.partition("@")
    if not local or not domain:
        raise ValueError(ERROR_INVALID_EMAIL)
    return normalized


def hash_password(password: str) -> str:
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(ERROR_PASSWORD_TOO_SHORT)
    salt = os.urandom(16)
    digest = _pbkdf2(password, salt, PASSWORD_ITERATIONS)
    return "$".join((PASSWORD_SCHEME, str(PASSWORD_ITERATIONS), _encode(salt), _encode(digest)))


def verify_password(password: str, password_hash: str) -> bool:
    parts = password_hash.split("$")
    if len(parts) != 4 or parts[0] != PASSWORD_SCHEME:
        return False
    try:
        iterations = int(parts[1])
        salt = _decode(parts[2])
        expected = _decode(parts[3])
    except ValueError:
        return False
    return hmac.compare_digest(_pbkdf2(password, salt, iterations), expected)


def create_access_token(
    *,
    subject: str,
    secret_key: str,
    expires_delta: timedelta,
    additional_claims: dict[str, Any] | None = None,
) -> str:
    issued_at = datetime.now(tz=timezone.utc)
    claims: dict[str, Any] = dict(additional_claims or {})
    claims.update(
        sub=subject,
        iat=int(issued_at.timestamp()),
        exp=int((issued_at + expires_delta).timestamp()),
    )
    header_segment = _encode_json({"alg": TOKEN_ALGORITHM, "typ": "JWT"})
    claims_segment = _encode_json(claims)
    signature = _sign(f"{header_segment}.{claims_segment}", secret_key)
    return f"{header_segment}.{claims_segment}.{_encode(signature)}"


def decode_access_token(*, token: str, secret_key: str) -> dict[str, Any]:
    segments = token.split(".")
    if len(segments) != 3:
        raise ValueError(ERROR_INVALID_TOKEN)
    header_segment, claims_segment, signature_segment = segments

    try:
        signature = _decode(signature_segment)
    except ValueError as exc:
        raise ValueError(ERROR_INVALID_TOKEN) from exc
    if not hmac.compare_digest(signature, _sign(f"{header_segment}.{claims_segment}", secret_key)):
        raise ValueError(ERROR_INVALID_TOKEN)

    if _decode_json(header_segment).get("alg") != TOKEN_ALGORITHM:
        raise ValueError(ERROR_INVALID_TOKEN)

    claims = _decode_json(claims_segment)
    expires_at = claims.get("exp")
    if not isinstance(expires_at, int):
        raise ValueError(ERROR_INVALID_TOKEN)
    if expires_at <= int(datetime.now(tz=timezone.utc).timestamp()):
        raise ValueError(ERROR_TOKEN_EXPIRED)
    return claims


def _pbkdf2(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def _sign(signing_input: str, secret_key: str) -> bytes:
    return hmac.new(secret_key.encode("utf-8"), signing_input.encode("ascii"), hashlib.sha256).digest()


def _encode(value: bytes) -> str:
    return base64.urlsafe_b64encode(value).rstrip(b"=").decode("ascii")


def _decode(value: str) -> bytes:
    try:
        return base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))
    except (TypeError, ValueError, UnicodeEncodeError) as exc:
        raise ValueError(ERROR_INVALID_TOKEN) from exc


def _encode_json(payload: dict[str, Any]) -> str:
    return _encode(json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8"))


def _decode_json(segment: str) -> dict[str, Any]:
    try:
        data = json.loads(_decode(segment).decode("utf-8"))
    except (ValueError, UnicodeDecodeError) as exc:
        raise ValueError(ERROR_INVALID_TOKEN) from exc
    if not isinstance(data, dict):
        raise ValueError(ERROR_INVALID_TOKEN)
    return data
