"""Signing helpers for access tokens and scoped realtime tokens."""

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from marketchat.config import get_settings

ALGORITHM = "HS256"
TOKEN_TYPE_ACCESS = "access"
TOKEN_TYPE_CHANNEL = "channel"

settings = get_settings()


def _encode(claims: dict[str, Any], expires_delta: timedelta) -> tuple[str, datetime]:
    expire = datetime.now(timezone.utc) + expires_delta
    token = jwt.encode({**claims, "exp": expire}, settings.secret_key, algorithm=ALGORITHM)
    return token, expire


def _decode(token: str, expected_type: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc
    if payload.get("typ", TOKEN_TYPE_ACCESS) != expected_type:
        raise ValueError("Could not validate credentials")
    return payload


# ---- Access tokens (minted by the auth provider with the shared secret) ----


def create_access_token(user_id: str, expires_delta: timedelta | None = None) -> str:
    token, _ = _encode(
        {"sub": user_id, "typ": TOKEN_TYPE_ACCESS},
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes),
    )
    return token


def decode_access_token(token: str) -> dict[str, Any]:
    return _decode(token, TOKEN_TYPE_ACCESS)


# ---- Realtime channel tokens ----


def create_channel_token(
    client_id: str, capabilities: dict[str, list[str]], ttl_seconds: int
) -> tuple[str, datetime]:
    """Sign a token that restricts ``client_id`` to ``capabilities``."""

    return _encode(
        {"sub": client_id, "typ": TOKEN_TYPE_CHANNEL, "cap": capabilities},
        timedelta(seconds=ttl_seconds),
    )


def decode_channel_token(token: str) -> dict[str, Any]:
    payload = _decode(token, TOKEN_TYPE_CHANNEL)
    if not payload.get("sub") or not isinstance(payload.get("cap"), dict):
        raise ValueError("Could not validate credentials")
    return payload


__all__ = [
    "create_access_token",
    "create_channel_token",
    "decode_access_token",
    "decode_channel_token",
]
