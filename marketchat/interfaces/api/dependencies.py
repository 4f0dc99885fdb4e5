"""FastAPI dependency utilities."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from marketchat.domain.entities import User
from marketchat.infrastructure.bkash import BkashClient, BkashConfigurationError
from marketchat.infrastructure.database import get_db
from marketchat.infrastructure.realtime import ChannelPublisher
from marketchat.infrastructure.repositories import UserRepository
from marketchat.infrastructure.security import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def resolve_current_user(token: str, db: Session) -> User:
    """Resolve the authenticated user for the provided token."""

    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise _unauthorized("Invalid credentials") from exc

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise _unauthorized("Invalid credentials")

    user = UserRepository(db).get(user_id)
    if user is None:
        raise _unauthorized("User not found")
    return user


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Return the authenticated user from the provided token."""

    return resolve_current_user(token, db)


def get_publisher(request: Request) -> ChannelPublisher:
    """Return the realtime publisher bound to the running application."""

    return request.app.state.channel_publisher


def load_bkash_client(request: Request) -> BkashClient:
    """Return the shared bKash client, creating it on first use.

    Raises :class:`BkashConfigurationError` when credentials are missing.
    """

    client = getattr(request.app.state, "bkash_client", None)
    if client is None:
        client = BkashClient()
        request.app.state.bkash_client = client
    return client


def get_bkash_client(request: Request) -> BkashClient:
    try:
        return load_bkash_client(request)
    except BkashConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc
