"""Helper utilities shared across API route handlers."""

from fastapi import HTTPException, status

from marketchat.domain.errors import MarketChatError, UnauthenticatedError


def to_http_exception(exc: MarketChatError) -> HTTPException:
    """Translate a use case failure into the matching HTTP error."""

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthenticatedError) else None
    return HTTPException(
        status_code=exc.status_code or status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=exc.message,
        headers=headers,
    )
