"""Error taxonomy raised by the application use cases."""

from __future__ import annotations


class MarketChatError(ValueError):
    """Base class for expected, user-facing failures."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnauthenticatedError(MarketChatError):
    """No valid identity could be resolved for the caller."""

    status_code = 401


class ForbiddenError(MarketChatError):
    """The caller is known but not allowed to touch the resource."""

    status_code = 403


class InvalidArgumentError(MarketChatError):
    """A required field is missing or malformed."""

    status_code = 400


class NotFoundError(MarketChatError):
    """A referenced entity does not exist."""

    status_code = 404


class ConflictError(MarketChatError):
    status_code = 409


class UpstreamUnavailableError(MarketChatError):
    """The database, the realtime transport or the payment provider failed."""

    status_code = 502


__all__ = [
    "MarketChatError",
    "UnauthenticatedError",
    "ForbiddenError",
    "InvalidArgumentError",
    "NotFoundError",
    "ConflictError",
    "UpstreamUnavailableError",
]
