"""Custom exceptions raised by services and mapped to HTTP responses."""

from fastapi import status


class ShoplistError(Exception):
    """Base class for errors that carry their own HTTP status."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Bad request"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(ShoplistError):
    """Raised for generic failures, including store errors during writes."""


class NotAuthorizedError(ShoplistError):
    """Raised when authentication or an authorization check fails."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized"


class ForbiddenError(ShoplistError):
    """Raised when an operation is disabled in the current environment."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(ShoplistError):
    """Raised when a referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(ShoplistError):
    """Raised when a unique field is already taken."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class NoContentError(ShoplistError):
    """Raised when a query succeeded but returned nothing."""

    status_code = status.HTTP_204_NO_CONTENT
    default_message = "No content"
