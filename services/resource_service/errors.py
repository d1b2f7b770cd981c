"""Error taxonomy of the resource service.

Every error serializes to ``{"message": str}`` through the handler registered
in ``main.register_error_handlers``.
"""

from fastapi import status


class ServiceError(Exception):
    """Base class for errors answered with a JSON ``message`` body."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingUserId(ServiceError):
    """The request carried no userId. Raised before the store is touched."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "userId is required"):
        super().__init__(message)


class ValidationError(ServiceError):
    """Malformed request, invalid identifier, or a write the store rejected."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundOrUnauthorized(ServiceError):
    """No document matched the identifier and owner."""

    status_code = status.HTTP_404_NOT_FOUND


class StoreError(ServiceError):
    """Unexpected persistence failure."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class OriginRejected(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Not allowed by CORS"):
        super().__init__(message)
