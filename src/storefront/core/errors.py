"""Domain errors raised by services and rendered by the HTTP layer."""


class StorefrontError(Exception):
    """Base class for errors that map onto an HTTP status code."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(StorefrontError):
    status_code = 400


class AuthenticationError(StorefrontError):
    status_code = 401


class PermissionDeniedError(StorefrontError):
    status_code = 403


class NotFoundError(StorefrontError):
    status_code = 404


class ConflictError(StorefrontError):
    status_code = 409


class InsufficientStockError(ConflictError):
    def __init__(self, product_name: str) -> None:
        super().__init__(f"Insufficient stock for {product_name}")
        self.product_name = product_name


class PaymentGatewayError(StorefrontError):
    """A payment provider rejected a request or could not be reached."""

    status_code = 500
