class ExchangeError(Exception):
    """Base exception for all venue REST API errors."""
    retryable = False

    def __init__(self, code: int | None, message: str, api_code: int | str | None = None) -> None:
        self.api_code = api_code
        self.message = message
        self.status_code = code
        if code is None:
            super().__init__(message)
        else:
            super().__init__(f"HTTP {code}: {message}")


# Transient errors (Retryable)
class NetworkError(ExchangeError):
    """Errors that may go away on their own: connectivity, throttling, clock skew."""
    retryable = True


class ExchangeNetworkError(NetworkError):
    """Transport failure: connection refused, reset, timed out."""
    pass


class ExchangeNotAvailable(NetworkError):
    """Venue unavailable or under maintenance (5xx)."""
    pass


class RateLimitExceeded(NetworkError):
    """Rate limit exceeded."""
    def __init__(self, code: int | None, message: str, api_code: int | str | None = None,
                 retry_after: int | None = None) -> None:
        super().__init__(code, message, api_code)
        self.retry_after = retry_after

    def __str__(self):
        return f"RateLimitExceeded: {self.status_code} - {self.message} - {self.api_code} - {self.retry_after}"


class InvalidNonce(NetworkError):
    """Timestamp/nonce rejected - may succeed after resync."""
    pass


# Authentication and Authorization Errors (Non-retryable)
class AuthenticationError(ExchangeError):
    """Missing or invalid credentials, bad signature."""
    pass


class PermissionDenied(AuthenticationError):
    """API key lacks required permissions for endpoint."""
    pass


class AccountSuspended(AuthenticationError):
    """Account frozen or suspended."""
    pass


# Request and Business Logic Errors (Non-retryable)
class BadRequest(ExchangeError):
    """Invalid request parameters - client-side error."""
    pass


class BadSymbol(BadRequest):
    """Invalid or non-existent trading symbol."""
    pass


class InvalidAddress(ExchangeError):
    """Invalid deposit/withdrawal address."""
    pass


class InsufficientFunds(ExchangeError):
    """Insufficient balance for operation."""
    pass


class InvalidOrder(ExchangeError):
    """Order rejected: size, price or type not allowed."""
    pass


class OrderNotFound(InvalidOrder):
    """Order not found for given ID."""
    pass


class NotSupported(ExchangeError):
    """Operation or parameter not supported by the venue."""
    pass
