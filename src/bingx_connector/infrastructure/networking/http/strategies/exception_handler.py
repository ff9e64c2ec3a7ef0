"""
Exception Handler Strategy

Turns a venue response (HTTP status + body) into a classified error.
Venues supply three tables; the lookup policy lives here:

    exact venue code -> broad message substring -> HTTP status -> ExchangeError

Classification never raises. Callers convert the result with
``ClassifiedError.to_exception()`` and raise it themselves.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Type

import msgspec

from ....exceptions import exchange as errors


class ErrorKind(Enum):
    AUTHENTICATION = "AuthenticationError"
    PERMISSION_DENIED = "PermissionDenied"
    ACCOUNT_SUSPENDED = "AccountSuspended"
    RATE_LIMIT = "RateLimitExceeded"
    INVALID_NONCE = "InvalidNonce"
    INVALID_ADDRESS = "InvalidAddress"
    INSUFFICIENT_FUNDS = "InsufficientFunds"
    INVALID_ORDER = "InvalidOrder"
    ORDER_NOT_FOUND = "OrderNotFound"
    BAD_SYMBOL = "BadSymbol"
    BAD_REQUEST = "BadRequest"
    NOT_SUPPORTED = "NotSupported"
    EXCHANGE_NOT_AVAILABLE = "ExchangeNotAvailable"
    EXCHANGE_ERROR = "ExchangeError"

    @property
    def exception_class(self) -> Type[errors.ExchangeError]:
        return getattr(errors, self.value)


class ClassifiedError(msgspec.Struct, frozen=True):
    kind: ErrorKind
    message: str
    http_status: Optional[int] = None
    venue_code: Optional[str] = None

    @property
    def retryable(self) -> bool:
        return self.kind.exception_class.retryable

    def to_exception(self) -> errors.ExchangeError:
        return self.kind.exception_class(self.http_status, self.message, self.venue_code)


# Field names probed for venue code and message, in order
CODE_FIELDS = ('code', 'error_code', 'errorCode')
MESSAGE_FIELDS = ('msg', 'message', 'error', 'error_message', 'detail')


class ExceptionHandlerStrategy(ABC):
    """
    Table-driven error classification.

    Subclasses provide the venue name and the three lookup tables.
    """

    @property
    @abstractmethod
    def exchange_name(self) -> str:
        pass

    @abstractmethod
    def get_exact_errors(self) -> Mapping[str, ErrorKind]:
        """Venue code (as string) -> kind."""
        pass

    @abstractmethod
    def get_broad_errors(self) -> Mapping[str, ErrorKind]:
        """Message substring -> kind, checked in insertion order."""
        pass

    @abstractmethod
    def get_http_errors(self) -> Mapping[int, ErrorKind]:
        """HTTP status -> kind."""
        pass

    def classify(self, http_status: int, body: Any) -> Optional[ClassifiedError]:
        """
        Classify a response.

        Args:
            http_status: HTTP status code
            body: raw bytes/str, an already decoded mapping, or None

        Returns:
            None for a successful response, otherwise the ClassifiedError
        """
        try:
            return self._classify(http_status, body)
        except Exception as e:
            return ClassifiedError(
                kind=ErrorKind.EXCHANGE_ERROR,
                message=f"{self.exchange_name} error (unclassifiable response: {type(e).__name__})",
                http_status=http_status
            )

    def handle_error(self, status_code: int, response_text: str) -> errors.ExchangeError:
        """Exception for an error response, generic if the body looks successful."""
        classified = self.classify(status_code, response_text)
        if classified is None:
            return errors.ExchangeError(status_code, f"{self.exchange_name} error: {response_text}")
        return classified.to_exception()

    def _classify(self, http_status: int, body: Any) -> Optional[ClassifiedError]:
        data, raw_text = self._decode_body(body)
        venue_code, venue_message = self._extract_error(data)

        has_error_code = venue_code is not None and venue_code != "0"
        if http_status < 400 and not has_error_code:
            return None

        message = venue_message or raw_text or f"HTTP {http_status}"
        prefix = f"{self.exchange_name} {venue_code}" if venue_code is not None else self.exchange_name
        full_message = f"{prefix}: {message}"

        if venue_code is not None:
            kind = self.get_exact_errors().get(venue_code)
            if kind is not None:
                return ClassifiedError(kind, full_message, http_status, venue_code)

        haystack = venue_message or raw_text
        if haystack:
            for fragment, kind in self.get_broad_errors().items():
                if fragment in haystack:
                    return ClassifiedError(kind, full_message, http_status, venue_code)

        kind = self.get_http_errors().get(http_status)
        if kind is not None:
            return ClassifiedError(kind, full_message, http_status, venue_code)

        return ClassifiedError(ErrorKind.EXCHANGE_ERROR, full_message, http_status, venue_code)

    @staticmethod
    def _decode_body(body: Any) -> Tuple[Optional[Dict[str, Any]], str]:
        """Return (mapping or None, raw text)."""
        if body is None:
            return None, ""
        if isinstance(body, Mapping):
            return dict(body), ""

        if isinstance(body, (bytes, bytearray)):
            raw_text = bytes(body).decode('utf-8', errors='replace')
        else:
            raw_text = str(body)

        if not raw_text.strip():
            return None, ""
        try:
            data = msgspec.json.decode(raw_text)
        except msgspec.DecodeError:
            return None, raw_text[:200]
        if isinstance(data, dict):
            return data, raw_text[:200]
        return None, raw_text[:200]

    @staticmethod
    def _extract_error(data: Optional[Dict[str, Any]]) -> Tuple[Optional[str], Optional[str]]:
        if not data:
            return None, None

        code = None
        for field in CODE_FIELDS:
            value = data.get(field)
            if value is not None and not isinstance(value, (dict, list)):
                code = str(value)
                break

        message = None
        for field in MESSAGE_FIELDS:
            value = data.get(field)
            if value:
                message = str(value)
                break

        return code, message
