"""
Exceptions for the Pi Network SDK.

Every failure surfaced by the SDK is one of a closed set of ``PiError``
variants. Each variant carries an ``ErrorKind`` tag and only the data
needed to act on it. Deciding which variants are worth retrying is left to
the retry-loop driver (see ``pi_network.retry``).
"""

import json
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Any, ClassVar

import httpx
import structlog
from pydantic import ValidationError as PydanticValidationError

from .models import Payment

logger = structlog.get_logger()

CODEC_ERRORS = (json.JSONDecodeError, UnicodeDecodeError, PydanticValidationError)


class ErrorKind(str, Enum):
    """Tag identifying a ``PiError`` variant."""

    HTTP = "http"
    JSON = "json"
    PI_NETWORK = "pi_network"
    AUTHENTICATION = "authentication"
    CONFIGURATION = "configuration"
    STELLAR = "stellar"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    TIMEOUT = "timeout"


_DURATION_UNITS = (("s", 1, 9), ("ms", 1e3, 6), ("µs", 1e6, 3))


def _format_duration(seconds: float) -> str:
    """Render like ``30s``, ``1.5s``, ``100ms`` or ``2µs``, never in exponent form."""
    for unit, scale, precision in _DURATION_UNITS:
        value = seconds * scale
        if value >= 1:
            break
    else:
        unit, value, precision = "ns", seconds * 1e9, 0
    text = f"{value:.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text}{unit}"


class PiError(Exception):
    """Base exception for all Pi Network SDK errors."""

    kind: ClassVar[ErrorKind]
    __match_args__ = ("message",)

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @staticmethod
    def wrap(exc: Exception) -> "PiError":
        """Convert a collaborator error into its ``PiError`` variant."""
        return wrap_error(exc)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "kind": self.kind.value,
            "message": self.message,
        }

    def __reduce__(self) -> tuple[Any, ...]:
        # Rebuild from the constructor fields, args only holds the display text
        return self.__class__, tuple(getattr(self, name) for name in self.__match_args__)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class HttpError(PiError):
    """HTTP transport failure raised by httpx."""

    kind = ErrorKind.HTTP
    __match_args__ = ("source",)

    def __init__(self, source: httpx.HTTPError) -> None:
        super().__init__(f"HTTP request failed: {source}")
        self.source = source
        self.__cause__ = source


class JsonError(PiError):
    """Response body could not be decoded or validated."""

    kind = ErrorKind.JSON
    __match_args__ = ("source",)

    def __init__(self, source: ValueError) -> None:
        super().__init__(f"JSON serialization failed: {source}")
        self.source = source
        self.__cause__ = source


class PiNetworkError(PiError):
    """Structured error returned by the Pi Network API itself."""

    kind = ErrorKind.PI_NETWORK
    __match_args__ = ("error_name", "error_message", "payment")

    def __init__(
        self,
        error_name: str,
        error_message: str,
        payment: Payment | None = None,
    ) -> None:
        super().__init__(f"Pi Network API error: {error_name} - {error_message}")
        self.error_name = error_name
        self.error_message = error_message
        self.payment = payment

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["error_name"] = self.error_name
        data["error_message"] = self.error_message
        data["payment_id"] = self.payment.identifier if self.payment else None
        return data


class AuthenticationError(PiError):
    """Raised when the API key is rejected."""

    kind = ErrorKind.AUTHENTICATION
    __match_args__ = ("reason",)

    def __init__(self, reason: str) -> None:
        super().__init__(f"Authentication failed: {reason}")
        self.reason = reason


class ConfigurationError(PiError):
    """Invalid configuration provided."""

    kind = ErrorKind.CONFIGURATION
    __match_args__ = ("reason",)

    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid configuration: {reason}")
        self.reason = reason


class StellarError(PiError):
    """Failure in the Stellar ledger signing layer."""

    kind = ErrorKind.STELLAR
    __match_args__ = ("reason",)

    def __init__(self, reason: str) -> None:
        super().__init__(f"Stellar operation failed: {reason}")
        self.reason = reason


class InsufficientBalanceError(PiError):
    """Wallet balance does not cover the requested amount."""

    kind = ErrorKind.INSUFFICIENT_BALANCE
    __match_args__ = ("available", "required")

    def __init__(self, available: float, required: float) -> None:
        super().__init__(
            f"Insufficient balance: available {available}, required {required}"
        )
        self.available = available
        self.required = required

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["available"] = self.available
        data["required"] = self.required
        return data


class TimeoutExceededError(PiError):
    """An operation ran past its deadline."""

    kind = ErrorKind.TIMEOUT
    __match_args__ = ("duration",)

    def __init__(self, duration: float) -> None:
        super().__init__(f"Timeout occurred after {_format_duration(duration)}")
        self.duration = duration

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["duration"] = self.duration
        return data


def wrap_error(exc: Exception) -> PiError:
    """
    Convert an error raised by a collaborator into a ``PiError``.

    Args:
        exc: Error raised by httpx, the JSON decoder or pydantic

    Returns:
        ``exc`` itself if it already is a ``PiError``, otherwise the
        matching ``HttpError`` or ``JsonError``

    Raises:
        TypeError: If ``exc`` has no counterpart in the taxonomy
    """
    if isinstance(exc, PiError):
        return exc
    if isinstance(exc, httpx.HTTPError):
        return HttpError(exc)
    if isinstance(exc, CODEC_ERRORS):
        return JsonError(exc)
    raise TypeError(f"Cannot convert {type(exc).__name__} to PiError") from exc


@contextmanager
def translate_errors() -> Iterator[None]:
    """Re-raise httpx and decoding errors from the block as ``PiError``."""
    try:
        yield
    except (httpx.HTTPError, *CODEC_ERRORS) as exc:
        raise wrap_error(exc) from exc


def error_from_response(response: httpx.Response) -> PiError:
    """
    Build the error for a non-success Pi Network API response.

    Args:
        response: HTTP response

    Returns:
        AuthenticationError for 401 responses, PiNetworkError otherwise

    Raises:
        JsonError: If the error body carries a malformed payment record
    """
    status_code = response.status_code

    try:
        body = response.json()
    except ValueError:
        body = None

    if not isinstance(body, dict):
        error_name = f"http_{status_code}"
        error_message = response.text
        payment_data = None
    else:
        error_name = body.get("error", f"http_{status_code}")
        error_message = body.get("error_message", response.text)
        payment_data = body.get("payment")

    if status_code == 401:
        logger.warning("Pi Network rejected API key", status_code=status_code)
        return AuthenticationError(error_message)

    payment = None
    if payment_data is not None:
        try:
            payment = Payment.model_validate(payment_data)
        except PydanticValidationError as e:
            raise JsonError(e) from e

    logger.warning(
        "Pi Network API error",
        status_code=status_code,
        error_name=error_name,
        payment_id=payment.identifier if payment else None,
    )
    return PiNetworkError(error_name, error_message, payment)
