"""
Pi Network SDK - configuration and error core for the Pi Network payment API.

Example:
    ```python
    import httpx
    from pi_network import Payment, PiConfig, error_from_response, translate_errors
    from pi_network.retry import async_retrying

    config = PiConfig.builder("your-api-key").timeout(10.0).build()

    async def get_payment(payment_id: str) -> Payment:
        async with httpx.AsyncClient(**config.httpx_client_kwargs()) as client:
            with translate_errors():
                response = await client.get(f"/payments/{payment_id}")
                if response.is_error:
                    raise error_from_response(response)
                return Payment.model_validate(response.json())

    payment = await async_retrying(config.retry_policy)(get_payment, "abc")
    ```
"""

from .config import (
    DEFAULT_BASE_URL,
    LIBRARY_NAME,
    USER_AGENT,
    PiConfig,
    PiConfigBuilder,
    RetryPolicy,
)
from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    ErrorKind,
    HttpError,
    InsufficientBalanceError,
    JsonError,
    PiError,
    PiNetworkError,
    StellarError,
    TimeoutExceededError,
    error_from_response,
    translate_errors,
    wrap_error,
)
from .models import Payment, PaymentDirection, PaymentStatus, PaymentTransaction
from .version import __version__

__all__ = [
    # Configuration
    "DEFAULT_BASE_URL",
    "LIBRARY_NAME",
    "USER_AGENT",
    "PiConfig",
    "PiConfigBuilder",
    "RetryPolicy",
    # Exceptions
    "ErrorKind",
    "PiError",
    "HttpError",
    "JsonError",
    "PiNetworkError",
    "AuthenticationError",
    "ConfigurationError",
    "StellarError",
    "InsufficientBalanceError",
    "TimeoutExceededError",
    "error_from_response",
    "translate_errors",
    "wrap_error",
    # Models
    "Payment",
    "PaymentDirection",
    "PaymentStatus",
    "PaymentTransaction",
    # Version
    "__version__",
]
