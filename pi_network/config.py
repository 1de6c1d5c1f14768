"""Configuration for the Pi Network SDK."""

from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from typing import Any

import httpx
import structlog

from .exceptions import ConfigurationError
from .version import __version__

logger = structlog.get_logger()

DEFAULT_BASE_URL = "https://api.minepi.com/v2"
LIBRARY_NAME = "pi-network-sdk"
USER_AGENT = f"{LIBRARY_NAME}/{__version__}"


@dataclass(frozen=True)
class RetryPolicy:
    """
    Exponential backoff policy for transient failures.

    The delay before retry ``n`` (0-indexed) is
    ``min(initial_delay * backoff_factor ** n, max_delay)``. ``max_retries``
    caps the number of retries independently of how the delay grows.

    Attributes:
        max_retries: Retries after the first attempt; 0 means a single attempt
        initial_delay: Delay before the first retry in seconds (default: 0.1)
        max_delay: Upper bound for any delay in seconds (default: 10.0)
        backoff_factor: Multiplier applied per additional retry (default: 2.0)

    Example:
        ```python
        policy = RetryPolicy(max_retries=5, initial_delay=0.5)
        policy.delay_for(2)  # 2.0
        ```
    """

    max_retries: int = 3
    initial_delay: float = 0.1
    max_delay: float = 10.0
    backoff_factor: float = 2.0

    def __post_init__(self) -> None:
        """Validate policy ranges."""
        # Comparisons are written to fail for NaN
        if self.max_retries < 0:
            raise ConfigurationError("max_retries must be non-negative")

        if not self.initial_delay >= 0:
            raise ConfigurationError("initial_delay must be non-negative")

        if not self.max_delay >= self.initial_delay:
            raise ConfigurationError("max_delay must be >= initial_delay")

        if not self.backoff_factor >= 1.0:
            raise ConfigurationError("backoff_factor must be >= 1.0")

    def delay_for(self, attempt: int) -> float:
        """
        Get the delay before a retry.

        Args:
            attempt: Retry index, 0 for the first retry

        Returns:
            Delay in seconds, never above max_delay
        """
        if attempt < 0:
            raise ValueError("attempt must be >= 0")
        if self.initial_delay == 0:
            return 0.0
        try:
            delay = self.initial_delay * self.backoff_factor**attempt
        except OverflowError:
            return self.max_delay
        return min(delay, self.max_delay)

    def delays(self) -> Iterator[float]:
        """Yield the delay before each of the max_retries retries."""
        for attempt in range(self.max_retries):
            yield self.delay_for(attempt)


@dataclass(frozen=True)
class PiConfig:
    """
    Configuration for the Pi Network client.

    Instances are immutable once built and can be shared across threads
    and tasks.

    Attributes:
        api_key: Server API key from the Pi Developer Portal
        base_url: Base URL of the Pi Network API (default: DEFAULT_BASE_URL)
        timeout: Request timeout in seconds (default: 30.0)
        retry_policy: Backoff policy for transient failures
        user_agent: Client identifier sent with every request, always USER_AGENT

    Example:
        ```python
        config = PiConfig(api_key="your-api-key")

        config = (
            PiConfig.builder("your-api-key")
            .base_url("https://api.minepi.com/v2")
            .timeout(60.0)
            .build()
        )
        ```
    """

    api_key: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    user_agent: str = field(init=False, default=USER_AGENT)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.api_key:
            raise ConfigurationError("API key cannot be empty")

        try:
            url = httpx.URL(str(self.base_url))
        except httpx.InvalidURL as e:
            raise ConfigurationError(f"base_url is not a valid URL: {e}") from e

        if not url.is_absolute_url:
            raise ConfigurationError("base_url must be an absolute URL")

        # Remove trailing slash from base_url
        object.__setattr__(self, "base_url", str(self.base_url).rstrip("/"))
        object.__setattr__(self, "user_agent", USER_AGENT)

    @classmethod
    def builder(cls, api_key: str) -> "PiConfigBuilder":
        """
        Start a fluent builder.

        Raises:
            ConfigurationError: Immediately, if api_key is empty
        """
        return PiConfigBuilder(api_key)

    @property
    def headers(self) -> dict[str, str]:
        """Headers identifying and authenticating every request."""
        return {
            "Authorization": f"Key {self.api_key}",
            "User-Agent": self.user_agent,
            "Content-Type": "application/json",
        }

    def httpx_client_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``httpx.Client`` or ``httpx.AsyncClient``."""
        return {
            "base_url": self.base_url,
            "timeout": self.timeout,
            "headers": self.headers,
        }


class PiConfigBuilder:
    """
    Fluent builder for PiConfig.

    The API key is validated when the builder is created, so a chain of
    setters never has to deal with a construction error.
    """

    def __init__(self, api_key: str) -> None:
        self._config = PiConfig(api_key=api_key)

    def base_url(self, url: str | httpx.URL) -> "PiConfigBuilder":
        self._config = replace(self._config, base_url=str(url))
        return self

    def timeout(self, timeout: float) -> "PiConfigBuilder":
        self._config = replace(self._config, timeout=timeout)
        return self

    def retry_policy(self, policy: RetryPolicy) -> "PiConfigBuilder":
        self._config = replace(self._config, retry_policy=policy)
        return self

    def build(self) -> PiConfig:
        logger.debug(
            "PiConfig built",
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            max_retries=self._config.retry_policy.max_retries,
        )
        return self._config
