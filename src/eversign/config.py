"""Configuration management for the eversign client."""

import logging
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.eversign.com/api"


class Credentials(BaseModel):
    """API credentials injected into every outbound request.

    Attributes:
        access_key: eversign API access key.
        business_id: Business the requests act on.
        language: Language for eversign-generated texts.
        sandbox: 1 to process requests without legal effect, 0 otherwise.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    access_key: str = Field(description="eversign API access key")
    business_id: int = Field(description="eversign business ID")
    language: str = Field(default="en", description="Language code")
    sandbox: int = Field(default=1, ge=0, le=1, description="Sandbox mode flag")


class Settings(BaseSettings):
    """eversign configuration loaded from environment variables.

    All settings can be overridden via environment variables with
    the EVERSIGN_ prefix. For example:
        EVERSIGN_ACCESS_KEY=abc123
        EVERSIGN_BUSINESS_ID=42
        EVERSIGN_SANDBOX=0

    Construct one instance at startup and pass it to ``EversignClient``;
    nothing in the library reads the environment on its own.
    """

    # Credentials
    access_key: str = Field(
        default="",
        description="eversign API access key",
    )
    business_id: int = Field(
        default=0,
        ge=0,
        description="eversign business ID",
    )
    language: str = Field(
        default="en",
        min_length=2,
        description="Language for eversign-generated texts",
    )
    sandbox: int = Field(
        default=1,
        ge=0,
        le=1,
        description="1 processes documents without legal effect (testing)",
    )

    # Transport
    api_url: str = Field(
        default=DEFAULT_API_URL,
        description="eversign REST API base URL",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="HTTP request timeout",
    )
    user_agent: str = Field(
        default="eversign-python",
        description="User-Agent header sent with every request",
    )

    # Webhook download retry
    download_retry_delay_seconds: float = Field(
        default=2.0,
        ge=0.0,
        description="Fixed delay between final-document download attempts",
    )
    download_max_attempts: int = Field(
        default=10,
        ge=1,
        description="Maximum final-document download attempts per webhook",
    )
    download_retry_forever: bool = Field(
        default=False,
        description=(
            "Retry the final-document download until it succeeds, ignoring "
            "download_max_attempts. Blocks the webhook task while eversign is unavailable."
        ),
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="json",
        description="Log output format",
    )

    model_config = {
        "env_prefix": "EVERSIGN_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @model_validator(mode="after")
    def _warn_if_retrying_forever(self) -> "Settings":
        """Warn when the unbounded download retry is enabled."""
        if self.download_retry_forever:
            logger.warning(
                "Unbounded document download retry enabled; webhook tasks may block "
                "for as long as eversign is unreachable"
            )
        return self

    def credentials(self) -> Credentials:
        """Return the credentials injected into outbound requests.

        Raises:
            ConfigurationError: If no access key is configured.
        """
        if not self.access_key:
            raise ConfigurationError("EVERSIGN_ACCESS_KEY is not configured")
        return Credentials(
            access_key=self.access_key,
            business_id=self.business_id,
            language=self.language,
            sandbox=self.sandbox,
        )
