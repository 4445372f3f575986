"""
Application configuration

Carrier credentials are supplied externally (environment or .env file).
- Development defaults to the UPS sandbox (CIE) endpoint
- Runtime validation rejects missing credentials in production
"""
import logging
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

UPS_PRODUCTION_URL = "https://onlinetools.ups.com"
UPS_SANDBOX_URL = "https://wwwcie.ups.com"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # UPS OAuth client credentials + shipper account
    UPS_CLIENT_ID: str = ""
    UPS_CLIENT_SECRET: str = ""
    UPS_API_BASE_URL: str = UPS_SANDBOX_URL
    UPS_SHIPPER_NUMBER: str = ""
    UPS_TRANSACTION_SRC: str = "carrier-rates"

    # Transport
    HTTP_TIMEOUT_SECONDS: float = 30.0

    @field_validator("UPS_API_BASE_URL", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v):
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v

    @field_validator("HTTP_TIMEOUT_SECONDS")
    @classmethod
    def positive_timeout(cls, v):
        if v <= 0:
            raise ValueError("HTTP_TIMEOUT_SECONDS must be positive")
        return v

    @model_validator(mode="after")
    def validate_production_config(self):
        """Fail fast when production runs without carrier credentials."""
        if self.ENVIRONMENT == "production":
            missing = [
                name for name in ("UPS_CLIENT_ID", "UPS_CLIENT_SECRET", "UPS_SHIPPER_NUMBER")
                if not getattr(self, name)
            ]
            if missing:
                raise ValueError(
                    "Missing carrier configuration in production: " + ", ".join(missing)
                )
        return self

    @property
    def ups_configured(self) -> bool:
        return bool(self.UPS_CLIENT_ID and self.UPS_CLIENT_SECRET)

    def ups_auth_config(self):
        """Build the OAuth client config for UPS."""
        from carrier_rates.core.token_manager import OAuthClientConfig

        return OAuthClientConfig(
            client_id=self.UPS_CLIENT_ID,
            client_secret=self.UPS_CLIENT_SECRET,
            base_url=self.UPS_API_BASE_URL,
        )

    def ups_carrier_config(self):
        """Build the UPS adapter config."""
        from carrier_rates.modules.shipping.carriers.ups import UPSCarrierConfig

        return UPSCarrierConfig(
            auth=self.ups_auth_config(),
            shipper_number=self.UPS_SHIPPER_NUMBER,
            transaction_src=self.UPS_TRANSACTION_SRC,
        )


@lru_cache()
def get_settings() -> Settings:
    """Load settings once per process."""
    settings = Settings()
    if not settings.ups_configured:
        logger.warning("UPS credentials not set; UPS carrier will not be registered")
    return settings
