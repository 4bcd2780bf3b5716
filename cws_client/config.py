# cws_client/config.py
# Configuration settings for the certificate web service client

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Settings:
    """Client-wide settings"""

    # Application
    APP_NAME: str = "cws-client"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = os.getenv("CWS_DEBUG", "OFF").upper() == "ON"

    # Transport
    DEFAULT_TIMEOUT: int = int(os.getenv("CWS_TIMEOUT", "10"))
    TLS_PROTOCOL: str = "TLSv1.2"

    # Certificate download polling (12 x 10s ~ 2 minutes)
    DOWNLOAD_MAX_ATTEMPTS: int = 12
    DOWNLOAD_RETRY_INTERVAL: float = 10.0

    # Passwords
    KEYSTORE_PASSWORD_LENGTH: int = 20
    MIN_KEY_PASSWORD_LENGTH: int = 4  # Same floor as openssl

    # Keystore locator prefix for files bundled inside python packages
    RESOURCE_PREFIX: str = "resource:"

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO")


# Global settings instance
settings = Settings()


class ClientConfig(BaseModel):
    """Immutable connection settings for one CwsClient"""

    model_config = ConfigDict(frozen=True)

    end_point: str
    app_id: str
    # Team DL owning the certificates, hierarchical like "Org\\Team\\Project"
    team_dl: str
    # Required for internet facing (external) certificates
    domain: Optional[str] = None
    # PKCS#12 file path, or "resource:<package>/<path>"
    keystore: str
    keystore_password: str = Field(repr=False)
    # If not set, the first private key entry of the keystore is used
    key_alias: Optional[str] = None
    debug: bool = settings.DEBUG
    timeout: int = settings.DEFAULT_TIMEOUT

    @field_validator("end_point")
    @classmethod
    def _normalize_end_point(cls, value: str) -> str:
        if not value:
            raise ValueError("CWS end point is required")
        return value if value.endswith("/") else value + "/"

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Timeout must be a positive number of seconds")
        return value

    @classmethod
    def from_env(cls, **overrides) -> "ClientConfig":
        """Build config from CWS_* environment variables, explicit overrides win"""
        values = {
            "end_point": os.getenv("CWS_ENDPOINT", ""),
            "app_id": os.getenv("CWS_APP_ID", ""),
            "team_dl": os.getenv("CWS_TEAM_DL", ""),
            "domain": os.getenv("CWS_DOMAIN") or None,
            "keystore": os.getenv("CWS_KEYSTORE", ""),
            "keystore_password": os.getenv("CWS_KEYSTORE_PASSWORD", ""),
            "key_alias": os.getenv("CWS_KEY_ALIAS") or None,
            "debug": settings.DEBUG,
            "timeout": settings.DEFAULT_TIMEOUT,
        }
        values.update(overrides)
        return cls(**values)
