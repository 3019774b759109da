"""Configuration management using environment variables."""
import os
from pathlib import Path
from typing import Optional

from up_exporter.exceptions import ConfigError


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        # Token may be given inline or, as in production, as a key file
        self.UP_BANK_BEARER_TOKEN: Optional[str] = os.getenv("UP_BANK_BEARER_TOKEN")
        self.UP_BANK_BEARER_TOKEN_PATH: str = os.getenv("UP_BANK_BEARER_TOKEN_PATH", "/up/token.key")

        # Webhook endpoint is only served when a secret key path is set
        self.UP_BANK_WEBHOOK_SECRET_KEY_PATH: Optional[str] = os.getenv("UP_BANK_WEBHOOK_SECRET_KEY_PATH")

        self.UP_API_ADDRESS: str = os.getenv("UP_API_ADDRESS", "https://api.up.com.au/api/v1")
        self.PAGE_SIZE: int = int(os.getenv("UP_BANK_PAGE_SIZE", "100"))
        self.WEBHOOK_TIMEOUT_SECONDS: float = float(os.getenv("WEBHOOK_TIMEOUT_SECONDS", "60"))

        self.PORT: int = int(os.getenv("PORT", "3000"))
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

        self.APP_NAME: str = "Up Bank Exporter"
        self.APP_VERSION: str = "1.0.0"

    def load_bearer_token(self) -> str:
        """Return the Up API token, reading the key file if no inline token is set."""
        if self.UP_BANK_BEARER_TOKEN:
            return self.UP_BANK_BEARER_TOKEN.strip()
        if not self.UP_BANK_BEARER_TOKEN_PATH:
            raise ConfigError("UP_BANK_BEARER_TOKEN_PATH is required but not set")
        try:
            token = Path(self.UP_BANK_BEARER_TOKEN_PATH).read_text().strip()
        except OSError as e:
            raise ConfigError(
                f"failed to read up bearer token path at {self.UP_BANK_BEARER_TOKEN_PATH}: {e}"
            ) from e
        if not token:
            raise ConfigError(f"up bearer token at {self.UP_BANK_BEARER_TOKEN_PATH} is empty")
        return token

    def load_webhook_secret_key(self) -> Optional[bytes]:
        """Return the webhook secret key, or None when webhooks are disabled."""
        if not self.UP_BANK_WEBHOOK_SECRET_KEY_PATH:
            return None
        try:
            key = Path(self.UP_BANK_WEBHOOK_SECRET_KEY_PATH).read_bytes().strip()
        except OSError as e:
            raise ConfigError(f"failed to read webhook secret key: {e}") from e
        if not key:
            raise ConfigError(f"webhook secret key at {self.UP_BANK_WEBHOOK_SECRET_KEY_PATH} is empty")
        return key


settings = Settings()
