from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    # Runtime
    environment: str = "development"
    debug: bool = False

    # Database
    database_url: str = "duckdb://./data/wedine.duckdb"

    # JWT
    jwt_secret_key: str = "your-secret-key"
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24 * 7
    admin_token_expire_hours: int = 12

    # Development login (no identity provider)
    mock_auth_enabled: bool = False

    # Razorpay
    razorpay_key_id: Optional[str] = None
    razorpay_key_secret: Optional[str] = None
    razorpay_api_base: str = "https://api.razorpay.com/v1"
    currency: str = "INR"

    # Twilio SMS
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_phone_number: Optional[str] = None
    twilio_api_base: str = "https://api.twilio.com/2010-04-01"

    # Protected maintenance endpoints
    cron_secret_token: Optional[str] = None
    admin_setup_token: Optional[str] = None

    # Order lifecycle
    order_retention_hours: int = 24
    duplicate_window_minutes: Optional[int] = None
    pending_order_timeout_minutes: int = 5

    # Pricing (amounts in paise)
    tax_percent: int = 5
    delivery_fee_paise: int = 2000
    free_delivery_threshold_paise: int = 20000

    # Reviews
    reviews_per_page: int = 10

    # API
    api_title: str = "WeDine API"
    api_version: str = "1.0.0"
    api_prefix: str = "/api/v1"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="WEDINE_",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def duplicate_window(self) -> int:
        """Minutes within which a repeated cart counts as a duplicate order."""
        if self.duplicate_window_minutes:
            return self.duplicate_window_minutes
        return 2 if self.environment == "development" else 5


# Global settings instance
settings = Settings()
