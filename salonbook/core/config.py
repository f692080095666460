from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    BUSINESS_NAME: str = "SalonBook"
    CURRENCY: str = "INR"

    STORE_PROVIDER: str = "memory"
    STORE_DATA_DIR: str = "./data/collections"

    RAZORPAY_KEY_ID: str | None = None
    RAZORPAY_KEY_SECRET: str | None = None
    RAZORPAY_WEBHOOK_SECRET: str | None = None
    RAZORPAY_BASE_URL: str = "https://api.razorpay.com/v1"
    PAYMENT_TIMEOUT_SECONDS: float = 10.0

    PROMO_ENFORCE_EXPIRY: bool = False
    COMMISSION_RATE: Decimal = Decimal("0.15")

    SALON_OPEN_HOUR: int = 9
    SALON_CLOSE_HOUR: int = 21
    SLOT_INTERVAL_MINUTES: int = 30


settings = Settings()
