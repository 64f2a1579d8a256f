from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    REDIS_URL: Optional[str] = None
    DRAFT_TTL: int = 7200  # 2 hours

    CATALOG_API_URL: str = "http://localhost:8000/api"
    CATALOG_TIMEOUT: int = 10
    CATALOG_CACHE_TTL: int = 300  # 5 minutes

    QUOTE_API_URL: str = "http://localhost:8000/api/quotes"
    EMAIL_WEBHOOK_URL: str = "http://localhost:8000/api/integrations/send-email"
    WEBHOOK_TIMEOUT: int = 10

    ACCEPT_QUOTE_URL: str = "http://localhost:3000/AcceptQuote"
    EMAIL_FROM_NAME: str = "WWFH Fleet Services"
    QUOTE_BRAND: str = "WWFH Fleet Hire"
    QUOTE_VALIDITY_DAYS: int = 14

    IDEMPOTENCY_TTL: int = 300  # 5 minutes
    PRICE_CACHE_TTL: int = 60   # 60 seconds

    API_TITLE: str = "Fleet Hire Quote Service"
    API_DESCRIPTION: str = "Quote builder engine for vehicle fleet hire: durations, tiered rates, line items and totals"
    API_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
