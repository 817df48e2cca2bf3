from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Read env from container + optionally from files
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.docker"),
        extra="ignore",
        case_sensitive=False,
    )

    # App
    ENVIRONMENT: str = Field(default="dev", validation_alias=AliasChoices("ENVIRONMENT", "environment"))
    APP_NAME: str = Field(default="invoicedesk", validation_alias=AliasChoices("APP_NAME", "app_name"))
    LOG_LEVEL: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))
    DEBUG: bool = Field(default=False, validation_alias=AliasChoices("DEBUG", "debug"))
    LOG_JSON: bool = Field(default=False, validation_alias=AliasChoices("LOG_JSON", "log_json"))

    # Invoicing REST backend
    INVOICING_API_BASE_URL: str = Field(
        default="http://localhost:3000/api",
        validation_alias=AliasChoices("INVOICING_API_BASE_URL", "invoicing_api_base_url"),
    )
    INVOICING_API_TOKEN: str = Field(default="", validation_alias=AliasChoices("INVOICING_API_TOKEN", "invoicing_api_token"))
    INVOICING_API_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        validation_alias=AliasChoices("INVOICING_API_TIMEOUT_SECONDS", "invoicing_api_timeout_seconds"),
    )

    # Infrastructure
    REDIS_URL: str = Field(
        default="redis://redis:6379/0",
        validation_alias=AliasChoices("REDIS_URL", "redis_url"),
    )

    # Exchange rate providers
    EXCHANGE_RATE_API_URL: str = Field(
        default="https://api.exchangerate-api.com/v4/latest/INR",
        validation_alias=AliasChoices("EXCHANGE_RATE_API_URL", "exchange_rate_api_url"),
    )
    FREE_CURRENCY_API_URL: str = Field(
        default="https://api.freecurrencyapi.com/v1/latest",
        validation_alias=AliasChoices("FREE_CURRENCY_API_URL", "free_currency_api_url"),
    )
    FREE_CURRENCY_API_KEY: str = Field(default="", validation_alias=AliasChoices("FREE_CURRENCY_API_KEY", "free_currency_api_key"))
    EXCHANGE_RATE_CACHE_TTL_SECONDS: int = Field(
        default=24 * 60 * 60,
        validation_alias=AliasChoices("EXCHANGE_RATE_CACHE_TTL_SECONDS", "exchange_rate_cache_ttl_seconds"),
    )

    # Invoice defaults
    DEFAULT_PAYMENT_TERMS_DAYS: int = Field(
        default=30,
        validation_alias=AliasChoices("DEFAULT_PAYMENT_TERMS_DAYS", "default_payment_terms_days"),
    )
    BASE_CURRENCY: str = Field(default="INR", validation_alias=AliasChoices("BASE_CURRENCY", "base_currency"))


settings = Settings()
