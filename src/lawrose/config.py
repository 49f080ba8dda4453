from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LAWROSE_", env_file=".env", extra="ignore", populate_by_name=True
    )

    app_name: str = "lawrose"
    env: str = "dev"

    # Redis connection
    redis_url: str = Field(default="redis://localhost:6379/0", validation_alias="REDIS_URL")
    redis_connect_timeout: float = Field(
        default=10.0, gt=0, validation_alias="REDIS_CONNECT_TIMEOUT"
    )
    redis_command_timeout: float = Field(
        default=5.0, gt=0, validation_alias="REDIS_COMMAND_TIMEOUT"
    )
    redis_max_retries: int = Field(
        default=3, ge=0, validation_alias="REDIS_MAX_RETRIES_PER_REQUEST"
    )
    redis_health_check_interval: int = Field(
        default=30, ge=0, validation_alias="REDIS_HEALTH_CHECK_INTERVAL"
    )

    # Cache namespace and TTLs (seconds)
    redis_key_prefix: str = Field(default="lawrose:", validation_alias="REDIS_KEY_PREFIX")
    redis_default_ttl: int = Field(default=3600, gt=0, validation_alias="REDIS_DEFAULT_TTL")
    redis_session_ttl: int = Field(default=86400, validation_alias="REDIS_SESSION_TTL")
    redis_jwt_blacklist_ttl: int = Field(default=86400, validation_alias="REDIS_JWT_BLACKLIST_TTL")
    redis_user_data_ttl: int = Field(default=1800, validation_alias="REDIS_USER_DATA_TTL")
    redis_product_data_ttl: int = Field(default=3600, validation_alias="REDIS_PRODUCT_DATA_TTL")
    redis_cart_data_ttl: int = Field(default=86400, validation_alias="REDIS_CART_DATA_TTL")
    redis_rate_limit_ttl: int = Field(default=60, validation_alias="REDIS_RATE_LIMIT_TTL")
    redis_otp_ttl: int = Field(default=300, validation_alias="REDIS_OTP_TTL")
    redis_password_reset_ttl: int = Field(default=3600, validation_alias="REDIS_PASSWORD_RESET_TTL")
    redis_email_verification_ttl: int = Field(
        default=86400, validation_alias="REDIS_EMAIL_VERIFICATION_TTL"
    )

    # Coalesce concurrent get_or_set misses for the same key
    cache_single_flight: bool = Field(default=False, validation_alias="CACHE_SINGLE_FLIGHT")

    # Observability
    enable_metrics: bool = Field(default=True, validation_alias="ENABLE_METRICS")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_json: bool = Field(default=True, validation_alias="LOG_JSON")

    @field_validator("redis_url")
    @classmethod
    def _check_redis_scheme(cls, value: str) -> str:
        if not value.startswith(("redis://", "rediss://")):
            raise ValueError("Redis URL must start with redis:// or rediss://")
        return value

    def ttl_table(self) -> dict[str, int]:
        """Per-category TTLs keyed by category name, before default fallback."""
        return {
            "session": self.redis_session_ttl,
            "jwt_blacklist": self.redis_jwt_blacklist_ttl,
            "user_data": self.redis_user_data_ttl,
            "product_data": self.redis_product_data_ttl,
            "cart_data": self.redis_cart_data_ttl,
            "rate_limit": self.redis_rate_limit_ttl,
            "otp_codes": self.redis_otp_ttl,
            "password_reset": self.redis_password_reset_ttl,
            "email_verification": self.redis_email_verification_ttl,
        }


settings = Settings()
