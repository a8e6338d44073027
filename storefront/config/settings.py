"""
Storefront Catalog Engine
Centralized Configuration Management

Pydantic settings with environment variable support, validation, and type safety.
"""

from functools import lru_cache
from typing import Optional, List
from pydantic import Field, field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """PostgreSQL Catalog Store Configuration"""

    model_config = SettingsConfigDict(env_prefix="POSTGRES_")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    db: str = Field(default="storefront", description="Database name")
    user: str = Field(default="storefront", description="Database user")
    password: SecretStr = Field(default="secure_password", description="Database password")
    echo: bool = Field(default=False, description="Log SQL statements through the app logger")
    query_timeout: float = Field(default=5.0, description="Per-query timeout in seconds")
    url: Optional[str] = Field(default=None, description="Full async URL (overrides host/port)")

    @property
    def async_url(self) -> str:
        """Async database URL for asyncpg"""
        if self.url:
            return self.url
        return f"postgresql+asyncpg://{self.user}:{self.password.get_secret_value()}@{self.host}:{self.port}/{self.db}"


class RedisSettings(BaseSettings):
    """Redis Cache Configuration"""

    model_config = SettingsConfigDict(env_prefix="REDIS_")

    enabled: bool = Field(default=True, description="Use the response cache")
    host: str = Field(default="localhost", description="Redis host")
    port: int = Field(default=6379, description="Redis port")
    password: Optional[SecretStr] = Field(default=None, description="Redis password")
    db: int = Field(default=0, description="Redis database number")
    max_connections: int = Field(default=50, description="Max connections")
    socket_timeout: int = Field(default=2, description="Socket timeout in seconds")
    url: Optional[str] = Field(default=None, description="Redis URL (overrides host/port)")

    def get_url(self) -> str:
        """Redis connection URL - uses REDIS_URL if set, otherwise builds from host/port"""
        if self.url:
            return self.url
        if self.password:
            return f"redis://:{self.password.get_secret_value()}@{self.host}:{self.port}/{self.db}"
        return f"redis://{self.host}:{self.port}/{self.db}"


class CatalogSettings(BaseSettings):
    """Catalog view and promotion resolution"""

    model_config = SettingsConfigDict(env_prefix="CATALOG_")

    currency: str = Field(default="TND", description="Currency label attached to every view")
    placeholder_image_url: str = Field(
        default="https://images.unsplash.com/photo-1586023492125-27b2c045efd7?w=400",
        description="Image used when a product has no image at all",
    )
    default_category_slug: str = Field(default="all", description="Slug for unknown categories")
    top_products_limit: int = Field(default=10, description="Products on the top listing")
    promo_products_limit: int = Field(default=6, description="Discounts driving the promo listing")
    gate_discounts_by_window: bool = Field(
        default=False,
        description="Also require now within [starts_at, ends_at] for product discounts",
    )

    # Cache TTLs (seconds)
    products_cache_ttl: int = Field(default=120, description="Product listings TTL")
    promotions_cache_ttl: int = Field(default=60, description="Promotion banner TTL")
    categories_cache_ttl: int = Field(default=300, description="Reference data TTL")


class SecuritySettings(BaseSettings):
    """CORS Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    cors_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins"
    )


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", alias="LOG_FORMAT", description="Log format: json or text")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="storefront-catalog", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")

    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=8000, alias="API_PORT", description="API port")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_development(self) -> bool:
        """Check if running in development"""
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
