"""Configuration management using Pydantic Settings"""
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """Database configuration"""
    url: str = Field(default="sqlite:///./retail_insights.db", alias="DATABASE_URL")
    echo: bool = Field(default=False, alias="DB_ECHO")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class AppConfig(BaseSettings):
    """Application configuration"""
    name: str = Field(default="retail-insights", alias="APP_NAME")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    max_file_size_mb: int = Field(default=50, alias="MAX_FILE_SIZE_MB")
    allowed_extensions: list[str] = Field(default=[".csv"], alias="ALLOWED_EXTENSIONS")
    upload_dir: str = Field(default="data/uploads", alias="UPLOAD_DIR")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class AnalyticsConfig(BaseSettings):
    """Analytics query configuration"""
    price_per_100g_outlier_cap: float = Field(default=200.0, alias="PRICE_PER_100G_OUTLIER_CAP")
    default_top_n: int = Field(default=10, alias="DEFAULT_TOP_N")

    @field_validator("price_per_100g_outlier_cap")
    @classmethod
    def validate_outlier_cap(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("PRICE_PER_100G_OUTLIER_CAP must be positive")
        return v

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class Settings(BaseSettings):
    """Global settings"""
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    app: AppConfig = Field(default_factory=AppConfig)
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Global settings instance
settings = Settings()
