"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Import pipeline settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DIETIMPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Sheet layout
    default_skip_columns: int = 1  # Column holding the meal name
    max_skip_columns: int = 3
    header_rows: int = 1

    # Parsing defaults
    default_unit: str = "szt"
    nutrition_min_value: float = 0.0
    nutrition_max_value: float = 1000.0
    # Container words kept as units ("opakowanie") are not flagged as custom
    # unless explicitly enabled.
    flag_container_units_as_custom: bool = False

    # Row-level concurrency for async imports
    import_max_concurrency: int = 8

    # Remote categorization service (optional)
    categorizer_base_url: str = ""
    categorizer_timeout: float = 5.0  # request timeout in seconds
    categorizer_max_retries: int = 3

    # Application
    environment: str = "development"
    log_level: str = "INFO"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"

    def clamp_skip_columns(self, skip_columns: int | None) -> int:
        """Return a usable skip-columns value, falling back to the default."""
        if skip_columns is None or skip_columns < 0 or skip_columns > self.max_skip_columns:
            return self.default_skip_columns
        return skip_columns


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
