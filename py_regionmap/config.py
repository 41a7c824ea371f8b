"""Configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings pulled from REGIONMAP_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="REGIONMAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="plain", description="Logging format (plain or json)")

    # Generation
    default_map_width: int = Field(default=255, description="Default map width")
    default_map_height: int = Field(default=255, description="Default map height")
    max_map_width: int = Field(default=4096, description="Max allowed map width")
    max_map_height: int = Field(default=4096, description="Max allowed map height")
    default_workers: int = Field(default=4, description="Threads used to allocate cells")

    # Output
    output_dir: str = Field(default="./output", description="Directory for saved images")


settings = Settings()
