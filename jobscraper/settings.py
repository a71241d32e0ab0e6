"""
Pipeline Configuration
Loads settings from environment variables with sensible defaults.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from pathlib import Path


class Settings(BaseSettings):
    """Pipeline settings loaded from environment variables."""

    # Output Configuration
    output_file: Path = Path("./scraper/current_jobs.json")
    enrich_file: Path = Path("./scraper/current_jobs.json")

    # Browser Configuration
    headless: bool = True
    scraper_executable_path: Optional[str] = None              # Listing pass browser
    playwright_chromium_executable_path: Optional[str] = None  # Enrichment pass browser
    viewport_width: int = 1280
    viewport_height: int = 800
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )

    # Listing Pass Configuration (milliseconds for browser waits, seconds for delays)
    navigation_timeout: int = 100000
    listing_wait_timeout: int = 10000
    max_retries: int = 2            # Additional attempts after the first
    retry_delay: float = 3.0
    site_delay: float = 2.0         # Politeness delay between sites

    # Page Interaction Configuration
    scroll_settle_ms: int = 1000
    scroll_max_iterations: int = 10
    partial_scroll_fraction: float = 0.25
    partial_scroll_settle_ms: int = 2000
    load_more_attempts: int = 4
    load_more_button_timeout: int = 5000
    load_more_idle_timeout: int = 10000
    load_more_retry_ms: int = 2000

    # Enrichment Pass Configuration
    enrich_batch_size: int = 20
    enrich_timeout: int = 30000
    enrich_selector_timeout: int = 5000

    # Logging Configuration
    debug: bool = False
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @property
    def effective_log_level(self) -> str:
        """DEBUG when the debug flag is set, otherwise the configured level."""
        return "DEBUG" if self.debug else self.log_level.upper()

    @property
    def log_dir(self) -> Path:
        """Get the log directory path."""
        return Path("./logs")

    @property
    def log_file(self) -> Path:
        """Get the log file path."""
        return self.log_dir / "scraper.log"

    @field_validator("debug", mode="before")
    @classmethod
    def parse_debug_flag(cls, value):
        """Any non-empty DEBUG value other than 0/false/no/off turns debugging on."""
        if isinstance(value, str):
            return value.strip().lower() not in ("", "0", "false", "no", "off")
        return value

    model_config = SettingsConfigDict(
        # Only load .env if it exists to avoid permission errors
        env_file=".env" if Path(".env").exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return settings
