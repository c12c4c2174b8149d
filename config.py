"""Application configuration."""
import os
from dataclasses import dataclass


@dataclass
class AppConfig:
    """Application configuration."""

    feeds_dir: str = "./feeds"
    output_dir: str = "./output"
    store_file: str = "./config/shops.json"
    log_level: str = "WARNING"
    default_separator: str = " "

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load config from environment variables."""
        return cls(
            feeds_dir=os.getenv("FEEDMAP_FEEDS_DIR", "./feeds"),
            output_dir=os.getenv("FEEDMAP_OUTPUT_DIR", "./output"),
            store_file=os.getenv("FEEDMAP_STORE_FILE", "./config/shops.json"),
            log_level=os.getenv("FEEDMAP_LOG_LEVEL", "WARNING"),
            default_separator=os.getenv("FEEDMAP_DEFAULT_SEPARATOR", " "),
        )


# Global instance
app_config = AppConfig.from_env()
