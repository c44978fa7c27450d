"""
Configuration management.
"""

import os
from dataclasses import dataclass, field


@dataclass
class Config:
    """
    Application configuration.

    Loads from environment variables with sensible defaults.
    """

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")

    # Upload gate
    quality_threshold: float = field(
        default_factory=lambda: float(os.getenv("QUALITY_THRESHOLD", "50.0"))
    )

    max_upload_mb: int = field(default_factory=lambda: int(os.getenv("MAX_UPLOAD_MB", "10")))

    # Property listing
    default_page_size: int = field(
        default_factory=lambda: int(os.getenv("DEFAULT_PAGE_SIZE", "50"))
    )
    max_page_size: int = field(
        default_factory=lambda: int(os.getenv("MAX_PAGE_SIZE", "500"))
    )

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "quality_threshold": self.quality_threshold,
            "max_upload_mb": self.max_upload_mb,
            "default_page_size": self.default_page_size,
            "max_page_size": self.max_page_size,
            "log_level": self.log_level,
        }
