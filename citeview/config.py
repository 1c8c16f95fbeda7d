"""Configuration management for CiteView."""
import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv


@dataclass
class Config:
    """CiteView configuration.

    Attributes:
        gemini_api_key: API key for the Google file search service
        default_model: Model used to answer queries when none is given
        excerpt_preview_length: Characters of a source excerpt shown before
            the sidebar entry is expanded
        upload_dir: Directory for temporary uploaded files
        max_upload_mb: Largest accepted upload, in megabytes
        operation_poll_interval: Seconds between long-running operation polls
        operation_timeout: Seconds before an upload/import is abandoned
        enable_rate_limiting: Enable API rate limiting
        search_calls_per_minute: Rate limit for search calls
        host: Bind address for the REST facade
        port: Port for the REST facade
        production: Hide internal error messages from API responses
        log_level: Logging level name
    """

    # Service
    gemini_api_key: Optional[str] = None
    default_model: str = "gemini-2.5-flash"

    # Rendering
    excerpt_preview_length: int = 200

    # Uploads
    upload_dir: str = "./uploads"
    max_upload_mb: int = 100
    operation_poll_interval: float = 1.0
    operation_timeout: float = 600.0

    # Rate Limiting
    enable_rate_limiting: bool = True
    search_calls_per_minute: int = 15

    # Server
    host: str = "127.0.0.1"
    port: int = 3000
    production: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Config":
        """Load configuration from environment variables.

        Args:
            env_file: Path to .env file (optional)

        Returns:
            Config instance with values from environment
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
            default_model=os.getenv("CITEVIEW_MODEL", "gemini-2.5-flash"),
            excerpt_preview_length=int(os.getenv("CITEVIEW_EXCERPT_PREVIEW_LENGTH", "200")),
            upload_dir=os.getenv("CITEVIEW_UPLOAD_DIR", "./uploads"),
            max_upload_mb=int(os.getenv("CITEVIEW_MAX_UPLOAD_MB", "100")),
            operation_poll_interval=float(os.getenv("CITEVIEW_POLL_INTERVAL", "1.0")),
            operation_timeout=float(os.getenv("CITEVIEW_OPERATION_TIMEOUT", "600")),
            enable_rate_limiting=os.getenv("CITEVIEW_ENABLE_RATE_LIMITING", "true").lower()
            == "true",
            search_calls_per_minute=int(os.getenv("CITEVIEW_SEARCH_CALLS_PER_MINUTE", "15")),
            host=os.getenv("CITEVIEW_HOST", "127.0.0.1"),
            port=int(os.getenv("CITEVIEW_PORT") or os.getenv("PORT") or "3000"),
            production=os.getenv("CITEVIEW_ENV", "development").lower() == "production",
            log_level=os.getenv("CITEVIEW_LOG_LEVEL", "INFO"),
        )

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Load configuration from dictionary.

        Args:
            config_dict: Dictionary with configuration values

        Returns:
            Config instance
        """
        return cls(**{k: v for k, v in config_dict.items() if k in cls.__annotations__})
