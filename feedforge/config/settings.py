"""
FeedForge Configuration System
==============================

Configuration management with environment variables and Pydantic models.
Environment variables (``FEEDFORGE_`` prefix, ``__`` for nesting) override
Field defaults.
"""

from pathlib import Path
from typing import Optional
from enum import Enum
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from ..utils.exceptions import ConfigurationError, ErrorCode


class LogLevel(str, Enum):
    """Level names accepted by FEEDFORGE_LOGGING__LEVEL."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class SiteSettings(BaseModel):
    """Site identity used in generated feeds."""
    title: str = Field(default="FeedForge", description="Site title, used as the feed generator name")
    copyright: Optional[str] = Field(default=None, description="Copyright notice attached to generated feeds")
    base_url: Optional[str] = Field(default=None, description="Public base URL used to resolve relative XSLT URLs")


class XsltSettings(BaseModel):
    """Stylesheets referenced from the xml-stylesheet processing instruction."""
    atom_url: Optional[str] = Field(default=None, description="XSLT URL for Atom feeds")
    rss_url: Optional[str] = Field(default=None, description="XSLT URL for RSS 2.0 feeds")
    rdf_url: Optional[str] = Field(default=None, description="XSLT URL for RDF/RSS 1.0 feeds")

    def for_dialect(self, dialect: str) -> Optional[str]:
        """Return the configured stylesheet URL for 'atom', 'rss' or 'rdf'."""
        return {
            "atom": self.atom_url,
            "rss": self.rss_url,
            "rdf": self.rdf_url,
        }.get(dialect.lower())


class HandlerSettings(BaseModel):
    """Feed generation pipeline configuration."""
    timeout_ms: int = Field(default=5000, ge=1, le=600000, description="Feed generation deadline in milliseconds")
    pretty_print: Optional[bool] = Field(default=None, description="Indent output; unset follows debug mode")
    cancel_on_timeout: bool = Field(default=False, description="Cancel async generators that miss the deadline")
    allow_url_fetch: Optional[bool] = Field(default=None, description="Serve ?url= round-trips; unset follows debug mode")


class FetchSettings(BaseModel):
    """Remote feed fetching for the ?url= round-trip path."""
    request_timeout: int = Field(default=30, ge=1, le=300, description="Request timeout in seconds")
    user_agent: str = Field(default="FeedForge/1.0", description="User-Agent header sent when fetching")
    max_content_bytes: int = Field(default=5 * 1024 * 1024, ge=1024, description="Largest document accepted")
    allow_private_hosts: bool = Field(default=False, description="Allow fetching loopback/private addresses")


class ServerSettings(BaseModel):
    """HTTP server configuration."""
    host: str = Field(default="127.0.0.1", description="Bind address")
    port: int = Field(default=8080, ge=1, le=65535, description="Bind port")


class LoggingSettings(BaseModel):
    """Where log records go and in what shape."""
    level: LogLevel = Field(default=LogLevel.INFO, description="Level for the feedforge logger tree")
    file_path: Optional[str] = Field(default="logs/feedforge.log", description="Rotating JSON log; empty disables it")
    max_file_size_mb: int = Field(default=10, ge=1, le=100, description="Rotate after this many MB")
    backup_count: int = Field(default=5, ge=1, le=20, description="Rotated files kept")
    structured_logging: bool = Field(default=False, description="JSON lines on the console too")
    console_logging: bool = Field(default=True, description="Log to stderr")

    @field_validator("file_path")
    @classmethod
    def empty_path_disables_file(cls, v):
        if v is not None and not v.strip():
            return None
        return v


class FeedForgeSettings(BaseSettings):
    """All FeedForge settings; nested sections read FEEDFORGE_<SECTION>__<FIELD>."""

    site: SiteSettings = Field(default_factory=SiteSettings)
    xslt: XsltSettings = Field(default_factory=XsltSettings)
    handler: HandlerSettings = Field(default_factory=HandlerSettings)
    fetch: FetchSettings = Field(default_factory=FetchSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    app_name: str = Field(default="FeedForge", description="Application name")
    version: str = Field(default="1.0.0", description="Reported in /health and generated feeds")
    debug: bool = Field(default=False, description="Verbose error feeds and pretty output")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_nested_delimiter": "__",
        "env_prefix": "FEEDFORGE_",
        "extra": "ignore",
    }

    def validate_configuration(self) -> None:
        """Check cross-field constraints the field types cannot express.

        Raises:
            ConfigurationError: Listing every problem found
        """
        problems = []

        for dialect in ("atom", "rss", "rdf"):
            url = self.xslt.for_dialect(dialect)
            if url and urlparse(url).scheme not in ("", "http", "https"):
                problems.append(f"Unsupported XSLT URL scheme for {dialect}: {url}")

        if self.logging.file_path:
            try:
                Path(self.logging.file_path).parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                problems.append(f"Log directory cannot be created: {e}")

        if problems:
            raise ConfigurationError(
                "Invalid configuration: " + "; ".join(problems),
                error_code=ErrorCode.CONFIG_INVALID,
            )

    @property
    def effective_pretty_print(self) -> bool:
        if self.handler.pretty_print is None:
            return self.debug
        return self.handler.pretty_print

    def get_effective_log_level(self) -> str:
        """DEBUG in debug mode, otherwise the configured level."""
        return "DEBUG" if self.debug else self.logging.level.value


def load_settings() -> FeedForgeSettings:
    """Read .env, build settings from the environment and validate them.

    Raises:
        ConfigurationError: For missing, malformed or inconsistent values
    """
    from dotenv import load_dotenv
    load_dotenv()

    try:
        settings = FeedForgeSettings()
        settings.validate_configuration()
        return settings

    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(
            f"Settings could not be loaded: {e}",
            error_code=ErrorCode.CONFIG_PARSE_ERROR,
        ) from e


# Process-wide settings, built on first use
_settings: Optional[FeedForgeSettings] = None


def get_settings(reload: bool = False) -> FeedForgeSettings:
    """Shared settings instance; ``reload=True`` rebuilds it from the environment."""
    global _settings

    if _settings is None or reload:
        _settings = load_settings()

    return _settings
