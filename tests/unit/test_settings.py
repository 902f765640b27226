"""
Unit Tests for Configuration
============================

Tests for settings defaults, environment overrides and validation.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from feedforge.config.settings import (
    FeedForgeSettings,
    HandlerSettings,
    LoggingSettings,
    XsltSettings,
    get_settings,
)
from feedforge.utils.exceptions import ConfigurationError


class TestSettingsDefaults:
    """Test default values."""

    def test_handler_defaults(self):
        handler = HandlerSettings()
        assert handler.timeout_ms == 5000
        assert handler.pretty_print is None
        assert handler.cancel_on_timeout is False
        assert handler.allow_url_fetch is None

    def test_timeout_bounds(self):
        with pytest.raises(PydanticValidationError):
            HandlerSettings(timeout_ms=0)
        with pytest.raises(PydanticValidationError):
            HandlerSettings(timeout_ms=600001)

    def test_empty_log_path_disables_file_logging(self):
        assert LoggingSettings(file_path="").file_path is None

    def test_xslt_for_dialect(self):
        xslt = XsltSettings(atom_url="/atom.xsl", rss_url="/rss.xsl")
        assert xslt.for_dialect("atom") == "/atom.xsl"
        assert xslt.for_dialect("rss") == "/rss.xsl"
        assert xslt.for_dialect("rdf") is None
        assert xslt.for_dialect("unknown") is None


class TestEffectiveValues:
    """Test values derived from debug mode."""

    def test_pretty_print_follows_debug(self):
        assert FeedForgeSettings(debug=True).effective_pretty_print is True
        assert FeedForgeSettings(debug=False).effective_pretty_print is False

    def test_explicit_pretty_print_wins(self):
        settings = FeedForgeSettings(debug=True, handler=HandlerSettings(pretty_print=False))
        assert settings.effective_pretty_print is False

    def test_effective_log_level(self):
        assert FeedForgeSettings(debug=True).get_effective_log_level() == "DEBUG"
        settings = FeedForgeSettings(debug=False, logging=LoggingSettings(level="WARNING"))
        assert settings.get_effective_log_level() == "WARNING"


class TestEnvironmentOverrides:
    """Test FEEDFORGE_ environment variables."""

    def test_nested_environment_values(self, monkeypatch):
        monkeypatch.setenv("FEEDFORGE_HANDLER__TIMEOUT_MS", "1234")
        monkeypatch.setenv("FEEDFORGE_SITE__COPYRIGHT", "Copyright Env")
        monkeypatch.setenv("FEEDFORGE_XSLT__RSS_URL", "/styles/rss.xsl")
        settings = FeedForgeSettings()
        assert settings.handler.timeout_ms == 1234
        assert settings.site.copyright == "Copyright Env"
        assert settings.xslt.rss_url == "/styles/rss.xsl"

    def test_test_environment_is_applied(self):
        settings = get_settings(reload=True)
        assert settings.site.title == "FeedForge Test Site"
        assert settings.logging.file_path is None
        assert get_settings() is settings


class TestValidateConfiguration:
    """Test validate_configuration."""

    def test_valid_configuration(self):
        FeedForgeSettings(xslt=XsltSettings(atom_url="http://example.com/a.xsl")).validate_configuration()

    def test_unsupported_xslt_scheme(self):
        settings = FeedForgeSettings(xslt=XsltSettings(rdf_url="ftp://example.com/rdf.xsl"))
        with pytest.raises(ConfigurationError) as exc_info:
            settings.validate_configuration()
        assert "rdf" in exc_info.value.message

    def test_log_directory_is_created(self, tmp_path):
        log_file = tmp_path / "nested" / "feedforge.log"
        FeedForgeSettings(logging=LoggingSettings(file_path=str(log_file))).validate_configuration()
        assert log_file.parent.is_dir()
