"""
Tests for campaign_service.core.config.
"""
import pytest
from pydantic import ValidationError

from campaign_service.core.config import Settings


class TestSettings:

    def test_cors_origins_from_comma_string(self, monkeypatch):
        monkeypatch.setenv("BACKEND_CORS_ORIGINS", "https://a.example, https://b.example,")
        assert Settings(_env_file=None).cors_origins == ["https://a.example", "https://b.example"]

    def test_log_level_upper_cased(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert Settings(_env_file=None).LOG_LEVEL == "DEBUG"

    def test_sequence_backend_choices(self, monkeypatch):
        monkeypatch.setenv("SEQUENCE_BACKEND", "memcached")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_identifier_defaults(self, monkeypatch):
        for name in ("CAMPAIGN_ID_PREFIX", "CAMPAIGN_ID_WIDTH", "CAMPAIGN_SEQUENCE_NAME"):
            monkeypatch.delenv(name, raising=False)
        config = Settings(_env_file=None)
        assert (config.CAMPAIGN_ID_PREFIX, config.CAMPAIGN_ID_WIDTH) == ("CAMP", 3)
        assert config.CAMPAIGN_SEQUENCE_NAME == "campaign_seq"
