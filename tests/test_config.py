"""
Tests for environment-driven settings.
"""

import pytest

from src.utils.config import DEFAULT_PAGE_SIZE, load_settings

CHAOSBOARD_VARS = [
    "CHAOSBOARD_BACKEND",
    "CHAOSBOARD_SEED",
    "CHAOSBOARD_PAGE_SIZE",
    "CHAOSBOARD_ACTING_USER",
    "CHAOSBOARD_LOG_LEVEL",
]


class TestLoadSettings:
    """Tests for load_settings."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in CHAOSBOARD_VARS:
            monkeypatch.delenv(name, raising=False)

    def test_defaults(self):
        settings = load_settings()

        assert settings.backend == "memory"
        assert settings.seed is None
        assert settings.page_size == DEFAULT_PAGE_SIZE
        assert settings.log_level == "WARNING"

    def test_blank_page_size_uses_default(self, monkeypatch):
        monkeypatch.setenv("CHAOSBOARD_PAGE_SIZE", "")
        assert load_settings().page_size == DEFAULT_PAGE_SIZE

    @pytest.mark.parametrize("value", ["0", "-3"])
    def test_page_size_below_one_rejected(self, monkeypatch, value):
        monkeypatch.setenv("CHAOSBOARD_PAGE_SIZE", value)
        with pytest.raises(ValueError, match="CHAOSBOARD_PAGE_SIZE"):
            load_settings()

    def test_page_size_not_a_number(self, monkeypatch):
        monkeypatch.setenv("CHAOSBOARD_PAGE_SIZE", "ten")
        with pytest.raises(ValueError, match="must be an integer"):
            load_settings()

    def test_log_level_normalized(self, monkeypatch):
        monkeypatch.setenv("CHAOSBOARD_LOG_LEVEL", " debug ")
        assert load_settings().log_level == "DEBUG"

    def test_unknown_log_level_rejected(self, monkeypatch):
        monkeypatch.setenv("CHAOSBOARD_LOG_LEVEL", "LOUD")
        with pytest.raises(ValueError, match="CHAOSBOARD_LOG_LEVEL"):
            load_settings()

    def test_unknown_backend_rejected(self, monkeypatch):
        monkeypatch.setenv("CHAOSBOARD_BACKEND", "postgres")
        with pytest.raises(ValueError, match="CHAOSBOARD_BACKEND"):
            load_settings()
