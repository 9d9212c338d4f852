"""Tests for environment configuration."""

import pytest

from sqlgate.config import DEFAULT_DATABASE_PATH, DEFAULT_MAX_RECORD_COUNT, load_settings


class TestLoadSettings:
    def test_defaults(self):
        settings = load_settings({})
        assert settings.database_path == DEFAULT_DATABASE_PATH
        assert settings.read_only is False
        assert settings.max_record_count == DEFAULT_MAX_RECORD_COUNT == 100
        assert settings.log_level == "INFO"

    @pytest.mark.parametrize("raw, expected", [("true", True), ("TRUE", True), (" True ", True), ("false", False), ("1", False)])
    def test_read_only_flag(self, raw, expected):
        assert load_settings({"READONLY": raw}).read_only is expected

    @pytest.mark.parametrize("raw, expected", [("250", 250), (" 5 ", 5), ("abc", 100), ("0", 100), ("-3", 100), ("", 100)])
    def test_max_result_set(self, raw, expected):
        assert load_settings({"MAX_RESULT_SET": raw}).max_record_count == expected

    def test_settings_are_frozen(self):
        settings = load_settings({})
        with pytest.raises(AttributeError):
            settings.read_only = True
