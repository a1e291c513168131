"""
Postboard Backend — Settings Unit Tests
=========================================

What we test:
    ✅ The development secret is refused for production
    ✅ Secrets shorter than an HS256 key are refused
    ✅ Enum-like settings are normalized or rejected
"""

import pytest

from postboard.config import DEV_JWT_SECRET, MIN_JWT_SECRET_LENGTH, Settings


def _settings(**overrides) -> Settings:
    return Settings(database_url="sqlite+aiosqlite://", **overrides)


class TestProductionChecks:

    def test_dev_secret_refused(self):
        with pytest.raises(ValueError, match="JWT_SECRET is not set"):
            _settings(jwt_secret=DEV_JWT_SECRET).validate_required_for_production()

    def test_secret_one_short_of_minimum_refused(self):
        secret = "s" * (MIN_JWT_SECRET_LENGTH - 1)
        with pytest.raises(ValueError, match="shorter than 32 characters"):
            _settings(jwt_secret=secret).validate_required_for_production()

    def test_minimum_length_secret_accepted(self):
        assert MIN_JWT_SECRET_LENGTH == 32
        _settings(jwt_secret="s" * MIN_JWT_SECRET_LENGTH).validate_required_for_production()


class TestFieldValidators:

    def test_log_level_upper_cased(self):
        assert _settings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level(self):
        with pytest.raises(ValueError):
            _settings(log_level="chatty")

    def test_asymmetric_algorithm_rejected(self):
        with pytest.raises(ValueError):
            _settings(jwt_algorithm="RS256")

    def test_cors_origins_list(self):
        settings = _settings(cors_origins="http://a.test, http://b.test,")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]
