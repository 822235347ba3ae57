"""
Tests for settings, errors, logging and model configuration.
"""
import logging

import pytest
from pydantic import ValidationError

from totp_api.app.core.config import DEV_SECRET_KEY, Settings
from totp_api.app.core.errors import CodeMismatch, InvalidSecret
from totp_api.app.core.logging import setup_logging
from totp_api.app.models import User


class TestSettings:

    def test_production_refuses_dev_secret_key(self):
        """Should not start in production with the development signing key."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, ENVIRONMENT="production", SECRET_KEY=DEV_SECRET_KEY)

    def test_production_with_real_secret_key(self):
        config = Settings(_env_file=None, ENVIRONMENT="Production", SECRET_KEY="s3cr3t-from-vault")

        assert config.is_production is True

    def test_development_allows_dev_secret_key(self):
        config = Settings(_env_file=None, ENVIRONMENT="development", SECRET_KEY=DEV_SECRET_KEY)

        assert config.is_production is False

    def test_database_url_normalized(self):
        config = Settings(_env_file=None, DATABASE_URL="postgres://u:p@db/totp")

        assert config.DATABASE_URL == "postgresql+asyncpg://u:p@db/totp"

    def test_unknown_otp_algorithm(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, OTP_POLICY_ALGORITHM="HmacMD5")


class TestModels:

    def test_user_credentials_never_lazy_load(self):
        """Credentials are looked up by name through the store, never through the relationship."""
        assert User.credentials.property.lazy == "raise"


class TestErrors:

    def test_default_message(self):
        error = CodeMismatch()

        assert error.status_code == 401
        assert error.message == "Invalid TOTP code"

    def test_message_override(self):
        assert InvalidSecret("Secret too short").message == "Secret too short"


class TestLogging:

    def test_setup_logging_without_level(self):
        """Falls back to LOG_LEVEL and quiets the SQL engine logger."""
        setup_logging()

        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
