"""
Tests for configuration system
"""
import os
import pytest
from config import (
    Config,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    get_config,
    normalize_database_url
)


@pytest.mark.unit
class TestBaseConfig:
    """Tests for base configuration"""

    def test_base_config_has_secret_key(self):
        """Test that base config has a secret key"""
        config = Config()
        assert hasattr(config, 'SECRET_KEY')
        assert config.SECRET_KEY is not None

    def test_base_config_has_max_content_length(self):
        """Test that base config has max content length"""
        config = Config()
        assert config.MAX_CONTENT_LENGTH == 5 * 1024 * 1024

    def test_base_config_has_cors_settings(self):
        """Test that base config has CORS settings"""
        config = Config()
        assert hasattr(config, 'CORS_ORIGINS')
        assert 'GET' in config.CORS_METHODS
        assert 'DELETE' in config.CORS_METHODS

    def test_base_config_has_user_defaults(self):
        """Test that new users default to staff in New York time"""
        config = Config()
        assert config.DEFAULT_USER_ROLE == 'staff'
        assert config.DEFAULT_TIMEZONE == 'America/New_York'

    def test_base_config_has_demo_admin(self):
        """Test that the seeded admin account is configured"""
        config = Config()
        assert config.DEMO_ADMIN_EMAIL
        assert config.DEMO_ADMIN_PASSWORD

    def test_base_config_has_logging_settings(self):
        """Test that base config has logging settings"""
        config = Config()
        assert config.LOG_FILE
        assert '%(levelname)s' in config.LOG_FORMAT


@pytest.mark.unit
class TestDevelopmentConfig:
    """Tests for development configuration"""

    def test_development_config_has_debug(self):
        """Test that development config has debug enabled"""
        assert DevelopmentConfig.DEBUG is True
        assert DevelopmentConfig.TESTING is False

    def test_development_config_has_debug_log_level(self):
        """Test that development config has DEBUG log level"""
        assert DevelopmentConfig.LOG_LEVEL == 'DEBUG'

    def test_development_config_allows_all_cors(self):
        """Test that development config allows all CORS origins"""
        assert '*' in DevelopmentConfig.CORS_ORIGINS


@pytest.mark.unit
class TestProductionConfig:
    """Tests for production configuration"""

    def test_production_config_has_debug_disabled(self):
        """Test that production config has debug disabled"""
        assert ProductionConfig.DEBUG is False
        assert ProductionConfig.TESTING is False

    def test_production_config_has_secure_cookies(self):
        """Test that production config has secure cookies"""
        assert ProductionConfig.SESSION_COOKIE_SECURE is True
        assert ProductionConfig.SESSION_COOKIE_HTTPONLY is True
        assert ProductionConfig.SESSION_COOKIE_SAMESITE == 'Lax'

    def test_production_config_has_https_scheme(self):
        """Test that production config prefers HTTPS"""
        assert ProductionConfig.PREFERRED_URL_SCHEME == 'https'


@pytest.mark.unit
class TestTestingConfig:
    """Tests for testing configuration"""

    def test_testing_config_has_testing_enabled(self):
        """Test that testing config has testing enabled"""
        assert TestingConfig.TESTING is True

    def test_testing_config_uses_in_memory_database(self):
        """Test that testing config runs on in-memory SQLite"""
        assert TestingConfig.DATABASE_URL == 'sqlite://'
        assert TestingConfig.AUTO_CREATE_TABLES is True
        assert TestingConfig.SEED_DATABASE is True

    def test_testing_config_logs_to_console_only(self):
        """Test that testing config does not write log files"""
        assert TestingConfig.LOG_TO_FILE is False


@pytest.mark.unit
class TestDatabaseUrl:
    """Tests for DATABASE_URL normalization"""

    def test_postgres_scheme_is_rewritten(self):
        """Test that Heroku style postgres:// URLs are rewritten"""
        url = normalize_database_url('postgres://u:p@host:5432/db')
        assert url == 'postgresql://u:p@host:5432/db'

    def test_other_urls_are_unchanged(self):
        """Test that other URLs pass through"""
        assert normalize_database_url('sqlite:///legalflow.db') == 'sqlite:///legalflow.db'
        assert normalize_database_url(None) is None


@pytest.mark.unit
class TestGetConfig:
    """Tests for configuration selector"""

    def test_get_config_returns_development_by_default(self, monkeypatch):
        """Test that get_config returns development config by default"""
        monkeypatch.delenv('FLASK_ENV', raising=False)
        assert get_config() == DevelopmentConfig

    def test_get_config_returns_production_when_set(self, monkeypatch):
        """Test that get_config returns production config when env is production"""
        monkeypatch.setenv('FLASK_ENV', 'production')
        assert get_config() == ProductionConfig

    def test_get_config_prefers_explicit_name(self, monkeypatch):
        """Test that an explicit name wins over FLASK_ENV"""
        monkeypatch.setenv('FLASK_ENV', 'production')
        assert get_config('testing') == TestingConfig

    def test_get_config_falls_back_for_unknown_name(self):
        """Test that an unknown name falls back to development"""
        assert get_config('staging') == DevelopmentConfig
