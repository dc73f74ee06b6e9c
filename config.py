"""
Flask Configuration Management

Environment-specific configuration classes for development, testing and
production deployments of the CashHeros validation service. Values come from
environment variables, which app.py loads from .env files through
python-dotenv before the configuration class is selected.
"""

import os
import logging
from typing import Optional


def _env_flag(name: str, default: str = 'false') -> bool:
    return os.environ.get(name, default).lower() in ('1', 'true', 'yes', 'on')


class Config:
    """
    Base configuration class containing common settings for all environments.

    Environment-specific classes override individual values; everything else
    is inherited.
    """

    # Flask Core Configuration
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-key-change-in-production'
    FLASK_APP = os.environ.get('FLASK_APP', 'app.py')

    # Logging Configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FORMAT = '%(message)s'
    LOG_JSON = _env_flag('LOG_JSON', 'false')

    # Validation Settings
    VALIDATION_LOG_FAILURES = _env_flag('VALIDATION_LOG_FAILURES', 'true')

    # Field order in validation error maps follows validator order
    JSON_SORT_KEYS = False

    # Application Settings
    MAX_CONTENT_LENGTH = 1 * 1024 * 1024  # 1MB max JSON body

    @staticmethod
    def init_app(app):
        """
        Initialize application with configuration-specific settings.

        Args:
            app: Flask application instance
        """
        pass

    @classmethod
    def validate_required_config(cls) -> bool:
        """
        Validate that all required configuration variables are set.

        Returns:
            bool: True if all required configuration is valid, False otherwise
        """
        if cls.SECRET_KEY == 'dev-key-change-in-production':
            logging.warning("Configuration warning: SECRET_KEY not properly set")
            return False
        return True


class DevelopmentConfig(Config):
    """Development configuration: debug mode and verbose console logging."""

    DEBUG = True
    TESTING = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class TestingConfig(Config):
    """Testing configuration used by the pytest fixtures."""

    TESTING = True
    DEBUG = False
    SECRET_KEY = 'testing-secret-key'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'WARNING')
    LOG_JSON = False


class ProductionConfig(Config):
    """Production configuration: JSON logs and a required secret key."""

    DEBUG = False
    TESTING = False
    LOG_JSON = _env_flag('LOG_JSON', 'true')

    @staticmethod
    def init_app(app):
        """Warn when production runs with the development secret key."""
        if not ProductionConfig.validate_required_config():
            app.logger.warning("Production configuration is incomplete")


config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}


def get_config(config_name: Optional[str] = None) -> Config:
    """
    Get configuration class based on environment name.

    Args:
        config_name: Environment name; defaults to the FLASK_ENV variable

    Returns:
        Config: Configuration class for the specified environment
    """
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'default')

    return config.get(config_name, config['default'])
