"""
Flask Application Factory - Main Entry Point

Builds the CashHeros validation service:
- environment variables loaded from .env files through python-dotenv
- environment-specific configuration from config.py
- structured logging (structlog) and JSON error handlers
- the ValidationExtension, which compiles every rule set at startup so that
  a malformed rule set stops the application before it serves a request
- blueprint registration

Usage:
    flask --app app run
"""

import os
from pathlib import Path
from typing import Optional

from flask import Flask
from dotenv import load_dotenv

from config import get_config
from cashheros.blueprints import register_blueprints
from cashheros.utils.error_handling import init_error_handling
from cashheros.utils.logging import get_logger, init_logging
from cashheros.validation.middleware import ValidationExtension


def load_environment_variables() -> list:
    """
    Load environment variables from .env files using python-dotenv.

    Environment Search Order:
        1. .env (default environment settings)
        2. .env.{FLASK_ENV} (environment-specific settings)
        3. .env.local (local development overrides)
    Variables already set in the process environment are never overridden.

    Returns:
        list: The .env files that were found and loaded
    """
    flask_env = os.environ.get('FLASK_ENV', 'development')
    env_files = ['.env', f'.env.{flask_env}', '.env.local']

    loaded_files = []
    for env_file in env_files:
        if Path(env_file).exists():
            load_dotenv(env_file, override=False)
            loaded_files.append(env_file)

    return loaded_files


def create_app(config_name: Optional[str] = None, rule_sets=None) -> Flask:
    """
    Flask application factory.

    Args:
        config_name: Configuration name ('development', 'testing',
            'production'); defaults to FLASK_ENV
        rule_sets: Optional mapping of rule-set name to field rules,
            replacing the built-in rule sets

    Returns:
        Flask: Configured application

    Raises:
        RuleConfigurationError: if any rule set is malformed, or a view
            names a rule set that is not registered
    """
    loaded_files = load_environment_variables()

    app = Flask(__name__)

    config_class = get_config(config_name)
    app.config.from_object(config_class)
    config_class.init_app(app)
    app.json.sort_keys = app.config.get('JSON_SORT_KEYS', False)

    init_logging(app)
    init_error_handling(app)

    validation = ValidationExtension(app, rule_sets=rule_sets)
    register_blueprints(app)
    validation.check_views(app)

    get_logger("app").info(
        "Application created",
        config=config_class.__name__,
        env_files=loaded_files,
        blueprints=sorted(app.blueprints),
    )

    return app


if __name__ == '__main__':
    application = create_app()
    application.run(
        host=os.environ.get('HOST', '127.0.0.1'),
        port=int(os.environ.get('PORT', '5000'))
    )
