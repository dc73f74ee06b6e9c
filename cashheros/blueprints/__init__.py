"""
Blueprint registration for the CashHeros validation service.

Blueprint Organization:
- Main Blueprint (/): health check
- Validation Blueprint (/api/validation): rule-set and schema discovery,
  dry-run payload validation
"""

from flask import Flask

from cashheros.utils.logging import get_logger

logger = get_logger("blueprints")


def register_blueprints(app: Flask) -> None:
    """
    Register every blueprint with the application.

    Args:
        app (Flask): Flask application instance for blueprint registration
    """
    from .main import main_bp
    from .validation import validation_bp

    for blueprint in (main_bp, validation_bp):
        app.register_blueprint(blueprint)
        logger.debug("Blueprint registered", blueprint=blueprint.name, url_prefix=blueprint.url_prefix)


__all__ = ['register_blueprints']
