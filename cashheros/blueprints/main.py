"""
Main blueprint: service health.
"""

from flask import Blueprint, current_app

from cashheros import __version__
from cashheros.utils.response import send_success
from cashheros.validation.middleware import EXTENSION_KEY

main_bp = Blueprint('main', __name__)


@main_bp.route('/health', methods=['GET'])
def health():
    """Liveness check reporting whether the rule sets were compiled."""
    extension = current_app.extensions.get(EXTENSION_KEY)
    registry = extension.registry if extension is not None else None

    return send_success(
        {
            'status': 'healthy' if registry is not None else 'degraded',
            'version': __version__,
            'rule_sets': len(registry) if registry is not None else 0,
        },
        message='Service is healthy' if registry is not None else 'Validation is not configured',
    )
