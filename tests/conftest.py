"""
Pytest Configuration and Fixtures for the CashHeros validation service

Provides a testing-config Flask application built by the application
factory, with a handful of demo routes that exercise the validation
decorators, plus a RequestData factory for unit tests of the rule compiler.

Fixtures:
- app: Flask application created with TestingConfig and demo routes
- client: Flask test client (pytest-flask compatible)
- make_request: factory for RequestData instances
- valid_coupon: a coupon payload accepted by the coupon.create rule set
"""

import sys
from pathlib import Path
from typing import Any, Dict, Optional

import pytest
from flask import Flask, jsonify

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app import create_app
from cashheros.utils.error_handling import RequestValidationError
from cashheros.validation import (
    FieldRule,
    Location,
    RequestData,
    validate_rules,
    validate_with_schema,
    validated_data
)


# =============================================================================
# PYTEST CONFIGURATION AND MARKERS
# =============================================================================

def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components and functions")
    config.addinivalue_line("markers", "integration: Integration tests for Flask decorators and endpoints")


# =============================================================================
# FLASK APPLICATION FIXTURES
# =============================================================================

def register_demo_routes(app: Flask) -> None:
    """Routes guarded by the validation decorators, used by integration tests."""

    @app.route('/demo/coupons', methods=['POST'])
    @validate_rules('coupon.create')
    def create_coupon():
        return jsonify({'created': True}), 201

    @app.route('/demo/coupons/<id>', methods=['PUT'])
    @validate_rules('common.idParam', 'coupon.update')
    def update_coupon(id):
        return jsonify({'updated': id})

    @app.route('/demo/search', methods=['GET'])
    @validate_rules([
        FieldRule('query.q', ('notEmpty', {'minLength': 2}), 'Search term must be at least 2 characters'),
    ], 'common.pagination')
    def search():
        return jsonify({'searched': True})

    @app.route('/demo/register', methods=['POST'])
    @validate_with_schema('userRegistration')
    def register():
        return jsonify({'user': validated_data()})

    @app.route('/demo/listing', methods=['GET'])
    @validate_with_schema('pagination', location='query')
    def listing():
        data = validated_data(Location.QUERY)
        return jsonify({'page': data['page'], 'limit': data['limit'], 'order': data['order']})

    @app.route('/demo/raise', methods=['POST'])
    def raise_validation_error():
        raise RequestValidationError({'code': ['Coupon code already exists']})

    @app.route('/demo/boom', methods=['GET'])
    def boom():
        raise RuntimeError('database password is hunter2')


@pytest.fixture
def app() -> Flask:
    """
    Flask application configured for testing.

    Built through the application factory so that logging, error handlers,
    the validation extension and the blueprints are all registered.
    """
    application = create_app('testing')
    register_demo_routes(application)
    application.extensions['validation'].check_views(application)
    return application


@pytest.fixture
def client(app):
    return app.test_client()


# =============================================================================
# REQUEST DATA FIXTURES
# =============================================================================

@pytest.fixture
def make_request():
    """Factory building RequestData from plain dictionaries."""

    def _make(
        body: Optional[Any] = None,
        query: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None
    ) -> RequestData:
        return RequestData(
            body={} if body is None else body,
            query=query or {},
            params=params or {},
        )

    return _make


@pytest.fixture
def valid_coupon() -> Dict[str, Any]:
    return {
        'code': 'SAVE10',
        'title': 'Save ten percent',
        'discount': 10,
        'expiryDate': '2099-01-01T00:00:00Z',
        'isActive': True,
        'category': 'electronics',
    }
