"""
WSGI Entry Point for Production Deployment

Gunicorn Configuration Example:
    gunicorn --bind 0.0.0.0:8000 --workers 4 wsgi:application

The application is created once at import time, so rule-set compilation
errors surface when the server loads this module.
"""

import os

from app import create_app

application = create_app(os.environ.get('FLASK_ENV', 'production'))
app = application
