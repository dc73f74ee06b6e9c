"""
CashHeros API validation package.

Package Components:
- validation: rule-chain compiler, payload schemas and Flask decorators
- blueprints: validation discovery endpoints and health checks
- utils: logging, response envelopes and error handling
"""

__version__ = "1.0.0"
__description__ = "Request validation for the CashHeros coupon and cashback API"
