"""
Static rule sets for the API routes.

Rule sets are grouped by entity and operation and registered under dotted
names (``coupon.create``, ``common.pagination``). They are read once when the
RuleSetRegistry is built at startup and never change afterwards.
"""

import re
from types import MappingProxyType

from cashheros.validation.chain import FieldRule

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")

COMMON_VALIDATION_RULES = MappingProxyType({
    "pagination": (
        FieldRule("query.page", ("optional", "isInt", {"min": 1}), "Page must be a positive integer"),
        FieldRule("query.limit", ("optional", "isInt", {"min": 1, "max": 100}), "Limit must be between 1 and 100"),
    ),
    "sorting": (
        FieldRule("query.sort", ("optional", "isString"), "Sort must be a string"),
        FieldRule("query.direction", ("optional", "isString", {"isIn": ["asc", "desc"]}), "Direction must be asc or desc"),
    ),
    "idParam": (
        FieldRule("params.id", ("isMongoId",), "Invalid ID format"),
    ),
    "email": (
        FieldRule("body.email", ("isEmail",), "Please provide a valid email address"),
    ),
    "password": (
        FieldRule("body.password", ("isString", {"minLength": 8}), "Password must be at least 8 characters long"),
    ),
})

VALIDATION_RULES = MappingProxyType({
    "user": MappingProxyType({
        "create": (
            FieldRule("body.name", ("notEmpty", "isString"), "Name is required"),
            FieldRule("body.email", ("notEmpty", "isEmail"), "Valid email is required"),
            FieldRule("body.password", ("notEmpty", "isString", {"minLength": 8}), "Password must be at least 8 characters long"),
        ),
        "update": (
            FieldRule("body.name", ("optional", "isString"), "Name must be a string"),
            FieldRule("body.email", ("optional", "isEmail"), "Valid email is required"),
            FieldRule("body.avatar", ("optional", "isURL"), "Avatar must be a valid URL"),
        ),
    }),
    "coupon": MappingProxyType({
        "create": (
            FieldRule("body.code", ("notEmpty", "isString"), "Coupon code is required"),
            FieldRule("body.title", ("notEmpty", "isString"), "Title is required"),
            FieldRule("body.description", ("optional", "isString"), "Description must be a string"),
            FieldRule("body.discount", ("notEmpty", "isFloat", {"min": 0}), "Discount must be a positive number"),
            FieldRule("body.expiryDate", ("optional", "isISO8601"), "Expiry date must be in ISO 8601 format"),
            FieldRule("body.isActive", ("optional", "isBoolean"), "isActive must be a boolean"),
            FieldRule("body.category", ("optional", "isString"), "Category must be a string"),
        ),
        "update": (
            FieldRule("body.code", ("optional", "isString"), "Coupon code must be a string"),
            FieldRule("body.title", ("optional", "isString"), "Title must be a string"),
            FieldRule("body.description", ("optional", "isString"), "Description must be a string"),
            FieldRule("body.discount", ("optional", "isFloat", {"min": 0}), "Discount must be a positive number"),
            FieldRule("body.expiryDate", ("optional", "isISO8601"), "Expiry date must be in ISO 8601 format"),
            FieldRule("body.isActive", ("optional", "isBoolean"), "isActive must be a boolean"),
            FieldRule("body.category", ("optional", "isString"), "Category must be a string"),
        ),
    }),
    "blog": MappingProxyType({
        "create": (
            FieldRule("body.title", ("notEmpty", "isString", {"minLength": 3, "maxLength": 200}),
                      "Title is required and must be between 3 and 200 characters"),
            FieldRule("body.content", ("notEmpty", "isString"), "Content is required"),
            FieldRule("body.summary", ("optional", "isString", {"maxLength": 500}), "Summary cannot exceed 500 characters"),
            FieldRule("body.category", ("optional", "isString"), "Category must be a string"),
            FieldRule("body.tags", ("optional", "isArray"), "Tags must be an array"),
            FieldRule("body.featuredImage", ("optional", "isURL"), "Featured image must be a valid URL"),
            FieldRule("body.isPublished", ("optional", "isBoolean"), "isPublished must be a boolean"),
            FieldRule("body.slug", ("optional", "isString", {"matches": SLUG_PATTERN}),
                      "Slug can only contain lowercase letters, numbers, and hyphens"),
        ),
        "update": (
            FieldRule("body.title", ("optional", "isString", {"minLength": 3, "maxLength": 200}),
                      "Title must be between 3 and 200 characters"),
            FieldRule("body.content", ("optional", "isString"), "Content must be a string"),
            FieldRule("body.summary", ("optional", "isString", {"maxLength": 500}), "Summary cannot exceed 500 characters"),
            FieldRule("body.category", ("optional", "isString"), "Category must be a string"),
            FieldRule("body.tags", ("optional", "isArray"), "Tags must be an array"),
            FieldRule("body.featuredImage", ("optional", "isURL"), "Featured image must be a valid URL"),
            FieldRule("body.isPublished", ("optional", "isBoolean"), "isPublished must be a boolean"),
            FieldRule("body.slug", ("optional", "isString", {"matches": SLUG_PATTERN}),
                      "Slug can only contain lowercase letters, numbers, and hyphens"),
            FieldRule("body.viewCount", ("optional", "isInt", {"min": 0}), "View count must be a non-negative integer"),
        ),
    }),
})


def _flatten():
    flat = {f"common.{name}": rules for name, rules in COMMON_VALIDATION_RULES.items()}
    for entity, operations in VALIDATION_RULES.items():
        for operation, rules in operations.items():
            flat[f"{entity}.{operation}"] = rules
    return flat


# Registered name -> ordered field rules.
RULE_SETS = MappingProxyType(_flatten())
