"""
Behavior Tracker Backend: Validation Package
=============================================

fields.py     → primitive annotated field types
factories.py  → parameterized schema builders (pagination, sorting, ranges)
engine.py     → validate / validate_or_raise
<resource>.py → request schemas per API resource
"""

from tracker.validation.engine import FieldError, ValidationResult, validate, validate_or_raise

__all__ = ["FieldError", "ValidationResult", "validate", "validate_or_raise"]
