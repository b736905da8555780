from __future__ import annotations

from .Validator import (
    ValidationRule,
    DataAwareRule,
    ValidationException,
    Validator,
    make_validator,
)

__all__ = [
    'ValidationRule',
    'DataAwareRule',
    'ValidationException',
    'Validator',
    'make_validator',
]
