"""
Data Quality Module
"""
from .validators import DataValidator, ValidationResult, create_snapshot_validator

__all__ = [
    "DataValidator",
    "ValidationResult",
    "create_snapshot_validator",
]
