"""
XML Validation System for MISMO LDD documents

MODULES:
- enum_validator: LDD enumeration and datatype checks over raw XML text
- namespace_detector: Namespace declarations and vendor extension blocks
- schema_pack_validator: Full validation against a pinned schema pack
- validation_models: Shared result structures

NOTE: Validators are imported directly from their source to avoid circular imports.
Import from specific modules, not from this __init__.py.
"""

# Shared validation data structures (safe to import here)
from .validation_models import (
    ValidationIssue, ValidationSeverity, ValidationCategory, ValidationStatus,
    WellFormedResult, EnumValidationResult, PackValidationReport
)

__all__ = [
    'ValidationIssue',
    'ValidationSeverity',
    'ValidationCategory',
    'ValidationStatus',
    'WellFormedResult',
    'EnumValidationResult',
    'PackValidationReport',
]
