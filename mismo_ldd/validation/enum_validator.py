"""
LDD enumeration and datatype validation over raw XML text.

Each checked element is located with a per-element text pattern
(<Element>value</Element>), so every occurrence is checked regardless of where it
sits in the document. Elements with the same local name at different depths are
not told apart; this is a fixed checklist, not schema validation.

Severity split:
- A value outside its LDD enumeration is an INVALID_LDD_ENUM error
- A value failing its lexical datatype pattern is a DATATYPE_VIOLATION warning
"""

import logging
import re
from typing import Dict, List, Optional, Pattern

from ..config.config_manager import get_ldd_contract
from ..config.processing_defaults import ValidationDefaults
from ..models import LDDContract
from ..utils import StringUtils
from .validation_models import (
    EnumValidationResult,
    ValidationCategory,
    ValidationIssue,
    ValidationSeverity,
)


logger = logging.getLogger(__name__)

_element_patterns: Dict[str, Pattern] = {}


def _element_pattern(element: str) -> Pattern:
    """Cached <Element>(text)</Element> pattern for one element name."""
    pattern = _element_patterns.get(element)
    if pattern is None:
        escaped = re.escape(element)
        pattern = re.compile(f'<{escaped}>([^<]*)</{escaped}>')
        _element_patterns[element] = pattern
    return pattern


def get_line_number(content: str, offset: int) -> int:
    """1-based line number of the character at offset."""
    return StringUtils.line_number_at(content, offset)


def validate_enum_values(xml_content: str, contract: Optional[LDDContract] = None) -> EnumValidationResult:
    """
    Check every enumerated element in the checklist against its LDD enumeration.

    Args:
        xml_content: Raw XML text
        contract: LDD contract to use; defaults to the globally loaded one

    Returns:
        EnumValidationResult with one INVALID_LDD_ENUM error per offending occurrence
    """
    contract = contract or get_ldd_contract()
    result = EnumValidationResult()

    for check in contract.enum_checks:
        allowed = contract.ldd_enums[check.enum_key]
        for match in _element_pattern(check.element).finditer(xml_content):
            value = match.group(1).strip()
            if not value or value in allowed:
                continue

            preview = ', '.join(allowed[:ValidationDefaults.ALLOWED_VALUES_PREVIEW])
            line = get_line_number(xml_content, match.start())
            logger.debug(f"<{check.element}> value '{value}' is not in {check.enum_key} (line {line})")
            result.errors.append(ValidationIssue(
                code='INVALID_LDD_ENUM',
                category=ValidationCategory.ENUM,
                severity=ValidationSeverity.ERROR,
                message=f'Invalid {check.element} value "{value}". Allowed: {preview}...',
                line=line,
                column=1,
                xpath=f'//{check.element}',
                allowed_values=allowed,
            ))

    return result


def validate_datatypes(xml_content: str, contract: Optional[LDDContract] = None) -> List[ValidationIssue]:
    """
    Check element values against their lexical datatype patterns.

    Returns:
        DATATYPE_VIOLATION warnings; never errors
    """
    contract = contract or get_ldd_contract()
    warnings: List[ValidationIssue] = []

    for check in contract.datatype_checks:
        pattern = contract.get_pattern(check.pattern_name)
        for match in _element_pattern(check.element).finditer(xml_content):
            value = match.group(1).strip()
            if not value or pattern.match(value):
                continue

            warnings.append(ValidationIssue(
                code='DATATYPE_VIOLATION',
                category=ValidationCategory.DATATYPE,
                severity=ValidationSeverity.WARNING,
                message=f'Invalid {check.type_label} format for {check.element}: "{value}"',
                line=get_line_number(xml_content, match.start()),
                column=1,
                xpath=f'//{check.element}',
            ))

    if warnings:
        logger.debug(f"Datatype scan produced {len(warnings)} warnings")
    return warnings
