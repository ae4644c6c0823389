"""
Validation Data Models and Structures

This module defines the result structures produced by the XML validators and the
rules engine. Every result is built fresh per call and serialized with to_dict()
into the JSON shape returned at the HTTP boundary; nothing here is persisted.

Key Data Structures:
- ValidationIssue: One finding against raw XML (code, category, severity, location)
- WellFormedResult: Outcome of the tag-balance scan
- EnumValidationResult: Enum errors and warnings from the element checklist
- PackValidationReport: Full schema pack validation with status and summary
- MappingIssue / MappingValidationResult: Findings from validate_and_transform
- FieldDetail / CoverageReport: BPA field coverage report

Severity split:
- Enum violations (INVALID_LDD_ENUM) are business-rule errors that block submission
- Datatype violations (DATATYPE_VIOLATION) are recoverable warnings
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ValidationSeverity(Enum):
    """Severity levels for validation issues."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ValidationCategory(Enum):
    """Categories of checks run against raw XML."""
    WELL_FORMEDNESS = "well_formedness"
    STRUCTURE = "structure"
    NAMESPACE = "namespace"
    ENUM = "enum"
    DATATYPE = "datatype"
    SEQUENCE = "sequence"


class ValidationStatus(Enum):
    """Overall outcome of a schema pack validation."""
    PASS = "PASS"
    PASS_WITH_WARNINGS = "PASS_WITH_WARNINGS"
    FAIL = "FAIL"


@dataclass
class ValidationIssue:
    """
    A single finding against raw XML text.

    Location Context:
    - line / column: 1-based position, best effort (column is 1 for regex scans)
    - xpath: '//Element' locator, human readable only

    allowed_values is populated for enum findings so callers can offer the
    full controlled vocabulary without a second lookup.
    """
    code: str
    category: ValidationCategory
    severity: ValidationSeverity
    message: str
    line: Optional[int] = None
    column: Optional[int] = None
    xpath: Optional[str] = None
    allowed_values: Optional[Tuple[str, ...]] = None

    def __str__(self) -> str:
        location = f" at line {self.line}" if self.line is not None else ""
        return f"[{self.severity.value.upper()}] {self.code}{location}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "code": self.code,
            "category": self.category.value,
            "severity": self.severity.value,
            "message": self.message,
            "line": self.line,
            "column": self.column,
            "xpath": self.xpath,
        }
        if self.allowed_values is not None:
            result["allowed_values"] = list(self.allowed_values)
        return result


@dataclass
class InfoEntry:
    """Informational entry in a pack report (detected namespaces, extensions)."""
    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, **self.details}


@dataclass
class WellFormedResult:
    """Outcome of the tag-balance scan. A valid result carries no other fields."""
    valid: bool
    error: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.valid:
            return {"valid": True}
        return {"valid": False, "error": self.error, "line": self.line, "column": self.column}


@dataclass
class EnumValidationResult:
    """Enum checklist findings."""
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "errors": [issue.to_dict() for issue in self.errors],
            "warnings": [issue.to_dict() for issue in self.warnings],
        }


@dataclass
class PackValidationReport:
    """
    Complete validation of one XML document against a schema pack.

    Status rules:
    - FAIL when the document is not well-formed or any error was found
    - PASS_WITH_WARNINGS when only warnings were found
    - PASS otherwise
    """
    well_formed: bool
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)
    info: List[InfoEntry] = field(default_factory=list)

    @property
    def status(self) -> ValidationStatus:
        if not self.well_formed or self.errors:
            return ValidationStatus.FAIL
        if self.warnings:
            return ValidationStatus.PASS_WITH_WARNINGS
        return ValidationStatus.PASS

    @staticmethod
    def _distinct_categories(issues: List[ValidationIssue]) -> List[str]:
        seen: List[str] = []
        for issue in issues:
            if issue.category.value not in seen:
                seen.append(issue.category.value)
        return seen

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "well_formed": self.well_formed,
            "errors": [issue.to_dict() for issue in self.errors],
            "warnings": [issue.to_dict() for issue in self.warnings],
            "info": [entry.to_dict() for entry in self.info],
            "summary": {
                "total_errors": len(self.errors),
                "total_warnings": len(self.warnings),
                "error_categories": self._distinct_categories(self.errors),
                "warning_categories": self._distinct_categories(self.warnings),
            },
        }


@dataclass
class MappingIssue:
    """
    A finding from validate_and_transform against one internal field.

    value is left as None for sensitive fields and for missing-field findings.
    """
    field: str
    code: str
    message: str
    mismo_path: str
    value: Any = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "field": self.field,
            "code": self.code,
            "message": self.message,
            "mismoPath": self.mismo_path,
        }
        if self.value is not None:
            result["value"] = self.value
        return result


@dataclass
class MappingValidationResult:
    """Outcome of validating and transforming an internal business object."""
    valid: bool = True
    errors: List[MappingIssue] = field(default_factory=list)
    warnings: List[MappingIssue] = field(default_factory=list)
    transformed: Dict[str, Any] = field(default_factory=dict)
    mismo_mapped: Dict[str, Any] = field(default_factory=dict)

    def add_error(self, issue: MappingIssue) -> None:
        self.errors.append(issue)
        self.valid = False

    def add_warning(self, issue: MappingIssue) -> None:
        self.warnings.append(issue)

    def record(self, field_name: str, mismo_path: str, value: Any) -> None:
        """Store a successfully transformed value under both its field name and its MISMO path."""
        self.transformed[field_name] = value
        self.mismo_mapped[mismo_path] = value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [issue.to_dict() for issue in self.errors],
            "warnings": [issue.to_dict() for issue in self.warnings],
            "transformed": dict(self.transformed),
            "mismoMapped": dict(self.mismo_mapped),
        }


@dataclass
class FieldDetail:
    """Coverage detail for one BPA field."""
    field: str
    mapped: bool
    mismo_path: Optional[str] = None
    datatype: Optional[str] = None
    enum_type: Optional[str] = None
    required: bool = False
    required_if: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        if not self.mapped:
            return {"field": self.field, "mapped": False}
        return {
            "field": self.field,
            "mapped": True,
            "mismoPath": self.mismo_path,
            "datatype": self.datatype,
            "enumType": self.enum_type,
            "required": self.required,
            "required_if": self.required_if,
        }


@dataclass
class CoverageReport:
    """
    BPA field mapping coverage.

    coverage_percent is a string with one decimal place, e.g. '97.5'.
    validation_result is only present when test data was supplied.
    """
    total_fields: int
    mapped_fields: int = 0
    unmapped_fields: List[str] = field(default_factory=list)
    field_details: List[FieldDetail] = field(default_factory=list)
    coverage_percent: str = "0.0"
    validation_result: Optional[MappingValidationResult] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "total_fields": self.total_fields,
            "mapped_fields": self.mapped_fields,
            "unmapped_fields": list(self.unmapped_fields),
            "field_details": [detail.to_dict() for detail in self.field_details],
            "coverage_percent": self.coverage_percent,
        }
        if self.validation_result is not None:
            result["validation_result"] = self.validation_result.to_dict()
        return result
