"""
LDD Rules Engine

Maps internal business objects (loan, property, borrower, entity and asset
fields) onto MISMO elements, translating enum literals to MISMO-controlled
vocabulary and formatting values for their MISMO datatypes.

Translation Contract:
- Internal literals are translated through the contract's enum maps
- A value that is already a MISMO literal for its key is accepted unchanged
- Anything else fails closed: map_to_mismo returns None and validation
  reports INVALID_ENUM_VALUE; an internal value is never passed through as MISMO

Validation Codes (validate_and_transform):
- REQUIRED_FIELD_MISSING (error): required or conditionally required field is empty
- INVALID_ENUM_VALUE (error): enum value has no MISMO translation
- INVALID_DATATYPE (error): value is not acceptable for its datatype
- FORMAT_CONVERSION_FAILED (warning): value passed validation but could not be formatted

All lookup tables are read-only; every call builds its own result.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from ..config.config_manager import get_ldd_contract
from ..exceptions import UnknownActionError
from ..models import DataType, FieldMapping, LDDContract, RequiredIfCondition
from ..validation.validation_models import (
    CoverageReport,
    FieldDetail,
    MappingIssue,
    MappingValidationResult,
)
from .datatype_formatter import DatatypeFormatter


class RulesAction(Enum):
    """Actions served by the rules engine endpoint."""
    VALIDATE = "validate"
    VALIDATE_ENUM = "validate_enum"
    FORMAT_VALUE = "format_value"
    GET_ENUM_VALUES = "get_enum_values"
    GET_ALL_ENUMS = "get_all_enums"
    GET_FIELD_MAPPINGS = "get_field_mappings"
    MAP_TO_MISMO = "map_to_mismo"
    TEST_MAPPING_COVERAGE = "test_mapping_coverage"


@dataclass(frozen=True)
class EnumCheckResult:
    """Outcome of checking one value against an enum translation map."""
    valid: bool
    value: Optional[str] = None
    mapped: Optional[bool] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"valid": self.valid, "value": self.value}
        if self.mapped is not None:
            result["mapped"] = self.mapped
        if self.error is not None:
            result["error"] = self.error
        return result


def _is_empty(value: Any) -> bool:
    return value is None or value == ''


class LDDRulesEngine:
    """
    Field mapping and enum translation engine over the LDD contract.

    Stateless between calls: safe to share across concurrent requests.
    """

    def __init__(self, contract: Optional[LDDContract] = None):
        """
        Initialize the rules engine.

        Args:
            contract: LDD contract to use; defaults to the globally loaded one
        """
        self.logger = logging.getLogger(__name__)
        self.contract = contract or get_ldd_contract()
        self.formatter = DatatypeFormatter(self.contract)

        self.logger.debug(
            f"LDDRulesEngine initialized with {len(self.contract.field_mappings)} field mappings "
            f"and {len(self.contract.enum_maps)} enum maps"
        )

    def validate_enum(self, value: Any, enum_type: Optional[str]) -> EnumCheckResult:
        """
        Check one value against an enum translation map.

        Returns:
            valid with mapped=True for a translated internal literal, valid with
            mapped=False for a value already in MISMO vocabulary, invalid otherwise.
            Empty values are valid with value None.
        """
        if _is_empty(value):
            return EnumCheckResult(valid=True, value=None)

        enum_map = self.contract.enum_maps.get(enum_type) if enum_type else None
        if enum_map is None:
            return EnumCheckResult(valid=False, error=f'Unknown enum type: {enum_type}')

        translated = enum_map.translate(value)
        if translated is not None:
            return EnumCheckResult(valid=True, value=translated, mapped=True)

        if enum_map.is_mismo_value(value):
            return EnumCheckResult(valid=True, value=value, mapped=False)

        return EnumCheckResult(
            valid=False,
            error=f'Invalid value "{value}" for {enum_type}. Valid MISMO values: {", ".join(enum_map.mismo_values)}',
        )

    def map_to_mismo(self, value: Any, enum_type: Optional[str]) -> Optional[str]:
        """
        Translate one internal value to its MISMO literal.

        Returns:
            The MISMO literal, or None when no translation exists or the enum
            type is unknown
        """
        result = self.validate_enum(value, enum_type)
        if not result.valid:
            self.logger.debug(f"No MISMO translation for {enum_type}")
        return result.value if result.valid else None

    @staticmethod
    def evaluate_required_if(condition: Optional[RequiredIfCondition], data: Mapping[str, Any]) -> bool:
        """
        Decide whether a conditional requirement applies to the data object.

        Operators:
            value: field equals the operand
            not_value: field is present and differs from the operand
            in_values: field is one of the operands
            not_empty: field is present and not ''
        """
        if condition is None:
            return False

        field_value = data.get(condition.field)

        if condition.operator == 'value':
            return field_value == condition.operand and type(field_value) is type(condition.operand)
        if condition.operator == 'not_value':
            return field_value is not None and field_value != condition.operand
        if condition.operator == 'in_values':
            return field_value in condition.operand
        if condition.operator == 'not_empty':
            return not _is_empty(field_value)
        return False

    def validate_and_transform(self, data: Optional[Mapping[str, Any]],
                               field_mappings: Optional[Mapping[str, FieldMapping]] = None) -> MappingValidationResult:
        """
        Validate an internal business object and transform it into MISMO values.

        Args:
            data: Internal field name -> value
            field_mappings: Mappings to apply; defaults to the contract's

        Returns:
            MappingValidationResult with transformed values keyed by field name and
            by MISMO path
        """
        data = data or {}
        field_mappings = field_mappings if field_mappings is not None else self.contract.field_mappings
        result = MappingValidationResult()

        for field_name, mapping in field_mappings.items():
            value = data.get(field_name)
            reported_value = None if mapping.sensitive else value

            is_required = mapping.required or self.evaluate_required_if(mapping.required_if, data)
            if _is_empty(value):
                if is_required:
                    result.add_error(MappingIssue(
                        field=field_name,
                        code='REQUIRED_FIELD_MISSING',
                        message=f'Required field "{field_name}" is missing',
                        mismo_path=mapping.mismo_path,
                    ))
                continue

            if mapping.datatype == DataType.ENUM.value and mapping.enum_type:
                enum_result = self.validate_enum(value, mapping.enum_type)
                if not enum_result.valid:
                    result.add_error(MappingIssue(
                        field=field_name,
                        code='INVALID_ENUM_VALUE',
                        message=enum_result.error if not mapping.sensitive else f'Invalid value for {mapping.enum_type}',
                        mismo_path=mapping.mismo_path,
                        value=reported_value,
                    ))
                else:
                    result.record(field_name, mapping.mismo_path, enum_result.value)
                continue

            format_result = self.formatter.format_value(value, mapping.datatype)
            if not format_result.valid:
                result.add_error(MappingIssue(
                    field=field_name,
                    code='INVALID_DATATYPE',
                    message=f'Invalid format for "{field_name}". Expected {mapping.datatype}.',
                    mismo_path=mapping.mismo_path,
                    value=reported_value,
                ))
            elif format_result.formatted is None:
                shown = '***' if mapping.sensitive else value
                self.logger.warning(f"Could not convert '{field_name}' to {mapping.datatype}")
                result.add_warning(MappingIssue(
                    field=field_name,
                    code='FORMAT_CONVERSION_FAILED',
                    message=f'Could not convert "{field_name}" value "{shown}" to {mapping.datatype}',
                    mismo_path=mapping.mismo_path,
                ))
            else:
                result.record(field_name, mapping.mismo_path, format_result.formatted)

        self.logger.debug(
            f"validate_and_transform: {len(result.errors)} errors, {len(result.warnings)} warnings, "
            f"{len(result.transformed)} fields transformed"
        )
        return result

    def get_enum_values(self, enum_type: Optional[str]) -> Optional[Dict[str, Any]]:
        """Internal and MISMO literals for one enum key, or None for an unknown key."""
        enum_map = self.contract.enum_maps.get(enum_type) if enum_type else None
        return enum_map.to_summary() if enum_map else None

    def get_all_enums(self) -> Dict[str, Dict[str, Any]]:
        return {key: enum_map.to_summary() for key, enum_map in self.contract.enum_maps.items()}

    def get_field_mappings(self) -> Dict[str, Dict[str, Any]]:
        return {name: mapping.to_dict() for name, mapping in self.contract.field_mappings.items()}

    def run_bpa_mapping_test(self, test_data: Optional[Mapping[str, Any]] = None) -> CoverageReport:
        """
        Report mapping coverage of the business purpose application field list.

        Args:
            test_data: Optional sample object; when non-empty it is also run through
                validate_and_transform and the result attached

        Returns:
            CoverageReport where mapped_fields + len(unmapped_fields) == total_fields
        """
        bpa_fields = self.contract.bpa_field_names
        report = CoverageReport(total_fields=len(bpa_fields))

        for field_name in bpa_fields:
            mapping = self.contract.field_mappings.get(field_name)
            if mapping is None:
                report.unmapped_fields.append(field_name)
                report.field_details.append(FieldDetail(field=field_name, mapped=False))
                continue

            report.mapped_fields += 1
            report.field_details.append(FieldDetail(
                field=field_name,
                mapped=True,
                mismo_path=mapping.mismo_path,
                datatype=mapping.datatype,
                enum_type=mapping.enum_type,
                required=mapping.required,
                required_if=mapping.required_if.to_dict() if mapping.required_if else None,
            ))

        if report.total_fields:
            report.coverage_percent = f'{report.mapped_fields / report.total_fields * 100:.1f}'

        if test_data:
            report.validation_result = self.validate_and_transform(test_data)

        self.logger.info(
            f"BPA mapping coverage: {report.mapped_fields}/{report.total_fields} ({report.coverage_percent}%)"
        )
        return report

    def dispatch(self, action: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Run one rules engine action.

        Args:
            action: RulesAction value
            payload: Request body fields (data, value, enum_type, datatype, options)

        Returns:
            Action-specific response fields (without the 'success' flag)

        Raises:
            UnknownActionError: If action is not a RulesAction
        """
        try:
            rules_action = RulesAction(action)
        except ValueError:
            raise UnknownActionError(action)

        self.logger.debug(f"Dispatching rules engine action: {rules_action.value}")
        value = payload.get('value')
        enum_type = payload.get('enum_type')

        if rules_action == RulesAction.VALIDATE:
            return self.validate_and_transform(payload.get('data') or {}).to_dict()

        if rules_action == RulesAction.VALIDATE_ENUM:
            return self.validate_enum(value, enum_type).to_dict()

        if rules_action == RulesAction.FORMAT_VALUE:
            return self.formatter.format_value(value, payload.get('datatype'), payload.get('options')).to_dict()

        if rules_action == RulesAction.GET_ENUM_VALUES:
            return {'enum_type': enum_type, 'values': self.get_enum_values(enum_type)}

        if rules_action == RulesAction.GET_ALL_ENUMS:
            return {'enums': self.get_all_enums()}

        if rules_action == RulesAction.GET_FIELD_MAPPINGS:
            return {'mappings': self.get_field_mappings()}

        if rules_action == RulesAction.MAP_TO_MISMO:
            mismo_value = self.map_to_mismo(value, enum_type)
            return {'original': value, 'mismo_value': mismo_value, 'mapped': mismo_value is not None}

        # RulesAction.TEST_MAPPING_COVERAGE
        return self.run_bpa_mapping_test(payload.get('data') or {}).to_dict()
