"""
Core data models for the MISMO LDD rules engine.

This module defines the immutable structures the LDD contract is loaded into:
field mappings, enum translation maps, datatype and enum checklists, schema
packs, and the contract container that groups them.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Pattern, Tuple


class DataType(Enum):
    """Datatypes a field mapping can declare for its MISMO element."""
    AMOUNT = "Amount"
    PERCENT = "Percent"
    RATE_PERCENT = "RatePercent"
    DATE = "Date"
    DATETIME = "DateTime"
    INTEGER = "Integer"
    COUNT = "Count"
    PHONE = "Phone"
    SSN = "SSN"
    EIN = "EIN"
    POSTAL_CODE = "PostalCode"
    STATE_CODE = "StateCode"
    STRING = "String"
    CREDIT_SCORE = "CreditScore"
    RATIO = "Ratio"
    YES_NO = "YesNo"
    ENUM = "Enum"


REQUIRED_IF_OPERATORS = ("value", "not_value", "in_values", "not_empty")


@dataclass(frozen=True)
class RequiredIfCondition:
    """
    Conditional requirement attached to a field mapping.

    Attributes:
        field: Internal field whose value decides the requirement
        operator: One of 'value', 'not_value', 'in_values', 'not_empty'
        operand: Value compared against (ignored for 'not_empty')
    """
    field: str
    operator: str
    operand: Any = None

    def __post_init__(self):
        if not self.field:
            raise ValueError("required_if field cannot be empty")
        if self.operator not in REQUIRED_IF_OPERATORS:
            raise ValueError(f"Unsupported required_if operator: {self.operator}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RequiredIfCondition':
        """Build a condition from its contract form, e.g. {"field": "x", "value": true}."""
        for operator in REQUIRED_IF_OPERATORS:
            if operator in data:
                operand = data[operator]
                if operator == "in_values":
                    operand = tuple(operand)
                return cls(field=data.get("field"), operator=operator, operand=operand)
        raise ValueError(f"required_if for '{data.get('field')}' has no operator")

    def to_dict(self) -> Dict[str, Any]:
        operand = list(self.operand) if isinstance(self.operand, tuple) else self.operand
        return {"field": self.field, self.operator: operand}


@dataclass(frozen=True)
class FieldMapping:
    """
    Maps one internal business field to its MISMO element.

    Attributes:
        name: Internal snake_case field name (e.g. 'loan_amount')
        mismo_path: Slash-separated MISMO element path
        datatype: Datatype name used to format and validate the value
        enum_type: Enum translation key when datatype is 'Enum'
        required: Whether the field must always be present
        required_if: Optional conditional requirement
        sensitive: Whether the value must be kept out of issue payloads
    """
    name: str
    mismo_path: str
    datatype: str
    enum_type: Optional[str] = None
    required: bool = False
    required_if: Optional[RequiredIfCondition] = None
    sensitive: bool = False

    def __post_init__(self):
        """Validate field mapping configuration."""
        if not self.name:
            raise ValueError("field name cannot be empty")
        if not self.mismo_path:
            raise ValueError(f"mismoPath cannot be empty for '{self.name}'")
        if not self.datatype:
            raise ValueError(f"datatype cannot be empty for '{self.name}'")
        if self.datatype == DataType.ENUM.value and not self.enum_type:
            raise ValueError(f"Enum field '{self.name}' must declare enumType")

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> 'FieldMapping':
        required_if = data.get("required_if")
        return cls(
            name=name,
            mismo_path=data.get("mismoPath"),
            datatype=data.get("datatype"),
            enum_type=data.get("enumType"),
            required=bool(data.get("required", False)),
            required_if=RequiredIfCondition.from_dict(required_if) if required_if else None,
            sensitive=bool(data.get("sensitive", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Contract form of the mapping, as served by get_field_mappings."""
        result: Dict[str, Any] = {
            "mismoPath": self.mismo_path,
            "datatype": self.datatype,
            "required": self.required,
        }
        if self.enum_type:
            result["enumType"] = self.enum_type
        if self.required_if:
            result["required_if"] = self.required_if.to_dict()
        if self.sensitive:
            result["sensitive"] = True
        return result


@dataclass(frozen=True)
class EnumMap:
    """
    Translation record between internal literals and MISMO-controlled vocabulary.

    Attributes:
        enum_type: Enum key (e.g. 'LoanPurposeType')
        internal_to_mismo: Read-only mapping of internal literal to MISMO literal
        mismo_values: Ordered MISMO literals valid for this key
    """
    enum_type: str
    internal_to_mismo: Mapping[str, str]
    mismo_values: Tuple[str, ...]

    @staticmethod
    def lookup_key(value: Any) -> str:
        """Normalize a raw value into a translation-table key (booleans become 'true'/'false')."""
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def translate(self, value: Any) -> Optional[str]:
        """Return the MISMO literal for an internal value, or None when there is no mapping."""
        return self.internal_to_mismo.get(self.lookup_key(value))

    def is_mismo_value(self, value: Any) -> bool:
        return isinstance(value, str) and value in self.mismo_values

    def to_summary(self) -> Dict[str, List[str]]:
        return {
            "internalValues": list(self.internal_to_mismo.keys()),
            "mismoValues": list(self.mismo_values),
        }


@dataclass(frozen=True)
class EnumCheck:
    """An element scanned in raw XML and the LDD enum key its value must belong to."""
    element: str
    enum_key: str


@dataclass(frozen=True)
class DatatypeCheck:
    """An element scanned in raw XML and the datatype pattern its value must match."""
    element: str
    pattern_name: str
    type_label: str


@dataclass(frozen=True)
class SchemaPack:
    """
    Pinned MISMO schema pack.

    Attributes:
        pack_id: Stable identifier (e.g. 'PACK_A_GENERIC_MISMO_34_B324')
        name: Display name
        mismo_version: MISMOVersionID the pack expects on MESSAGE
        ldd_identifier: Expected MISMOLogicalDataDictionaryIdentifier
        required_namespaces: Namespace URIs that must appear in the document
        root_element: Expected document root
        strict_mode: Enables LDD identifier and element sequence checks
        required_elements: Level name -> elements that must be present
    """
    pack_id: str
    name: str
    description: str
    mismo_version: str
    build: str
    ldd_identifier: str
    pack_hash: str
    root_element: str
    artifacts: Tuple[str, ...] = ()
    required_namespaces: Tuple[str, ...] = ()
    optional_namespaces: Tuple[str, ...] = ()
    extension_namespaces: Tuple[str, ...] = ()
    strict_mode: bool = False
    allow_extensions: bool = True
    additional_rules: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    required_elements: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self):
        if not self.pack_id:
            raise ValueError("pack_id cannot be empty")
        if not self.root_element:
            raise ValueError(f"root_element cannot be empty for pack '{self.pack_id}'")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.pack_id,
            "name": self.name,
            "description": self.description,
            "mismo_version": self.mismo_version,
            "build": self.build,
            "ldd_identifier": self.ldd_identifier,
            "pack_hash": self.pack_hash,
            "artifacts": list(self.artifacts),
            "required_namespaces": list(self.required_namespaces),
            "optional_namespaces": list(self.optional_namespaces),
            "extension_namespaces": list(self.extension_namespaces),
            "root_element": self.root_element,
            "strict_mode": self.strict_mode,
            "allow_extensions": self.allow_extensions,
            "additional_rules": dict(self.additional_rules),
        }

    def to_summary(self) -> Dict[str, Any]:
        return {
            "id": self.pack_id,
            "name": self.name,
            "description": self.description,
            "mismo_version": self.mismo_version,
            "build": self.build,
            "pack_hash": self.pack_hash,
            "strict_mode": self.strict_mode,
        }

    def required_elements_dict(self) -> Dict[str, List[str]]:
        return {level: list(elements) for level, elements in self.required_elements.items()}


@dataclass(frozen=True)
class LDDContract:
    """
    Complete LDD contract: every static table the validators and the rules engine consult.

    Built once by ConfigManager and never mutated; mappings are MappingProxyType
    views and sequences are tuples.
    """
    contract_version: str
    ldd_identifier: str
    default_pack_id: str
    enum_maps: Mapping[str, EnumMap]
    ldd_enums: Mapping[str, Tuple[str, ...]]
    datatype_patterns: Mapping[str, Pattern]
    enum_checks: Tuple[EnumCheck, ...]
    datatype_checks: Tuple[DatatypeCheck, ...]
    field_mappings: Mapping[str, FieldMapping]
    bpa_fields: Mapping[str, Tuple[str, ...]]
    schema_packs: Mapping[str, SchemaPack]
    element_sequence: Mapping[str, Tuple[str, ...]]

    def __post_init__(self):
        """Validate cross-references inside the contract."""
        if not self.field_mappings:
            raise ValueError("At least one field mapping must be specified")
        if self.default_pack_id not in self.schema_packs:
            raise ValueError(f"default_pack_id '{self.default_pack_id}' is not a defined schema pack")
        for check in self.enum_checks:
            if check.enum_key not in self.ldd_enums:
                raise ValueError(f"Enum check for <{check.element}> references unknown LDD enum '{check.enum_key}'")
        for check in self.datatype_checks:
            if check.pattern_name not in self.datatype_patterns:
                raise ValueError(f"Datatype check for <{check.element}> references unknown pattern '{check.pattern_name}'")
        for mapping in self.field_mappings.values():
            if mapping.enum_type and mapping.enum_type not in self.enum_maps:
                raise ValueError(f"Field '{mapping.name}' references unknown enum type '{mapping.enum_type}'")

    @property
    def bpa_field_names(self) -> Tuple[str, ...]:
        """BPA field names flattened in group order (loan, property, borrower, entity, asset)."""
        return tuple(name for names in self.bpa_fields.values() for name in names)

    def get_pattern(self, name: str) -> Optional[Pattern]:
        return self.datatype_patterns.get(name)
