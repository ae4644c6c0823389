"""
Schema Pack Validator

Validates MISMO XML documents against a pinned schema pack: the MISMO version,
LDD identifier, namespaces, root element and required elements a pack expects,
plus the LDD enum and datatype checklists.

Validation Pipeline:
1. Well-formedness (fatal: nothing else runs on a malformed document)
2. Root element and required namespaces
3. MISMOVersionID presence and match
4. LDD identifier (strict packs only)
5. Required elements per level
6. Enum and datatype checklists
7. Element sequence order (strict packs only, lxml tree walk)
8. Informational namespace and extension entries

Status is FAIL when any error was found, PASS_WITH_WARNINGS when only warnings
were found, and PASS otherwise. This is not XSD validation.
"""

import hashlib
import logging
import re
from enum import Enum
from typing import Any, Dict, List, Optional

from lxml import etree

from ..config.config_manager import get_config_manager
from ..config.processing_defaults import ValidationDefaults
from ..exceptions import UnknownActionError, UnknownSchemaPackError, XMLParsingError
from ..models import LDDContract, SchemaPack
from ..parsing.well_formed import check_well_formed
from .enum_validator import get_line_number, validate_datatypes, validate_enum_values
from .namespace_detector import detect_extensions, detect_namespaces
from .validation_models import (
    InfoEntry,
    PackValidationReport,
    ValidationCategory,
    ValidationIssue,
    ValidationSeverity,
)


ROOT_ELEMENT_PATTERN = re.compile(r'<([A-Z_]+)[\s>]')
MISMO_VERSION_PATTERN = re.compile(r'MISMOVersionID="([^"]+)"')
LDD_IDENTIFIER_PATTERN = re.compile(
    r'<MISMOLogicalDataDictionaryIdentifier>([^<]*)</MISMOLogicalDataDictionaryIdentifier>'
)
LDD_IDENTIFIER_XPATH = '/MESSAGE/MESSAGE_HEADER/MISMOLogicalDataDictionaryIdentifier'


class PackAction(Enum):
    """Actions served by the schema pack endpoint."""
    LIST_PACKS = "list_packs"
    GET_PACK_INFO = "get_pack_info"
    VALIDATE_XML = "validate_xml"
    GET_ENUMS = "get_enums"
    VALIDATE_ENUM = "validate_enum"
    COMPUTE_HASH = "compute_hash"
    GET_REQUIRED_ELEMENTS = "get_required_elements"
    GET_ELEMENT_SEQUENCE = "get_element_sequence"


def compute_content_hash(xml_content: str) -> str:
    """SHA-256 of the UTF-8 bytes of the content, as 'sha256:<hex>'."""
    return 'sha256:' + hashlib.sha256(xml_content.encode('utf-8')).hexdigest()


def parse_xml_tree(xml_content: str):
    """
    Parse XML text into an lxml element tree.

    Raises:
        XMLParsingError: If lxml rejects the document
    """
    parser = etree.XMLParser(
        recover=False,
        resolve_entities=False,  # Security: don't resolve external entities
        no_network=True  # Security: disable network access
    )
    try:
        return etree.fromstring(xml_content.encode('utf-8'), parser)
    except etree.XMLSyntaxError as e:
        raise XMLParsingError(f"XML syntax error: {e}", xml_content)


def _local_name(element) -> str:
    return etree.QName(element).localname


def _element_path(element) -> str:
    names = [_local_name(element)]
    for ancestor in element.iterancestors():
        names.append(_local_name(ancestor))
    return '/' + '/'.join(reversed(names))


class SchemaPackValidator:
    """
    Validates XML against pinned schema packs and serves the pack actions.

    The contract is read once at construction; validation itself keeps no state,
    so one instance can serve concurrent requests.
    """

    def __init__(self, contract: Optional[LDDContract] = None, default_pack_id: Optional[str] = None):
        """
        Initialize the validator.

        Args:
            contract: LDD contract to validate against; defaults to the global one
            default_pack_id: Pack used when a request names none; defaults to configuration
        """
        self.logger = logging.getLogger(__name__)
        config_manager = get_config_manager()
        self.contract = contract or config_manager.load_ldd_contract()
        self.default_pack_id = default_pack_id or (
            self.contract.default_pack_id if contract else config_manager.get_default_pack_id()
        )

        if self.default_pack_id not in self.contract.schema_packs:
            raise UnknownSchemaPackError(self.default_pack_id)

        self.logger.debug(
            f"SchemaPackValidator initialized with {len(self.contract.schema_packs)} packs "
            f"(default {self.default_pack_id})"
        )

    def get_pack(self, pack_id: Optional[str] = None) -> SchemaPack:
        """Resolve a pack id (or the default) to its pack."""
        effective_pack_id = pack_id or self.default_pack_id
        pack = self.contract.schema_packs.get(effective_pack_id)
        if pack is None:
            raise UnknownSchemaPackError(effective_pack_id)
        return pack

    def validate(self, xml_content: str, pack_id: Optional[str] = None) -> PackValidationReport:
        """
        Validate an XML document against a schema pack.

        Args:
            xml_content: Raw XML text
            pack_id: Pack to validate against; defaults to the configured default pack

        Returns:
            PackValidationReport with errors, warnings, info and status

        Raises:
            UnknownSchemaPackError: If pack_id does not name a pinned pack
        """
        pack = self.get_pack(pack_id)

        well_formed = check_well_formed(xml_content)
        if not well_formed.valid:
            self.logger.info(f"Document is not well-formed: {well_formed.error}")
            return PackValidationReport(
                well_formed=False,
                errors=[ValidationIssue(
                    code='XML_MALFORMED',
                    category=ValidationCategory.WELL_FORMEDNESS,
                    severity=ValidationSeverity.ERROR,
                    message=well_formed.error,
                    line=well_formed.line,
                    column=well_formed.column,
                )],
            )

        report = PackValidationReport(well_formed=True)
        self._check_root_element(xml_content, pack, report)
        self._check_namespaces(xml_content, pack, report)
        self._check_mismo_version(xml_content, pack, report)
        if pack.strict_mode:
            self._check_ldd_identifier(xml_content, pack, report)
        self._check_required_elements(xml_content, pack, report)

        enum_result = validate_enum_values(xml_content, self.contract)
        report.errors.extend(enum_result.errors)
        report.warnings.extend(enum_result.warnings)
        report.warnings.extend(validate_datatypes(xml_content, self.contract))

        if pack.strict_mode:
            report.warnings.extend(self.validate_element_sequence(xml_content))

        namespaces = detect_namespaces(xml_content)
        report.info.append(InfoEntry(
            code='DETECTED_NAMESPACES',
            message=f'Detected {len(namespaces)} namespace(s)',
            details={'namespaces': [ns.to_dict() for ns in namespaces]},
        ))

        extensions = detect_extensions(xml_content)
        if extensions.has_extensions:
            report.info.append(InfoEntry(
                code='EXTENSIONS_DETECTED',
                message=f'Found {extensions.count} extension block(s)',
                details={'extension_namespaces': [ns.to_dict() for ns in extensions.namespaces]},
            ))

        self.logger.info(
            f"Validated document against {pack.pack_id}: {report.status.value} "
            f"({len(report.errors)} errors, {len(report.warnings)} warnings)"
        )
        return report

    def _check_root_element(self, xml_content: str, pack: SchemaPack, report: PackValidationReport) -> None:
        root_match = ROOT_ELEMENT_PATTERN.search(xml_content)
        found = root_match.group(1) if root_match else None
        if found != pack.root_element:
            report.errors.append(ValidationIssue(
                code='INVALID_ROOT_ELEMENT',
                category=ValidationCategory.STRUCTURE,
                severity=ValidationSeverity.ERROR,
                message=f'Root element must be {pack.root_element}, found: {found or "none"}',
                line=1,
                column=1,
                xpath='/',
            ))

    def _check_namespaces(self, xml_content: str, pack: SchemaPack, report: PackValidationReport) -> None:
        missing = [ns for ns in pack.required_namespaces if ns not in xml_content]
        if missing:
            report.errors.append(ValidationIssue(
                code='MISSING_REQUIRED_NAMESPACE',
                category=ValidationCategory.NAMESPACE,
                severity=ValidationSeverity.ERROR,
                message=f'Missing required namespace: {", ".join(missing)}',
                line=1,
                column=1,
                xpath=f'/{pack.root_element}',
            ))

    def _check_mismo_version(self, xml_content: str, pack: SchemaPack, report: PackValidationReport) -> None:
        version_match = MISMO_VERSION_PATTERN.search(xml_content)
        if not version_match:
            report.errors.append(ValidationIssue(
                code='MISSING_MISMO_VERSION',
                category=ValidationCategory.STRUCTURE,
                severity=ValidationSeverity.ERROR,
                message=f'MISMOVersionID attribute is required on {pack.root_element} element',
                line=1,
                column=1,
                xpath=f'/{pack.root_element}/@MISMOVersionID',
            ))
        elif version_match.group(1) != pack.mismo_version:
            report.warnings.append(ValidationIssue(
                code='VERSION_MISMATCH',
                category=ValidationCategory.STRUCTURE,
                severity=ValidationSeverity.WARNING,
                message=f'MISMOVersionID {version_match.group(1)} does not match pack version {pack.mismo_version}',
                line=get_line_number(xml_content, version_match.start()),
                column=version_match.start() - xml_content.rfind('\n', 0, version_match.start()),
                xpath=f'/{pack.root_element}/@MISMOVersionID',
            ))

    def _check_ldd_identifier(self, xml_content: str, pack: SchemaPack, report: PackValidationReport) -> None:
        ldd_match = LDD_IDENTIFIER_PATTERN.search(xml_content)
        if not ldd_match:
            report.warnings.append(ValidationIssue(
                code='MISSING_LDD_IDENTIFIER',
                category=ValidationCategory.STRUCTURE,
                severity=ValidationSeverity.WARNING,
                message='MISMOLogicalDataDictionaryIdentifier recommended for strict mode',
                line=1,
                column=1,
                xpath=LDD_IDENTIFIER_XPATH,
            ))
        elif ldd_match.group(1) != pack.ldd_identifier:
            report.warnings.append(ValidationIssue(
                code='LDD_IDENTIFIER_MISMATCH',
                category=ValidationCategory.STRUCTURE,
                severity=ValidationSeverity.WARNING,
                message=f'LDD Identifier {ldd_match.group(1)} does not match pack LDD {pack.ldd_identifier}',
                line=get_line_number(xml_content, ldd_match.start()),
                column=1,
                xpath=LDD_IDENTIFIER_XPATH,
            ))

    def _check_required_elements(self, xml_content: str, pack: SchemaPack, report: PackValidationReport) -> None:
        for level, elements in pack.required_elements.items():
            for element in elements:
                if re.search(f'<{re.escape(element)}[\\s>]', xml_content):
                    continue
                report.errors.append(ValidationIssue(
                    code='MISSING_REQUIRED_ELEMENT',
                    category=ValidationCategory.STRUCTURE,
                    severity=ValidationSeverity.ERROR,
                    message=f'Required element <{element}> not found (level: {level})',
                    line=1,
                    column=1,
                    xpath=f'//{element}',
                ))

    def validate_element_sequence(self, xml_content: str) -> List[ValidationIssue]:
        """
        Check child order under every parent listed in the element sequence table.

        Children named in the parent's sequence must appear in non-decreasing
        sequence order; children the table does not name are ignored. A document
        lxml cannot parse produces no findings here.
        """
        try:
            root = parse_xml_tree(xml_content)
        except XMLParsingError as e:
            self.logger.debug(f"Skipping element sequence check: {e}")
            return []

        warnings: List[ValidationIssue] = []
        for parent in root.iter(tag=etree.Element):
            order = self.contract.element_sequence.get(_local_name(parent))
            if not order:
                continue

            last_index = -1
            last_name = None
            for child in parent.iterchildren(tag=etree.Element):
                name = _local_name(child)
                if name not in order:
                    continue
                index = order.index(name)
                if index < last_index:
                    warnings.append(ValidationIssue(
                        code='ELEMENT_SEQUENCE_VIOLATION',
                        category=ValidationCategory.SEQUENCE,
                        severity=ValidationSeverity.WARNING,
                        message=f'Element <{name}> must precede <{last_name}> within <{_local_name(parent)}>',
                        line=child.sourceline,
                        column=1,
                        xpath=_element_path(child),
                    ))
                else:
                    last_index = index
                    last_name = name

        return warnings

    def dispatch(self, action: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run one schema pack action.

        Args:
            action: PackAction value
            payload: Request body fields (pack_id, xml_content, enum_type, value)

        Returns:
            Action-specific response fields (without the 'success' flag)

        Raises:
            UnknownActionError: If action is not a PackAction
            UnknownSchemaPackError: If a named pack is not pinned
        """
        try:
            pack_action = PackAction(action)
        except ValueError:
            raise UnknownActionError(action)

        self.logger.debug(f"Dispatching schema pack action: {pack_action.value}")
        pack_id = payload.get('pack_id')
        xml_content = payload.get('xml_content') or ''

        if pack_action == PackAction.LIST_PACKS:
            return {'packs': [pack.to_summary() for pack in self.contract.schema_packs.values()]}

        if pack_action == PackAction.GET_PACK_INFO:
            if not pack_id or pack_id not in self.contract.schema_packs:
                raise UnknownSchemaPackError(pack_id)
            pack_info = self.contract.schema_packs[pack_id].to_dict()
            pack_info['enums_count'] = len(self.contract.ldd_enums)
            pack_info['datatypes_count'] = len(self.contract.datatype_patterns)
            return {'pack': pack_info}

        if pack_action == PackAction.VALIDATE_XML:
            pack = self.get_pack(pack_id)
            return {
                'pack_id': pack.pack_id,
                'pack_hash': pack.pack_hash,
                'ldd_identifier': pack.ldd_identifier,
                'validation': self.validate(xml_content, pack.pack_id).to_dict(),
            }

        if pack_action == PackAction.GET_ENUMS:
            enum_type = payload.get('enum_type')
            if enum_type:
                return {'enum_type': enum_type, 'values': list(self.contract.ldd_enums.get(enum_type, ()))}
            return {'enums': {key: list(values) for key, values in self.contract.ldd_enums.items()}}

        if pack_action == PackAction.VALIDATE_ENUM:
            return self._validate_enum_value(payload.get('enum_type'), payload.get('value'))

        if pack_action == PackAction.COMPUTE_HASH:
            return {
                'hash': compute_content_hash(xml_content),
                'algorithm': ValidationDefaults.HASH_ALGORITHM,
                'content_length': len(xml_content),
            }

        if pack_action == PackAction.GET_REQUIRED_ELEMENTS:
            effective_pack_id = pack_id or self.default_pack_id
            pack = self.contract.schema_packs.get(effective_pack_id) or self.get_pack()
            return {'pack_id': effective_pack_id, 'required_elements': pack.required_elements_dict()}

        # PackAction.GET_ELEMENT_SEQUENCE
        return {
            'element_sequence': {
                parent: list(children) for parent, children in self.contract.element_sequence.items()
            }
        }

    def _validate_enum_value(self, enum_type: Optional[str], value: Any) -> Dict[str, Any]:
        """LDD membership check for one value; unknown enum types are allowed."""
        allowed = self.contract.ldd_enums.get(enum_type) if enum_type else None
        if allowed is None:
            return {'is_valid': True, 'message': 'Unknown enum type - allowed by default'}

        is_valid = value in allowed
        return {
            'is_valid': is_valid,
            'enum_type': enum_type,
            'value': value,
            'allowed_values': list(allowed),
            'message': 'Valid' if is_valid else f'Invalid value. Allowed: {", ".join(allowed)}',
        }
