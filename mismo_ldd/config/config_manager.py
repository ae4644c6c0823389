"""
Centralized configuration management for the MISMO LDD rules engine.

This module provides the ConfigManager class that serves as the single source of truth
for the LDD contract (enumerations, datatype patterns, field mappings, schema packs)
and for the environment variables the service reads at startup.
"""

import os
import json
import logging
import re
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Any, Optional, Union
from dataclasses import dataclass, field

import yaml

from ..models import (
    DatatypeCheck,
    EnumCheck,
    EnumMap,
    FieldMapping,
    LDDContract,
    SchemaPack,
)
from ..exceptions import ConfigurationError, MappingContractError
from .processing_defaults import ValidationDefaults


DEFAULT_CONTRACT_PATH = Path(__file__).parent / "ldd_contract.json"


@dataclass
class ServiceSettings:
    """Service settings with environment variable support."""
    contract_path: Path = field(default_factory=lambda: DEFAULT_CONTRACT_PATH)
    default_pack_id: Optional[str] = None
    log_level: str = ValidationDefaults.LOG_LEVEL

    @classmethod
    def from_environment(cls, contract_path: Optional[Union[str, Path]] = None) -> 'ServiceSettings':
        """Create service settings from environment variables."""
        if contract_path:
            path = Path(contract_path)
        else:
            path = Path(os.environ.get('MISMO_LDD_CONTRACT_PATH', DEFAULT_CONTRACT_PATH))

        return cls(
            contract_path=path,
            default_pack_id=os.environ.get('MISMO_LDD_DEFAULT_PACK_ID') or None,
            log_level=os.environ.get('MISMO_LDD_LOG_LEVEL', cls.log_level).upper(),
        )


class ConfigManager:
    """
    Centralized configuration manager serving as single source of truth.

    The LDD contract is read once, converted into frozen dataclasses, tuples and
    read-only mapping views, and cached for the lifetime of the process.
    """

    def __init__(self, contract_path: Optional[Union[str, Path]] = None):
        """
        Initialize the configuration manager.

        Args:
            contract_path: Path to an LDD contract file. If None, uses
                MISMO_LDD_CONTRACT_PATH or the contract shipped with the package.
        """
        self.logger = logging.getLogger(__name__)
        self.settings = ServiceSettings.from_environment(contract_path)
        self._contract_cache: Dict[str, LDDContract] = {}

        self.logger.info(f"ConfigManager initialized with contract: {self.settings.contract_path}")

    def load_ldd_contract(self, contract_path: Optional[Union[str, Path]] = None) -> LDDContract:
        """
        Load and cache the LDD contract.

        Args:
            contract_path: Optional path overriding the configured contract (.json, .yaml or .yml)

        Returns:
            Immutable LDDContract

        Raises:
            ConfigurationError: If the file is missing, unreadable or inconsistent
        """
        full_path = Path(contract_path) if contract_path else self.settings.contract_path
        cache_key = str(full_path)

        if cache_key in self._contract_cache:
            self.logger.debug(f"Returning cached LDD contract for {cache_key}")
            return self._contract_cache[cache_key]

        if not full_path.exists():
            raise ConfigurationError(f"LDD contract file not found: {full_path}")

        try:
            with open(full_path, 'r', encoding='utf-8') as file:
                if full_path.suffix.lower() in ['.yaml', '.yml']:
                    contract_data = yaml.safe_load(file)
                elif full_path.suffix.lower() == '.json':
                    contract_data = json.load(file)
                else:
                    raise ConfigurationError(f"Unsupported file format: {full_path.suffix}")
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to parse LDD contract file {full_path}: {e}")
        except OSError as e:
            raise ConfigurationError(f"Failed to read LDD contract file {full_path}: {e}")

        try:
            contract = self._parse_ldd_contract(contract_data)
        except (KeyError, TypeError, ValueError, re.error) as e:
            raise ConfigurationError(f"Invalid LDD contract {full_path}: {e}")

        self._contract_cache[cache_key] = contract
        self.logger.info(
            f"Loaded LDD contract {contract.contract_version} from {full_path}: "
            f"{len(contract.field_mappings)} field mappings, {len(contract.enum_maps)} enum maps, "
            f"{len(contract.schema_packs)} schema packs"
        )
        return contract

    def get_default_pack_id(self) -> str:
        """
        Schema pack used when a request does not name one.

        Raises:
            ConfigurationError: If MISMO_LDD_DEFAULT_PACK_ID names a pack the contract does not pin
        """
        contract = self.load_ldd_contract()
        pack_id = self.settings.default_pack_id
        if not pack_id:
            return contract.default_pack_id
        if pack_id not in contract.schema_packs:
            raise ConfigurationError(
                f"MISMO_LDD_DEFAULT_PACK_ID names unknown schema pack {pack_id!r}; "
                f"expected one of {sorted(contract.schema_packs)}"
            )
        return pack_id

    def get_configuration_summary(self) -> Dict[str, Any]:
        """
        Get a summary of current configuration for logging/debugging.

        Returns:
            Dictionary containing configuration summary
        """
        contract = self.load_ldd_contract()
        return {
            'contract_path': str(self.settings.contract_path),
            'contract_version': contract.contract_version,
            'ldd_identifier': contract.ldd_identifier,
            'default_pack_id': self.get_default_pack_id(),
            'log_level': self.settings.log_level,
            'field_mappings': len(contract.field_mappings),
            'enum_maps': len(contract.enum_maps),
            'ldd_enums': len(contract.ldd_enums),
            'schema_packs': list(contract.schema_packs.keys()),
            'cached_contracts': len(self._contract_cache),
        }

    def clear_cache(self) -> None:
        """Clear the contract cache so the next load re-reads the file."""
        self._contract_cache.clear()
        self.logger.info("Configuration cache cleared")

    def _parse_ldd_contract(self, data: Dict[str, Any]) -> LDDContract:
        """Convert raw contract JSON into an immutable LDDContract."""
        enum_maps = {
            enum_type: EnumMap(
                enum_type=enum_type,
                internal_to_mismo=MappingProxyType(dict(spec.get('internal_to_mismo', {}))),
                mismo_values=tuple(spec.get('mismo_values', [])),
            )
            for enum_type, spec in data['enum_maps'].items()
        }

        ldd_enums = {key: tuple(values) for key, values in data['ldd_enums'].items()}

        datatype_patterns = {
            name: re.compile(pattern) for name, pattern in data['datatype_patterns'].items()
        }

        enum_checks = tuple(
            EnumCheck(element=item['element'], enum_key=item['enum_key'])
            for item in data.get('enum_checks', [])
        )
        datatype_checks = tuple(
            DatatypeCheck(element=item['element'], pattern_name=item['pattern'], type_label=item['type_label'])
            for item in data.get('datatype_checks', [])
        )

        field_mappings = {
            name: FieldMapping.from_dict(name, spec)
            for name, spec in data['field_mappings'].items()
        }

        bpa_fields = {group: tuple(names) for group, names in data.get('bpa_fields', {}).items()}

        schema_packs = {
            pack_id: self._parse_schema_pack(pack_id, spec)
            for pack_id, spec in data['schema_packs'].items()
        }

        element_sequence = {
            parent: tuple(children) for parent, children in data.get('element_sequence', {}).items()
        }

        self.logger.debug(
            f"Parsed contract tables: {len(ldd_enums)} LDD enums, {len(datatype_patterns)} patterns, "
            f"{len(enum_checks)} enum checks, {len(datatype_checks)} datatype checks"
        )

        try:
            return LDDContract(
                contract_version=data['contract_version'],
                ldd_identifier=data['ldd_identifier'],
                default_pack_id=data['default_pack_id'],
                enum_maps=MappingProxyType(enum_maps),
                ldd_enums=MappingProxyType(ldd_enums),
                datatype_patterns=MappingProxyType(datatype_patterns),
                enum_checks=enum_checks,
                datatype_checks=datatype_checks,
                field_mappings=MappingProxyType(field_mappings),
                bpa_fields=MappingProxyType(bpa_fields),
                schema_packs=MappingProxyType(schema_packs),
                element_sequence=MappingProxyType(element_sequence),
            )
        except ValueError as e:
            raise MappingContractError(f"LDD contract cross-reference check failed: {e}")

    @staticmethod
    def _parse_schema_pack(pack_id: str, spec: Dict[str, Any]) -> SchemaPack:
        required_elements = {
            level: tuple(elements) for level, elements in spec.get('required_elements', {}).items()
        }
        return SchemaPack(
            pack_id=pack_id,
            name=spec['name'],
            description=spec.get('description', ''),
            mismo_version=spec['mismo_version'],
            build=spec.get('build', ''),
            ldd_identifier=spec['ldd_identifier'],
            pack_hash=spec.get('pack_hash', ''),
            root_element=spec['root_element'],
            artifacts=tuple(spec.get('artifacts', [])),
            required_namespaces=tuple(spec.get('required_namespaces', [])),
            optional_namespaces=tuple(spec.get('optional_namespaces', [])),
            extension_namespaces=tuple(spec.get('extension_namespaces', [])),
            strict_mode=bool(spec.get('strict_mode', False)),
            allow_extensions=bool(spec.get('allow_extensions', True)),
            additional_rules=MappingProxyType(dict(spec.get('additional_rules', {}))),
            required_elements=MappingProxyType(required_elements),
        )


# Global configuration manager instance
_global_config_manager: Optional[ConfigManager] = None


def get_config_manager(contract_path: Optional[Union[str, Path]] = None) -> ConfigManager:
    """
    Get the global configuration manager instance.

    Args:
        contract_path: Path to the LDD contract. Only used on first call.

    Returns:
        Global ConfigManager instance
    """
    global _global_config_manager

    if _global_config_manager is None:
        _global_config_manager = ConfigManager(contract_path)

    return _global_config_manager


def reset_config_manager() -> None:
    """Reset the global configuration manager instance."""
    global _global_config_manager
    _global_config_manager = None


def get_ldd_contract() -> LDDContract:
    """Shortcut for the contract held by the global configuration manager."""
    return get_config_manager().load_ldd_contract()
