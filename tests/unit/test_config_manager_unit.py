"""
Tests for the centralized ConfigManager.

This module tests the configuration layer to ensure it properly handles
environment variables, contract loading and caching, and rejects contracts
whose tables reference each other inconsistently.
"""

import json
import logging
import os
import shutil
import tempfile
import unittest
from pathlib import Path

import yaml

from mismo_ldd.config.config_manager import (
    DEFAULT_CONTRACT_PATH,
    ConfigManager,
    ServiceSettings,
    get_config_manager,
    get_ldd_contract,
    reset_config_manager,
)
from mismo_ldd.config.processing_defaults import ValidationDefaults
from mismo_ldd.exceptions import ConfigurationError, MappingContractError


ENV_VARS = ['MISMO_LDD_CONTRACT_PATH', 'MISMO_LDD_DEFAULT_PACK_ID', 'MISMO_LDD_LOG_LEVEL']


def _clear_environment():
    for var in ENV_VARS:
        if var in os.environ:
            del os.environ[var]


class TestServiceSettings(unittest.TestCase):
    """Test ServiceSettings class."""

    def setUp(self):
        _clear_environment()

    def tearDown(self):
        _clear_environment()

    def test_default_settings(self):
        settings = ServiceSettings.from_environment()

        self.assertEqual(settings.contract_path, DEFAULT_CONTRACT_PATH)
        self.assertIsNone(settings.default_pack_id)
        self.assertEqual(settings.log_level, "INFO")

    def test_environment_variable_override(self):
        os.environ['MISMO_LDD_CONTRACT_PATH'] = '/etc/mismo/contract.json'
        os.environ['MISMO_LDD_DEFAULT_PACK_ID'] = 'PACK_B_DU_ULAD_STRICT_34_B324'
        os.environ['MISMO_LDD_LOG_LEVEL'] = 'debug'

        settings = ServiceSettings.from_environment()

        self.assertEqual(settings.contract_path, Path('/etc/mismo/contract.json'))
        self.assertEqual(settings.default_pack_id, 'PACK_B_DU_ULAD_STRICT_34_B324')
        self.assertEqual(settings.log_level, 'DEBUG')

    def test_explicit_path_wins_over_environment(self):
        os.environ['MISMO_LDD_CONTRACT_PATH'] = '/etc/mismo/contract.json'

        settings = ServiceSettings.from_environment('/tmp/other.json')

        self.assertEqual(settings.contract_path, Path('/tmp/other.json'))


class TestConfigManager(unittest.TestCase):
    """Test ConfigManager class."""

    def setUp(self):
        """Set up test environment."""
        _clear_environment()
        reset_config_manager()

        self.temp_dir = tempfile.mkdtemp()
        self.temp_path = Path(self.temp_dir)

        with open(DEFAULT_CONTRACT_PATH, 'r', encoding='utf-8') as f:
            self.contract_data = json.load(f)

    def tearDown(self):
        """Clean up test environment."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)
        reset_config_manager()
        _clear_environment()

    def _write_contract(self, data, name="contract.json"):
        path = self.temp_path / name
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f)
        return path

    def test_shipped_contract_loads(self):
        contract = ConfigManager().load_ldd_contract()

        self.assertEqual(contract.default_pack_id, 'PACK_A_GENERIC_MISMO_34_B324')
        self.assertIn('PACK_B_DU_ULAD_STRICT_34_B324', contract.schema_packs)
        self.assertEqual(len(contract.bpa_field_names), 40)
        self.assertTrue(contract.get_pattern('MISMOAmount').match('350000.00'))

    def test_contract_tables_are_read_only(self):
        contract = ConfigManager().load_ldd_contract()

        with self.assertRaises(TypeError):
            contract.enum_maps['NewType'] = None
        with self.assertRaises(TypeError):
            contract.enum_maps['PropertyType'].internal_to_mismo['Castle'] = 'SingleFamily'
        self.assertIsInstance(contract.ldd_enums['StateCode'], tuple)

    def test_load_ldd_contract_with_caching(self):
        path = self._write_contract(self.contract_data)
        config_manager = ConfigManager(path)

        contract1 = config_manager.load_ldd_contract()
        contract2 = config_manager.load_ldd_contract()

        self.assertIs(contract1, contract2)

    def test_cache_clearing(self):
        config_manager = ConfigManager(self._write_contract(self.contract_data))
        contract1 = config_manager.load_ldd_contract()

        config_manager.clear_cache()

        self.assertEqual(len(config_manager._contract_cache), 0)
        self.assertIsNot(config_manager.load_ldd_contract(), contract1)

    def test_environment_contract_path(self):
        self.contract_data['contract_version'] = '9.9.9-test'
        os.environ['MISMO_LDD_CONTRACT_PATH'] = str(self._write_contract(self.contract_data))

        contract = ConfigManager().load_ldd_contract()

        self.assertEqual(contract.contract_version, '9.9.9-test')

    def test_yaml_contract(self):
        path = self.temp_path / "contract.yaml"
        path.write_text(yaml.safe_dump(self.contract_data), encoding='utf-8')

        contract = ConfigManager(path).load_ldd_contract()

        self.assertEqual(contract.contract_version, self.contract_data['contract_version'])
        self.assertEqual(set(contract.field_mappings), set(self.contract_data['field_mappings']))

    def test_unsupported_contract_format(self):
        path = self.temp_path / "contract.xml"
        path.write_text("<contract/>", encoding='utf-8')

        with self.assertRaises(ConfigurationError) as context:
            ConfigManager(path).load_ldd_contract()
        self.assertIn("Unsupported file format", str(context.exception))

    def test_missing_contract_file(self):
        config_manager = ConfigManager(self.temp_path / "missing.json")

        with self.assertRaises(ConfigurationError) as context:
            config_manager.load_ldd_contract()
        self.assertIn("not found", str(context.exception))

    def test_malformed_json(self):
        path = self.temp_path / "broken.json"
        path.write_text('{"enum_maps": ', encoding='utf-8')

        with self.assertRaises(ConfigurationError):
            ConfigManager(path).load_ldd_contract()

    def test_missing_section(self):
        del self.contract_data['schema_packs']

        with self.assertRaises(ConfigurationError) as context:
            ConfigManager(self._write_contract(self.contract_data)).load_ldd_contract()
        self.assertNotIsInstance(context.exception, MappingContractError)

    def test_unknown_enum_type_reference(self):
        self.contract_data['field_mappings']['loan_purpose']['enumType'] = 'LoanPurposeKind'

        with self.assertRaises(MappingContractError) as context:
            ConfigManager(self._write_contract(self.contract_data)).load_ldd_contract()
        self.assertIn("LoanPurposeKind", str(context.exception))

    def test_unknown_default_pack(self):
        self.contract_data['default_pack_id'] = 'PACK_Z'

        with self.assertRaises(MappingContractError):
            ConfigManager(self._write_contract(self.contract_data)).load_ldd_contract()

    def test_unknown_enum_check_key(self):
        self.contract_data['enum_checks'].append({'element': 'ConstructionType', 'enum_key': 'NoSuchEnum'})

        with self.assertRaises(MappingContractError):
            ConfigManager(self._write_contract(self.contract_data)).load_ldd_contract()

    def test_invalid_datatype_pattern(self):
        self.contract_data['datatype_patterns']['MISMOAmount'] = '^[0-9+$'

        with self.assertRaises(ConfigurationError):
            ConfigManager(self._write_contract(self.contract_data)).load_ldd_contract()

    def test_default_pack_id_from_environment(self):
        os.environ['MISMO_LDD_DEFAULT_PACK_ID'] = 'PACK_B_DU_ULAD_STRICT_34_B324'

        self.assertEqual(ConfigManager().get_default_pack_id(), 'PACK_B_DU_ULAD_STRICT_34_B324')

    def test_unknown_default_pack_id_from_environment(self):
        os.environ['MISMO_LDD_DEFAULT_PACK_ID'] = 'PACK_TYPO'
        config_manager = ConfigManager()

        with self.assertRaises(ConfigurationError) as context:
            config_manager.get_default_pack_id()
        self.assertIn('PACK_TYPO', str(context.exception))

        with self.assertRaises(ConfigurationError):
            config_manager.get_configuration_summary()

    def test_configuration_summary(self):
        summary = ConfigManager().get_configuration_summary()

        self.assertEqual(summary['default_pack_id'], 'PACK_A_GENERIC_MISMO_34_B324')
        self.assertEqual(summary['log_level'], 'INFO')
        self.assertEqual(summary['field_mappings'], 40)
        self.assertEqual(summary['cached_contracts'], 1)
        self.assertIn('PACK_B_DU_ULAD_STRICT_34_B324', summary['schema_packs'])


class TestGlobalConfigManager(unittest.TestCase):
    """Test global config manager functions."""

    def setUp(self):
        reset_config_manager()

    def tearDown(self):
        reset_config_manager()

    def test_get_config_manager_singleton(self):
        manager1 = get_config_manager()
        manager2 = get_config_manager()

        self.assertIs(manager1, manager2)

    def test_reset_config_manager(self):
        manager1 = get_config_manager()
        reset_config_manager()
        manager2 = get_config_manager()

        self.assertIsNot(manager1, manager2)

    def test_get_ldd_contract_uses_global_manager(self):
        self.assertIs(get_ldd_contract(), get_config_manager().load_ldd_contract())


class TestValidationDefaults(unittest.TestCase):

    def test_to_dict_exports_constants_only(self):
        defaults = ValidationDefaults.to_dict()

        self.assertEqual(defaults['ALLOWED_VALUES_PREVIEW'], 5)
        self.assertEqual(defaults['HASH_ALGORITHM'], 'SHA-256')
        self.assertNotIn('to_dict', defaults)

    def test_log_summary_uses_logger(self):
        with self.assertLogs('mismo_ldd.test', level='INFO') as captured:
            ValidationDefaults.log_summary(logging.getLogger('mismo_ldd.test'))
        self.assertIn('STRING_MAX_LENGTH: 255', captured.output[0])


if __name__ == '__main__':
    unittest.main()
