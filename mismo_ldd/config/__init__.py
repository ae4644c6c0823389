"""Configuration management components."""

from .config_manager import ConfigManager, get_config_manager, get_ldd_contract, reset_config_manager
from .processing_defaults import ValidationDefaults

__all__ = ['ConfigManager', 'get_config_manager', 'get_ldd_contract', 'reset_config_manager', 'ValidationDefaults']
