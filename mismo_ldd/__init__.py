"""
MISMO LDD Rules Engine

Contract-driven validation of MISMO 3.4 XML documents against the Logical Data
Dictionary, and mapping of internal loan application data onto MISMO elements.
"""

__version__ = "1.0.0"

# Import core models and exceptions for easy access
from .models import (
    LDDContract,
    FieldMapping,
    RequiredIfCondition,
    EnumMap,
    EnumCheck,
    DatatypeCheck,
    SchemaPack,
    DataType
)

from .exceptions import (
    LDDRulesError,
    XMLParsingError,
    ConfigurationError,
    MappingContractError,
    UnknownActionError,
    UnknownSchemaPackError
)

__all__ = [
    # Core models
    "LDDContract",
    "FieldMapping",
    "RequiredIfCondition",
    "EnumMap",
    "EnumCheck",
    "DatatypeCheck",
    "SchemaPack",
    "DataType",

    # Exceptions
    "LDDRulesError",
    "XMLParsingError",
    "ConfigurationError",
    "MappingContractError",
    "UnknownActionError",
    "UnknownSchemaPackError"
]
