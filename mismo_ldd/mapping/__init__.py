"""Field mapping, enum translation and datatype formatting."""

from .datatype_formatter import DatatypeFormatter, FormatResult
from .rules_engine import EnumCheckResult, LDDRulesEngine, RulesAction

__all__ = ['DatatypeFormatter', 'FormatResult', 'EnumCheckResult', 'LDDRulesEngine', 'RulesAction']
