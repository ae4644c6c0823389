"""Shared service instances for the route handlers."""

from functools import lru_cache

from ..mapping.rules_engine import LDDRulesEngine
from ..validation.schema_pack_validator import SchemaPackValidator


@lru_cache(maxsize=1)
def get_rules_engine() -> LDDRulesEngine:
    return LDDRulesEngine()


@lru_cache(maxsize=1)
def get_schema_pack_validator() -> SchemaPackValidator:
    return SchemaPackValidator()
