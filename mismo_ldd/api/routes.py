"""
Action routes.

Both endpoints take a JSON body with an 'action' discriminator and answer
{"success": true, ...action fields}. Unknown actions and unknown schema packs
are turned into 400 responses by the application's exception handlers.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..mapping.rules_engine import LDDRulesEngine
from ..validation.schema_pack_validator import SchemaPackValidator
from .dependencies import get_rules_engine, get_schema_pack_validator
from .schemas import RulesRequest, SchemaPackRequest

router = APIRouter()


@router.post("/ldd-rules")
def ldd_rules(
    req: RulesRequest,
    engine: LDDRulesEngine = Depends(get_rules_engine),
) -> Dict[str, Any]:
    """Run one rules engine action (validate, map_to_mismo, test_mapping_coverage, ...)."""
    result = engine.dispatch(req.action, req.model_dump())
    return {"success": True, **result}


@router.post("/schema-pack")
def schema_pack(
    req: SchemaPackRequest,
    validator: SchemaPackValidator = Depends(get_schema_pack_validator),
) -> Dict[str, Any]:
    """Run one schema pack action (list_packs, validate_xml, compute_hash, ...)."""
    result = validator.dispatch(req.action, req.model_dump())
    return {"success": True, **result}
