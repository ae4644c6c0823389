"""Request bodies for the rules engine and schema pack endpoints."""

from typing import Any, Dict, Optional

from pydantic import BaseModel


class RulesRequest(BaseModel):
    """Body of POST /ldd-rules. Only the fields the chosen action reads are needed."""

    action: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    field: Optional[str] = None
    value: Any = None
    enum_type: Optional[str] = None
    datatype: Optional[str] = None
    options: Optional[Dict[str, Any]] = None


class SchemaPackRequest(BaseModel):
    """Body of POST /schema-pack."""

    action: Optional[str] = None
    pack_id: Optional[str] = None
    xml_content: Optional[str] = None
    enum_type: Optional[str] = None
    value: Any = None
