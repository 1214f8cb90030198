from __future__ import annotations
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire; accepts either on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OkResponse(BaseModel):
    ok: bool = True
    meta: Optional[Dict[str, Any]] = None
