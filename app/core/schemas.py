from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Any, Dict, Generic, List, Optional, TypeVar

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Snake-case attributes in Python, camelCase keys on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
        str_strip_whitespace = True


class ApiResponse(BaseModel, Generic[DataT]):
    """Envelope wrapped around every response body."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[DataT] = None
    errors: Optional[List[Dict[str, Any]]] = None
