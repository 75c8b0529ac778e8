"""Common/shared response schemas."""
from pydantic import BaseModel
from typing import Any, Dict, List, Optional


class SuccessResponse(BaseModel):
    success: bool = True
    data: Optional[Any] = None
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    kind: str
    detail: Any
    errors: Optional[Dict[str, List[str]]] = None
