"""
Error envelope shared by every failing API response.
"""
from typing import Any
from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
     code: str
     message: str
     details: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
     ok: bool = False
     error: ErrorDetail
