"""
Pydantic schemas for the registry event log.
"""
from datetime import datetime
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class EventResponse(BaseModel):
     sequence: int = Field(..., validation_alias="id")
     event_type: str
     receipt_id: Optional[int] = None
     payload: dict[str, Any]
     event_hash: str
     previous_hash: str
     created_at: datetime

     model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class EventListResponse(BaseModel):
     events: List[EventResponse]
     next_after: int = Field(..., description="Cursor to pass as ?after= on the next poll")


class ChainVerificationResponse(BaseModel):
     valid: bool
     message: str
     events_checked: int

