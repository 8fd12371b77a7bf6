"""
Pydantic schemas for registry administration.
"""
from pydantic import BaseModel, Field, ConfigDict


class RegistryStatusResponse(BaseModel):
     admin: str
     paused: bool
     next_id: int


class PauseStateResponse(BaseModel):
     paused: bool


class AdminTransferRequest(BaseModel):
     new_admin: str = Field(..., min_length=1, max_length=128, description="Identity of the next administrator")

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "new_admin": "0xA2"
               }
          }
     )


class AdminTransferResponse(BaseModel):
     admin: str
