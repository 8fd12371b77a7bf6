"""
Pydantic schemas for receipt API request/response validation.
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

from models import HolderState, MAX_AMOUNT


class ReceiptIssueRequest(BaseModel):
     """Request body for POST /api/receipts."""
     buyer: str = Field(..., min_length=1, max_length=128, description="Recipient identity")
     issuer: str = Field(..., min_length=1, max_length=128, description="Merchant credited")
     amount: int = Field(..., gt=0, le=MAX_AMOUNT, description="Amount in minor units (6 decimals)")
     payment_reference: str = Field(
          ...,
          min_length=1,
          max_length=255,
          description="External payment transaction identifier (globally unique)",
     )
     order_reference: Optional[str] = Field(None, max_length=255, description="Free-form order reference")
     metadata_pointer: str = Field("", max_length=1024, description="Pointer to the descriptive document")

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "buyer": "0xB1",
                    "issuer": "0xM1",
                    "amount": 1000000,
                    "payment_reference": "tx123",
                    "order_reference": "ord-1",
                    "metadata_pointer": "ipfs://a",
               }
          }
     )


class ReceiptAmendRequest(BaseModel):
     """Request body for PATCH /api/receipts/{id}/metadata."""
     metadata_pointer: str = Field(..., max_length=1024)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "metadata_pointer": "ipfs://b"
               }
          }
     )


class ReceiptTransferRequest(BaseModel):
     """Request body for POST /api/receipts/{id}/transfer."""
     to: str = Field(..., min_length=1, max_length=128)


class ReceiptResponse(BaseModel):
     """Full receipt as stored."""
     id: int
     buyer: str
     issuer: str
     amount: int
     amount_display: str
     payment_reference: str
     order_reference: Optional[str] = None
     issued_at: datetime
     metadata_pointer: str

     model_config = ConfigDict(
          from_attributes=True,
          json_schema_extra={
               "example": {
                    "id": 1,
                    "buyer": "0xB1",
                    "issuer": "0xM1",
                    "amount": 1000000,
                    "amount_display": "1.000000",
                    "payment_reference": "tx123",
                    "order_reference": "ord-1",
                    "issued_at": "2026-10-18T10:30:00",
                    "metadata_pointer": "ipfs://a"
               }
          }
     )


class ReceiptListResponse(BaseModel):
     """Paginated receipts for one buyer."""
     receipts: List[ReceiptResponse]
     total: int
     page: int = 1
     page_size: int = 50


class RevokeResponse(BaseModel):
     receipt_id: int
     revoked: bool = True


class VerifyResponse(BaseModel):
     """Result of an independent proof check."""
     receipt_id: int
     buyer: str
     valid: bool


class ReferenceStatusResponse(BaseModel):
     payment_reference: str
     used: bool
     receipt_id: Optional[int] = Field(None, description="Receipt that consumed the reference")


class NextIdResponse(BaseModel):
     next_id: int


class HolderResponse(BaseModel):
     receipt_id: int
     holder: Optional[str] = None
     state: HolderState


class BalanceResponse(BaseModel):
     holder: str
     balance: int
