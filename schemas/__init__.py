from .receipt import (
     ReceiptIssueRequest,
     ReceiptAmendRequest,
     ReceiptTransferRequest,
     ReceiptResponse,
     ReceiptListResponse,
     RevokeResponse,
     VerifyResponse,
     ReferenceStatusResponse,
     NextIdResponse,
     HolderResponse,
     BalanceResponse,
)
from .admin import (
     RegistryStatusResponse,
     PauseStateResponse,
     AdminTransferRequest,
     AdminTransferResponse,
)
from .event import EventResponse, EventListResponse, ChainVerificationResponse
from .error import ErrorDetail, ErrorResponse

__all__ = [
     "ReceiptIssueRequest",
     "ReceiptAmendRequest",
     "ReceiptTransferRequest",
     "ReceiptResponse",
     "ReceiptListResponse",
     "RevokeResponse",
     "VerifyResponse",
     "ReferenceStatusResponse",
     "NextIdResponse",
     "HolderResponse",
     "BalanceResponse",
     "RegistryStatusResponse",
     "PauseStateResponse",
     "AdminTransferRequest",
     "AdminTransferResponse",
     "EventResponse",
     "EventListResponse",
     "ChainVerificationResponse",
     "ErrorDetail",
     "ErrorResponse",
]
