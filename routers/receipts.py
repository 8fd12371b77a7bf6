"""
Receipt API routes.

Issuance, amendment and revocation are administrator-only; the access gate
inside the registry decides, the router only supplies the caller identity.
Lookups and proof verification are public.
"""
from fastapi import APIRouter, Depends, Query, status

from dependencies import get_caller, get_registry
from schemas.receipt import (
     BalanceResponse,
     HolderResponse,
     NextIdResponse,
     ReceiptAmendRequest,
     ReceiptIssueRequest,
     ReceiptListResponse,
     ReceiptResponse,
     ReceiptTransferRequest,
     ReferenceStatusResponse,
     RevokeResponse,
     VerifyResponse,
)
from services import ReceiptRegistry

router = APIRouter(prefix="/api/receipts", tags=["receipts"])


@router.post(
     "",
     response_model=ReceiptResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Issue a receipt"
)
def issue_receipt(
     body: ReceiptIssueRequest,
     caller: str = Depends(get_caller),
     registry: ReceiptRegistry = Depends(get_registry)
):
     """
     Issue a soulbound receipt to the buyer.

     - **payment_reference** can be used exactly once, ever
     - **amount** is in minor units with 6 decimals (1000000 = 1.0)
     """
     receipt = registry.issue(
          caller,
          buyer=body.buyer,
          issuer=body.issuer,
          amount=body.amount,
          payment_reference=body.payment_reference,
          order_reference=body.order_reference,
          metadata_pointer=body.metadata_pointer,
     )
     return ReceiptResponse.model_validate(receipt)


@router.get("", response_model=ReceiptListResponse, summary="List receipts of a buyer")
def list_receipts(
     buyer: str = Query(..., min_length=1),
     page: int = Query(1, ge=1),
     page_size: int = Query(50, ge=1, le=200),
     registry: ReceiptRegistry = Depends(get_registry)
):
     receipts, total = registry.receipts_of(buyer, offset=(page - 1) * page_size, limit=page_size)
     return ReceiptListResponse(
          receipts=[ReceiptResponse.model_validate(r) for r in receipts],
          total=total,
          page=page,
          page_size=page_size,
     )


@router.get("/next-id", response_model=NextIdResponse, summary="Next id to be allocated")
def next_id(registry: ReceiptRegistry = Depends(get_registry)):
     return NextIdResponse(next_id=registry.peek_next())


@router.get(
     "/reference-status",
     response_model=ReferenceStatusResponse,
     summary="Check whether a payment reference has been used"
)
def reference_status(
     payment_reference: str = Query(..., min_length=1),
     registry: ReceiptRegistry = Depends(get_registry)
):
     used, receipt_id = registry.reference_status(payment_reference)
     return ReferenceStatusResponse(payment_reference=payment_reference, used=used, receipt_id=receipt_id)


@router.get("/balance", response_model=BalanceResponse, summary="Live receipts held by an identity")
def balance(
     holder: str = Query(..., min_length=1),
     registry: ReceiptRegistry = Depends(get_registry)
):
     return BalanceResponse(holder=holder, balance=registry.balance_of(holder))


@router.get("/{receipt_id}", response_model=ReceiptResponse, summary="Get a receipt")
def get_receipt(receipt_id: int, registry: ReceiptRegistry = Depends(get_registry)):
     return ReceiptResponse.model_validate(registry.get(receipt_id))


@router.get("/{receipt_id}/verify", response_model=VerifyResponse, summary="Verify a receipt's buyer")
def verify_receipt(
     receipt_id: int,
     buyer: str = Query(..., min_length=1),
     registry: ReceiptRegistry = Depends(get_registry)
):
     return VerifyResponse(receipt_id=receipt_id, buyer=buyer, valid=registry.verify(receipt_id, buyer))


@router.get("/{receipt_id}/holder", response_model=HolderResponse, summary="Current holder of a receipt")
def receipt_holder(receipt_id: int, registry: ReceiptRegistry = Depends(get_registry)):
     holder, state = registry.holder_of(receipt_id)
     return HolderResponse(receipt_id=receipt_id, holder=holder, state=state)


@router.patch("/{receipt_id}/metadata", response_model=ReceiptResponse, summary="Update metadata pointer")
def amend_receipt(
     receipt_id: int,
     body: ReceiptAmendRequest,
     caller: str = Depends(get_caller),
     registry: ReceiptRegistry = Depends(get_registry)
):
     return ReceiptResponse.model_validate(registry.amend(caller, receipt_id, body.metadata_pointer))


@router.delete("/{receipt_id}", response_model=RevokeResponse, summary="Revoke a receipt")
def revoke_receipt(
     receipt_id: int,
     caller: str = Depends(get_caller),
     registry: ReceiptRegistry = Depends(get_registry)
):
     """
     Clear the holder and erase the receipt. The payment reference stays used.
     """
     registry.revoke(caller, receipt_id)
     return RevokeResponse(receipt_id=receipt_id)


@router.post("/{receipt_id}/transfer", summary="Attempt to transfer a receipt")
def transfer_receipt(
     receipt_id: int,
     body: ReceiptTransferRequest,
     caller: str = Depends(get_caller),
     registry: ReceiptRegistry = Depends(get_registry)
):
     """
     Receipts are soulbound: this always fails for a live receipt.
     """
     registry.transfer(caller, receipt_id, body.to)
     return {"receipt_id": receipt_id, "holder": body.to}
