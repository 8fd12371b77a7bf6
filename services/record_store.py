"""
Record store - receipts keyed by id.

Receipts are append-only apart from their metadata pointer; erase() is used
by revocation and leaves the dedup reservation in place.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from models import Receipt
from services import identity_allocator
from services.errors import NotFound


def create(
     db: Session,
     buyer: str,
     issuer: str,
     amount: int,
     payment_reference: str,
     order_reference: Optional[str] = None,
     metadata_pointer: str = "",
     issued_at: Optional[datetime] = None
) -> Receipt:
     """
     Allocate an id and write an immutable receipt.

     Fields are expected to be validated already; this never overwrites an
     existing id because ids come from the monotonic counter.
     """
     if issued_at is None:
          issued_at = datetime.now(timezone.utc).replace(tzinfo=None)

     receipt = Receipt(
          id=identity_allocator.next_id(db),
          buyer=buyer,
          issuer=issuer,
          amount=amount,
          payment_reference=payment_reference,
          order_reference=order_reference,
          issued_at=issued_at,
          metadata_pointer=metadata_pointer,
     )
     db.add(receipt)
     db.flush()
     return receipt


def get(db: Session, receipt_id: int) -> Receipt:
     receipt = db.get(Receipt, receipt_id)
     if receipt is None:
          raise NotFound(receipt_id)
     return receipt


def update_metadata(db: Session, receipt_id: int, pointer: str) -> Receipt:
     receipt = get(db, receipt_id)
     receipt.set_metadata_pointer(pointer)
     db.flush()
     return receipt


def verify(db: Session, receipt_id: int, candidate_buyer: str) -> bool:
     """Whether candidate_buyer is the stored buyer. Side-effect free."""
     return get(db, receipt_id).buyer == candidate_buyer


def erase(db: Session, receipt_id: int) -> None:
     db.delete(get(db, receipt_id))
     db.flush()


def list_for_buyer(db: Session, buyer: str, offset: int = 0, limit: int = 50) -> tuple[list[Receipt], int]:
     """Live receipts for a buyer, oldest first, plus the total count."""
     query = db.query(Receipt).filter(Receipt.buyer == buyer)
     total = query.with_entities(func.count(Receipt.id)).scalar() or 0
     receipts = query.order_by(Receipt.id).offset(offset).limit(limit).all()
     return receipts, total
