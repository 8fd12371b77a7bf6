"""
Ownership ledger - who currently holds each receipt id.

Every holder change goes through transfer_guard.check_transition() before it
is written, and is reported as a HolderChanged event.
"""
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from models import HolderState, ReceiptHolder
from services import events
from services.transfer_guard import ChangeKind, check_transition


def holder_of(db: Session, receipt_id: int) -> tuple[Optional[str], HolderState]:
     """Current holder (None when unissued or revoked) and ledger state."""
     row = db.get(ReceiptHolder, receipt_id)
     if row is None:
          return None, HolderState.NEVER_ISSUED
     return row.holder, row.state


def balance_of(db: Session, holder: str) -> int:
     return (
          db.query(func.count(ReceiptHolder.receipt_id))
          .filter(ReceiptHolder.holder == holder, ReceiptHolder.state == HolderState.HELD)
          .scalar()
          or 0
     )


def change_holder(db: Session, receipt_id: int, requested: Optional[str], kind: ChangeKind) -> ReceiptHolder:
     """Apply a guarded holder change."""
     row = db.get(ReceiptHolder, receipt_id)
     current = row.holder if row is not None else None
     state = row.state if row is not None else HolderState.NEVER_ISSUED

     new_state = check_transition(receipt_id, state, current, requested, kind)

     if row is None:
          row = ReceiptHolder(receipt_id=receipt_id)
          db.add(row)
     row.holder = requested
     row.state = new_state
     db.flush()

     events.record(
          db,
          events.EventType.HOLDER_CHANGED,
          {"id": receipt_id, "from": current, "to": requested},
          receipt_id=receipt_id,
     )
     return row
