"""
Receipt Registry Service - issuance, amendment and revocation of soulbound receipts.

Every mutating operation:
1. Takes the process-wide mutation lock (operations never interleave)
2. Opens one database transaction
3. Passes the access gate (and the pause switch, for issuance)
4. Validates all input before touching state
5. Applies its changes and records events in the outbox
6. Commits, then publishes the recorded events to observers before
   releasing the lock

Any error rolls the whole transaction back, so a rejected call leaves no
reserved reference, consumed id or event behind.

Read operations use their own session and never take the lock.
"""
import logging
import threading
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy.orm import Session, sessionmaker

from models import MAX_AMOUNT, HolderState, Receipt, RegistryEvent
from services import access_gate, dedup_index, events, identity_allocator, ownership_ledger, record_store
from services.errors import DuplicateReference, ValidationFailed
from services.transfer_guard import ChangeKind

logger = logging.getLogger(__name__)

MAX_IDENTITY_LENGTH = 128
MAX_REFERENCE_LENGTH = 255
MAX_POINTER_LENGTH = 1024


def _require_identity(field: str, value: Optional[str]) -> str:
     identity = access_gate.normalize_identity(value)
     if not identity:
          raise ValidationFailed(field, f"{field} must be a non-empty identity")
     if len(identity) > MAX_IDENTITY_LENGTH:
          raise ValidationFailed(field, f"{field} exceeds {MAX_IDENTITY_LENGTH} characters")
     return identity


def _require_amount(amount) -> int:
     if isinstance(amount, bool) or not isinstance(amount, int):
          raise ValidationFailed("amount", "amount must be an integer in minor units")
     if amount <= 0:
          raise ValidationFailed("amount", "amount must be greater than zero")
     if amount > MAX_AMOUNT:
          raise ValidationFailed("amount", f"amount must not exceed {MAX_AMOUNT}")
     return amount


def _require_reference(reference: Optional[str]) -> str:
     normalized = dedup_index.normalize_reference(reference or "")
     if not normalized:
          raise ValidationFailed("payment_reference", "payment_reference must not be empty")
     if len(normalized) > MAX_REFERENCE_LENGTH:
          raise ValidationFailed("payment_reference", f"payment_reference exceeds {MAX_REFERENCE_LENGTH} characters")
     return normalized


def _check_optional_text(field: str, value: Optional[str], limit: int) -> None:
     if value is not None and len(value) > limit:
          raise ValidationFailed(field, f"{field} exceeds {limit} characters")


class ReceiptRegistry:
     """Composition of the access gate, dedup index, record store and ownership ledger."""

     def __init__(self, session_factory: sessionmaker, event_bus: Optional[events.EventBus] = None):
          self._session_factory = session_factory
          self._lock = threading.Lock()
          self.event_bus = event_bus or events.EventBus()

     # ------------------------------------------------------------------
     # Transaction helpers
     # ------------------------------------------------------------------

     @contextmanager
     def _mutation(self) -> Generator[Session, None, None]:
          with self._lock:
               session = self._session_factory()
               try:
                    yield session
                    published = events.drain_pending(session)
                    session.commit()
               except Exception:
                    events.discard_pending(session)
                    session.rollback()
                    raise
               finally:
                    session.close()
               # Observers see events in commit order
               self.event_bus.publish(published)

     @contextmanager
     def _read(self) -> Generator[Session, None, None]:
          session = self._session_factory()
          try:
               yield session
          finally:
               session.close()

     # ------------------------------------------------------------------
     # Administration
     # ------------------------------------------------------------------

     def initialize(self, admin: str) -> str:
          """Create the registry state on first start; returns the stored admin."""
          with self._mutation() as db:
               return access_gate.initialize(db, admin).admin

     def pause(self, caller: Optional[str]) -> bool:
          return self._set_paused(caller, True)

     def unpause(self, caller: Optional[str]) -> bool:
          return self._set_paused(caller, False)

     def _set_paused(self, caller: Optional[str], active: bool) -> bool:
          with self._mutation() as db:
               access_gate.set_paused(db, caller, active)
               events.record(db, events.EventType.PAUSE_STATE_CHANGED, {"active": active})
          return active

     def transfer_admin(self, caller: Optional[str], new_admin: str) -> str:
          with self._mutation() as db:
               previous = access_gate.transfer_admin(db, caller, new_admin)
               current = access_gate.current_admin(db)
               events.record(
                    db,
                    events.EventType.ADMIN_TRANSFERRED,
                    {"previous": previous, "current": current},
               )
          return current

     # ------------------------------------------------------------------
     # Receipt lifecycle
     # ------------------------------------------------------------------

     def issue(
          self,
          caller: Optional[str],
          buyer: str,
          issuer: str,
          amount: int,
          payment_reference: str,
          order_reference: Optional[str] = None,
          metadata_pointer: str = ""
     ) -> Receipt:
          """
          Issue a receipt to ``buyer`` bound to ``payment_reference``.

          Raises:
               Unauthorized, SystemPaused, ValidationFailed, DuplicateReference
          """
          with self._mutation() as db:
               access_gate.require_admin(db, caller)
               access_gate.require_not_paused(db)

               buyer = _require_identity("buyer", buyer)
               issuer = _require_identity("issuer", issuer)
               amount = _require_amount(amount)
               reference = _require_reference(payment_reference)
               _check_optional_text("order_reference", order_reference, MAX_REFERENCE_LENGTH)
               metadata_pointer = metadata_pointer or ""
               _check_optional_text("metadata_pointer", metadata_pointer, MAX_POINTER_LENGTH)

               try:
                    reservation = dedup_index.reserve(db, reference)
               except DuplicateReference:
                    logger.warning("Rejected duplicate payment reference %r", reference)
                    raise

               receipt = record_store.create(
                    db,
                    buyer=buyer,
                    issuer=issuer,
                    amount=amount,
                    payment_reference=reference,
                    order_reference=order_reference,
                    metadata_pointer=metadata_pointer,
               )
               reservation.receipt_id = receipt.id

               events.record(
                    db,
                    events.EventType.REFERENCE_RESERVED,
                    {"reference": reference, "id": receipt.id},
                    receipt_id=receipt.id,
               )
               ownership_ledger.change_holder(db, receipt.id, buyer, ChangeKind.ISSUE)
               events.record(
                    db,
                    events.EventType.RECORD_ISSUED,
                    {
                         "id": receipt.id,
                         "buyer": buyer,
                         "issuer": issuer,
                         "amount": amount,
                         "reference": reference,
                         "orderReference": order_reference,
                         "metadataPointer": metadata_pointer,
                    },
                    receipt_id=receipt.id,
               )

          logger.info("Issued receipt %s to %s for reference %r", receipt.id, buyer, reference)
          return receipt

     def amend(self, caller: Optional[str], receipt_id: int, metadata_pointer: str) -> Receipt:
          """Replace the metadata pointer; proof fields are untouched."""
          with self._mutation() as db:
               access_gate.require_admin(db, caller)
               metadata_pointer = metadata_pointer or ""
               _check_optional_text("metadata_pointer", metadata_pointer, MAX_POINTER_LENGTH)

               receipt = record_store.update_metadata(db, receipt_id, metadata_pointer)
               events.record(
                    db,
                    events.EventType.METADATA_UPDATED,
                    {"id": receipt_id, "pointer": metadata_pointer},
                    receipt_id=receipt_id,
               )

          logger.info("Updated metadata pointer of receipt %s", receipt_id)
          return receipt

     def revoke(self, caller: Optional[str], receipt_id: int) -> None:
          """
          Clear the holder and erase the receipt.

          The payment reference stays reserved.
          """
          with self._mutation() as db:
               access_gate.require_admin(db, caller)
               record_store.get(db, receipt_id)
               ownership_ledger.change_holder(db, receipt_id, None, ChangeKind.REVOKE)
               record_store.erase(db, receipt_id)

          logger.info("Revoked receipt %s", receipt_id)

     def transfer(self, caller: Optional[str], receipt_id: int, to: Optional[str]) -> None:
          """
          General holder change request. Receipts are soulbound, so for a live
          receipt this always ends in TransferForbidden.
          """
          with self._mutation() as db:
               record_store.get(db, receipt_id)
               ownership_ledger.change_holder(
                    db, receipt_id, access_gate.normalize_identity(to) or None, ChangeKind.TRANSFER
               )

     # ------------------------------------------------------------------
     # Public queries
     # ------------------------------------------------------------------

     def get(self, receipt_id: int) -> Receipt:
          with self._read() as db:
               return record_store.get(db, receipt_id)

     def verify(self, receipt_id: int, buyer: str) -> bool:
          with self._read() as db:
               return record_store.verify(db, receipt_id, access_gate.normalize_identity(buyer))

     def is_used(self, reference: str) -> bool:
          with self._read() as db:
               return dedup_index.is_used(db, reference)

     def reference_status(self, reference: str) -> tuple[bool, Optional[int]]:
          """Used flag plus the id that consumed the reference."""
          with self._read() as db:
               entry = dedup_index.lookup(db, reference)
               if entry is None:
                    return False, None
               return True, entry.receipt_id

     def peek_next(self) -> int:
          with self._read() as db:
               return identity_allocator.peek_next(db)

     def holder_of(self, receipt_id: int) -> tuple[Optional[str], HolderState]:
          with self._read() as db:
               return ownership_ledger.holder_of(db, receipt_id)

     def balance_of(self, holder: str) -> int:
          with self._read() as db:
               return ownership_ledger.balance_of(db, access_gate.normalize_identity(holder))

     def receipts_of(self, buyer: str, offset: int = 0, limit: int = 50) -> tuple[list[Receipt], int]:
          with self._read() as db:
               return record_store.list_for_buyer(db, access_gate.normalize_identity(buyer), offset, limit)

     def status(self) -> dict:
          with self._read() as db:
               return {
                    "admin": access_gate.current_admin(db),
                    "paused": access_gate.is_paused(db),
                    "next_id": identity_allocator.peek_next(db),
               }

     def list_events(self, after: int = 0, limit: int = 100) -> list[RegistryEvent]:
          with self._read() as db:
               return events.list_events(db, after, limit)

     def verify_event_chain(self) -> tuple[bool, str, int]:
          with self._read() as db:
               return events.verify_chain(db)
