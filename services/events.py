"""
Registry notifications.

Events are appended to the registry_events outbox inside the transaction of
the change they describe. After the transaction commits, the registry hands
them to an EventBus, which fans them out to in-process observers.

The outbox is a hash chain:
1. Hash = SHA-256 of previous_hash|event_type|receipt_id|payload|created_at
2. previous_hash is the hash of the preceding event ("0" for the first)
3. Stored events are never updated or deleted

Verification recomputes every hash and checks the links.
"""
import enum
import hashlib
import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional, Tuple

from sqlalchemy import desc
from sqlalchemy.orm import Session

from models import RegistryEvent

logger = logging.getLogger(__name__)

Observer = Callable[[dict], None]

# Genesis link: no previous event
GENESIS_HASH = "0"

# Events recorded on a session but not yet published
_PENDING_KEY = "registry_pending_events"


class EventType(str, enum.Enum):
     RECORD_ISSUED = "RecordIssued"
     METADATA_UPDATED = "MetadataUpdated"
     REFERENCE_RESERVED = "ReferenceReserved"
     PAUSE_STATE_CHANGED = "PauseStateChanged"
     HOLDER_CHANGED = "HolderChanged"
     ADMIN_TRANSFERRED = "AdminTransferred"


def _normalize_payload(payload: dict[str, Any]) -> str:
     """Canonical JSON for hashing."""
     return json.dumps(payload, sort_keys=True, separators=(",", ":"))


def _normalize_timestamp(ts: datetime) -> str:
     """ISO format at whole-second precision, which every backend round-trips."""
     return ts.replace(microsecond=0).isoformat()


def compute_event_hash(
     previous_hash: str,
     event_type: str,
     receipt_id: Optional[int],
     payload: dict[str, Any],
     created_at: datetime
) -> str:
     """
     Compute the SHA-256 chain hash of one event.

     Returns 64-char hex string.
     """
     body = "|".join([
          previous_hash,
          event_type,
          "" if receipt_id is None else str(receipt_id),
          _normalize_payload(payload),
          _normalize_timestamp(created_at),
     ])
     return hashlib.sha256(body.encode("utf-8")).hexdigest()


def get_previous_hash(db: Session) -> str:
     """Hash of the most recent event, or GENESIS_HASH if the log is empty."""
     last = db.query(RegistryEvent).order_by(desc(RegistryEvent.id)).limit(1).first()
     if last is None:
          return GENESIS_HASH
     return last.event_hash


def record(
     db: Session,
     event_type: EventType,
     payload: dict[str, Any],
     receipt_id: Optional[int] = None
) -> RegistryEvent:
     """Append an event to the outbox as part of the current transaction."""
     created_at = datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)
     previous_hash = get_previous_hash(db)

     event = RegistryEvent(
          event_type=event_type.value,
          receipt_id=receipt_id,
          payload=payload,
          previous_hash=previous_hash,
          event_hash=compute_event_hash(previous_hash, event_type.value, receipt_id, payload, created_at),
          created_at=created_at,
     )
     db.add(event)
     db.flush()
     db.info.setdefault(_PENDING_KEY, []).append(event)
     return event


def drain_pending(db: Session) -> list[dict]:
     """Serialized events recorded on this session, in order; clears the buffer."""
     pending = db.info.pop(_PENDING_KEY, [])
     return [event.to_dict() for event in pending]


def discard_pending(db: Session) -> None:
     db.info.pop(_PENDING_KEY, None)


def list_events(db: Session, after: int = 0, limit: int = 100) -> list[RegistryEvent]:
     """Committed events with a sequence number greater than ``after``."""
     return (
          db.query(RegistryEvent)
          .filter(RegistryEvent.id > after)
          .order_by(RegistryEvent.id)
          .limit(limit)
          .all()
     )


def verify_chain(db: Session) -> Tuple[bool, str, int]:
     """
     Verify the entire event chain from first to last entry.

     Returns:
          (all_valid: bool, message: str, entries_checked: int)
     """
     entries = db.query(RegistryEvent).order_by(RegistryEvent.id).all()
     if not entries:
          return True, "Chain is empty (no events)", 0

     prev_hash = GENESIS_HASH
     checked = 0

     for entry in entries:
          if entry.previous_hash != prev_hash:
               return False, f"Chain broken at event {entry.id}: previous_hash mismatch", checked
          computed = compute_event_hash(
               entry.previous_hash,
               entry.event_type,
               entry.receipt_id,
               entry.payload,
               entry.created_at
          )
          if computed != entry.event_hash:
               return False, f"Hash mismatch at event {entry.id}", checked
          prev_hash = entry.event_hash
          checked += 1

     return True, "Full chain verification passed", checked


class EventBus:
     """
     Fan-out of committed events to observers, in commit order.

     Observers run while the registry holds its mutation lock, so they must
     not call mutating registry operations.
     """

     def __init__(self):
          self._observers: list[Observer] = []

     def subscribe(self, observer: Observer) -> None:
          self._observers.append(observer)

     def unsubscribe(self, observer: Observer) -> None:
          self._observers.remove(observer)

     def publish(self, events: Iterable[dict]) -> None:
          for event in events:
               for observer in list(self._observers):
                    try:
                         observer(event)
                    except Exception:
                         # The change is already committed; the outbox keeps the event for replay
                         logger.exception(
                              "Observer %r failed for event %s #%s",
                              observer, event.get("event_type"), event.get("sequence")
                         )
