"""
Access gate and pause switch.

The administrator identity and the pause flag are only read or written
through this module.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from models import RegistryState
from models.registry_state import STATE_ROW_ID
from services.errors import RegistryNotInitialized, SystemPaused, Unauthorized, ValidationFailed

logger = logging.getLogger(__name__)


def normalize_identity(identity: Optional[str]) -> str:
     """Identities are opaque strings compared exactly, minus surrounding whitespace."""
     return (identity or "").strip()


def load_state(db: Session) -> RegistryState:
     state = db.get(RegistryState, STATE_ROW_ID)
     if state is None:
          raise RegistryNotInitialized()
     return state


def initialize(db: Session, admin: str) -> RegistryState:
     """
     Create the registry state row on first start.

     An existing row is returned untouched so a restart never resets the
     stored administrator, pause flag or id counter.
     """
     state = db.get(RegistryState, STATE_ROW_ID)
     if state is not None:
          return state

     admin = normalize_identity(admin)
     if not admin:
          raise ValidationFailed("admin", "Administrator identity must not be empty")

     state = RegistryState(id=STATE_ROW_ID, admin=admin, paused=False, next_id=1)
     db.add(state)
     db.flush()
     logger.info("Registry initialized with administrator %s", admin)
     return state


def require_admin(db: Session, caller: Optional[str]) -> None:
     state = load_state(db)
     if not caller or normalize_identity(caller) != state.admin:
          logger.warning("Rejected mutating call from non-admin caller %r", caller)
          raise Unauthorized(caller)


def require_not_paused(db: Session) -> None:
     if load_state(db).paused:
          logger.warning("Rejected issuance while paused")
          raise SystemPaused()


def is_paused(db: Session) -> bool:
     return load_state(db).paused


def current_admin(db: Session) -> str:
     return load_state(db).admin


def set_paused(db: Session, caller: Optional[str], active: bool) -> None:
     """Admin-only; re-asserting the current value is accepted."""
     require_admin(db, caller)
     load_state(db).paused = active
     logger.info("Pause switch set to %s", active)


def transfer_admin(db: Session, caller: Optional[str], new_admin: str) -> str:
     """Replace the single administrator. Returns the previous identity."""
     require_admin(db, caller)
     new_admin = normalize_identity(new_admin)
     if not new_admin:
          raise ValidationFailed("new_admin", "Administrator identity must not be empty")

     state = load_state(db)
     previous = state.admin
     state.admin = new_admin
     logger.info("Administrator changed from %s to %s", previous, new_admin)
     return previous
