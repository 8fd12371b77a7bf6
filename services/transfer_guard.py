"""
Transfer guard - the soulbound rule for holder changes.

Legal transitions:
     NEVER_ISSUED --issue--> HELD
     HELD --revoke--> REVOKED (holder cleared)
Everything else, including moving a held receipt to another holder,
raises TransferForbidden. The ownership ledger must call check_transition()
before applying any holder change.
"""
import enum
import logging
from typing import Optional

from models import HolderState
from services.errors import TransferForbidden

logger = logging.getLogger(__name__)


class ChangeKind(str, enum.Enum):
     """Why a holder change is being attempted."""
     ISSUE = "ISSUE"
     REVOKE = "REVOKE"
     TRANSFER = "TRANSFER"


def check_transition(
     receipt_id: int,
     state: HolderState,
     current: Optional[str],
     requested: Optional[str],
     kind: ChangeKind
) -> HolderState:
     """
     Validate one holder change and return the resulting state.

     Raises:
          TransferForbidden: If the change is not an issuance entry or a revocation.
     """
     if kind == ChangeKind.ISSUE and state == HolderState.NEVER_ISSUED and requested:
          return HolderState.HELD

     if kind == ChangeKind.REVOKE and state == HolderState.HELD and requested is None:
          return HolderState.REVOKED

     logger.warning(
          "Rejected %s of receipt %s from %r to %r (state %s)",
          kind.value, receipt_id, current, requested, state.value
     )
     raise TransferForbidden(receipt_id, current, requested)
