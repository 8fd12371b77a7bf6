"""
ReceiptHolder model - the ownership ledger's holder relation.
"""
import enum

from sqlalchemy import Column, DateTime, Enum, Integer, String, func

from .base import Base


class HolderState(str, enum.Enum):
     """Lifecycle of the holder relation for one receipt id."""
     NEVER_ISSUED = "NEVER_ISSUED"
     HELD = "HELD"
     REVOKED = "REVOKED"


class ReceiptHolder(Base):
     __tablename__ = "receipt_holders"

     receipt_id = Column(Integer, primary_key=True, autoincrement=False)
     holder = Column(String(128), nullable=True, index=True)  # NULL once revoked
     state = Column(
          Enum(HolderState, name="holder_state", create_constraint=True),
          default=HolderState.HELD,
          nullable=False,
          index=True
     )
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

     def __repr__(self):
          return f"<ReceiptHolder(receipt_id={self.receipt_id}, holder='{self.holder}', state='{self.state.value}')>"
