"""
Receipt model - one issued proof-of-payment record.

Proof fields are write-once: they may only be assigned while the object is
transient (constructed but not yet added to a session). Only
metadata_pointer changes afterwards, through set_metadata_pointer().
"""
from sqlalchemy import BigInteger, Column, DateTime, Integer, String, inspect
from sqlalchemy.orm import validates

from .base import Base


AMOUNT_DECIMALS = 6
# Largest value a signed 64-bit BIGINT column holds
MAX_AMOUNT = 2 ** 63 - 1

PROOF_FIELDS = (
     "id",
     "buyer",
     "issuer",
     "amount",
     "payment_reference",
     "order_reference",
     "issued_at",
)


class ImmutableFieldError(AttributeError):
     """Raised on an attempt to overwrite a proof field of a stored receipt."""


class Receipt(Base):
     """
     Soulbound receipt. Its id is allocated by the registry counter, never
     by the database, so erased ids are never handed out again.
     """
     __tablename__ = "receipts"

     id = Column(Integer, primary_key=True, autoincrement=False)

     # Proof of payment
     buyer = Column(String(128), nullable=False, index=True)
     issuer = Column(String(128), nullable=False, index=True)
     amount = Column(BigInteger, nullable=False)  # minor units, 6 decimals
     payment_reference = Column(String(255), nullable=False)
     order_reference = Column(String(255), nullable=True)
     issued_at = Column(DateTime, nullable=False)

     # Off-registry descriptive document
     metadata_pointer = Column(String(1024), nullable=False, default="")

     def __repr__(self):
          return f"<Receipt(id={self.id}, buyer='{self.buyer}', amount={self.amount})>"

     @validates(*PROOF_FIELDS)
     def _write_once(self, key, value):
          if not inspect(self).transient:
               raise ImmutableFieldError(f"Receipt field '{key}' is immutable")
          return value

     def set_metadata_pointer(self, pointer: str) -> None:
          """The only mutation allowed on a stored receipt."""
          self.metadata_pointer = pointer

     @property
     def amount_display(self) -> str:
          """Amount as a fixed-point decimal string, e.g. 1000000 -> '1.000000'."""
          scale = 10 ** AMOUNT_DECIMALS
          return f"{self.amount // scale}.{self.amount % scale:0{AMOUNT_DECIMALS}d}"
